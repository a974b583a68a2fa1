"""Deterministic text helpers for confidence states and recommendations.

Everything here is a pure function of its inputs.  No clock reads: the
caller passes ``now`` so output is reproducible in tests.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from zone_trust.domain.confidence import ZoneConfidenceState
from zone_trust.domain.enums import ConfidenceLevel, ZoneState
from zone_trust.domain.recommendation import ZoneRecommendation
from zone_trust.foundation.clock import hours_between


@dataclass(frozen=True)
class ConfidenceDisplay:
    label: str
    color: str
    icon: str
    description: str


CONFIDENCE_DISPLAYS: dict[ConfidenceLevel, ConfidenceDisplay] = {
    ConfidenceLevel.HIGH: ConfidenceDisplay(
        "HIGH CONFIDENCE", "#22c55e", "◉", "Recently verified, reliable intel",
    ),
    ConfidenceLevel.MEDIUM: ConfidenceDisplay(
        "MEDIUM CONFIDENCE", "#eab308", "◎", "Some recent intel, generally reliable",
    ),
    ConfidenceLevel.LOW: ConfidenceDisplay(
        "LOW CONFIDENCE", "#f97316", "○", "Limited recent intel, verify on ground",
    ),
    ConfidenceLevel.DEGRADED: ConfidenceDisplay(
        "DEGRADED", "#ef4444", "⊘", "Stale data or active concerns",
    ),
    ConfidenceLevel.UNKNOWN: ConfidenceDisplay(
        "UNKNOWN", "#6b7280", "?", "No intel available",
    ),
}


def format_confidence_display(level: ConfidenceLevel) -> ConfidenceDisplay:
    return CONFIDENCE_DISPLAYS[level]


def format_last_verified(last_verified_at: datetime | None, now: datetime) -> str:
    """Humanise a verification timestamp, e.g. ``"VERIFIED 3H AGO"``."""
    if last_verified_at is None:
        return "NEVER VERIFIED"

    hours_ago = math.floor(hours_between(last_verified_at, now))
    if hours_ago < 1:
        return "VERIFIED < 1H AGO"
    if hours_ago < 24:
        return f"VERIFIED {hours_ago}H AGO"
    days_ago = hours_ago // 24
    if days_ago == 1:
        return "VERIFIED 1 DAY AGO"
    if days_ago < 7:
        return f"VERIFIED {days_ago} DAYS AGO"
    return f"VERIFIED {days_ago // 7} WEEKS AGO"


def format_time_remaining(expires_at: datetime, now: datetime) -> str:
    hours_left = math.ceil(hours_between(now, expires_at))
    if hours_left <= 0:
        return "EXPIRED"
    if hours_left < 24:
        return f"EXPIRES IN {hours_left}H"
    days_left = math.ceil(hours_left / 24)
    return f"EXPIRES IN {days_left} DAY{'S' if days_left != 1 else ''}"


def zone_status_message(state: ZoneConfidenceState, now: datetime) -> str | None:
    """Banner text for zones that need attention, or None when healthy."""
    if state.hazard_active:
        expiry = (
            format_time_remaining(state.hazard_expires_at, now)
            if state.hazard_expires_at is not None
            else "NO EXPIRY SET"
        )
        return f"⚠️ ZONE OFFLINE: Safety concern reported. {expiry}"
    if state.anomaly_detected:
        reason = state.anomaly_reason.value if state.anomaly_reason else "Unusual activity"
        return f"⚡ ANOMALY DETECTED: {reason}. Intel may be unreliable."
    if state.state == ZoneState.DEGRADED:
        return "📉 DEGRADED: Limited recent intel. Verify conditions on ground."
    return None


def _fmt_score(value: float) -> str:
    return f"{value:g}"


def format_recommendation_explanation(rec: ZoneRecommendation) -> str:
    """Plain-text, multi-line explanation of one recommendation."""
    lines = [
        f"RECOMMENDED: {rec.reasons[0] if rec.reasons else 'Available zone'}",
        f"INTEL: {rec.confidence.level.value} CONFIDENCE",
        (
            f"MATCH: {rec.total_score}% (texture {_fmt_score(rec.texture_score)}, "
            f"time {_fmt_score(rec.time_score)}, weather {_fmt_score(rec.weather_score)})"
        ),
    ]
    if rec.warnings:
        lines.append(f"⚠️ {' | '.join(rec.warnings)}")
    return "\n".join(lines)

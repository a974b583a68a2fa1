"""Pure confidence rules — decay, boost, conflicts, hazards, level/state.

Design principles:
    1. Every function here is pure: inputs in, numbers out.
    2. No clock reads.  "now" is always a parameter.
    3. No logging, no I/O, no shared state.  Safe to call from any thread.
    4. All thresholds come from an explicit, frozen ConfidenceConfig.

The ZoneConfidenceEngine combines these outputs; nothing here knows
about ZoneConfidenceState as a whole.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from zone_trust.domain.enums import ConfidenceLevel, IntelType, ZoneState
from zone_trust.domain.intel import IntelSubmission
from zone_trust.foundation.clock import ensure_aware, hours_between
from zone_trust.foundation.numeric import clamp


@dataclass(frozen=True)
class ConfidenceConfig:
    """Every constant the confidence engine depends on."""

    # Decay
    decay_rate_per_day: float = 0.02  # fraction of the 0–100 scale
    decay_floor: float = 20.0
    score_ceiling: float = 100.0
    decay_grace_hours: float = 24.0

    # Boost
    intel_boost_base: float = 5.0
    intel_boost_max: float = 15.0
    intel_boost_cap_24h: float = 30.0
    min_trust_weight: float = 0.3
    max_trust_weight: float = 1.5

    # Conflicts
    conflict_threshold: int = 1
    conflict_window_hours: float = 6.0
    conflict_penalty: float = 15.0

    # Hazards
    hazard_threshold_reports: int = 2
    hazard_window_hours: float = 24.0
    hazard_duration_days: float = 7.0
    hazard_penalty: float = 30.0

    # Anomalies
    anomaly_penalty: float = 10.0
    anomaly_resolve_hours: float = 48.0

    # Level thresholds
    high_threshold: float = 80.0
    medium_threshold: float = 60.0
    low_threshold: float = 40.0
    degraded_threshold: float = 20.0


DEFAULT_CONFIG = ConfidenceConfig()

# Base boost multiplier per report type.  Hazards never raise trust.
BOOST_MULTIPLIERS: dict[IntelType, float] = {
    IntelType.VERIFICATION: 1.5,
    IntelType.PRICE_SUBMISSION: 1.0,
    IntelType.QUIET_CONFIRMED: 0.8,
    IntelType.CROWD_SURGE: 0.7,
    IntelType.HASSLE_REPORT: 0.6,
    IntelType.CONSTRUCTION: 0.5,
    IntelType.HAZARD_REPORT: 0.0,
}

# Report types that cannot both be true of one zone at the same time.
CONFLICT_PAIRS: tuple[tuple[IntelType, IntelType], ...] = (
    (IntelType.QUIET_CONFIRMED, IntelType.CROWD_SURGE),
    (IntelType.QUIET_CONFIRMED, IntelType.HASSLE_REPORT),
)


# ── Score → level / state ───────────────────────────────────────────────────


def clamp_score(value: float, config: ConfidenceConfig = DEFAULT_CONFIG) -> float:
    """Clamp into [floor, ceiling]; NaN collapses to the floor."""
    return clamp(value, config.decay_floor, config.score_ceiling)


def score_to_level(score: float, config: ConfidenceConfig = DEFAULT_CONFIG) -> ConfidenceLevel:
    """Map a numeric score onto the five-level confidence scale."""
    if math.isnan(score):
        return ConfidenceLevel.UNKNOWN
    if score >= config.high_threshold:
        return ConfidenceLevel.HIGH
    if score >= config.medium_threshold:
        return ConfidenceLevel.MEDIUM
    if score >= config.low_threshold:
        return ConfidenceLevel.LOW
    if score >= config.degraded_threshold:
        return ConfidenceLevel.DEGRADED
    return ConfidenceLevel.UNKNOWN


def determine_zone_state(
    score: float,
    hazard_active: bool,
    anomaly_detected: bool,
    config: ConfidenceConfig = DEFAULT_CONFIG,
) -> ZoneState:
    """Derive the operational state.  Hazards override everything."""
    if hazard_active:
        return ZoneState.OFFLINE
    # Only reachable transiently: the score itself floors at 20.
    if score < config.degraded_threshold:
        return ZoneState.DEGRADED
    if anomaly_detected:
        return ZoneState.DEGRADED
    return ZoneState.ACTIVE


# ── Decay ───────────────────────────────────────────────────────────────────


def calculate_time_decay(
    current_score: float,
    last_intel_at: datetime | None,
    now: datetime,
    config: ConfidenceConfig = DEFAULT_CONFIG,
) -> float:
    """Points to subtract for intel age.

    Zero inside the grace window and for future-dated intel.  Linear at
    ``decay_rate_per_day`` of the 0–100 scale per day past grace.  A zone
    that never received intel erodes by one flat day's worth.  Never
    pushes the score below the floor.
    """
    headroom = max(0.0, clamp_score(current_score, config) - config.decay_floor)
    daily_points = config.decay_rate_per_day * 100.0

    if last_intel_at is None:
        return min(headroom, daily_points)

    hours_since = hours_between(last_intel_at, now)
    if not math.isfinite(hours_since) or hours_since < config.decay_grace_hours:
        return 0.0

    days_of_decay = (hours_since - config.decay_grace_hours) / 24.0
    return min(headroom, days_of_decay * daily_points)


# ── Boost ───────────────────────────────────────────────────────────────────


def calculate_intel_boost(
    intel_type: IntelType,
    trust_weight: float,
    recent_intel_count: int,
    config: ConfidenceConfig = DEFAULT_CONFIG,
) -> float:
    """Points a single report adds, before the 24h cap.

    Scales by the clamped trust weight and by a diminishing-returns factor
    so a burst of reports in one window cannot dominate the score.
    """
    multiplier = BOOST_MULTIPLIERS.get(intel_type, 1.0)
    if multiplier <= 0.0:
        return 0.0

    weight = trust_weight if math.isfinite(trust_weight) else config.min_trust_weight
    weight = clamp(weight, config.min_trust_weight, config.max_trust_weight)

    diminishing = max(0.2, 1.0 - max(recent_intel_count, 0) * 0.15)
    boost = config.intel_boost_base * multiplier * weight * diminishing
    return min(config.intel_boost_max, boost)


# ── Windows ─────────────────────────────────────────────────────────────────


def within_window(
    intel: Iterable[IntelSubmission],
    now: datetime,
    window_hours: float,
) -> list[IntelSubmission]:
    """Reports created no earlier than ``now - window_hours``.

    Future-dated reports count as recent; the store caps them at receipt
    time before they are logged.
    """
    since = ensure_aware(now) - timedelta(hours=window_hours)
    return [i for i in intel if i.created_at >= since]


# ── Conflicts ───────────────────────────────────────────────────────────────


def detect_conflicts(recent_intel: Sequence[IntelSubmission]) -> int:
    """Count contradictory type pairs simultaneously present in the window."""
    present = {i.type for i in recent_intel}
    return sum(1 for a, b in CONFLICT_PAIRS if a in present and b in present)


# ── Hazards ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class HazardAssessment:
    """Outcome of one hazard aggregation pass."""

    active: bool
    expires_at: datetime | None
    report_count: int = 0
    triggered: bool = False   # threshold met on this pass
    expired: bool = False     # a previously active hazard was cleared


def assess_hazard(
    recent_intel: Sequence[IntelSubmission],
    hazard_active: bool,
    hazard_expires_at: datetime | None,
    now: datetime,
    config: ConfidenceConfig = DEFAULT_CONFIG,
) -> HazardAssessment:
    """Kill-switch evaluation over the hazard window.

    Independence of reporters is enforced upstream; this only counts.
    An expired hazard clears in exactly one step.
    """
    window = within_window(recent_intel, now, config.hazard_window_hours)
    count = sum(1 for i in window if i.is_hazard)

    if count >= config.hazard_threshold_reports:
        return HazardAssessment(
            active=True,
            expires_at=ensure_aware(now) + timedelta(days=config.hazard_duration_days),
            report_count=count,
            triggered=True,
        )

    if hazard_active and hazard_expires_at is not None and hazard_expires_at <= ensure_aware(now):
        return HazardAssessment(active=False, expires_at=None, report_count=count, expired=True)

    return HazardAssessment(active=hazard_active, expires_at=hazard_expires_at, report_count=count)

"""ZoneConfidenceEngine — the per-zone confidence state machine.

Design principles:
    1. Functional core: accepts the current ZoneConfidenceState, returns a
       brand-new one.  Never mutates its inputs.
    2. No I/O.  Recent intel and the price-anomaly flag are supplied by
       the caller; persistence is the caller's job.
    3. No internal locking.  PRECONDITION: callers must serialise updates
       per zone id (read-modify-write).  Concurrent writers on one zone
       would silently lose an update or double-apply decay.
    4. All thresholds come from an explicit ConfidenceConfig.

Update formula (report path):
    final = clamp(
        base
      - decay            (against the pre-update score)
      + boost            (0 for HAZARD_REPORT; 24h cap enforced here)
      - conflict_penalty (once per update, not once per pair)
      - hazard_penalty   (when the kill switch engages)
      - anomaly_penalty  (when the caller flags a price anomaly)
    , floor, ceiling)

    Every adjustment is computed against the same base and summed once.
    There is no re-clamping between steps.

Tick path (daily sweep):
    decay + hazard-expiry clearing + anomaly auto-resolution only, and the
    rolling 24h counters reset to zero.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta

from zone_trust.core.rules import (
    DEFAULT_CONFIG,
    ConfidenceConfig,
    assess_hazard,
    calculate_intel_boost,
    calculate_time_decay,
    clamp_score,
    detect_conflicts,
    determine_zone_state,
    score_to_level,
    within_window,
)
from zone_trust.domain.confidence import (
    AuditEntry,
    ConfidenceFactors,
    ConfidenceUpdate,
    ZoneConfidenceState,
)
from zone_trust.domain.enums import AnomalyReason, AuditAction, IntelType
from zone_trust.domain.intel import IntelSubmission
from zone_trust.foundation.clock import ensure_aware, utc_now
from zone_trust.foundation.numeric import round_to

logger = logging.getLogger(__name__)


class ZoneConfidenceEngine:
    """Deterministic state transitions for zone confidence.

    The engine is stateless: the same (state, event, now) always yields
    the same result.
    """

    def __init__(self, config: ConfidenceConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    @property
    def config(self) -> ConfidenceConfig:
        return self._config

    # ── Public API ───────────────────────────────────────────────────────

    def initialise(self, zone_id: str, now: datetime | None = None) -> ConfidenceUpdate:
        """Neutral starting state for a zone seen for the first time."""
        now = ensure_aware(now or utc_now())
        state = ZoneConfidenceState.initial(zone_id, now)
        factors = ConfidenceFactors(base_score=state.score, final_score=state.score)
        audit = AuditEntry(
            zone_id=zone_id,
            timestamp=now,
            action=AuditAction.CREATED,
            score_before=state.score,
            score_after=state.score,
            state_before=state.state,
            state_after=state.state,
            factors=factors,
            reason="Initial neutral state",
        )
        return ConfidenceUpdate(state=state, factors=factors, audit=audit)

    def apply_intel(
        self,
        current: ZoneConfidenceState,
        intel: IntelSubmission,
        recent_intel: Sequence[IntelSubmission] = (),
        now: datetime | None = None,
        price_anomaly: bool = False,
    ) -> ConfidenceUpdate:
        """Fold one new report into the zone's state.

        Args:
            current: The zone's state before this report.
            intel: The triggering report.
            recent_intel: Previously received reports for the zone over at
                least the longest detector window.  The triggering report
                is added if absent; repeated ids count once.
            now: Evaluation instant.  Defaults to the wall clock.
            price_anomaly: Externally computed price-deviation flag.
        """
        if intel.zone_id != current.zone_id:
            raise ValueError(
                f"intel {intel.id} is for zone {intel.zone_id}, not {current.zone_id}"
            )

        cfg = self._config
        now = ensure_aware(now or utc_now())
        base = clamp_score(current.score, cfg)

        # 1. Decay against the pre-update score
        decay = calculate_time_decay(base, current.last_intel_at, now, cfg)

        # 2. Boost, subject to the rolling 24h cap
        boost = 0.0
        if not intel.is_hazard:
            raw_boost = calculate_intel_boost(
                intel.type, intel.trust_weight, current.intel_count_24h, cfg,
            )
            remaining = max(0.0, cfg.intel_boost_cap_24h - current.boost_applied_24h)
            boost = min(raw_boost, remaining)

        window = self._merge_window(recent_intel, intel)

        # 3. Conflicts over the short window, new report included
        conflicts = detect_conflicts(within_window(window, now, cfg.conflict_window_hours))
        conflict_penalty = cfg.conflict_penalty if conflicts >= cfg.conflict_threshold > 0 else 0.0

        # 4. Hazard kill switch
        was_hazard_active = current.hazard_active and (
            current.hazard_expires_at is None or current.hazard_expires_at > now
        )
        hazard = assess_hazard(
            window, current.hazard_active, current.hazard_expires_at, now, cfg,
        )
        hazard_penalty = cfg.hazard_penalty if hazard.triggered and not was_hazard_active else 0.0

        # 5. Price anomaly (flag raised externally)
        anomaly_detected = current.anomaly_detected
        anomaly_reason = current.anomaly_reason
        anomaly_detected_at = current.anomaly_detected_at
        anomaly_penalty = 0.0
        if price_anomaly:
            anomaly_detected = True
            anomaly_reason = AnomalyReason.PRICE_DEVIATION
            anomaly_detected_at = now
            anomaly_penalty = cfg.anomaly_penalty

        final = clamp_score(
            base - decay + boost - conflict_penalty - hazard_penalty - anomaly_penalty,
            cfg,
        )
        score = round_to(final, 1)

        is_verification = intel.type == IntelType.VERIFICATION
        reported_at = min(intel.created_at, now)
        last_intel_at = (
            max(current.last_intel_at, reported_at) if current.last_intel_at else reported_at
        )

        new_state = ZoneConfidenceState(
            zone_id=current.zone_id,
            score=score,
            level=score_to_level(score, cfg),
            state=determine_zone_state(score, hazard.active, anomaly_detected, cfg),
            last_verified_at=now if is_verification else current.last_verified_at,
            last_intel_at=last_intel_at,
            verification_count=current.verification_count + (1 if is_verification else 0),
            intel_count_24h=current.intel_count_24h + 1,
            boost_applied_24h=current.boost_applied_24h + boost,
            conflict_count=conflicts,
            hazard_active=hazard.active,
            hazard_expires_at=hazard.expires_at,
            anomaly_detected=anomaly_detected,
            anomaly_reason=anomaly_reason,
            anomaly_detected_at=anomaly_detected_at,
            updated_at=now,
        )
        factors = ConfidenceFactors(
            base_score=base,
            decay_applied=decay,
            boost_applied=boost,
            conflict_penalty=conflict_penalty,
            hazard_penalty=hazard_penalty,
            anomaly_penalty=anomaly_penalty,
            final_score=score,
        )

        if hazard.triggered and not was_hazard_active:
            logger.warning(
                "Hazard kill switch engaged for zone %s (%d reports, expires %s)",
                current.zone_id,
                hazard.report_count,
                hazard.expires_at.isoformat() if hazard.expires_at else None,
            )
        elif hazard.expired:
            logger.info("Hazard expired for zone %s", current.zone_id)
        if price_anomaly:
            logger.warning("Price anomaly flagged for zone %s by intel %s", current.zone_id, intel.id)

        audit = AuditEntry(
            zone_id=current.zone_id,
            timestamp=now,
            action=AuditAction.INTEL,
            score_before=current.score,
            score_after=score,
            state_before=current.state,
            state_after=new_state.state,
            factors=factors,
            intel_id=intel.id,
            reason=f"{intel.type.value} report (trust {intel.trust_weight:.2f})",
            actor=intel.contributor_id,
        )
        return ConfidenceUpdate(
            state=new_state,
            factors=factors,
            audit=audit,
            hazard_expired=hazard.expired,
        )

    def apply_tick(
        self,
        current: ZoneConfidenceState,
        now: datetime | None = None,
    ) -> ConfidenceUpdate:
        """Scheduled maintenance step for one zone.

        Intended to run at most once per day per zone.  Repeated same-day
        ticks recompute decay from the last intel timestamp again, so they
        keep eroding until the floor caps them.
        """
        cfg = self._config
        now = ensure_aware(now or utc_now())
        base = clamp_score(current.score, cfg)

        decay = calculate_time_decay(base, current.last_intel_at, now, cfg)

        # Expiry clearing only: no new hazard reports arrive on a tick
        hazard = assess_hazard((), current.hazard_active, current.hazard_expires_at, now, cfg)

        anomaly_detected = current.anomaly_detected
        anomaly_reason = current.anomaly_reason
        anomaly_detected_at = current.anomaly_detected_at
        anomaly_resolved = False
        if (
            anomaly_detected
            and anomaly_detected_at is not None
            and now - anomaly_detected_at >= timedelta(hours=cfg.anomaly_resolve_hours)
        ):
            anomaly_detected = False
            anomaly_reason = None
            anomaly_detected_at = None
            anomaly_resolved = True

        score = round_to(clamp_score(base - decay, cfg), 1)

        new_state = current.model_copy(update={
            "score": score,
            "level": score_to_level(score, cfg),
            "state": determine_zone_state(score, hazard.active, anomaly_detected, cfg),
            "intel_count_24h": 0,
            "boost_applied_24h": 0.0,
            "hazard_active": hazard.active,
            "hazard_expires_at": hazard.expires_at,
            "anomaly_detected": anomaly_detected,
            "anomaly_reason": anomaly_reason,
            "anomaly_detected_at": anomaly_detected_at,
            "updated_at": now,
        })
        factors = ConfidenceFactors(base_score=base, decay_applied=decay, final_score=score)

        reasons = [f"Daily decay {decay:.1f}"]
        if hazard.expired:
            reasons.append("hazard expired")
            logger.info("Hazard expired for zone %s", current.zone_id)
        if anomaly_resolved:
            reasons.append("anomaly auto-resolved")
            logger.info("Anomaly auto-resolved for zone %s", current.zone_id)

        audit = AuditEntry(
            zone_id=current.zone_id,
            timestamp=now,
            action=AuditAction.TICK,
            score_before=current.score,
            score_after=score,
            state_before=current.state,
            state_after=new_state.state,
            factors=factors,
            reason=", ".join(reasons),
        )
        return ConfidenceUpdate(
            state=new_state,
            factors=factors,
            audit=audit,
            hazard_expired=hazard.expired,
            anomaly_resolved=anomaly_resolved,
        )

    # ── Helpers ──────────────────────────────────────────────────────────

    @staticmethod
    def _merge_window(
        recent_intel: Sequence[IntelSubmission],
        intel: IntelSubmission,
    ) -> list[IntelSubmission]:
        """Recent reports plus the triggering one, one entry per report id."""
        merged: dict[str, IntelSubmission] = {}
        for i in (*recent_intel, intel):
            merged.setdefault(i.id, i)
        return list(merged.values())

"""Tests for the ZoneConfidenceEngine state machine.

Covers the report path, the tick path, score bounds and the end-to-end
verification/hazard scenario.  All timestamps are fixed.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from zone_trust.core.confidence_engine import ZoneConfidenceEngine
from zone_trust.domain.confidence import ZoneConfidenceState
from zone_trust.domain.enums import (
    AnomalyReason,
    AuditAction,
    ConfidenceLevel,
    ZoneState,
)
from zone_trust.domain.intel import IntelSubmission

from tests.test_intel import _valid_intel

# ── Helpers ──────────────────────────────────────────────────────────────────

_BASE = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine() -> ZoneConfidenceEngine:
    return ZoneConfidenceEngine()


def _intel(intel_type: str, at: datetime = _BASE, **kw) -> IntelSubmission:
    return IntelSubmission.model_validate(
        _valid_intel(type=intel_type, created_at=at.isoformat(), **kw)
    )


def _state(**kw) -> ZoneConfidenceState:
    base = {
        "zone_id": "zone-1",
        "score": 70.0,
        "level": ConfidenceLevel.MEDIUM,
        "last_intel_at": _BASE - timedelta(hours=1),
        "updated_at": _BASE - timedelta(hours=1),
    }
    base.update(kw)
    return ZoneConfidenceState(**base)


# ── Report path ──────────────────────────────────────────────────────────────


class TestApplyIntel:
    def test_verification_raises_score(self, engine: ZoneConfidenceEngine) -> None:
        update = engine.apply_intel(_state(), _intel("VERIFICATION"), now=_BASE)
        assert update.state.score == 77.5
        assert update.state.level == ConfidenceLevel.MEDIUM
        assert update.factors.boost_applied == pytest.approx(7.5)
        assert update.factors.decay_applied == 0.0

    def test_verification_bookkeeping(self, engine: ZoneConfidenceEngine) -> None:
        update = engine.apply_intel(_state(), _intel("VERIFICATION"), now=_BASE)
        s = update.state
        assert s.last_verified_at == _BASE
        assert s.last_intel_at == _BASE
        assert s.verification_count == 1
        assert s.intel_count_24h == 1
        assert s.boost_applied_24h == pytest.approx(7.5)
        assert s.updated_at == _BASE

    def test_factors_explain_final_score(self, engine: ZoneConfidenceEngine) -> None:
        current = _state(last_intel_at=_BASE - timedelta(days=3))
        f = engine.apply_intel(current, _intel("QUIET_CONFIRMED"), now=_BASE).factors
        expected = (
            f.base_score - f.decay_applied + f.boost_applied
            - f.conflict_penalty - f.hazard_penalty - f.anomaly_penalty
        )
        assert f.final_score == pytest.approx(round(expected, 1))
        assert f.decay_applied == pytest.approx(4.0)

    def test_does_not_mutate_input(self, engine: ZoneConfidenceEngine) -> None:
        current = _state()
        engine.apply_intel(current, _intel("VERIFICATION"), now=_BASE)
        assert current.score == 70.0
        assert current.verification_count == 0

    def test_zone_mismatch_rejected(self, engine: ZoneConfidenceEngine) -> None:
        with pytest.raises(ValueError):
            engine.apply_intel(_state(), _intel("VERIFICATION", zone_id="zone-2"), now=_BASE)

    def test_hazard_report_gives_no_boost(self, engine: ZoneConfidenceEngine) -> None:
        update = engine.apply_intel(_state(), _intel("HAZARD_REPORT"), now=_BASE)
        assert update.factors.boost_applied == 0.0
        assert update.state.score == 70.0

    def test_single_hazard_does_not_go_offline(self, engine: ZoneConfidenceEngine) -> None:
        update = engine.apply_intel(_state(), _intel("HAZARD_REPORT"), now=_BASE)
        assert not update.state.hazard_active
        assert update.state.state == ZoneState.ACTIVE

    def test_two_hazards_force_offline(self, engine: ZoneConfidenceEngine) -> None:
        first = _intel("HAZARD_REPORT", _BASE - timedelta(hours=1), contributor_id="a")
        second = _intel("HAZARD_REPORT", _BASE, contributor_id="b")
        update = engine.apply_intel(_state(), second, recent_intel=[first], now=_BASE)
        assert update.state.hazard_active
        assert update.state.state == ZoneState.OFFLINE
        assert update.state.hazard_expires_at == _BASE + timedelta(days=7)
        assert update.factors.hazard_penalty == 30.0
        assert update.state.score == 40.0

    def test_active_hazard_penalty_not_reapplied(self, engine: ZoneConfidenceEngine) -> None:
        current = _state(
            score=40.0,
            level=ConfidenceLevel.LOW,
            state=ZoneState.OFFLINE,
            hazard_active=True,
            hazard_expires_at=_BASE + timedelta(days=6),
        )
        recent = [
            _intel("HAZARD_REPORT", _BASE - timedelta(hours=3), contributor_id="a"),
            _intel("HAZARD_REPORT", _BASE - timedelta(hours=2), contributor_id="b"),
        ]
        update = engine.apply_intel(
            current, _intel("HAZARD_REPORT", contributor_id="c"), recent_intel=recent, now=_BASE,
        )
        assert update.factors.hazard_penalty == 0.0
        assert update.state.score == 40.0
        assert update.state.hazard_expires_at == _BASE + timedelta(days=7)

    def test_conflicting_reports_penalised(self, engine: ZoneConfidenceEngine) -> None:
        recent = [_intel("QUIET_CONFIRMED", _BASE - timedelta(hours=1))]
        update = engine.apply_intel(
            _state(), _intel("CROWD_SURGE"), recent_intel=recent, now=_BASE,
        )
        assert update.state.conflict_count == 1
        assert update.state.has_conflicts
        assert update.factors.conflict_penalty == 15.0
        assert update.state.score == 58.5
        assert update.state.level == ConfidenceLevel.LOW

    def test_conflict_outside_window_ignored(self, engine: ZoneConfidenceEngine) -> None:
        recent = [_intel("QUIET_CONFIRMED", _BASE - timedelta(hours=7))]
        update = engine.apply_intel(
            _state(), _intel("CROWD_SURGE"), recent_intel=recent, now=_BASE,
        )
        assert update.state.conflict_count == 0
        assert update.state.score == 73.5

    def test_price_anomaly_degrades_zone(self, engine: ZoneConfidenceEngine) -> None:
        intel = _intel("PRICE_SUBMISSION", payload={"price": 400})
        update = engine.apply_intel(_state(), intel, now=_BASE, price_anomaly=True)
        assert update.state.anomaly_detected
        assert update.state.anomaly_reason == AnomalyReason.PRICE_DEVIATION
        assert update.state.anomaly_detected_at == _BASE
        assert update.state.state == ZoneState.DEGRADED
        assert update.factors.anomaly_penalty == 10.0
        assert update.state.score == 65.0

    def test_anomaly_flag_persists_across_reports(self, engine: ZoneConfidenceEngine) -> None:
        current = _state(
            anomaly_detected=True,
            anomaly_reason=AnomalyReason.PRICE_DEVIATION,
            anomaly_detected_at=_BASE - timedelta(hours=2),
            state=ZoneState.DEGRADED,
        )
        update = engine.apply_intel(current, _intel("VERIFICATION"), now=_BASE)
        assert update.state.anomaly_detected
        assert update.state.state == ZoneState.DEGRADED
        assert update.factors.anomaly_penalty == 0.0

    def test_boost_capped_per_day(self, engine: ZoneConfidenceEngine) -> None:
        current = _state(boost_applied_24h=28.0)
        update = engine.apply_intel(current, _intel("VERIFICATION"), now=_BASE)
        assert update.factors.boost_applied == pytest.approx(2.0)
        assert update.state.boost_applied_24h == pytest.approx(30.0)

    def test_late_report_does_not_rewind_last_intel(self, engine: ZoneConfidenceEngine) -> None:
        late = _intel("VERIFICATION", _BASE - timedelta(hours=5))
        update = engine.apply_intel(_state(), late, now=_BASE)
        assert update.state.last_intel_at == _BASE - timedelta(hours=1)

    def test_future_dated_report_capped_at_now(self, engine: ZoneConfidenceEngine) -> None:
        future = _intel("VERIFICATION", _BASE + timedelta(hours=2))
        update = engine.apply_intel(_state(), future, now=_BASE)
        assert update.state.last_intel_at == _BASE

    def test_audit_entry(self, engine: ZoneConfidenceEngine) -> None:
        intel = _intel("VERIFICATION", contributor_id="scout-9")
        audit = engine.apply_intel(_state(), intel, now=_BASE).audit
        assert audit.action == AuditAction.INTEL
        assert audit.intel_id == intel.id
        assert audit.actor == "scout-9"
        assert audit.score_before == 70.0
        assert audit.score_after == 77.5

    def test_repeated_report_ids_in_window_count_once(self, engine: ZoneConfidenceEngine) -> None:
        hazard = _intel("HAZARD_REPORT", _BASE - timedelta(minutes=30),
                        contributor_id="scout-a", id="h-1")
        update = engine.apply_intel(
            _state(),
            _intel("CONSTRUCTION", contributor_id="scout-b"),
            recent_intel=[hazard, hazard],
            now=_BASE,
        )
        assert not update.state.hazard_active
        assert update.factors.hazard_penalty == 0.0
        assert update.state.state != ZoneState.OFFLINE


class TestScoreBounds:
    def test_out_of_range_scores_clamped_on_load(self) -> None:
        assert _state(score=150.0).score == 100.0
        assert _state(score=5.0).score == 20.0
        assert _state(score=float("nan")).score == 20.0

    def test_engine_accepts_clamped_stored_score(self, engine: ZoneConfidenceEngine) -> None:
        update = engine.apply_tick(_state(score=150.0, level=ConfidenceLevel.HIGH), _BASE)
        assert update.factors.base_score == 100.0
        assert update.state.score == 100.0

    def test_repeated_verifications_never_exceed_ceiling(self, engine: ZoneConfidenceEngine) -> None:
        state = _state(score=98.0, level=ConfidenceLevel.HIGH)
        for i in range(20):
            # Fresh 24h budget each round so boosts keep landing
            state = state.model_copy(update={"boost_applied_24h": 0.0, "intel_count_24h": 0})
            state = engine.apply_intel(
                state, _intel("VERIFICATION", trust_weight=1.5), now=_BASE,
            ).state
            assert state.score <= 100.0
        assert state.score == 100.0

    def test_stacked_penalties_never_breach_floor(self, engine: ZoneConfidenceEngine) -> None:
        current = _state(score=22.0, level=ConfidenceLevel.DEGRADED)
        recent = [
            _intel("QUIET_CONFIRMED", _BASE - timedelta(minutes=30)),
            _intel("CROWD_SURGE", _BASE - timedelta(minutes=25)),
            _intel("HAZARD_REPORT", _BASE - timedelta(minutes=20), contributor_id="a"),
        ]
        update = engine.apply_intel(
            current,
            _intel("HAZARD_REPORT", contributor_id="b"),
            recent_intel=recent,
            now=_BASE,
            price_anomaly=True,
        )
        assert update.state.score == 20.0
        assert update.state.level == ConfidenceLevel.DEGRADED
        assert update.state.state == ZoneState.OFFLINE


# ── Tick path ────────────────────────────────────────────────────────────────


class TestApplyTick:
    def test_tick_decays_stale_zone(self, engine: ZoneConfidenceEngine) -> None:
        current = _state(last_intel_at=_BASE - timedelta(days=3))
        update = engine.apply_tick(current, _BASE)
        assert update.factors.decay_applied == pytest.approx(4.0)
        assert update.state.score == 66.0
        assert update.audit.action == AuditAction.TICK

    def test_tick_resets_rolling_counters(self, engine: ZoneConfidenceEngine) -> None:
        current = _state(intel_count_24h=7, boost_applied_24h=25.0, conflict_count=1)
        update = engine.apply_tick(current, _BASE)
        assert update.state.intel_count_24h == 0
        assert update.state.boost_applied_24h == 0.0
        assert update.state.conflict_count == 1

    def test_tick_clears_expired_hazard(self, engine: ZoneConfidenceEngine) -> None:
        current = _state(
            score=48.0,
            level=ConfidenceLevel.LOW,
            state=ZoneState.OFFLINE,
            hazard_active=True,
            hazard_expires_at=_BASE - timedelta(hours=1),
        )
        update = engine.apply_tick(current, _BASE)
        assert update.hazard_expired
        assert not update.state.hazard_active
        assert update.state.hazard_expires_at is None
        assert update.state.state == ZoneState.ACTIVE

    def test_tick_keeps_live_hazard(self, engine: ZoneConfidenceEngine) -> None:
        current = _state(
            state=ZoneState.OFFLINE,
            hazard_active=True,
            hazard_expires_at=_BASE + timedelta(days=2),
        )
        update = engine.apply_tick(current, _BASE)
        assert update.state.hazard_active
        assert update.state.state == ZoneState.OFFLINE
        assert not update.hazard_expired

    def test_tick_resolves_old_anomaly(self, engine: ZoneConfidenceEngine) -> None:
        current = _state(
            state=ZoneState.DEGRADED,
            anomaly_detected=True,
            anomaly_reason=AnomalyReason.PRICE_DEVIATION,
            anomaly_detected_at=_BASE - timedelta(hours=49),
        )
        update = engine.apply_tick(current, _BASE)
        assert update.anomaly_resolved
        assert not update.state.anomaly_detected
        assert update.state.anomaly_reason is None
        assert update.state.state == ZoneState.ACTIVE

    def test_tick_keeps_recent_anomaly(self, engine: ZoneConfidenceEngine) -> None:
        current = _state(
            state=ZoneState.DEGRADED,
            anomaly_detected=True,
            anomaly_reason=AnomalyReason.PRICE_DEVIATION,
            anomaly_detected_at=_BASE - timedelta(hours=47),
        )
        update = engine.apply_tick(current, _BASE)
        assert update.state.anomaly_detected
        assert update.state.state == ZoneState.DEGRADED

    def test_initialise(self, engine: ZoneConfidenceEngine) -> None:
        update = engine.initialise("zone-9", _BASE)
        assert update.state.score == 50.0
        assert update.state.level == ConfidenceLevel.MEDIUM
        assert update.state.state == ZoneState.ACTIVE
        assert update.audit.action == AuditAction.CREATED


# ── End to end ───────────────────────────────────────────────────────────────


class TestEndToEnd:
    def test_high_trust_verification_raises_score(self, engine: ZoneConfidenceEngine) -> None:
        current = _state(last_intel_at=None)
        update = engine.apply_intel(
            current, _intel("VERIFICATION", trust_weight=1.5), now=_BASE,
        )
        assert 70.0 < update.state.score <= 100.0
        assert update.state.score == 79.3

    def test_hazard_goes_offline_only_after_second_report(
        self, engine: ZoneConfidenceEngine,
    ) -> None:
        # Last intel one hour ago: inside the decay grace window
        zone = _state(score=80.0, level=ConfidenceLevel.HIGH)

        first = _intel("HAZARD_REPORT", _BASE, contributor_id="scout-a",
                       payload={"severity": "HIGH"})
        after_first = engine.apply_intel(zone, first, now=_BASE).state
        # A lone hazard report neither boosts nor penalises
        assert after_first.score == 80.0
        assert after_first.state != ZoneState.OFFLINE
        assert not after_first.hazard_active

        later = _BASE + timedelta(hours=1)
        second = _intel("HAZARD_REPORT", later, contributor_id="scout-b",
                        payload={"severity": "HIGH"})
        after_second = engine.apply_intel(
            after_first, second, recent_intel=[first], now=later,
        ).state
        assert after_second.state == ZoneState.OFFLINE
        assert after_second.hazard_active
        assert after_second.score == 50.0
        assert after_second.score < zone.score
        assert after_second.hazard_expires_at == later + timedelta(days=7)

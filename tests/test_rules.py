"""Tests for the pure confidence rules.

Every call passes an explicit ``now``; nothing here reads the clock.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from zone_trust.core.rules import (
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
from zone_trust.domain.enums import ConfidenceLevel, IntelType, ZoneState
from zone_trust.domain.intel import IntelSubmission

from tests.test_intel import _valid_intel

_BASE = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _intel(intel_type: str, at: datetime, **kw) -> IntelSubmission:
    return IntelSubmission.model_validate(
        _valid_intel(type=intel_type, created_at=at.isoformat(), **kw)
    )


class TestClampScore:
    def test_within_bounds_unchanged(self) -> None:
        assert clamp_score(55.5) == 55.5

    def test_clamped_to_bounds(self) -> None:
        assert clamp_score(150.0) == 100.0
        assert clamp_score(-10.0) == 20.0

    def test_nan_collapses_to_floor(self) -> None:
        assert clamp_score(float("nan")) == 20.0


class TestScoreToLevel:
    @pytest.mark.parametrize(
        ("score", "level"),
        [
            (100, ConfidenceLevel.HIGH),
            (80, ConfidenceLevel.HIGH),
            (79, ConfidenceLevel.MEDIUM),
            (79.9, ConfidenceLevel.MEDIUM),
            (60, ConfidenceLevel.MEDIUM),
            (59, ConfidenceLevel.LOW),
            (40, ConfidenceLevel.LOW),
            (39, ConfidenceLevel.DEGRADED),
            (20, ConfidenceLevel.DEGRADED),
            (19.9, ConfidenceLevel.UNKNOWN),
        ],
    )
    def test_exact_boundaries(self, score: float, level: ConfidenceLevel) -> None:
        assert score_to_level(score) == level

    def test_nan_is_unknown(self) -> None:
        assert score_to_level(float("nan")) == ConfidenceLevel.UNKNOWN


class TestZoneState:
    def test_hazard_overrides_everything(self) -> None:
        assert determine_zone_state(100.0, True, False) == ZoneState.OFFLINE
        assert determine_zone_state(100.0, True, True) == ZoneState.OFFLINE

    def test_anomaly_degrades(self) -> None:
        assert determine_zone_state(90.0, False, True) == ZoneState.DEGRADED

    def test_below_floor_degrades(self) -> None:
        assert determine_zone_state(10.0, False, False) == ZoneState.DEGRADED

    def test_healthy_is_active(self) -> None:
        assert determine_zone_state(50.0, False, False) == ZoneState.ACTIVE


class TestTimeDecay:
    def test_fresh_intel_no_decay(self) -> None:
        assert calculate_time_decay(70.0, _BASE, _BASE) == 0.0

    def test_inside_grace_window_no_decay(self) -> None:
        assert calculate_time_decay(70.0, _BASE - timedelta(hours=23), _BASE) == 0.0

    def test_exactly_at_grace_no_decay(self) -> None:
        assert calculate_time_decay(70.0, _BASE - timedelta(hours=24), _BASE) == 0.0

    def test_just_past_grace_decays(self) -> None:
        assert calculate_time_decay(70.0, _BASE - timedelta(hours=25), _BASE) > 0.0

    def test_linear_after_grace(self) -> None:
        decay = calculate_time_decay(70.0, _BASE - timedelta(hours=48), _BASE)
        assert decay == pytest.approx(2.0)
        decay = calculate_time_decay(70.0, _BASE - timedelta(days=11), _BASE)
        assert decay == pytest.approx(20.0)

    def test_decay_stops_at_floor(self) -> None:
        decay = calculate_time_decay(25.0, _BASE - timedelta(days=60), _BASE)
        assert decay == pytest.approx(5.0)
        assert calculate_time_decay(20.0, _BASE - timedelta(days=60), _BASE) == 0.0

    def test_never_reported_gets_flat_daily_decay(self) -> None:
        assert calculate_time_decay(80.0, None, _BASE) == pytest.approx(2.0)

    def test_never_reported_near_floor(self) -> None:
        assert calculate_time_decay(21.0, None, _BASE) == pytest.approx(1.0)
        assert calculate_time_decay(20.0, None, _BASE) == 0.0

    def test_future_dated_intel_no_decay(self) -> None:
        assert calculate_time_decay(70.0, _BASE + timedelta(hours=5), _BASE) == 0.0

    def test_custom_rate(self) -> None:
        cfg = ConfidenceConfig(decay_rate_per_day=0.05)
        decay = calculate_time_decay(70.0, _BASE - timedelta(hours=48), _BASE, cfg)
        assert decay == pytest.approx(5.0)


class TestIntelBoost:
    def test_hazard_never_boosts(self) -> None:
        for weight in (0.0, 1.0, 1.5):
            for count in (0, 5):
                assert calculate_intel_boost(IntelType.HAZARD_REPORT, weight, count) <= 0.0

    def test_verification_full_trust(self) -> None:
        assert calculate_intel_boost(IntelType.VERIFICATION, 1.0, 0) == pytest.approx(7.5)

    def test_monotonic_in_trust(self) -> None:
        low = calculate_intel_boost(IntelType.PRICE_SUBMISSION, 0.5, 0)
        mid = calculate_intel_boost(IntelType.PRICE_SUBMISSION, 1.0, 0)
        high = calculate_intel_boost(IntelType.PRICE_SUBMISSION, 1.5, 0)
        assert low < mid < high

    def test_trust_weight_clamped_to_minimum(self) -> None:
        zero = calculate_intel_boost(IntelType.VERIFICATION, 0.0, 0)
        assert zero == calculate_intel_boost(IntelType.VERIFICATION, 0.3, 0)
        assert zero == pytest.approx(2.25)

    def test_diminishing_returns(self) -> None:
        assert calculate_intel_boost(IntelType.VERIFICATION, 1.0, 2) == pytest.approx(5.25)
        assert calculate_intel_boost(IntelType.VERIFICATION, 1.0, 10) == pytest.approx(1.5)

    def test_per_report_maximum(self) -> None:
        cfg = ConfidenceConfig(intel_boost_base=20.0)
        assert calculate_intel_boost(IntelType.VERIFICATION, 1.5, 0, cfg) == 15.0


class TestWindows:
    def test_old_intel_excluded(self) -> None:
        old = _intel("VERIFICATION", _BASE - timedelta(hours=7))
        assert within_window([old], _BASE, 6) == []

    def test_future_dated_intel_included(self) -> None:
        future = _intel("VERIFICATION", _BASE + timedelta(minutes=10))
        assert within_window([future], _BASE, 6) == [future]


class TestConflicts:
    def test_quiet_and_crowd_conflict(self) -> None:
        recent = [_intel("QUIET_CONFIRMED", _BASE), _intel("CROWD_SURGE", _BASE)]
        assert detect_conflicts(recent) == 1

    def test_both_pairs(self) -> None:
        recent = [
            _intel("QUIET_CONFIRMED", _BASE),
            _intel("CROWD_SURGE", _BASE),
            _intel("HASSLE_REPORT", _BASE),
        ]
        assert detect_conflicts(recent) == 2

    def test_compatible_types_do_not_conflict(self) -> None:
        recent = [_intel("CROWD_SURGE", _BASE), _intel("HASSLE_REPORT", _BASE)]
        assert detect_conflicts(recent) == 0

    def test_empty(self) -> None:
        assert detect_conflicts([]) == 0


class TestHazardAssessment:
    def test_two_reports_trigger(self) -> None:
        recent = [
            _intel("HAZARD_REPORT", _BASE - timedelta(hours=2), contributor_id="a"),
            _intel("HAZARD_REPORT", _BASE, contributor_id="b"),
        ]
        result = assess_hazard(recent, False, None, _BASE)
        assert result.active
        assert result.triggered
        assert result.report_count == 2
        assert result.expires_at == _BASE + timedelta(days=7)

    def test_single_report_does_not_trigger(self) -> None:
        result = assess_hazard([_intel("HAZARD_REPORT", _BASE)], False, None, _BASE)
        assert not result.active
        assert not result.triggered

    def test_reports_outside_window_ignored(self) -> None:
        recent = [
            _intel("HAZARD_REPORT", _BASE - timedelta(hours=30)),
            _intel("HAZARD_REPORT", _BASE),
        ]
        assert not assess_hazard(recent, False, None, _BASE).active

    def test_expired_hazard_clears(self) -> None:
        result = assess_hazard([], True, _BASE - timedelta(minutes=1), _BASE)
        assert not result.active
        assert result.expired
        assert result.expires_at is None

    def test_unexpired_hazard_persists(self) -> None:
        expires = _BASE + timedelta(days=3)
        result = assess_hazard([], True, expires, _BASE)
        assert result.active
        assert result.expires_at == expires
        assert not result.expired

"""Tests for the canonical IntelSubmission model."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from zone_trust.domain.enums import IntelType
from zone_trust.domain.intel import IntelSubmission

_BASE = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _valid_intel(**overrides) -> dict:
    """Return a valid intel dict, with optional overrides."""
    base = {
        "id": str(uuid4()),
        "zone_id": "zone-1",
        "contributor_id": "scout-alpha",
        "type": "VERIFICATION",
        "payload": {},
        "trust_weight": 1.0,
        "created_at": _BASE.isoformat(),
    }
    base.update(overrides)
    return base


class TestIntelValidation:
    def test_valid_intel_parses(self) -> None:
        intel = IntelSubmission.model_validate(_valid_intel())
        assert intel.type == IntelType.VERIFICATION
        assert intel.trust_weight == 1.0
        assert intel.created_at == _BASE

    def test_id_generated_when_missing(self) -> None:
        raw = _valid_intel()
        del raw["id"]
        intel = IntelSubmission.model_validate(raw)
        assert intel.id

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(Exception):
            IntelSubmission.model_validate(_valid_intel(type="RUMOUR"))

    def test_empty_zone_id_rejected(self) -> None:
        with pytest.raises(Exception):
            IntelSubmission.model_validate(_valid_intel(zone_id=""))

    def test_trust_weight_above_range_rejected(self) -> None:
        with pytest.raises(Exception):
            IntelSubmission.model_validate(_valid_intel(trust_weight=2.0))

    def test_negative_trust_weight_rejected(self) -> None:
        with pytest.raises(Exception):
            IntelSubmission.model_validate(_valid_intel(trust_weight=-0.1))

    def test_naive_timestamp_treated_as_utc(self) -> None:
        intel = IntelSubmission.model_validate(_valid_intel(created_at="2026-01-01T12:00:00"))
        assert intel.created_at.tzinfo is not None
        assert intel.created_at == _BASE

    def test_immutable(self) -> None:
        intel = IntelSubmission.model_validate(_valid_intel())
        with pytest.raises(Exception):
            intel.trust_weight = 0.5  # type: ignore[misc]


class TestIntelConvenience:
    def test_is_hazard(self) -> None:
        assert IntelSubmission.model_validate(_valid_intel(type="HAZARD_REPORT")).is_hazard
        assert not IntelSubmission.model_validate(_valid_intel()).is_hazard

    def test_reported_price_from_numeric_payload(self) -> None:
        intel = IntelSubmission.model_validate(
            _valid_intel(type="PRICE_SUBMISSION", payload={"price": 120})
        )
        assert intel.reported_price == 120.0

    @pytest.mark.parametrize("price", ["120", True, -5, 0, None])
    def test_reported_price_ignores_invalid_values(self, price) -> None:
        intel = IntelSubmission.model_validate(
            _valid_intel(type="PRICE_SUBMISSION", payload={"price": price})
        )
        assert intel.reported_price is None

    def test_reported_price_only_for_price_submissions(self) -> None:
        intel = IntelSubmission.model_validate(_valid_intel(payload={"price": 50}))
        assert intel.reported_price is None

"""Canonical IntelSubmission model — one contributor report about a zone.

An IntelSubmission is a *claim*, not a fact.  It records what a
contributor says they observed, weighted by how much the upstream
reputation system trusts that contributor.  Validated at the boundary so
downstream scoring code never re-checks field constraints.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from zone_trust.domain.enums import IntelType
from zone_trust.foundation.clock import ensure_aware, utc_now
from zone_trust.foundation.identifiers import new_id


class IntelSubmission(BaseModel):
    """A single field report.  Immutable after creation."""

    id: str = Field(default_factory=new_id, min_length=1, max_length=128)
    zone_id: str = Field(..., min_length=1, max_length=128)
    contributor_id: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Upstream contributor/device identity (independence is enforced upstream)",
    )
    type: IntelType
    payload: dict[str, Any] = Field(default_factory=dict, description="Free-form report data")
    trust_weight: float = Field(
        default=1.0,
        ge=0.0,
        le=1.5,
        description="Reputation-derived weight (0 = untrusted, 1.5 = highly trusted)",
    )
    created_at: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}

    # ── Validators ───────────────────────────────────────────────────────

    @field_validator("created_at")
    @classmethod
    def created_at_must_be_aware(cls, v: datetime) -> datetime:
        # Mobile clients frequently send naive local timestamps
        return ensure_aware(v)

    @field_validator("trust_weight")
    @classmethod
    def trust_weight_must_be_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("trust_weight must be a finite number")
        return v

    # ── Convenience ──────────────────────────────────────────────────────

    @property
    def is_hazard(self) -> bool:
        return self.type == IntelType.HAZARD_REPORT

    @property
    def reported_price(self) -> float | None:
        """Numeric price carried by a PRICE_SUBMISSION payload, if any."""
        if self.type != IntelType.PRICE_SUBMISSION:
            return None
        raw = self.payload.get("price")
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            return None
        value = float(raw)
        if not math.isfinite(value) or value <= 0:
            return None
        return value

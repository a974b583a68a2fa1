"""Confidence domain models — the per-zone trust snapshot and its audit trail.

ZoneConfidenceState is the only mutable *entity* in the system, but it is
modelled as a frozen value: every update produces a brand-new state.  The
confidence engine is the single writer; callers are responsible for
serialising updates per zone (see ZoneConfidenceStore).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from zone_trust.domain.enums import AnomalyReason, AuditAction, ConfidenceLevel, ZoneState
from zone_trust.foundation.numeric import clamp

INITIAL_SCORE = 50.0
SCORE_FLOOR = 20.0
SCORE_CEILING = 100.0


class ZoneConfidenceState(BaseModel):
    """Immutable trust snapshot of one zone at a point in time.

    ``score`` never leaves [20, 100]: the floor models "we still hold
    stale data", never total blindness.  ``level`` and ``state`` are
    derived by the engine on every update and stored so readers never
    recompute them.
    """

    zone_id: str = Field(..., min_length=1)
    score: float = Field(default=INITIAL_SCORE, ge=SCORE_FLOOR, le=SCORE_CEILING)
    level: ConfidenceLevel = ConfidenceLevel.MEDIUM
    state: ZoneState = ZoneState.ACTIVE

    last_verified_at: datetime | None = None
    last_intel_at: datetime | None = None
    verification_count: int = Field(default=0, ge=0)
    intel_count_24h: int = Field(default=0, ge=0)
    boost_applied_24h: float = Field(
        default=0.0, ge=0.0,
        description="Boost points granted since the last daily tick (for the 24h cap)",
    )
    conflict_count: int = Field(default=0, ge=0)

    hazard_active: bool = False
    hazard_expires_at: datetime | None = None

    anomaly_detected: bool = False
    anomaly_reason: AnomalyReason | None = None
    anomaly_detected_at: datetime | None = None

    updated_at: datetime

    model_config = {"frozen": True}

    # ── Validators ───────────────────────────────────────────────────────

    @field_validator("score", mode="before")
    @classmethod
    def score_clamped_into_bounds(cls, v: Any) -> Any:
        # Stored or upstream scores outside [floor, ceiling] are clamped; NaN → floor
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return clamp(float(v), SCORE_FLOOR, SCORE_CEILING)
        return v

    @classmethod
    def initial(cls, zone_id: str, now: datetime) -> ZoneConfidenceState:
        """Neutral state for a zone that has never been evaluated."""
        return cls(zone_id=zone_id, updated_at=now)

    @property
    def has_conflicts(self) -> bool:
        return self.conflict_count > 0

    def summary(self) -> dict:
        """Lightweight summary suitable for acknowledgements and logging."""
        return {
            "zone_id": self.zone_id,
            "score": self.score,
            "level": self.level.value,
            "state": self.state.value,
            "hazard_active": self.hazard_active,
            "anomaly_detected": self.anomaly_detected,
            "has_conflicts": self.has_conflicts,
            "updated_at": self.updated_at.isoformat(),
        }


class ConfidenceFactors(BaseModel):
    """Per-update breakdown of how the new score was reached.

    Produced alongside every state transition for logging and tests.  It
    is never read back into the engine.
    """

    base_score: float
    decay_applied: float = Field(default=0.0, ge=0.0)
    boost_applied: float = Field(default=0.0, ge=0.0)
    conflict_penalty: float = Field(default=0.0, ge=0.0)
    hazard_penalty: float = Field(default=0.0, ge=0.0)
    anomaly_penalty: float = Field(default=0.0, ge=0.0)
    final_score: float

    model_config = {"frozen": True}

    @property
    def net_change(self) -> float:
        return self.final_score - self.base_score


class AuditEntry(BaseModel):
    """One append-only record in the external audit log."""

    zone_id: str
    timestamp: datetime
    action: AuditAction
    score_before: float
    score_after: float
    state_before: ZoneState
    state_after: ZoneState
    factors: ConfidenceFactors | None = None
    intel_id: str | None = None
    reason: str = ""
    actor: str = "system"

    model_config = {"frozen": True}


class ConfidenceUpdate(BaseModel):
    """Result of one engine step: the new state plus its explanation.

    ``duplicate`` marks a re-sent report the store ignored; ``state`` is
    then the unchanged current state and ``audit`` its latest entry.
    """

    state: ZoneConfidenceState
    factors: ConfidenceFactors
    audit: AuditEntry
    hazard_expired: bool = False
    anomaly_resolved: bool = False
    duplicate: bool = False

    model_config = {"frozen": True}

"""Recommendation domain models — ranker inputs and explained outputs.

A RecommendationContext is supplied fresh by the caller on every ranking
call and a RankerResult is rebuilt from scratch each time.  Neither is
cached: both depend on the wall clock and the weather.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from zone_trust.domain.confidence import ZoneConfidenceState
from zone_trust.domain.enums import (
    ActivityLevel,
    CrowdTolerance,
    TextureType,
    TimePeriod,
    TimePreference,
)
from zone_trust.domain.weather import CurrentWeather
from zone_trust.domain.zone import GeoPoint, Zone
from zone_trust.foundation.clock import ensure_aware


class UserFingerprint(BaseModel):
    """A user's stated texture, time and crowd preferences."""

    preferred_textures: list[TextureType] = Field(default_factory=list)
    avoided_textures: list[TextureType] = Field(default_factory=list)
    time_preference: TimePreference = TimePreference.ANY
    crowd_tolerance: CrowdTolerance = CrowdTolerance.MEDIUM
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    interests: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class RecommendationContext(BaseModel):
    """Everything situational the ranker needs for one call."""

    current_time: datetime
    weather: CurrentWeather | None = None
    user_location: GeoPoint | None = None
    user_fingerprint: UserFingerprint | None = None
    exclude_visited: list[str] = Field(default_factory=list)
    max_results: int | None = Field(default=None, ge=1)

    model_config = {"frozen": True}

    @field_validator("current_time")
    @classmethod
    def current_time_must_be_aware(cls, v: datetime) -> datetime:
        return ensure_aware(v)


class ZoneRecommendation(BaseModel):
    """One ranked zone with its score breakdown and explanation."""

    zone: Zone
    confidence: ZoneConfidenceState

    total_score: int = Field(..., ge=0, le=100)
    texture_score: float = Field(..., ge=0.0, le=100.0)
    confidence_score: float = Field(..., ge=0.0, le=100.0)
    time_score: float = Field(..., ge=0.0, le=100.0)
    weather_score: float = Field(..., ge=0.0, le=100.0)
    distance_score: float = Field(..., ge=0.0, le=100.0)
    distance_km: float | None = None

    reasons: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    adjusted_walkability: float = Field(..., ge=0.0, le=100.0)
    adjusted_safety: float = Field(..., ge=0.0, le=100.0)

    model_config = {"frozen": True}


class ExclusionCounts(BaseModel):
    """How many zones were dropped before scoring, by reason."""

    offline: int = 0
    degraded: int = 0
    hazard: int = 0
    visited: int = 0

    @property
    def total(self) -> int:
        return self.offline + self.degraded + self.hazard + self.visited


class RankingSummary(BaseModel):
    """Context facts resolved by the ranker, echoed back to the caller."""

    time_period: TimePeriod
    weather_summary: str | None = None
    user_has_fingerprint: bool = False


class RankerResult(BaseModel):
    recommendations: list[ZoneRecommendation] = Field(default_factory=list)
    excluded_count: int = 0
    excluded_reasons: ExclusionCounts = Field(default_factory=ExclusionCounts)
    context: RankingSummary

    model_config = {"frozen": True}

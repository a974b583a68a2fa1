"""Ranker — explainable, deterministic zone recommendations.

Combines five sub-scores (0–100 each) into one weighted total:

    texture     how well the zone matches the user's fingerprint
    confidence  how fresh and reliable the zone's intel is
    time        how suitable the zone's texture is for the current hour
    weather     how the current weather affects this kind of zone
    distance    proximity to the user

Hazard-active, OFFLINE and already-visited zones are excluded before
scoring.  Identical inputs always produce identical output: the only
clock the ranker reads is ``context.current_time``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from zone_trust.core.weather import calculate_weather_modifiers, format_weather_summary
from zone_trust.domain.confidence import ZoneConfidenceState
from zone_trust.domain.enums import (
    ActivityLevel,
    ConfidenceLevel,
    TextureType,
    TimePeriod,
    ZoneState,
)
from zone_trust.domain.recommendation import (
    ExclusionCounts,
    RankerResult,
    RankingSummary,
    RecommendationContext,
    UserFingerprint,
    ZoneRecommendation,
)
from zone_trust.domain.weather import WeatherModifiers
from zone_trust.domain.zone import GeoPoint, Zone, ZoneTexture
from zone_trust.foundation.geo import haversine_km
from zone_trust.foundation.numeric import clamp, round_half_up, round_to

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankingWeights:
    """Relative importance of each sub-score.  Should sum to 1.0."""

    texture: float = 0.30
    confidence: float = 0.25
    time: float = 0.15
    weather: float = 0.15
    distance: float = 0.15


DEFAULT_WEIGHTS = RankingWeights()

# ── Lookup tables ────────────────────────────────────────────────────────────

_M, _A, _E, _N = TimePeriod.MORNING, TimePeriod.AFTERNOON, TimePeriod.EVENING, TimePeriod.NIGHT

TIME_AFFINITY: dict[TextureType, dict[TimePeriod, float]] = {
    TextureType.MARKET_CHAOS: {_M: 90, _A: 70, _E: 40, _N: 20},
    TextureType.TEMPLE_PEACE: {_M: 95, _A: 80, _E: 60, _N: 30},
    TextureType.NIGHTLIFE_ELECTRIC: {_M: 10, _A: 30, _E: 80, _N: 100},
    TextureType.CAFE_CULTURE: {_M: 90, _A: 95, _E: 70, _N: 40},
    TextureType.TRANSIT_HUB: {_M: 80, _A: 80, _E: 80, _N: 50},
    TextureType.TOURIST_DENSE: {_M: 70, _A: 90, _E: 70, _N: 40},
    TextureType.LOCAL_AUTHENTIC: {_M: 80, _A: 80, _E: 85, _N: 60},
    TextureType.PARK_REFUGE: {_M: 90, _A: 85, _E: 60, _N: 20},
    TextureType.COMMERCIAL: {_M: 70, _A: 90, _E: 60, _N: 30},
    TextureType.RESIDENTIAL: {_M: 60, _A: 60, _E: 70, _N: 50},
    TextureType.MIXED: {_M: 70, _A: 80, _E: 75, _N: 50},
}
DEFAULT_TIME_AFFINITY = 60.0

LEVEL_SCORES: dict[ConfidenceLevel, float] = {
    ConfidenceLevel.HIGH: 100.0,
    ConfidenceLevel.MEDIUM: 75.0,
    ConfidenceLevel.LOW: 50.0,
    ConfidenceLevel.DEGRADED: 25.0,
    ConfidenceLevel.UNKNOWN: 10.0,
}

ACTIVE_TEXTURES = frozenset({
    TextureType.MARKET_CHAOS, TextureType.NIGHTLIFE_ELECTRIC, TextureType.TOURIST_DENSE,
})
RELAXED_TEXTURES = frozenset({
    TextureType.TEMPLE_PEACE, TextureType.CAFE_CULTURE, TextureType.PARK_REFUGE,
})
OUTDOOR_TEXTURES = frozenset({
    TextureType.PARK_REFUGE, TextureType.MARKET_CHAOS, TextureType.TEMPLE_PEACE,
})
INDOOR_TEXTURES = frozenset({
    TextureType.CAFE_CULTURE, TextureType.COMMERCIAL, TextureType.NIGHTLIFE_ELECTRIC,
})

# Neutral sub-scores when an input is missing
NO_FINGERPRINT_SCORE = 70.0
NO_WEATHER_SCORE = 70.0
NO_LOCATION_SCORE = 70.0

ANOMALY_WARNING = "Anomaly detected - verify current conditions"


# ── Sub-scores ───────────────────────────────────────────────────────────────


def time_period_for_hour(hour: int) -> TimePeriod:
    if 5 <= hour < 12:
        return TimePeriod.MORNING
    if 12 <= hour < 17:
        return TimePeriod.AFTERNOON
    if 17 <= hour < 22:
        return TimePeriod.EVENING
    return TimePeriod.NIGHT


def time_score(texture: ZoneTexture, period: TimePeriod) -> float:
    return TIME_AFFINITY.get(texture.primary, {}).get(period, DEFAULT_TIME_AFFINITY)


def texture_score(
    texture: ZoneTexture,
    fingerprint: UserFingerprint | None,
) -> tuple[float, str]:
    """Score and explanation for how well *texture* suits the user."""
    if fingerprint is None:
        return NO_FINGERPRINT_SCORE, "General interest"

    score = 50.0
    reason = ""

    if texture.primary in fingerprint.preferred_textures:
        score += 40
        reason = f"Matches your preference for {texture.primary.label}"
    elif texture.secondary is not None and texture.secondary in fingerprint.preferred_textures:
        score += 25
        reason = f"Secondary match: {texture.secondary.label}"

    if texture.primary in fingerprint.avoided_textures:
        score -= 30
        reason = reason or f"Not typically your style ({texture.primary.label})"

    if fingerprint.activity_level == ActivityLevel.ACTIVE and texture.primary in ACTIVE_TEXTURES:
        score += 10
    elif fingerprint.activity_level == ActivityLevel.RELAXED and texture.primary in RELAXED_TEXTURES:
        score += 10

    return clamp(score, 0.0, 100.0), reason or "Mixed match with preferences"


def confidence_score(confidence: ZoneConfidenceState) -> tuple[float, str]:
    level = confidence.level
    if level == ConfidenceLevel.HIGH:
        reason = "Recently verified, reliable intel"
    elif level == ConfidenceLevel.MEDIUM:
        reason = "Reasonably fresh intel"
    elif level == ConfidenceLevel.LOW:
        reason = "Limited recent intel - verify on ground"
    else:
        reason = "Stale data - use caution"

    score = LEVEL_SCORES.get(level, LEVEL_SCORES[ConfidenceLevel.UNKNOWN])
    if confidence.anomaly_detected:
        score -= 20
        reason += " (anomaly detected)"
    return max(0.0, score), reason


def weather_score(texture: ZoneTexture, modifiers: WeatherModifiers | None) -> float:
    if modifiers is None:
        return NO_WEATHER_SCORE

    weights = modifiers.texture_weight
    score = 80.0
    if texture.primary in OUTDOOR_TEXTURES:
        score -= weights.outdoor_penalty * 40
        score -= weights.park_penalty * 20
    elif texture.primary in INDOOR_TEXTURES:
        score += weights.indoor_bonus * 30
        score += weights.cafe_boost * 20

    score += modifiers.walkability_modifier * 0.5
    score += modifiers.safety_modifier * 0.5
    return clamp(score, 0.0, 100.0)


def distance_score(center: GeoPoint, user_location: GeoPoint | None) -> tuple[float, float | None]:
    """Distance bucket score and the distance in km (one decimal)."""
    if user_location is None:
        return NO_LOCATION_SCORE, None

    km = haversine_km(user_location.lat, user_location.lon, center.lat, center.lon)
    if km < 0.5:
        score = 100.0
    elif km < 1:
        score = 90.0
    elif km < 2:
        score = 80.0
    elif km < 5:
        score = 60.0
    elif km < 10:
        score = 40.0
    else:
        score = 20.0
    return score, round_to(km, 1)


# ── Ranker ───────────────────────────────────────────────────────────────────


class Ranker:
    """Stateless zone ranker.

    ``exclude_degraded`` additionally drops zones whose operational state
    is DEGRADED (anomalous pricing); by default they are ranked with a
    warning instead.
    """

    def __init__(
        self,
        weights: RankingWeights | None = None,
        exclude_degraded: bool = False,
    ) -> None:
        self._weights = weights or DEFAULT_WEIGHTS
        self._exclude_degraded = exclude_degraded

    @property
    def weights(self) -> RankingWeights:
        return self._weights

    def rank(
        self,
        zones: Sequence[Zone],
        states: Mapping[str, ZoneConfidenceState],
        context: RecommendationContext,
    ) -> RankerResult:
        period = time_period_for_hour(context.current_time.hour)
        modifiers = calculate_weather_modifiers(context.weather) if context.weather else None
        visited = set(context.exclude_visited)

        excluded = ExclusionCounts()
        recommendations: list[ZoneRecommendation] = []

        for zone in zones:
            confidence = states.get(zone.id) or ZoneConfidenceState.initial(
                zone.id, context.current_time,
            )

            if confidence.hazard_active:
                excluded.hazard += 1
                continue
            if confidence.state == ZoneState.OFFLINE:
                excluded.offline += 1
                continue
            if self._exclude_degraded and confidence.state == ZoneState.DEGRADED:
                excluded.degraded += 1
                continue
            if zone.id in visited:
                excluded.visited += 1
                continue

            recommendations.append(
                self._score_zone(zone, confidence, context, period, modifiers)
            )

        # sorted() is stable: ties keep catalog order
        recommendations = sorted(recommendations, key=lambda r: -r.total_score)
        if context.max_results is not None:
            recommendations = recommendations[: context.max_results]

        weather_summary = (
            format_weather_summary(context.weather, modifiers)
            if context.weather is not None and modifiers is not None
            else None
        )

        logger.debug(
            "Ranked %d zones (%d excluded) for %s",
            len(recommendations), excluded.total, period.value,
        )

        return RankerResult(
            recommendations=recommendations,
            excluded_count=excluded.total,
            excluded_reasons=excluded,
            context=RankingSummary(
                time_period=period,
                weather_summary=weather_summary,
                user_has_fingerprint=context.user_fingerprint is not None,
            ),
        )

    # ── Helpers ──────────────────────────────────────────────────────────

    def _score_zone(
        self,
        zone: Zone,
        confidence: ZoneConfidenceState,
        context: RecommendationContext,
        period: TimePeriod,
        modifiers: WeatherModifiers | None,
    ) -> ZoneRecommendation:
        w = self._weights
        tex, tex_reason = texture_score(zone.texture, context.user_fingerprint)
        conf, conf_reason = confidence_score(confidence)
        tim = time_score(zone.texture, period)
        wea = weather_score(zone.texture, modifiers)
        dist, distance_km = distance_score(zone.center, context.user_location)

        total = round_half_up(
            tex * w.texture
            + conf * w.confidence
            + tim * w.time
            + wea * w.weather
            + dist * w.distance
        )

        reasons: list[str] = []
        if tex >= 70:
            reasons.append(tex_reason)
        if tim >= 80:
            reasons.append(f"Good for {period.value.lower()}")
        if conf >= 75:
            reasons.append(conf_reason)
        if not reasons:
            reasons.append("Available zone")

        warnings: list[str] = []
        if confidence.level in (ConfidenceLevel.LOW, ConfidenceLevel.DEGRADED):
            warnings.append(conf_reason)
        if modifiers is not None and modifiers.warning:
            warnings.append(modifiers.warning)
        if confidence.anomaly_detected:
            warnings.append(ANOMALY_WARNING)

        walk_mod = modifiers.walkability_modifier if modifiers else 0.0
        safety_mod = modifiers.safety_modifier if modifiers else 0.0

        return ZoneRecommendation(
            zone=zone,
            confidence=confidence,
            total_score=int(clamp(total, 0, 100)),
            texture_score=tex,
            confidence_score=conf,
            time_score=tim,
            weather_score=wea,
            distance_score=dist,
            distance_km=distance_km,
            reasons=reasons,
            warnings=warnings,
            adjusted_walkability=clamp(zone.texture.walkability + walk_mod, 0.0, 100.0),
            adjusted_safety=clamp(zone.texture.safety_score + safety_mod, 0.0, 100.0),
        )

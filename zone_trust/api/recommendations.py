"""REST endpoint for zone recommendations.

Path: POST /api/recommendations

Weather resolution order:
    1. ``weather`` in the request body, canonical or raw Open-Meteo,
       normalised through the adapter registry (and cached when the
       caller's location is known);
    2. the caller-owned WeatherCache for the caller's location;
    3. no weather (neutral weather scoring).
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from zone_trust.adapters.registry import AdaptationError, NoAdapterFoundError, WeatherAdapterRegistry
from zone_trust.core.ranker import Ranker
from zone_trust.domain.recommendation import RecommendationContext, UserFingerprint
from zone_trust.domain.weather import CurrentWeather
from zone_trust.domain.zone import GeoPoint
from zone_trust.explain.formatter import format_recommendation_explanation
from zone_trust.foundation.clock import ensure_aware, utc_now
from zone_trust.store.confidence_store import ZoneConfidenceStore
from zone_trust.store.weather_cache import WeatherCache
from zone_trust.store.zone_catalog import ZoneCatalog

logger = logging.getLogger(__name__)


class RecommendationRequest(BaseModel):
    current_time: datetime | None = None
    weather: dict[str, Any] | None = Field(
        default=None, description="Canonical CurrentWeather or a raw Open-Meteo response",
    )
    user_location: GeoPoint | None = None
    user_fingerprint: UserFingerprint | None = None
    exclude_visited: list[str] = Field(default_factory=list)
    max_results: int | None = Field(default=None, ge=1, le=100)
    zone_ids: list[str] | None = Field(
        default=None, description="Restrict ranking to these catalog zones",
    )


def create_recommendations_router(
    store: ZoneConfidenceStore,
    catalog: ZoneCatalog,
    ranker: Ranker,
    weather_registry: WeatherAdapterRegistry,
    weather_cache: WeatherCache | None = None,
) -> APIRouter:
    """Factory that wires the ranking endpoint to its collaborators."""

    router = APIRouter(prefix="/api", tags=["recommendations"])

    def _resolve_weather(body: RecommendationRequest, now: datetime) -> CurrentWeather | None:
        loc = body.user_location
        if body.weather is not None:
            try:
                weather = weather_registry.adapt(body.weather)
            except (NoAdapterFoundError, AdaptationError) as exc:
                raise HTTPException(status_code=422, detail=str(exc)) from exc
            if weather_cache is not None and loc is not None:
                weather_cache.put(loc.lat, loc.lon, weather, now)
            return weather
        if weather_cache is not None and loc is not None:
            return weather_cache.get(loc.lat, loc.lon, now)
        return None

    @router.post("/recommendations")
    async def recommend(body: RecommendationRequest) -> dict[str, Any]:
        now = ensure_aware(body.current_time) if body.current_time else utc_now()

        zones = catalog.all()
        if body.zone_ids is not None:
            wanted = set(body.zone_ids)
            zones = [z for z in zones if z.id in wanted]

        context = RecommendationContext(
            current_time=now,
            weather=_resolve_weather(body, now),
            user_location=body.user_location,
            user_fingerprint=body.user_fingerprint,
            exclude_visited=body.exclude_visited,
            max_results=body.max_results,
        )
        states = await store.snapshot()
        result = ranker.rank(zones, states, context)

        logger.info(
            "Recommendations: %d returned, %d excluded (%s)",
            len(result.recommendations),
            result.excluded_count,
            result.context.time_period.value,
        )
        return {
            **result.model_dump(mode="json"),
            "explanations": [
                format_recommendation_explanation(r) for r in result.recommendations
            ],
        }

    return router

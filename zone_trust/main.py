"""zone-trust — zone confidence tracking and recommendation ranking.

This is the application entry point.  It wires the ZoneConfidenceStore,
ZoneCatalog, WeatherCache, Ranker and the HTTP/WebSocket endpoints
together.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import FastAPI

from zone_trust.adapters.registry import WeatherAdapterRegistry, default_registry
from zone_trust.api.intel import create_intel_router
from zone_trust.api.recommendations import create_recommendations_router
from zone_trust.api.scheduling import create_scheduling_router
from zone_trust.api.ws_intel import create_intel_ws_router
from zone_trust.api.zones import create_zones_router
from zone_trust.config import settings
from zone_trust.core.confidence_engine import ZoneConfidenceEngine
from zone_trust.core.ranker import Ranker, RankingWeights
from zone_trust.core.rules import ConfidenceConfig
from zone_trust.store.confidence_store import ZoneConfidenceStore
from zone_trust.store.weather_cache import WeatherCache
from zone_trust.store.zone_catalog import ZoneCatalog

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

# ── Engine & Ranker ──────────────────────────────────────────────────────────

confidence_config = ConfidenceConfig(
    decay_rate_per_day=settings.decay_rate_per_day,
    decay_floor=settings.decay_floor,
    decay_grace_hours=settings.decay_grace_hours,
    intel_boost_base=settings.intel_boost_base,
    intel_boost_max=settings.intel_boost_max,
    intel_boost_cap_24h=settings.intel_boost_cap_24h,
    min_trust_weight=settings.min_trust_weight,
    max_trust_weight=settings.max_trust_weight,
    conflict_threshold=settings.conflict_threshold,
    conflict_window_hours=settings.conflict_window_hours,
    conflict_penalty=settings.conflict_penalty,
    hazard_threshold_reports=settings.hazard_threshold_reports,
    hazard_window_hours=settings.hazard_window_hours,
    hazard_duration_days=settings.hazard_duration_days,
    hazard_penalty=settings.hazard_penalty,
    anomaly_penalty=settings.anomaly_penalty,
    anomaly_resolve_hours=settings.anomaly_resolve_hours,
)

ranker = Ranker(
    weights=RankingWeights(
        texture=settings.ranking_weight_texture,
        confidence=settings.ranking_weight_confidence,
        time=settings.ranking_weight_time,
        weather=settings.ranking_weight_weather,
        distance=settings.ranking_weight_distance,
    ),
    exclude_degraded=settings.ranking_exclude_degraded,
)

# ── State ────────────────────────────────────────────────────────────────────

store = ZoneConfidenceStore(
    engine=ZoneConfidenceEngine(confidence_config),
    intel_retention=timedelta(hours=settings.intel_retention_hours),
    price_anomaly_threshold=settings.price_anomaly_threshold,
    price_baseline_min_count=settings.price_baseline_min_count,
)

catalog = (
    ZoneCatalog.from_file(settings.zone_catalog_path)
    if settings.zone_catalog_path
    else ZoneCatalog()
)

weather_cache = WeatherCache(ttl=timedelta(minutes=settings.weather_cache_ttl_minutes))


# ── App ──────────────────────────────────────────────────────────────────────


def create_app(
    store: ZoneConfidenceStore,
    catalog: ZoneCatalog,
    ranker: Ranker,
    weather_cache: WeatherCache | None = None,
    weather_registry: WeatherAdapterRegistry | None = None,
) -> FastAPI:
    """Build the FastAPI application around explicit collaborators."""
    weather_registry = weather_registry or default_registry()

    app = FastAPI(
        title=settings.app_name,
        description="Zone confidence tracking and explainable recommendations",
        version="0.1.0",
    )

    # ── Routes ───────────────────────────────────────────────────────────
    app.include_router(create_intel_router(store, catalog))
    app.include_router(create_intel_ws_router(store, catalog))
    app.include_router(create_zones_router(store, catalog))
    app.include_router(create_scheduling_router(store, catalog, weather_cache))
    app.include_router(create_recommendations_router(
        store, catalog, ranker, weather_registry, weather_cache,
    ))

    # ── Health ───────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict:
        summary = await store.confidence_summary()
        return {
            "status": "ok",
            "catalog_zones": len(catalog),
            "weather_cache_entries": len(weather_cache) if weather_cache is not None else 0,
            "weather_adapters": weather_registry.adapter_names,
            **summary.to_dict(),
        }

    return app


app = create_app(store, catalog, ranker, weather_cache)

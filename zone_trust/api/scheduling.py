"""Scheduling endpoints — decay ticks triggered by an external scheduler.

Paths:
    POST /api/zones/{zone_id}/decay-tick   one zone, optional ``at`` instant
    POST /api/cron/confidence-decay        every known zone (daily job)

The cron path also evicts expired weather readings.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter

from zone_trust.api.intel import ensure_known_zone
from zone_trust.foundation.clock import ensure_aware, utc_now
from zone_trust.store.confidence_store import ZoneConfidenceStore
from zone_trust.store.weather_cache import WeatherCache
from zone_trust.store.zone_catalog import ZoneCatalog

logger = logging.getLogger(__name__)


def create_scheduling_router(
    store: ZoneConfidenceStore,
    catalog: ZoneCatalog | None = None,
    weather_cache: WeatherCache | None = None,
) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["scheduling"])

    @router.post("/zones/{zone_id}/decay-tick")
    async def decay_tick(zone_id: str, at: datetime | None = None) -> dict[str, Any]:
        ensure_known_zone(catalog, zone_id)
        update = await store.tick(zone_id, ensure_aware(at) if at else None)
        return {
            "state": update.state.model_dump(mode="json"),
            "factors": update.factors.model_dump(mode="json"),
            "hazard_expired": update.hazard_expired,
            "anomaly_resolved": update.anomaly_resolved,
        }

    @router.post("/cron/confidence-decay")
    async def confidence_decay(at: datetime | None = None) -> dict[str, Any]:
        now = ensure_aware(at) if at else utc_now()
        result = await store.run_decay_sweep(now)
        evicted = weather_cache.evict_expired(now) if weather_cache is not None else 0
        logger.info("Cron decay complete at %s (%d weather entries evicted)", now.isoformat(), evicted)
        return {
            "success": True,
            "timestamp": now.isoformat(),
            "result": result.model_dump(mode="json"),
            "weather_evicted": evicted,
        }

    return router

"""REST endpoints for reading zone confidence.

Paths:
    GET /api/zones/{zone_id}/confidence
    GET /api/zones/{zone_id}/audit
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query

from zone_trust.api.intel import ensure_known_zone
from zone_trust.domain.confidence import ZoneConfidenceState
from zone_trust.explain.formatter import (
    format_confidence_display,
    format_last_verified,
    zone_status_message,
)
from zone_trust.foundation.clock import utc_now
from zone_trust.store.confidence_store import ZoneConfidenceStore
from zone_trust.store.zone_catalog import ZoneCatalog


def create_zones_router(
    store: ZoneConfidenceStore,
    catalog: ZoneCatalog | None = None,
) -> APIRouter:
    router = APIRouter(prefix="/api/zones", tags=["zones"])

    @router.get("/{zone_id}/confidence")
    async def get_confidence(zone_id: str) -> dict[str, Any]:
        """Current state plus display text.

        A catalogued zone with no state yet reports the neutral default.
        """
        now = utc_now()
        state = await store.get(zone_id)
        if state is None:
            if catalog is None or zone_id not in catalog:
                raise HTTPException(status_code=404, detail=f"Zone {zone_id} not found")
            state = ZoneConfidenceState.initial(zone_id, now)

        display = format_confidence_display(state.level)
        return {
            "state": state.model_dump(mode="json"),
            "display": {
                "label": display.label,
                "color": display.color,
                "icon": display.icon,
                "description": display.description,
            },
            "last_verified": format_last_verified(state.last_verified_at, now),
            "status_message": zone_status_message(state, now),
        }

    @router.get("/{zone_id}/audit")
    async def get_audit(
        zone_id: str,
        limit: int | None = Query(default=None, ge=1, le=1000),
    ) -> dict[str, Any]:
        ensure_known_zone(catalog, zone_id)
        entries = await store.audit_trail(zone_id, limit)
        return {
            "zone_id": zone_id,
            "entries": [e.model_dump(mode="json") for e in entries],
            "count": len(entries),
        }

    return router

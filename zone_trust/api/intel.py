"""REST endpoint for report ingestion.

Path: POST /api/intel

Validates an IntelSubmission at the boundary, routes it into the
ZoneConfidenceStore and returns the new state with its score breakdown.
A re-sent report id is answered with status "duplicate" and the
unchanged state.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from zone_trust.domain.intel import IntelSubmission
from zone_trust.store.confidence_store import ZoneConfidenceStore
from zone_trust.store.zone_catalog import ZoneCatalog

logger = logging.getLogger(__name__)


def ensure_known_zone(catalog: ZoneCatalog | None, zone_id: str) -> None:
    """404 for zones missing from a loaded catalog.

    An empty or absent catalog accepts every zone id.
    """
    if catalog is not None and len(catalog) > 0 and zone_id not in catalog:
        raise HTTPException(status_code=404, detail=f"Zone {zone_id} not found")


def create_intel_router(
    store: ZoneConfidenceStore,
    catalog: ZoneCatalog | None = None,
) -> APIRouter:
    """Factory that wires the ingestion endpoint to a concrete store."""

    router = APIRouter(prefix="/api", tags=["intel"])

    @router.post("/intel")
    async def submit_intel(intel: IntelSubmission) -> dict[str, Any]:
        ensure_known_zone(catalog, intel.zone_id)
        update = await store.ingest(intel)
        if not update.duplicate:
            logger.info(
                "Accepted %s for zone %s (score %.1f, %s)",
                intel.type.value,
                intel.zone_id,
                update.state.score,
                update.state.state.value,
            )
        return {
            "status": "duplicate" if update.duplicate else "accepted",
            "intel_id": intel.id,
            "state": update.state.model_dump(mode="json"),
            "factors": update.factors.model_dump(mode="json"),
        }

    return router

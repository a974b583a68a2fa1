"""WebSocket endpoint for streaming report ingestion.

Path: /ws/intel

Accepts JSON matching the IntelSubmission schema, validates it at the
boundary, routes it into the ZoneConfidenceStore, and returns a minimal
acknowledgement per message.  Invalid messages get an error ack; the
connection stays open.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from zone_trust.domain.intel import IntelSubmission
from zone_trust.store.confidence_store import ZoneConfidenceStore
from zone_trust.store.zone_catalog import ZoneCatalog

logger = logging.getLogger(__name__)


def create_intel_ws_router(
    store: ZoneConfidenceStore,
    catalog: ZoneCatalog | None = None,
) -> APIRouter:
    router = APIRouter()

    @router.websocket("/ws/intel")
    async def ingest_intel(websocket: WebSocket) -> None:
        await websocket.accept()
        logger.info("Intel source connected")

        try:
            while True:
                raw = await websocket.receive_json()

                # ── Validate at the boundary ─────────────────────────────
                try:
                    intel = IntelSubmission.model_validate(raw)
                except ValidationError as exc:
                    await websocket.send_json({
                        "status": "error",
                        "detail": f"Intel validation failed: {exc.error_count()} error(s)",
                    })
                    continue

                if catalog is not None and len(catalog) > 0 and intel.zone_id not in catalog:
                    await websocket.send_json({
                        "status": "error",
                        "intel_id": intel.id,
                        "detail": f"Zone {intel.zone_id} not found",
                    })
                    continue

                # ── Route into store ─────────────────────────────────────
                update = await store.ingest(intel)

                # ── Acknowledge ──────────────────────────────────────────
                await websocket.send_json({
                    "status": "duplicate" if update.duplicate else "accepted",
                    "intel_id": intel.id,
                    **update.state.summary(),
                })

        except WebSocketDisconnect:
            logger.info("Intel source disconnected")

    return router

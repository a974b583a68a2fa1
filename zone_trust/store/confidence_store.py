"""In-memory zone confidence store with per-zone serialisation.

Design notes:
    - The engine is pure and lock-free; this store provides the
      one-update-in-flight-per-zone guarantee it requires.  Each zone id
      gets its own asyncio.Lock, created under a registry lock.
    - Different zones update in parallel; the decay sweep gathers one
      tick per zone and each tick takes that zone's lock.
    - Recent intel, price baselines and the audit trail live beside the
      state snapshots.  The store does NOT decide what a report means:
      every score change comes from ZoneConfidenceEngine.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime, timedelta
from types import MappingProxyType

from pydantic import BaseModel, Field

from zone_trust.core.confidence_engine import ZoneConfidenceEngine
from zone_trust.core.price_baseline import PriceBaseline, detect_price_anomaly
from zone_trust.domain.confidence import (
    AuditEntry,
    ConfidenceFactors,
    ConfidenceUpdate,
    ZoneConfidenceState,
)
from zone_trust.domain.enums import ConfidenceLevel, ZoneState
from zone_trust.domain.intel import IntelSubmission
from zone_trust.foundation.clock import ensure_aware, utc_now
from zone_trust.store.audit_log import AuditLog
from zone_trust.store.intel_log import IntelLog

logger = logging.getLogger(__name__)


class DecaySweepResult(BaseModel):
    """Outcome of one scheduled decay pass over every known zone."""

    zones_processed: int = 0
    zones_decayed: int = 0
    hazards_expired: int = 0
    anomalies_resolved: int = 0
    degraded_zones: list[str] = Field(default_factory=list)
    offline_zones: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class ConfidenceSummary:
    """Aggregate view across all zones.

    This is an observability object, not a control mechanism.
    """

    __slots__ = ("total_zones", "by_level", "by_state", "average_score", "hazard_zones")

    def __init__(
        self,
        total_zones: int = 0,
        by_level: dict[str, int] | None = None,
        by_state: dict[str, int] | None = None,
        average_score: float = 0.0,
        hazard_zones: int = 0,
    ) -> None:
        self.total_zones = total_zones
        self.by_level = by_level or {}
        self.by_state = by_state or {}
        self.average_score = average_score
        self.hazard_zones = hazard_zones

    def to_dict(self) -> dict:
        return {
            "total_zones": self.total_zones,
            "by_level": dict(self.by_level),
            "by_state": dict(self.by_state),
            "average_score": round(self.average_score, 1),
            "hazard_zones": self.hazard_zones,
        }


class ZoneConfidenceStore:
    """Async-safe owner of every zone's confidence state.

    Args:
        engine: The state machine applied on every update.
        intel_retention: How long received reports stay available to the
            window detectors.  Must cover the longest detector window.
        price_anomaly_threshold: Fractional deviation from the zone's
            running mean that flags a price report as anomalous.
        price_baseline_min_count: Prices required before the check applies.
    """

    def __init__(
        self,
        engine: ZoneConfidenceEngine | None = None,
        intel_retention: timedelta = timedelta(hours=24),
        price_anomaly_threshold: float = 0.5,
        price_baseline_min_count: int = 3,
    ) -> None:
        self._engine = engine or ZoneConfidenceEngine()
        cfg = self._engine.config
        longest_window = timedelta(hours=max(cfg.conflict_window_hours, cfg.hazard_window_hours))
        if intel_retention < longest_window:
            raise ValueError("intel_retention must cover the longest detector window")

        self._price_threshold = price_anomaly_threshold
        self._price_min_count = price_baseline_min_count

        self._registry_lock = asyncio.Lock()
        self._zone_locks: dict[str, asyncio.Lock] = {}
        self._states: dict[str, ZoneConfidenceState] = {}
        self._baselines: dict[str, PriceBaseline] = {}
        self._intel_log = IntelLog(intel_retention)
        self._audit = AuditLog()

    @property
    def engine(self) -> ZoneConfidenceEngine:
        return self._engine

    # ── Public API ───────────────────────────────────────────────────────

    async def ingest(
        self,
        intel: IntelSubmission,
        now: datetime | None = None,
    ) -> ConfidenceUpdate:
        """Apply one report to its zone and persist the result.

        This is the single entry point used by the HTTP and WebSocket
        ingestion routes.  A report whose id is still held in the intel log
        is a retry: the current state comes back marked ``duplicate`` and
        the engine is not run again.
        """
        now = ensure_aware(now or utc_now())
        lock = await self._lock_for(intel.zone_id)
        async with lock:
            if self._intel_log.contains(intel.zone_id, intel.id):
                logger.info("Ignoring duplicate intel %s for zone %s", intel.id, intel.zone_id)
                return self._unchanged(self._states[intel.zone_id])

            intel = self._received(intel, now)
            current = self._current_or_create(intel.zone_id, now)
            recent = self._intel_log.recent(intel.zone_id, now)
            price_anomaly = self._observe_price(intel)

            update = self._engine.apply_intel(current, intel, recent, now, price_anomaly)

            self._intel_log.append(intel)
            self._intel_log.prune(intel.zone_id, now)
            self._commit(update)
            logger.debug(
                "Ingested intel %s (%s) → zone %s score %.1f → %.1f",
                intel.id,
                intel.type.value,
                intel.zone_id,
                current.score,
                update.state.score,
            )
            return update

    async def tick(self, zone_id: str, now: datetime | None = None) -> ConfidenceUpdate:
        """Run one scheduled decay step for *zone_id*."""
        now = ensure_aware(now or utc_now())
        lock = await self._lock_for(zone_id)
        async with lock:
            current = self._current_or_create(zone_id, now)
            update = self._engine.apply_tick(current, now)
            self._intel_log.prune(zone_id, now)
            self._commit(update)
            return update

    async def run_decay_sweep(self, now: datetime | None = None) -> DecaySweepResult:
        """Tick every known zone concurrently (serialised per zone)."""
        now = ensure_aware(now or utc_now())
        async with self._registry_lock:
            zone_ids = sorted(self._states)

        updates = await asyncio.gather(*(self.tick(zid, now) for zid in zone_ids))

        result = DecaySweepResult(
            zones_processed=len(updates),
            zones_decayed=sum(1 for u in updates if u.factors.decay_applied > 0),
            hazards_expired=sum(1 for u in updates if u.hazard_expired),
            anomalies_resolved=sum(1 for u in updates if u.anomaly_resolved),
            degraded_zones=[u.state.zone_id for u in updates if u.state.state == ZoneState.DEGRADED],
            offline_zones=[u.state.zone_id for u in updates if u.state.state == ZoneState.OFFLINE],
        )
        logger.info(
            "Decay sweep: %d zones, %d decayed, %d hazards expired, %d anomalies resolved",
            result.zones_processed,
            result.zones_decayed,
            result.hazards_expired,
            result.anomalies_resolved,
        )
        return result

    async def get(self, zone_id: str) -> ZoneConfidenceState | None:
        """Current state for *zone_id*, or None if never evaluated."""
        async with self._registry_lock:
            return self._states.get(zone_id)

    async def snapshot(self) -> Mapping[str, ZoneConfidenceState]:
        """Read-only point-in-time copy of every zone's state."""
        async with self._registry_lock:
            return MappingProxyType(dict(self._states))

    async def audit_trail(self, zone_id: str, limit: int | None = None) -> list[AuditEntry]:
        lock = await self._lock_for(zone_id)
        async with lock:
            return self._audit.entries(zone_id, limit)

    async def price_baseline(self, zone_id: str) -> PriceBaseline:
        lock = await self._lock_for(zone_id)
        async with lock:
            return self._baselines.get(zone_id, PriceBaseline())

    async def zone_count(self) -> int:
        async with self._registry_lock:
            return len(self._states)

    async def confidence_summary(self) -> ConfidenceSummary:
        """Aggregate counts by level and state.  Mutates nothing."""
        async with self._registry_lock:
            states = list(self._states.values())

        by_level = {level.value: 0 for level in ConfidenceLevel}
        by_state = {state.value: 0 for state in ZoneState}
        for s in states:
            by_level[s.level.value] += 1
            by_state[s.state.value] += 1

        return ConfidenceSummary(
            total_zones=len(states),
            by_level=by_level,
            by_state=by_state,
            average_score=sum(s.score for s in states) / len(states) if states else 0.0,
            hazard_zones=sum(1 for s in states if s.hazard_active),
        )

    # ── Internals ────────────────────────────────────────────────────────

    async def _lock_for(self, zone_id: str) -> asyncio.Lock:
        async with self._registry_lock:
            lock = self._zone_locks.get(zone_id)
            if lock is None:
                lock = asyncio.Lock()
                self._zone_locks[zone_id] = lock
            return lock

    def _current_or_create(self, zone_id: str, now: datetime) -> ZoneConfidenceState:
        """Must be called while holding the zone's lock."""
        current = self._states.get(zone_id)
        if current is not None:
            return current
        created = self._engine.initialise(zone_id, now)
        self._commit(created)
        logger.info("Created confidence state for zone %s", zone_id)
        return created.state

    @staticmethod
    def _received(intel: IntelSubmission, now: datetime) -> IntelSubmission:
        """Cap a future-dated report at receipt time so it ages out of the windows."""
        if intel.created_at <= now:
            return intel
        logger.debug("Intel %s dated ahead of receipt; capped at %s", intel.id, now.isoformat())
        return intel.model_copy(update={"created_at": now})

    def _unchanged(self, current: ZoneConfidenceState) -> ConfidenceUpdate:
        """Must be called while holding the zone's lock."""
        return ConfidenceUpdate(
            state=current,
            factors=ConfidenceFactors(base_score=current.score, final_score=current.score),
            audit=self._audit.latest(current.zone_id),
            duplicate=True,
        )

    def _observe_price(self, intel: IntelSubmission) -> bool:
        """Check a reported price against the baseline, then fold it in.

        Must be called while holding the zone's lock.
        """
        price = intel.reported_price
        if price is None:
            return False
        baseline = self._baselines.get(intel.zone_id, PriceBaseline())
        anomalous = detect_price_anomaly(
            price,
            baseline.mean,
            baseline.count,
            threshold=self._price_threshold,
            min_count=self._price_min_count,
        )
        self._baselines[intel.zone_id] = baseline.observe(price)
        return anomalous

    def _commit(self, update: ConfidenceUpdate) -> None:
        """Must be called while holding the zone's lock."""
        self._states[update.state.zone_id] = update.state
        self._audit.append(update.audit)

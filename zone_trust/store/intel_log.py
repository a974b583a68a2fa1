"""Per-zone log of recently received intel.

Feeds the trailing-window lookups of the conflict detector and hazard
aggregator, and the duplicate-id check on ingestion.  Reports older than
the retention window are pruned on every write to the zone.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from zone_trust.domain.intel import IntelSubmission
from zone_trust.foundation.clock import ensure_aware


class IntelLog:
    """Retention-bounded report history.  Callers hold the zone lock."""

    def __init__(self, retention: timedelta = timedelta(hours=24)) -> None:
        if retention <= timedelta(0):
            raise ValueError("retention must be positive")
        self._retention = retention
        self._by_zone: dict[str, list[IntelSubmission]] = {}

    @property
    def retention(self) -> timedelta:
        return self._retention

    def append(self, intel: IntelSubmission) -> None:
        self._by_zone.setdefault(intel.zone_id, []).append(intel)

    def recent(self, zone_id: str, now: datetime) -> list[IntelSubmission]:
        """Reports for *zone_id* inside the retention window ending at *now*."""
        since = ensure_aware(now) - self._retention
        return [i for i in self._by_zone.get(zone_id, []) if i.created_at >= since]

    def prune(self, zone_id: str, now: datetime) -> int:
        """Drop reports older than the retention window.  Returns the count dropped."""
        history = self._by_zone.get(zone_id)
        if not history:
            return 0
        kept = self.recent(zone_id, now)
        dropped = len(history) - len(kept)
        if kept:
            self._by_zone[zone_id] = kept
        else:
            del self._by_zone[zone_id]
        return dropped

    def count(self, zone_id: str) -> int:
        return len(self._by_zone.get(zone_id, []))

    def contains(self, zone_id: str, intel_id: str) -> bool:
        """Whether a report with *intel_id* is still held for *zone_id*."""
        return any(i.id == intel_id for i in self._by_zone.get(zone_id, []))

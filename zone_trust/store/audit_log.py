"""Append-only audit trail of confidence transitions, keyed by zone id.

The confidence state holds only the current snapshot; history lives
here.  Entries are never edited or removed.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from zone_trust.domain.confidence import AuditEntry

logger = logging.getLogger(__name__)


class AuditLog:
    """In-memory append-only log.

    Not internally locked: the confidence store appends while holding the
    owning zone's lock, so entries for one zone arrive in order.
    """

    def __init__(self) -> None:
        self._entries: dict[str, list[AuditEntry]] = defaultdict(list)

    def append(self, entry: AuditEntry) -> None:
        self._entries[entry.zone_id].append(entry)
        logger.debug(
            "Audit %s zone=%s %.1f → %.1f",
            entry.action.value, entry.zone_id, entry.score_before, entry.score_after,
        )

    def entries(self, zone_id: str, limit: int | None = None) -> list[AuditEntry]:
        """Entries for *zone_id*, oldest first.  *limit* keeps the newest N."""
        history = self._entries.get(zone_id, [])
        if limit is not None:
            history = history[-limit:] if limit > 0 else []
        return list(history)

    def latest(self, zone_id: str) -> AuditEntry | None:
        history = self._entries.get(zone_id)
        return history[-1] if history else None

    def __len__(self) -> int:
        return sum(len(v) for v in self._entries.values())

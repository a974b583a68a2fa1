"""Timezone-aware clock utilities.

All timestamps in zone-trust MUST be UTC-aware.  This module is the
single source of "now" so tests can monkey-patch it trivially.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; aware values pass through unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def hours_between(earlier: datetime, later: datetime) -> float:
    """Elapsed hours from *earlier* to *later* (negative if reversed)."""
    return (ensure_aware(later) - ensure_aware(earlier)).total_seconds() / 3600.0

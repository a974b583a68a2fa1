"""Random ID generation for domain objects."""

from __future__ import annotations

from uuid import uuid4


def new_id() -> str:
    """Generate a new random UUID v4 string for domain objects."""
    return str(uuid4())

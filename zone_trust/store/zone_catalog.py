"""Read-only zone catalog, loadable from a city-pack JSON file.

Accepted file shapes: a bare list of zones, or an object with a
``"zones"`` list (the city-pack layout).  Catalog order is preserved and
is the ranker's tie-break order.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from zone_trust.domain.zone import Zone

logger = logging.getLogger(__name__)


class ZoneCatalog:
    def __init__(self, zones: Iterable[Zone] = ()) -> None:
        self._zones: dict[str, Zone] = {}
        for zone in zones:
            if zone.id in self._zones:
                raise ValueError(f"duplicate zone id: {zone.id}")
            self._zones[zone.id] = zone

    @classmethod
    def from_file(cls, path: str | Path) -> ZoneCatalog:
        """Load and validate a catalog file.

        Raises:
            ValueError: If the file is not a recognised catalog shape.
            pydantic.ValidationError: If any zone fails validation.
        """
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            raw = raw.get("zones")
        if not isinstance(raw, list):
            raise ValueError(f"{path}: expected a list of zones or an object with 'zones'")

        catalog = cls(Zone.model_validate(item) for item in raw)
        logger.info("Loaded %d zone(s) from %s", len(catalog), path)
        return catalog

    def get(self, zone_id: str) -> Zone | None:
        return self._zones.get(zone_id)

    def all(self) -> list[Zone]:
        return list(self._zones.values())

    def __contains__(self, zone_id: object) -> bool:
        return zone_id in self._zones

    def __iter__(self) -> Iterator[Zone]:
        return iter(self._zones.values())

    def __len__(self) -> int:
        return len(self._zones)

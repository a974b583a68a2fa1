"""Abstract base for weather adapters.

Weather adapters normalise raw payloads from weather providers into the
canonical CurrentWeather reading.

Architectural rules:
    1. Adapters must NOT mutate the incoming payload dict.
    2. adapt() must return a fully valid CurrentWeather or raise ValueError.
    3. Adapters do no network I/O.  Fetching belongs to the caller.
    4. No scoring logic lives inside an adapter, only field mapping.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from zone_trust.domain.weather import CurrentWeather


class WeatherAdapter(ABC):
    """Base class for converting raw provider payloads into CurrentWeather."""

    @abstractmethod
    def can_handle(self, raw: dict[str, Any]) -> bool:
        """Return True if this adapter knows how to translate *raw*.

        Must be a fast, non-destructive check (e.g. key presence).
        """
        ...

    @abstractmethod
    def adapt(self, raw: dict[str, Any]) -> CurrentWeather:
        """Translate a raw payload dict into a validated CurrentWeather.

        Raises:
            ValueError: If the payload cannot be normalised.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        ...

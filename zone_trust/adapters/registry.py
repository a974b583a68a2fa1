"""Weather adapter registry — selects the adapter for a raw payload.

Adapters are tried in registration order; the first whose can_handle()
returns True wins.  Fail fast if nothing matches.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from zone_trust.adapters.base import WeatherAdapter
from zone_trust.adapters.open_meteo import OpenMeteoAdapter
from zone_trust.domain.weather import CurrentWeather

logger = logging.getLogger(__name__)


class NoAdapterFoundError(Exception):
    """Raised when no registered adapter can handle a payload."""


class AdaptationError(Exception):
    """Raised when a matched adapter fails to translate the payload."""

    def __init__(self, adapter_name: str, reason: str) -> None:
        self.adapter_name = adapter_name
        self.reason = reason
        super().__init__(f"Adapter '{adapter_name}' failed: {reason}")


class CanonicalWeatherAdapter(WeatherAdapter):
    """Passes through payloads already shaped like CurrentWeather."""

    @property
    def source_name(self) -> str:
        return "canonical"

    def can_handle(self, raw: dict[str, Any]) -> bool:
        return "category" in raw and "apparent_temperature" in raw

    def adapt(self, raw: dict[str, Any]) -> CurrentWeather:
        return CurrentWeather.model_validate(raw)


class WeatherAdapterRegistry:
    """Ordered collection of weather adapters.

    Usage:
        registry = WeatherAdapterRegistry()
        registry.register(CanonicalWeatherAdapter())
        registry.register(OpenMeteoAdapter())

        weather = registry.adapt(raw_payload)
    """

    def __init__(self) -> None:
        self._adapters: list[WeatherAdapter] = []

    def register(self, adapter: WeatherAdapter) -> None:
        self._adapters.append(adapter)
        logger.info("Registered weather adapter: %s", adapter.source_name)

    def adapt(self, raw: dict[str, Any]) -> CurrentWeather:
        """Route *raw* through the first matching adapter.

        Raises:
            NoAdapterFoundError: If no adapter's can_handle() returns True.
            AdaptationError: If the matched adapter fails to translate.
        """
        for adapter in self._adapters:
            if adapter.can_handle(raw):
                try:
                    return adapter.adapt(raw)
                except (ValidationError, ValueError, TypeError) as exc:
                    logger.warning(
                        "Weather adapter '%s' rejected payload: %s",
                        adapter.source_name,
                        exc,
                    )
                    raise AdaptationError(adapter.source_name, str(exc)) from exc

        raise NoAdapterFoundError(
            f"No weather adapter can handle payload with keys: {sorted(raw.keys())}"
        )

    @property
    def adapter_names(self) -> list[str]:
        return [a.source_name for a in self._adapters]


def default_registry() -> WeatherAdapterRegistry:
    """Registry with the canonical and Open-Meteo adapters, in that order."""
    registry = WeatherAdapterRegistry()
    registry.register(CanonicalWeatherAdapter())
    registry.register(OpenMeteoAdapter())
    return registry

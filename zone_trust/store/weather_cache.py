"""Caller-owned TTL cache for weather readings.

Keys are coordinates rounded to two decimals (≈1 km), so nearby requests
share one reading.  Expired entries are ignored by get() but only
removed by an explicit evict_expired() call.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

from zone_trust.domain.weather import CurrentWeather
from zone_trust.foundation.clock import ensure_aware, utc_now
from zone_trust.foundation.geo import round_coordinate

logger = logging.getLogger(__name__)

CacheKey = tuple[float, float]
WeatherFetcher = Callable[[float, float], Awaitable[CurrentWeather | None]]


class WeatherCache:
    def __init__(self, ttl: timedelta = timedelta(minutes=15)) -> None:
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        self._ttl = ttl
        self._entries: dict[CacheKey, tuple[CurrentWeather, datetime]] = {}

    @staticmethod
    def key_for(lat: float, lon: float) -> CacheKey:
        return round_coordinate(lat), round_coordinate(lon)

    def get(self, lat: float, lon: float, now: datetime | None = None) -> CurrentWeather | None:
        """Cached reading for the location, or None if absent or expired."""
        entry = self._entries.get(self.key_for(lat, lon))
        if entry is None:
            return None
        weather, expires_at = entry
        if expires_at <= ensure_aware(now or utc_now()):
            return None
        return weather

    def put(
        self,
        lat: float,
        lon: float,
        weather: CurrentWeather,
        now: datetime | None = None,
    ) -> None:
        expires_at = ensure_aware(now or utc_now()) + self._ttl
        self._entries[self.key_for(lat, lon)] = (weather, expires_at)

    async def get_or_fetch(
        self,
        lat: float,
        lon: float,
        fetch: WeatherFetcher,
        now: datetime | None = None,
    ) -> CurrentWeather | None:
        """Return the cached reading or call *fetch* with rounded coordinates.

        A None from *fetch* (provider unavailable) is not cached.
        """
        cached = self.get(lat, lon, now)
        if cached is not None:
            return cached

        key_lat, key_lon = self.key_for(lat, lon)
        weather = await fetch(key_lat, key_lon)
        if weather is None:
            logger.warning("Weather unavailable for %.2f,%.2f", key_lat, key_lon)
            return None
        self.put(lat, lon, weather, now)
        return weather

    def evict_expired(self, now: datetime | None = None) -> int:
        """Remove expired entries.  Returns how many were removed."""
        cutoff = ensure_aware(now or utc_now())
        expired = [k for k, (_, expires_at) in self._entries.items() if expires_at <= cutoff]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Evicted %d expired weather reading(s)", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

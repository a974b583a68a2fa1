"""OpenMeteoAdapter — translates Open-Meteo forecast responses.

Expected raw format (``/v1/forecast?current=...``):
{
    "latitude": 13.75,
    "longitude": 100.5,
    "current": {
        "time": "2026-02-13T14:00",
        "temperature_2m": 31.2,
        "relative_humidity_2m": 70,
        "apparent_temperature": 36.1,
        "precipitation": 0.0,
        "weather_code": 2,
        "wind_speed_10m": 12.4,
        "wind_gusts_10m": 25.0,
        "is_day": 1
    }
}
"""

from __future__ import annotations

from typing import Any

from zone_trust.adapters.base import WeatherAdapter
from zone_trust.domain.enums import WeatherCategory
from zone_trust.domain.weather import CurrentWeather

OPEN_METEO_BASE_URL = "https://api.open-meteo.com/v1/forecast"

CURRENT_FIELDS = (
    "temperature_2m",
    "relative_humidity_2m",
    "apparent_temperature",
    "precipitation",
    "weather_code",
    "wind_speed_10m",
    "wind_gusts_10m",
    "is_day",
)


def weather_code_to_category(code: int) -> WeatherCategory:
    """Map a WMO weather interpretation code to a WeatherCategory."""
    if code == 0:
        return WeatherCategory.CLEAR
    if code in (1, 2):
        return WeatherCategory.PARTLY_CLOUDY
    if code == 3:
        return WeatherCategory.CLOUDY
    if 45 <= code <= 48:
        return WeatherCategory.FOG
    if 51 <= code <= 55:
        return WeatherCategory.DRIZZLE
    if 61 <= code <= 65 or 80 <= code <= 82:
        return WeatherCategory.RAIN
    if code in (66, 67):
        # Freezing rain
        return WeatherCategory.HEAVY_RAIN
    if 71 <= code <= 77 or code in (85, 86):
        return WeatherCategory.SNOW
    if 95 <= code <= 99:
        return WeatherCategory.THUNDERSTORM
    return WeatherCategory.CLOUDY


def forecast_params(lat: float, lon: float) -> dict[str, str]:
    """Query parameters for a current-conditions request."""
    return {
        "latitude": str(lat),
        "longitude": str(lon),
        "current": ",".join(CURRENT_FIELDS),
        "timezone": "auto",
    }


class OpenMeteoAdapter(WeatherAdapter):
    """Maps Open-Meteo ``current`` blocks to CurrentWeather."""

    @property
    def source_name(self) -> str:
        return "open_meteo"

    def can_handle(self, raw: dict[str, Any]) -> bool:
        current = raw.get("current")
        return isinstance(current, dict) and "temperature_2m" in current

    def adapt(self, raw: dict[str, Any]) -> CurrentWeather:
        current = raw.get("current")
        if not isinstance(current, dict):
            raise ValueError("open_meteo payload missing 'current' block")

        temperature = current.get("temperature_2m")
        if temperature is None:
            raise ValueError("open_meteo payload missing 'temperature_2m'")

        code = current.get("weather_code")
        if code is None:
            raise ValueError("open_meteo payload missing 'weather_code'")
        code = int(code)

        return CurrentWeather.model_validate({
            "temperature": temperature,
            "apparent_temperature": current.get("apparent_temperature", temperature),
            "humidity": current.get("relative_humidity_2m", 0.0),
            "precipitation": current.get("precipitation", 0.0),
            "wind_speed": current.get("wind_speed_10m", 0.0),
            "wind_gusts": current.get("wind_gusts_10m", 0.0),
            "weather_code": code,
            "category": weather_code_to_category(code).value,
            "is_day": current.get("is_day", 1) == 1,
            "observed_at": current.get("time"),
        })

"""Weather → scoring modifiers.

Pure derivation from a resolved CurrentWeather reading.  Weather is never
stored per zone; it is applied at ranking time only.

Rules are evaluated in four passes (temperature, precipitation, wind,
daylight).  Within a pass the first matching branch wins.  Across passes
the first warning and the first recommendation set are kept.
"""

from __future__ import annotations

from zone_trust.domain.enums import WeatherCategory
from zone_trust.domain.weather import CurrentWeather, TextureWeatherWeight, WeatherModifiers
from zone_trust.foundation.numeric import clamp, round_half_up

WALKABILITY_RANGE = (-30.0, 10.0)
SAFETY_RANGE = (-20.0, 5.0)

WEATHER_ICONS: dict[WeatherCategory, str] = {
    WeatherCategory.CLEAR: "☀️",
    WeatherCategory.PARTLY_CLOUDY: "⛅",
    WeatherCategory.CLOUDY: "☁️",
    WeatherCategory.FOG: "🌫️",
    WeatherCategory.DRIZZLE: "🌦️",
    WeatherCategory.RAIN: "🌧️",
    WeatherCategory.HEAVY_RAIN: "⛈️",
    WeatherCategory.SNOW: "❄️",
    WeatherCategory.THUNDERSTORM: "⛈️",
}


def weather_icon(category: WeatherCategory) -> str:
    return WEATHER_ICONS.get(category, "🌡️")


def calculate_weather_modifiers(weather: CurrentWeather) -> WeatherModifiers:
    """Derive walkability/safety modifiers and texture weights."""
    walk = 0.0
    safety = 0.0
    warning: str | None = None
    recommendation: str | None = None
    weights = {
        "outdoor_penalty": 0.0,
        "indoor_bonus": 0.0,
        "cafe_boost": 0.0,
        "park_penalty": 0.0,
    }

    # ── Temperature (feels-like) ─────────────────────────────────────────
    feels = weather.apparent_temperature
    if feels > 35:
        walk -= 20
        safety -= 10
        warning = "EXTREME HEAT: Limit outdoor exposure"
        weights.update(outdoor_penalty=0.5, indoor_bonus=0.3, cafe_boost=0.4, park_penalty=0.6)
        recommendation = "Seek air-conditioned venues. Stay hydrated."
    elif feels > 32:
        walk -= 10
        weights.update(outdoor_penalty=0.3, indoor_bonus=0.2, cafe_boost=0.3, park_penalty=0.3)
        recommendation = "Hot conditions. Consider indoor alternatives."
    elif feels < 0:
        walk -= 20
        safety -= 10
        warning = "FREEZING: Watch for ice"
        weights.update(outdoor_penalty=0.4, indoor_bonus=0.3)
    elif feels < 5:
        walk -= 10
        weights.update(outdoor_penalty=0.2, indoor_bonus=0.2, cafe_boost=0.3)
        recommendation = "Cold conditions. Dress warmly."

    # ── Precipitation / visibility ───────────────────────────────────────
    category = weather.category
    if category in (WeatherCategory.HEAVY_RAIN, WeatherCategory.THUNDERSTORM):
        walk -= 30
        safety -= 20
        warning = warning or "SEVERE WEATHER: Seek shelter"
        weights.update(outdoor_penalty=0.8, indoor_bonus=0.5, cafe_boost=0.5, park_penalty=0.9)
        recommendation = recommendation or "Wait for conditions to improve before exploring."
    elif category == WeatherCategory.RAIN:
        walk -= 15
        safety -= 5
        weights.update(outdoor_penalty=0.4, indoor_bonus=0.3, cafe_boost=0.4, park_penalty=0.5)
        recommendation = recommendation or "Rain gear recommended. Indoor venues preferred."
    elif category == WeatherCategory.DRIZZLE:
        walk -= 5
        weights.update(outdoor_penalty=0.2, indoor_bonus=0.1, cafe_boost=0.2, park_penalty=0.2)
    elif category == WeatherCategory.SNOW:
        walk -= 20
        safety -= 10
        weights.update(outdoor_penalty=0.5, indoor_bonus=0.3, park_penalty=0.4)
        recommendation = recommendation or "Snowy conditions. Watch footing."
    elif category == WeatherCategory.FOG:
        walk -= 5
        safety -= 10
        weights["outdoor_penalty"] = 0.1
        warning = warning or "LOW VISIBILITY: Exercise caution"
    elif category in (WeatherCategory.CLEAR, WeatherCategory.PARTLY_CLOUDY):
        walk += 5
        safety += 5
        # Negative penalty: parks score higher in good weather
        weights["park_penalty"] = -0.2

    # ── Wind ─────────────────────────────────────────────────────────────
    if weather.wind_gusts > 50:
        walk -= 15
        safety -= 10
        warning = warning or "HIGH WINDS: Secure loose items"
        weights["outdoor_penalty"] = max(weights["outdoor_penalty"], 0.3)
    elif weather.wind_speed > 30:
        walk -= 5
        weights["outdoor_penalty"] = max(weights["outdoor_penalty"], 0.1)

    # ── Daylight ─────────────────────────────────────────────────────────
    if not weather.is_day:
        walk -= 5
        safety -= 5

    return WeatherModifiers(
        walkability_modifier=clamp(walk, *WALKABILITY_RANGE),
        safety_modifier=clamp(safety, *SAFETY_RANGE),
        texture_weight=TextureWeatherWeight(**weights),
        warning=warning,
        recommendation=recommendation,
    )


def format_weather_summary(weather: CurrentWeather, modifiers: WeatherModifiers) -> str:
    """One-line human summary, e.g. ``"🌧️ 24°C, rain - Rain gear recommended..."``."""
    summary = f"{weather_icon(weather.category)} {round_half_up(weather.temperature)}°C, {weather.category.label}"
    if modifiers.recommendation:
        summary += f" - {modifiers.recommendation}"
    return summary

"""Weather boundary models.

CurrentWeather is the resolved reading handed to this package by the
weather collaborator.  WeatherModifiers is what the modifier adapter
derives from it for zone scoring.  Neither is persisted.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from zone_trust.domain.enums import WeatherCategory
from zone_trust.foundation.clock import ensure_aware


class CurrentWeather(BaseModel):
    """A point-in-time weather reading at a location."""

    temperature: float = Field(..., description="Air temperature, °C")
    apparent_temperature: float = Field(..., description="Feels-like temperature, °C")
    humidity: float = Field(default=0.0, ge=0.0, le=100.0)
    precipitation: float = Field(default=0.0, ge=0.0, description="mm in the current interval")
    wind_speed: float = Field(default=0.0, ge=0.0, description="km/h")
    wind_gusts: float = Field(default=0.0, ge=0.0, description="km/h")
    weather_code: int = Field(default=0, ge=0, description="WMO interpretation code")
    category: WeatherCategory
    is_day: bool = True
    observed_at: datetime | None = None

    model_config = {"frozen": True}

    @field_validator("observed_at")
    @classmethod
    def observed_at_must_be_aware(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v) if v is not None else None


class TextureWeatherWeight(BaseModel):
    """How strongly the current weather favours indoor over outdoor zones."""

    outdoor_penalty: float = 0.0
    indoor_bonus: float = 0.0
    cafe_boost: float = 0.0
    park_penalty: float = Field(default=0.0, description="Negative in good weather (boosts parks)")

    model_config = {"frozen": True}


class WeatherModifiers(BaseModel):
    """Scoring adjustments derived from a CurrentWeather reading."""

    walkability_modifier: float = Field(..., ge=-30.0, le=10.0)
    safety_modifier: float = Field(..., ge=-20.0, le=5.0)
    texture_weight: TextureWeatherWeight = Field(default_factory=TextureWeatherWeight)
    warning: str | None = None
    recommendation: str | None = None

    model_config = {"frozen": True}

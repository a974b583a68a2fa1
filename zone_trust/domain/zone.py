"""Zone catalog models.

Zones, their geometry and texture classification are produced by the
OpenStreetMap ingestion pipeline.  This package only reads them.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from zone_trust.domain.enums import TextureType


class GeoPoint(BaseModel):
    """A WGS84 coordinate."""

    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)

    model_config = {"frozen": True}


class ZoneTexture(BaseModel):
    """Character fingerprint of a zone."""

    primary: TextureType
    secondary: TextureType | None = None
    tags: list[str] = Field(default_factory=list)
    walkability: float = Field(default=50.0, ge=0.0, le=100.0)
    safety_score: float = Field(default=50.0, ge=0.0, le=100.0)
    vibe_keywords: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class Zone(BaseModel):
    """A bounded geographic area tracked by the application."""

    id: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=256)
    city_code: str = Field(default="", max_length=16)
    center: GeoPoint
    radius_m: float = Field(default=500.0, gt=0.0)
    texture: ZoneTexture

    model_config = {"frozen": True}

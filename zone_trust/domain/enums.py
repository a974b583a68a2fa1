"""Controlled enumerations for the zone-trust domain.

Every categorical field in the domain MUST reference an enum defined here.
Free-form strings are not acceptable for classification fields.
"""

from __future__ import annotations

from enum import Enum


class IntelType(str, Enum):
    """Report categories a contributor may submit about a zone."""

    PRICE_SUBMISSION = "PRICE_SUBMISSION"
    HASSLE_REPORT = "HASSLE_REPORT"
    CONSTRUCTION = "CONSTRUCTION"
    CROWD_SURGE = "CROWD_SURGE"
    QUIET_CONFIRMED = "QUIET_CONFIRMED"
    HAZARD_REPORT = "HAZARD_REPORT"
    VERIFICATION = "VERIFICATION"


class ConfidenceLevel(str, Enum):
    """Coarse bucket derived purely from the numeric score."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    DEGRADED = "DEGRADED"
    UNKNOWN = "UNKNOWN"


class ZoneState(str, Enum):
    """Operational state of a zone, orthogonal to its confidence level."""

    ACTIVE = "ACTIVE"
    DEGRADED = "DEGRADED"
    OFFLINE = "OFFLINE"


class AnomalyReason(str, Enum):
    PRICE_DEVIATION = "PRICE_DEVIATION"


class AuditAction(str, Enum):
    """What kind of event produced an audit entry."""

    CREATED = "CREATED"
    INTEL = "INTEL"
    TICK = "TICK"


class TextureType(str, Enum):
    """Character classification of a zone, produced by the OSM pipeline."""

    MARKET_CHAOS = "MARKET_CHAOS"
    TEMPLE_PEACE = "TEMPLE_PEACE"
    NIGHTLIFE_ELECTRIC = "NIGHTLIFE_ELECTRIC"
    CAFE_CULTURE = "CAFE_CULTURE"
    TRANSIT_HUB = "TRANSIT_HUB"
    TOURIST_DENSE = "TOURIST_DENSE"
    LOCAL_AUTHENTIC = "LOCAL_AUTHENTIC"
    PARK_REFUGE = "PARK_REFUGE"
    COMMERCIAL = "COMMERCIAL"
    RESIDENTIAL = "RESIDENTIAL"
    MIXED = "MIXED"

    @property
    def label(self) -> str:
        """Lower-case, space-separated form for human-readable text."""
        return self.value.lower().replace("_", " ")


class TimePeriod(str, Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"
    NIGHT = "NIGHT"


class TimePreference(str, Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"
    NIGHT = "NIGHT"
    ANY = "ANY"


class CrowdTolerance(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ActivityLevel(str, Enum):
    RELAXED = "RELAXED"
    MODERATE = "MODERATE"
    ACTIVE = "ACTIVE"


class WeatherCategory(str, Enum):
    """Precipitation/visibility category of a weather reading."""

    CLEAR = "CLEAR"
    PARTLY_CLOUDY = "PARTLY_CLOUDY"
    CLOUDY = "CLOUDY"
    FOG = "FOG"
    DRIZZLE = "DRIZZLE"
    RAIN = "RAIN"
    HEAVY_RAIN = "HEAVY_RAIN"
    SNOW = "SNOW"
    THUNDERSTORM = "THUNDERSTORM"

    @property
    def label(self) -> str:
        return self.value.lower().replace("_", " ")

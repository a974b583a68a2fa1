"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "zone-trust"
    debug: bool = False
    log_level: str = "INFO"
    zone_catalog_path: str | None = None

    # Decay
    decay_rate_per_day: float = 0.02
    decay_floor: float = 20.0
    decay_grace_hours: float = 24.0

    # Intel boost
    intel_boost_base: float = 5.0
    intel_boost_max: float = 15.0
    intel_boost_cap_24h: float = 30.0
    min_trust_weight: float = 0.3
    max_trust_weight: float = 1.5

    # Conflict detection
    conflict_threshold: int = 1
    conflict_window_hours: float = 6.0
    conflict_penalty: float = 15.0

    # Hazard kill switch
    hazard_threshold_reports: int = 2
    hazard_window_hours: float = 24.0
    hazard_duration_days: float = 7.0
    hazard_penalty: float = 30.0

    # Anomalies
    anomaly_penalty: float = 10.0
    anomaly_resolve_hours: float = 48.0
    price_anomaly_threshold: float = 0.5
    price_baseline_min_count: int = 3

    # Intel retention (longest window any detector needs)
    intel_retention_hours: float = 24.0

    # Ranker weights
    ranking_weight_texture: float = 0.30
    ranking_weight_confidence: float = 0.25
    ranking_weight_time: float = 0.15
    ranking_weight_weather: float = 0.15
    ranking_weight_distance: float = 0.15
    ranking_exclude_degraded: bool = False

    # Weather
    weather_cache_ttl_minutes: int = 15

    model_config = {"env_prefix": "ZONE_TRUST_"}


settings = Settings()

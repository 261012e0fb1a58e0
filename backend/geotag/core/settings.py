from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GEOTAG_",
        case_sensitive=False,
    )

    log_level: str = "INFO"

    # Reverse geocoding (OpenStreetMap Nominatim, no API key)
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    # Nominatim's usage policy requires an identifying User-Agent.
    nominatim_user_agent: str = "geotag/0.1 (community issue tracker)"
    nominatim_zoom: int = 14
    nominatim_timeout_s: float = 10.0
    nominatim_max_retries: int = 3
    nominatim_backoff_base_s: float = 0.5
    describe_cache_max_entries: int = 4096

    # CORS (local web dev)
    cors_allow_origin: str = "http://localhost:3000"
    cors_allow_credentials: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()

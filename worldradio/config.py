"""Application settings."""
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from . import __version__


class Settings(BaseSettings):
    """World Radio settings, read from ``WORLDRADIO_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WORLDRADIO_",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "World Radio"
    app_version: str = __version__
    log_level: str = "INFO"
    log_format: str = Field("console", pattern="^(console|json)$")
    api_prefix: str = "/api"

    # Radio directory upstream
    upstream_base_url: str = "https://de1.api.radio-browser.info"
    upstream_timeout_seconds: float = 10.0
    user_agent: str = f"worldradio/{__version__}"
    allowed_endpoint_prefixes: List[str] = ["/json/"]

    top_station_limit: int = Field(100, ge=1)
    country_limit: int = Field(50, ge=1)
    # "directory" asks the upstream for country counts, "stations" derives them from the station batch
    country_source: str = Field("directory", pattern="^(directory|stations)$")

    stream_probe_timeout_seconds: float = 10.0
    default_volume: float = Field(0.7, ge=0.0, le=1.0)


app_settings = Settings()

"""Station model for radio directory records."""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Station(BaseModel):
    """A single internet radio stream entry from the directory."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Directory station UUID")
    name: str = Field("", description="Display name")
    country: str = Field("", description="Country name, used for filtering")
    tags: str = Field("", description="Comma separated free-text tags")
    stream_url: Optional[str] = Field(None, description="Playable stream URL")
    icon_url: Optional[str] = Field(None, description="Station favicon URL")
    vote_count: int = Field(0, description="Directory votes, used for ranking")
    country_code: Optional[str] = Field(None, description="ISO 3166-1 country code")

    @field_validator("name", "country", "tags", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("stream_url", "icon_url", "country_code", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_directory(cls, record: Dict[str, Any]) -> "Station":
        """Build a Station from a raw radio-browser station record.

        ``url_resolved`` is preferred as the stream URL, falling back to ``url``.
        """
        return cls(
            id=record.get("stationuuid") or "",
            name=record.get("name"),
            country=record.get("country"),
            tags=record.get("tags"),
            stream_url=(record.get("url_resolved") or "").strip() or record.get("url"),
            icon_url=record.get("favicon"),
            vote_count=record.get("votes") or 0,
            country_code=record.get("countrycode"),
        )

    def __repr__(self) -> str:
        return f"<Station(id={self.id}, name='{self.name}', country='{self.country}')>"

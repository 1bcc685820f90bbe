"""Country aggregate model."""
from typing import Any, Dict

from pydantic import BaseModel, Field


class CountryAggregate(BaseModel):
    """A country name with the number of stations the directory lists for it."""

    name: str = Field(..., description="Country name")
    station_count: int = Field(0, ge=0, description="Number of stations")

    @classmethod
    def from_directory(cls, record: Dict[str, Any]) -> "CountryAggregate":
        """Build an aggregate from a radio-browser ``/json/countries`` record."""
        return cls(name=record.get("name") or "", station_count=max(int(record.get("stationcount") or 0), 0))

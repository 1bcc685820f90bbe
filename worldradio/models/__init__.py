"""Models for the radio player."""
from .station import Station
from .country import CountryAggregate

__all__ = ["Station", "CountryAggregate"]

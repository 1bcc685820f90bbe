"""Pure derivation of the visible station list."""
from typing import Iterable, List, Optional

from ..models import Station


def matches_search(station: Station, term: Optional[str]) -> bool:
    """Case-insensitive substring match against name, country and tags."""
    if not term:
        return True
    needle = term.lower()
    return (
        needle in station.name.lower()
        or needle in station.country.lower()
        or needle in (station.tags or "").lower()
    )


def matches_country(station: Station, country: Optional[str]) -> bool:
    """Exact case-insensitive country match. An empty filter matches everything."""
    if not country:
        return True
    return station.country.lower() == country.lower()


def visible_stations(
    stations: Iterable[Station],
    search_term: Optional[str] = "",
    country_filter: Optional[str] = "",
) -> List[Station]:
    """Stations passing both the search term and the country filter, in input order."""
    return [
        station for station in stations
        if matches_search(station, search_term) and matches_country(station, country_filter)
    ]

"""Client for the radio-browser station directory."""
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

import httpx
from pydantic import ValidationError

from ..exceptions import DirectoryError
from ..logging import get_logger
from ..metrics import click_registrations_total, directory_fetches_total, stations_filtered_total
from ..models import CountryAggregate, Station

logger = get_logger(__name__)

SECURE_SCHEME = "https://"
PLAYLIST_SUFFIXES = (".m3u", ".pls")


def is_playable_stream_url(url: Optional[str]) -> bool:
    """Return True if ``url`` is a secure, direct audio stream.

    Playlist manifests (``.m3u``/``.pls``) need a parser before a media element
    can play them, so they are rejected along with plain ``http://`` streams.
    """
    if not url or not url.startswith(SECURE_SCHEME):
        return False
    return not url.lower().endswith(PLAYLIST_SUFFIXES)


def _rejection_reason(url: Optional[str]) -> str:
    if not url:
        return "missing"
    if not url.startswith(SECURE_SCHEME):
        return "insecure"
    return "playlist"


def rank_country_aggregates(countries: Iterable[CountryAggregate], limit: int = 50) -> List[CountryAggregate]:
    """Drop empty countries, sort by station count descending and cap at ``limit``."""
    non_empty = [c for c in countries if c.station_count > 0 and c.name]
    non_empty.sort(key=lambda c: c.station_count, reverse=True)
    return non_empty[:limit]


def derive_country_aggregates(stations: Iterable[Station], limit: int = 50) -> List[CountryAggregate]:
    """Count stations per country name in a fetched batch."""
    counts = Counter(station.country for station in stations if station.country)
    return rank_country_aggregates(
        (CountryAggregate(name=name, station_count=count) for name, count in counts.items()),
        limit=limit,
    )


class StationDirectoryClient:
    """Fetches stations and country aggregates from the radio directory.

    Every public fetch degrades to an empty list on failure so callers can
    render an empty state instead of waiting on an error.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        user_agent: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Directory host, e.g. ``https://de1.api.radio-browser.info``
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header sent upstream
            client: Shared httpx client; when given it is not closed by this object
            transport: Optional httpx transport, used when no client is given
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        if client is None:
            headers = {"User-Agent": user_agent} if user_agent else None
            client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)
        self._client = client

    async def __aenter__(self) -> "StationDirectoryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying httpx client if this object created it."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET ``endpoint`` from the directory and decode the JSON body.

        Raises:
            DirectoryError: on network errors, non-2xx statuses or undecodable bodies
        """
        url = f"{self.base_url}{endpoint}"
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise DirectoryError(
                message=f"Directory returned {e.response.status_code}",
                details={"endpoint": endpoint, "status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise DirectoryError(
                message="Directory request failed",
                details={"endpoint": endpoint, "error": str(e)},
            ) from e
        except ValueError as e:
            raise DirectoryError(
                message="Directory returned invalid JSON",
                details={"endpoint": endpoint},
            ) from e

    async def fetch_top_stations(self, limit: int = 100) -> List[Station]:
        """Fetch the top-voted stations and keep only playable ones, in upstream order."""
        endpoint = f"/json/stations/topvote/{limit}"
        try:
            records = await self.fetch_json(endpoint)
            if not isinstance(records, list):
                raise DirectoryError(message="Expected a list of stations", details={"endpoint": endpoint})
        except DirectoryError as e:
            directory_fetches_total.labels(kind="stations", outcome="error").inc()
            logger.warning("stations_fetch_failed", endpoint=endpoint, error=e.message, details=e.details)
            return []

        stations = []
        for record in records:
            try:
                station = Station.from_directory(record)
            except (ValidationError, AttributeError, TypeError):
                stations_filtered_total.labels(reason="invalid").inc()
                logger.debug("station_record_invalid", record=record)
                continue

            if not is_playable_stream_url(station.stream_url):
                stations_filtered_total.labels(reason=_rejection_reason(station.stream_url)).inc()
                continue
            stations.append(station)

        directory_fetches_total.labels(kind="stations", outcome="success").inc()
        logger.info(
            "stations_fetched",
            received=len(records),
            playable=len(stations),
            dropped=len(records) - len(stations),
        )
        return stations

    async def fetch_country_aggregates(self, limit: int = 50) -> List[CountryAggregate]:
        """Fetch per-country station counts, largest first, capped at ``limit``."""
        endpoint = "/json/countries"
        try:
            records = await self.fetch_json(endpoint, params={"order": "stationcount", "reverse": "true"})
            if not isinstance(records, list):
                raise DirectoryError(message="Expected a list of countries", details={"endpoint": endpoint})
            countries = [CountryAggregate.from_directory(record) for record in records]
        except DirectoryError as e:
            directory_fetches_total.labels(kind="countries", outcome="error").inc()
            logger.warning("countries_fetch_failed", endpoint=endpoint, error=e.message, details=e.details)
            return []
        except (ValidationError, AttributeError, TypeError, ValueError) as e:
            directory_fetches_total.labels(kind="countries", outcome="error").inc()
            logger.warning("countries_decode_failed", endpoint=endpoint, error=str(e))
            return []

        ranked = rank_country_aggregates(countries, limit=limit)
        directory_fetches_total.labels(kind="countries", outcome="success").inc()
        logger.info("countries_fetched", received=len(records), returned=len(ranked))
        return ranked

    async def register_click(self, station_id: str) -> bool:
        """Tell the directory a station was played. Failures are ignored."""
        try:
            await self.fetch_json(f"/json/url/{station_id}")
        except DirectoryError as e:
            click_registrations_total.labels(outcome="error").inc()
            logger.debug("click_registration_failed", station_id=station_id, error=e.message)
            return False

        click_registrations_total.labels(outcome="success").inc()
        return True

"""Playback and filter controller for one listening session."""
import asyncio
import enum
import math
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from ..exceptions import PlaybackError, StationNotFoundError
from ..logging import get_logger
from ..metrics import playback_attempts_total
from ..models import CountryAggregate, Station
from .audio import AudioSink
from .directory_client import StationDirectoryClient, derive_country_aggregates
from .filtering import visible_stations

logger = get_logger(__name__)

PLAYBACK_UNAVAILABLE_MESSAGE = "This station's stream is unavailable or blocked."

Notifier = Callable[[str, Station], None]


class PlaybackState(str, enum.Enum):
    """Playback state of the session's single station slot."""
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    ERROR = "error"


class RadioPlayer:
    """Holds session state and derives the visible station list from it.

    The station list is loaded once per session. Search and country filters,
    favorites and volume are plain synchronous updates; ``play`` is async and
    a newer call always supersedes an older one still in flight.
    """

    def __init__(
        self,
        directory: StationDirectoryClient,
        sink: AudioSink,
        notifier: Optional[Notifier] = None,
        top_station_limit: int = 100,
        country_limit: int = 50,
        country_source: str = "directory",
        default_volume: float = 0.7,
    ):
        """Initialize the player.

        Args:
            directory: Client used for station lists and click registration
            sink: Audio output owned by this player
            notifier: Called with a user-facing message when a stream fails to start
            top_station_limit: Number of top-voted stations fetched on load
            country_limit: Maximum number of countries offered as filters
            country_source: ``directory`` for a dedicated country query,
                ``stations`` to derive counts from the fetched stations
            default_volume: Initial volume in [0, 1]
        """
        self.directory = directory
        self.sink = sink
        self.notifier = notifier
        self.top_station_limit = top_station_limit
        self.country_limit = country_limit
        self.country_source = country_source

        self._all_stations: Tuple[Station, ...] = ()
        self.countries: List[CountryAggregate] = []
        self.loading = True

        self.search_term = ""
        self.country_filter = ""
        self._favorites: Dict[str, Station] = {}

        self.current_station: Optional[Station] = None
        self.playback_state = PlaybackState.IDLE
        self.last_error: Optional[str] = None
        self._generation = 0
        self._background_tasks: Set[asyncio.Task] = set()

        self.volume = 0.0
        self.is_muted = False
        self.set_volume(default_volume)

    # Station list

    async def load(self) -> None:
        """Fetch stations and countries. Always leaves ``loading`` False."""
        self.loading = True
        try:
            if self.country_source == "stations":
                stations = await self.directory.fetch_top_stations(self.top_station_limit)
                countries = derive_country_aggregates(stations, limit=self.country_limit)
            else:
                stations, countries = await asyncio.gather(
                    self.directory.fetch_top_stations(self.top_station_limit),
                    self.directory.fetch_country_aggregates(self.country_limit),
                )
            self._all_stations = tuple(stations)
            self.countries = list(countries)
        finally:
            self.loading = False

        logger.info(
            "player_loaded",
            station_count=len(self._all_stations),
            country_count=len(self.countries),
            country_source=self.country_source,
        )

    @property
    def all_stations(self) -> Tuple[Station, ...]:
        return self._all_stations

    @property
    def visible_stations(self) -> List[Station]:
        return visible_stations(self._all_stations, self.search_term, self.country_filter)

    def set_search_term(self, term: Optional[str]) -> None:
        self.search_term = term or ""

    def set_country_filter(self, country: Optional[str]) -> None:
        self.country_filter = country or ""

    def find_station(self, station_id: str) -> Station:
        """Look up a loaded station by id."""
        for station in self._all_stations:
            if station.id == station_id:
                return station
        raise StationNotFoundError(
            message=f"Station {station_id} not found",
            details={"station_id": station_id},
        )

    # Playback

    @property
    def is_playing(self) -> bool:
        return self.playback_state is PlaybackState.PLAYING

    def is_current(self, station: Station) -> bool:
        return self.current_station is not None and self.current_station.id == station.id

    async def play(self, station: Station) -> PlaybackState:
        """Play ``station``, or pause it if it is already playing.

        Returns the session's playback state once this call settles.
        """
        if self.is_current(station) and self.is_playing:
            self._generation += 1
            generation = self._generation
            self.playback_state = PlaybackState.PAUSED
            await self.sink.pause()
            if generation != self._generation:
                return self._superseded(station)
            playback_attempts_total.labels(outcome="paused").inc()
            logger.info("playback_paused", station_id=station.id)
            return self.playback_state

        self._generation += 1
        generation = self._generation
        self.current_station = station
        self.playback_state = PlaybackState.LOADING
        self.last_error = None
        logger.info("playback_loading", station_id=station.id, station_name=station.name)

        self._register_click(station)

        try:
            await self.sink.stop()
            if generation != self._generation:
                return self._superseded(station)
            if not station.stream_url:
                raise PlaybackError(message="Station has no stream URL", details={"station_id": station.id})
            self.sink.load(station.stream_url)
            await self.sink.play()
        except PlaybackError as e:
            if generation != self._generation:
                return self._superseded(station)
            self.playback_state = PlaybackState.ERROR
            self.last_error = PLAYBACK_UNAVAILABLE_MESSAGE
            playback_attempts_total.labels(outcome="failed").inc()
            logger.warning(
                "playback_failed",
                station_id=station.id,
                stream_url=station.stream_url,
                error=e.message,
                details=e.details,
            )
            if self.notifier is not None:
                self.notifier(PLAYBACK_UNAVAILABLE_MESSAGE, station)
            return self.playback_state

        if generation != self._generation:
            return self._superseded(station)

        self.playback_state = PlaybackState.PLAYING
        playback_attempts_total.labels(outcome="playing").inc()
        logger.info("playback_started", station_id=station.id)
        return self.playback_state

    def _superseded(self, station: Station) -> PlaybackState:
        playback_attempts_total.labels(outcome="superseded").inc()
        logger.debug("playback_superseded", station_id=station.id, current_station_id=self.current_station.id)
        return self.playback_state

    def _register_click(self, station: Station) -> None:
        task = asyncio.create_task(self._send_click(station.id))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _send_click(self, station_id: str) -> None:
        # Click telemetry never affects playback state
        try:
            await self.directory.register_click(station_id)
        except Exception as e:
            logger.debug("click_registration_error", station_id=station_id, error=str(e))

    # Favorites

    def toggle_favorite(self, station: Station) -> bool:
        """Add or remove ``station`` from favorites. Returns the new membership."""
        if station.id in self._favorites:
            del self._favorites[station.id]
            logger.info("favorite_removed", station_id=station.id)
            return False
        self._favorites[station.id] = station
        logger.info("favorite_added", station_id=station.id)
        return True

    def is_favorite(self, station: Station) -> bool:
        return station.id in self._favorites

    @property
    def favorites(self) -> List[Station]:
        return list(self._favorites.values())

    # Volume

    @property
    def effective_volume(self) -> float:
        return 0.0 if self.is_muted else self.volume

    def set_volume(self, value: float) -> float:
        """Set the stored volume, clamped to [0, 1]."""
        value = float(value)
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"Volume must be a finite number, got {value!r}")
        self.volume = min(max(value, 0.0), 1.0)
        self.sink.set_volume(self.effective_volume)
        return self.volume

    def toggle_mute(self) -> bool:
        """Flip mute. The stored volume is left untouched."""
        self.is_muted = not self.is_muted
        self.sink.set_volume(self.effective_volume)
        return self.is_muted

    # Lifecycle

    def snapshot(self) -> Dict[str, Any]:
        """Current session state, suitable for serialising."""
        return {
            "loading": self.loading,
            "search_term": self.search_term,
            "country_filter": self.country_filter,
            "current_station": self.current_station,
            "playback_state": self.playback_state,
            "is_playing": self.is_playing,
            "volume": self.volume,
            "is_muted": self.is_muted,
            "effective_volume": self.effective_volume,
            "favorite_ids": list(self._favorites),
            "last_error": self.last_error,
            "station_count": len(self._all_stations),
            "visible_count": len(self.visible_stations),
        }

    async def aclose(self) -> None:
        """Stop output and cancel pending click registrations."""
        for task in list(self._background_tasks):
            task.cancel()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        await self.sink.stop()
        self.playback_state = PlaybackState.IDLE

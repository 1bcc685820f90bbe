"""Player API endpoints exposing the listening session."""
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..logging import get_logger
from ..models import CountryAggregate, Station
from ..services.player import PlaybackState, RadioPlayer
from .deps import get_player

logger = get_logger(__name__)

router = APIRouter(prefix="/player", tags=["player"])


class PlayerStateResponse(BaseModel):
    """Session state response model."""
    loading: bool
    search_term: str
    country_filter: str
    current_station: Optional[Station] = None
    playback_state: PlaybackState
    is_playing: bool
    volume: float = Field(..., ge=0.0, le=1.0)
    is_muted: bool
    effective_volume: float = Field(..., ge=0.0, le=1.0)
    favorite_ids: List[str]
    last_error: Optional[str] = None
    station_count: int
    visible_count: int


class StationView(BaseModel):
    """Station as shown in the station grid."""
    station: Station
    is_favorite: bool
    is_current: bool
    is_playing: bool


class SearchRequest(BaseModel):
    term: str = Field("", max_length=255, description="Case-insensitive search across name, country and tags")


class CountryRequest(BaseModel):
    country: str = Field("", max_length=255, description="Exact country name, empty for all")


class VolumeRequest(BaseModel):
    volume: float = Field(..., ge=0.0, le=1.0, description="Volume between 0 and 1")


class FavoriteResponse(BaseModel):
    station_id: str
    is_favorite: bool


def _state(player: RadioPlayer) -> PlayerStateResponse:
    return PlayerStateResponse(**player.snapshot())


def _view(player: RadioPlayer, station: Station) -> StationView:
    is_current = player.is_current(station)
    return StationView(
        station=station,
        is_favorite=player.is_favorite(station),
        is_current=is_current,
        is_playing=is_current and player.is_playing,
    )


@router.get("/state", response_model=PlayerStateResponse)
async def get_state(player: RadioPlayer = Depends(get_player)) -> PlayerStateResponse:
    """Get the current session state."""
    return _state(player)


@router.get("/stations", response_model=List[StationView])
async def list_visible_stations(player: RadioPlayer = Depends(get_player)) -> List[StationView]:
    """List stations matching the current search term and country filter."""
    return [_view(player, station) for station in player.visible_stations]


@router.get("/countries", response_model=List[CountryAggregate])
async def list_countries(player: RadioPlayer = Depends(get_player)) -> List[CountryAggregate]:
    """List countries offered as filters, largest first."""
    return player.countries


@router.put("/search", response_model=PlayerStateResponse)
async def set_search(body: SearchRequest, player: RadioPlayer = Depends(get_player)) -> PlayerStateResponse:
    player.set_search_term(body.term)
    return _state(player)


@router.put("/country", response_model=PlayerStateResponse)
async def set_country(body: CountryRequest, player: RadioPlayer = Depends(get_player)) -> PlayerStateResponse:
    player.set_country_filter(body.country)
    return _state(player)


@router.post("/play/{station_id}", response_model=PlayerStateResponse)
async def play_station(station_id: str, player: RadioPlayer = Depends(get_player)) -> PlayerStateResponse:
    """
    Play a station, or pause it if it is already playing.

    A stream that fails to start is reported in ``last_error``; the station
    stays selected.
    """
    station = player.find_station(station_id)
    state = await player.play(station)
    logger.info("play_requested", station_id=station_id, playback_state=state.value)
    return _state(player)


@router.get("/favorites", response_model=List[Station])
async def list_favorites(player: RadioPlayer = Depends(get_player)) -> List[Station]:
    return player.favorites


@router.post("/favorites/{station_id}", response_model=FavoriteResponse)
async def toggle_favorite(station_id: str, player: RadioPlayer = Depends(get_player)) -> FavoriteResponse:
    """Toggle a station's favorite membership."""
    station = player.find_station(station_id)
    return FavoriteResponse(station_id=station.id, is_favorite=player.toggle_favorite(station))


@router.put("/volume", response_model=PlayerStateResponse)
async def set_volume(body: VolumeRequest, player: RadioPlayer = Depends(get_player)) -> PlayerStateResponse:
    player.set_volume(body.volume)
    return _state(player)


@router.post("/mute", response_model=PlayerStateResponse)
async def toggle_mute(player: RadioPlayer = Depends(get_player)) -> PlayerStateResponse:
    player.toggle_mute()
    return _state(player)

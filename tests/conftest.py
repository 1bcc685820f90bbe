"""Shared fixtures: directory records, a fake audio sink and a fake directory."""
import asyncio
from typing import Dict, List, Optional

import pytest

from worldradio.exceptions import PlaybackError
from worldradio.models import CountryAggregate, Station
from worldradio.services.audio import AudioSink
from worldradio.services.player import RadioPlayer


def make_record(
    uuid: str,
    name: str = "Station",
    country: str = "Germany",
    tags: Optional[str] = "pop,rock",
    url_resolved: Optional[str] = None,
    url: Optional[str] = None,
    votes: int = 10,
) -> Dict:
    """Build a raw radio-browser station record."""
    return {
        "stationuuid": uuid,
        "name": name,
        "country": country,
        "countrycode": "DE",
        "tags": tags,
        "url": url if url is not None else f"https://stream.example.org/{uuid}.mp3",
        "url_resolved": url_resolved if url_resolved is not None else f"https://stream.example.org/{uuid}.mp3",
        "favicon": "",
        "votes": votes,
    }


class FakeSink(AudioSink):
    """In-memory sink. Streams listed in ``fail_urls`` fail; ``gates`` hold play() and ``pause_gate`` holds pause() until resolved."""

    def __init__(self, fail_urls=()):
        super().__init__()
        self.fail_urls = set(fail_urls)
        self.gates: Dict[str, asyncio.Future] = {}
        self.pause_gate: Optional[asyncio.Future] = None
        self.events: List[tuple] = []
        self.playing = False

    async def play(self) -> None:
        url = self.source
        self.events.append(("play", url))
        if url in self.gates:
            await self.gates[url]
        if url in self.fail_urls:
            raise PlaybackError(message="Stream unreachable", details={"url": url})
        self.playing = True

    async def pause(self) -> None:
        self.events.append(("pause", self.source))
        if self.pause_gate is not None:
            await self.pause_gate
        self.playing = False

    async def stop(self) -> None:
        self.events.append(("stop", self.source))
        self.playing = False
        self.source = None


class FakeDirectory:
    """Stands in for StationDirectoryClient."""

    def __init__(self, stations=None, countries=None, click_error: Optional[Exception] = None):
        self.stations = list(stations or [])
        self.countries = list(countries or [])
        self.click_error = click_error
        self.clicks: List[str] = []

    async def fetch_top_stations(self, limit: int = 100) -> List[Station]:
        return self.stations[:limit]

    async def fetch_country_aggregates(self, limit: int = 50) -> List[CountryAggregate]:
        return self.countries[:limit]

    async def register_click(self, station_id: str) -> bool:
        self.clicks.append(station_id)
        if self.click_error is not None:
            raise self.click_error
        return True


@pytest.fixture
def stations() -> List[Station]:
    """A small mixed set of stations."""
    return [
        Station.from_directory(make_record("a1", name="Radio Paradise", country="United States", tags="eclectic,rock")),
        Station.from_directory(make_record("b2", name="SWR3", country="Germany", tags="pop,news")),
        Station.from_directory(make_record("c3", name="FIP", country="France", tags="jazz,eclectic")),
        Station.from_directory(make_record("d4", name="Jazz Radio", country="France", tags=None)),
        Station.from_directory(make_record("e5", name="Deutschlandfunk", country="germany", tags="")),
    ]


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def directory(stations) -> FakeDirectory:
    return FakeDirectory(
        stations=stations,
        countries=[CountryAggregate(name="Germany", station_count=2), CountryAggregate(name="France", station_count=2)],
    )


@pytest.fixture
def notifications() -> List[tuple]:
    return []


@pytest.fixture
def player(directory, sink, notifications) -> RadioPlayer:
    return RadioPlayer(directory, sink, notifier=lambda message, station: notifications.append((message, station.id)))

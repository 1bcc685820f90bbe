"""Tests for the stream probing audio sink."""
import httpx
import pytest

from worldradio.exceptions import PlaybackError
from worldradio.services.audio import StreamProbeSink

STREAM_URL = "https://stream.example.org/live.mp3"


def _sink(handler) -> StreamProbeSink:
    return StreamProbeSink(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_play_opens_audio_stream():
    sink = _sink(lambda request: httpx.Response(200, headers={"content-type": "audio/mpeg"}, content=b"\xff\xfb"))
    sink.load(STREAM_URL)

    await sink.play()
    assert sink.is_open

    await sink.pause()
    assert not sink.is_open
    assert sink.source == STREAM_URL

    await sink.stop()
    assert sink.source is None


@pytest.mark.asyncio
@pytest.mark.parametrize("response, message", [
    (httpx.Response(403, headers={"content-type": "audio/mpeg"}), "Stream returned 403"),
    (httpx.Response(200, headers={"content-type": "text/html"}, content=b"<html>"), "Unsupported stream type"),
])
async def test_play_rejects_bad_streams(response, message):
    sink = _sink(lambda request: response)
    sink.load(STREAM_URL)

    with pytest.raises(PlaybackError, match=message):
        await sink.play()
    assert not sink.is_open


@pytest.mark.asyncio
async def test_play_unreachable_stream():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route to host", request=request)

    sink = _sink(handler)
    sink.load(STREAM_URL)

    with pytest.raises(PlaybackError, match="Stream unreachable"):
        await sink.play()


@pytest.mark.asyncio
async def test_play_without_source():
    sink = _sink(lambda request: httpx.Response(200))
    with pytest.raises(PlaybackError):
        await sink.play()


@pytest.mark.asyncio
async def test_ogg_streams_are_accepted():
    sink = _sink(lambda request: httpx.Response(200, headers={"content-type": "application/ogg"}))
    sink.load("https://stream.example.org/live.ogg")
    await sink.play()

    assert sink.is_open
    sink.set_volume(0.4)
    assert sink.volume == 0.4

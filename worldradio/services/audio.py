"""Audio sinks owned by the player."""
import abc
from typing import Optional

import httpx

from ..exceptions import PlaybackError
from ..logging import get_logger

logger = get_logger(__name__)

AUDIO_CONTENT_TYPES = ("audio/", "application/ogg", "application/octet-stream")


class AudioSink(abc.ABC):
    """The single output a station stream is loaded into.

    Loading a new source replaces the previous one; callers stop the old
    stream first.
    """

    def __init__(self):
        self.source: Optional[str] = None
        self.volume: float = 1.0

    def load(self, url: str) -> None:
        """Set the stream URL to play next."""
        self.source = url

    @abc.abstractmethod
    async def play(self) -> None:
        """Start playing the loaded source. Raises PlaybackError on failure."""

    @abc.abstractmethod
    async def pause(self) -> None:
        """Stop output but keep the loaded source."""

    @abc.abstractmethod
    async def stop(self) -> None:
        """Stop output and unload the source."""

    def set_volume(self, value: float) -> None:
        self.volume = value


class StreamProbeSink(AudioSink):
    """Sink that "plays" a stream by holding an open HTTP connection to it.

    Playback starts only when the server answers 2xx with an audio content type,
    which catches unreachable, blocked and non-audio streams.
    """

    def __init__(self, client: httpx.AsyncClient, timeout: float = 10.0):
        super().__init__()
        self._client = client
        self.timeout = timeout
        self._response: Optional[httpx.Response] = None

    @property
    def is_open(self) -> bool:
        return self._response is not None

    async def play(self) -> None:
        if not self.source:
            raise PlaybackError(message="No stream loaded")

        url = self.source
        await self._close_response()
        request = self._client.build_request("GET", url, headers={"Icy-MetaData": "0"}, timeout=self.timeout)
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise PlaybackError(message="Stream unreachable", details={"url": url, "error": str(e)}) from e

        if not response.is_success:
            await response.aclose()
            raise PlaybackError(
                message=f"Stream returned {response.status_code}",
                details={"url": url, "status_code": response.status_code},
            )

        content_type = response.headers.get("content-type", "").lower()
        if not content_type.startswith(AUDIO_CONTENT_TYPES):
            await response.aclose()
            raise PlaybackError(
                message="Unsupported stream type",
                details={"url": url, "content_type": content_type},
            )

        if self.source != url:
            # Another source was loaded while connecting
            await response.aclose()
            raise PlaybackError(message="Stream replaced while connecting", details={"url": url})

        await self._close_response()
        self._response = response
        logger.info("stream_opened", url=url, content_type=content_type)

    async def pause(self) -> None:
        await self._close_response()

    async def stop(self) -> None:
        await self._close_response()
        self.source = None

    async def _close_response(self) -> None:
        if self._response is not None:
            response, self._response = self._response, None
            await response.aclose()
            logger.debug("stream_closed", url=str(response.url))

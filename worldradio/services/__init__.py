"""Services for the radio player."""
from .audio import AudioSink, StreamProbeSink
from .directory_client import StationDirectoryClient, is_playable_stream_url
from .player import PlaybackState, RadioPlayer

__all__ = [
    "AudioSink",
    "StreamProbeSink",
    "StationDirectoryClient",
    "is_playable_stream_url",
    "PlaybackState",
    "RadioPlayer",
]

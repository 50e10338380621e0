from .track import Track, format_time
from .catalog import Catalog, InvalidNavigationError
from .playback import PlaybackState, TimeSource, DEFAULT_DURATION
from .settings import FeedSettings

__all__ = [
    "Track",
    "format_time",
    "Catalog",
    "InvalidNavigationError",
    "PlaybackState",
    "TimeSource",
    "DEFAULT_DURATION",
    "FeedSettings",
]

from .events import EventStream, Subscription
from .playback_clock import PlaybackClock
from .catalog_client import CatalogClient, FetchError
from .media_engine import MediaEngine, NullMediaEngine, PygameMediaEngine, UnplayableTrackError
from .playback_machine import PlaybackStateMachine
from .navigation import NavigationBridge

__all__ = [
    'EventStream',
    'Subscription',
    'PlaybackClock',
    'CatalogClient',
    'FetchError',
    'MediaEngine',
    'NullMediaEngine',
    'PygameMediaEngine',
    'UnplayableTrackError',
    'PlaybackStateMachine',
    'NavigationBridge',
]

from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_DURATION = 238.0  # 3:58, used until the real duration is known


class TimeSource(Enum):
    """Mechanism currently driving the elapsed time of a track."""
    NONE = "none"
    CLOCK = "clock"
    MEDIA_ENGINE = "media_engine"


@dataclass(frozen=True)
class PlaybackState:
    """Snapshot of playback exposed to the rendering layer.

    Attributes:
        current_index: Index into the catalog, or None before it loads
        is_playing: Whether playback is intended to be running
        elapsed: Seconds played in the current track
        duration: Track length in seconds (fallback until the engine reports it)
        time_source: Which source currently drives ``elapsed``
    """
    current_index: Optional[int] = None
    is_playing: bool = False
    elapsed: float = 0.0
    duration: float = DEFAULT_DURATION
    time_source: TimeSource = TimeSource.NONE

    @property
    def progress(self) -> float:
        """Fraction of the track played, derived on every read."""
        if self.duration > 0:
            return self.elapsed / self.duration
        return 0.0

    @property
    def has_track(self) -> bool:
        return self.current_index is not None

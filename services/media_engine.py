"""
Media Engine

Adapters around an audio playback primitive. An engine loads one track at a
time and reports its position and end through typed event streams.
"""

from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

import pygame
import requests
from mutagen import File as MutagenFile
from mutagen import MutagenError

from models import Track
from services.events import EventStream
from services.playback_clock import IntervalFactory, PlaybackClock

logger = logging.getLogger(__name__)

POSITION_POLL_INTERVAL = 0.5
DOWNLOAD_TIMEOUT = 30.0


class UnplayableTrackError(Exception):
    """Raised or emitted when a track's audio cannot be played."""

    def __init__(self, track_id: str, reason: str) -> None:
        super().__init__(f"Track {track_id} is unplayable: {reason}")
        self.track_id = track_id
        self.reason = reason


@dataclass(frozen=True)
class TimeProgress:
    """Current position of the loaded item; duration is None until known."""
    position: float
    duration: Optional[float] = None


@dataclass(frozen=True)
class TrackEnded:
    track_id: str


class MediaEngine:
    """Base contract shared by every engine."""

    def __init__(self) -> None:
        self.time_progress: EventStream[TimeProgress] = EventStream("time_progress")
        self.track_ended: EventStream[TrackEnded] = EventStream("track_ended")
        self.load_failed: EventStream[UnplayableTrackError] = EventStream("load_failed")

    def load(self, track: Track) -> None:
        raise NotImplementedError

    def play(self) -> None:
        raise NotImplementedError

    def pause(self) -> None:
        raise NotImplementedError

    def seek(self, seconds: float) -> None:
        raise NotImplementedError

    def teardown(self) -> None:
        """Release the loaded item and every subscriber of this engine."""
        self.time_progress.clear()
        self.track_ended.clear()
        self.load_failed.clear()

    def shutdown(self) -> None:
        self.teardown()


class NullMediaEngine(MediaEngine):
    """Engine used when no audio output exists; every track is rejected."""

    def load(self, track: Track) -> None:
        raise UnplayableTrackError(track.id, "no audio output available")

    def play(self) -> None:
        pass

    def pause(self) -> None:
        pass

    def seek(self, seconds: float) -> None:
        pass


class PygameMediaEngine(MediaEngine):
    """Streams a track's audio through pygame.mixer.music."""

    def __init__(
        self,
        set_interval: IntervalFactory,
        poll_interval: float = POSITION_POLL_INTERVAL,
        timeout: float = DOWNLOAD_TIMEOUT,
    ) -> None:
        super().__init__()
        try:
            pygame.mixer.init(frequency=44100, size=-16, channels=2, buffer=512)
        except pygame.error as e:
            raise RuntimeError(f"Audio output unavailable: {e}") from e

        self.poll_interval = poll_interval
        self.timeout = timeout
        self._poll_clock = PlaybackClock(set_interval, "media-poll")
        self._track: Optional[Track] = None
        self._load_task: Optional[asyncio.Task] = None
        self._ready = False
        self._want_play = False
        self._started = False
        self._paused = False
        self._ended = False
        self._offset = 0.0
        self._duration: Optional[float] = None

    @property
    def position(self) -> float:
        """Current play head in seconds."""
        if not self._started:
            return self._offset
        pos_ms = pygame.mixer.music.get_pos()
        if pos_ms < 0:
            return self._offset
        return self._offset + pos_ms / 1000.0

    def load(self, track: Track) -> None:
        """Start fetching ``track``'s audio, superseding the current item.

        Raises:
            UnplayableTrackError: If the track has no usable audio URL.
        """
        if not track.has_audio:
            raise UnplayableTrackError(track.id, f"no playable audio URL ({track.audio_url!r})")

        self._release()
        self._track = track
        logger.info(f"Loading audio for {track.id}: {track.audio_url}")
        self._load_task = asyncio.get_running_loop().create_task(self._prepare(track))

    def play(self) -> None:
        self._want_play = True
        if not self._ready:
            return
        if not self._started:
            self._start_playback()
        elif self._paused:
            pygame.mixer.music.unpause()
            self._paused = False
            self._poll_clock.start(self.poll_interval, self._poll)

    def pause(self) -> None:
        self._want_play = False
        if self._started and not self._paused:
            pygame.mixer.music.pause()
            self._paused = True
            self._poll_clock.stop()

    def seek(self, seconds: float) -> None:
        seconds = max(0.0, seconds)
        if self._duration is not None:
            seconds = min(seconds, self._duration)
        self._offset = seconds

        if not self._started:
            return
        try:
            pygame.mixer.music.play(start=seconds)
            if self._paused:
                pygame.mixer.music.pause()
        except pygame.error as e:
            logger.warning(f"Seek not supported for {self._track.id if self._track else '?'}: {e}")

    def teardown(self) -> None:
        self._release()
        super().teardown()

    def shutdown(self) -> None:
        self.teardown()
        pygame.mixer.quit()

    async def _prepare(self, track: Track) -> None:
        try:
            data = await asyncio.to_thread(self._download, track.audio_url)
            duration = self._read_duration(data)
            pygame.mixer.music.load(io.BytesIO(data), self._name_hint(track.audio_url))
        except asyncio.CancelledError:
            raise
        except (requests.RequestException, pygame.error, OSError) as e:
            logger.error(f"Failed to prepare audio for {track.id}: {type(e).__name__}: {e}")
            self._fail(track, e)
            return
        except Exception as e:
            logger.error(f"Unexpected error preparing audio for {track.id}: {type(e).__name__}: {e}", exc_info=True)
            self._fail(track, e)
            return

        if self._track is not track:
            return

        self._ready = True
        self._duration = duration
        logger.debug(f"Audio ready for {track.id} (duration={duration})")
        if self._want_play:
            self._start_playback()

    def _fail(self, track: Track, error: Exception) -> None:
        if self._track is track:
            self.load_failed.emit(UnplayableTrackError(track.id, str(error)))

    def _start_playback(self) -> None:
        pygame.mixer.music.play(start=self._offset)
        self._started = True
        self._paused = False
        self._ended = False
        self._poll_clock.start(self.poll_interval, self._poll)

    def _poll(self) -> None:
        if not self._started or self._paused or self._ended:
            return

        if not pygame.mixer.music.get_busy():
            self._ended = True
            self._poll_clock.stop()
            track_id = self._track.id if self._track else ""
            logger.debug(f"Track {track_id} reached its end")
            self.track_ended.emit(TrackEnded(track_id))
            return

        self.time_progress.emit(TimeProgress(self.position, self._duration))

    def _release(self) -> None:
        if self._load_task is not None:
            self._load_task.cancel()
            self._load_task = None
        self._poll_clock.stop()
        if self._ready:
            pygame.mixer.music.stop()
            pygame.mixer.music.unload()
        self._track = None
        self._ready = False
        self._want_play = False
        self._started = False
        self._paused = False
        self._ended = False
        self._offset = 0.0
        self._duration = None

    def _download(self, url: str) -> bytes:
        parsed = urlparse(url)
        if parsed.scheme == "file":
            return Path(url2pathname(parsed.path)).read_bytes()

        response = requests.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.content

    @staticmethod
    def _read_duration(data: bytes) -> Optional[float]:
        try:
            audio = MutagenFile(io.BytesIO(data))
        except MutagenError as e:
            logger.debug(f"Could not read duration: {e}")
            return None

        if audio is None or not audio.info or not hasattr(audio.info, 'length'):
            return None
        length = float(audio.info.length)
        return length if length > 0 else None

    @staticmethod
    def _name_hint(url: str) -> str:
        suffix = Path(urlparse(url).path).suffix.lstrip('.')
        return suffix or "mp3"

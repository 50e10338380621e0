"""
Playback State Machine

Single owner of playback state. Reconciles the fallback clock and the media
engine so that exactly one of them drives the elapsed time of a track, and
applies navigation, play/pause and like commands.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Callable

from models import Catalog, InvalidNavigationError, PlaybackState, TimeSource, Track, DEFAULT_DURATION
from services.catalog_client import CatalogClient, FetchError
from services.events import EventStream, Subscription
from services.media_engine import MediaEngine, TimeProgress, TrackEnded, UnplayableTrackError
from services.playback_clock import DEFAULT_TICK_INTERVAL, PlaybackClock

logger = logging.getLogger(__name__)


class PlaybackStateMachine:
    """Owns playback state and publishes every change to subscribers."""

    def __init__(
        self,
        catalog_client: CatalogClient,
        media_engine: MediaEngine,
        clock: PlaybackClock,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        fallback_duration: float = DEFAULT_DURATION,
    ) -> None:
        """
        Initialize with the collaborators that feed the machine.

        Args:
            catalog_client: Source of the catalog
            media_engine: Engine used for tracks with playable audio
            clock: Fallback time source
            tick_interval: Seconds between fallback clock ticks
            fallback_duration: Duration assumed until the engine reports one
        """
        self._client = catalog_client
        self._engine = media_engine
        self._clock = clock
        self.tick_interval = tick_interval
        self.fallback_duration = fallback_duration

        self._catalog = Catalog.empty()
        self._state = PlaybackState(duration=fallback_duration)
        self._engine_subscriptions: list[Subscription] = []
        self._generation = 0
        self._duration_known = False
        self._closed = False

        self.state_changed: EventStream[PlaybackState] = EventStream("state_changed")
        self.catalog_changed: EventStream[Catalog] = EventStream("catalog_changed")

    # Read-only views for the rendering layer

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def current_index(self) -> int | None:
        return self._state.current_index

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def elapsed(self) -> float:
        return self._state.elapsed

    @property
    def duration(self) -> float:
        return self._state.duration

    @property
    def progress(self) -> float:
        return self._state.progress

    @property
    def time_source(self) -> TimeSource:
        return self._state.time_source

    @property
    def current_track(self) -> Track | None:
        if self._state.current_index is None:
            return None
        return self._catalog[self._state.current_index]

    # Commands

    async def load(self) -> bool:
        """Fetch the catalog and start playing its first track.

        Returns:
            True if the catalog was fetched, False on FetchError.
        """
        try:
            catalog = await self._client.fetch_catalog()
        except FetchError as e:
            logger.error(f"Failed to load catalog: {e}")
            return False

        if self._closed:
            return False

        self._release_time_source()
        self._generation += 1
        self._catalog = catalog
        self.catalog_changed.emit(catalog)

        if len(catalog) == 0:
            logger.warning("Catalog is empty, nothing to play")
            self._state = PlaybackState(duration=self.fallback_duration)
            self._publish()
            return True

        logger.info(f"Catalog loaded with {len(catalog)} tracks")
        self._state = replace(self._state, is_playing=True)
        self._engage(0)
        self._publish()
        return True

    def set_current_index(self, index: int) -> bool:
        """Switch to the track at ``index``, keeping the play/pause intent.

        Returns:
            True if the track changed; same or out-of-range indices are ignored.
        """
        try:
            self._catalog.track_at(index)
        except InvalidNavigationError as e:
            logger.debug(f"Ignoring navigation request: {e}")
            return False

        if index == self._state.current_index:
            return False

        logger.info(f"Navigating to track {index}")
        self._engage(index)
        self._publish()
        return True

    def next_track(self) -> bool:
        if self._state.current_index is None:
            return False
        return self.set_current_index(self._state.current_index + 1)

    def previous_track(self) -> bool:
        if self._state.current_index is None:
            return False
        return self.set_current_index(self._state.current_index - 1)

    def toggle_play_pause(self) -> bool:
        """Flip play/pause and resume or suspend the active time source.

        Returns:
            The new ``is_playing`` value.
        """
        if not self._state.has_track:
            logger.debug("No track loaded, ignoring play/pause")
            return self._state.is_playing

        playing = not self._state.is_playing
        self._state = replace(self._state, is_playing=playing)

        if not playing:
            self._suspend_source()
        elif self._state.time_source is TimeSource.NONE:
            # Finished the last track; play it again from the start
            self._engage(self._state.current_index)
        else:
            self._resume_source()

        logger.info(f"Play/Pause toggled: {playing}")
        self._publish()
        return playing

    def seek(self, seconds: float) -> None:
        """Move the play head of the current track, clamped to its duration."""
        if not self._state.has_track or self._state.time_source is TimeSource.NONE:
            return

        position = max(0.0, seconds)
        duration = self._state.duration

        if self._state.time_source is TimeSource.MEDIA_ENGINE:
            # The engine clamps to the real length until it has reported one
            if self._duration_known:
                position = min(position, duration)
            self._engine.seek(position)
            self._state = replace(self._state, elapsed=min(position, duration))
            self._publish()
            return

        position = min(position, duration)
        self._state = replace(self._state, elapsed=position)
        if position >= duration:
            self._handle_track_end()
            return

        self._publish()

    def toggle_like(self, track_id: str) -> Track | None:
        """Flip the like on a track and adjust its upvote count.

        Returns:
            The updated track, or None if no track has ``track_id``.
        """
        index = self._catalog.index_of(track_id)
        if index is None:
            logger.warning(f"Cannot toggle like, unknown track: {track_id}")
            return None

        updated = self._catalog[index].with_like_toggled()
        self._catalog = self._catalog.replace(index, updated)
        logger.info(
            f"Like toggled for song: {track_id}, new like state: {updated.is_liked}, "
            f"count: {updated.upvote_count}"
        )
        self.catalog_changed.emit(self._catalog)
        return updated

    def close(self) -> None:
        """Release every time source and subscriber. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        self._release_time_source()
        self.state_changed.clear()
        self.catalog_changed.clear()
        logger.debug("Playback state machine closed")

    # Time source management

    def _engage(self, index: int) -> None:
        """Make ``index`` current and select its time source."""
        track = self._catalog.track_at(index)
        self._release_time_source()
        self._generation += 1
        self._duration_known = False

        self._state = PlaybackState(
            current_index=index,
            is_playing=self._state.is_playing,
            elapsed=0.0,
            duration=self.fallback_duration,
        )

        if self._attach_media_engine(track):
            source = TimeSource.MEDIA_ENGINE
        else:
            source = TimeSource.CLOCK
        self._state = replace(self._state, time_source=source)
        logger.debug(f"Track {track.id} engaged with {source.value}")

        if self._state.is_playing:
            self._resume_source()

    def _attach_media_engine(self, track: Track) -> bool:
        generation = self._generation
        self._engine_subscriptions = [
            self._engine.time_progress.subscribe(self._guard(generation, self._on_time_progress)),
            self._engine.track_ended.subscribe(self._guard(generation, self._on_track_ended)),
            self._engine.load_failed.subscribe(self._guard(generation, self._on_load_failed)),
        ]
        try:
            self._engine.load(track)
        except UnplayableTrackError as e:
            logger.info(f"{e}; using clock")
            self._cancel_engine_subscriptions()
            return False
        return True

    def _release_time_source(self) -> None:
        self._clock.stop()
        self._cancel_engine_subscriptions()
        if self._state.time_source is TimeSource.MEDIA_ENGINE:
            self._engine.teardown()

    def _cancel_engine_subscriptions(self) -> None:
        for subscription in self._engine_subscriptions:
            subscription.cancel()
        self._engine_subscriptions = []

    def _resume_source(self) -> None:
        source = self._state.time_source
        if source is TimeSource.MEDIA_ENGINE:
            self._engine.play()
        elif source is TimeSource.CLOCK:
            generation = self._generation
            self._clock.start(self.tick_interval, lambda: self._on_clock_tick(generation))

    def _suspend_source(self) -> None:
        source = self._state.time_source
        if source is TimeSource.MEDIA_ENGINE:
            self._engine.pause()
        elif source is TimeSource.CLOCK:
            self._clock.stop()

    def _guard(self, generation: int, handler: Callable) -> Callable:
        """Wrap ``handler`` so events from a superseded load are dropped."""
        def deliver(event):
            if generation != self._generation:
                logger.debug(f"Dropping stale event {event!r}")
                return
            handler(event)
        return deliver

    # Event handlers

    def _on_clock_tick(self, generation: int) -> None:
        if generation != self._generation or self._state.time_source is not TimeSource.CLOCK:
            return
        if not self._state.is_playing:
            return

        elapsed = self._state.elapsed + self.tick_interval
        if elapsed >= self._state.duration:
            self._handle_track_end()
            return

        self._state = replace(self._state, elapsed=elapsed)
        self._publish()

    def _on_time_progress(self, event: TimeProgress) -> None:
        if self._state.time_source is not TimeSource.MEDIA_ENGINE:
            return

        duration = self._state.duration
        if event.duration is not None and math.isfinite(event.duration) and event.duration > 0:
            duration = event.duration
            self._duration_known = True

        elapsed = min(max(0.0, event.position), duration)
        self._state = replace(self._state, elapsed=elapsed, duration=duration)
        self._publish()

    def _on_track_ended(self, event: TrackEnded) -> None:
        if self._state.time_source is not TimeSource.MEDIA_ENGINE:
            return
        self._handle_track_end()

    def _on_load_failed(self, error: UnplayableTrackError) -> None:
        logger.warning(f"{error}; falling back to clock")
        self._release_time_source()
        self._generation += 1
        self._duration_known = False
        self._state = replace(
            self._state,
            duration=self.fallback_duration,
            time_source=TimeSource.CLOCK,
        )
        if self._state.elapsed >= self._state.duration:
            self._handle_track_end()
            return
        if self._state.is_playing:
            self._resume_source()
        self._publish()

    def _handle_track_end(self) -> None:
        index = self._state.current_index
        if index is None:
            return

        self._state = replace(self._state, elapsed=self._state.duration)

        if index + 1 < len(self._catalog):
            logger.info(f"Track {index} finished, advancing")
            self._engage(index + 1)
        else:
            logger.info("Last track finished, stopping playback")
            self._release_time_source()
            self._state = replace(self._state, is_playing=False, time_source=TimeSource.NONE)

        self._publish()

    def _publish(self) -> None:
        self.state_changed.emit(self._state)

import pytest

from models import Catalog, Track
from services.catalog_client import FetchError
from services.media_engine import MediaEngine, TimeProgress, TrackEnded, UnplayableTrackError
from services.playback_machine import PlaybackStateMachine


def make_track(track_id, audio_url="", **overrides):
    fields = dict(
        id=track_id,
        title=f"Song {track_id}",
        handle=f"artist_{track_id}",
        display_name=f"Artist {track_id}",
        image_url=f"https://img.example/{track_id}.png",
        audio_url=audio_url,
    )
    fields.update(overrides)
    return Track(**fields)


class FakeClock:
    """Clock that only ticks when the test says so."""

    def __init__(self):
        self.interval = None
        self.start_count = 0
        self._on_tick = None

    @property
    def is_running(self):
        return self._on_tick is not None

    def start(self, interval, on_tick):
        self.stop()
        self.interval = interval
        self.start_count += 1
        self._on_tick = on_tick

    def stop(self):
        self._on_tick = None

    def tick(self, times=1):
        for _ in range(times):
            if self._on_tick is None:
                return
            self._on_tick()


class FakeMediaEngine(MediaEngine):
    """Engine that records calls and lets tests emit its events."""

    def __init__(self):
        super().__init__()
        self.loaded = []
        self.playing = False
        self.play_calls = 0
        self.pause_calls = 0
        self.teardown_calls = 0
        self.seeks = []

    @property
    def current(self):
        return self.loaded[-1] if self.loaded else None

    @property
    def subscriber_count(self):
        return (
            self.time_progress.subscriber_count
            + self.track_ended.subscriber_count
            + self.load_failed.subscriber_count
        )

    def load(self, track):
        if not track.has_audio:
            raise UnplayableTrackError(track.id, "no playable audio URL")
        self.loaded.append(track)
        self.playing = False

    def play(self):
        self.play_calls += 1
        self.playing = True

    def pause(self):
        self.pause_calls += 1
        self.playing = False

    def seek(self, seconds):
        self.seeks.append(seconds)

    def teardown(self):
        self.teardown_calls += 1
        self.playing = False
        super().teardown()

    def report(self, position, duration=None):
        self.time_progress.emit(TimeProgress(position, duration))

    def finish(self):
        self.track_ended.emit(TrackEnded(self.current.id if self.current else ""))

    def fail(self, reason="network error"):
        self.load_failed.emit(UnplayableTrackError(self.current.id, reason))


class FakeCatalogClient:
    def __init__(self, tracks=None, error=None):
        self.tracks = list(tracks or [])
        self.error = error
        self.calls = 0

    async def fetch_catalog(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return Catalog(self.tracks)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine():
    return FakeMediaEngine()


@pytest.fixture
def make_machine(clock, engine):
    def factory(tracks=None, error=None, **kwargs):
        client = FakeCatalogClient(tracks, error)
        return PlaybackStateMachine(client, engine, clock=clock, **kwargs)
    return factory


@pytest.fixture
def fetch_error():
    return FetchError("Feed returned HTTP 500", status_code=500)

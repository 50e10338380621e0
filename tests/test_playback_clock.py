import asyncio

import pytest
from textual.app import App

from services.playback_clock import PlaybackClock


class FakeTimer:
    def __init__(self, interval, callback, name):
        self.interval = interval
        self.callback = callback
        self.name = name
        self.stopped = False

    def stop(self):
        self.stopped = True

    def fire(self):
        if not self.stopped:
            self.callback()


@pytest.fixture
def timers():
    return []


@pytest.fixture
def set_interval(timers):
    def factory(interval, callback, *, name=None):
        timer = FakeTimer(interval, callback, name)
        timers.append(timer)
        return timer
    return factory


def test_start_creates_named_interval(set_interval, timers):
    clock = PlaybackClock(set_interval, "playback-clock")
    ticks = []

    clock.start(0.5, lambda: ticks.append(1))
    timers[0].fire()
    timers[0].fire()

    assert clock.is_running
    assert clock.interval == 0.5
    assert timers[0].interval == 0.5
    assert timers[0].name == "playback-clock"
    assert len(ticks) == 2


def test_stop_stops_timer(set_interval, timers):
    clock = PlaybackClock(set_interval)
    ticks = []
    clock.start(1.0, lambda: ticks.append(1))

    clock.stop()
    clock.stop()
    timers[0].fire()

    assert timers[0].stopped
    assert ticks == []
    assert not clock.is_running


def test_restart_replaces_previous_run(set_interval, timers):
    clock = PlaybackClock(set_interval)
    first, second = [], []

    clock.start(1.0, lambda: first.append(1))
    clock.start(1.0, lambda: second.append(1))
    timers[0].fire()
    timers[1].fire()

    assert timers[0].stopped
    assert first == []
    assert second == [1]


def test_stop_from_inside_tick(set_interval, timers):
    clock = PlaybackClock(set_interval)
    ticks = []

    def on_tick():
        ticks.append(1)
        clock.stop()

    clock.start(1.0, on_tick)
    timers[0].fire()
    timers[0].fire()

    assert ticks == [1]


def test_failing_tick_keeps_clock_alive(set_interval, timers):
    clock = PlaybackClock(set_interval)
    ticks = []

    def on_tick():
        ticks.append(1)
        raise RuntimeError("tick failed")

    clock.start(1.0, on_tick)
    timers[0].fire()
    timers[0].fire()

    assert len(ticks) == 2
    assert clock.is_running


def test_rejects_non_positive_interval(set_interval, timers):
    with pytest.raises(ValueError):
        PlaybackClock(set_interval).start(0, lambda: None)

    assert timers == []


def test_ticks_on_textual_timer():
    async def scenario():
        app = App()
        async with app.run_test() as pilot:
            clock = PlaybackClock(app.set_interval)
            ticks = []
            clock.start(0.02, lambda: ticks.append(1))
            await pilot.pause(0.2)
            clock.stop()
            count = len(ticks)
            await pilot.pause(0.1)
            return count, len(ticks)

    count, final_count = asyncio.run(scenario())

    assert count >= 2
    assert final_count == count

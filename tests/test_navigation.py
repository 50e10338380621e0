import asyncio

from services.navigation import NavigationBridge
from conftest import make_track


def build(make_machine, tracks, **kwargs):
    machine = make_machine(tracks, **kwargs)
    bridge = NavigationBridge(machine)
    asyncio.run(machine.load())
    return machine, bridge


def test_follows_initial_load(make_machine):
    machine, bridge = build(make_machine, [make_track("a"), make_track("b")])

    assert bridge.requested_index == 0


def test_setting_index_switches_track(make_machine, clock):
    machine, bridge = build(make_machine, [make_track("a"), make_track("b")])
    clock.tick(3)

    bridge.requested_index = 1

    assert machine.current_index == 1
    assert machine.elapsed == 0.0


def test_rejected_index_snaps_back(make_machine):
    machine, bridge = build(make_machine, [make_track("a"), make_track("b")])

    bridge.requested_index = 5

    assert bridge.requested_index == 0
    assert machine.current_index == 0


def test_auto_advance_is_mirrored_without_reload(make_machine, clock):
    machine, bridge = build(make_machine, [make_track("a"), make_track("b")], fallback_duration=2.0)

    clock.tick(2)
    starts = clock.start_count

    assert bridge.requested_index == 1
    bridge.requested_index = 1
    assert clock.start_count == starts


def test_swipes(make_machine):
    machine, bridge = build(make_machine, [make_track("a"), make_track("b"), make_track("c")])

    bridge.swipe_next()
    bridge.swipe_next()
    bridge.swipe_next()
    assert machine.current_index == 2

    bridge.swipe_previous()
    assert machine.current_index == 1


def test_swipe_before_load_does_nothing(make_machine):
    machine = make_machine([make_track("a")])
    bridge = NavigationBridge(machine)

    bridge.swipe_next()

    assert bridge.requested_index is None
    assert machine.current_index is None


def test_close_stops_following(make_machine, clock):
    machine, bridge = build(make_machine, [make_track("a"), make_track("b")], fallback_duration=1.0)

    bridge.close()
    clock.tick()

    assert machine.current_index == 1
    assert bridge.requested_index == 0

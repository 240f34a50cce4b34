import pytest

from checkout_sim.queues import Env


def _collector():
    seen = []
    env = Env(lambda ev: seen.append((env.now, ev.payload)))
    return env, seen


def test_events_fire_in_time_order():
    env, seen = _collector()
    env.schedule(3.0, "c")
    env.schedule(1.0, "a")
    env.schedule(2.0, "b")
    env.run_until(10.0)
    assert seen == [(1.0, "a"), (2.0, "b"), (3.0, "c")]


def test_equal_times_fire_in_insertion_order():
    env, seen = _collector()
    for name in ["first", "second", "third"]:
        env.schedule(1.0, name)
    env.run_until(1.0)
    assert [p for _, p in seen] == ["first", "second", "third"]


def test_cancelled_event_is_skipped():
    env, seen = _collector()
    keep = env.schedule(1.0, "keep")
    drop = env.schedule(2.0, "drop")
    env.cancel(drop)
    assert env.pending() == 1
    env.run_until(5.0)
    assert [p for _, p in seen] == ["keep"]
    assert not keep.cancelled
    assert env.processed == 1


def test_run_until_stops_at_horizon_and_parks_clock():
    env, seen = _collector()
    env.schedule(4.0, "inside")
    env.schedule(6.0, "outside")
    env.run_until(5.0)
    assert [p for _, p in seen] == ["inside"]
    assert env.now == 5.0
    assert env.pending() == 1


def test_schedule_rejects_negative_delay():
    env, _ = _collector()
    with pytest.raises(ValueError):
        env.schedule(-0.1, "x")


def test_schedule_at_uses_absolute_time():
    env, seen = _collector()
    env.schedule_at(2.5, "x")
    env.run_until(3.0)
    assert seen == [(2.5, "x")]

from __future__ import annotations

import threading

from smartcity.ui.toast.scheduler import RemovalScheduler, threading_timer


def test_schedule_is_idempotent_per_id(timers):
    expired = []
    sched = RemovalScheduler(delay=5.0, on_expire=expired.append, timer_factory=timers)

    assert sched.schedule("1") is True
    assert sched.schedule("1") is False
    assert len(sched) == 1
    assert len(timers.timers) == 1


def test_timer_fires_once_and_clears_pending(timers):
    expired = []
    sched = RemovalScheduler(delay=5.0, on_expire=expired.append, timer_factory=timers)
    sched.schedule("1")

    timers.advance(4.9)
    assert expired == []
    timers.advance(0.1)
    assert expired == ["1"]
    assert not sched.is_pending("1")
    timers.advance(100)
    assert expired == ["1"]


def test_cancel_prevents_expiry(timers):
    expired = []
    sched = RemovalScheduler(delay=1.0, on_expire=expired.append, timer_factory=timers)
    sched.schedule("a")
    sched.schedule("b")

    assert sched.cancel("a") is True
    assert sched.cancel("a") is False
    assert sched.pending_ids == frozenset({"b"})
    assert sched.cancel_all() == 1
    timers.advance(10)
    assert expired == []


def test_cancelled_timer_that_still_runs_does_not_expire(timers):
    expired = []
    sched = RemovalScheduler(delay=1.0, on_expire=expired.append, timer_factory=timers)
    sched.schedule("a")
    timer = timers.timers[0]
    sched.cancel("a")
    # simulate a timer thread that was already past its cancel check
    timer.callback()
    assert expired == []


def test_threading_timer_runs_callback():
    done = threading.Event()
    timer = threading_timer(0.01, done.set)
    assert timer.daemon is True
    assert done.wait(2.0)

"""Tests for the countdown timer state machine."""

import threading

import pytest

from cbt_exam.models.errors import InvalidDurationError
from cbt_exam.services.countdown_timer import CountdownTimer, TimerStatus, low_time_threshold


@pytest.fixture
def events():
    return []


@pytest.fixture
def timer(scheduler, events):
    return CountdownTimer(
        on_tick=lambda remaining, low: events.append(("tick", remaining, low)),
        on_expired=lambda: events.append(("expired",)),
        scheduler=scheduler,
    )


@pytest.mark.parametrize(
    "total, expected",
    [(10, 3), (1, 1), (5, 2), (7, 3), (60, 18), (100, 30), (600, 180), (3, 1)],
)
def test_low_time_threshold_is_ceiling_of_thirty_percent(total, expected):
    assert low_time_threshold(total) == expected


def test_start_emits_initial_tick(timer, scheduler, events):
    timer.start(5)
    assert timer.status == TimerStatus.RUNNING
    assert timer.remaining_seconds == 5
    assert events == [("tick", 5, False)]
    assert len(scheduler.pending) == 1
    assert scheduler.pending[0].delay == 1.0


def test_counts_down_to_expiry(timer, scheduler, events):
    timer.start(5)
    scheduler.advance(5)

    assert timer.remaining_seconds == 0
    assert timer.status == TimerStatus.EXPIRED
    assert [e[1] for e in events if e[0] == "tick"] == [5, 4, 3, 2, 1, 0]
    assert events.count(("expired",)) == 1
    assert events[-1] == ("expired",)
    assert scheduler.pending == []

    scheduler.advance(3)
    assert events.count(("expired",)) == 1
    assert timer.remaining_seconds == 0


def test_low_time_flag_follows_original_total(timer, scheduler, events):
    timer.start(10)
    scheduler.advance(10)
    flags = {e[1]: e[2] for e in events if e[0] == "tick"}
    assert [r for r, low in sorted(flags.items()) if low] == [0, 1, 2, 3]
    assert not any(low for r, low in flags.items() if r > 3)


@pytest.mark.parametrize("total", [0, -5])
def test_invalid_duration_is_rejected(timer, scheduler, events, total):
    with pytest.raises(InvalidDurationError):
        timer.start(total)
    assert timer.status == TimerStatus.IDLE
    assert events == []
    assert scheduler.pending == []


def test_stop_makes_scheduled_tick_inert(timer, scheduler, events):
    timer.start(5)
    stale = scheduler.pending[0]
    timer.stop()
    assert timer.status == TimerStatus.IDLE
    assert stale.cancelled

    # Even if the scheduler fires it anyway, nothing happens.
    stale.callback()
    assert timer.remaining_seconds == 5
    assert events == [("tick", 5, False)]


def test_restart_ignores_ticks_from_previous_run(timer, scheduler, events):
    timer.start(5)
    stale = scheduler.pending[0]
    timer.start(3)
    stale.callback()
    assert timer.remaining_seconds == 3

    scheduler.advance(3)
    assert timer.status == TimerStatus.EXPIRED
    assert events.count(("expired",)) == 1


def test_stop_from_tick_callback_suppresses_expiry(scheduler):
    events = []
    timer = CountdownTimer(scheduler=scheduler)
    timer._on_tick = lambda remaining, low: timer.stop() if remaining == 0 else None
    timer._on_expired = lambda: events.append("expired")
    timer.start(2)
    scheduler.advance(2)
    assert events == []
    assert timer.status == TimerStatus.IDLE


def test_stop_clear_resets_values(timer):
    timer.start(30)
    timer.stop(clear=True)
    assert timer.total_seconds == 0
    assert timer.remaining_seconds == 0
    assert timer.is_low_time is False


def test_threading_scheduler_runs_in_real_time():
    expired = threading.Event()
    ticks = []
    timer = CountdownTimer(
        on_tick=lambda remaining, low: ticks.append(remaining),
        on_expired=expired.set,
        interval=0.01,
    )
    timer.start(3)
    assert expired.wait(timeout=5)
    assert ticks == [3, 2, 1, 0]
    assert timer.status == TimerStatus.EXPIRED

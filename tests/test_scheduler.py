"""Fetch loop cadence and budget validation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tweetie.errors import SchedulerError
from tweetie.scheduler import run_fetch_loop
from tweetie.testing import SleepRecorder


def _clock(*moments: datetime):
    values = list(moments)

    def _now() -> datetime:
        if not values:
            raise AssertionError("clock exhausted; test made an unexpected time lookup.")
        return values.pop(0)

    return _now


def test_run_fetch_loop_refreshes_immediately_then_on_interval() -> None:
    start = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    batches = iter([[1, 2], None, [3]])
    sleeper = SleepRecorder()

    result = run_fetch_loop(
        lambda: next(batches),
        interval_seconds=30,
        max_cycles=3,
        now_fn=_clock(
            start,
            start + timedelta(seconds=2),
            start + timedelta(seconds=30),
            start + timedelta(seconds=31),
            start + timedelta(seconds=60),
        ),
        sleep_fn=sleeper,
    )

    assert [cycle.fetched for cycle in result.cycles] == [2, None, 1]
    assert [cycle.skipped for cycle in result.cycles] == [False, True, False]
    assert sleeper.calls == [28.0, 29.0]
    assert result.total_fetched == 3
    assert result.cycles[-1].next_run_at is None
    assert not result.interrupted


def test_run_fetch_loop_reports_interrupt() -> None:
    def _interrupt(seconds: float) -> None:
        raise KeyboardInterrupt

    result = run_fetch_loop(lambda: [], interval_seconds=5, max_cycles=3, sleep_fn=_interrupt)
    assert result.interrupted
    assert len(result.cycles) == 1


@pytest.mark.parametrize(
    ("interval_seconds", "max_cycles", "message"),
    [(30, 0, "max_cycles"), (0, 1, "interval_seconds")],
)
def test_run_fetch_loop_rejects_non_positive_arguments(
    interval_seconds: int, max_cycles: int, message: str
) -> None:
    with pytest.raises(SchedulerError, match=message):
        run_fetch_loop(lambda: None, interval_seconds=interval_seconds, max_cycles=max_cycles)

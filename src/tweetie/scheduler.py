"""Interval loop driving timeline refreshes."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import time as time_module

from tweetie.errors import SchedulerError
from tweetie.logging import get_logger

logger = get_logger(__name__)

RefreshFn = Callable[[], "Sequence[object] | None"]
NowFn = Callable[[], datetime]
SleepFn = Callable[[float], None]


@dataclass(frozen=True)
class FetchCycleResult:
    cycle: int
    started_at: datetime
    fetched: int | None
    next_run_at: datetime | None = None
    sleep_seconds: float = 0.0

    @property
    def skipped(self) -> bool:
        return self.fetched is None


@dataclass(frozen=True)
class FetchLoopResult:
    cycles: tuple[FetchCycleResult, ...]
    interrupted: bool = False

    @property
    def total_fetched(self) -> int:
        return sum(cycle.fetched or 0 for cycle in self.cycles)


def run_fetch_loop(
    refresh: RefreshFn,
    *,
    interval_seconds: int,
    max_cycles: int,
    now_fn: NowFn | None = None,
    sleep_fn: SleepFn | None = None,
) -> FetchLoopResult:
    """Call ``refresh`` right away, then once per interval, ``max_cycles`` times in total.

    Intervals are measured from the start of each cycle, so slow refreshes
    shorten the following sleep. Ctrl-C ends the loop early with
    ``interrupted=True`` and the cycles completed so far.
    """
    if max_cycles <= 0:
        raise SchedulerError("max_cycles must be > 0.")
    if interval_seconds <= 0:
        raise SchedulerError("interval_seconds must be > 0.")

    clock = now_fn or _utcnow
    sleep = sleep_fn or time_module.sleep
    interval = timedelta(seconds=interval_seconds)
    cycles: list[FetchCycleResult] = []

    try:
        for number in range(1, max_cycles + 1):
            started_at = _as_utc(clock())
            batch = refresh()
            fetched = None if batch is None else len(batch)

            if number == max_cycles:
                cycles.append(FetchCycleResult(number, started_at, fetched))
                logger.debug("Fetch cycle %d fetched=%s (last)", number, fetched)
                break

            due = started_at + interval
            wait = max(0.0, (due - _as_utc(clock())).total_seconds())
            cycles.append(FetchCycleResult(number, started_at, fetched, due, wait))
            logger.debug("Fetch cycle %d fetched=%s; next in %.1fs", number, fetched, wait)
            sleep(wait)
    except KeyboardInterrupt:
        logger.info("Fetch loop interrupted after %d cycle(s)", len(cycles))
        return FetchLoopResult(cycles=tuple(cycles), interrupted=True)

    return FetchLoopResult(cycles=tuple(cycles))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

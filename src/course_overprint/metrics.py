"""Stage timings and counters for a render."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from time import perf_counter
from typing import Dict, Iterator, List, Optional, Tuple

_ACTIVE: ContextVar[Optional["MetricsTracker"]] = ContextVar("course_overprint_metrics", default=None)


@dataclass
class MetricsTracker:
    """Accumulates wall-clock time per render stage and item counters."""

    timings: Dict[str, float] = field(default_factory=dict)
    counters: Dict[str, int] = field(default_factory=dict)

    def add_time(self, stage: str, seconds: float) -> None:
        if seconds >= 0.0:
            self.timings[stage] = self.timings.get(stage, 0.0) + seconds

    def increment(self, key: str, amount: int = 1) -> None:
        self.counters[key] = self.counters.get(key, 0) + amount

    def get_time(self, stage: str) -> float:
        return self.timings.get(stage, 0.0)

    def get_count(self, key: str) -> int:
        return self.counters.get(key, 0)

    def summary_rows(self) -> List[Tuple[str, str]]:
        """``(label, value)`` pairs: stage times in ms, then counters."""
        rows = [(stage, f"{seconds * 1000:.1f} ms") for stage, seconds in self.timings.items()]
        rows.extend((key, str(value)) for key, value in self.counters.items())
        return rows


def get_tracker() -> Optional[MetricsTracker]:
    return _ACTIVE.get()


@contextmanager
def use_tracker(tracker: MetricsTracker) -> Iterator[MetricsTracker]:
    token = _ACTIVE.set(tracker)
    try:
        yield tracker
    finally:
        _ACTIVE.reset(token)


def count(key: str, amount: int = 1) -> None:
    tracker = get_tracker()
    if tracker is not None:
        tracker.increment(key, amount)


class Timer:
    """Times a render stage into the given or the active tracker.

    With a *logger*, the duration is also logged at *level*.
    """

    def __init__(
        self,
        stage: str,
        *,
        tracker: Optional[MetricsTracker] = None,
        logger: Optional[logging.Logger] = None,
        level: int = logging.DEBUG,
    ) -> None:
        self.stage = stage
        self.tracker = tracker
        self.logger = logger
        self.level = level
        self.duration = 0.0
        self._started = 0.0

    def __enter__(self) -> "Timer":
        self._started = perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.duration = perf_counter() - self._started
        tracker = self.tracker or get_tracker()
        if tracker is not None:
            tracker.add_time(self.stage, self.duration)
        if self.logger is not None:
            self.logger.log(self.level, "%s took %.3f s", self.stage, self.duration)


__all__ = ["MetricsTracker", "Timer", "count", "get_tracker", "use_tracker"]

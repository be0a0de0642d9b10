"""
performance monitoring - named timers with percentile stats.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional


logger = logging.getLogger("ubicity.timing")


@dataclass
class TimingStats:
    """summary of recorded durations for one operation (ms)."""
    count: int
    min: float
    max: float
    mean: float
    median: float
    p95: float
    p99: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "median": self.median,
            "p95": self.p95,
            "p99": self.p99,
        }


class PerformanceMonitor:
    """
    records operation durations by name.
    start/end pairs or the timed() context manager.
    """

    def __init__(self):
        self._metrics: Dict[str, List[float]] = {}
        self._marks: Dict[str, float] = {}

    def start(self, name: str):
        self._marks[name] = time.perf_counter()

    def end(self, name: str) -> float:
        """stop the named timer, record and return duration in ms."""
        started = self._marks.pop(name, None)
        if started is None:
            logger.warning(f"no start mark for: {name}")
            return 0.0

        duration = (time.perf_counter() - started) * 1000
        self._metrics.setdefault(name, []).append(duration)
        return duration

    def record(self, name: str, duration_ms: float):
        self._metrics.setdefault(name, []).append(duration_ms)

    @contextmanager
    def timed(self, name: str) -> Iterator[None]:
        """time a block; the duration is recorded even if it raises."""
        self.start(name)
        try:
            yield
        finally:
            duration = self.end(name)
            logger.debug(f"{name}: {duration:.2f}ms")

    def get_stats(self, name: str) -> Optional[TimingStats]:
        values = self._metrics.get(name)
        if not values:
            return None

        ordered = sorted(values)
        n = len(ordered)
        return TimingStats(
            count=n,
            min=ordered[0],
            max=ordered[-1],
            mean=sum(ordered) / n,
            median=ordered[n // 2],
            p95=ordered[int(n * 0.95)],
            p99=ordered[int(n * 0.99)],
        )

    def get_all_stats(self) -> Dict[str, TimingStats]:
        return {name: self.get_stats(name) for name in self._metrics if self._metrics[name]}

    def reset(self):
        self._metrics.clear()
        self._marks.clear()

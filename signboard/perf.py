from __future__ import annotations
import logging
import time
from typing import Callable, List

logger = logging.getLogger(__name__)


class Perf:
    """Collects run durations and periodically logs mean/min/max."""

    def __init__(self, description: str, timer: Callable[[], float] = time.perf_counter) -> None:
        self.description = description
        self.timer = timer
        self.durations: List[float] = []
        self._start = timer()
        self.last_report = timer()

    def start(self) -> None:
        self._start = self.timer()

    def stop(self) -> None:
        self.durations.append(self.timer() - self._start)

    def report_after(self, seconds: float) -> bool:
        now = self.timer()
        if now - self.last_report < seconds:
            return False
        self.last_report = now
        count = len(self.durations)
        mean = sum(self.durations) / count if count else 0.0
        low = min(self.durations, default=0.0)
        high = max(self.durations, default=0.0)
        logger.debug(
            "%s: runs %d, mean %.3f ms, min %.3f ms, max %.3f ms",
            self.description,
            count,
            mean * 1000,
            low * 1000,
            high * 1000,
        )
        self.durations.clear()
        return True

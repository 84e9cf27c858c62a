from __future__ import annotations

import time
from collections.abc import Callable, Iterable


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class TaskIdGenerator:
    """Timestamp-like task ids that never repeat within a session.

    Each id is the current wall-clock time in milliseconds, bumped past the
    last issued id when the clock has not advanced.
    """

    def __init__(self, clock: Callable[[], int] = _now_ms) -> None:
        self._clock = clock
        self._last = 0

    def seed(self, existing_ids: Iterable[int]) -> None:
        self._last = max([self._last, *existing_ids])

    def next_id(self) -> int:
        self._last = max(self._clock(), self._last + 1)
        return self._last

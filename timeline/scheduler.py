# timeline/scheduler.py
import heapq, itertools, logging
from typing import Any, Callable, List, Tuple


class Scheduler:
    """Fire-once timers on a clock advanced by the main loop.

    Nothing here is cancelable. Callbacks run on the caller's thread, in
    fire-time order (ties in the order they were scheduled), each to completion.
    """
    def __init__(self, start: float = 0.0, tolerance: float = 1e-6):
        self.time = float(start)
        self.tolerance = tolerance
        self._seq = itertools.count()
        self._heap: List[Tuple[float, int, Callable[..., Any], tuple]] = []

    def call_later(self, delay: float, fn: Callable[..., Any], *args) -> float:
        when = self.time + max(0.0, float(delay))
        heapq.heappush(self._heap, (when, next(self._seq), fn, args))
        return when

    def step(self, dt: float) -> int:
        self.time += max(0.0, dt)
        return self.run_due()

    def advance_to(self, t: float) -> int:
        """Run every timer up to and including t (used by tests)."""
        ran = 0
        # 中途排進來的計時器也要依序執行
        while self._heap and self._heap[0][0] <= t + self.tolerance:
            self.time = max(self.time, self._heap[0][0])
            ran += self.run_due()
        self.time = max(self.time, t)
        return ran

    def run_due(self) -> int:
        ran = 0
        while self._heap and self._heap[0][0] <= self.time + self.tolerance:
            _when, _, fn, args = heapq.heappop(self._heap)
            try:
                fn(*args)
            except Exception:
                logging.exception("Timer callback %r failed", fn)
            ran += 1
        return ran

    @property
    def pending(self) -> int:
        return len(self._heap)

    def fire_times(self) -> List[float]:
        return sorted(w for w, *_ in self._heap)

"""
Planlegging av enkeltkall ("kjør om N ms") for tick-løkka.
- ThreadingScheduler: ekte timere (threading.Timer), én per post.
- ManualScheduler: virtuell klokke; kall kjøres synkront ved advance().
"""
from __future__ import annotations
import heapq
import itertools
import threading
from typing import Callable, List, Optional, Protocol, Set, Tuple

Callback = Callable[[], None]


class Scheduler(Protocol):
    def post_delayed(self, delay_ms: int, callback: Callback) -> None: ...

    def cancel_all(self) -> None: ...

    def pending(self) -> int: ...


class ThreadingScheduler:
    def __init__(self) -> None:
        self._timers: Set[threading.Timer] = set()
        self._lock = threading.Lock()

    def post_delayed(self, delay_ms: int, callback: Callback) -> None:
        timer: threading.Timer

        def fire() -> None:
            with self._lock:
                self._timers.discard(timer)
            callback()

        timer = threading.Timer(max(0, delay_ms) / 1000.0, fire)
        timer.daemon = True  # må ikke holde prosessen i live
        with self._lock:
            self._timers.add(timer)
        timer.start()

    def cancel_all(self) -> None:
        with self._lock:
            timers = list(self._timers)
            self._timers.clear()
        for t in timers:
            t.cancel()

    def pending(self) -> int:
        with self._lock:
            return len(self._timers)


class ManualScheduler:
    """Scheduler med egen klokke; brukes av tester og verter med egen løkke."""

    def __init__(self, now_ms: int = 0) -> None:
        self.now_ms = int(now_ms)
        self._queue: List[Tuple[int, int, Callback]] = []
        self._seq = itertools.count()

    def now(self) -> int:
        return self.now_ms

    def post_delayed(self, delay_ms: int, callback: Callback) -> None:
        due = self.now_ms + max(0, int(delay_ms))
        heapq.heappush(self._queue, (due, next(self._seq), callback))

    def cancel_all(self) -> None:
        self._queue.clear()

    def pending(self) -> int:
        return len(self._queue)

    def next_due_ms(self) -> Optional[int]:
        return self._queue[0][0] if self._queue else None

    def run_next(self) -> bool:
        """Hopp klokka fram til neste kall og kjør det."""
        if not self._queue:
            return False
        due, _, cb = heapq.heappop(self._queue)
        self.now_ms = max(self.now_ms, due)
        cb()
        return True

    def advance(self, ms: int) -> int:
        """Flytt klokka `ms` fram; kjør alt som forfaller underveis, i rekkefølge."""
        end = self.now_ms + int(ms)
        ran = 0
        while self._queue and self._queue[0][0] <= end:
            self.run_next()
            ran += 1
        self.now_ms = end
        return ran

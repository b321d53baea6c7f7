"""A min-heap timer that runs callbacks on a background thread when they expire."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timedelta
from typing import Callable, Optional, Union

DEBUG = False
TIMER_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)

DurationLike = Union[timedelta, float, int]


def _seconds(value: DurationLike) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


class TimerData:
    """One scheduled entry of a :class:`Timer`."""

    __slots__ = ("key", "_expire", "_deadline", "_fn", "_index")

    def __init__(self, key: str = "") -> None:
        self.key = key
        self._expire = datetime.now()
        self._deadline = time.monotonic()
        self._fn: Optional[Callable[[], None]] = None
        self._index = -1

    @property
    def index(self) -> int:
        """Position in the heap, or -1 when not scheduled."""
        return self._index

    def _schedule(self, seconds: float) -> None:
        self._deadline = time.monotonic() + seconds
        self._expire = datetime.now() + timedelta(seconds=seconds)

    def delay(self) -> timedelta:
        """Time left until expiry (negative once past)."""
        return timedelta(seconds=self._deadline - time.monotonic())

    def expire_string(self) -> str:
        """Expiry as local wall-clock time."""
        return self._expire.strftime(TIMER_FORMAT)


class Timer:
    """Schedules callbacks; each fires once, in expiry order, off the caller's thread."""

    def __init__(self, num: int) -> None:
        self._cond = threading.Condition()
        self._timers: list[TimerData] = []
        self._thread: Optional[threading.Thread] = None
        self._stop: Optional[threading.Event] = None
        self._num = 0
        self.init(num)

    def init(self, num: int) -> None:
        """Drop all entries and start afresh; ``num`` is the expected number of entries."""
        if num < 1:
            raise ValueError("timer needs a positive capacity")
        self.close()
        stop = threading.Event()
        with self._cond:
            self._num = num
            self._timers = []
            self._stop = stop
        self._thread = threading.Thread(
            target=self._run, args=(stop,), name="timer", daemon=True
        )
        self._thread.start()

    def close(self) -> None:
        """Stop the background thread; pending entries never fire."""
        thread, stop = self._thread, self._stop
        if thread is None or stop is None:
            return
        with self._cond:
            stop.set()
            self._cond.notify_all()
        if thread is not threading.current_thread():
            thread.join()
        self._thread = None
        self._stop = None

    def __enter__(self) -> "Timer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __len__(self) -> int:
        with self._cond:
            return len(self._timers)

    def add(self, expire: DurationLike, fn: Optional[Callable[[], None]]) -> TimerData:
        """Schedule ``fn`` to run after ``expire`` (a timedelta or seconds)."""
        td = TimerData()
        with self._cond:
            td._fn = fn
            td._schedule(_seconds(expire))
            self._push(td)
        return td

    def delete(self, td: TimerData) -> None:
        """Unschedule ``td``; nothing happens if it already fired or was removed."""
        with self._cond:
            self._remove(td)
            td._fn = None

    def set(self, td: TimerData, expire: DurationLike) -> None:
        """Reschedule ``td`` to expire ``expire`` from now."""
        with self._cond:
            self._remove(td)
            td._schedule(_seconds(expire))
            self._push(td)

    def _run(self, stop: threading.Event) -> None:
        with self._cond:
            while not stop.is_set():
                if not self._timers:
                    self._cond.wait()
                    continue
                td = self._timers[0]
                remaining = td._deadline - time.monotonic()
                if remaining > 0:
                    self._cond.wait(remaining)
                    continue
                fn = td._fn
                self._remove(td)
                self._cond.release()
                try:
                    self._fire(td, fn)
                finally:
                    self._cond.acquire()

    @staticmethod
    def _fire(td: TimerData, fn: Optional[Callable[[], None]]) -> None:
        if fn is None:
            logger.warning("expire timer no fn")
            return
        if DEBUG:
            logger.debug("timer key: %s, expire: %s expired, call fn", td.key, td.expire_string())
        try:
            fn()
        except Exception:
            logger.exception("timer callback failed for key %r", td.key)

    def _push(self, td: TimerData) -> None:
        td._index = len(self._timers)
        self._timers.append(td)
        self._up(td._index)
        if td._index == 0:
            self._cond.notify_all()
        if DEBUG:
            logger.debug(
                "timer: push item key: %s, expire: %s, index: %d",
                td.key, td.expire_string(), td._index,
            )

    def _remove(self, td: TimerData) -> None:
        i = td._index
        last = len(self._timers) - 1
        if i < 0 or i > last or self._timers[i] is not td:
            return
        if i != last:
            self._swap(i, last)
            self._down(i, last)
            self._up(i)
        self._timers[last]._index = -1
        self._timers.pop()

    def _less(self, i: int, j: int) -> bool:
        return self._timers[i]._deadline < self._timers[j]._deadline

    def _swap(self, i: int, j: int) -> None:
        timers = self._timers
        timers[i], timers[j] = timers[j], timers[i]
        timers[i]._index = i
        timers[j]._index = j

    def _up(self, j: int) -> None:
        while j > 0:
            parent = (j - 1) // 2
            if not self._less(j, parent):
                break
            self._swap(parent, j)
            j = parent

    def _down(self, i: int, n: int) -> None:
        while True:
            left = 2 * i + 1
            if left >= n:
                break
            child = left
            right = left + 1
            if right < n and not self._less(left, right):
                child = right
            if not self._less(child, i):
                break
            self._swap(i, child)
            i = child
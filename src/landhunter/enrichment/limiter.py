"""Multi-window sliding-log rate limiter."""

from __future__ import annotations

import asyncio
import time
from collections import deque
from collections.abc import Awaitable, Callable, Iterable

from landhunter.config import RateWindow


class SlidingWindowLimiter:
    """Admit dispatches while honoring several rate windows at once.

    A dispatch at time ``t`` counts against a window of ``seconds`` for every
    later admission at ``now`` with ``now - t < seconds``. An admission is
    allowed only if it keeps every window at or below its count. Waiters are
    served first-in-first-out.
    """

    def __init__(
        self,
        windows: Iterable[RateWindow],
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._windows = tuple(windows)
        if not self._windows:
            raise ValueError("at least one rate window is required")
        self._clock = clock
        self._sleep = sleep
        # Only the most recent ``max(count)`` dispatches can ever block an admission.
        self._dispatches: deque[float] = deque(maxlen=max(w.count for w in self._windows))
        self._lock = asyncio.Lock()

    @property
    def windows(self) -> tuple[RateWindow, ...]:
        return self._windows

    def _wait_time(self, now: float) -> float:
        wait = 0.0
        for window in self._windows:
            if len(self._dispatches) < window.count:
                continue
            oldest_in_window = self._dispatches[-window.count]
            wait = max(wait, oldest_in_window + window.seconds - now)
        return wait

    def would_admit(self) -> bool:
        """Whether a dispatch right now would be admitted without waiting."""
        return self._wait_time(self._clock()) <= 0

    def in_window(self, seconds: float) -> int:
        """Number of recorded dispatches within the last *seconds*."""
        now = self._clock()
        return sum(1 for ts in self._dispatches if now - ts < seconds)

    async def acquire(self, *, still_wanted: Callable[[], bool] | None = None) -> float | None:
        """Wait until a dispatch is admissible, record it and return its timestamp.

        *still_wanted* is checked before every wait and right before the
        dispatch is recorded. Once it returns ``False`` nothing is recorded
        and ``None`` is returned.
        """
        async with self._lock:
            while True:
                if still_wanted is not None and not still_wanted():
                    return None
                now = self._clock()
                wait = self._wait_time(now)
                if wait <= 0:
                    self._dispatches.append(now)
                    return now
                await self._sleep(wait)

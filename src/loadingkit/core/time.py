"""Clock abstraction used by debounce timers and simulated network delays.

Controllers never call ``asyncio.sleep`` directly; they sleep on a
:class:`TimeSource` so tests can drive quiet windows and fetch latencies
deterministically.

Real-time usage:
    ts = RealTimeSource()
    await ts.sleep(0.5)

Simulated time usage:
    ts = SimTimeSource()
    task = asyncio.create_task(ts.sleep(0.5))
    await asyncio.sleep(0)
    ts.advance(0.5)  # wakes the sleeper
    await task
"""

from __future__ import annotations

import asyncio
import heapq
import time
from typing import Protocol

__all__ = [
    "TimeSource",
    "RealTimeSource",
    "SimTimeSource",
]


class TimeSource(Protocol):
    """Monotonic clock plus an awaitable sleep."""

    def monotonic(self) -> float:
        """Return monotonic time in seconds."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task for *seconds*."""
        ...


class RealTimeSource:
    """Wall-clock implementation backed by ``time.monotonic`` and asyncio."""

    def __init__(self, *, scale: float = 1.0) -> None:
        # scale < 1 shortens every sleep; 0 turns sleeps into bare yields
        self._scale = max(0.0, float(scale))

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds) * self._scale)


class SimTimeSource:
    """Deterministic simulated clock.

    - ``advance(dt)`` steps time forward and resolves due sleepers
    - ``set_time(t)`` jumps to an absolute time (forward only)
    - ``sleep(sec)`` parks the caller until the clock reaches its due time
    - cancelled sleepers are skipped when their due time passes

    Example:
        ts = SimTimeSource(start=10.0)
        task = asyncio.create_task(ts.sleep(1.5))
        await asyncio.sleep(0)
        ts.advance(1.5)
        await task
    """

    def __init__(self, *, start: float = 0.0) -> None:
        self._now: float = float(start)
        # heap of (due_time, seq, future); seq breaks ties in FIFO order
        self._sleepers: list[tuple[float, int, asyncio.Future[None]]] = []
        self._seq: int = 0

    def monotonic(self) -> float:
        return self._now

    def set_time(self, t: float) -> None:
        """Jump to absolute time *t*.

        Raises:
            ValueError: If *t* is earlier than the current time
        """
        if t < self._now:
            raise ValueError(f"Cannot set time backwards: {t} < {self._now}")
        self._now = float(t)
        self._wake_due_sleepers()

    def advance(self, dt: float) -> None:
        """Advance simulated time by *dt* seconds.

        Raises:
            ValueError: If *dt* is negative
        """
        if dt < 0:
            raise ValueError(f"Cannot advance time backwards: dt={dt}")
        self._now += dt
        self._wake_due_sleepers()

    async def sleep(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError(f"Sleep duration must be non-negative: {seconds}")
        if seconds == 0:
            await asyncio.sleep(0)
            return

        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._seq += 1
        heapq.heappush(self._sleepers, (self._now + seconds, self._seq, future))
        await future

    def pending(self) -> int:
        """Return the number of sleepers that are still waiting."""
        return sum(1 for _, _, fut in self._sleepers if not fut.done())

    def next_due_monotonic(self) -> float | None:
        """Return the due time of the earliest live sleeper, if any."""
        live = [due for due, _, fut in self._sleepers if not fut.done()]
        return min(live) if live else None

    def _wake_due_sleepers(self) -> None:
        while self._sleepers and self._sleepers[0][0] <= self._now:
            _, _, future = heapq.heappop(self._sleepers)
            if not future.done():
                future.set_result(None)

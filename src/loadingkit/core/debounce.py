"""Debounced query emission with stale-result suppression.

Raw text arrives on every keystroke through :meth:`DebouncedQueryController.push`.
Each push cancels the pending timer and arms a new one for the quiet window;
when a timer expires the latest text is emitted, unless it equals the
previously emitted query. Every emission takes a new generation token and
runs the query handler as a task. A handler result is forwarded to
``on_result`` only while its generation is still the newest one.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, Set, TypeVar

from .exceptions import ControllerDisposed, StaleResult
from .notifier import StateNotifier
from .time import RealTimeSource, TimeSource
from .tokens import Generation

__all__ = ["DebouncedQueryController", "Emission", "DEFAULT_QUIET_WINDOW_S"]

logger = logging.getLogger(__name__)

R = TypeVar("R")

DEFAULT_QUIET_WINDOW_S = 0.5


@dataclass(frozen=True, slots=True)
class Emission:
    """One effective query handed to the handler."""

    generation: int
    text: str


class DebouncedQueryController(Generic[R]):
    """Turns a keystroke stream into rate-limited query emissions.

    Parameters
    ----------
    on_query:
        Coroutine function invoked with each effective query.
    on_result:
        Optional callback receiving ``(query, result)`` for current
        generations only.
    quiet_window_s:
        Time without input required before a query is emitted.
    ts:
        Clock used for the timer; tests pass a ``SimTimeSource``.
    """

    def __init__(
        self,
        on_query: Callable[[str], Awaitable[R]],
        *,
        on_result: Optional[Callable[[str, R], None]] = None,
        quiet_window_s: float = DEFAULT_QUIET_WINDOW_S,
        ts: TimeSource | None = None,
        initial: str = "",
    ) -> None:
        if quiet_window_s < 0:
            raise ValueError("quiet_window_s must be >= 0")
        self._on_query = on_query
        self._on_result = on_result
        self._window = float(quiet_window_s)
        self._ts: TimeSource = ts or RealTimeSource()
        self._generation = Generation()
        self._raw = initial
        self._last_emitted = initial
        self._deadline = 0.0
        self._timer: asyncio.Task[None] | None = None
        self._inflight: Set[asyncio.Task[None]] = set()
        self._disposed = False
        # fires once per emission; reset() does not touch it
        self.emitted: StateNotifier[Optional[Emission]] = StateNotifier(None)

    @property
    def raw(self) -> str:
        """Most recent raw input, emitted or not."""
        return self._raw

    @property
    def last_emitted(self) -> str:
        """Value the next emission is compared against."""
        return self._last_emitted

    @property
    def generation(self) -> int:
        return self._generation.current

    @property
    def pending(self) -> bool:
        """True while a timer is armed."""
        return self._timer is not None and not self._timer.done()

    @property
    def disposed(self) -> bool:
        return self._disposed

    def is_current(self, generation: int) -> bool:
        return self._generation.is_current(generation)

    def push(self, text: str) -> None:
        """Record a raw input value and re-arm the quiet-window timer."""
        if self._disposed:
            raise ControllerDisposed("debounced query controller is disposed")
        self._raw = text
        self._cancel_timer()
        self._deadline = self._ts.monotonic() + self._window
        self._timer = asyncio.get_running_loop().create_task(
            self._wait_and_emit(), name="debounce-timer"
        )

    def flush(self) -> bool:
        """Emit a pending query now instead of waiting for the timer."""
        if not self.pending:
            return False
        self._cancel_timer()
        return self._emit()

    def reset(self, text: str = "") -> None:
        """Cancel the timer and overwrite the raw buffer without emitting.

        The comparison value is set to *text* as well: typing the same query
        again after ``reset("")`` emits it, while ``reset(text)`` marks *text*
        as already applied. Observers of :attr:`emitted` are not notified.
        """
        self._cancel_timer()
        self._raw = text
        self._last_emitted = text

    def dispose(self) -> None:
        """Cancel the timer and in-flight handlers; nothing emits afterwards."""
        if self._disposed:
            return
        self._disposed = True
        self._cancel_timer()
        self._generation.invalidate()
        for task in list(self._inflight):
            task.cancel()
        self.emitted.dispose()
        logger.info("debounced query controller disposed")

    async def wait_idle(self) -> None:
        """Wait until no handler task is running."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    # Internals -----------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _wait_and_emit(self) -> None:
        remaining = self._deadline - self._ts.monotonic()
        await self._ts.sleep(max(0.0, remaining))
        self._timer = None
        self._emit()

    def _emit(self) -> bool:
        if self._disposed:
            return False
        text = self._raw
        if text == self._last_emitted:
            logger.debug("debounce: %r unchanged, not emitted", text)
            return False
        generation = self._generation.next()
        self._last_emitted = text
        self.emitted.set(Emission(generation=generation, text=text))
        logger.debug("debounce: emitting %r (generation %d)", text, generation)
        task = asyncio.get_running_loop().create_task(
            self._dispatch(text, generation), name=f"query:{generation}"
        )
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return True

    async def _dispatch(self, text: str, generation: int) -> None:
        try:
            result = await self._on_query(text)
        except asyncio.CancelledError:
            raise
        except Exception:
            # handlers report their own failures; this only keeps the task quiet
            logger.exception("debounce: query handler failed for %r", text)
            return
        try:
            self._generation.ensure_current(generation)
        except StaleResult as stale:
            logger.debug("debounce: dropping result for %r: %s", text, stale)
            return
        if self._on_result is not None:
            self._on_result(text, result)

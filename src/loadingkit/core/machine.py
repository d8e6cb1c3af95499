"""Single-shot loading state machine.

``LoadingStateMachine`` drives one asynchronous fetch through
``loading -> success | error`` and back to ``loading`` on an explicit
:meth:`~LoadingStateMachine.retry`. It never retries on its own and never
touches presentation; it only publishes :class:`AsyncResult` values.

Example usage:

    machine = LoadingStateMachine(lambda: users.get_user("123"))
    machine.listen(lambda prev, cur: render(cur))
    await machine.wait()
    if machine.state.is_error:
        machine.retry()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from .events import EventBus
from .exceptions import ControllerDisposed, FetchFailure
from .notifier import Listener, StateNotifier, Subscription
from .results import AsyncResult

__all__ = ["LoadingStateMachine", "Fetch"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetch = Callable[[], Awaitable[T]]


class LoadingStateMachine(Generic[T]):
    """Publishes :class:`AsyncResult` transitions for one resource.

    Parameters
    ----------
    fetch:
        Zero-argument coroutine function producing the resource.
    error_prefix:
        Prepended to the failure description in ``error`` states.
    describe:
        Converts a fetch exception into the display message; defaults to
        :meth:`FetchFailure.describe`.
    retain_data_on_error:
        When True an ``error`` that follows a ``success`` keeps the last
        successful data alongside the message; when False it is dropped.
    autostart:
        Begin the first fetch from the constructor (needs a running loop).
    """

    def __init__(
        self,
        fetch: Fetch[T],
        *,
        error_prefix: str = "",
        describe: Optional[Callable[[BaseException], str]] = None,
        retain_data_on_error: bool = True,
        autostart: bool = True,
        bus: EventBus | None = None,
        topic: str | None = None,
        name: str = "resource",
    ) -> None:
        self._fetch = fetch
        self._describe = describe or (
            lambda exc: FetchFailure.describe(exc, prefix=error_prefix)
        )
        self._retain = retain_data_on_error
        self._name = name
        self._notifier: StateNotifier[AsyncResult[T]] = StateNotifier(
            AsyncResult.loading(),
            bus=bus,
            topic=topic,
            serialize=lambda r: r.to_dict(),
        )
        self._task: asyncio.Task[None] | None = None
        self._last_data: Optional[T] = None
        self._fetch_count = 0
        self._disposed = False
        if autostart:
            self.start()

    # --- Observation -----------------------------------------------------

    @property
    def state(self) -> AsyncResult[T]:
        return self._notifier.state

    @property
    def fetch_count(self) -> int:
        """Number of fetches actually issued by this machine."""
        return self._fetch_count

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def listen(
        self, listener: Listener[AsyncResult[T]], *, fire_immediately: bool = False
    ) -> Subscription:
        return self._notifier.listen(listener, fire_immediately=fire_immediately)

    # --- Commands --------------------------------------------------------

    def start(self, fetch: Optional[Fetch[T]] = None) -> asyncio.Task[None]:
        """Begin a fetch unless one is already in flight.

        Overlapping calls return the running task instead of spawning a
        second fetch for the same resource. *fetch* replaces the stored
        fetch callable for this and later attempts.
        """
        self._check_alive()
        if self._task is not None and not self._task.done():
            logger.debug("%s: fetch already in flight, start() ignored", self._name)
            return self._task
        if fetch is not None:
            self._fetch = fetch
        if not self.state.is_loading:
            self._notifier.set(AsyncResult.loading(self.state))
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"load:{self._name}"
        )
        return self._task

    def retry(self) -> asyncio.Task[None]:
        """Reset to ``loading`` (keeping the old error/data snapshot) and fetch."""
        self._check_alive()
        if not self.state.is_loading:
            self._notifier.set(AsyncResult.loading(self.state))
        return self.start()

    async def wait(self) -> AsyncResult[T]:
        """Await the in-flight fetch (if any) and return the current state."""
        if self._task is not None:
            await asyncio.shield(self._task)
        return self.state

    def dispose(self) -> None:
        """Cancel the in-flight fetch and drop every listener."""
        if self._disposed:
            return
        self._disposed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._notifier.dispose()
        logger.info("%s: state machine disposed", self._name)

    # --- Internals -------------------------------------------------------

    async def _run(self) -> None:
        self._fetch_count += 1
        try:
            data = await self._fetch()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            message = self._describe(exc)
            logger.info("%s: fetch failed: %s", self._name, message)
            kept = self._last_data if self._retain else None
            self._notifier.set(AsyncResult.failure(message, data=kept))
            return
        if data is None:
            message = self._describe(FetchFailure("no data returned"))
            self._notifier.set(AsyncResult.failure(message))
            return
        self._last_data = data
        self._notifier.set(AsyncResult.success(data))

    def _check_alive(self) -> None:
        if self._disposed:
            raise ControllerDisposed(f"{self._name} state machine is disposed")

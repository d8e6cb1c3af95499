"""Background-refresh controller for a searchable collection.

The collection is loaded once (``is_first_load`` spinner) and afterwards
refreshed in place: a new query raises ``is_background_loading`` while the
current items stay on screen. Each fetch takes a generation token and only
the newest one may write state, so a slow reply for an old query never
overwrites the results of a newer one.

Example usage:

    ctrl = SearchController(products.get_all_products, products.search_products)
    ctrl.search_input("iph")      # debounced keystrokes
    await ctrl.refresh("iphone")  # or an explicit refresh
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, Sequence, Set, TypeVar

from .debounce import DEFAULT_QUIET_WINDOW_S, DebouncedQueryController
from .events import EventBus
from .exceptions import ControllerDisposed, StaleResult
from .notifier import Listener, StateNotifier, Subscription
from .results import SearchResult
from .time import TimeSource
from .tokens import Generation

__all__ = ["SearchController"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SearchController(Generic[T]):
    """Owns one :class:`SearchResult` and the fetches that update it.

    Parameters
    ----------
    load_all:
        Coroutine function returning the unfiltered collection.
    search:
        Coroutine function returning the items matching a query.
    load_error / search_error:
        Messages published when the respective fetch fails.
    autostart:
        Schedule :meth:`load_initial` from the constructor (needs a
        running loop).
    on_query:
        Receives each debounced query; defaults to :meth:`refresh`. Callers
        that keep the query elsewhere route it there and refresh from it.
    """

    def __init__(
        self,
        load_all: Callable[[], Awaitable[Sequence[T]]],
        search: Callable[[str], Awaitable[Sequence[T]]],
        *,
        load_error: str = "Could not load items",
        search_error: str = "Search failed",
        quiet_window_s: float = DEFAULT_QUIET_WINDOW_S,
        ts: TimeSource | None = None,
        autostart: bool = True,
        bus: EventBus | None = None,
        topic: str | None = None,
        on_query: Callable[[str], Awaitable[None]] | None = None,
    ) -> None:
        self._load_all = load_all
        self._search = search
        self._load_error = load_error
        self._search_error = search_error
        self._generation = Generation()
        self._notifier: StateNotifier[SearchResult[T]] = StateNotifier(
            SearchResult.initial(),
            bus=bus,
            topic=topic,
            serialize=lambda r: r.to_dict(),
        )
        self._tasks: Set[asyncio.Task[None]] = set()
        self._disposed = False
        self.input: DebouncedQueryController[None] = DebouncedQueryController(
            on_query or self.refresh, quiet_window_s=quiet_window_s, ts=ts
        )
        self._initial_task: asyncio.Task[None] | None = None
        if autostart:
            self._initial_task = self._spawn(self.load_initial())

    # --- Observation -----------------------------------------------------

    @property
    def state(self) -> SearchResult[T]:
        return self._notifier.state

    @property
    def generation(self) -> int:
        return self._generation.current

    def listen(
        self, listener: Listener[SearchResult[T]], *, fire_immediately: bool = False
    ) -> Subscription:
        return self._notifier.listen(listener, fire_immediately=fire_immediately)

    # --- Commands --------------------------------------------------------

    async def load_initial(self) -> None:
        """Fetch the whole collection, ignoring any query."""
        self._check_alive()
        token = self._begin(background=False)
        try:
            items = await self._load_all()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.info("initial load failed: %s", exc)
            self._commit(token, error=self._load_error)
            return
        self._commit(token, items=items)

    async def refresh(self, query: str) -> None:
        """Re-run the collection fetch for *query*; blank means load all."""
        self._check_alive()
        if not query.strip():
            await self.load_initial()
            return
        # the first-load spinner already covers a refresh issued before it ends
        token = self._begin(background=not self.state.is_first_load)
        try:
            items = await self._search(query)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.info("search %r failed: %s", query, exc)
            self._commit(token, error=self._search_error)
            return
        self._commit(token, items=items)

    def schedule_refresh(self, query: str) -> asyncio.Task[None]:
        """Run :meth:`refresh` as a task that dispose() will cancel."""
        self._check_alive()
        return self._spawn(self.refresh(query))

    def search_input(self, text: str) -> None:
        """Feed a raw keystroke value through the debouncer."""
        self._check_alive()
        self.input.push(text)

    async def wait_initial(self) -> None:
        if self._initial_task is not None:
            await asyncio.shield(self._initial_task)

    async def wait_idle(self) -> None:
        """Wait until neither a debounced nor a scheduled fetch is running."""
        await self.input.wait_idle()
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._generation.invalidate()
        self.input.dispose()
        for task in list(self._tasks):
            task.cancel()
        self._notifier.dispose()
        logger.info("search controller disposed")

    # --- Internals -------------------------------------------------------

    def _begin(self, *, background: bool) -> int:
        token = self._generation.next()
        changes: dict[str, object] = {"error": None}
        if background:
            changes["is_background_loading"] = True
        self._notifier.set(self.state.replace(**changes))
        return token

    def _commit(
        self,
        token: int,
        *,
        items: Optional[Sequence[T]] = None,
        error: Optional[str] = None,
    ) -> None:
        try:
            self._generation.ensure_current(token)
        except StaleResult as stale:
            logger.debug("discarding superseded fetch: %s", stale)
            return
        changes: dict[str, object] = {
            "is_first_load": False,
            "is_background_loading": False,
            "error": error,
        }
        if items is not None:
            changes["items"] = tuple(items)
        self._notifier.set(self.state.replace(**changes))

    def _spawn(self, coro: Awaitable[None]) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro)  # type: ignore[arg-type]
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _check_alive(self) -> None:
        if self._disposed:
            raise ControllerDisposed("search controller is disposed")

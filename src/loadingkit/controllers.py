"""
Page controllers for the three loading patterns.

- profile: a :class:`LoadingStateMachine` for one user (inline loading)
- form: :class:`FormController`, submissions guarded by the overlay
- product search: a :class:`SearchController` plus :class:`FilterController`
  (background loading)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Literal,
    Mapping,
    Optional,
    Protocol,
    Sequence,
)

from loadingkit.core.events import EventBus
from loadingkit.core.exceptions import FetchFailure
from loadingkit.core.filters import FilterController, FilterStore
from loadingkit.core.machine import LoadingStateMachine
from loadingkit.core.notifier import StateNotifier
from loadingkit.core.overlay import OverlayCoordinator, get_overlay
from loadingkit.core.results import AsyncResult
from loadingkit.core.search import SearchController
from loadingkit.core.time import TimeSource
from loadingkit.models import ContactForm, Product, User
from loadingkit.settings.schema import Settings
from loadingkit.settings.values import MESSAGES

__all__ = [
    "Notice",
    "FormController",
    "ProductSearchPage",
    "make_profile_machine",
    "UserSource",
    "ProductSource",
]

logger = logging.getLogger(__name__)


class UserSource(Protocol):
    async def get_user(self, user_id: str) -> User:
        ...


class ProductSource(Protocol):
    async def get_all_products(self) -> Sequence[Product]:
        ...

    async def search_products(
        self, query: str, category: Optional[str] = None
    ) -> Sequence[Product]:
        ...


def make_profile_machine(
    users: UserSource,
    user_id: str,
    *,
    settings: Settings | None = None,
    bus: EventBus | None = None,
    autostart: bool = True,
) -> LoadingStateMachine[User]:
    """Build the state machine behind the user profile page."""
    settings = settings or Settings()
    return LoadingStateMachine(
        lambda: users.get_user(user_id),
        error_prefix=MESSAGES["profile_error_prefix"],
        retain_data_on_error=settings.retain_data_on_error,
        autostart=autostart,
        bus=bus,
        topic=f"profile.{user_id}",
        name=f"user:{user_id}",
    )


@dataclass(frozen=True, slots=True)
class Notice:
    """Transient message for the presentation (a snackbar)."""

    seq: int
    kind: Literal["success", "error"]
    text: str


class FormController:
    """Validates and submits the contact form under the action overlay.

    The overlay is released on every exit path; the outcome is reported
    through :attr:`outcome` and :attr:`notices`, never raised.
    """

    def __init__(
        self,
        submit: Callable[[Mapping[str, Any]], Awaitable[bool]],
        *,
        overlay: OverlayCoordinator | None = None,
    ) -> None:
        self._submit = submit
        self._overlay = overlay or get_overlay()
        self._seq = 0
        self.outcome: StateNotifier[Optional[AsyncResult[bool]]] = StateNotifier(None)
        self.field_errors: StateNotifier[Dict[str, str]] = StateNotifier({})
        self.notices: StateNotifier[Optional[Notice]] = StateNotifier(None)

    async def submit(self, data: Mapping[str, Any]) -> AsyncResult[bool]:
        errors = ContactForm.validate_fields(data)
        self.field_errors.set(errors)
        if errors:
            logger.debug("form rejected: %s", sorted(errors))
            result: AsyncResult[bool] = AsyncResult.failure(
                next(iter(errors.values()))
            )
            self.outcome.set(result)
            return result

        form = ContactForm.model_validate(
            {k: data[k] for k in ("name", "email", "message")}
        )
        self.outcome.set(AsyncResult.loading(self.outcome.state))
        try:
            await self._overlay.run(lambda: self._submit(form.model_dump()))
        except Exception as exc:
            message = FetchFailure.describe(exc, prefix=MESSAGES["form_error_prefix"])
            result = AsyncResult.failure(message)
            self._notify("error", message)
        else:
            result = AsyncResult.success(True)
            self._notify("success", MESSAGES["form_success"])
        self.outcome.set(result)
        return result

    def _notify(self, kind: Literal["success", "error"], text: str) -> None:
        self._seq += 1
        self.notices.set(Notice(seq=self._seq, kind=kind, text=text))


class ProductSearchPage:
    """Search controller and filters for the product list, wired together.

    The :class:`FilterStore` is the single source of truth for the query:
    debounced keystrokes are written into ``search_text`` and every filter
    change (typed or programmatic) triggers one refresh using the text and
    ``category`` together. A programmatic ``search_text`` is copied back into
    the debouncer so the search box and the filters never disagree.
    """

    def __init__(
        self,
        products: ProductSource,
        *,
        settings: Settings | None = None,
        ts: TimeSource | None = None,
        bus: EventBus | None = None,
        autostart: bool = True,
    ) -> None:
        settings = settings or Settings()
        self._products = products
        self.search: SearchController[Product] = SearchController(
            self._load_all,
            self._search,
            load_error=MESSAGES["products_load_error"],
            search_error=MESSAGES["search_error"],
            quiet_window_s=settings.debounce_s,
            ts=ts,
            autostart=autostart,
            bus=bus,
            topic="products.search",
            on_query=self._on_query,
        )
        self.filters = FilterController(
            text_input=self.search.input, bus=bus, topic="products.filters"
        )
        self.filters.listen(self._on_filters)

    def type_text(self, text: str) -> None:
        """A keystroke in the search box."""
        self.search.search_input(text)

    def apply_filters(self, partial: Mapping[str, Any]) -> bool:
        return self.filters.update_filters(partial)

    def clear(self) -> bool:
        """Reset filters and the search box; the list reloads if anything changed."""
        return self.filters.clear()

    def dispose(self) -> None:
        self.filters.dispose()
        self.search.dispose()

    # Internals -----------------------------------------------------------

    async def _on_query(self, text: str) -> None:
        self.filters.update_filters({"search_text": text or None})

    def _on_filters(self, previous: FilterStore, current: FilterStore) -> None:
        text = current.search_text or ""
        box = self.search.input
        if text != box.last_emitted and not box.disposed:
            box.reset(text)
        self.search.schedule_refresh(text)

    async def _load_all(self) -> Sequence[Product]:
        category = self.filters.state.category
        if category:
            return await self._products.search_products("", category=category)
        return await self._products.get_all_products()

    async def _search(self, query: str) -> Sequence[Product]:
        return await self._products.search_products(
            query, category=self.filters.state.category
        )

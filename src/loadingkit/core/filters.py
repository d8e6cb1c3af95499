"""Composable filter record and the controller that publishes it.

``FilterStore`` is a frozen pydantic model: a few well-known fields
(``search_text``, ``category``, ``date_from``) plus any extra key the
caller needs. Updates go through :meth:`FilterStore.merge`, a pure
field-wise override.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .debounce import DebouncedQueryController
from .events import EventBus
from .notifier import Listener, StateNotifier, Subscription

__all__ = ["FilterStore", "FilterController", "Partial"]

logger = logging.getLogger(__name__)


class FilterStore(BaseModel):
    """Immutable set of named filter fields.

    Keys may be given by python name or by their camelCase alias
    (``searchText``, ``dateFrom``). Unknown keys are kept as extra fields.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    search_text: Optional[str] = Field(default=None, alias="searchText")
    category: Optional[str] = None
    date_from: Optional[date] = Field(default=None, alias="dateFrom")

    @classmethod
    def empty(cls) -> "FilterStore":
        return cls()

    def merge(self, partial: "Partial") -> "FilterStore":
        """Return a new store with every key present in *partial* overridden.

        Keys absent from *partial* keep their current value; a key present
        with ``None`` clears that field. When *partial* is a FilterStore only
        its explicitly set fields apply. The merged record is validated as a
        whole, so a bad value raises ``ValidationError`` and nothing applies.
        """
        if isinstance(partial, FilterStore):
            updates = partial.model_dump(exclude_unset=True)
        else:
            updates = {self._canonical(k): v for k, v in partial.items()}
        data = self.model_dump()
        data.update(updates)
        return type(self).model_validate(data)

    def clear(self) -> "FilterStore":
        return type(self).empty()

    @property
    def is_empty(self) -> bool:
        return all(v is None for v in self.model_dump().values())

    def get(self, key: str, default: Any = None) -> Any:
        return self.model_dump().get(self._canonical(key), default)

    def to_query(self) -> Dict[str, Any]:
        """Aliased, non-null fields, e.g. for building a request."""
        out: Dict[str, Any] = {}
        for key, value in self.model_dump(by_alias=True).items():
            if value is None:
                continue
            out[key] = value.isoformat() if isinstance(value, date) else value
        return out

    @classmethod
    def _canonical(cls, key: str) -> str:
        for name, info in cls.model_fields.items():
            if info.alias == key:
                return name
        return key


Partial = Union[Mapping[str, Any], FilterStore]


class FilterController:
    """Publishes :class:`FilterStore` values and keeps the text input in sync.

    Listeners fire only when a merge actually changes the filters, so a
    no-op update never triggers a downstream fetch. When *text_input* is
    given, :meth:`clear` also resets its raw buffer.
    """

    def __init__(
        self,
        *,
        initial: FilterStore | None = None,
        text_input: DebouncedQueryController[Any] | None = None,
        bus: EventBus | None = None,
        topic: str | None = None,
    ) -> None:
        self._notifier: StateNotifier[FilterStore] = StateNotifier(
            initial or FilterStore.empty(),
            bus=bus,
            topic=topic,
            serialize=lambda f: f.to_query(),
        )
        self._input = text_input

    @property
    def state(self) -> FilterStore:
        return self._notifier.state

    def listen(
        self, listener: Listener[FilterStore], *, fire_immediately: bool = False
    ) -> Subscription:
        return self._notifier.listen(listener, fire_immediately=fire_immediately)

    def update_filters(self, partial: Partial) -> bool:
        """Merge *partial*; return True when the filters changed."""
        changed = self._notifier.set(self.state.merge(partial))
        if not changed:
            logger.debug("filter update was a no-op")
        return changed

    def clear(self) -> bool:
        """Reset to the empty filter and the attached input to ``""``."""
        if self._input is not None and not self._input.disposed:
            self._input.reset("")
        return self._notifier.set(self.state.clear())

    def dispose(self) -> None:
        self._notifier.dispose()

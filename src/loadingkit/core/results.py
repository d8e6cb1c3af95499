"""Immutable state values published by the loading controllers.

``AsyncResult`` describes a single-shot fetch (a profile page) and
``SearchResult`` a collection that is loaded once and then refreshed in
place (a product search). Both are frozen; every transition builds a new
value so listeners can compare previous and current snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from dataclasses import replace as _replace
from typing import Any, Dict, Generic, Literal, Optional, Tuple, TypeVar

__all__ = ["Status", "AsyncResult", "SearchResult"]

T = TypeVar("T")

Status = Literal["loading", "error", "success"]


@dataclass(frozen=True, slots=True)
class AsyncResult(Generic[T]):
    """Tri-state outcome of one asynchronous operation.

    ``loading`` values may carry the error/data of the state they replaced so
    a retry can keep the previous content visible behind a spinner.
    """

    status: Status
    error: Optional[str] = None
    data: Optional[T] = None

    def __post_init__(self) -> None:
        if self.status == "success":
            if self.data is None:
                raise ValueError("success result requires data")
            if self.error is not None:
                raise ValueError("success result cannot carry an error")
        elif self.status == "error":
            if self.error is None:
                raise ValueError("error result requires a message")
        elif self.status != "loading":
            raise ValueError(f"unknown status: {self.status!r}")

    @classmethod
    def loading(cls, previous: "AsyncResult[T] | None" = None) -> "AsyncResult[T]":
        if previous is None:
            return cls(status="loading")
        return cls(status="loading", error=previous.error, data=previous.data)

    @classmethod
    def failure(cls, message: str, data: Optional[T] = None) -> "AsyncResult[T]":
        return cls(status="error", error=message, data=data)

    @classmethod
    def success(cls, data: T) -> "AsyncResult[T]":
        return cls(status="success", data=data)

    @property
    def is_loading(self) -> bool:
        return self.status == "loading"

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> Dict[str, Any]:
        data = self.data
        if hasattr(data, "model_dump"):
            data = data.model_dump()
        return {"status": self.status, "error": self.error, "data": data}


@dataclass(frozen=True, slots=True)
class SearchResult(Generic[T]):
    """State of a collection with one initial load and background refreshes."""

    is_first_load: bool = True
    is_background_loading: bool = False
    error: Optional[str] = None
    items: Tuple[T, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))
        if self.is_first_load and (self.items or self.is_background_loading):
            raise ValueError(
                "first-load state cannot hold items or a background load"
            )

    @classmethod
    def initial(cls) -> "SearchResult[T]":
        return cls()

    def replace(self, **changes: Any) -> "SearchResult[T]":
        """Return a copy with *changes* applied.

        ``is_first_load`` can only move from True to False.
        """
        if changes.get("is_first_load") and not self.is_first_load:
            raise ValueError("is_first_load cannot revert to True")
        items = changes.get("items")
        if items is not None and not isinstance(items, tuple):
            changes["items"] = tuple(items)
        return _replace(self, **changes)

    @property
    def shows_error_only(self) -> bool:
        """True when the error should replace the content (nothing to show)."""
        return self.error is not None and not self.items

    @property
    def is_empty(self) -> bool:
        """A finished load that produced zero items (a valid outcome)."""
        return not self.is_first_load and self.error is None and not self.items

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_first_load": self.is_first_load,
            "is_background_loading": self.is_background_loading,
            "error": self.error,
            "items": [
                i.model_dump() if hasattr(i, "model_dump") else i for i in self.items
            ],
        }

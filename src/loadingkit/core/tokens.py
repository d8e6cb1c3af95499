"""Generation counter used to discard results of superseded requests."""

from __future__ import annotations

from .exceptions import StaleResult

__all__ = ["Generation"]


class Generation:
    """Monotonically increasing request token owned by one controller.

    Every new request calls :meth:`next`; when it completes it may only
    write state if :meth:`is_current` still holds for its token, so the
    last *request* wins regardless of the order responses arrive in.
    """

    __slots__ = ("_value",)

    def __init__(self) -> None:
        self._value = 0

    @property
    def current(self) -> int:
        return self._value

    def next(self) -> int:
        self._value += 1
        return self._value

    def invalidate(self) -> None:
        """Supersede whatever is in flight without starting a new request."""
        self._value += 1

    def is_current(self, token: int) -> bool:
        return token == self._value

    def ensure_current(self, token: int) -> None:
        """Raise :class:`StaleResult` if *token* has been superseded."""
        if token != self._value:
            raise StaleResult(token, self._value)

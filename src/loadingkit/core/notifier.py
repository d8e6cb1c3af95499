"""Observable state holder with explicit, disposable subscriptions.

Controllers publish immutable values through a :class:`StateNotifier`;
the presentation layer registers listeners and re-renders on change.
Listeners receive ``(previous, current)`` and only fire when the new value
compares unequal to the old one.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, List, Optional, TypeVar

from .events import EventBus, pack

__all__ = ["StateNotifier", "Subscription", "Listener"]

logger = logging.getLogger(__name__)

S = TypeVar("S")

Listener = Callable[[S, S], None]


class Subscription:
    """Handle returned by :meth:`StateNotifier.listen`."""

    __slots__ = ("_notifier", "_listener")

    def __init__(self, notifier: "StateNotifier[S]", listener: Listener[S]) -> None:
        self._notifier: Optional[StateNotifier[S]] = notifier
        self._listener = listener

    @property
    def active(self) -> bool:
        return self._notifier is not None

    def dispose(self) -> None:
        if self._notifier is None:
            return
        self._notifier._remove(self._listener)
        self._notifier = None


class StateNotifier(Generic[S]):
    """Holds one value and notifies listeners when it changes.

    Optionally mirrors every change onto an :class:`EventBus` topic as a
    msgpack payload produced by *serialize*.
    """

    def __init__(
        self,
        initial: S,
        *,
        bus: EventBus | None = None,
        topic: str | None = None,
        serialize: Callable[[S], object] | None = None,
    ) -> None:
        self._state: S = initial
        self._listeners: List[Listener[S]] = []
        self._disposed = False
        self._bus = bus
        self._topic = topic
        self._serialize = serialize

    @property
    def state(self) -> S:
        return self._state

    @state.setter
    def state(self, value: S) -> None:
        self.set(value)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def set(self, value: S) -> bool:
        """Publish *value*; return True when listeners were notified."""
        if self._disposed:
            logger.debug("ignoring update on disposed notifier %r", self)
            return False
        previous = self._state
        if previous == value:
            return False
        self._state = value
        for listener in list(self._listeners):
            try:
                listener(previous, value)
            except Exception:
                logger.exception("state listener %r failed", listener)
        self._mirror(value)
        return True

    def listen(
        self, listener: Listener[S], *, fire_immediately: bool = False
    ) -> Subscription:
        if self._disposed:
            raise RuntimeError("cannot listen to a disposed notifier")
        self._listeners.append(listener)
        if fire_immediately:
            listener(self._state, self._state)
        return Subscription(self, listener)

    def listener_count(self) -> int:
        return len(self._listeners)

    def dispose(self) -> None:
        """Drop every listener; later updates are ignored."""
        self._disposed = True
        self._listeners.clear()

    def _remove(self, listener: Listener[S]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _mirror(self, value: S) -> None:
        if self._bus is None or self._topic is None or self._bus.closed:
            return
        try:
            payload = self._serialize(value) if self._serialize else value
            data = pack(payload)
        except (TypeError, ValueError, OverflowError):
            logger.exception("cannot mirror %r onto topic %s", value, self._topic)
            return
        self._bus.publish_nowait(self._topic, data)

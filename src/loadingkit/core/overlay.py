"""Process-wide "action in progress" overlay coordination.

Several actions may run at once (two form submissions, a submission while
a page loads). The overlay must appear when the first one starts and go
away when the last one ends, so visibility is derived from a reference
count instead of a raw boolean.

Example usage:

    overlay = get_overlay()
    overlay.attach(dialog_presenter)

    async with overlay.track():
        await service.submit_form(data)
"""

from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional, Protocol, TypeVar

from .events import OVERLAY_TOPIC, EventBus, pack
from .notifier import Listener, StateNotifier, Subscription

__all__ = [
    "OverlayCoordinator",
    "OverlayPresenter",
    "get_overlay",
    "install_overlay",
    "reset_overlay",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OverlayPresenter(Protocol):
    """Whatever actually draws the blocking overlay."""

    def show(self) -> None:
        ...

    def hide(self) -> None:
        ...


class OverlayCoordinator:
    """Reference-counted overlay visibility.

    ``begin_action`` increments the count, ``end_action`` decrements it
    (never below zero). The ``visible`` notifier only changes on the 0→1
    and 1→0 transitions, so presenters see exactly one show and one hide
    per burst of overlapping actions.
    """

    def __init__(self, *, bus: EventBus | None = None, message: str = "") -> None:
        self._count = 0
        self._bus = bus
        self.message = message
        self._visible: StateNotifier[bool] = StateNotifier(False)

    @property
    def count(self) -> int:
        return self._count

    @property
    def visible(self) -> bool:
        return self._visible.state

    def listen(
        self, listener: Listener[bool], *, fire_immediately: bool = False
    ) -> Subscription:
        return self._visible.listen(listener, fire_immediately=fire_immediately)

    def attach(self, presenter: OverlayPresenter) -> Subscription:
        """Drive *presenter* from visibility transitions.

        If the overlay is already visible the presenter is shown at once.
        """

        def _on_change(was_visible: bool, is_visible: bool) -> None:
            if is_visible and not was_visible:
                presenter.show()
            elif was_visible and not is_visible:
                presenter.hide()

        sub = self._visible.listen(_on_change)
        if self.visible:
            presenter.show()
        return sub

    def begin_action(self) -> None:
        self._count += 1
        if self._count == 1:
            self._publish(True)

    def end_action(self) -> None:
        if self._count == 0:
            logger.warning("end_action() without matching begin_action()")
            return
        self._count -= 1
        if self._count == 0:
            self._publish(False)

    @contextlib.asynccontextmanager
    async def track(self) -> AsyncIterator["OverlayCoordinator"]:
        """Hold the overlay for the duration of the block, on every exit path."""
        self.begin_action()
        try:
            yield self
        finally:
            self.end_action()

    async def run(self, action: Callable[[], Awaitable[T]]) -> T:
        """Await *action* under the overlay; its exception propagates."""
        async with self.track():
            return await action()

    def reset(self) -> None:
        """Force the count to zero (test teardown)."""
        was_visible = self._count > 0
        self._count = 0
        if was_visible:
            self._publish(False)

    def _publish(self, visible: bool) -> None:
        logger.debug("overlay %s", "shown" if visible else "hidden")
        self._visible.set(visible)
        if self._bus is not None and not self._bus.closed:
            self._bus.publish_nowait(
                OVERLAY_TOPIC, pack({"visible": visible, "message": self.message})
            )


# Process-wide instance ----------------------------------------------------
_OVERLAY: Optional[OverlayCoordinator] = None


def get_overlay() -> OverlayCoordinator:
    """Return the process-wide coordinator, creating it on first use."""
    global _OVERLAY
    if _OVERLAY is None:
        _OVERLAY = OverlayCoordinator()
    return _OVERLAY


def install_overlay(coordinator: OverlayCoordinator) -> OverlayCoordinator:
    """Replace the process-wide coordinator (application start-up)."""
    global _OVERLAY
    _OVERLAY = coordinator
    return coordinator


def reset_overlay() -> None:
    """Forget the process-wide coordinator. Only meant for tests."""
    global _OVERLAY
    _OVERLAY = None

"""loadingkit exception hierarchy."""

from __future__ import annotations


class LoadingKitError(Exception):
    """Base exception for all loadingkit errors."""


class FetchFailure(LoadingKitError):
    """A fetch collaborator failed; carries the user-facing message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @classmethod
    def describe(cls, exc: BaseException, prefix: str = "") -> str:
        """Render *exc* as a display string, optionally prefixed.

        Only the exception's class name and text survive; the exception
        object itself is never stored in published state.
        """
        if isinstance(exc, FetchFailure):
            text = exc.message
        else:
            detail = str(exc).strip()
            name = type(exc).__name__
            text = f"{name}: {detail}" if detail else name
        return f"{prefix}{text}"


class StaleResult(LoadingKitError):
    """A superseded operation tried to publish its result."""

    def __init__(self, generation: int, current: int) -> None:
        super().__init__(f"stale generation {generation} (current {current})")
        self.generation = generation
        self.current = current


class ControllerDisposed(LoadingKitError):
    """A command was issued to a controller after ``dispose()``."""


class ConfigError(LoadingKitError):
    """Raised when the settings file is invalid or cannot be read."""

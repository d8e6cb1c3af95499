"""Loading-state orchestration primitives.

Results, notifiers, state machines, the debouncer, filters and the
overlay coordinator. Everything here runs on a single asyncio loop.
"""

from .exceptions import (
    ConfigError,
    ControllerDisposed,
    FetchFailure,
    LoadingKitError,
    StaleResult,
)
from .results import AsyncResult, SearchResult

__all__ = [
    "AsyncResult",
    "SearchResult",
    "LoadingKitError",
    "FetchFailure",
    "StaleResult",
    "ControllerDisposed",
    "ConfigError",
]

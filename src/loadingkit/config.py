"""Runtime configuration helpers.

Merges the persisted :class:`Settings` with command-line overrides and
builds the clock and event bus the demo scenarios run on.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from .core.events import EventBus
from .core.exceptions import ConfigError
from .core.time import RealTimeSource, TimeSource
from .settings.schema import Settings
from .settings.store import SettingsStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RuntimeConfig:
    settings: Settings
    seed: Optional[int] = None

    def time_source(self) -> TimeSource:
        return RealTimeSource(scale=self.settings.time_scale)

    def rng(self) -> random.Random:
        return random.Random(self.seed)

    def bus(self) -> EventBus:
        """Event bus whose subscriber queues hold ``event_queue_size`` envelopes."""
        return EventBus(default_maxsize=self.settings.event_queue_size)


def make_runtime_config(*, args: Optional[object] = None) -> RuntimeConfig:
    """Build a RuntimeConfig from persisted settings and optional CLI *args*.

    Rules:
    - SettingsStore.load() supplies the user's defaults.
    - Attributes present (and not None) on the argparse-like *args* override
      them for this run only: ``time_scale``, ``debounce_ms``,
      ``failure_rate`` and ``seed``.
    """
    settings = SettingsStore.load()
    seed: Optional[int] = None
    if args is not None:
        overrides = {}
        for attr, field in (
            ("time_scale", "time_scale"),
            ("debounce_ms", "debounce_ms"),
            ("failure_rate", "mock_failure_rate"),
        ):
            value = getattr(args, attr, None)
            if value is not None:
                overrides[field] = value
        if overrides:
            # re-validate so CLI values obey the same rules as the file
            try:
                settings = Settings.model_validate(
                    {**settings.model_dump(), **overrides}
                )
            except ValidationError as e:
                raise ConfigError(f"invalid command-line override: {e}") from e
        seed = getattr(args, "seed", None)
    logger.debug("runtime settings: %s", settings.model_dump())
    return RuntimeConfig(settings=settings, seed=seed)

"""User settings (pydantic schema + JSON store) and packaged value sets."""

from .schema import Settings
from .store import SettingsStore

__all__ = ["Settings", "SettingsStore"]

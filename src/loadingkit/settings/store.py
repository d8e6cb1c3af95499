"""Settings persistence helpers."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from loadingkit.core.exceptions import ConfigError

from .schema import Settings

logger = logging.getLogger(__name__)


class SettingsStore:
    """Load and save :class:`Settings` to disk."""

    @staticmethod
    def settings_path() -> Path:
        """Return the path to the settings JSON file."""
        home = os.environ.get("LOADINGKIT_HOME")
        if home:
            base = Path(home).expanduser()
        else:
            base = Path(os.path.expanduser("~/.loadingkit"))
        return base / "settings.json"

    @classmethod
    def load(cls) -> Settings:
        """Load settings; a missing file yields defaults.

        Raises:
            ConfigError: If the file exists but is not valid settings JSON
        """
        path = cls.settings_path()
        if not path.exists():
            logger.debug("no settings file at %s, using defaults", path)
            return Settings()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return Settings.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"invalid settings file {path}: {e}") from e

    @classmethod
    def save(cls, settings: Settings) -> Path:
        """Atomically persist *settings* and return the written path."""
        path = cls.settings_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
        os.replace(tmp, path)
        logger.info("settings saved to %s", path)
        return path

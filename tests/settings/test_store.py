from __future__ import annotations

import json
from pathlib import Path

import pytest

from loadingkit.core.exceptions import ConfigError
from loadingkit.settings.schema import Settings
from loadingkit.settings.store import SettingsStore


def test_settings_path_follows_env(loadingkit_home: Path) -> None:
    assert SettingsStore.settings_path() == loadingkit_home / "settings.json"


def test_load_defaults() -> None:
    s = SettingsStore.load()
    assert isinstance(s, Settings)
    assert s.debounce_ms == 500
    assert s.retain_data_on_error is True
    assert s.debounce_s == pytest.approx(0.5)


def test_roundtrip() -> None:
    s = Settings(debounce_ms=250, mock_failure_rate=0.0, time_scale=0.1)
    path = SettingsStore.save(s)
    assert path.exists()
    assert not path.with_suffix(".tmp").exists()

    s2 = SettingsStore.load()
    assert s2 == s


def test_corrupt_file_raises_config_error() -> None:
    p = SettingsStore.settings_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text("{broken")
    with pytest.raises(ConfigError):
        SettingsStore.load()


def test_invalid_values_raise_config_error() -> None:
    p = SettingsStore.settings_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps({"mock_failure_rate": 2.0}))
    with pytest.raises(ConfigError, match="mock_failure_rate"):
        SettingsStore.load()


@pytest.mark.parametrize(
    "field,value",
    [
        ("debounce_ms", -1),
        ("mock_failure_rate", -0.1),
        ("time_scale", -1.0),
        ("event_queue_size", 0),
    ],
)
def test_schema_rejects_out_of_range(field: str, value: object) -> None:
    with pytest.raises(ValueError):
        Settings.model_validate({field: value})

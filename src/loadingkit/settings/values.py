"""Value sets loaded from the packaged ``values.yml``.

Message copy, form validation text, mock service latencies and the default
debounce window live in YAML so they can be tuned without touching code.
The file is parsed once at import time.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

__all__ = [
    "MESSAGES",
    "FORM_VALIDATION",
    "MOCK_DELAYS_S",
    "DEFAULT_DEBOUNCE_MS",
    "load_values",
]

_YAML_PATH = Path(__file__).parent / "values.yml"


def load_values(path: Path = _YAML_PATH) -> Dict[str, Any]:
    """Parse *path* and return the top-level mapping."""
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping at the top level")
    return data


_VALUES = load_values()

MESSAGES: Dict[str, str] = {
    str(k): str(v) for k, v in (_VALUES.get("messages") or {}).items()
}
FORM_VALIDATION: Dict[str, str] = {
    str(k): str(v) for k, v in (_VALUES.get("form_validation") or {}).items()
}
MOCK_DELAYS_S: Dict[str, float] = {
    str(k): float(v) for k, v in (_VALUES.get("mock_delays_s") or {}).items()
}
DEFAULT_DEBOUNCE_MS: int = int(
    (_VALUES.get("debounce") or {}).get("quiet_window_ms", 500)
)

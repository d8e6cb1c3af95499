from pathlib import Path

import pytest

from loadingkit.settings.values import (
    DEFAULT_DEBOUNCE_MS,
    FORM_VALIDATION,
    MESSAGES,
    MOCK_DELAYS_S,
    load_values,
)


def test_packaged_values_are_loaded() -> None:
    assert MESSAGES["profile_error_prefix"] == "Oops! Could not load user: "
    assert MESSAGES["form_success"] == "Form submitted successfully!"
    assert FORM_VALIDATION["email_invalid"] == "Please enter a valid email"
    assert MOCK_DELAYS_S["get_user"] == pytest.approx(2.0)
    assert MOCK_DELAYS_S["search_products"] == pytest.approx(0.8)
    assert DEFAULT_DEBOUNCE_MS == 500


def test_non_mapping_file_is_rejected(tmp_path: Path) -> None:
    p = tmp_path / "values.yml"
    p.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        load_values(p)


def test_empty_file_is_an_empty_mapping(tmp_path: Path) -> None:
    p = tmp_path / "values.yml"
    p.write_text("")
    assert load_values(p) == {}

from __future__ import annotations

import pytest

from loadingkit.core.results import AsyncResult, SearchResult
from loadingkit.models import Product


def test_async_result_constructors() -> None:
    loading: AsyncResult[int] = AsyncResult.loading()
    assert loading.is_loading and loading.data is None and loading.error is None

    ok = AsyncResult.success(5)
    assert ok.is_success and ok.data == 5

    err: AsyncResult[int] = AsyncResult.failure("boom")
    assert err.is_error and err.error == "boom" and err.data is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"status": "success"},
        {"status": "success", "data": 1, "error": "x"},
        {"status": "error"},
        {"status": "pending"},
    ],
)
def test_async_result_rejects_inconsistent_states(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        AsyncResult(**kwargs)


def test_loading_keeps_previous_snapshot() -> None:
    err = AsyncResult.failure("boom", data=3)
    retry = AsyncResult.loading(err)
    assert retry.is_loading
    assert retry.error == "boom"
    assert retry.data == 3


def test_async_result_is_frozen_and_comparable() -> None:
    a = AsyncResult.success(1)
    with pytest.raises(AttributeError):
        a.status = "error"  # type: ignore[misc]
    assert a == AsyncResult.success(1)
    assert a != AsyncResult.success(2)


def test_async_result_to_dict_dumps_models() -> None:
    p = Product(id="1", name="Widget", price=2.5)
    d = AsyncResult.success(p).to_dict()
    assert d["status"] == "success"
    assert d["data"]["name"] == "Widget"


def test_search_result_initial() -> None:
    r: SearchResult[int] = SearchResult.initial()
    assert r.is_first_load
    assert not r.is_background_loading
    assert r.items == ()
    assert not r.is_empty


def test_first_load_cannot_hold_items_or_background_flag() -> None:
    with pytest.raises(ValueError):
        SearchResult(is_first_load=True, items=(1,))
    with pytest.raises(ValueError):
        SearchResult(is_first_load=True, is_background_loading=True)


def test_first_load_never_reverts() -> None:
    loaded = SearchResult.initial().replace(is_first_load=False, items=[1, 2])
    assert loaded.items == (1, 2)
    with pytest.raises(ValueError):
        loaded.replace(is_first_load=True, items=())


def test_error_with_items_keeps_content() -> None:
    r = SearchResult(is_first_load=False, error="Search failed", items=(1,))
    assert not r.shows_error_only
    bare = SearchResult(is_first_load=False, error="Search failed")
    assert bare.shows_error_only


def test_zero_items_is_an_empty_success() -> None:
    r: SearchResult[int] = SearchResult(is_first_load=False)
    assert r.is_empty
    assert r.error is None
    assert r.to_dict() == {
        "is_first_load": False,
        "is_background_loading": False,
        "error": None,
        "items": [],
    }

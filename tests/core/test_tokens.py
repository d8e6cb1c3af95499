import pytest

from loadingkit.core.exceptions import StaleResult
from loadingkit.core.tokens import Generation


def test_only_newest_token_is_current() -> None:
    gen = Generation()
    first = gen.next()
    second = gen.next()
    assert second > first
    assert gen.is_current(second)
    assert not gen.is_current(first)


def test_invalidate_supersedes_in_flight_token() -> None:
    gen = Generation()
    token = gen.next()
    gen.invalidate()
    assert not gen.is_current(token)
    with pytest.raises(StaleResult) as info:
        gen.ensure_current(token)
    assert info.value.generation == token
    assert info.value.current == gen.current

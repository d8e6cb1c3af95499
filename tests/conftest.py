from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Iterator

import pytest

from loadingkit.core.overlay import reset_overlay
from loadingkit.core.time import SimTimeSource


@pytest.fixture
def ts() -> SimTimeSource:
    return SimTimeSource()


@pytest.fixture(autouse=True)
def loadingkit_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep SettingsStore away from the real home directory."""
    home = tmp_path / "home"
    monkeypatch.setenv("LOADINGKIT_HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def fresh_overlay() -> Iterator[None]:
    reset_overlay()
    yield
    reset_overlay()


async def _settle(rounds: int = 10) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def settle() -> Callable[..., Awaitable[None]]:
    """Let ready tasks run until the loop goes quiet."""
    return _settle


@pytest.fixture
def step(ts: SimTimeSource) -> Callable[[float], Awaitable[None]]:
    """Advance simulated time by *dt* and let woken tasks run."""

    async def _step(dt: float) -> None:
        await _settle()
        ts.advance(dt)
        await _settle()

    return _step

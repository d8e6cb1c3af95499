"""Tests for the clock abstraction."""

import asyncio

import pytest

from loadingkit.core.time import RealTimeSource, SimTimeSource, TimeSource


class TestRealTimeSource:
    def test_implements_protocol(self) -> None:
        ts: TimeSource = RealTimeSource()
        assert hasattr(ts, "monotonic")
        assert hasattr(ts, "sleep")

    def test_monotonic_never_goes_backwards(self) -> None:
        ts = RealTimeSource()
        first = ts.monotonic()
        assert ts.monotonic() >= first

    @pytest.mark.asyncio
    async def test_zero_scale_turns_sleep_into_a_yield(self) -> None:
        """A scaled-down clock must not actually wait."""
        ts = RealTimeSource(scale=0.0)
        await asyncio.wait_for(ts.sleep(3600.0), timeout=1.0)

    @pytest.mark.asyncio
    async def test_negative_sleep_is_clamped(self) -> None:
        await RealTimeSource().sleep(-1.0)


class TestSimTimeSource:
    def test_init_with_default_start(self) -> None:
        assert SimTimeSource().monotonic() == 0.0

    def test_init_with_custom_start(self) -> None:
        assert SimTimeSource(start=100.0).monotonic() == 100.0

    def test_set_time_forward(self) -> None:
        ts = SimTimeSource(start=10.0)
        ts.set_time(20.0)
        assert ts.monotonic() == 20.0

    def test_set_time_backward_raises_error(self) -> None:
        ts = SimTimeSource(start=10.0)
        with pytest.raises(ValueError, match="Cannot set time backwards"):
            ts.set_time(5.0)

    def test_advance_negative_raises_error(self) -> None:
        ts = SimTimeSource(start=10.0)
        with pytest.raises(ValueError, match="Cannot advance time backwards"):
            ts.advance(-1.0)

    @pytest.mark.asyncio
    async def test_sleep_negative_raises_error(self) -> None:
        with pytest.raises(ValueError, match="Sleep duration must be non-negative"):
            await SimTimeSource().sleep(-1.0)

    @pytest.mark.asyncio
    async def test_sleep_waits_until_time_is_advanced(self) -> None:
        ts = SimTimeSource()
        task = asyncio.create_task(ts.sleep(1.5))
        await asyncio.sleep(0)

        ts.advance(1.0)
        await asyncio.sleep(0)
        assert not task.done()

        ts.advance(0.5)
        await asyncio.sleep(0)
        assert task.done()
        await task

    @pytest.mark.asyncio
    async def test_sleepers_wake_in_due_order(self) -> None:
        ts = SimTimeSource()
        woke: list[str] = []

        async def sleeper(name: str, dt: float) -> None:
            await ts.sleep(dt)
            woke.append(name)

        tasks = [
            asyncio.create_task(sleeper("late", 1.0)),
            asyncio.create_task(sleeper("early", 0.5)),
        ]
        await asyncio.sleep(0)
        assert ts.pending() == 2
        assert ts.next_due_monotonic() == 0.5

        ts.set_time(2.0)
        await asyncio.gather(*tasks)
        assert woke == ["early", "late"]
        assert ts.pending() == 0
        assert ts.next_due_monotonic() is None

    @pytest.mark.asyncio
    async def test_cancelled_sleep_does_not_interfere(self) -> None:
        ts = SimTimeSource()
        s1 = asyncio.create_task(ts.sleep(1.0))
        s2 = asyncio.create_task(ts.sleep(2.0))
        await asyncio.sleep(0)

        s1.cancel()
        await asyncio.sleep(0)
        assert ts.next_due_monotonic() == 2.0

        ts.advance(2.5)
        await s2
        with pytest.raises(asyncio.CancelledError):
            await s1

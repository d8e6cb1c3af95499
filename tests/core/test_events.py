import asyncio
from typing import Any

import pytest

from loadingkit.core.events import EventBus, pack, unpack


@pytest.mark.asyncio
async def test_basic_pub_sub() -> None:
    bus = EventBus(default_maxsize=8)
    sub = bus.subscribe("t1")

    async def consumer(collected: list[tuple[float, bytes]]) -> None:
        async for env in sub:
            collected.append((env.ts, env.payload))

    results: list[tuple[float, bytes]] = []
    consumer_task = asyncio.create_task(consumer(results))

    for i in range(3):
        await bus.publish("t1", pack({"i": i}))

    await asyncio.sleep(0)
    await bus.close()
    await consumer_task

    assert [unpack(p) for _, p in results] == [{"i": 0}, {"i": 1}, {"i": 2}]
    ts = [t for t, _ in results]
    assert ts == sorted(ts)


@pytest.mark.asyncio
async def test_multiple_subscribers() -> None:
    bus = EventBus(default_maxsize=8)
    s1 = bus.subscribe("t")
    s2 = bus.subscribe("t")

    out1: list[Any] = []
    out2: list[Any] = []

    async def collect(sub: Any, out: list[Any]) -> None:
        async for env in sub:
            out.append(unpack(env.payload))

    t1 = asyncio.create_task(collect(s1, out1))
    t2 = asyncio.create_task(collect(s2, out2))

    for i in range(5):
        bus.publish_nowait("t", pack(i))

    await bus.close()
    await asyncio.gather(t1, t2)

    assert out1 == [0, 1, 2, 3, 4]
    assert out2 == [0, 1, 2, 3, 4]


@pytest.mark.asyncio
async def test_backpressure_drop_oldest() -> None:
    bus = EventBus(default_maxsize=2)
    sub = bus.subscribe("a")

    received: list[int] = []

    async def consumer() -> None:
        async for env in sub:
            received.append(int(unpack(env.payload)))

    ct = asyncio.create_task(consumer())

    # publish without yielding so the consumer cannot drain
    for i in range(5):
        bus.publish_nowait("a", pack(i))

    await bus.close()
    await ct

    assert received == [3, 4]
    stats = bus.metrics()["a"]
    assert stats.drops == 3
    assert stats.publishes == 5


@pytest.mark.asyncio
async def test_close_unblocks_subscribers() -> None:
    bus = EventBus()
    sub = bus.subscribe("z")

    async def consumer() -> int:
        n = 0
        async for _ in sub:
            n += 1
        return n

    t = asyncio.create_task(consumer())
    await asyncio.sleep(0.01)
    await bus.close()
    assert await t == 0
    assert bus.closed


@pytest.mark.asyncio
async def test_publish_after_close_raises() -> None:
    bus = EventBus()
    await bus.close()
    with pytest.raises(RuntimeError):
        bus.publish_nowait("x", pack(1))
    with pytest.raises(RuntimeError):
        bus.subscribe("x")


@pytest.mark.asyncio
async def test_subscription_close_detaches_queue() -> None:
    bus = EventBus()
    sub = bus.subscribe("x")
    bus.publish_nowait("x", pack("kept"))
    assert [unpack(e.payload) for e in sub.drain()] == ["kept"]

    sub.close()
    bus.publish_nowait("x", pack("lost"))
    assert bus.metrics()["x"].subscribers == 0
    assert [e async for e in sub] == []


def test_pack_unpack_roundtrip() -> None:
    data = {"a": 1, "b": [1, 2, 3], "c": b"bytes", "d": None}
    assert unpack(pack(data)) == data

"""Async in-process event bus for broadcasting state changes.

Controllers mirror their state onto topics so consumers that live in other
tasks (a renderer, a test harness, the CLI printer) can follow along
without holding a reference to the controller itself.

Usage example:

    bus = EventBus(default_maxsize=64)
    sub = bus.subscribe("overlay.visibility")

    async def consumer():
        async for env in sub:
            visible = unpack(env.payload)["visible"]

Notes
-----
- Each subscriber owns a bounded asyncio.Queue.
- A full queue drops its oldest envelope so slow consumers always see the
  most recent state.
- close() ends every subscriber's ``async for`` once its queue is drained.
- Payloads are msgpack-encoded via pack()/unpack().
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from time import monotonic
from typing import Any, AsyncIterator, Dict, List

import msgpack

__all__ = [
    "EventBus",
    "Subscription",
    "Envelope",
    "TopicStats",
    "OVERLAY_TOPIC",
    "pack",
    "unpack",
]

OVERLAY_TOPIC = "overlay.visibility"


@dataclass(slots=True)
class Envelope:
    topic: str
    ts: float
    payload: bytes


@dataclass(slots=True)
class TopicStats:
    subscribers: int
    publishes: int
    drops: int


_Sentinel = object()


class _Topic:
    __slots__ = ("queues", "publishes", "drops")

    def __init__(self) -> None:
        self.queues: List[asyncio.Queue[Envelope | object]] = []
        self.publishes: int = 0
        self.drops: int = 0


class EventBus:
    """Topic-based fan-out with drop-oldest backpressure.

    Parameters
    ----------
    default_maxsize:
        Queue capacity for each new subscription (min 1).
    """

    def __init__(self, *, default_maxsize: int = 256) -> None:
        self._maxsize = max(1, int(default_maxsize))
        self._topics: Dict[str, _Topic] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, topic: str) -> "Subscription":
        """Create a subscription; only envelopes published afterwards arrive."""
        if self._closed:
            raise RuntimeError("EventBus is closed")
        queue: asyncio.Queue[Envelope | object] = asyncio.Queue(maxsize=self._maxsize)
        self._topics.setdefault(topic, _Topic()).queues.append(queue)
        return Subscription(self, topic, queue)

    async def publish(self, topic: str, payload: bytes) -> None:
        self.publish_nowait(topic, payload)

    def publish_nowait(self, topic: str, payload: bytes) -> None:
        """Publish from synchronous code (state setters, listeners)."""
        if self._closed:
            raise RuntimeError("EventBus is closed")
        state = self._topics.setdefault(topic, _Topic())
        state.publishes += 1
        env = Envelope(topic=topic, ts=monotonic(), payload=payload)
        for q in list(state.queues):
            if q.full():
                q.get_nowait()
                state.drops += 1
            q.put_nowait(env)

    async def close(self) -> None:
        """Close the bus and end every subscriber's iteration."""
        if self._closed:
            return
        self._closed = True
        for state in self._topics.values():
            for q in state.queues:
                _wake(q)

    def metrics(self) -> Dict[str, TopicStats]:
        return {
            name: TopicStats(
                subscribers=len(state.queues),
                publishes=state.publishes,
                drops=state.drops,
            )
            for name, state in self._topics.items()
        }

    def _remove(self, topic: str, queue: asyncio.Queue[Envelope | object]) -> None:
        state = self._topics.get(topic)
        if state is not None and queue in state.queues:
            state.queues.remove(queue)


class Subscription:
    """Async iterator over the envelopes of one topic."""

    def __init__(
        self,
        bus: EventBus,
        topic: str,
        queue: asyncio.Queue[Envelope | object],
    ) -> None:
        self._bus = bus
        self._topic = topic
        self._queue = queue
        self._closed = False

    @property
    def topic(self) -> str:
        return self._topic

    def __aiter__(self) -> AsyncIterator[Envelope]:
        return self

    async def __anext__(self) -> Envelope:
        if self._queue.empty() and (self._closed or self._bus.closed):
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _Sentinel:
            raise StopAsyncIteration
        assert isinstance(item, Envelope)
        return item

    def drain(self) -> List[Envelope]:
        """Return everything queued so far without waiting."""
        out: List[Envelope] = []
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if isinstance(item, Envelope):
                out.append(item)
        return out

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        _wake(self._queue)
        self._bus._remove(self._topic, self._queue)


def _wake(q: asyncio.Queue[Envelope | object]) -> None:
    # A blocked reader implies an empty queue; a full one is drained first.
    if not q.full():
        q.put_nowait(_Sentinel)


# Serialization helpers -----------------------------------------------------


def pack(obj: Any) -> bytes:
    """Serialize an object to bytes using msgpack."""
    return msgpack.packb(obj, use_bin_type=True)


def unpack(b: bytes) -> Any:
    """Deserialize bytes into an object using msgpack."""
    return msgpack.unpackb(b, raw=False, strict_map_key=False)

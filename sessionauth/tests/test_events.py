from __future__ import annotations

import asyncio
import json

from sessionauth.infrastructure.events import InProcessEventBus, RedisEventPublisher
from sessionauth.infrastructure.events import redis_publisher


def test_bus_delivers_to_all_subscribers() -> None:
    bus = InProcessEventBus()
    received: list[tuple[str, dict]] = []

    async def first(payload):
        received.append(("first", dict(payload)))

    async def second(payload):
        received.append(("second", dict(payload)))

    bus.subscribe("users.created", first)
    bus.subscribe("users.created", second)

    asyncio.run(bus.publish("users.created", {"id": "u1"}))

    assert sorted(received) == [("first", {"id": "u1"}), ("second", {"id": "u1"})]


def test_bus_isolates_failing_handler() -> None:
    bus = InProcessEventBus()
    received: list[dict] = []

    async def broken(payload):
        raise RuntimeError("boom")

    async def healthy(payload):
        received.append(dict(payload))

    bus.subscribe("users.created", broken)
    bus.subscribe("users.created", healthy)

    asyncio.run(bus.publish("users.created", {"id": "u1"}))

    assert received == [{"id": "u1"}]


def test_bus_unsubscribe_and_empty_channel() -> None:
    bus = InProcessEventBus()
    received: list[dict] = []

    async def handler(payload):
        received.append(dict(payload))

    bus.subscribe("users.created", handler)
    bus.unsubscribe("users.created", handler)

    asyncio.run(bus.publish("users.created", {"id": "u1"}))
    asyncio.run(bus.publish("nobody.listens", {"id": "u1"}))

    assert received == []


def test_redis_publisher_sends_json(monkeypatch) -> None:
    sent: list[tuple[str, str]] = []
    urls: list[str] = []

    class FakeClient:
        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            return None

        async def publish(self, channel: str, message: str) -> int:
            sent.append((channel, message))
            return 1

    def fake_from_url(url: str, **kwargs):
        urls.append(url)
        return FakeClient()

    monkeypatch.setattr(redis_publisher.Redis, "from_url", fake_from_url)

    publisher = RedisEventPublisher("redis://localhost:6379/0")
    asyncio.run(publisher.publish("users.created", {"id": "u1", "username": "alice"}))

    assert urls == ["redis://localhost:6379/0"]
    assert len(sent) == 1
    channel, message = sent[0]
    assert channel == "users.created"
    assert json.loads(message) == {"id": "u1", "username": "alice"}

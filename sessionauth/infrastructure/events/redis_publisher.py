# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from redis.asyncio import Redis

from sessionauth.domain.users.repositories import EventPublisher
from sessionauth.shared.logging import logger


class RedisEventPublisher(EventPublisher):
    """Publishes events on Redis pub/sub channels.

    A client is opened per publish: request handlers may run on short-lived
    event loops, and a pooled connection cannot cross loops.
    """

    def __init__(self, url: str) -> None:
        self._url = url

    async def publish(self, channel: str, payload: Mapping[str, Any]) -> None:
        message = json.dumps(dict(payload), separators=(",", ":"), default=str)
        async with Redis.from_url(self._url) as client:
            receivers = await client.publish(channel, message)
        logger.debug(f"events.redis: channel={channel} receivers={receivers}")


__all__ = ["RedisEventPublisher"]

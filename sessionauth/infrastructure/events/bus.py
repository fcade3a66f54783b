# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""In-process fan-out of domain events to subscribed handlers."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from sessionauth.domain.users.repositories import EventPublisher
from sessionauth.shared.logging import logger

EventHandler = Callable[[Mapping[str, Any]], Awaitable[None]]


class InProcessEventBus(EventPublisher):
    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, channel: str, handler: EventHandler) -> None:
        self._handlers[channel].append(handler)
        logger.debug(f"events.subscribe: channel={channel} handlers={len(self._handlers[channel])}")

    def unsubscribe(self, channel: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(channel)
        if handlers and handler in handlers:
            handlers.remove(handler)

    async def publish(self, channel: str, payload: Mapping[str, Any]) -> None:
        handlers = list(self._handlers.get(channel, ()))
        if not handlers:
            logger.debug(f"events.publish: channel={channel} has no subscribers")
            return

        results = await asyncio.gather(
            *(handler(dict(payload)) for handler in handlers),
            return_exceptions=True,
        )
        for handler, result in zip(handlers, results):
            if isinstance(result, BaseException):
                logger.warning(
                    f"events.publish: handler {getattr(handler, '__name__', handler)!s} "
                    f"failed on channel={channel}: {type(result).__name__}: {result}"
                )
        logger.debug(f"events.publish: channel={channel} delivered to {len(handlers)} handlers")


__all__ = ["EventHandler", "InProcessEventBus"]

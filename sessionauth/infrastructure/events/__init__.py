# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .bus import EventHandler, InProcessEventBus
from .redis_publisher import RedisEventPublisher

__all__ = ["EventHandler", "InProcessEventBus", "RedisEventPublisher"]

# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from .entities import Session, User


class UserRepository(Protocol):
    async def find_by_id(self, user_id: str) -> User | None: ...
    async def find_by_email(self, email: str) -> User | None: ...
    async def find_by_username(self, username: str) -> User | None: ...
    async def find_by_identity(self, identity: str) -> User | None: ...
    async def add(self, user: User) -> User: ...


class SessionRepository(Protocol):
    async def insert(self, session: Session) -> None: ...
    async def get(self, session_id: str) -> Session | None: ...
    async def delete(self, session_id: str) -> None: ...
    async def delete_for_user(self, user_id: str) -> int: ...


class SecretHasher(Protocol):
    async def hash(self, secret: str) -> str: ...
    async def verify(self, secret: str, hashed: str) -> bool: ...


class TokenGenerator(Protocol):
    def generate(self) -> str: ...


class EventPublisher(Protocol):
    async def publish(self, channel: str, payload: Mapping[str, Any]) -> None: ...

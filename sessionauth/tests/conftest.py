from __future__ import annotations

import asyncio
import itertools
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from sessionauth.application.services.session_service import SessionService
from sessionauth.domain.users.entities import Session, User
from sessionauth.domain.users.exceptions import (
    SessionAlreadyExistsError,
    UserAlreadyExistsError,
)
from sessionauth.domain.users.repositories import (
    EventPublisher,
    SecretHasher,
    SessionRepository,
    TokenGenerator,
    UserRepository,
)


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self.users: dict[str, User] = {}

    async def find_by_id(self, user_id: str) -> User | None:
        return self.users.get(user_id)

    async def find_by_email(self, email: str) -> User | None:
        return next((u for u in self.users.values() if u.email == email), None)

    async def find_by_username(self, username: str) -> User | None:
        return next((u for u in self.users.values() if u.username == username), None)

    async def find_by_identity(self, identity: str) -> User | None:
        return await self.find_by_email(identity) or await self.find_by_username(identity)

    async def add(self, user: User) -> User:
        if await self.find_by_email(user.email) is not None:
            raise UserAlreadyExistsError("email")
        if await self.find_by_username(user.username) is not None:
            raise UserAlreadyExistsError("username")
        self.users[user.id] = user
        return user


class InMemorySessionRepository(SessionRepository):
    def __init__(self) -> None:
        self.sessions: dict[str, Session] = {}
        self.calls: list[str] = []

    async def insert(self, session: Session) -> None:
        self.calls.append("insert")
        if session.id in self.sessions:
            raise SessionAlreadyExistsError()
        self.sessions[session.id] = session

    async def get(self, session_id: str) -> Session | None:
        self.calls.append("get")
        return self.sessions.get(session_id)

    async def delete(self, session_id: str) -> None:
        self.calls.append("delete")
        self.sessions.pop(session_id, None)

    async def delete_for_user(self, user_id: str) -> int:
        self.calls.append("delete_for_user")
        doomed = [sid for sid, s in self.sessions.items() if s.user_id == user_id]
        for sid in doomed:
            del self.sessions[sid]
        return len(doomed)


class PrefixHasher(SecretHasher):
    """Cheap stand-in for argon2; yields to the loop like the threaded hashers."""

    def __init__(self) -> None:
        self.verify_calls = 0

    async def hash(self, secret: str) -> str:
        await asyncio.sleep(0)
        return f"hashed:{secret}"

    async def verify(self, secret: str, hashed: str) -> bool:
        self.verify_calls += 1
        await asyncio.sleep(0)
        return hashed == f"hashed:{secret}"


class CountingGenerator(TokenGenerator):
    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def generate(self) -> str:
        return f"tok{next(self._counter):021d}"


class RecordingPublisher(EventPublisher):
    def __init__(self) -> None:
        self.published: list[tuple[str, dict[str, Any]]] = []

    async def publish(self, channel: str, payload: Mapping[str, Any]) -> None:
        self.published.append((channel, dict(payload)))


class FrozenClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture()
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def session_store() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture()
def hasher() -> PrefixHasher:
    return PrefixHasher()


@pytest.fixture()
def generator() -> CountingGenerator:
    return CountingGenerator()


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def session_service(
    session_store: InMemorySessionRepository,
    hasher: PrefixHasher,
    generator: CountingGenerator,
    clock: FrozenClock,
) -> SessionService:
    return SessionService(
        sessions=session_store, hasher=hasher, generator=generator, clock=clock
    )


@pytest.fixture(autouse=True)
def _log_to_tmp(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "logs" / "app.log"))


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()

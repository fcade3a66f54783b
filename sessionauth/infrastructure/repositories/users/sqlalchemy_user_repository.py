# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError

from sessionauth.domain.users.entities import Session as DomainSession
from sessionauth.domain.users.entities import User as DomainUser
from sessionauth.domain.users.exceptions import (
    SessionAlreadyExistsError,
    UserAlreadyExistsError,
)
from sessionauth.domain.users.repositories import SessionRepository, UserRepository
from sessionauth.infrastructure.db.models import Session, User
from sessionauth.infrastructure.db.session import Database
from sessionauth.shared.logging import logger


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset on the way back.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _to_domain_user(row: User) -> DomainUser:
    return DomainUser(
        id=row.id,
        email=row.email,
        username=row.username,
        password_hash=row.password_hash,
        created_at=_as_utc(row.created_at),
    )


def _to_domain_session(row: Session) -> DomainSession:
    return DomainSession(
        id=row.id,
        user_id=row.user_id,
        secret_hash=row.secret_hash,
        created_at=_as_utc(row.created_at),
    )


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def find_by_id(self, user_id: str) -> DomainUser | None:
        async with self._db.session_scope() as session:
            row = await session.get(User, user_id)
            return _to_domain_user(row) if row else None

    async def find_by_email(self, email: str) -> DomainUser | None:
        async with self._db.session_scope() as session:
            row = await session.scalar(select(User).where(User.email == email))
            return _to_domain_user(row) if row else None

    async def find_by_username(self, username: str) -> DomainUser | None:
        async with self._db.session_scope() as session:
            row = await session.scalar(select(User).where(User.username == username))
            return _to_domain_user(row) if row else None

    async def find_by_identity(self, identity: str) -> DomainUser | None:
        async with self._db.session_scope() as session:
            row = await session.scalar(
                select(User).where(or_(User.email == identity, User.username == identity))
            )
            return _to_domain_user(row) if row else None

    async def add(self, user: DomainUser) -> DomainUser:
        try:
            async with self._db.session_scope() as session:
                row = User(
                    id=user.id,
                    email=user.email,
                    username=user.username,
                    password_hash=user.password_hash,
                    created_at=user.created_at,
                )
                session.add(row)
                await session.flush()
                return _to_domain_user(row)
        except IntegrityError as exc:
            field = await self._conflicting_field(user)
            if field is None:
                raise
            logger.info(f"users.add: unique violation on {field}")
            raise UserAlreadyExistsError(field) from exc

    async def _conflicting_field(self, user: DomainUser) -> str | None:
        if await self.find_by_email(user.email) is not None:
            return "email"
        if await self.find_by_username(user.username) is not None:
            return "username"
        if await self.find_by_id(user.id) is not None:
            return "id"
        return None


class SqlAlchemySessionRepository(SessionRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def insert(self, session: DomainSession) -> None:
        try:
            async with self._db.session_scope() as db_session:
                db_session.add(
                    Session(
                        id=session.id,
                        user_id=session.user_id,
                        secret_hash=session.secret_hash,
                        created_at=session.created_at,
                    )
                )
        except IntegrityError as exc:
            if await self.get(session.id) is None:
                raise
            raise SessionAlreadyExistsError() from exc

    async def get(self, session_id: str) -> DomainSession | None:
        async with self._db.session_scope() as db_session:
            row = await db_session.get(Session, session_id)
            return _to_domain_session(row) if row else None

    async def delete(self, session_id: str) -> None:
        async with self._db.session_scope() as db_session:
            await db_session.execute(delete(Session).where(Session.id == session_id))

    async def delete_for_user(self, user_id: str) -> int:
        async with self._db.session_scope() as db_session:
            result = await db_session.execute(delete(Session).where(Session.user_id == user_id))
            return int(result.rowcount or 0)

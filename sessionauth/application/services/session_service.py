# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Session issuance and token validation.

A token is ``<session id>.<session secret>``. Only a hash of the secret is
stored, so a leaked session table does not yield usable tokens. Validation
walks the states in :class:`TokenState` order and stops at the first
rejection.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from sessionauth.domain.users.entities import Session, SessionWithToken
from sessionauth.domain.users.repositories import (
    SecretHasher,
    SessionRepository,
    TokenGenerator,
)
from sessionauth.shared.logging import logger

SESSION_EXPIRES_IN_SECONDS = 60 * 60 * 24
TOKEN_SEPARATOR = "."

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenState(str, Enum):
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    SECRET_MISMATCH = "secret_mismatch"
    VALID = "valid"


@dataclass(slots=True, frozen=True)
class SessionValidation:
    state: TokenState
    session: Session | None = None

    @property
    def is_valid(self) -> bool:
        return self.state is TokenState.VALID and self.session is not None


def parse_token(token: object) -> tuple[str, str] | None:
    """Split ``token`` into ``(session_id, secret)``; ``None`` when malformed."""

    if not isinstance(token, str) or not token:
        return None
    parts = token.split(TOKEN_SEPARATOR)
    if len(parts) != 2:
        return None
    session_id, secret = parts
    if not session_id or not secret:
        return None
    return session_id, secret


class SessionService:
    def __init__(
        self,
        *,
        sessions: SessionRepository,
        hasher: SecretHasher,
        generator: TokenGenerator,
        clock: Clock | None = None,
        expires_in_seconds: int = SESSION_EXPIRES_IN_SECONDS,
    ) -> None:
        self._sessions = sessions
        self._hasher = hasher
        self._generator = generator
        self._clock: Clock = clock or _utcnow
        self._expires_in_seconds = expires_in_seconds

    @property
    def expires_in_seconds(self) -> int:
        return self._expires_in_seconds

    async def create_session(self, user_id: str) -> SessionWithToken:
        session_id = self._generator.generate()
        secret = self._generator.generate()
        secret_hash = await self._hasher.hash(secret)

        # UTC whole seconds, so the persisted timestamp round-trips exactly.
        created_at = self._clock().astimezone(UTC).replace(microsecond=0)
        session = Session(
            id=session_id,
            user_id=user_id,
            secret_hash=secret_hash,
            created_at=created_at,
        )
        await self._sessions.insert(session)
        logger.info(f"session.create: user_id={user_id} session={session_id[:6]}…")
        return SessionWithToken(session=session, token=f"{session_id}{TOKEN_SEPARATOR}{secret}")

    async def validate_token(self, token: str) -> SessionValidation:
        parsed = parse_token(token)
        if parsed is None:
            return SessionValidation(TokenState.MALFORMED)
        session_id, secret = parsed

        session = await self._sessions.get(session_id)
        if session is None:
            return SessionValidation(TokenState.NOT_FOUND)

        if self.is_expired(session):
            await self._sessions.delete(session.id)
            logger.info(
                f"session.expire: user_id={session.user_id} session={session.id[:6]}… deleted"
            )
            return SessionValidation(TokenState.EXPIRED)

        if not await self._hasher.verify(secret, session.secret_hash):
            return SessionValidation(TokenState.SECRET_MISMATCH)

        return SessionValidation(TokenState.VALID, session)

    def is_expired(self, session: Session) -> bool:
        age = (self._clock() - session.created_at).total_seconds()
        return age >= self._expires_in_seconds

    async def delete_session(self, session_id: str) -> None:
        await self._sessions.delete(session_id)
        logger.info(f"session.delete: session={session_id[:6]}…")

    async def revoke_user_sessions(self, user_id: str) -> int:
        removed = await self._sessions.delete_for_user(user_id)
        logger.info(f"session.revoke_all: user_id={user_id} removed={removed}")
        return removed


__all__ = [
    "SESSION_EXPIRES_IN_SECONDS",
    "SessionService",
    "SessionValidation",
    "TokenState",
    "parse_token",
]

# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(slots=True, frozen=True)
class PublicUser:
    id: str
    email: str
    username: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "email": self.email, "username": self.username}


@dataclass(slots=True, frozen=True)
class User:

    id: str
    email: str
    username: str
    password_hash: str
    created_at: datetime

    def public(self) -> PublicUser:
        return PublicUser(id=self.id, email=self.email, username=self.username)


@dataclass(slots=True, frozen=True)
class PublicSession:
    id: str
    user_id: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(slots=True, frozen=True)
class Session:
    """A persisted login. Only the hash of the token secret is kept."""

    id: str
    user_id: str
    secret_hash: str
    created_at: datetime

    def public(self) -> PublicSession:
        return PublicSession(id=self.id, user_id=self.user_id, created_at=self.created_at)


@dataclass(slots=True, frozen=True)
class SessionWithToken:
    """A freshly created session plus the one-time ``<id>.<secret>`` token."""

    session: Session
    token: str

    def __repr__(self) -> str:
        return f"SessionWithToken(session_id={self.session.id[:6]}…, user_id={self.session.user_id})"


@dataclass(slots=True, frozen=True)
class AuthResult:
    user: PublicUser
    session: PublicSession
    token: str

    def __repr__(self) -> str:
        return f"AuthResult(user_id={self.user.id}, session_id={self.session.id[:6]}…)"


@dataclass(slots=True, frozen=True)
class AuthenticatedSession:
    user_id: str
    session_id: str

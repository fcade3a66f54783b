# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .users.entities import (
    AuthenticatedSession,
    AuthResult,
    PublicSession,
    PublicUser,
    Session,
    SessionWithToken,
    User,
)

__all__ = [
    "AuthResult",
    "AuthenticatedSession",
    "PublicSession",
    "PublicUser",
    "Session",
    "SessionWithToken",
    "User",
]

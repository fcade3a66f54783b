# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from sessionauth.shared.errors.base import (
    BadRequestError,
    ConflictError,
    DomainError,
    NotFoundError,
    UnauthorizedError,
)

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


class InvalidCredentialsError(UnauthorizedError):
    code = "invalid_credentials"
    message = INVALID_CREDENTIALS_MESSAGE


class InvalidSessionError(UnauthorizedError):
    # Same code and message as a failed login: callers cannot tell
    # unknown, expired and tampered sessions apart.
    code = "invalid_credentials"
    message = INVALID_CREDENTIALS_MESSAGE


class MalformedTokenError(BadRequestError):
    code = "malformed_token"
    message = "Malformed session token"


class PasswordConfirmationMismatchError(BadRequestError):
    code = "password_mismatch"
    message = "Password does not match"

    def __init__(self) -> None:
        super().__init__(context={"field": "confirm_password"})


class UserAlreadyExistsError(ConflictError):
    code = "user_already_exists"

    def __init__(self, field: str = "email") -> None:
        super().__init__(
            message=f"Account with this {field} already exists",
            context={"field": field},
        )
        self.field = field


class SessionAlreadyExistsError(ConflictError):
    code = "session_already_exists"
    message = "Session already exists"


class UserNotFoundError(NotFoundError):
    code = "user_not_found"
    message = "User not found"


class AccountLockedError(DomainError):
    code = "account_locked"
    status = HTTPStatus.TOO_MANY_REQUESTS
    message = "Too many failed login attempts"

    def __init__(self, lockout_remaining: float = 0) -> None:
        super().__init__(
            context={"lockout_remaining_seconds": round(lockout_remaining, 1)},
        )

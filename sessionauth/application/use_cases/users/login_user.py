# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from sessionauth.application.services.session_service import SessionService
from sessionauth.domain.users.entities import AuthResult
from sessionauth.domain.users.exceptions import AccountLockedError, InvalidCredentialsError
from sessionauth.domain.users.repositories import SecretHasher, UserRepository
from sessionauth.infrastructure.auth.login_attempts import LoginAttemptsTracker
from sessionauth.shared.logging import logger

# Verified against when the identity is unknown, so both failure paths hash.
_DUMMY_PASSWORD = "sessionauth-dummy-password"


class LoginUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        sessions: SessionService,
        password_hasher: SecretHasher,
        attempts: LoginAttemptsTracker | None = None,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._password_hasher = password_hasher
        self._attempts = attempts
        self._dummy_hash: str | None = None

    async def execute(
        self, identity: str, password: str, ip_address: str | None = None
    ) -> AuthResult:
        if self._attempts is not None and self._attempts.is_locked(identity):
            raise AccountLockedError(
                lockout_remaining=self._attempts.get_lockout_remaining(identity)
            )

        user = await self._users.find_by_identity(identity)
        if user is None:
            await self._password_hasher.verify(password, await self._get_dummy_hash())
            password_valid = False
        else:
            password_valid = await self._password_hasher.verify(password, user.password_hash)

        if user is None or not password_valid:
            reason = "unknown_identity" if user is None else "wrong_password"
            logger.info(f"auth.login: rejected reason={reason}")
            if self._attempts is not None:
                self._attempts.record_attempt(identity, success=False, ip_address=ip_address)
            raise InvalidCredentialsError()

        if self._attempts is not None:
            self._attempts.record_attempt(identity, success=True, ip_address=ip_address)

        issued = await self._sessions.create_session(user.id)
        return AuthResult(
            user=user.public(),
            session=issued.session.public(),
            token=issued.token,
        )

    async def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = await self._password_hasher.hash(_DUMMY_PASSWORD)
        return self._dummy_hash

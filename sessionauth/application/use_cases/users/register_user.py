# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from sessionauth.application.services.session_service import SessionService
from sessionauth.domain.users.entities import AuthResult, PublicUser, User
from sessionauth.domain.users.exceptions import (
    PasswordConfirmationMismatchError,
    UserAlreadyExistsError,
)
from sessionauth.domain.users.repositories import (
    EventPublisher,
    SecretHasher,
    TokenGenerator,
    UserRepository,
)
from sessionauth.shared.logging import logger

USER_CREATED_CHANNEL = "users.created"


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        sessions: SessionService,
        password_hasher: SecretHasher,
        id_generator: TokenGenerator,
        events: EventPublisher | None = None,
        user_created_channel: str = USER_CREATED_CHANNEL,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._password_hasher = password_hasher
        self._id_generator = id_generator
        self._events = events
        self._user_created_channel = user_created_channel

    async def execute(
        self, email: str, username: str, password: str, confirm_password: str
    ) -> AuthResult:
        if password != confirm_password:
            raise PasswordConfirmationMismatchError()

        # Fast path only: the unique constraints in the store decide races.
        if await self._users.find_by_email(email) is not None:
            raise UserAlreadyExistsError("email")
        if await self._users.find_by_username(username) is not None:
            raise UserAlreadyExistsError("username")

        hashed = await self._password_hasher.hash(password)
        user = User(
            id=self._id_generator.generate(),
            email=email,
            username=username,
            password_hash=hashed,
            created_at=datetime.now(UTC).replace(microsecond=0),
        )
        persisted = await self._users.add(user)
        logger.info(f"auth.register: created user_id={persisted.id}")

        await self._publish_created(persisted.public())

        issued = await self._sessions.create_session(persisted.id)
        return AuthResult(
            user=persisted.public(),
            session=issued.session.public(),
            token=issued.token,
        )

    async def _publish_created(self, user: PublicUser) -> None:
        if self._events is None:
            return
        try:
            await self._events.publish(self._user_created_channel, user.to_dict())
        except Exception as exc:
            # Delivery is best effort; registration already succeeded.
            logger.warning(
                f"auth.register: {self._user_created_channel} not delivered "
                f"user_id={user.id} error={type(exc).__name__}: {exc}"
            )

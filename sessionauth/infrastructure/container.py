# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import cached_property

from sessionauth.application.services.secret_hashing import build_secret_hasher
from sessionauth.application.services.session_service import SessionService
from sessionauth.application.services.token_generator import SecureTokenGenerator
from sessionauth.application.use_cases.users.get_current_user import GetCurrentUserUseCase
from sessionauth.application.use_cases.users.login_user import LoginUserUseCase
from sessionauth.application.use_cases.users.logout_user import LogoutUserUseCase
from sessionauth.application.use_cases.users.register_user import RegisterUserUseCase
from sessionauth.application.use_cases.users.validate_session import ValidateSessionUseCase
from sessionauth.domain.users.repositories import EventPublisher, SecretHasher
from sessionauth.infrastructure.auth.login_attempts import LoginAttemptsTracker
from sessionauth.infrastructure.db import Database
from sessionauth.infrastructure.events import InProcessEventBus, RedisEventPublisher
from sessionauth.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemySessionRepository,
    SqlAlchemyUserRepository,
)
from sessionauth.interfaces.http.controllers.auth_controller import AuthController
from sessionauth.shared.config import AppConfig, load_config
from sessionauth.shared.logging import logger


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or load_config()
        self.exit_hook_registered = False
        self._closed = False

    async def startup(self) -> None:
        await self.database.init_db()
        logger.info(
            f"container.startup: hash_algorithm={self.config.security.hash_algorithm} "
            f"session_lifetime={self.session_service.expires_in_seconds}s"
        )

    async def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.database.dispose()
        logger.info("container.shutdown: done")

    @property
    def closed(self) -> bool:
        return self._closed

    @cached_property
    def database(self) -> Database:
        return Database(self.config.database)

    @cached_property
    def secret_hasher(self) -> SecretHasher:
        return build_secret_hasher(self.config.security.hash_algorithm)

    @cached_property
    def token_generator(self) -> SecureTokenGenerator:
        return SecureTokenGenerator()

    @cached_property
    def event_publisher(self) -> EventPublisher:
        if self.config.events.redis_url:
            return RedisEventPublisher(self.config.events.redis_url)
        return InProcessEventBus()

    @cached_property
    def login_attempts(self) -> LoginAttemptsTracker:
        security = self.config.security
        return LoginAttemptsTracker(
            max_attempts=security.login_max_attempts,
            window_seconds=security.login_attempt_window,
            lockout_seconds=security.login_lockout_seconds,
        )

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository(self.database)

    @cached_property
    def session_repository(self) -> SqlAlchemySessionRepository:
        return SqlAlchemySessionRepository(self.database)

    @cached_property
    def session_service(self) -> SessionService:
        return SessionService(
            sessions=self.session_repository,
            hasher=self.secret_hasher,
            generator=self.token_generator,
        )

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            sessions=self.session_service,
            password_hasher=self.secret_hasher,
            id_generator=self.token_generator,
            events=self.event_publisher,
            user_created_channel=self.config.events.user_created_channel,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            sessions=self.session_service,
            password_hasher=self.secret_hasher,
            attempts=self.login_attempts,
        )

    @cached_property
    def logout_user_use_case(self) -> LogoutUserUseCase:
        return LogoutUserUseCase(sessions=self.session_service)

    @cached_property
    def validate_session_use_case(self) -> ValidateSessionUseCase:
        return ValidateSessionUseCase(sessions=self.session_service)

    @cached_property
    def get_current_user_use_case(self) -> GetCurrentUserUseCase:
        return GetCurrentUserUseCase(users=self.user_repository)

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            logout_use_case=self.logout_user_use_case,
            validate_session_use_case=self.validate_session_use_case,
            current_user_use_case=self.get_current_user_use_case,
            cookie_secure=self.config.security.cookie_secure,
            cookie_samesite=self.config.security.cookie_samesite,
        )

# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from sessionauth.application.services.session_service import SessionService, TokenState
from sessionauth.domain.users.entities import AuthenticatedSession
from sessionauth.domain.users.exceptions import InvalidSessionError, MalformedTokenError
from sessionauth.shared.logging import logger


class ValidateSessionUseCase:
    """Turns a presented token into the identity behind it, or rejects it."""

    def __init__(self, *, sessions: SessionService) -> None:
        self._sessions = sessions

    async def execute(self, token: str) -> AuthenticatedSession:
        result = await self._sessions.validate_token(token)
        if result.state is TokenState.MALFORMED:
            raise MalformedTokenError()
        if not result.is_valid or result.session is None:
            logger.info(f"auth.session: rejected state={result.state.value}")
            raise InvalidSessionError()
        return AuthenticatedSession(user_id=result.session.user_id, session_id=result.session.id)

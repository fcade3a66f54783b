"""Use-case for revoking a session."""

from __future__ import annotations

from sessionauth.application.services.session_service import SessionService


class LogoutUserUseCase:
    def __init__(self, *, sessions: SessionService) -> None:
        self._sessions = sessions

    async def execute(self, session_id: str) -> None:
        if session_id:
            await self._sessions.delete_session(session_id)

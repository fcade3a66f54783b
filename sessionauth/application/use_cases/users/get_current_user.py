from __future__ import annotations

from sessionauth.domain.users.entities import PublicUser
from sessionauth.domain.users.exceptions import UserNotFoundError
from sessionauth.domain.users.repositories import UserRepository


class GetCurrentUserUseCase:
    def __init__(self, *, users: UserRepository) -> None:
        self._users = users

    async def execute(self, user_id: str) -> PublicUser:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return user.public()

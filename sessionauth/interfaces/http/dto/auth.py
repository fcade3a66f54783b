from __future__ import annotations

import re

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic_core import PydanticCustomError

_USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{3,16}$")


class RegisterRequestDTO(BaseModel):
    email: EmailStr = Field(max_length=255)
    username: str
    password: str = Field(min_length=8, max_length=200)
    confirm_password: str = Field(min_length=8, max_length=200)

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        if not _USERNAME_PATTERN.match(value):
            raise PydanticCustomError(
                "username_invalid_chars",
                "Username must be 3-16 letters, digits, '_' or '-'",
                {"pattern": _USERNAME_PATTERN.pattern},
            )
        return value


class LoginRequestDTO(BaseModel):
    identity: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=200)  # No strength check on login


class AuthSuccessDTO(BaseModel):
    success: bool = True
    message: str
    data: dict

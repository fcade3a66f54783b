"""Random identifiers for sessions, session secrets and users."""

from __future__ import annotations

import secrets

from sessionauth.domain.users.repositories import TokenGenerator

# 32 symbols, no look-alikes (0/o, 1/l): each character carries 5 bits.
TOKEN_ALPHABET = "abcdefghijkmnpqrstuvwxyz23456789"
TOKEN_LENGTH = 24


class SecureTokenGenerator(TokenGenerator):
    """Draws 120-bit identifiers from the ``secrets`` CSPRNG."""

    def __init__(self, length: int = TOKEN_LENGTH) -> None:
        if length * 5 < 120:
            raise ValueError("token length must carry at least 120 bits")
        self._length = length

    def generate(self) -> str:
        return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(self._length))


__all__ = ["SecureTokenGenerator", "TOKEN_ALPHABET", "TOKEN_LENGTH"]

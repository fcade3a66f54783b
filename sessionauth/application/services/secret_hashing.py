"""Secret hashing strategies.

Both backends are memory-hard, salt every call and embed their parameters
in the encoded output, so ``verify`` needs nothing but the stored string.
The hashing work itself runs in a worker thread.
"""

from __future__ import annotations

import asyncio

from argon2 import PasswordHasher as Argon2PasswordHasher
from argon2 import Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from werkzeug.security import check_password_hash, generate_password_hash

from sessionauth.domain.users.repositories import SecretHasher


class _ThreadedSecretHasher(SecretHasher):
    algorithm: str = ""

    async def hash(self, secret: str) -> str:
        if not isinstance(secret, str):
            raise TypeError("secret must be a string")
        return await asyncio.to_thread(self._hash, secret)

    async def verify(self, secret: str, hashed: str) -> bool:
        if not isinstance(secret, str) or not isinstance(hashed, str) or not hashed:
            return False
        return await asyncio.to_thread(self._verify, secret, hashed)

    def _hash(self, secret: str) -> str:
        raise NotImplementedError

    def _verify(self, secret: str, hashed: str) -> bool:
        raise NotImplementedError


class Argon2SecretHasher(_ThreadedSecretHasher):
    algorithm = "argon2id"

    def __init__(self) -> None:
        self._hasher = Argon2PasswordHasher(type=Type.ID)

    def _hash(self, secret: str) -> str:
        return self._hasher.hash(secret)

    def _verify(self, secret: str, hashed: str) -> bool:
        try:
            return self._hasher.verify(hashed, secret)
        # UnicodeEncodeError: the hash is ASCII-encoded before it is parsed.
        except (VerifyMismatchError, VerificationError, InvalidHashError, UnicodeEncodeError):
            return False


class WerkzeugScryptHasher(_ThreadedSecretHasher):
    algorithm = "scrypt"

    def _hash(self, secret: str) -> str:
        return str(generate_password_hash(secret, method="scrypt"))

    def _verify(self, secret: str, hashed: str) -> bool:
        if not hashed.startswith("scrypt:"):
            return False
        try:
            return bool(check_password_hash(hashed, secret))
        except (ValueError, TypeError):
            return False


_HASHERS: dict[str, type[_ThreadedSecretHasher]] = {
    Argon2SecretHasher.algorithm: Argon2SecretHasher,
    WerkzeugScryptHasher.algorithm: WerkzeugScryptHasher,
}


def build_secret_hasher(algorithm: str) -> SecretHasher:
    try:
        hasher_cls = _HASHERS[algorithm]
    except KeyError:
        raise ValueError(f"unsupported hash algorithm: {algorithm!r}") from None
    return hasher_cls()


__all__ = [
    "Argon2SecretHasher",
    "WerkzeugScryptHasher",
    "build_secret_hasher",
]

from __future__ import annotations

import asyncio

import pytest

from sessionauth.application.services.secret_hashing import (
    Argon2SecretHasher,
    WerkzeugScryptHasher,
    build_secret_hasher,
)


@pytest.fixture(params=["argon2id", "scrypt"])
def secret_hasher(request):
    return build_secret_hasher(request.param)


def test_hash_verifies_plain_secret(secret_hasher) -> None:
    hashed = asyncio.run(secret_hasher.hash("secretpw1"))

    assert hashed != "secretpw1"
    assert asyncio.run(secret_hasher.verify("secretpw1", hashed)) is True
    assert asyncio.run(secret_hasher.verify("secretpw2", hashed)) is False


def test_hash_is_salted(secret_hasher) -> None:
    first = asyncio.run(secret_hasher.hash("same-secret"))
    second = asyncio.run(secret_hasher.hash("same-secret"))
    assert first != second


def test_empty_secret_roundtrips(secret_hasher) -> None:
    hashed = asyncio.run(secret_hasher.hash(""))
    assert asyncio.run(secret_hasher.verify("", hashed)) is True
    assert asyncio.run(secret_hasher.verify("x", hashed)) is False


@pytest.mark.parametrize(
    "bad_hash",
    [
        "",
        "not-a-hash",
        "$argon2id$v=19$garbage",
        "$argon2id$v=19$m=65536,t=3,p=4$é$é",
        "scrypt:broken",
        "scrypt:32768:8:1$sél$é",
    ],
)
def test_garbage_hash_fails_closed(secret_hasher, bad_hash: str) -> None:
    assert asyncio.run(secret_hasher.verify("secretpw1", bad_hash)) is False


def test_argon2_output_encodes_algorithm() -> None:
    hashed = asyncio.run(Argon2SecretHasher().hash("secretpw1"))
    assert hashed.startswith("$argon2id$")


def test_scrypt_output_encodes_algorithm() -> None:
    hashed = asyncio.run(WerkzeugScryptHasher().hash("secretpw1"))
    assert hashed.startswith("scrypt:")


def test_backends_reject_each_others_hashes() -> None:
    argon_hash = asyncio.run(Argon2SecretHasher().hash("secretpw1"))
    assert asyncio.run(WerkzeugScryptHasher().verify("secretpw1", argon_hash)) is False


def test_non_string_secret_rejected() -> None:
    with pytest.raises(TypeError):
        asyncio.run(Argon2SecretHasher().hash(b"bytes"))  # type: ignore[arg-type]


def test_unknown_algorithm_rejected() -> None:
    with pytest.raises(ValueError):
        build_secret_hasher("md5")


def test_non_ascii_stored_hash_rejected_without_raising() -> None:
    hasher = Argon2SecretHasher()

    assert asyncio.run(hasher.verify("pw", "$argon2id$v=19$m=65536,t=3,p=4$é$é")) is False

from __future__ import annotations

import asyncio

import pytest

from sessionauth.application.use_cases.users.get_current_user import GetCurrentUserUseCase
from sessionauth.application.use_cases.users.login_user import LoginUserUseCase
from sessionauth.application.use_cases.users.logout_user import LogoutUserUseCase
from sessionauth.application.use_cases.users.register_user import RegisterUserUseCase
from sessionauth.application.use_cases.users.validate_session import ValidateSessionUseCase
from sessionauth.domain.users.exceptions import (
    AccountLockedError,
    InvalidCredentialsError,
    InvalidSessionError,
    MalformedTokenError,
    PasswordConfirmationMismatchError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from sessionauth.infrastructure.auth.login_attempts import LoginAttemptsTracker


@pytest.fixture()
def register(users, session_service, hasher, generator, publisher) -> RegisterUserUseCase:
    return RegisterUserUseCase(
        users=users,
        sessions=session_service,
        password_hasher=hasher,
        id_generator=generator,
        events=publisher,
    )


@pytest.fixture()
def login(users, session_service, hasher) -> LoginUserUseCase:
    return LoginUserUseCase(users=users, sessions=session_service, password_hasher=hasher)


@pytest.fixture()
def validate(session_service) -> ValidateSessionUseCase:
    return ValidateSessionUseCase(sessions=session_service)


def test_register_login_validate_logout_flow(register, login, validate, session_service) -> None:
    registered = asyncio.run(register.execute("a@x.com", "alice", "secretpw1", "secretpw1"))

    assert registered.user.email == "a@x.com"
    assert registered.user.username == "alice"
    assert registered.session.user_id == registered.user.id
    authenticated = asyncio.run(validate.execute(registered.token))
    assert authenticated.user_id == registered.user.id

    logged_in = asyncio.run(login.execute("alice", "secretpw1"))
    assert logged_in.user.id == registered.user.id
    assert logged_in.session.id != registered.session.id

    asyncio.run(LogoutUserUseCase(sessions=session_service).execute(logged_in.session.id))

    with pytest.raises(InvalidSessionError):
        asyncio.run(validate.execute(logged_in.token))
    # Other sessions of the same user survive.
    assert asyncio.run(validate.execute(registered.token)).session_id == registered.session.id


def test_login_by_email(register, login) -> None:
    registered = asyncio.run(register.execute("a@x.com", "alice", "secretpw1", "secretpw1"))

    result = asyncio.run(login.execute("a@x.com", "secretpw1"))

    assert result.user == registered.user


def test_login_failures_are_indistinguishable(register, login, hasher) -> None:
    asyncio.run(register.execute("a@x.com", "alice", "secretpw1", "secretpw1"))
    hasher.verify_calls = 0

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        asyncio.run(login.execute("alice", "nope-nope"))
    with pytest.raises(InvalidCredentialsError) as unknown_user:
        asyncio.run(login.execute("bob", "nope-nope"))

    assert wrong_password.value.to_dict() == unknown_user.value.to_dict()
    assert wrong_password.value.message == "Invalid credentials"
    assert wrong_password.value.status == unknown_user.value.status == 401
    # Unknown identities still pay for a verify.
    assert hasher.verify_calls == 2


def test_register_password_mismatch(register, users) -> None:
    with pytest.raises(PasswordConfirmationMismatchError) as exc_info:
        asyncio.run(register.execute("a@x.com", "alice", "secretpw1", "secretpw2"))

    assert exc_info.value.context == {"field": "confirm_password"}
    assert users.users == {}


@pytest.mark.parametrize(
    ("email", "username", "field"),
    [("a@x.com", "other", "email"), ("b@x.com", "alice", "username")],
)
def test_register_duplicate(register, email: str, username: str, field: str) -> None:
    asyncio.run(register.execute("a@x.com", "alice", "secretpw1", "secretpw1"))

    with pytest.raises(UserAlreadyExistsError) as exc_info:
        asyncio.run(register.execute(email, username, "secretpw1", "secretpw1"))

    assert exc_info.value.status == 409
    assert exc_info.value.message == f"Account with this {field} already exists"


def test_concurrent_register_same_email_one_wins(register, users) -> None:
    async def race():
        return await asyncio.gather(
            register.execute("a@x.com", "alice", "secretpw1", "secretpw1"),
            register.execute("a@x.com", "alice2", "secretpw1", "secretpw1"),
            return_exceptions=True,
        )

    results = asyncio.run(race())

    failures = [r for r in results if isinstance(r, BaseException)]
    assert len(failures) == 1
    assert isinstance(failures[0], UserAlreadyExistsError)
    assert len(users.users) == 1


def test_register_publishes_user_created(register, publisher) -> None:
    result = asyncio.run(register.execute("a@x.com", "alice", "secretpw1", "secretpw1"))

    assert publisher.published == [
        ("users.created", {"id": result.user.id, "email": "a@x.com", "username": "alice"})
    ]


def test_register_survives_publisher_failure(users, session_service, hasher, generator) -> None:
    class BrokenPublisher:
        async def publish(self, channel, payload) -> None:
            raise ConnectionError("broker down")

    use_case = RegisterUserUseCase(
        users=users,
        sessions=session_service,
        password_hasher=hasher,
        id_generator=generator,
        events=BrokenPublisher(),
    )

    result = asyncio.run(use_case.execute("a@x.com", "alice", "secretpw1", "secretpw1"))

    assert result.user.username == "alice"
    assert result.token


def test_login_lockout_after_repeated_failures(register, users, session_service, hasher) -> None:
    asyncio.run(register.execute("a@x.com", "alice", "secretpw1", "secretpw1"))
    now = [1000.0]
    tracker = LoginAttemptsTracker(
        max_attempts=3, window_seconds=60, lockout_seconds=30, time_provider=lambda: now[0]
    )
    login = LoginUserUseCase(
        users=users, sessions=session_service, password_hasher=hasher, attempts=tracker
    )

    for _ in range(3):
        with pytest.raises(InvalidCredentialsError):
            asyncio.run(login.execute("alice", "wrong-pass", "10.0.0.1"))

    with pytest.raises(AccountLockedError) as exc_info:
        asyncio.run(login.execute("alice", "secretpw1"))
    assert exc_info.value.status == 429

    now[0] += 31
    assert asyncio.run(login.execute("alice", "secretpw1")).user.username == "alice"
    assert tracker.get_failed_attempts_count("alice") == 0


def test_validate_malformed_token(validate) -> None:
    with pytest.raises(MalformedTokenError):
        asyncio.run(validate.execute("no-separator"))


def test_validate_rejections_share_one_error(register, validate, clock) -> None:
    registered = asyncio.run(register.execute("a@x.com", "alice", "secretpw1", "secretpw1"))
    session_id = registered.session.id

    with pytest.raises(InvalidSessionError) as unknown:
        asyncio.run(validate.execute("unknown.secret"))
    with pytest.raises(InvalidSessionError) as mismatch:
        asyncio.run(validate.execute(f"{session_id}.wrong"))
    clock.advance(86400)
    with pytest.raises(InvalidSessionError) as expired:
        asyncio.run(validate.execute(registered.token))

    assert unknown.value.to_dict() == mismatch.value.to_dict() == expired.value.to_dict()


def test_logout_empty_session_id_is_noop(session_service, session_store) -> None:
    asyncio.run(LogoutUserUseCase(sessions=session_service).execute(""))
    assert session_store.calls == []


def test_get_current_user(register, users) -> None:
    registered = asyncio.run(register.execute("a@x.com", "alice", "secretpw1", "secretpw1"))
    use_case = GetCurrentUserUseCase(users=users)

    assert asyncio.run(use_case.execute(registered.user.id)) == registered.user
    with pytest.raises(UserNotFoundError):
        asyncio.run(use_case.execute("ghost"))


def test_register_then_login_by_email_example(register, login) -> None:
    registered = asyncio.run(register.execute("a@x.com", "alice", "secretpw1", "secretpw1"))

    assert "password_hash" not in registered.user.to_dict()
    assert "secretpw1" not in repr(registered)

    logged_in = asyncio.run(login.execute("a@x.com", "secretpw1"))
    assert logged_in.user.id == registered.user.id
    assert logged_in.session.id != registered.session.id

    with pytest.raises(InvalidCredentialsError):
        asyncio.run(login.execute("a@x.com", "wrongpw"))

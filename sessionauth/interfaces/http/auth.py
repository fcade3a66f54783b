# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar, cast

from flask import g, request

from sessionauth.application.use_cases.users.validate_session import ValidateSessionUseCase
from sessionauth.domain.users.exceptions import InvalidSessionError, MalformedTokenError
from sessionauth.infrastructure.audit import AuditAction, audit_log
from sessionauth.shared.logging import logger

AUTH_COOKIE_NAME = "auth_token"

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def get_client_ip() -> str | None:
    ip_address = request.headers.get("X-Forwarded-For", request.remote_addr)
    if ip_address and "," in ip_address:
        ip_address = ip_address.split(",")[0].strip()
    return ip_address


def extract_token() -> str:
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        token = auth[7:].strip()
        if token:
            return token
    return request.cookies.get(AUTH_COOKIE_NAME, "")


def auth_required(validate_session: ValidateSessionUseCase) -> Callable[[F], F]:
    """Reject the request unless it carries a valid session token.

    On success ``g.user_id`` and ``g.session_id`` are set for the view.
    """

    def decorator(f: F) -> F:
        @wraps(f)
        async def inner(*a: Any, **kw: Any) -> Any:
            token = extract_token()
            if not token:
                logger.warning(
                    f"No Authorization header/cookie on {request.method} {request.path} "
                    f"from {get_client_ip()}"
                )
                raise InvalidSessionError()

            try:
                authenticated = await validate_session.execute(token)
            except (InvalidSessionError, MalformedTokenError) as exc:
                audit_log(
                    AuditAction.SESSION_REJECTED,
                    ip_address=get_client_ip(),
                    details={"path": request.path, "error": exc.code},
                    success=False,
                )
                raise

            g.user_id = authenticated.user_id
            g.session_id = authenticated.session_id
            logger.debug(f"Auth OK: user={authenticated.user_id} {request.method} {request.path}")
            return await f(*a, **kw)

        return cast(F, inner)

    return decorator


__all__ = ["AUTH_COOKIE_NAME", "auth_required", "extract_token", "get_client_ip"]

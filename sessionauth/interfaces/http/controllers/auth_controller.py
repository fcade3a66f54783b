# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from sessionauth.application.services.session_service import SESSION_EXPIRES_IN_SECONDS
from sessionauth.application.use_cases.users.get_current_user import GetCurrentUserUseCase
from sessionauth.application.use_cases.users.login_user import LoginUserUseCase
from sessionauth.application.use_cases.users.logout_user import LogoutUserUseCase
from sessionauth.application.use_cases.users.register_user import RegisterUserUseCase
from sessionauth.application.use_cases.users.validate_session import ValidateSessionUseCase
from sessionauth.domain.users.entities import AuthResult
from sessionauth.domain.users.exceptions import AccountLockedError, UserAlreadyExistsError
from sessionauth.infrastructure.audit import AuditAction, audit_log
from sessionauth.interfaces.http.auth import AUTH_COOKIE_NAME, auth_required, get_client_ip
from sessionauth.interfaces.http.dto.auth import (
    AuthSuccessDTO,
    LoginRequestDTO,
    RegisterRequestDTO,
)
from sessionauth.shared.errors.validation import raise_validation_error
from sessionauth.shared.logging import logger


class AuthController:
    def __init__(
        self,
        *,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        logout_use_case: LogoutUserUseCase,
        validate_session_use_case: ValidateSessionUseCase,
        current_user_use_case: GetCurrentUserUseCase,
        cookie_secure: bool = False,
        cookie_samesite: str = "Strict",
    ) -> None:
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._logout_use_case = logout_use_case
        self._validate_session_use_case = validate_session_use_case
        self._current_user_use_case = current_user_use_case
        self._cookie_secure = cookie_secure
        self._cookie_samesite = cookie_samesite

    async def register(self) -> tuple[Response, int]:
        try:
            dto = RegisterRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = get_client_ip()
        try:
            result = await self._register_use_case.execute(
                dto.email, dto.username, dto.password, dto.confirm_password
            )
        except UserAlreadyExistsError as exc:
            audit_log(
                AuditAction.REGISTER_FAILED,
                ip_address=ip_address,
                details={"username": dto.username, "error": exc.code},
                success=False,
            )
            raise

        audit_log(
            AuditAction.REGISTER,
            user_id=result.user.id,
            ip_address=ip_address,
            details={"username": dto.username},
            success=True,
        )
        logger.info(f"auth.register: ok user_id={result.user.id}")
        return self._auth_response(result, "Registration successful"), 201

    async def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = get_client_ip()

        try:
            result = await self._login_use_case.execute(dto.identity, dto.password, ip_address)
        except AccountLockedError as exc:
            audit_log(
                AuditAction.LOGIN_LOCKED,
                ip_address=ip_address,
                details={"identity": dto.identity, "error": exc.code},
                success=False,
            )
            raise
        except Exception as exc:
            audit_log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"identity": dto.identity, "error": type(exc).__name__},
                success=False,
            )
            raise

        audit_log(
            AuditAction.LOGIN_SUCCESS,
            user_id=result.user.id,
            ip_address=ip_address,
            success=True,
        )
        logger.info(f"auth.login: ok user_id={result.user.id}")
        return self._auth_response(result, "Login successful"), 200

    async def logout(self) -> tuple[Response, int]:
        await self._logout_use_case.execute(g.session_id)

        audit_log(
            AuditAction.LOGOUT,
            user_id=g.user_id,
            ip_address=get_client_ip(),
            success=True,
        )

        response = jsonify({"success": True, "message": "Logout successful"})
        response.delete_cookie(AUTH_COOKIE_NAME)
        logger.info("auth.logout: ok")
        return response, 200

    async def me(self) -> tuple[Response, int]:
        user = await self._current_user_use_case.execute(g.user_id)
        return jsonify({"success": True, "data": {"user": user.to_dict()}}), 200

    def _auth_response(self, result: AuthResult, message: str) -> Response:
        payload = AuthSuccessDTO(
            message=message,
            data={
                "user": result.user.to_dict(),
                "session": result.session.to_dict(),
                "token": result.token,
            },
        ).model_dump()
        response = jsonify(payload)
        response.set_cookie(
            AUTH_COOKIE_NAME,
            result.token,
            httponly=True,
            samesite=self._cookie_samesite,
            secure=self._cookie_secure,
            max_age=SESSION_EXPIRES_IN_SECONDS,
        )
        return response

    def as_blueprint(self) -> Blueprint:
        protected = auth_required(self._validate_session_use_case)
        bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/logout", view_func=protected(self.logout), methods=["POST"])
        bp.add_url_rule("/me", view_func=protected(self.me), methods=["GET"])
        return bp

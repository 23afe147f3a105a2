# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from authcore.application.services.account_service import AccountService
from authcore.interfaces.http.dto.auth import (
    AccountDTO,
    AccountResponseDTO,
    AuthSuccessDTO,
    LoginRequestDTO,
    LoginResponseDTO,
    RegisterRequestDTO,
)
from authcore.shared.config import SecurityConfig, SessionConfig
from authcore.shared.errors.validation import raise_validation_error
from authcore.shared.logging import logger
from authcore.shared.middleware.rate_limit import InMemoryRateLimiter, client_key, rate_limited


class AuthController:
    def __init__(
        self,
        *,
        account_service: AccountService,
        session_config: SessionConfig,
        security_config: SecurityConfig,
        rate_limiter: InMemoryRateLimiter | None = None,
    ) -> None:
        self._accounts = account_service
        self._session_config = session_config
        self._security = security_config
        self._rate_limiter = rate_limiter

    def _request_token(self) -> str:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            return auth_header[7:].strip()
        return request.cookies.get(self._session_config.cookie_name, "")

    def register(self) -> tuple[Response, int]:
        try:
            dto = RegisterRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        account = self._accounts.register(
            dto.username, dto.email, dto.password, ip_address=client_key(request)
        )

        payload = AccountResponseDTO(account=AccountDTO.model_validate(account))
        logger.info(f"auth.register: ok account_id={account.id}")
        return jsonify(payload.model_dump(mode="json")), 201

    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        account, token = self._accounts.authenticate(
            dto.username, dto.password, ip_address=client_key(request)
        )

        payload = LoginResponseDTO(
            account=AccountDTO.model_validate(account),
            token=token,
            expires_in=self._session_config.ttl_seconds,
        )
        response = jsonify(payload.model_dump(mode="json"))
        response.set_cookie(
            self._session_config.cookie_name,
            token,
            httponly=True,
            samesite=self._security.cookie_samesite,
            secure=self._security.cookie_secure,
            max_age=self._session_config.ttl_seconds if dto.remember_me else None,
        )
        logger.info(
            f"auth.login: ok account_id={account.id} remember_me={dto.remember_me}"
        )
        return response, 200

    def logout(self) -> tuple[Response, int]:
        self._accounts.logout(self._request_token(), ip_address=client_key(request))

        response = jsonify(AuthSuccessDTO().model_dump())
        response.delete_cookie(
            self._session_config.cookie_name,
            samesite=self._security.cookie_samesite,
            secure=self._security.cookie_secure,
            httponly=True,
        )
        logger.info("auth.logout: ok")
        return response, 200

    def profile(self) -> tuple[Response, int]:
        account = self._accounts.get_profile(self._request_token())
        payload = AccountResponseDTO(account=AccountDTO.model_validate(account))
        return jsonify(payload.model_dump(mode="json")), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule(
            "/register",
            view_func=rate_limited(self._rate_limiter, self.register),
            methods=["POST"],
        )
        bp.add_url_rule(
            "/login",
            view_func=rate_limited(self._rate_limiter, self.login),
            methods=["POST"],
        )
        bp.add_url_rule("/logout", view_func=self.logout, methods=["POST", "DELETE"])
        bp.add_url_rule("/profile", view_func=self.profile, methods=["GET"])
        return bp

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from flask import Flask

from authcore.domain.accounts.entities import Account
from authcore.domain.accounts.exceptions import (
    AccountLockedError,
    DuplicateAccountError,
    InvalidCredentialsError,
    UnauthorizedError,
)
from authcore.interfaces.http.controllers.auth_controller import AuthController
from authcore.shared.config import SecurityConfig, SessionConfig
from authcore.shared.middleware.error_handler import configure_error_handling
from authcore.shared.middleware.rate_limit import InMemoryRateLimiter

ALICE = Account(
    id=1,
    username="alice",
    email="a@x.com",
    created_at=datetime(2026, 1, 1, tzinfo=UTC),
)


@pytest.fixture()
def service() -> MagicMock:
    return MagicMock()


def _build_app(service: MagicMock, rate_limiter: InMemoryRateLimiter | None = None) -> Flask:
    app = Flask(__name__)
    configure_error_handling(app)
    controller = AuthController(
        account_service=service,
        session_config=SessionConfig(SESSION_TTL_SECONDS=3600),
        security_config=SecurityConfig(),
        rate_limiter=rate_limiter,
    )
    app.register_blueprint(controller.as_blueprint())
    return app


def test_register_returns_201_without_password_fields(service: MagicMock) -> None:
    service.register.return_value = ALICE
    app = _build_app(service)

    with app.test_client() as client:
        response = client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "a@x.com", "password": "s3cret1"},
        )

    assert response.status_code == 201
    body = response.get_json()
    assert body["account"]["username"] == "alice"
    assert "password" not in response.get_data(as_text=True)
    assert service.register.call_args.args == ("alice", "a@x.com", "s3cret1")


def test_register_duplicate_maps_to_409(service: MagicMock) -> None:
    service.register.side_effect = DuplicateAccountError("email")
    app = _build_app(service)

    with app.test_client() as client:
        response = client.post(
            "/api/auth/register",
            json={"username": "bob", "email": "a@x.com", "password": "s3cret1"},
        )

    assert response.status_code == 409
    assert response.get_json() == {"error": "duplicate_account", "context": {"field": "email"}}


@pytest.mark.parametrize(
    "payload",
    [{}, {"username": "a"}, {"username": "", "password": "x"}, {"username": "a", "password": 5}],
)
def test_login_invalid_payload_returns_400(service: MagicMock, payload: dict) -> None:
    app = _build_app(service)

    with app.test_client() as client:
        response = client.post("/api/auth/login", json=payload)

    assert response.status_code == 400
    assert response.get_json()["error"] == "validation_error"
    service.authenticate.assert_not_called()


def test_login_non_json_body_returns_400(service: MagicMock) -> None:
    app = _build_app(service)

    with app.test_client() as client:
        response = client.post("/api/auth/login", data="username=alice", content_type="text/plain")

    assert response.status_code == 400


def test_login_sets_http_only_cookie(service: MagicMock) -> None:
    service.authenticate.return_value = (ALICE, "tok123")
    app = _build_app(service)

    with app.test_client() as client:
        response = client.post(
            "/api/auth/login", json={"username": "alice", "password": "s3cret1"}
        )

    assert response.status_code == 200
    body = response.get_json()
    assert body["token"] == "tok123"
    assert body["expires_in"] == 3600
    cookie = response.headers["Set-Cookie"]
    assert cookie.startswith("auth_token=tok123")
    assert "HttpOnly" in cookie
    assert "Max-Age" not in cookie


def test_login_remember_me_sets_max_age(service: MagicMock) -> None:
    service.authenticate.return_value = (ALICE, "tok123")
    app = _build_app(service)

    with app.test_client() as client:
        response = client.post(
            "/api/auth/login",
            json={"username": "alice", "password": "s3cret1", "remember_me": True},
        )

    assert "Max-Age=3600" in response.headers["Set-Cookie"]


@pytest.mark.parametrize(
    ("error", "status", "code"),
    [
        (InvalidCredentialsError(), 401, "invalid_credentials"),
        (AccountLockedError(30.0), 429, "account_locked"),
    ],
)
def test_login_failures_map_to_status(
    service: MagicMock, error: Exception, status: int, code: str
) -> None:
    service.authenticate.side_effect = error
    app = _build_app(service)

    with app.test_client() as client:
        response = client.post(
            "/api/auth/login", json={"username": "alice", "password": "wrong"}
        )

    assert response.status_code == status
    assert response.get_json()["error"] == code
    assert "Set-Cookie" not in response.headers


def test_profile_reads_bearer_token(service: MagicMock) -> None:
    service.get_profile.return_value = ALICE
    app = _build_app(service)

    with app.test_client() as client:
        response = client.get(
            "/api/auth/profile", headers={"Authorization": "Bearer tok123"}
        )

    assert response.status_code == 200
    assert response.get_json()["account"]["email"] == "a@x.com"
    service.get_profile.assert_called_once_with("tok123")


def test_profile_falls_back_to_cookie(service: MagicMock) -> None:
    service.get_profile.return_value = ALICE
    app = _build_app(service)

    with app.test_client() as client:
        client.set_cookie("auth_token", "from-cookie")
        client.get("/api/auth/profile")

    service.get_profile.assert_called_once_with("from-cookie")


def test_profile_without_token_is_401(service: MagicMock) -> None:
    service.get_profile.side_effect = UnauthorizedError()
    app = _build_app(service)

    with app.test_client() as client:
        response = client.get("/api/auth/profile")

    assert response.status_code == 401
    assert response.get_json() == {"error": "unauthorized"}
    service.get_profile.assert_called_once_with("")


@pytest.mark.parametrize("method", ["post", "delete"])
def test_logout_clears_cookie(service: MagicMock, method: str) -> None:
    app = _build_app(service)

    with app.test_client() as client:
        response = getattr(client, method)(
            "/api/auth/logout", headers={"Authorization": "Bearer tok123"}
        )

    assert response.status_code == 200
    assert response.get_json() == {"ok": True}
    assert "auth_token=;" in response.headers["Set-Cookie"]
    assert service.logout.call_args.args == ("tok123",)


def test_unexpected_error_is_opaque(service: MagicMock) -> None:
    service.get_profile.side_effect = RuntimeError("db password=hunter2")
    app = _build_app(service)

    with app.test_client() as client:
        response = client.get("/api/auth/profile", headers={"Authorization": "Bearer x"})

    assert response.status_code == 500
    assert response.get_json() == {"error": "internal_error"}


def test_login_rate_limited(service: MagicMock) -> None:
    service.authenticate.side_effect = InvalidCredentialsError()
    app = _build_app(service, rate_limiter=InMemoryRateLimiter(2, 60))

    with app.test_client() as client:
        statuses = [
            client.post(
                "/api/auth/login", json={"username": "alice", "password": "wrong"}
            ).status_code
            for _ in range(3)
        ]

    assert statuses == [401, 401, 429]


def test_rate_limit_ignores_forwarded_for(service: MagicMock) -> None:
    service.authenticate.side_effect = InvalidCredentialsError()
    app = _build_app(service, rate_limiter=InMemoryRateLimiter(2, 60))

    with app.test_client() as client:
        statuses = [
            client.post(
                "/api/auth/login",
                json={"username": "alice", "password": "wrong"},
                headers={"X-Forwarded-For": f"10.0.0.{i}"},
            ).status_code
            for i in range(5)
        ]

    assert statuses == [401, 401, 429, 429, 429]
    assert service.authenticate.call_args.kwargs["ip_address"] == "127.0.0.1"

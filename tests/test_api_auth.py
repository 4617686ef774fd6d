"""Tests des routes d'authentification (login, verify, brute-force)."""

from __future__ import annotations

import time

import jwt
import pytest
from fastapi.testclient import TestClient

from backend.app.main import create_app
from backend.core.container import Container
from backend.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_FORBIDDEN,
    HTTP_OK,
    HTTP_TOO_MANY_REQUESTS,
    HTTP_UNAUTHORIZED,
)
from backend.domain.auth import SessionIssuer
from tests.conftest import ADMIN_PASSWORD, JWT_SECRET, VIEWER_PASSWORD, login
from tests.fakes import FakeVersionControl

CLIENT_ADDRESS = "testclient"


def test_login_returns_token_with_configured_window(client: TestClient, settings) -> None:
    body = login(client)
    assert body["expiresIn"] == settings.SESSION_TTL_SECONDS
    assert body["role"] == "admin"
    claims = jwt.decode(body["token"], JWT_SECRET, algorithms=["HS256"])
    assert claims["exp"] - claims["iat"] == settings.SESSION_TTL_SECONDS
    assert claims["csrf"] == body["csrfToken"]


def test_missing_password_is_400(client: TestClient) -> None:
    assert client.post("/api/auth/login", json={}).status_code == HTTP_BAD_REQUEST
    assert client.post("/api/auth/login").status_code == HTTP_BAD_REQUEST


def test_wrong_password_is_401_and_counts_once(client: TestClient, container: Container) -> None:
    r = client.post("/api/auth/login", json={"password": "wrong"})
    assert r.status_code == HTTP_UNAUTHORIZED
    assert r.json()["message"] == "invalid_credentials"
    assert container.guard.failures(CLIENT_ADDRESS) == 1
    client.post("/api/auth/login", json={"password": "wrong again"})
    assert container.guard.failures(CLIENT_ADDRESS) == 2


def test_success_clears_failures(client: TestClient, container: Container) -> None:
    client.post("/api/auth/login", json={"password": "wrong"})
    login(client)
    assert container.guard.failures(CLIENT_ADDRESS) == 0


def test_lockout_after_ten_failures_even_with_correct_password(
    client: TestClient, container: Container
) -> None:
    for _ in range(10):
        r = client.post("/api/auth/login", json={"password": "wrong"})
        assert r.status_code == HTTP_UNAUTHORIZED
    r = client.post("/api/auth/login", json={"password": ADMIN_PASSWORD})
    assert r.status_code == HTTP_TOO_MANY_REQUESTS
    assert r.json()["message"] == "too_many_attempts"
    assert int(r.headers["Retry-After"]) > 0
    # aucune indication du nombre d'essais restants
    assert "remaining" not in r.text
    assert container.guard.failures(CLIENT_ADDRESS) == 10


def test_forwarded_address_used_only_when_trusted(settings, fake_vcs) -> None:
    settings.TRUST_PROXY_HEADERS = True
    container = Container(settings=settings, vcs=fake_vcs)
    client = TestClient(create_app(container))
    client.post(
        "/api/auth/login",
        json={"password": "wrong"},
        headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )
    assert container.guard.failures("203.0.113.7") == 1
    assert container.guard.failures(CLIENT_ADDRESS) == 0


def test_viewer_login(client: TestClient) -> None:
    body = login(client, VIEWER_PASSWORD)
    assert body["role"] == "viewer"


def test_login_waits_minimum_delay(settings, password_hashes) -> None:
    settings.LOGIN_MIN_DELAY_MS = 150
    client = TestClient(create_app(Container(settings=settings, vcs=FakeVersionControl())))
    for password in ("wrong", ADMIN_PASSWORD):
        started = time.monotonic()
        client.post("/api/auth/login", json={"password": password})
        assert time.monotonic() - started >= 0.14


def test_verify_returns_session(client: TestClient) -> None:
    token = login(client)["token"]
    r = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == HTTP_OK
    body = r.json()
    assert body["valid"] is True
    assert body["user"]["role"] == "admin"


@pytest.mark.parametrize("header", [None, "Basic abc", "Bearer"])
def test_verify_without_token_is_401(client: TestClient, header) -> None:
    headers = {"Authorization": header} if header else {}
    r = client.get("/api/auth/verify", headers=headers)
    assert r.status_code == HTTP_UNAUTHORIZED
    assert r.json()["message"] == "missing_token"


def test_verify_with_invalid_token_is_403(client: TestClient) -> None:
    r = client.get("/api/auth/verify", headers={"Authorization": "Bearer not.a.valid.token"})
    assert r.status_code == HTTP_FORBIDDEN
    assert r.json()["message"] == "invalid_token"


def test_verify_with_expired_token_is_403_expired(client: TestClient, settings) -> None:
    past = time.time() - settings.SESSION_TTL_SECONDS - 5
    issuer = SessionIssuer(
        JWT_SECRET, "HS256", settings.SESSION_TTL_SECONDS, settings.ADMIN_PASSWORD_HASH,
        clock=lambda: past,
    )
    token = issuer.issue(ADMIN_PASSWORD).token
    r = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == HTTP_FORBIDDEN
    assert r.json()["message"] == "token_expired"

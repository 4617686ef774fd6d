"""Tests pour la limitation de débit par adresse sur `/api`."""

from __future__ import annotations

from fastapi.testclient import TestClient

from backend.app.main import create_app
from backend.app.middleware_rate_limit import _Limiter
from backend.core.container import Container
from backend.core.http_constants import HTTP_OK, HTTP_TOO_MANY_REQUESTS


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_fixed_window_per_address() -> None:
    clock = FakeClock()
    limiter = _Limiter(per_minute=2, clock=clock)
    assert limiter.allow("a")[0] is True
    assert limiter.allow("a")[0] is True
    allowed, retry_after = limiter.allow("a")
    assert allowed is False
    assert 1 <= retry_after <= 60
    # une autre adresse a son propre compteur
    assert limiter.allow("b")[0] is True
    clock.now += 60
    assert limiter.allow("a")[0] is True


def test_stale_buckets_are_pruned() -> None:
    clock = FakeClock()
    limiter = _Limiter(per_minute=5, clock=clock)
    for key in ("a", "b", "c"):
        limiter.allow(key)
    clock.now += 60
    limiter.allow("d")
    assert list(limiter._buckets) == ["d"]


def test_middleware_blocks_api_but_not_health(settings, fake_vcs) -> None:
    settings.RATE_LIMIT_PER_MINUTE = 2
    client = TestClient(create_app(Container(settings=settings, vcs=fake_vcs)))
    assert client.get("/api/stats").status_code == HTTP_OK
    assert client.get("/api/stats").status_code == HTTP_OK
    r = client.get("/api/stats")
    assert r.status_code == HTTP_TOO_MANY_REQUESTS
    assert r.json()["code"] == "RATE_LIMITED"
    assert int(r.headers["Retry-After"]) >= 1
    assert client.get("/health").status_code == HTTP_OK


def test_zero_disables_limiter(client: TestClient) -> None:
    for _ in range(5):
        assert client.get("/api/stats").status_code == HTTP_OK

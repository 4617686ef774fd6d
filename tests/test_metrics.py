"""Tests pour les métriques Prometheus.

Ce module teste que les métriques Prometheus sont correctement exposées via l'endpoint /metrics.
"""

from fastapi.testclient import TestClient

from backend.app.metrics import LOGIN_ATTEMPTS
from backend.core.http_constants import HTTP_OK


def test_metrics_exposed(client: TestClient):
    """Teste que l'endpoint /metrics expose les métriques Prometheus."""
    client.get("/api/stats")
    r = client.get("/metrics")
    assert r.status_code == HTTP_OK
    assert b"http_requests_total" in r.content


def test_login_outcomes_are_counted(client: TestClient):
    before = LOGIN_ATTEMPTS.labels(result="failure")._value.get()  # type: ignore[attr-defined]
    client.post("/api/auth/login", json={"password": "wrong"})
    after = LOGIN_ATTEMPTS.labels(result="failure")._value.get()  # type: ignore[attr-defined]
    assert after == before + 1

"""Tests pour l'endpoint de santé de l'application."""

from fastapi.testclient import TestClient

from backend.core.http_constants import HTTP_OK


def test_health(client: TestClient):
    """Teste que l'endpoint de santé retourne un statut OK."""
    r = client.get("/health")
    assert r.status_code == HTTP_OK
    body = r.json()
    assert body["status"] == "ok"
    assert body["auth_configured"] is True


def test_health_reports_missing_password_hash(settings, fake_vcs):
    from backend.app.main import create_app
    from backend.core.container import Container

    settings.ADMIN_PASSWORD_HASH = None
    c = TestClient(create_app(Container(settings=settings, vcs=fake_vcs)))
    assert c.get("/health").json()["auth_configured"] is False

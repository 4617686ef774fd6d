"""Configuration de test pour pytest avec gestion des chemins.

Ce module ajoute la racine du projet au sys.path et fournit des settings isolés
(répertoires temporaires, mots de passe de test, délais désactivés) ainsi qu'une
application construite sur un conteneur dédié avec un client git factice.
"""

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so that
# imports like `from backend...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from backend.app.main import create_app  # noqa: E402
from backend.core.container import Container  # noqa: E402
from backend.core.settings import Settings  # noqa: E402
from backend.domain.auth import hash_password  # noqa: E402
from tests.fakes import FakeVersionControl  # noqa: E402

ADMIN_PASSWORD = "correct horse battery staple"
VIEWER_PASSWORD = "lecture-seule"
JWT_SECRET = "test-secret-with-enough-entropy-0123456789"


@pytest.fixture(scope="session")
def password_hashes() -> dict[str, str]:
    return {"admin": hash_password(ADMIN_PASSWORD), "viewer": hash_password(VIEWER_PASSWORD)}


@pytest.fixture()
def settings(tmp_path: Path, password_hashes) -> Settings:
    return Settings(
        _env_file=None,
        APP_ENV="test",
        DATA_DIR=str(tmp_path / "data"),
        PUBLIC_DATA_DIR=str(tmp_path / "site" / "data"),
        UPLOADS_DIR=str(tmp_path / "uploads"),
        PUBLISH_REPO_DIR=str(tmp_path / "site"),
        JWT_SECRET=JWT_SECRET,
        ADMIN_PASSWORD_HASH=password_hashes["admin"],
        VIEWER_PASSWORD_HASH=password_hashes["viewer"],
        LOGIN_MIN_DELAY_MS=0,
        RATE_LIMIT_PER_MINUTE=0,
    )


@pytest.fixture()
def fake_vcs() -> FakeVersionControl:
    return FakeVersionControl()


@pytest.fixture()
def container(settings: Settings, fake_vcs: FakeVersionControl) -> Container:
    return Container(settings=settings, vcs=fake_vcs)


@pytest.fixture()
def client(container: Container) -> TestClient:
    return TestClient(create_app(container))


def login(client: TestClient, password: str = ADMIN_PASSWORD) -> dict:
    r = client.post("/api/auth/login", json={"password": password})
    assert r.status_code == 200, r.text
    return r.json()


@pytest.fixture()
def admin_headers(client: TestClient) -> dict[str, str]:
    body = login(client)
    return {"Authorization": f"Bearer {body['token']}", "X-CSRF-Token": body["csrfToken"]}

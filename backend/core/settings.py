"""Définition et chargement des paramètres de configuration applicative.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
"""

import os
from pathlib import Path

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

# Détermination du fichier .env à utiliser avec priorité:
# 1) ENV_FILE (chemin explicite)
# 2) .env.{APP_ENV} si présent
# 3) .env (défaut)
_cwd = Path.cwd()
_env_file_from_env = os.getenv("ENV_FILE")
if _env_file_from_env:
    _ENV_FILE_PATH = _env_file_from_env
else:
    _app_env = os.getenv("APP_ENV", "dev")
    _candidate_specific = _cwd / f".env.{_app_env}"
    _candidate_default = _cwd / ".env"
    if _candidate_specific.exists():
        _ENV_FILE_PATH = _candidate_specific
    elif _candidate_default.exists():
        _ENV_FILE_PATH = _candidate_default
    else:
        _ENV_FILE_PATH = _candidate_default

_BACKEND_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )
    APP_NAME: str = "portfolio-admin-backend"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 3001

    CORS_ORIGINS: list[AnyHttpUrl] | list[str] = []
    TRUST_PROXY_HEADERS: bool = False

    # Stockage du contenu
    DATA_DIR: str = str(_BACKEND_DIR / "data")
    PUBLIC_DATA_DIR: str = str(_BACKEND_DIR.parent / "data")
    UPLOADS_DIR: str = str(_BACKEND_DIR / "uploads")
    ADMIN_UI_DIR: str | None = None

    # JWT/Auth
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALG: str = "HS256"
    SESSION_TTL_SECONDS: int = 4 * 3600
    ADMIN_PASSWORD_HASH: str | None = None
    VIEWER_PASSWORD_HASH: str | None = None
    CSRF_ENFORCE: bool = True

    # Protection brute-force du login
    LOGIN_MAX_ATTEMPTS: int = 10
    LOGIN_LOCKOUT_SECONDS: int = 30 * 60
    LOGIN_MIN_DELAY_MS: int = 500

    # Rate limit global de l'API (par adresse)
    RATE_LIMIT_PER_MINUTE: int = 120

    # Uploads
    UPLOAD_MAX_BYTES: int = 5 * 1024 * 1024
    UPLOAD_TRANSCODE_IMAGES: bool = True
    UPLOAD_WEBP_QUALITY: int = 82

    # Publication (git)
    PUBLISH_REPO_DIR: str = str(_BACKEND_DIR.parent)
    PUBLISH_GIT_REMOTE: str = "origin"
    PUBLISH_GIT_BRANCH: str | None = None
    PUBLISH_GIT_TIMEOUT: float | None = 60.0


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings()

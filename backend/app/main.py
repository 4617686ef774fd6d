"""
Application principale FastAPI.

Ce module assemble tous les composants du backend du portfolio : middlewares,
routes, métriques et fichiers statiques.

Responsabilités du module:
- Initialiser le logging structuré
- Construire l'application FastAPI à partir d'un `Container`
- Ajouter les middlewares (request id, timing, sécurité, CORS, rate limit, métriques)
- Monter les routers (santé, auth, contenu, upload, publication) et `/uploads`
"""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from backend.api.routes_auth import router as auth_router
from backend.api.routes_content import admin_router as content_admin_router
from backend.api.routes_content import public_router as content_public_router
from backend.api.routes_health import router as health_router
from backend.api.routes_publish import router as publish_router
from backend.api.routes_upload import router as upload_router
from backend.apigw.errors import install_error_handlers
from backend.app.metrics import PrometheusMiddleware, metrics_router
from backend.app.middleware_rate_limit import RateLimitMiddleware
from backend.core.container import Container, default_container
from backend.core.logging import setup_logging
from backend.middlewares.request_id import RequestIDMiddleware
from backend.middlewares.security_headers import SecurityHeadersMiddleware
from backend.middlewares.timing import TimingMiddleware


def create_app(container: Container | None = None) -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Configure le logging structuré (structlog)
    - Attache le conteneur (`app.state.container`) lu par les dépendances
    - Ajoute les middlewares, les gestionnaires d'erreurs et les routes
    """
    if container is None:
        container = default_container()
    settings = container.settings
    setup_logging(env=settings.APP_ENV)
    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG)
    app.state.container = container

    app.add_middleware(TimingMiddleware)
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        per_minute=settings.RATE_LIMIT_PER_MINUTE,
        trust_proxy=settings.TRUST_PROXY_HEADERS,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(o).rstrip("/") for o in settings.CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["GET", "PUT", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-CSRF-Token", "If-Match"],
        expose_headers=["ETag", "X-Request-ID"],
    )
    app.add_middleware(RequestIDMiddleware)
    install_error_handlers(app)

    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(auth_router)
    app.include_router(publish_router)
    app.include_router(upload_router)
    app.include_router(content_admin_router)
    app.include_router(content_public_router)

    app.mount("/uploads", StaticFiles(directory=str(container.uploads.uploads_dir)), name="uploads")
    if settings.ADMIN_UI_DIR and Path(settings.ADMIN_UI_DIR).is_dir():
        app.mount(
            "/admin", StaticFiles(directory=settings.ADMIN_UI_DIR, html=True), name="admin"
        )
    return app


def run() -> None:  # pragma: no cover - entrée serveur
    import uvicorn  # noqa: PLC0415

    settings = default_container().settings
    uvicorn.run(
        "backend.app.main:create_app",
        factory=True,
        host=settings.APP_HOST,
        port=settings.APP_PORT,
    )


if __name__ == "__main__":  # pragma: no cover
    run()

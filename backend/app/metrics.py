"""
Métriques Prometheus pour l'application.

Ce module définit les métriques exposées sur `/metrics`: trafic HTTP,
connexions, blocages brute-force, écritures de contenu et publications.
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

metrics_router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

LOGIN_ATTEMPTS = Counter(
    "auth_login_attempts_total",
    "Login attempts by outcome",
    ["result"],
)
RATE_LIMIT_BLOCKS = Counter(
    "rate_limit_blocks_total",
    "Requests rejected by rate limiting or lockout",
    ["reason"],
)
CONTENT_WRITES = Counter(
    "content_writes_total",
    "Content document writes",
    ["category", "result"],
)
PUBLISH_RUNS = Counter(
    "publish_runs_total",
    "Publish pipeline runs",
    ["result"],
)


def route_label(request: Request) -> str:
    """Retourne le gabarit de route (cardinalité bornée) plutôt que le chemin brut."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or "unmatched"


@metrics_router.get("/metrics", include_in_schema=False)
def metrics():
    """Expose les métriques Prometheus au format texte."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware Prometheus pour mesurer les métriques HTTP.

    Collecte les métriques de comptage des requêtes et de latence par route pour l'exposition
    Prometheus.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        route = route_label(request)
        REQUEST_COUNT.labels(request.method, route, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(route).observe(time.perf_counter() - start)
        return response

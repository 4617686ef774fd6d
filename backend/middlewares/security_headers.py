"""Middleware Starlette ajoutant les en-têtes de sécurité HTTP usuels.

Les en-têtes déjà posés par une route ne sont pas écrasés.
"""

from collections.abc import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

DEFAULT_SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, headers: dict[str, str] | None = None) -> None:
        super().__init__(app)
        self.headers = dict(DEFAULT_SECURITY_HEADERS if headers is None else headers)

    async def dispatch(self, request, call_next: Callable):
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        # les réponses authentifiées ne doivent pas être mises en cache
        if request.headers.get("Authorization"):
            response.headers.setdefault("Cache-Control", "no-store")
        return response

"""Per-address rate limiting middleware for the `/api` surface.

Fixed one-minute window per client address, configurable via env/settings
`RATE_LIMIT_PER_MINUTE` (0 disables the limiter). `/health` and `/metrics`
are outside `/api` and never limited.

On block, returns 429 with `Retry-After` and increments the Prom counter
`rate_limit_blocks_total{reason="api"}`.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from backend.apigw.auth_utils import extract_client_address
from backend.apigw.errors import create_error_response
from backend.app.metrics import RATE_LIMIT_BLOCKS

_WINDOW_SECONDS = 60.0


class _Limiter:
    def __init__(self, per_minute: int, clock: Callable[[], float] = time.monotonic) -> None:
        self.per_minute = max(0, int(per_minute))
        self.clock = clock
        # address -> (window_start, count)
        self._buckets: dict[str, tuple[float, int]] = {}

    def allow(self, key: str) -> tuple[bool, int]:
        """Retourne (autorisé, secondes avant réinitialisation)."""
        now = self.clock()
        if key not in self._buckets:
            self._prune(now)
        start, count = self._buckets.get(key, (now, 0))
        if now - start >= _WINDOW_SECONDS:
            start, count = now, 0
        retry_after = max(1, int(_WINDOW_SECONDS - (now - start)))
        if count >= self.per_minute:
            self._buckets[key] = (start, count)
            return False, retry_after
        self._buckets[key] = (start, count + 1)
        return True, retry_after

    def _prune(self, now: float) -> None:
        expired = [k for k, (start, _) in self._buckets.items() if now - start >= _WINDOW_SECONDS]
        for key in expired:
            del self._buckets[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,  # type: ignore[no-untyped-def]
        per_minute: int = 120,
        trust_proxy: bool = False,
    ) -> None:
        super().__init__(app)
        self.limiter = _Limiter(per_minute=per_minute)
        self.trust_proxy = trust_proxy

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[no-untyped-def]
        path = request.url.path
        if self.limiter.per_minute <= 0 or not path.startswith("/api"):
            return await call_next(request)
        address = extract_client_address(request, trust_proxy=self.trust_proxy)
        allowed, retry_after = self.limiter.allow(address)
        if not allowed:
            RATE_LIMIT_BLOCKS.labels(reason="api").inc()
            response = create_error_response(
                status_code=429,
                code="RATE_LIMITED",
                message="rate limit exceeded",
                trace_id=request.headers.get("X-Request-ID"),
                details={"retry_after": retry_after},
            )
            response.headers["Retry-After"] = str(retry_after)
            return response
        return await call_next(request)

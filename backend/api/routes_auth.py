"""
Routes d'authentification pour l'API.

Ce module fournit la connexion par mot de passe partagé (avec protection
brute-force et délai minimal de réponse) et la vérification du jeton.
"""

import asyncio
import time

import structlog
from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from backend.api.deps import client_address, current_session_dep, get_container
from backend.api.schemas import LoginPayload, LoginResponse, SessionUser, VerifyResponse
from backend.apigw.errors import from_domain_error
from backend.app.metrics import LOGIN_ATTEMPTS, RATE_LIMIT_BLOCKS
from backend.core.container import Container
from backend.domain.auth import IssuedSession, SessionClaims
from backend.domain.errors import (
    AuthenticationError,
    DomainError,
    LockedOutError,
    ValidationError,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])
log = structlog.get_logger(__name__)


def _login(container: Container, address: str, payload: LoginPayload | None) -> IssuedSession:
    guard = container.guard
    if guard.is_locked(address):
        LOGIN_ATTEMPTS.labels(result="locked").inc()
        RATE_LIMIT_BLOCKS.labels(reason="lockout").inc()
        log.warning("login_locked_out", address=address)
        raise LockedOutError(retry_after=guard.retry_after(address))
    if payload is None or not payload.password:
        raise ValidationError("password_required")
    try:
        session = container.issuer.issue(payload.password)
    except AuthenticationError:
        record = guard.record_failure(address)
        LOGIN_ATTEMPTS.labels(result="failure").inc()
        log.warning("login_failed", address=address, failures=record.count)
        raise
    guard.clear(address)
    LOGIN_ATTEMPTS.labels(result="success").inc()
    log.info("login_succeeded", address=address, role=session.role.value)
    return session


async def _pad_response_time(started: float, min_delay_ms: int) -> None:
    remaining = min_delay_ms / 1000.0 - (time.monotonic() - started)
    if remaining > 0:
        await asyncio.sleep(remaining)


@router.post("/login", response_model=LoginResponse)
async def login(request: Request, payload: LoginPayload | None = None):
    """Authentifie le mot de passe partagé et retourne un jeton de session.

    Toutes les issues (succès, échec, blocage) prennent au moins
    `LOGIN_MIN_DELAY_MS` pour limiter l'énumération par mesure de temps.
    """
    container = get_container(request)
    address = client_address(request)
    started = time.monotonic()
    try:
        session = await run_in_threadpool(_login, container, address, payload)
    except DomainError as err:
        await _pad_response_time(started, container.settings.LOGIN_MIN_DELAY_MS)
        raise from_domain_error(err) from err
    await _pad_response_time(started, container.settings.LOGIN_MIN_DELAY_MS)
    return LoginResponse(
        token=session.token,
        expires_in=session.expires_in,
        role=session.role,
        csrf_token=session.csrf_token,
    )


@router.get("/verify", response_model=VerifyResponse)
def verify(claims: SessionClaims = current_session_dep):
    """Confirme la validité du jeton et retourne les informations de session."""
    return VerifyResponse(
        valid=True, user=SessionUser(role=claims.role, iat=claims.iat, exp=claims.exp)
    )

"""Dépendances partagées pour les routes de l'API.

But du module
-------------
- Donner accès au `Container` de l'application (posé dans `app.state` par
  `create_app`), ce qui permet aux tests d'injecter le leur.
- Valider la session portée par `Authorization: Bearer <token>` et la
  rattacher à `request.state.session`.
- Restreindre les opérations d'écriture au rôle `admin` (+ contrôle CSRF).
"""

from fastapi import Depends, Header, Request

from backend.apigw.auth_utils import extract_client_address
from backend.apigw.errors import from_domain_error
from backend.core.container import Container
from backend.domain.auth import Role, SessionClaims
from backend.domain.errors import (
    AuthorizationError,
    CsrfError,
    InsufficientRoleError,
    MissingTokenError,
)

_SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}


def get_container(request: Request) -> Container:
    return request.app.state.container


def client_address(request: Request) -> str:
    container = get_container(request)
    return extract_client_address(request, trust_proxy=container.settings.TRUST_PROXY_HEADERS)


def _bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise MissingTokenError()
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise MissingTokenError()
    return token


def get_current_session(
    request: Request, authorization: str | None = Header(None)
) -> SessionClaims:
    """Extrait et valide la session courante à partir du jeton d'autorisation."""
    container = get_container(request)
    try:
        claims = container.validator.validate(_bearer_token(authorization))
    except AuthorizationError as err:
        raise from_domain_error(err) from err
    request.state.session = claims
    return claims


current_session_dep = Depends(get_current_session)


def require_admin(
    request: Request,
    claims: SessionClaims = current_session_dep,
    x_csrf_token: str | None = Header(None),
) -> SessionClaims:
    """Exige le rôle admin; sur les méthodes mutantes, vérifie aussi l'en-tête CSRF."""
    try:
        if claims.role is not Role.ADMIN:
            raise InsufficientRoleError()
        enforce = get_container(request).settings.CSRF_ENFORCE
        if enforce and request.method not in _SAFE_METHODS and x_csrf_token != claims.csrf:
            raise CsrfError()
    except AuthorizationError as err:
        raise from_domain_error(err) from err
    return claims


admin_session_dep = Depends(require_admin)

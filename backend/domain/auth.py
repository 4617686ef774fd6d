"""
Module d'authentification et de gestion des sessions.

Ce module fournit le hachage des mots de passe, l'émission des jetons de session
(JWT signés, durée fixe) et leur validation. Il n'existe qu'un compte
d'administration (et, optionnellement, un mot de passe "lecture seule").
"""

from __future__ import annotations

import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from backend.domain.errors import (
    AuthenticationError,
    InvalidTokenError,
    TokenExpiredError,
)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

SESSION_SUBJECT = "admin"


class Role(str, Enum):
    """Rôles portés par les jetons de session."""

    ADMIN = "admin"
    VIEWER = "viewer"


class SessionClaims(BaseModel):
    """Données contenues dans un jeton de session."""

    sub: str
    role: Role
    csrf: str
    iat: int
    exp: int


@dataclass(frozen=True)
class IssuedSession:
    token: str
    expires_in: int
    role: Role
    csrf_token: str


def hash_password(p: str) -> str:
    """Hache un mot de passe en utilisant PBKDF2."""
    if not p:
        raise ValueError("empty password")
    return pwd_context.hash(p)


def verify_password(p: str, h: str | None) -> bool:
    """Vérifie un mot de passe contre son hash; un hash absent ou illisible ne valide rien."""
    if not p or not h:
        return False
    try:
        return pwd_context.verify(p, h)
    except ValueError:
        return False


class SessionIssuer:
    """Vérifie le secret partagé et émet un jeton signé à durée limitée."""

    def __init__(
        self,
        secret: str,
        alg: str,
        ttl_seconds: int,
        admin_hash: str | None,
        viewer_hash: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.secret = secret
        self.alg = alg
        self.ttl_seconds = int(ttl_seconds)
        self.admin_hash = admin_hash
        self.viewer_hash = viewer_hash
        self.clock = clock

    def authenticate(self, password: str) -> Role:
        """Retourne le rôle associé au mot de passe ou lève `AuthenticationError`."""
        if verify_password(password, self.admin_hash):
            return Role.ADMIN
        if verify_password(password, self.viewer_hash):
            return Role.VIEWER
        raise AuthenticationError()

    def issue(self, password: str) -> IssuedSession:
        role = self.authenticate(password)
        return self.issue_for_role(role)

    def issue_for_role(self, role: Role) -> IssuedSession:
        now = int(self.clock())
        csrf = secrets.token_urlsafe(32)
        payload = {
            "sub": SESSION_SUBJECT,
            "role": role.value,
            "csrf": csrf,
            "iat": now,
            "exp": now + self.ttl_seconds,
        }
        token = jwt.encode(payload, self.secret, algorithm=self.alg)
        return IssuedSession(
            token=token, expires_in=self.ttl_seconds, role=role, csrf_token=csrf
        )


class SessionValidator:
    """Vérifie la signature et l'expiration d'un jeton de session."""

    def __init__(self, secret: str, alg: str) -> None:
        self.secret = secret
        self.alg = alg

    def validate(self, token: str) -> SessionClaims:
        """Décode le jeton; distingue `token_expired` de `invalid_token`."""
        if not token:
            raise InvalidTokenError()
        try:
            data = jwt.decode(
                token,
                self.secret,
                algorithms=[self.alg],
                options={"require": ["exp", "iat", "role"]},
            )
        except jwt.ExpiredSignatureError as err:
            raise TokenExpiredError() from err
        except jwt.InvalidTokenError as err:
            raise InvalidTokenError() from err
        try:
            return SessionClaims(**data)
        except ValueError as err:
            # rôle inconnu ou claim manquant
            raise InvalidTokenError() from err

"""
Taxonomie des erreurs du domaine.

Les couches domaine et infra lèvent ces exceptions; les routes les convertissent
en `APIError` (voir `backend.apigw.errors.from_domain_error`).
"""

from __future__ import annotations


class DomainError(Exception):
    """Erreur de base du domaine, porteuse d'un code stable."""

    code = "domain_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class ValidationError(DomainError):
    code = "validation_error"


class AuthenticationError(DomainError):
    code = "invalid_credentials"


class LockedOutError(AuthenticationError):
    """Adresse bloquée après trop d'échecs; ne révèle pas le nombre d'essais restants."""

    code = "too_many_attempts"

    def __init__(self, retry_after: int) -> None:
        super().__init__()
        self.retry_after = retry_after


class AuthorizationError(DomainError):
    code = "unauthorized"


class MissingTokenError(AuthorizationError):
    code = "missing_token"


class InvalidTokenError(AuthorizationError):
    code = "invalid_token"


class TokenExpiredError(InvalidTokenError):
    code = "token_expired"


class InsufficientRoleError(AuthorizationError):
    code = "insufficient_role"


class CsrfError(AuthorizationError):
    code = "invalid_csrf_token"


class UnknownCategoryError(DomainError):
    code = "unknown_category"


class PersistenceError(DomainError):
    code = "persistence_error"


class ConflictError(DomainError):
    code = "content_conflict"


class UploadTooLargeError(ValidationError):
    code = "file_too_large"


class PublishError(DomainError):
    """Échec d'une étape de publication, avec la sortie capturée."""

    code = "publish_failed"

    def __init__(self, step: str, output: str = "") -> None:
        super().__init__(f"publish step '{step}' failed")
        self.step = step
        self.output = output

"""
Tests pour la conversion des erreurs du domaine en enveloppes HTTP.
"""

import pytest

from backend.apigw.errors import ErrorCodes, from_domain_error
from backend.domain import errors as domain


@pytest.mark.parametrize(
    ("exc", "status", "code"),
    [
        (domain.ValidationError("password_required"), 400, ErrorCodes.BAD_REQUEST),
        (domain.AuthenticationError(), 401, ErrorCodes.UNAUTHORIZED),
        (domain.MissingTokenError(), 401, ErrorCodes.UNAUTHORIZED),
        (domain.InvalidTokenError(), 403, ErrorCodes.FORBIDDEN),
        (domain.TokenExpiredError(), 403, ErrorCodes.FORBIDDEN),
        (domain.CsrfError(), 403, ErrorCodes.FORBIDDEN),
        (domain.UnknownCategoryError("unknown_category:x"), 404, ErrorCodes.NOT_FOUND),
        (domain.ConflictError(), 409, ErrorCodes.CONFLICT),
        (domain.UploadTooLargeError(), 413, ErrorCodes.PAYLOAD_TOO_LARGE),
        (domain.PersistenceError("Erreur lors de la sauvegarde"), 500, ErrorCodes.INTERNAL_ERROR),
    ],
)
def test_status_mapping(exc: domain.DomainError, status: int, code: str) -> None:
    err = from_domain_error(exc)
    assert err.status_code == status
    assert err.code == code


def test_lockout_carries_retry_after() -> None:
    err = from_domain_error(domain.LockedOutError(retry_after=1200))
    assert err.status_code == 429
    assert err.headers == {"Retry-After": "1200"}
    assert err.message == "too_many_attempts"


def test_missing_token_challenges_bearer() -> None:
    err = from_domain_error(domain.MissingTokenError())
    assert err.headers == {"WWW-Authenticate": "Bearer"}

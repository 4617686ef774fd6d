"""
Routes de contenu du portfolio.

Lecture publique `GET /api/{category}` et remplacement complet protégé
`PUT /api/admin/{category}` pour les six catégories. Un document absent est
renvoyé comme `null`. L'en-tête `ETag` permet une écriture conditionnelle via
`If-Match`; sans lui, la dernière écriture gagne.
"""

from typing import Any

from fastapi import APIRouter, Body, Header, Request
from fastapi.responses import JSONResponse

from backend.api.deps import admin_session_dep, get_container
from backend.api.schemas import SaveResponse
from backend.apigw.errors import from_domain_error
from backend.app.metrics import CONTENT_WRITES
from backend.domain.content import SAVED_MESSAGES, parse_category
from backend.domain.errors import DomainError

public_router = APIRouter(prefix="/api", tags=["content"])
admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


@public_router.get("/{category}")
def read_content(category: str, request: Request):
    """Retourne le document JSON d'une catégorie (ou `null`)."""
    repo = get_container(request).content_repo
    try:
        cat = parse_category(category)
    except DomainError as err:
        raise from_domain_error(err) from err
    document = repo.read(cat)
    etag = repo.etag(cat) if document is not None else None
    return JSONResponse(content=document, headers={"ETag": etag} if etag else None)


@admin_router.put("/{category}", response_model=SaveResponse, dependencies=[admin_session_dep])
def write_content(
    category: str,
    request: Request,
    document: Any = Body(...),
    if_match: str | None = Header(None),
):
    """Remplace entièrement le document d'une catégorie."""
    repo = get_container(request).content_repo
    try:
        cat = parse_category(category)
    except DomainError as err:
        raise from_domain_error(err) from err
    try:
        etag = repo.write(cat, document, expected_etag=if_match)
    except DomainError as err:
        CONTENT_WRITES.labels(category=cat.value, result=err.code).inc()
        raise from_domain_error(err) from err
    CONTENT_WRITES.labels(category=cat.value, result="ok").inc()
    return JSONResponse(
        content=SaveResponse(success=True, message=SAVED_MESSAGES[cat]).model_dump(),
        headers={"ETag": etag},
    )

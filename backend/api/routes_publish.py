"""
Route de publication du contenu vers le site statique (copie + git push).
"""

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from backend.api.deps import admin_session_dep, get_container
from backend.api.schemas import PublishPayload, PublishResponse
from backend.core.http_constants import HTTP_INTERNAL_SERVER_ERROR
from backend.domain.errors import PublishError

router = APIRouter(prefix="/api", tags=["publish"])
log = structlog.get_logger(__name__)


@router.post("/publish", response_model=PublishResponse, dependencies=[admin_session_dep])
def publish(request: Request, payload: PublishPayload | None = None):
    """Exporte les données vers le site et pousse le commit.

    Un dépôt sans modification répond en succès ("nothing to commit"). Toute
    autre erreur répond 500 avec la sortie capturée dans `error`.
    """
    publisher = get_container(request).publisher
    try:
        result = publisher.publish(payload.message if payload else None)
    except PublishError as err:
        return JSONResponse(
            status_code=HTTP_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Erreur lors de la publication",
                "step": err.step,
                "error": err.output,
            },
        )
    return PublishResponse(success=result.success, message=result.message)

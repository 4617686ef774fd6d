"""
Route d'upload de fichiers (PDF, images) pour le panel d'administration.

Le fichier est stocké sous le répertoire d'uploads et servi sous `/uploads`;
l'URL retournée est ensuite référencée dans un document de contenu.
"""

from fastapi import APIRouter, File, Request, UploadFile

from backend.api.deps import admin_session_dep, get_container
from backend.api.schemas import UploadResponse
from backend.apigw.errors import from_domain_error
from backend.domain.errors import DomainError, ValidationError

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/upload", response_model=UploadResponse, dependencies=[admin_session_dep])
def upload(request: Request, file: UploadFile | None = File(None)):
    """Stocke un fichier unique et retourne son URL publique."""
    uploads = get_container(request).uploads
    try:
        if file is None or not file.filename:
            raise ValidationError("no_file")
        stored = uploads.save(file.filename, file.file)
    except DomainError as err:
        raise from_domain_error(err) from err
    return UploadResponse(
        url=stored.url,
        filename=stored.filename,
        original_name=stored.original_name,
        size=stored.size,
    )

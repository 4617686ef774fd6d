"""
Endpoint de santé pour vérifier la disponibilité de l'API et du stockage.
"""

from fastapi import APIRouter, Request

from backend.api.deps import get_container

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    """Vérifie la disponibilité de l'API et l'accès au répertoire de données."""
    container = get_container(request)
    return {
        "status": "ok",
        "data_dir": container.content_repo.data_dir.is_dir(),
        "auth_configured": bool(container.settings.ADMIN_PASSWORD_HASH),
    }

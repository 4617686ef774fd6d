# Schémas Pydantic exposés par l'API (requêtes et réponses).

from pydantic import BaseModel, ConfigDict, Field

from backend.domain.auth import Role


class LoginPayload(BaseModel):
    """Payload de connexion; le mot de passe manquant est signalé en 400 par la route."""

    password: str | None = None


class LoginResponse(BaseModel):
    """Réponse de connexion.

    Champs:
    - token: jeton de session (JWT)
    - expiresIn: durée de validité en secondes
    - role: rôle accordé (admin/viewer)
    - csrfToken: à renvoyer dans `X-CSRF-Token` sur les requêtes d'écriture
    """

    model_config = ConfigDict(populate_by_name=True)

    token: str
    expires_in: int = Field(alias="expiresIn")
    role: Role
    csrf_token: str = Field(alias="csrfToken")


class SessionUser(BaseModel):
    role: Role
    iat: int
    exp: int


class VerifyResponse(BaseModel):
    valid: bool
    user: SessionUser


class SaveResponse(BaseModel):
    success: bool
    message: str


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    url: str
    filename: str
    original_name: str = Field(alias="originalName")
    size: int


class PublishPayload(BaseModel):
    message: str | None = None


class PublishResponse(BaseModel):
    success: bool
    message: str

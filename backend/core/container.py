"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, dépôt de contenu, garde
brute-force, émetteur/validateur de session, uploads, publication) et expose le
singleton `default_container()`. Les tests construisent leur propre `Container` à partir
de settings dédiés et le passent à `create_app`.
"""

from __future__ import annotations

import functools

from backend.core.settings import Settings, get_settings
from backend.domain.auth import SessionIssuer, SessionValidator
from backend.domain.brute_force import BruteForceGuard, FailureStore, InMemoryFailureStore
from backend.infra.content_repo import JSONContentRepository
from backend.infra.uploads import UploadStore
from backend.infra.vcs import GitClient, VersionControlClient
from backend.services.publish import PublishPipeline


class Container:
    def __init__(
        self,
        settings: Settings | None = None,
        failure_store: FailureStore | None = None,
        vcs: VersionControlClient | None = None,
    ):
        self.settings = settings or get_settings()
        s = self.settings
        self.content_repo = JSONContentRepository(s.DATA_DIR)
        self.failure_store = failure_store or InMemoryFailureStore()
        self.guard = BruteForceGuard(
            self.failure_store,
            max_attempts=s.LOGIN_MAX_ATTEMPTS,
            lockout_seconds=s.LOGIN_LOCKOUT_SECONDS,
        )
        self.issuer = SessionIssuer(
            secret=s.JWT_SECRET,
            alg=s.JWT_ALG,
            ttl_seconds=s.SESSION_TTL_SECONDS,
            admin_hash=s.ADMIN_PASSWORD_HASH,
            viewer_hash=s.VIEWER_PASSWORD_HASH,
        )
        self.validator = SessionValidator(secret=s.JWT_SECRET, alg=s.JWT_ALG)
        self.uploads = UploadStore(
            s.UPLOADS_DIR,
            max_bytes=s.UPLOAD_MAX_BYTES,
            transcode_images=s.UPLOAD_TRANSCODE_IMAGES,
            webp_quality=s.UPLOAD_WEBP_QUALITY,
        )
        self.vcs = vcs or GitClient(
            s.PUBLISH_REPO_DIR,
            remote=s.PUBLISH_GIT_REMOTE,
            branch=s.PUBLISH_GIT_BRANCH,
            timeout=s.PUBLISH_GIT_TIMEOUT,
        )
        self.publisher = PublishPipeline(self.content_repo, s.PUBLIC_DATA_DIR, self.vcs)


@functools.lru_cache(maxsize=1)
def default_container() -> Container:
    """Conteneur du processus, construit au premier usage depuis l'environnement."""
    return Container()

"""Dépôt de contenus basé sur fichiers JSON.

Un fichier par catégorie dans un répertoire de données. Les écritures remplacent
le document entier de façon atomique (fichier temporaire puis `os.replace`), de
sorte qu'un crash ne laisse jamais un fichier tronqué.
"""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
from pathlib import Path

import structlog

from backend.domain.content import Category, ContentDocument
from backend.domain.errors import ConflictError, PersistenceError, ValidationError

log = structlog.get_logger(__name__)


def serialize_document(document: ContentDocument) -> bytes:
    """Sérialise en JSON strict; `NaN` et `Infinity` sont refusés (`ValidationError`)."""
    try:
        text = json.dumps(document, indent=4, ensure_ascii=False, allow_nan=False)
    except ValueError as err:
        raise ValidationError("invalid_number") from err
    return text.encode("utf-8")


def compute_etag(raw: bytes) -> str:
    return '"' + hashlib.sha256(raw).hexdigest() + '"'


class JSONContentRepository:
    """Dépôt de documents JSON, un fichier par catégorie.

    Aucune validation de forme: un document mal formé est persisté tel quel.
    """

    def __init__(self, data_dir: str | Path):
        """Initialise le dépôt et garantit l'existence du répertoire.

        Paramètres:
        - data_dir: répertoire contenant les fichiers `<catégorie>.json`.
        """
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, category: Category) -> Path:
        return self.data_dir / category.filename

    def _read_raw(self, category: Category) -> bytes | None:
        try:
            return self.path_for(category).read_bytes()
        except FileNotFoundError:
            return None

    def read(self, category: Category) -> ContentDocument | None:
        """Retourne le document d'une catégorie, ou None s'il n'existe pas."""
        raw = self._read_raw(category)
        if raw is None:
            return None
        return json.loads(raw.decode("utf-8"))

    def etag(self, category: Category) -> str | None:
        raw = self._read_raw(category)
        return compute_etag(raw) if raw is not None else None

    def write(
        self,
        category: Category,
        document: ContentDocument,
        expected_etag: str | None = None,
    ) -> str:
        """Remplace le document entier et retourne le nouvel ETag.

        Si `expected_etag` est fourni et ne correspond pas à l'état courant,
        lève `ConflictError` sans rien écrire. Sinon, dernier écrit gagnant.
        """
        if expected_etag is not None and expected_etag != "*":
            current = self.etag(category)
            if current != expected_etag:
                raise ConflictError()
        raw = serialize_document(document)
        target = self.path_for(category)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{category.value}.", suffix=".tmp", dir=self.data_dir
            )
            with os.fdopen(fd, "wb") as f:
                f.write(raw)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, target)
            tmp_name = None
        except OSError as err:
            log.error(
                "content_write_failed",
                category=category.value,
                error=type(err).__name__,
            )
            raise PersistenceError("Erreur lors de la sauvegarde") from err
        finally:
            if tmp_name is not None:
                # nettoyage du temporaire après échec
                try:
                    os.unlink(tmp_name)
                except OSError:
                    log.warning("content_tmp_cleanup_failed", path=tmp_name)
        log.info("content_written", category=category.value, bytes=len(raw))
        return compute_etag(raw)

    def existing_files(self) -> list[tuple[Category, Path]]:
        """Liste les catégories ayant un document sur disque."""
        return [(c, self.path_for(c)) for c in Category if self.path_for(c).exists()]

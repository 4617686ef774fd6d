"""Stockage des fichiers uploadés (PDF, images).

Les fichiers sont écrits sous le répertoire d'uploads avec un nom unique et
servis sous `/uploads`. Les images raster peuvent être converties en WebP;
l'original est toujours écrit en premier et n'est jamais modifié.
"""

from __future__ import annotations

import random
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import structlog
from PIL import Image, UnidentifiedImageError

from backend.domain.errors import PersistenceError, UploadTooLargeError, ValidationError

log = structlog.get_logger(__name__)

PUBLIC_PREFIX = "/uploads"
RASTER_EXTENSIONS = {".png", ".jpg", ".jpeg"}
_CHUNK = 64 * 1024
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class StoredUpload:
    url: str
    filename: str
    original_name: str
    size: int


def safe_filename(name: str) -> str:
    """Réduit un nom de fichier client à un nom sûr (sans chemin)."""
    base = Path(name.replace("\\", "/")).name
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned or "file"


class UploadStore:
    def __init__(
        self,
        uploads_dir: str | Path,
        max_bytes: int = 5 * 1024 * 1024,
        transcode_images: bool = True,
        webp_quality: int = 82,
    ) -> None:
        self.uploads_dir = Path(uploads_dir)
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        self.max_bytes = int(max_bytes)
        self.transcode_images = transcode_images
        self.webp_quality = int(webp_quality)

    def _unique_name(self, original_name: str) -> str:
        suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        return f"{suffix}-{safe_filename(original_name)}"

    def save(self, original_name: str | None, stream: BinaryIO) -> StoredUpload:
        """Écrit le flux sur disque en respectant la taille maximale."""
        if not original_name:
            raise ValidationError("no_file")
        filename = self._unique_name(original_name)
        target = self.uploads_dir / filename
        written = 0
        try:
            with target.open("wb") as out:
                while chunk := stream.read(_CHUNK):
                    written += len(chunk)
                    if written > self.max_bytes:
                        raise UploadTooLargeError()
                    out.write(chunk)
        except UploadTooLargeError:
            target.unlink(missing_ok=True)
            log.warning("upload_rejected_too_large", limit=self.max_bytes)
            raise
        except OSError as err:
            target.unlink(missing_ok=True)
            log.error("upload_write_failed", error=type(err).__name__)
            raise PersistenceError("Erreur lors de l'upload") from err

        stored = StoredUpload(
            url=f"{PUBLIC_PREFIX}/{filename}",
            filename=filename,
            original_name=original_name,
            size=written,
        )
        if self.transcode_images and target.suffix.lower() in RASTER_EXTENSIONS:
            return self._transcode(target, stored)
        return stored

    def _transcode(self, source: Path, stored: StoredUpload) -> StoredUpload:
        """Convertit en WebP; en cas d'échec, l'original est servi."""
        webp = source.with_suffix(".webp")
        tmp = webp.with_name(webp.name + ".part")
        try:
            with Image.open(source) as img:
                if img.mode not in ("RGB", "RGBA"):
                    img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
                img.save(tmp, "WEBP", quality=self.webp_quality, method=6)
            tmp.replace(webp)
        except (
            OSError,
            UnidentifiedImageError,
            ValueError,
            SyntaxError,
            Image.DecompressionBombError,
        ) as err:
            tmp.unlink(missing_ok=True)
            log.warning("upload_transcode_failed", filename=stored.filename, error=str(err))
            return stored
        log.info("upload_transcoded", filename=webp.name)
        return StoredUpload(
            url=f"{PUBLIC_PREFIX}/{webp.name}",
            filename=webp.name,
            original_name=stored.original_name,
            size=webp.stat().st_size,
        )

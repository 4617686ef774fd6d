# ============================================================
# Module : backend/services/publish.py
# Objet  : Publication du contenu vers le site statique.
# Étapes : copie des JSON -> git add -> git commit -> git push.
#          "nothing to commit" est un succès; un commit non poussé
#          n'est pas annulé.
# ============================================================

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import structlog

from backend.app.metrics import PUBLISH_RUNS
from backend.domain.content import Category
from backend.domain.errors import PublishError
from backend.infra.content_repo import JSONContentRepository
from backend.infra.vcs import NothingToCommitError, VersionControlClient, VersionControlError

NOTHING_TO_COMMIT_MESSAGE = "Aucune modification à publier (nothing to commit)"
SUCCESS_MESSAGE = "Publication réussie ! Le site sera mis à jour dans quelques minutes."


def default_commit_message(now: datetime) -> str:
    return f"Mise à jour du contenu - {now.strftime('%d/%m/%Y %H:%M:%S')}"


@dataclass
class PublishResult:
    success: bool
    message: str
    committed: bool = False
    pushed: bool = False
    copied: list[str] = field(default_factory=list)


class PublishPipeline:
    """Copie le contenu courant vers le répertoire public puis commit/push."""

    def __init__(
        self,
        repo: JSONContentRepository,
        public_dir: str | Path,
        vcs: VersionControlClient,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.repo = repo
        self.public_dir = Path(public_dir)
        self.vcs = vcs
        self.now = now
        self._log = structlog.get_logger(__name__).bind(component="publish_pipeline")

    def copy_documents(self) -> list[str]:
        """Copie chaque document existant vers le répertoire public."""
        copied: list[str] = []
        try:
            self.public_dir.mkdir(parents=True, exist_ok=True)
            for category, path in self.repo.existing_files():
                shutil.copyfile(path, self.public_dir / category.filename)
                copied.append(category.value)
        except OSError as err:
            raise PublishError("copy", str(err)) from err
        missing = [c.value for c in Category if c.value not in copied]
        if missing:
            self._log.info("publish_skipped_missing", missing=missing)
        return copied

    def publish(self, message: str | None = None) -> PublishResult:
        commit_message = (message or "").strip() or default_commit_message(self.now())
        try:
            copied = self.copy_documents()
            self.vcs.add_all()
            try:
                self.vcs.commit(commit_message)
            except NothingToCommitError:
                self._log.info("publish_nothing_to_commit")
                PUBLISH_RUNS.labels(result="noop").inc()
                return PublishResult(
                    success=True, message=NOTHING_TO_COMMIT_MESSAGE, copied=copied
                )
            self.vcs.push()
        except VersionControlError as err:
            PUBLISH_RUNS.labels(result="error").inc()
            self._log.error("publish_failed", command=err.command)
            raise PublishError(err.command, err.output) from err
        except PublishError:
            PUBLISH_RUNS.labels(result="error").inc()
            self._log.error("publish_failed", command="copy")
            raise
        PUBLISH_RUNS.labels(result="success").inc()
        self._log.info("publish_done", copied=copied)
        return PublishResult(
            success=True,
            message=SUCCESS_MESSAGE,
            committed=True,
            pushed=True,
            copied=copied,
        )

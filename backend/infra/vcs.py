"""Client de gestion de versions utilisé par la publication.

`VersionControlClient` est l'interface abstraite (add / commit / push);
`GitClient` l'implémente en invoquant la CLI `git` dans le dépôt du site.
"""

from __future__ import annotations

import os
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

log = structlog.get_logger(__name__)

_NOTHING_TO_COMMIT_MARKERS = ("nothing to commit", "nothing added to commit")
# sortie de git non traduite, quelle que soit la locale du serveur
_GIT_ENV = {"LC_ALL": "C", "LANG": "C", "LANGUAGE": ""}


def _output(result: subprocess.CompletedProcess) -> str:
    return "\n".join(s for s in (result.stdout.strip(), result.stderr.strip()) if s)


class VersionControlError(Exception):
    """Échec d'une commande de gestion de versions, avec sa sortie capturée."""

    def __init__(self, command: str, output: str = "", returncode: int | None = None):
        super().__init__(f"{command} failed")
        self.command = command
        self.output = output
        self.returncode = returncode


class NothingToCommitError(VersionControlError):
    """Aucun changement à committer: à traiter comme un succès."""


class VersionControlClient(ABC):
    """Interface abstraite pour les opérations de publication."""

    @abstractmethod
    def add_all(self) -> None:
        """Indexe tous les changements de l'arbre de travail."""
        raise NotImplementedError

    @abstractmethod
    def commit(self, message: str) -> str:
        """Crée un commit; lève `NothingToCommitError` s'il n'y a rien à committer."""
        raise NotImplementedError

    @abstractmethod
    def push(self) -> str:
        """Pousse la branche courante vers le remote configuré."""
        raise NotImplementedError


class GitClient(VersionControlClient):
    """Implémentation `git` via `subprocess.run`.

    Paramètres:
    - repo_dir: racine de l'arbre de travail.
    - remote / branch: cible du push (branche courante si `branch` est None).
    - timeout: secondes par commande; None ou 0 = pas de limite.
    """

    def __init__(
        self,
        repo_dir: str | Path,
        remote: str = "origin",
        branch: str | None = None,
        timeout: float | None = 60.0,
        executable: str = "git",
    ) -> None:
        self.repo_dir = Path(repo_dir)
        self.remote = remote
        self.branch = branch
        self.timeout = timeout or None
        self.executable = executable

    def _exec(self, *args: str) -> subprocess.CompletedProcess:
        command = " ".join(("git", *args))
        try:
            return subprocess.run(
                [self.executable, *args],
                cwd=self.repo_dir,
                env={**os.environ, **_GIT_ENV},
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as err:
            log.error("git_timeout", command=command, timeout=self.timeout)
            raise VersionControlError(command, f"timeout after {self.timeout}s") from err
        except OSError as err:
            log.error("git_unavailable", command=command, error=str(err))
            raise VersionControlError(command, str(err)) from err

    def _run(self, *args: str) -> str:
        command = " ".join(("git", *args))
        result = self._exec(*args)
        output = _output(result)
        if result.returncode != 0:
            if any(m in output for m in _NOTHING_TO_COMMIT_MARKERS):
                raise NothingToCommitError(command, output, result.returncode)
            log.error("git_failed", command=command, returncode=result.returncode)
            raise VersionControlError(command, output, result.returncode)
        log.debug("git_ok", command=command)
        return output

    def has_staged_changes(self) -> bool:
        """`git diff --cached --quiet`: 0 = index identique à HEAD, 1 = changements."""
        result = self._exec("diff", "--cached", "--quiet")
        if result.returncode in (0, 1):
            return result.returncode == 1
        command = "git diff --cached --quiet"
        log.error("git_failed", command=command, returncode=result.returncode)
        raise VersionControlError(command, _output(result), result.returncode)

    def add_all(self) -> None:
        self._run("add", "-A")

    def commit(self, message: str) -> str:
        if not self.has_staged_changes():
            raise NothingToCommitError("git commit", "nothing to commit", 0)
        return self._run("commit", "-m", message)

    def push(self) -> str:
        if self.branch:
            return self._run("push", self.remote, f"HEAD:{self.branch}")
        return self._run("push", self.remote, "HEAD")

"""
Protection contre le brute-force du login.

Compte les échecs par adresse cliente et bloque l'adresse pendant une fenêtre
donnée une fois le seuil atteint. Le store et l'horloge sont injectés: le store
en mémoire est perdu au redémarrage, un backend persistant peut le remplacer.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol


@dataclass
class FailureRecord:
    count: int
    last_attempt: float


class FailureStore(Protocol):
    """Stockage des échecs par adresse."""

    def get(self, address: str) -> FailureRecord | None: ...

    def increment(self, address: str, now: float, window: float) -> FailureRecord:
        """Ajoute un échec de façon atomique; un enregistrement expiré repart de zéro."""
        ...

    def delete(self, address: str) -> None: ...


class InMemoryFailureStore:
    """Store process-local, protégé par un verrou.

    Les enregistrements expirés sont purgés à chaque nouvelle adresse, la taille
    reste donc bornée par le nombre d'adresses actives sur une fenêtre.
    """

    def __init__(self) -> None:
        self._records: dict[str, FailureRecord] = {}
        self._lock = threading.Lock()

    def get(self, address: str) -> FailureRecord | None:
        with self._lock:
            rec = self._records.get(address)
            return FailureRecord(rec.count, rec.last_attempt) if rec else None

    def increment(self, address: str, now: float, window: float) -> FailureRecord:
        with self._lock:
            rec = self._records.get(address)
            if rec is None:
                self._prune(now, window)
            if rec is None or now - rec.last_attempt >= window:
                count = 1
            else:
                count = rec.count + 1
            self._records[address] = FailureRecord(count, now)
            return FailureRecord(count, now)

    def _prune(self, now: float, window: float) -> None:
        expired = [a for a, r in self._records.items() if now - r.last_attempt >= window]
        for address in expired:
            del self._records[address]

    def delete(self, address: str) -> None:
        with self._lock:
            self._records.pop(address, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class BruteForceGuard:
    """Compteur d'échecs avec fenêtre de blocage."""

    def __init__(
        self,
        store: FailureStore,
        max_attempts: int = 10,
        lockout_seconds: float = 30 * 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.max_attempts = max(1, int(max_attempts))
        self.lockout_seconds = float(lockout_seconds)
        self.clock = clock

    def _expired(self, record: FailureRecord, now: float) -> bool:
        return now - record.last_attempt >= self.lockout_seconds

    def is_locked(self, address: str) -> bool:
        record = self.store.get(address)
        if record is None:
            return False
        now = self.clock()
        if self._expired(record, now):
            self.store.delete(address)
            return False
        return record.count >= self.max_attempts

    def retry_after(self, address: str) -> int:
        """Secondes restantes avant la fin du blocage (0 si non bloqué)."""
        record = self.store.get(address)
        if record is None:
            return 0
        remaining = self.lockout_seconds - (self.clock() - record.last_attempt)
        return max(0, int(remaining + 0.999))

    def record_failure(self, address: str) -> FailureRecord:
        return self.store.increment(address, self.clock(), self.lockout_seconds)

    def clear(self, address: str) -> None:
        self.store.delete(address)

    def failures(self, address: str) -> int:
        record = self.store.get(address)
        return record.count if record else 0

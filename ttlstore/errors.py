from __future__ import annotations

from pathlib import Path


class StoreError(Exception):
    """Base class for errors raised by ttlstore."""


class PersistenceError(StoreError):
    """A mirror file could not be written or removed.

    The in-memory map has already been updated when this is raised, so memory
    and disk disagree for ``key`` until the caller corrects it.
    """

    def __init__(self, message: str, *, key: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.key = key
        self.path = path


class PersistenceWriteError(PersistenceError):
    pass


class PersistenceDeleteError(PersistenceError):
    pass


class SweepPersistenceError(PersistenceError):
    """Mirror removal failed inside a background sweep. Reported, never raised."""


class CorruptRecoveryRecord(StoreError):
    def __init__(self, message: str, *, path: Path) -> None:
        super().__init__(message)
        self.path = path

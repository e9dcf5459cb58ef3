from __future__ import annotations

from ttlstore.clock import NEVER, compute_deadline, is_expired, now_ms
from ttlstore.config import StoreSettings, load_settings
from ttlstore.errors import (
    CorruptRecoveryRecord,
    PersistenceDeleteError,
    PersistenceError,
    PersistenceWriteError,
    StoreError,
    SweepPersistenceError,
)
from ttlstore.persistence import DirectoryPersistence, NullPersistence, Persistence
from ttlstore.schemas import Entry
from ttlstore.store import KeyValueStore
from ttlstore.sweeper import Sweeper

__all__ = [
    "__version__",
    # Store
    "KeyValueStore",
    "Entry",
    "Sweeper",
    # Clock
    "NEVER",
    "compute_deadline",
    "is_expired",
    "now_ms",
    # Persistence
    "Persistence",
    "DirectoryPersistence",
    "NullPersistence",
    # Errors
    "StoreError",
    "PersistenceError",
    "PersistenceWriteError",
    "PersistenceDeleteError",
    "SweepPersistenceError",
    "CorruptRecoveryRecord",
    # Config
    "StoreSettings",
    "load_settings",
]

__version__ = "0.1.0"

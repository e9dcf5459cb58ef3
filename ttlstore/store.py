from __future__ import annotations

import logging
import weakref
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ttlstore.clock import compute_deadline, is_expired, now_ms, remaining_ttl
from ttlstore.errors import PersistenceDeleteError, SweepPersistenceError
from ttlstore.persistence import DirectoryPersistence, NullPersistence, Persistence
from ttlstore.rwlock import ReadWriteLock
from ttlstore.schemas import Entry
from ttlstore.sweeper import Sweeper

if TYPE_CHECKING:
    from ttlstore.config import StoreSettings

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Thread-safe key-value store with per-key TTLs in milliseconds.

    With ``storage_dir`` set, every entry is mirrored to its own file in that
    directory (write-through) and the directory is replayed on construction.
    A background sweeper evicts expired entries every ``clean_interval``
    seconds; reads check expiry themselves so they never depend on it.
    """

    def __init__(
        self,
        *,
        clean_interval: float,
        storage_dir: str | Path | None = None,
        now: Callable[[], int] | None = None,
        strict_recovery: bool = False,
        start_sweeper: bool = True,
    ) -> None:
        self._now = now or now_ms
        self._data: dict[str, Entry] = {}
        self._lock = ReadWriteLock()
        self._sweeper = Sweeper(self.sweep, interval=clean_interval)
        self._persistence: Persistence = (
            DirectoryPersistence(Path(storage_dir)) if storage_dir else NullPersistence()
        )
        self._closed = False
        self.sweep_errors = 0
        self.last_sweep_error: SweepPersistenceError | None = None

        self._replay(strict=strict_recovery)
        if start_sweeper:
            self._sweeper.start()
            weakref.finalize(self, self._sweeper.stop)

    @classmethod
    def from_settings(
        cls, settings: StoreSettings, *, now: Callable[[], int] | None = None
    ) -> KeyValueStore:
        return cls(
            clean_interval=settings.clean_interval,
            storage_dir=settings.storage_dir,
            now=now,
            strict_recovery=settings.strict_recovery,
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(keys={len(self._data)}, "
            f"clean_interval={self._sweeper.interval!r}, persistent={self.persistent})"
        )

    @property
    def persistent(self) -> bool:
        return isinstance(self._persistence, DirectoryPersistence)

    @property
    def storage_dir(self) -> Path | None:
        if isinstance(self._persistence, DirectoryPersistence):
            return self._persistence.directory
        return None

    def set(self, key: str, value: Any, ttl: int) -> None:
        """Store ``value`` under ``key`` for ``ttl`` ms (0 = never expires).

        The in-memory value is replaced even when the mirror write fails; the
        resulting PersistenceWriteError tells the caller memory and disk differ.
        """
        entry = Entry(key=key, value=value, expires_at=compute_deadline(ttl, now=self._now()))
        self._put(entry, mirror=True)

    def get(self, key: str) -> tuple[Any, bool]:
        with self._lock.read():
            entry = self._data.get(key)
            if entry is None or is_expired(entry, self._now()):
                return None, False
            return entry.value, True

    def delete(self, key: str) -> None:
        with self._lock.write():
            self._data.pop(key, None)
            self._persistence.remove_mirror(key)

    def length(self) -> int:
        with self._lock.read():
            now = self._now()
            return sum(1 for entry in self._data.values() if not is_expired(entry, now))

    def __len__(self) -> int:
        return self.length()

    def sweep(self) -> int:
        """Evict every expired entry and its mirror file. Returns the eviction count."""
        evicted = 0
        with self._lock.write():
            now = self._now()
            expired = [key for key, entry in self._data.items() if is_expired(entry, now)]
            for key in expired:
                del self._data[key]
                evicted += 1
                try:
                    self._persistence.remove_mirror(key)
                except PersistenceDeleteError as exc:
                    err = SweepPersistenceError(str(exc), key=key, path=exc.path)
                    err.__cause__ = exc
                    self.sweep_errors += 1
                    self.last_sweep_error = err
                    logger.error("failed to remove mirror of expired key %r", key, exc_info=err)
        return evicted

    def close(self, timeout: float | None = None) -> None:
        if self._closed:
            return
        self._closed = True
        self._sweeper.stop(timeout)

    def __enter__(self) -> KeyValueStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _put(self, entry: Entry, *, mirror: bool) -> None:
        with self._lock.write():
            self._data[entry.key] = entry
            if mirror:
                self._persistence.write_mirror(entry)

    def _replay(self, *, strict: bool) -> None:
        recovered = 0
        for entry in self._persistence.load_all(strict=strict):
            # The persisted deadline is reused as is, so replay never extends it.
            # Already-due records skip the rewrite; reads miss them and the next
            # sweep removes the mirror.
            due = remaining_ttl(entry.expires_at, now=self._now()) is None
            self._put(entry, mirror=not due)
            recovered += 1
        if recovered:
            logger.info("recovered %d entries from %s", recovered, self.storage_dir)

from __future__ import annotations

import hashlib
import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic_core import PydanticSerializationError

from ttlstore.errors import CorruptRecoveryRecord, PersistenceDeleteError, PersistenceWriteError
from ttlstore.jsonutil import stable_json_bytes
from ttlstore.schemas import Entry

logger = logging.getLogger(__name__)

MIRROR_SUFFIX = ".store.json"
TMP_SUFFIX = ".tmp"
DIR_MODE = 0o700
FILE_MODE = 0o600


@runtime_checkable
class Persistence(Protocol):
    """Structural interface shared by all persistence backends."""

    def write_mirror(self, entry: Entry) -> None: ...

    def remove_mirror(self, key: str) -> None: ...

    def load_all(self, *, strict: bool = ...) -> Iterator[Entry]: ...


def _sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def mirror_filename(key: str) -> str:
    return _sha256_hex(key) + MIRROR_SUFFIX


def encode_entry(entry: Entry) -> bytes:
    return stable_json_bytes(entry.model_dump(mode="json"))


def decode_entry(data: bytes | str) -> Entry:
    return Entry.model_validate_json(data)


class NullPersistence:
    """Drop-in replacement for DirectoryPersistence that stores nothing.

    Used when the store has no storage directory; every operation is a no-op.
    """

    def write_mirror(self, entry: Entry) -> None:
        return None

    def remove_mirror(self, key: str) -> None:
        return None

    def load_all(self, *, strict: bool = False) -> Iterator[Entry]:
        return iter(())


def _make_dirs_owner_only(directory: Path) -> None:
    # Path.mkdir(parents=True) ignores `mode` for the parents it creates.
    missing: list[Path] = []
    cur = directory
    while not cur.exists():
        missing.append(cur)
        if cur.parent == cur:
            break
        cur = cur.parent
    for d in reversed(missing):
        d.mkdir(mode=DIR_MODE, exist_ok=True)


def _discard(path: Path, reason: str) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("could not remove %s %s: %s", reason, path, exc)
        return
    logger.info("removed %s %s", reason, path)


class DirectoryPersistence:
    def __init__(self, directory: Path) -> None:
        self._dir = Path(directory).expanduser()
        _make_dirs_owner_only(self._dir)

    @property
    def directory(self) -> Path:
        return self._dir

    def path_for(self, key: str) -> Path:
        return self._dir / mirror_filename(key)

    def write_mirror(self, entry: Entry) -> None:
        path = self.path_for(entry.key)
        try:
            data = encode_entry(entry)
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            raise PersistenceWriteError(
                f"value for {entry.key!r} is not JSON serializable: {exc}", key=entry.key, path=path
            ) from exc

        tmp = path.with_name(path.name + TMP_SUFFIX)
        try:
            fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            tmp.replace(path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise PersistenceWriteError(
                f"could not write mirror for {entry.key!r}: {exc}", key=entry.key, path=path
            ) from exc

    def remove_mirror(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise PersistenceDeleteError(
                f"could not remove mirror for {key!r}: {exc}", key=key, path=path
            ) from exc

    def iter_mirror_paths(self) -> Iterator[Path]:
        for path in sorted(self._dir.iterdir()):
            if path.name.endswith(MIRROR_SUFFIX) and path.is_file():
                yield path

    def remove_partial_writes(self) -> None:
        for path in sorted(self._dir.glob("*" + MIRROR_SUFFIX + TMP_SUFFIX)):
            _discard(path, "partial mirror write")

    def load_all(self, *, strict: bool = False) -> Iterator[Entry]:
        """Decode every mirror file, cleaning up leftovers from earlier runs.

        Partial writes are deleted. A record stored under a name other than
        its key's hash is renamed into place, or dropped when the correctly
        named file already exists, since that one holds the newer write.
        """
        self.remove_partial_writes()
        for path in list(self.iter_mirror_paths()):
            try:
                entry = decode_entry(path.read_bytes())
            except (OSError, ValueError) as exc:
                if strict:
                    raise CorruptRecoveryRecord(
                        f"cannot decode mirror file {path.name}: {exc}", path=path
                    ) from exc
                logger.warning("skipping corrupt mirror file %s: %s", path, exc)
                continue
            expected = self.path_for(entry.key)
            if path != expected:
                if expected.exists():
                    _discard(path, f"stray mirror of {entry.key!r}")
                    continue
                try:
                    path.replace(expected)
                except OSError as exc:
                    logger.warning("could not rename stray mirror %s: %s", path, exc)
            yield entry

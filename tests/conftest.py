from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

import pytest


def pytest_configure() -> None:
    project_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(project_root))


@dataclass
class FakeClock:
    t: int = 1_700_000_000_000

    def now(self) -> int:
        return self.t

    def advance(self, ms: int) -> None:
        self.t += ms


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def now(clock: FakeClock) -> Callable[[], int]:
    return clock.now


@pytest.fixture()
def storage_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache" / "store"


@pytest.fixture()
def make_store(now: Callable[[], int]) -> Iterator[Callable[..., object]]:
    """Builds stores on the fake clock with the sweeper off, closing them afterwards."""
    from ttlstore.store import KeyValueStore

    created: list[KeyValueStore] = []

    def _make(**kw: object) -> KeyValueStore:
        kw.setdefault("clean_interval", 60.0)
        kw.setdefault("now", now)
        kw.setdefault("start_sweeper", False)
        store = KeyValueStore(**kw)  # type: ignore[arg-type]
        created.append(store)
        return store

    yield _make
    for store in created:
        store.close()


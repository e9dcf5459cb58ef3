from __future__ import annotations

from pathlib import Path

import pytest

from ttlstore import config
from ttlstore.config import DEFAULT_CLEAN_INTERVAL, StoreSettings, load_settings
from ttlstore.store import KeyValueStore

_VARS = ("TTLSTORE_CLEAN_INTERVAL", "TTLSTORE_STORAGE_DIR", "TTLSTORE_STRICT_RECOVERY")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # setenv first so undo restores the caller's original value, even after
    # load_dotenv has written one.
    for name in _VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setattr(config, "repo_root", lambda: tmp_path)
    monkeypatch.chdir(tmp_path)


def test_defaults() -> None:
    s = load_settings()
    assert s == StoreSettings()
    assert s.clean_interval == DEFAULT_CLEAN_INTERVAL
    assert s.storage_dir is None
    assert s.strict_recovery is False


def test_reads_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TTLSTORE_CLEAN_INTERVAL", "0.25")
    monkeypatch.setenv("TTLSTORE_STORAGE_DIR", str(tmp_path / "kv"))
    monkeypatch.setenv("TTLSTORE_STRICT_RECOVERY", "yes")
    s = load_settings()
    assert s.clean_interval == 0.25
    assert s.storage_dir == tmp_path / "kv"
    assert s.strict_recovery is True


def test_blank_storage_dir_disables_persistence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TTLSTORE_STORAGE_DIR", "   ")
    assert load_settings().storage_dir is None


@pytest.mark.parametrize("raw", ["abc", "0", "-1"])
def test_bad_interval_rejected(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("TTLSTORE_CLEAN_INTERVAL", raw)
    with pytest.raises(ValueError, match="TTLSTORE_CLEAN_INTERVAL"):
        load_settings()


def test_env_file_is_loaded(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("TTLSTORE_CLEAN_INTERVAL=2.5\n", encoding="utf-8")
    assert load_settings().clean_interval == 2.5


def test_store_from_settings(tmp_path: Path, now) -> None:
    settings = StoreSettings(clean_interval=30.0, storage_dir=tmp_path / "kv")
    with KeyValueStore.from_settings(settings, now=now) as store:
        assert store.persistent
        store.set("k", "v", 0)
        assert store.get("k") == ("v", True)
    assert (tmp_path / "kv").is_dir()

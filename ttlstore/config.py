from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DEFAULT_CLEAN_INTERVAL = 1.0


def repo_root() -> Path:
    # Project root is the directory that contains the `ttlstore/` package.
    return Path(__file__).resolve().parents[1]


def load_env() -> None:
    # Prefer a project-local `.env`; fall back to searching from CWD.
    root_env = repo_root() / ".env"
    env_path = str(root_env) if root_env.exists() else (find_dotenv(usecwd=True) or str(root_env))
    load_dotenv(env_path)


@dataclass(frozen=True)
class StoreSettings:
    clean_interval: float = DEFAULT_CLEAN_INTERVAL
    storage_dir: Path | None = None
    strict_recovery: bool = False


def _env_flag(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in ("1", "true", "yes")


def _env_interval(name: str) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return DEFAULT_CLEAN_INTERVAL
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from exc
    if not value > 0:
        raise ValueError(f"{name} must be > 0")
    return value


def load_settings() -> StoreSettings:
    load_env()
    raw_dir = (os.getenv("TTLSTORE_STORAGE_DIR") or "").strip()
    return StoreSettings(
        clean_interval=_env_interval("TTLSTORE_CLEAN_INTERVAL"),
        storage_dir=Path(raw_dir).expanduser() if raw_dir else None,
        strict_recovery=_env_flag("TTLSTORE_STRICT_RECOVERY"),
    )

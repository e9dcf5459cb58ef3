from __future__ import annotations

import time
from typing import Protocol

# Largest signed 64-bit integer; an entry with this deadline never expires.
NEVER = 2**63 - 1


class HasDeadline(Protocol):
    @property
    def expires_at(self) -> int: ...


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def compute_deadline(ttl_ms: int, *, now: int) -> int:
    """Absolute deadline for a relative TTL. A TTL of zero never expires."""
    if ttl_ms < 0:
        raise ValueError("ttl must be >= 0 milliseconds")
    if ttl_ms == 0:
        return NEVER
    return min(now + int(ttl_ms), NEVER)


def is_expired(entry: HasDeadline, now: int) -> bool:
    # Strict: an entry is still valid at exactly its deadline.
    return now > entry.expires_at


def remaining_ttl(expires_at: int, *, now: int) -> int | None:
    """TTL that reproduces a persisted deadline, or None if it is already due."""
    if expires_at >= NEVER:
        return 0
    if expires_at <= now:
        return None
    return expires_at - now

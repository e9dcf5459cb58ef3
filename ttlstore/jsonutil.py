from __future__ import annotations

import json
from typing import Any


def stable_json_dumps(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def stable_json_bytes(obj: Any) -> bytes:
    return (stable_json_dumps(obj) + "\n").encode("utf-8")

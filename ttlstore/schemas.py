from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ttlstore.clock import NEVER


class Entry(BaseModel):
    """One stored value plus its absolute deadline (ms since the epoch)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str
    value: Any = None
    # Back-compat: accept mirror files that spell the deadline "deleteTimestamp".
    expires_at: int = Field(
        default=NEVER,
        validation_alias=AliasChoices("expires_at", "deleteTimestamp"),
        ge=0,
        le=NEVER,
    )

    @field_validator("expires_at", mode="before")
    @classmethod
    def _reject_bool_deadline(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("expires_at must be an integer")
        return v

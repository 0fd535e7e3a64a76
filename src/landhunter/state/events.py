"""Change notifications emitted by the state store."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ChangeKind(StrEnum):
    REPLACED = "replaced"
    MERGED = "merged"
    ERROR = "error"


class StateChange(BaseModel):
    """Describes one applied mutation. Rejected mutations emit nothing."""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    generation: int
    tile_id: int | None = Field(default=None, description="Merged land, for MERGED changes")
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

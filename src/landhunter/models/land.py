"""Land listing entries and the normalized land record."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from landhunter.ingestion.normalize import non_negative_or_zero, safe_float, safe_int, safe_str
from landhunter.models._base import LandBaseModel

# Positional layout of one ``/raw/land`` tuple.
LISTING_FIELDS: tuple[str, ...] = (
    "tile_id",
    "map_id",
    "faction_id",
    "guarded_at",
    "bricks_per_day",
    "defense",
    "country",
)


class ListingEntry(LandBaseModel):
    """One entry of the bulk land listing.

    The API sends positional tuples::

        [tileId, mapId, factionId, guardedAt | null, bricksPerDay, defense?, country?]

    Short tuples leave the trailing fields unset, and values of the wrong
    type degrade to ``None``. Only ``tile_id`` is mandatory.
    """

    tile_id: int
    map_id: int | None = None
    faction_id: int | None = None
    guarded_at: str | None = None
    bricks_per_day: float = 0.0
    defense: float | None = None
    country: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_positional(cls, values: Any) -> Any:
        if isinstance(values, dict) or isinstance(values, (str, bytes)):
            return values
        if not isinstance(values, Sequence):
            return values
        named = {name: value for name, value in zip(LISTING_FIELDS, values, strict=False) if value is not None}
        named["raw"] = {"tuple": list(values)}
        return named

    @field_validator("tile_id", mode="before")
    @classmethod
    def _coerce_tile_id(cls, value: Any) -> Any:
        parsed = safe_int(value)
        # Leave unusable ids as-is so validation rejects the entry.
        return parsed if parsed is not None else value

    @field_validator("map_id", "faction_id", mode="before")
    @classmethod
    def _coerce_ints(cls, value: Any) -> int | None:
        return safe_int(value)

    @field_validator("bricks_per_day", mode="before")
    @classmethod
    def _coerce_rate(cls, value: Any) -> float:
        return non_negative_or_zero(value)

    @field_validator("defense", mode="before")
    @classmethod
    def _coerce_defense(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("guarded_at", "country", mode="before")
    @classmethod
    def _coerce_strings(cls, value: Any) -> str | None:
        return safe_str(value)


class LandRecord(BaseModel):
    """Normalized state-store record for one land.

    Identity fields are fixed at ingestion. Only the fields listed in
    :attr:`MUTABLE_FIELDS` may change afterwards, and only through
    :meth:`landhunter.state.store.StateStore.merge_update`.
    """

    MUTABLE_FIELDS: ClassVar[frozenset[str]] = frozenset({"refined_reward", "defense"})

    model_config = ConfigDict(frozen=True, extra="forbid")

    tile_id: int
    map_id: int | None = None
    faction_id: int | None = None
    guard_started_at: str | None = None
    production_rate_per_day: float = Field(default=0.0, ge=0.0)
    provisional_reward: float = Field(default=0.0, ge=0.0)
    refined_reward: float | None = None
    defense: float | None = None
    country: str | None = None

    @property
    def is_refined(self) -> bool:
        return self.refined_reward is not None

    def display_reward(self, prefer_refined: bool = True) -> float:
        """Reward to show: refined when available and preferred, else provisional."""
        if prefer_refined and self.refined_reward is not None:
            return self.refined_reward
        return self.provisional_reward

"""Per-land detail response model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import field_validator, model_validator

from landhunter._constants import SUCCESS_MESSAGE
from landhunter.ingestion.normalize import non_negative_or_zero, safe_float, safe_int, safe_str
from landhunter.models._base import LandBaseModel
from landhunter.reward import parse_guard_timestamp


class DetailLand(LandBaseModel):
    tile_id: int | None = None
    map_id: int | None = None
    country_code: str | None = None

    @field_validator("tile_id", "map_id", mode="before")
    @classmethod
    def _coerce_ints(cls, value: Any) -> int | None:
        return safe_int(value)

    @field_validator("country_code", mode="before")
    @classmethod
    def _coerce_country(cls, value: Any) -> str | None:
        return safe_str(value)


class DetailGuard(LandBaseModel):
    """Guard sub-structure. ``guarded_at`` is ``None`` when nobody guards the land."""

    guarded_at: str | None = None
    bricks_per_day: float = 0.0

    @field_validator("guarded_at", mode="before")
    @classmethod
    def _coerce_guarded_at(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("bricks_per_day", mode="before")
    @classmethod
    def _coerce_rate(cls, value: Any) -> float:
        return non_negative_or_zero(value)


class DetailDefense(LandBaseModel):
    total: float | None = None

    @field_validator("total", mode="before")
    @classmethod
    def _coerce_total(cls, value: Any) -> float | None:
        return safe_float(value)


def _dict_or_none(value: Any) -> Any:
    return value if isinstance(value, dict) else None


class LandDetail(LandBaseModel):
    """Authoritative detail for a single land.

    The API wraps the payload as::

        {
          "info": {"message": "Success", "serverTime": "..."},
          "d": {
            "land": {"tileId": 456, "mapId": 5, "countryCode": "us"},
            "guard": {"guardedAt": "...", "bricksPerDay": 37.0},
            "defense": {"total": 12}
          }
        }

    ``info`` and ``d`` are flattened onto the model. Missing or malformed
    ``guard``/``defense`` sub-structures mean the land is not resolvable
    yet; they are not errors.
    """

    message: str | None = None
    server_time: str | None = None
    land: DetailLand | None = None
    guard: DetailGuard | None = None
    defense: DetailDefense | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_envelope(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        merged: dict[str, Any] = {}
        for key in ("info", "d"):
            nested = values.get(key)
            if isinstance(nested, dict):
                merged.update(nested)
        merged.update({k: v for k, v in values.items() if k not in ("info", "d")})
        merged.setdefault("raw", values)
        return merged

    @field_validator("land", "guard", "defense", mode="before")
    @classmethod
    def _degrade_nested(cls, value: Any) -> Any:
        return _dict_or_none(value)

    @field_validator("message", "server_time", mode="before")
    @classmethod
    def _coerce_strings(cls, value: Any) -> str | None:
        return safe_str(value)

    @property
    def is_success(self) -> bool:
        return self.message is None or self.message == SUCCESS_MESSAGE

    @property
    def defense_value(self) -> float | None:
        return self.defense.total if self.defense is not None else None

    @property
    def is_resolvable(self) -> bool:
        """Whether both guard/production data and a defense value are present."""
        return self.guard is not None and self.defense_value is not None

    @property
    def server_instant(self) -> datetime | None:
        if self.server_time is None:
            return None
        return parse_guard_timestamp(self.server_time)

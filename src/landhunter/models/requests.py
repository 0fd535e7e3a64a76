"""Request payload models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from landhunter.config import HunterConfig


class DetailRequest(BaseModel):
    """Body of a ``/land/get`` call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    tile_id: int
    app: str
    version: str

    @classmethod
    def for_tile(cls, config: HunterConfig, tile_id: int) -> DetailRequest:
        return cls(tile_id=tile_id, app=config.app_name, version=config.app_version)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

"""Read-only selections over the state store for display."""

from __future__ import annotations

from collections.abc import Mapping

from landhunter._constants import SUCCESS_MESSAGE
from landhunter.models.land import LandRecord


def select_lands(
    lands: Mapping[int, LandRecord],
    *,
    max_defense: float | None = None,
    limit: int | None = None,
    prefer_refined: bool = True,
) -> list[LandRecord]:
    """Return the display sequence: best reward first.

    Lands whose known defense is at or above *max_defense* are left out;
    lands with unknown defense are kept. Ties are broken by tile id so the
    order is stable across refreshes.
    """
    candidates = [
        land
        for land in lands.values()
        if max_defense is None or land.defense is None or land.defense < max_defense
    ]
    candidates.sort(key=lambda land: (-land.display_reward(prefer_refined), land.tile_id))
    if limit is not None:
        return candidates[:limit]
    return candidates


def visible_error(message: str | None) -> str | None:
    """Return *message* unless it is empty or the success token."""
    if not message or message == SUCCESS_MESSAGE:
        return None
    return message

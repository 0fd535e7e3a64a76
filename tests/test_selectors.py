from __future__ import annotations

from landhunter.models.land import LandRecord
from landhunter.state.selectors import select_lands, visible_error


def _lands(*records: LandRecord) -> dict[int, LandRecord]:
    return {record.tile_id: record for record in records}


def test_sorted_by_reward_descending_with_stable_ties() -> None:
    lands = _lands(
        LandRecord(tile_id=3, provisional_reward=1.0),
        LandRecord(tile_id=1, provisional_reward=5.0),
        LandRecord(tile_id=2, provisional_reward=1.0),
    )

    assert [land.tile_id for land in select_lands(lands)] == [1, 2, 3]


def test_refined_reward_reorders_when_preferred() -> None:
    lands = _lands(
        LandRecord(tile_id=1, provisional_reward=5.0, refined_reward=0.5),
        LandRecord(tile_id=2, provisional_reward=1.0),
    )

    assert [land.tile_id for land in select_lands(lands, prefer_refined=True)] == [2, 1]
    assert [land.tile_id for land in select_lands(lands, prefer_refined=False)] == [1, 2]


def test_defense_filter_keeps_unknown_defense() -> None:
    lands = _lands(
        LandRecord(tile_id=1, provisional_reward=1.0, defense=10.0),
        LandRecord(tile_id=2, provisional_reward=1.0, defense=9.5),
        LandRecord(tile_id=3, provisional_reward=1.0),
    )

    assert [land.tile_id for land in select_lands(lands, max_defense=10.0)] == [2, 3]
    assert len(select_lands(lands, max_defense=None)) == 3


def test_limit() -> None:
    lands = _lands(*(LandRecord(tile_id=i, provisional_reward=float(i)) for i in range(150)))

    selected = select_lands(lands, limit=100)

    assert len(selected) == 100
    assert selected[0].tile_id == 149


def test_visible_error_hides_success_token() -> None:
    assert visible_error("Success") is None
    assert visible_error(None) is None
    assert visible_error("") is None
    assert visible_error("Tile not found") == "Tile not found"

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import pytest

from landhunter._api.detail import fetch_land_detail
from landhunter._api.faction import fetch_faction_tiles
from landhunter._api.listing import fetch_listing
from landhunter.config import HunterConfig, IngestionStrategy
from landhunter.exceptions import LandApiError, LandMalformedResponseError, LandTransportError
from landhunter.ingestion.ingestor import Ingestor, build_land_records
from landhunter.models.land import LandRecord, ListingEntry
from landhunter.state.store import StateStore

NOW = datetime(2024, 1, 3, tzinfo=UTC)

LISTING = [
    [123, 5, 199, None, 10],
    [456, 5, 1, "2024-01-01T00:00:00", 37],
    [789, 6, 2, "2024-01-02T00:00:00", 0.01, 4, "de"],
    [456, 5, 1, "2024-01-01T00:00:00", 99],
    ["not-an-id", 1, 1, None, 1],
]


class FakeTransport:
    """In-memory transport keyed by endpoint."""

    def __init__(self, routes: Mapping[str, Any]) -> None:
        self.routes = dict(routes)
        self.posts: list[tuple[str, Mapping[str, Any]]] = []

    def _answer(self, endpoint: str) -> Any:
        response = self.routes[endpoint]
        if isinstance(response, Exception):
            raise response
        return response

    async def get_json(self, endpoint: str) -> Any:
        return self._answer(endpoint)

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any:
        self.posts.append((endpoint, payload))
        return self._answer(endpoint)


class FakeEnricher:
    def __init__(self) -> None:
        self.submitted: list[tuple[int, int]] = []

    def submit(self, tile_id: int, generation: int) -> asyncio.Future[Any]:
        self.submitted.append((tile_id, generation))
        return asyncio.get_running_loop().create_future()


def _entries(rows: list[list[Any]]) -> list[ListingEntry]:
    return [ListingEntry.model_validate(row) for row in rows]


def _ingestor(config: HunterConfig, store: StateStore, enricher: FakeEnricher, transport: FakeTransport) -> Ingestor:
    return Ingestor(
        config,
        store,
        enricher,  # type: ignore[arg-type]
        fetch_listing=lambda: fetch_listing(transport),
        fetch_faction_tiles=lambda address: fetch_faction_tiles(transport, address),
        clock=lambda: NOW,
    )


class TestBuildLandRecords:
    def test_friendly_land_is_excluded(self, config: HunterConfig) -> None:
        records, counts = build_land_records(_entries(LISTING[:2]), config, now=NOW)

        assert [r.tile_id for r in records] == [456]
        assert counts["friendly"] == 1

    def test_provisional_reward_at_ingestion_time(self, config: HunterConfig) -> None:
        records, _ = build_land_records(_entries([LISTING[1]]), config, now=NOW)

        assert records[0].provisional_reward == pytest.approx(20.0)
        assert records[0].refined_reward is None
        assert records[0].guard_started_at == "2024-01-01T00:00:00"

    def test_low_reward_is_excluded(self, config: HunterConfig) -> None:
        records, counts = build_land_records(_entries([LISTING[2]]), config, now=NOW)

        assert records == []
        assert counts["low_reward"] == 1

    def test_duplicate_keeps_first_occurrence(self, config: HunterConfig) -> None:
        records, counts = build_land_records(_entries([LISTING[1], LISTING[3]]), config, now=NOW)

        assert len(records) == 1
        assert records[0].production_rate_per_day == 37.0
        assert counts["duplicates"] == 1

    def test_listing_defense_seeds_record(self) -> None:
        config = HunterConfig(min_reward=0.0)
        records, _ = build_land_records(_entries([LISTING[2]]), config, now=NOW)

        assert records[0].defense == 4.0
        assert records[0].country == "de"

    def test_kept_records_clear_both_filters(self, config: HunterConfig) -> None:
        records, _ = build_land_records(_entries(LISTING[:4]), config, now=NOW)

        for record in records:
            assert record.faction_id not in config.friendly_faction_ids
            assert record.provisional_reward >= config.min_reward


class TestIngestBulk:
    @pytest.mark.asyncio
    async def test_replaces_store_and_submits_kept_lands(self, config: HunterConfig) -> None:
        store = StateStore()
        enricher = FakeEnricher()
        transport = FakeTransport({"/raw/land": LISTING})

        report = await _ingestor(config, store, enricher, transport).ingest_bulk()

        assert report.generation == store.generation == 1
        assert report.strategy == IngestionStrategy.BULK
        assert report.decoded == 4
        assert report.skipped == 1
        assert report.duplicates == 1
        assert report.friendly_excluded == 1
        assert report.low_reward_excluded == 1
        assert report.kept == 1
        assert report.submitted == 1
        assert set(store.lands) == {456}
        assert enricher.submitted == [(456, 1)]
        assert store.last_error == "Success"

    @pytest.mark.asyncio
    async def test_second_cycle_advances_generation(self, config: HunterConfig) -> None:
        store = StateStore()
        enricher = FakeEnricher()
        ingestor = _ingestor(config, store, enricher, FakeTransport({"/raw/land": LISTING}))

        await ingestor.ingest_bulk()
        await ingestor.ingest_bulk()

        assert store.generation == 2
        assert enricher.submitted == [(456, 1), (456, 2)]

    @pytest.mark.asyncio
    async def test_out_of_range_guard_timestamp_does_not_abort_cycle(self, config: HunterConfig) -> None:
        store = StateStore()
        enricher = FakeEnricher()
        rows = [[321, 5, 3, "0001-01-01T00:00:00+01:00", 10], LISTING[1]]
        transport = FakeTransport({"/raw/land": rows})

        report = await _ingestor(config, store, enricher, transport).ingest_bulk()

        assert report.low_reward_excluded == 1
        assert set(store.lands) == {456}
        assert store.last_error == "Success"

    @pytest.mark.asyncio
    async def test_listing_failure_keeps_previous_state(self, config: HunterConfig) -> None:
        store = StateStore()
        store.replace_all([LandRecord(tile_id=1, provisional_reward=3.0)])
        enricher = FakeEnricher()
        error = LandTransportError("HTTP 503 from /raw/land: down", status_code=503, endpoint="/raw/land")
        transport = FakeTransport({"/raw/land": error})

        with pytest.raises(LandTransportError):
            await _ingestor(config, store, enricher, transport).ingest_bulk()

        assert store.generation == 1
        assert set(store.lands) == {1}
        assert store.last_error is not None and "503" in store.last_error
        assert enricher.submitted == []

    @pytest.mark.asyncio
    async def test_non_list_listing_is_malformed(self, config: HunterConfig) -> None:
        store = StateStore()
        transport = FakeTransport({"/raw/land": {"error": "nope"}})

        with pytest.raises(LandMalformedResponseError):
            await _ingestor(config, store, FakeEnricher(), transport).ingest_bulk()

        assert store.generation == 0


class TestIngestFaction:
    @pytest.mark.asyncio
    async def test_builds_skeleton_records(self, config: HunterConfig) -> None:
        store = StateStore()
        enricher = FakeEnricher()
        transport = FakeTransport({"/faction/0xabc/tiles": [10, "11", 10, "x"]})

        report = await _ingestor(config, store, enricher, transport).ingest_faction("0xabc")

        assert report.strategy == IngestionStrategy.FACTION
        assert report.kept == 2
        assert list(store.lands) == [10, 11]
        assert store.lands[10].provisional_reward == 0.0
        assert enricher.submitted == [(10, 1), (11, 1)]

    @pytest.mark.asyncio
    async def test_run_uses_configured_strategy(self) -> None:
        config = HunterConfig(strategy=IngestionStrategy.FACTION, faction_address="0xabc")
        store = StateStore()
        transport = FakeTransport({"/faction/0xabc/tiles": [7]})

        report = await _ingestor(config, store, FakeEnricher(), transport).run()

        assert report.strategy == IngestionStrategy.FACTION
        assert list(store.lands) == [7]

    @pytest.mark.asyncio
    async def test_run_defaults_to_bulk(self, config: HunterConfig) -> None:
        store = StateStore()
        transport = FakeTransport({"/raw/land": LISTING})

        report = await _ingestor(config, store, FakeEnricher(), transport).run()

        assert report.strategy == IngestionStrategy.BULK


class TestFetchLandDetail:
    @pytest.mark.asyncio
    async def test_posts_request_payload(self, config: HunterConfig) -> None:
        body = {
            "info": {"message": "Success", "serverTime": "2024-01-03T00:00:00Z"},
            "d": {"guard": {"guardedAt": "2024-01-01T00:00:00", "bricksPerDay": 37}, "defense": {"total": 12}},
        }
        transport = FakeTransport({"/land/get": body})

        detail = await fetch_land_detail(config, transport, 456)

        assert transport.posts == [("/land/get", {"tileId": 456, "app": "land-hunter", "version": "10189a1a1"})]
        assert detail.defense_value == 12.0
        assert detail.is_resolvable

    @pytest.mark.asyncio
    async def test_api_message_raises(self, config: HunterConfig) -> None:
        transport = FakeTransport({"/land/get": {"info": {"message": "Land not found"}, "d": {}}})

        with pytest.raises(LandApiError) as exc_info:
            await fetch_land_detail(config, transport, 1)

        assert exc_info.value.message == "Land not found"

    @pytest.mark.asyncio
    async def test_non_object_is_malformed(self, config: HunterConfig) -> None:
        transport = FakeTransport({"/land/get": [1, 2, 3]})

        with pytest.raises(LandMalformedResponseError):
            await fetch_land_detail(config, transport, 1)


@pytest.mark.asyncio
async def test_faction_address_is_url_quoted() -> None:
    transport = FakeTransport({"/faction/a%2Fb/tiles": [1]})

    assert await fetch_faction_tiles(transport, " a/b ") == [1]

"""Land ingestion.

This module owns both ingestion strategies:

- **bulk**: fetch the full ``/raw/land`` listing, compute provisional
  rewards, drop friendly and low-reward lands, replace the store.
- **faction**: fetch the tile ids of one faction and replace the store with
  skeleton records that enrichment fills in.

Either way the kept lands are then submitted to the enricher tagged with
the new generation. Ingestion does not wait for enrichment to finish.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from landhunter._constants import SUCCESS_MESSAGE
from landhunter.config import HunterConfig, IngestionStrategy
from landhunter.enrichment.enricher import EnrichmentResult, RateLimitedEnricher
from landhunter.exceptions import LandApiError, LandConfigError, LandHunterError
from landhunter.models.land import LandRecord, ListingEntry
from landhunter.reward import calculate_reward
from landhunter.state.store import StateStore

_logger = logging.getLogger(__name__)

ListingFetcher = Callable[[], Awaitable[tuple[list[ListingEntry], int]]]
FactionTilesFetcher = Callable[[str], Awaitable[list[int]]]


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class IngestionReport:
    """Summary of one ingestion cycle."""

    generation: int
    strategy: IngestionStrategy
    decoded: int = 0
    skipped: int = 0
    duplicates: int = 0
    friendly_excluded: int = 0
    low_reward_excluded: int = 0
    kept: int = 0
    futures: list[asyncio.Future[EnrichmentResult]] = field(default_factory=list)

    @property
    def submitted(self) -> int:
        return len(self.futures)


def build_land_records(
    entries: Iterable[ListingEntry],
    config: HunterConfig,
    *,
    now: datetime,
) -> tuple[list[LandRecord], Counter[str]]:
    """Turn listing entries into filtered land records.

    Filters apply in order: friendly factions first, then the minimum
    provisional reward. A repeated tile id keeps its first occurrence.

    Returns the kept records (listing order) and a counter with the keys
    ``duplicates``, ``friendly`` and ``low_reward``.
    """
    counts: Counter[str] = Counter()
    seen: set[int] = set()
    records: list[LandRecord] = []

    for entry in entries:
        if entry.tile_id in seen:
            counts["duplicates"] += 1
            continue
        seen.add(entry.tile_id)

        provisional = calculate_reward(
            entry.bricks_per_day,
            entry.guarded_at,
            decay_cap_days=config.decay_cap_days,
            exchange_rate=config.exchange_rate,
            now=now,
        )

        if entry.faction_id is not None and entry.faction_id in config.friendly_faction_ids:
            counts["friendly"] += 1
            continue
        if provisional < config.min_reward:
            counts["low_reward"] += 1
            continue

        records.append(
            LandRecord(
                tile_id=entry.tile_id,
                map_id=entry.map_id,
                faction_id=entry.faction_id,
                guard_started_at=entry.guarded_at,
                production_rate_per_day=entry.bricks_per_day,
                provisional_reward=provisional,
                defense=entry.defense,
                country=entry.country,
            )
        )

    return records, counts


class Ingestor:
    """Run ingestion cycles against a :class:`StateStore`."""

    def __init__(
        self,
        config: HunterConfig,
        store: StateStore,
        enricher: RateLimitedEnricher,
        *,
        fetch_listing: ListingFetcher,
        fetch_faction_tiles: FactionTilesFetcher,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._store = store
        self._enricher = enricher
        self._fetch_listing = fetch_listing
        self._fetch_faction_tiles = fetch_faction_tiles
        self._clock = clock

    async def run(self) -> IngestionReport:
        """Run one cycle using the configured strategy."""
        if self._config.strategy == IngestionStrategy.FACTION:
            if not self._config.faction_address:
                raise LandConfigError("faction strategy requires faction_address")
            return await self.ingest_faction(self._config.faction_address)
        return await self.ingest_bulk()

    async def ingest_bulk(self) -> IngestionReport:
        """Replace the store with the filtered bulk listing and submit enrichment.

        On a listing failure the store is left untouched apart from the
        recorded error, and the error is re-raised.
        """
        try:
            entries, skipped = await self._fetch_listing()
        except LandHunterError as exc:
            self._record_failure(exc)
            raise

        records, counts = build_land_records(entries, self._config, now=self._clock())
        generation = self._store.replace_all(records)
        self._store.set_error(SUCCESS_MESSAGE)

        report = IngestionReport(
            generation=generation,
            strategy=IngestionStrategy.BULK,
            decoded=len(entries),
            skipped=skipped,
            duplicates=counts["duplicates"],
            friendly_excluded=counts["friendly"],
            low_reward_excluded=counts["low_reward"],
            kept=len(records),
        )
        report.futures = self._submit(records, generation)

        _logger.info(
            "Bulk ingestion generation %d: kept %d of %d (friendly %d, low reward %d, skipped %d)",
            generation,
            report.kept,
            report.decoded,
            report.friendly_excluded,
            report.low_reward_excluded,
            report.skipped,
        )
        return report

    async def ingest_faction(self, address: str) -> IngestionReport:
        """Replace the store with skeleton records for one faction's tiles.

        Skeletons carry no guard data, so their provisional reward is 0 and the
        minimum-reward filter does not apply; enrichment supplies the rest.
        """
        try:
            tile_ids = await self._fetch_faction_tiles(address)
        except LandHunterError as exc:
            self._record_failure(exc)
            raise

        records = [LandRecord(tile_id=tile_id) for tile_id in tile_ids]
        generation = self._store.replace_all(records)
        self._store.set_error(SUCCESS_MESSAGE)

        report = IngestionReport(
            generation=generation,
            strategy=IngestionStrategy.FACTION,
            decoded=len(tile_ids),
            kept=len(records),
        )
        report.futures = self._submit(records, generation)

        _logger.info("Faction ingestion generation %d: %d tiles for %s", generation, report.kept, address)
        return report

    def _submit(self, records: list[LandRecord], generation: int) -> list[asyncio.Future[EnrichmentResult]]:
        return [self._enricher.submit(record.tile_id, generation) for record in records]

    def _record_failure(self, exc: LandHunterError) -> None:
        message = exc.message if isinstance(exc, LandApiError) else str(exc)
        _logger.warning("Ingestion aborted, keeping generation %d: %s", self._store.generation, message)
        self._store.set_error(message)

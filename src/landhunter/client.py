"""High-level async client for hunting raidable lands."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import aiohttp

from landhunter._api.detail import fetch_land_detail
from landhunter._api.faction import fetch_faction_tiles
from landhunter._api.listing import fetch_listing
from landhunter._transport import HttpTransport, Transport
from landhunter.config import HunterConfig
from landhunter.enrichment.enricher import EnrichmentStats, RateLimitedEnricher
from landhunter.enrichment.limiter import SlidingWindowLimiter
from landhunter.exceptions import LandHunterError
from landhunter.ingestion.ingestor import IngestionReport, Ingestor
from landhunter.models.detail import LandDetail
from landhunter.models.land import LandRecord, ListingEntry
from landhunter.state.selectors import select_lands, visible_error
from landhunter.state.store import StateListener, StateStore

_logger = logging.getLogger(__name__)

# Distinguishes "use the configured value" from an explicit None.
_FROM_CONFIG: Any = object()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LandHunterClient:
    """Async client that keeps a live, enriched view of raidable lands.

    Usage::

        async with LandHunterClient(HunterConfig()) as client:
            await client.refresh()
            await client.wait_for_enrichment()
            for land in client.select_lands():
                print(land.tile_id, land.display_reward())
    """

    def __init__(
        self,
        config: HunterConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        limiter: SlidingWindowLimiter | None = None,
        clock: Callable[[], datetime] = _utcnow,
        on_change: StateListener | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None
        self._limiter = limiter
        self._clock = clock
        self._store = StateStore()
        if on_change is not None:
            self._store.add_listener(on_change)
        self._enricher: RateLimitedEnricher | None = None
        self._ingestor: Ingestor | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> LandHunterClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)

        self._enricher = RateLimitedEnricher(
            self._fetch_detail,
            self._store,
            self._config,
            limiter=self._limiter,
            clock=self._clock,
        )
        self._enricher.start()
        self._ingestor = Ingestor(
            self._config,
            self._store,
            self._enricher,
            fetch_listing=self._fetch_listing,
            fetch_faction_tiles=self._fetch_faction_tiles,
            clock=self._clock,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._enricher is not None:
            await self._enricher.aclose()
            _logger.debug("Client closed at generation %d", self._store.generation)
        self._enricher = None
        self._ingestor = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise LandHunterError("Client not initialized. Use 'async with LandHunterClient(...) as client:'")
        return self._transport

    def _require_ingestor(self) -> Ingestor:
        if self._ingestor is None:
            raise LandHunterError("Client not initialized. Use 'async with LandHunterClient(...) as client:'")
        return self._ingestor

    async def _fetch_listing(self) -> tuple[list[ListingEntry], int]:
        return await fetch_listing(self._require_transport())

    async def _fetch_faction_tiles(self, address: str) -> list[int]:
        return await fetch_faction_tiles(self._require_transport(), address)

    async def _fetch_detail(self, tile_id: int) -> LandDetail:
        return await fetch_land_detail(self._config, self._require_transport(), tile_id)

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    async def refresh(self) -> IngestionReport:
        """Run one ingestion cycle with the configured strategy."""
        return await self._require_ingestor().run()

    async def ingest(self) -> IngestionReport:
        """Run one bulk ingestion cycle."""
        return await self._require_ingestor().ingest_bulk()

    async def hunt_faction(self, address: str) -> IngestionReport:
        """Run one faction-scoped ingestion cycle for *address*."""
        return await self._require_ingestor().ingest_faction(address)

    async def wait_for_enrichment(self) -> None:
        """Wait until every submitted enrichment call has resolved."""
        if self._enricher is None:
            raise LandHunterError("Client not initialized. Use 'async with LandHunterClient(...) as client:'")
        await self._enricher.drain()

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def store(self) -> StateStore:
        return self._store

    @property
    def generation(self) -> int:
        return self._store.generation

    @property
    def lands(self) -> Mapping[int, LandRecord]:
        return self._store.lands

    @property
    def last_error(self) -> str | None:
        return self._store.last_error

    @property
    def visible_error(self) -> str | None:
        """Last API message, or ``None`` when it is the success token."""
        return visible_error(self._store.last_error)

    @property
    def enrichment_stats(self) -> EnrichmentStats:
        if self._enricher is None:
            return EnrichmentStats()
        return self._enricher.stats

    def select_lands(
        self,
        *,
        max_defense: float | None = _FROM_CONFIG,
        limit: int | None = _FROM_CONFIG,
        prefer_refined: bool | None = None,
    ) -> list[LandRecord]:
        """Sorted, filtered display sequence. Unset arguments fall back to config."""
        return select_lands(
            self._store.lands,
            max_defense=self._config.max_defense if max_defense is _FROM_CONFIG else max_defense,
            limit=self._config.display_limit if limit is _FROM_CONFIG else limit,
            prefer_refined=self._config.prefer_refined_reward if prefer_refined is None else prefer_refined,
        )

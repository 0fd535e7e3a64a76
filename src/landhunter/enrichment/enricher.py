"""Rate-limited per-land enrichment.

Ingestion submits every kept land here. A single dispatcher task drains the
FIFO queue, admitting each detail call through the
:class:`~landhunter.enrichment.limiter.SlidingWindowLimiter` and running it
as its own task so calls overlap. Each submission resolves exactly one
future with an :class:`EnrichmentResult`.

Stale-write protection: every job carries the store generation that was
active when it was submitted. A result for an older generation is dropped
on arrival. A queued job that is stale when its turn comes, or goes stale
while it waits for admission, is dropped without spending rate budget.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from landhunter._constants import SUCCESS_MESSAGE
from landhunter.config import HunterConfig
from landhunter.enrichment.limiter import SlidingWindowLimiter
from landhunter.exceptions import LandApiError, LandHunterError
from landhunter.models.detail import LandDetail
from landhunter.reward import calculate_reward
from landhunter.state.store import StateStore

_logger = logging.getLogger(__name__)

DetailFetcher = Callable[[int], Awaitable[LandDetail]]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class EnrichmentOutcome(StrEnum):
    MERGED = "merged"
    STALE = "stale"
    MISSING = "missing"
    INCOMPLETE = "incomplete"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class EnrichmentResult:
    tile_id: int
    generation: int
    outcome: EnrichmentOutcome
    refined_reward: float | None = None
    defense: float | None = None
    error: str | None = None


@dataclass(slots=True)
class EnrichmentStats:
    submitted: int = 0
    dispatched: int = 0
    merged: int = 0
    stale: int = 0
    missing: int = 0
    incomplete: int = 0
    failed: int = 0
    queued: int = 0
    in_flight: int = 0


@dataclass(slots=True)
class _EnrichmentJob:
    tile_id: int
    generation: int
    future: asyncio.Future[EnrichmentResult]
    released: bool = False


class RateLimitedEnricher:
    """Fetch per-land detail under rate caps and merge refined fields.

    Usage::

        enricher = RateLimitedEnricher(fetch_detail, store, config)
        enricher.start()
        future = enricher.submit(tile_id, store.generation)
        ...
        await enricher.aclose()
    """

    def __init__(
        self,
        fetch_detail: DetailFetcher,
        store: StateStore,
        config: HunterConfig,
        *,
        limiter: SlidingWindowLimiter | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._fetch_detail = fetch_detail
        self._store = store
        self._config = config
        self._limiter = limiter if limiter is not None else SlidingWindowLimiter(config.rate_windows)
        self._clock = clock
        self._queue: asyncio.Queue[_EnrichmentJob] = asyncio.Queue()
        self._in_flight: set[asyncio.Task[None]] = set()
        self._dispatcher: asyncio.Task[None] | None = None
        self._closed = False
        self._stats = EnrichmentStats()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._dispatcher is not None and not self._dispatcher.done()

    def start(self) -> None:
        """Start the dispatcher task (idempotent)."""
        if self._closed:
            raise LandHunterError("Enricher is closed")
        if self.is_running:
            return
        self._dispatcher = asyncio.get_running_loop().create_task(
            self._dispatch_loop(),
            name="landhunter-enrichment-dispatcher",
        )
        _logger.debug("Enrichment dispatcher started")

    async def drain(self) -> None:
        """Wait until every submitted job has resolved.

        The dispatcher must be running, otherwise queued jobs never resolve.
        """
        await self._queue.join()

    async def aclose(self) -> None:
        """Stop dispatching and cancel queued and in-flight jobs."""
        self._closed = True
        dispatcher = self._dispatcher
        self._dispatcher = None
        if dispatcher is not None:
            dispatcher.cancel()
            await asyncio.gather(dispatcher, return_exceptions=True)

        in_flight = list(self._in_flight)
        for task in in_flight:
            task.cancel()
        if in_flight:
            await asyncio.gather(*in_flight, return_exceptions=True)

        while not self._queue.empty():
            job = self._queue.get_nowait()
            job.future.cancel()
            self._release(job)

        _logger.debug(
            "Enrichment stopped (dispatched: %d, merged: %d, failed: %d)",
            self._stats.dispatched,
            self._stats.merged,
            self._stats.failed,
        )

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, tile_id: int, generation: int) -> asyncio.Future[EnrichmentResult]:
        """Queue one detail fetch for *tile_id*, tagged with *generation*.

        Returns a future resolved with the :class:`EnrichmentResult`. The
        call is attempted at most once; there is no retry.
        """
        if self._closed:
            raise LandHunterError("Enricher is closed")
        future: asyncio.Future[EnrichmentResult] = asyncio.get_running_loop().create_future()
        self._queue.put_nowait(_EnrichmentJob(tile_id=tile_id, generation=generation, future=future))
        self._stats.submitted += 1
        return future

    @property
    def stats(self) -> EnrichmentStats:
        """Snapshot of the enrichment counters."""
        return dataclasses.replace(self._stats, queued=self._queue.qsize(), in_flight=len(self._in_flight))

    @property
    def limiter(self) -> SlidingWindowLimiter:
        return self._limiter

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _dispatch_loop(self) -> None:
        while True:
            job = await self._queue.get()

            if job.future.done():
                # Caller cancelled the future before dispatch.
                self._release(job)
                continue

            try:
                admitted = await self._limiter.acquire(
                    still_wanted=lambda job=job: job.generation == self._store.generation
                )
            except asyncio.CancelledError:
                job.future.cancel()
                self._release(job)
                raise

            if admitted is None:
                self._finish(job, EnrichmentResult(job.tile_id, job.generation, EnrichmentOutcome.STALE))
                continue

            self._stats.dispatched += 1
            task = asyncio.create_task(self._run(job), name=f"landhunter-enrich-{job.tile_id}")
            self._in_flight.add(task)
            task.add_done_callback(lambda t, job=job: self._on_task_done(t, job))

    async def _run(self, job: _EnrichmentJob) -> None:
        try:
            detail = await self._fetch_detail(job.tile_id)
            self._store.set_error(detail.message or SUCCESS_MESSAGE)
            result = self._merge(job, detail)
        except asyncio.CancelledError:
            job.future.cancel()
            self._release(job)
            raise
        except LandApiError as exc:
            self._store.set_error(exc.message)
            result = self._failed(job, exc.message)
        except LandHunterError as exc:
            self._store.set_error(str(exc))
            result = self._failed(job, str(exc))
        except Exception as exc:
            _logger.warning("Unexpected error enriching land %s", job.tile_id, exc_info=True)
            self._stats.failed += 1
            if not job.future.done():
                job.future.set_exception(exc)
            self._release(job)
            return

        self._finish(job, result)

    def _failed(self, job: _EnrichmentJob, message: str) -> EnrichmentResult:
        _logger.debug("Detail fetch for land %s failed: %s", job.tile_id, message)
        return EnrichmentResult(job.tile_id, job.generation, EnrichmentOutcome.FAILED, error=message)

    def _merge(self, job: _EnrichmentJob, detail: LandDetail) -> EnrichmentResult:
        if not detail.is_resolvable or detail.guard is None:
            return EnrichmentResult(job.tile_id, job.generation, EnrichmentOutcome.INCOMPLETE)

        refined = calculate_reward(
            detail.guard.bricks_per_day,
            detail.guard.guarded_at,
            decay_cap_days=self._config.decay_cap_days,
            exchange_rate=self._config.exchange_rate,
            now=detail.server_instant or self._clock(),
        )
        defense = detail.defense_value

        if job.generation != self._store.generation:
            outcome = EnrichmentOutcome.STALE
        elif self._store.merge_update(
            job.tile_id,
            {"refined_reward": refined, "defense": defense},
            job.generation,
        ):
            outcome = EnrichmentOutcome.MERGED
        else:
            outcome = EnrichmentOutcome.MISSING

        return EnrichmentResult(job.tile_id, job.generation, outcome, refined_reward=refined, defense=defense)

    def _finish(self, job: _EnrichmentJob, result: EnrichmentResult) -> None:
        counter = result.outcome.value
        setattr(self._stats, counter, getattr(self._stats, counter) + 1)
        _logger.debug("Land %s enrichment %s", job.tile_id, result.outcome)
        if not job.future.done():
            job.future.set_result(result)
        self._release(job)

    def _release(self, job: _EnrichmentJob) -> None:
        if not job.released:
            job.released = True
            self._queue.task_done()

    def _on_task_done(self, task: asyncio.Task[None], job: _EnrichmentJob) -> None:
        self._in_flight.discard(task)
        # A task cancelled before its first step never reaches its own handlers.
        if not job.future.done():
            job.future.cancel()
        self._release(job)

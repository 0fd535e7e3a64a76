"""Rate-limited per-land enrichment."""

from landhunter.enrichment.enricher import (
    EnrichmentOutcome,
    EnrichmentResult,
    EnrichmentStats,
    RateLimitedEnricher,
)
from landhunter.enrichment.limiter import SlidingWindowLimiter

__all__ = [
    "EnrichmentOutcome",
    "EnrichmentResult",
    "EnrichmentStats",
    "RateLimitedEnricher",
    "SlidingWindowLimiter",
]

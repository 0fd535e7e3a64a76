"""landhunter - Async tracker for raidable Liquid Lands tiles."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("landhunter")
except PackageNotFoundError:
    __version__ = "0+local"
from landhunter._constants import SUCCESS_MESSAGE
from landhunter.client import LandHunterClient
from landhunter.config import HunterConfig, IngestionStrategy, RateWindow
from landhunter.enrichment import (
    EnrichmentOutcome,
    EnrichmentResult,
    EnrichmentStats,
    RateLimitedEnricher,
    SlidingWindowLimiter,
)
from landhunter.exceptions import (
    LandApiError,
    LandConfigError,
    LandHunterError,
    LandMalformedResponseError,
    LandTransportError,
)
from landhunter.ingestion.ingestor import IngestionReport, Ingestor
from landhunter.models import LandDetail, LandRecord, ListingEntry
from landhunter.reward import calculate_reward
from landhunter.state.selectors import select_lands, visible_error
from landhunter.state.store import StateStore

__all__ = [
    "__version__",
    "EnrichmentOutcome",
    "EnrichmentResult",
    "EnrichmentStats",
    "HunterConfig",
    "IngestionReport",
    "IngestionStrategy",
    "Ingestor",
    "LandApiError",
    "LandConfigError",
    "LandDetail",
    "LandHunterClient",
    "LandHunterError",
    "LandMalformedResponseError",
    "LandRecord",
    "LandTransportError",
    "ListingEntry",
    "RateLimitedEnricher",
    "RateWindow",
    "SUCCESS_MESSAGE",
    "SlidingWindowLimiter",
    "StateStore",
    "calculate_reward",
    "select_lands",
    "visible_error",
]

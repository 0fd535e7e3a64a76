from __future__ import annotations

import asyncio

import pytest

from landhunter.config import HunterConfig, RateWindow
from landhunter.enrichment.limiter import SlidingWindowLimiter


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


@pytest.fixture
def config() -> HunterConfig:
    return HunterConfig(decay_cap_days=2.0, exchange_rate=3.7, min_reward=0.05)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fast_limiter() -> SlidingWindowLimiter:
    return SlidingWindowLimiter([RateWindow(count=10_000, seconds=1.0)])

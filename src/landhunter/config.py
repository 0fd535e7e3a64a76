"""Client configuration for landhunter."""

from __future__ import annotations

import dataclasses
import os
from enum import StrEnum
from typing import Any

from landhunter._constants import (
    APP_NAME,
    APP_VERSION,
    BASE_URL,
    DEFAULT_DECAY_CAP_DAYS,
    DEFAULT_DISPLAY_LIMIT,
    DEFAULT_EXCHANGE_RATE,
    DEFAULT_FRIENDLY_FACTION_IDS,
    DEFAULT_MAX_DEFENSE,
    DEFAULT_MIN_REWARD,
)
from landhunter.exceptions import LandConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_optional_float(value: str) -> float | None:
    normalized = value.strip().lower()
    if normalized in {"", "none", "null", "inf", "unbounded"}:
        return None
    return float(normalized)


def _parse_int_set(value: str) -> frozenset[int]:
    return frozenset(int(part) for part in value.replace(" ", "").split(",") if part)


class IngestionStrategy(StrEnum):
    BULK = "bulk"
    FACTION = "faction"


@dataclasses.dataclass(frozen=True)
class RateWindow:
    """At most ``count`` dispatches within any ``seconds``-long window."""

    count: int
    seconds: float

    def __post_init__(self) -> None:
        if self.count <= 0:
            raise LandConfigError(f"rate window count must be positive, got {self.count}")
        if self.seconds <= 0:
            raise LandConfigError(f"rate window duration must be positive, got {self.seconds}")

    @classmethod
    def parse(cls, text: str) -> RateWindow:
        """Parse ``"<count>/<seconds>"`` (e.g. ``"10/1.0"``)."""
        count, sep, seconds = text.strip().partition("/")
        if not sep:
            raise LandConfigError(f"rate window must look like '<count>/<seconds>', got {text!r}")
        try:
            return cls(count=int(count), seconds=float(seconds))
        except ValueError as exc:
            raise LandConfigError(f"invalid rate window {text!r}") from exc


DEFAULT_RATE_WINDOWS: tuple[RateWindow, ...] = (
    RateWindow(count=10, seconds=1.0),
    RateWindow(count=100, seconds=60.0),
)


@dataclasses.dataclass(frozen=True)
class HunterConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        API base URL.
    app_name : str
        Application identifier sent with every detail request.
    app_version : str
        Application version sent with every detail request.
    friendly_faction_ids : frozenset[int]
        Factions whose lands are never listed.
    min_reward : float
        Lands whose provisional reward is below this value are dropped at
        bulk ingestion.
    decay_cap_days : float or None
        Maximum number of accrued days counted by the reward estimate.
        ``None`` means unbounded.
    exchange_rate : float
        Divisor converting produced units into reward units.
    rate_windows : tuple[RateWindow, ...]
        Dispatch caps enforced simultaneously on detail calls.
    strategy : IngestionStrategy
        Which ingestion path :meth:`LandHunterClient.refresh` uses.
    faction_address : str or None
        Faction address used by the ``faction`` strategy.
    prefer_refined_reward : bool
        Show the refined reward instead of the provisional one once it
        exists.
    max_defense : float or None
        Lands with a known defense at or above this value are hidden from
        the selection. ``None`` disables the filter.
    display_limit : int or None
        Maximum number of selected lands. ``None`` returns all.
    """

    base_url: str = BASE_URL
    app_name: str = APP_NAME
    app_version: str = APP_VERSION
    friendly_faction_ids: frozenset[int] = DEFAULT_FRIENDLY_FACTION_IDS
    min_reward: float = DEFAULT_MIN_REWARD
    decay_cap_days: float | None = DEFAULT_DECAY_CAP_DAYS
    exchange_rate: float = DEFAULT_EXCHANGE_RATE
    rate_windows: tuple[RateWindow, ...] = DEFAULT_RATE_WINDOWS
    strategy: IngestionStrategy = IngestionStrategy.BULK
    faction_address: str | None = None
    prefer_refined_reward: bool = True
    max_defense: float | None = DEFAULT_MAX_DEFENSE
    display_limit: int | None = DEFAULT_DISPLAY_LIMIT

    def __post_init__(self) -> None:
        if self.exchange_rate <= 0:
            raise LandConfigError(f"exchange_rate must be positive, got {self.exchange_rate}")
        if self.decay_cap_days is not None and self.decay_cap_days < 0:
            raise LandConfigError(f"decay_cap_days must be non-negative, got {self.decay_cap_days}")
        if not self.rate_windows:
            raise LandConfigError("at least one rate window is required")
        if self.display_limit is not None and self.display_limit < 0:
            raise LandConfigError(f"display_limit must be non-negative, got {self.display_limit}")
        try:
            strategy = IngestionStrategy(self.strategy)
        except ValueError as exc:
            raise LandConfigError(f"unknown ingestion strategy {self.strategy!r}") from exc
        if strategy == IngestionStrategy.FACTION and not self.faction_address:
            raise LandConfigError("faction strategy requires faction_address")
        object.__setattr__(self, "strategy", strategy)
        # Accept any iterable of ids (e.g. a set from a caller).
        object.__setattr__(self, "friendly_faction_ids", frozenset(self.friendly_faction_ids))

    @classmethod
    def from_env(cls, **overrides: Any) -> HunterConfig:
        """Create configuration from ``LAND_HUNTER_*`` environment variables.

        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        HunterConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "LAND_HUNTER_BASE_URL": "base_url",
            "LAND_HUNTER_APP_NAME": "app_name",
            "LAND_HUNTER_APP_VERSION": "app_version",
            "LAND_HUNTER_STRATEGY": "strategy",
            "LAND_HUNTER_FACTION_ADDRESS": "faction_address",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            friendly_env = env.get("LAND_HUNTER_FRIENDLY_FACTIONS")
            if friendly_env is not None:
                config_kwargs["friendly_faction_ids"] = _parse_int_set(friendly_env)

            min_reward_env = env.get("LAND_HUNTER_MIN_REWARD")
            if min_reward_env is not None:
                config_kwargs["min_reward"] = float(min_reward_env)

            cap_env = env.get("LAND_HUNTER_DECAY_CAP_DAYS")
            if cap_env is not None:
                config_kwargs["decay_cap_days"] = _env_optional_float(cap_env)

            rate_env = env.get("LAND_HUNTER_EXCHANGE_RATE")
            if rate_env is not None:
                config_kwargs["exchange_rate"] = float(rate_env)

            max_defense_env = env.get("LAND_HUNTER_MAX_DEFENSE")
            if max_defense_env is not None:
                config_kwargs["max_defense"] = _env_optional_float(max_defense_env)

            limit_env = env.get("LAND_HUNTER_DISPLAY_LIMIT")
            if limit_env is not None:
                config_kwargs["display_limit"] = int(limit_env) if limit_env.strip() else None
        except ValueError as exc:
            raise LandConfigError(f"invalid numeric environment value: {exc}") from exc

        windows_env = env.get("LAND_HUNTER_RATE_WINDOWS")
        if windows_env is not None:
            config_kwargs["rate_windows"] = tuple(
                RateWindow.parse(part) for part in windows_env.split(",") if part.strip()
            )

        config_kwargs["prefer_refined_reward"] = _env_bool(
            env.get("LAND_HUNTER_PREFER_REFINED"),
            True,
        )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

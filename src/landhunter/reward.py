"""Time-decayed raid reward estimate.

A guarded land accrues reward from the moment its guard started. The
estimate is the production rate multiplied by the accrued days (optionally
capped), divided by the exchange rate between produced units and reward.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime, timedelta

_logger = logging.getLogger(__name__)

_FRACTION_RE = re.compile(r"\.(\d+)")
_DESIGNATOR_RE = re.compile(r"(?:[Zz]|[+-]\d{2}:?\d{2})$")

_ONE_DAY = timedelta(days=1)


def normalize_guard_timestamp(value: str) -> str:
    """Make a guard timestamp an unambiguous UTC instant string.

    Truncates any sub-second fraction to three digits and appends the ``Z``
    designator when the value carries neither ``Z`` nor a numeric offset.
    """
    text = value.strip()
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:3].ljust(3, "0"), text, count=1)
    if not _DESIGNATOR_RE.search(text):
        text += "Z"
    return text


def parse_guard_timestamp(value: str | datetime) -> datetime | None:
    """Parse a guard timestamp to an aware UTC datetime, or ``None`` if unparseable."""
    try:
        if isinstance(value, datetime):
            parsed = value if value.tzinfo is not None else value.replace(tzinfo=UTC)
        else:
            parsed = datetime.fromisoformat(normalize_guard_timestamp(value))
        # Offsets at either end of the calendar overflow on conversion.
        return parsed.astimezone(UTC)
    except (AttributeError, TypeError, ValueError, OverflowError):
        _logger.debug("Unparseable guard timestamp %r", value)
        return None


def elapsed_days(started_at: datetime, now: datetime) -> float:
    """Days between two instants, floored at zero."""
    return max(0.0, (now - started_at) / _ONE_DAY)


def calculate_reward(
    production_rate_per_day: float,
    guard_started_at: str | datetime | None,
    *,
    decay_cap_days: float | None,
    exchange_rate: float,
    now: datetime | None = None,
) -> float:
    """Estimate the reward for raiding a land.

    Parameters
    ----------
    production_rate_per_day : float
        Units the land produces per day.
    guard_started_at : str, datetime or None
        When the current guard started. ``None`` means the land is not
        guarded and therefore yields nothing.
    decay_cap_days : float or None
        Upper bound on accrued days. ``None`` means unbounded.
    exchange_rate : float
        Produced units per reward unit.
    now : datetime, optional
        Evaluation instant. Defaults to the current UTC time.

    Returns
    -------
    float
        Non-negative reward. Malformed timestamps yield ``0.0``.
    """
    if guard_started_at is None:
        return 0.0
    started = parse_guard_timestamp(guard_started_at)
    if started is None:
        return 0.0

    if now is None:
        now = datetime.now(UTC)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    days = elapsed_days(started, now)
    if decay_cap_days is not None:
        days = min(decay_cap_days, days)
    return max(0.0, production_rate_per_day * days / exchange_rate)

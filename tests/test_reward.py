from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from landhunter.reward import calculate_reward, normalize_guard_timestamp, parse_guard_timestamp

NOW = datetime(2024, 1, 3, tzinfo=UTC)


def _reward(rate: float, started: str | datetime | None, *, cap: float | None = 2.0, now: datetime = NOW) -> float:
    return calculate_reward(rate, started, decay_cap_days=cap, exchange_rate=3.7, now=now)


@pytest.mark.parametrize("rate", [0.0, 1.0, 10.0, 12345.678])
def test_unguarded_land_has_no_reward(rate: float) -> None:
    assert _reward(rate, None) == 0


def test_two_day_cap_scenario() -> None:
    assert _reward(37, "2024-01-01T00:00:00") == pytest.approx(20.0)


def test_cap_clamps_older_guards() -> None:
    assert _reward(37, "2023-12-01T00:00:00") == pytest.approx(20.0)


def test_unbounded_cap_keeps_accruing() -> None:
    assert _reward(37, "2023-12-24T00:00:00", cap=None) == pytest.approx(37 * 10 / 3.7)


def test_half_day() -> None:
    assert _reward(7.4, "2024-01-02T12:00:00Z") == pytest.approx(1.0)


def test_non_decreasing_in_elapsed_time_then_constant() -> None:
    started = datetime(2024, 1, 1, tzinfo=UTC)
    values = [_reward(10, started, now=started + timedelta(hours=h)) for h in range(0, 24 * 4, 6)]
    assert values == sorted(values)
    assert values[-1] == pytest.approx(10 * 2 / 3.7)
    # Constant once past the cap.
    assert values[-1] == values[-2]


def test_future_guard_start_yields_zero() -> None:
    assert _reward(10, "2024-01-05T00:00:00") == 0


def test_malformed_timestamp_yields_zero() -> None:
    assert _reward(10, "not a timestamp") == 0
    assert _reward(10, "2024-13-45T99:00:00") == 0


@pytest.mark.parametrize("started", ["0001-01-01T00:00:00+01:00", "9999-12-31T23:59:59-01:00"])
def test_out_of_range_timestamp_yields_zero(started: str) -> None:
    assert parse_guard_timestamp(started) is None
    assert _reward(10, started) == 0


def test_out_of_range_aware_datetime_yields_zero() -> None:
    started = datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=1)))

    assert parse_guard_timestamp(started) is None
    assert _reward(10, started) == 0


def test_naive_now_is_treated_as_utc() -> None:
    assert calculate_reward(
        37, "2024-01-01T00:00:00", decay_cap_days=2.0, exchange_rate=3.7, now=datetime(2024, 1, 3)
    ) == pytest.approx(20.0)


def test_exchange_rate_is_a_parameter() -> None:
    assert calculate_reward(10, "2024-01-02T00:00:00", decay_cap_days=None, exchange_rate=1.0, now=NOW) == (
        pytest.approx(10.0)
    )


class TestNormalizeGuardTimestamp:
    def test_appends_utc_designator(self) -> None:
        assert normalize_guard_timestamp("2024-01-01T00:00:00") == "2024-01-01T00:00:00Z"

    def test_truncates_fraction_to_milliseconds(self) -> None:
        assert normalize_guard_timestamp("2024-01-01T00:00:00.123456") == "2024-01-01T00:00:00.123Z"

    def test_pads_short_fraction(self) -> None:
        assert normalize_guard_timestamp("2024-01-01T00:00:00.5") == "2024-01-01T00:00:00.500Z"

    def test_keeps_existing_designator(self) -> None:
        assert normalize_guard_timestamp("2024-01-01T00:00:00.000Z") == "2024-01-01T00:00:00.000Z"

    def test_keeps_numeric_offset(self) -> None:
        assert normalize_guard_timestamp("2024-01-01T02:00:00+02:00") == "2024-01-01T02:00:00+02:00"

    def test_offset_is_converted_to_utc(self) -> None:
        parsed = parse_guard_timestamp("2024-01-01T02:00:00+02:00")
        assert parsed == datetime(2024, 1, 1, tzinfo=UTC)

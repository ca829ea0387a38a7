"""Tests for reward multipliers, cap clamping and the accounting window."""

from datetime import UTC, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from hypothesis import given, settings, strategies as st

from culturebridge.rewards.core import (
    clamp_to_daily_cap,
    compute_multiplier,
    start_of_utc_day,
    streak_multiplier,
)


@pytest.mark.parametrize(
    "tier,streak,quality,expected",
    [
        (None, None, None, Decimal("1.00")),
        ("BRONZE", 0, None, Decimal("1.00")),
        ("SILVER", 30, None, Decimal("1.56")),
        ("gold", 7, None, Decimal("1.65")),
        ("DIAMOND", 365, None, Decimal("6.00")),
        ("UNKNOWN", None, None, Decimal("1.00")),
        (None, None, 50.0, Decimal("1.00")),
        (None, None, 100.0, Decimal("2.00")),
        (None, None, 250.0, Decimal("2.00")),
        (None, None, 0.0, Decimal("0.00")),
    ],
)
def test_compute_multiplier(tier, streak, quality, expected):
    assert compute_multiplier(tier=tier, streak_days=streak, quality_score=quality) == expected


@pytest.mark.parametrize(
    "days,expected",
    [(0, "1.0"), (6, "1.0"), (7, "1.1"), (29, "1.1"), (30, "1.3"), (90, "1.5"), (365, "2.0")],
)
def test_streak_multiplier_thresholds(days, expected):
    assert streak_multiplier(days) == Decimal(expected)


def test_clamp_within_cap_is_unchanged():
    assert clamp_to_daily_cap(Decimal("5"), Decimal("50"), Decimal("10")) == Decimal("5.00")


def test_clamp_to_remaining_cap():
    assert clamp_to_daily_cap(Decimal("5"), Decimal("50"), Decimal("48")) == Decimal("2.00")


def test_clamp_when_cap_exhausted():
    assert clamp_to_daily_cap(Decimal("5"), Decimal("50"), Decimal("50")) == Decimal("0.00")
    assert clamp_to_daily_cap(Decimal("5"), Decimal("50"), Decimal("75")) == Decimal("0.00")


@settings(max_examples=200, deadline=None)
@given(
    amount=st.decimals(min_value=0, max_value=1000, places=2, allow_nan=False, allow_infinity=False),
    cap=st.decimals(min_value=0, max_value=1000, places=2, allow_nan=False, allow_infinity=False),
    already=st.decimals(min_value=0, max_value=1000, places=2, allow_nan=False, allow_infinity=False),
)
def test_clamped_amount_never_exceeds_cap(amount, cap, already):
    """
    Property: a clamped grant keeps the day's total within the cap.

    Invariants:
    - Result is never negative
    - Result never exceeds the requested amount
    - already + result <= max(cap, already)
    """
    granted = clamp_to_daily_cap(amount, cap, already)
    assert granted >= 0
    assert granted <= amount
    assert already + granted <= max(cap, already)


def test_start_of_utc_day_converts_offsets():
    local = datetime(2024, 3, 10, 1, 30, tzinfo=timezone(timedelta(hours=5)))
    assert start_of_utc_day(local) == datetime(2024, 3, 9, tzinfo=UTC)


def test_start_of_utc_day_treats_naive_as_utc():
    assert start_of_utc_day(datetime(2024, 3, 10, 23, 59)) == datetime(2024, 3, 10, tzinfo=UTC)

"""Pure reward arithmetic: multipliers, daily-cap clamping, accounting window."""

from datetime import UTC, datetime, time
from decimal import Decimal

from culturebridge.rewards.catalog import to_cbt

TIER_MULTIPLIERS: dict[str, Decimal] = {
    "BRONZE": Decimal("1.0"),
    "SILVER": Decimal("1.2"),
    "GOLD": Decimal("1.5"),
    "PLATINUM": Decimal("2.0"),
    "DIAMOND": Decimal("3.0"),
}

# (minimum streak days, multiplier), highest first
STREAK_MULTIPLIERS: tuple[tuple[int, Decimal], ...] = (
    (365, Decimal("2.0")),
    (90, Decimal("1.5")),
    (30, Decimal("1.3")),
    (7, Decimal("1.1")),
)

MAX_QUALITY_MULTIPLIER = Decimal("2.0")


def streak_multiplier(streak_days: int | None) -> Decimal:
    """Bonus for consecutive active days."""
    if not streak_days:
        return Decimal("1.0")
    for threshold, multiplier in STREAK_MULTIPLIERS:
        if streak_days >= threshold:
            return multiplier
    return Decimal("1.0")


def compute_multiplier(
    tier: str | None = None,
    streak_days: int | None = None,
    quality_score: float | None = None,
) -> Decimal:
    """
    Combined bonus multiplier, rounded to two decimals.

    Args:
        tier: User tier (BRONZE..DIAMOND); unknown or missing means 1.0
        streak_days: Consecutive active days
        quality_score: Optional 0-100 quality score; scales by q/100*2, capped at 2.0

    Returns:
        Multiplier >= 0
    """
    multiplier = TIER_MULTIPLIERS.get((tier or "").upper(), Decimal("1.0"))
    multiplier *= streak_multiplier(streak_days)
    if quality_score is not None:
        quality = Decimal(str(max(0.0, quality_score))) / Decimal(100) * 2
        multiplier *= min(quality, MAX_QUALITY_MULTIPLIER)
    return to_cbt(multiplier)


def clamp_to_daily_cap(amount: Decimal, cap: Decimal, already_granted: Decimal) -> Decimal:
    """Clamp a grant so the day's total never exceeds the cap."""
    remaining = max(Decimal(0), cap - already_granted)
    return to_cbt(min(max(Decimal(0), amount), remaining))


def to_utc(value: datetime) -> datetime:
    """Naive values are taken as UTC; aware values are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def start_of_utc_day(now: datetime) -> datetime:
    """UTC midnight of the day containing `now` (daily-cap accounting window)."""
    return datetime.combine(to_utc(now).date(), time.min, tzinfo=UTC)

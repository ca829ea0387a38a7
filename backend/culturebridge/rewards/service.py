"""
Reward engine.

Prices a trigger kind from the catalog, applies bonus multipliers, the per-kind
daily count limit and the per-user daily CBT cap, then credits the ledger.
The cap check and the credit run under a per-user lock so concurrent grants
for one user cannot over-grant.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, Awaitable, TypeVar
from uuid import UUID

from culturebridge.core.app_exceptions import (
    REWARD_FAILURES,
    LedgerUnavailable,
    UnknownRewardKind,
)
from culturebridge.core.config import settings
from culturebridge.core.user_lock import user_lock
from culturebridge.ledger.gateway import LedgerGateway
from culturebridge.rewards.catalog import RewardCatalog, RewardKind, get_reward_catalog, to_cbt
from culturebridge.rewards.core import (
    clamp_to_daily_cap,
    compute_multiplier,
    start_of_utc_day,
    to_utc,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Grant outcome reasons
REASON_GRANTED = "granted"
REASON_CLAMPED = "clamped_to_daily_cap"
REASON_CAP_REACHED = "daily_cap_reached"
REASON_KIND_LIMIT = "kind_daily_limit"
REASON_ZERO_AMOUNT = "zero_amount"


@dataclass
class RewardContext:
    """
    Optional inputs for a grant.

    `amount` overrides the catalog price (achievement and session rewards);
    multipliers only apply to catalog-priced grants.
    """

    amount: Decimal | None = None
    description: str | None = None
    tier: str | None = None
    streak_days: int | None = None
    quality_score: float | None = None
    now: datetime | None = None


@dataclass(frozen=True)
class RewardGrant:
    """Outcome of a grant request."""

    granted: bool
    amount: Decimal
    reason: str
    kind: str
    transaction_id: UUID | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "granted": self.granted,
            "amount": str(self.amount),
            "reason": self.reason,
            "kind": self.kind,
            "transaction_id": str(self.transaction_id) if self.transaction_id else None,
        }


class RewardEngine:
    """Computes and credits CBT rewards."""

    def __init__(
        self,
        ledger: LedgerGateway,
        catalog: RewardCatalog | None = None,
        daily_cap: Decimal | None = None,
        timeout_seconds: float | None = None,
    ):
        self.ledger = ledger
        self.catalog = catalog or get_reward_catalog()
        self.daily_cap = to_cbt(daily_cap if daily_cap is not None else self.catalog.daily_reward_cap)
        self.timeout_seconds = timeout_seconds or settings.LEDGER_TIMEOUT_SECONDS

    def base_amount(self, kind: RewardKind | str, context: RewardContext) -> Decimal:
        """Amount before the daily cap is applied."""
        if context.amount is not None:
            return to_cbt(context.amount)
        multiplier = compute_multiplier(
            tier=context.tier,
            streak_days=context.streak_days,
            quality_score=context.quality_score,
        )
        return to_cbt(self.catalog.token_amount(kind) * multiplier)

    async def grant_reward(
        self,
        user_id: UUID,
        kind: RewardKind | str,
        context: RewardContext | None = None,
    ) -> RewardGrant:
        """
        Grant a reward for a trigger kind.

        Args:
            user_id: Recipient
            kind: Trigger kind
            context: Amount override, multiplier inputs and clock

        Returns:
            RewardGrant; granted=False (not an error) when the kind's daily
            limit or the daily cap leaves nothing to credit

        Raises:
            UnknownRewardKind: kind is not in the catalog
            LedgerUnavailable: ledger failed or timed out
            InsufficientCapacity: ledger reward pool exhausted
        """
        rule = self.catalog.get(kind)
        context = context or RewardContext()
        kind_value = rule.kind.value
        now = to_utc(context.now or datetime.now(UTC))
        since = start_of_utc_day(now)

        requested = self.base_amount(rule.kind, context)
        if requested <= 0:
            return RewardGrant(False, Decimal("0.00"), REASON_ZERO_AMOUNT, kind_value)

        async with user_lock(user_id):
            if rule.daily_count_limit is not None:
                count = await self._call(self.ledger.daily_count(user_id, kind_value, since))
                if count >= rule.daily_count_limit:
                    logger.info(
                        "Reward kind daily limit reached",
                        extra={"user_id": str(user_id), "kind": kind_value, "count": count},
                    )
                    return RewardGrant(False, Decimal("0.00"), REASON_KIND_LIMIT, kind_value)

            already = await self._call(self.ledger.daily_total(user_id, since))
            amount = clamp_to_daily_cap(requested, self.daily_cap, already)
            if amount <= 0:
                logger.info(
                    "Daily reward cap reached",
                    extra={"user_id": str(user_id), "kind": kind_value, "already": str(already)},
                )
                return RewardGrant(False, Decimal("0.00"), REASON_CAP_REACHED, kind_value)

            receipt = await self._call(
                self.ledger.credit(
                    user_id,
                    amount,
                    kind_value,
                    context.description or rule.description,
                    category=rule.category,
                    occurred_at=now,
                ),
                credit={"user_id": str(user_id), "kind": kind_value, "amount": str(amount)},
            )

        reason = REASON_CLAMPED if amount < requested else REASON_GRANTED
        return RewardGrant(True, amount, reason, kind_value, receipt.transaction_id)

    async def grant_reward_safely(
        self,
        user_id: UUID,
        kind: RewardKind | str,
        context: RewardContext | None = None,
    ) -> RewardGrant:
        """
        Best-effort grant for domain actions.

        Ledger failures and unknown kinds are logged and reported as
        granted=False with the error code as reason. Never raises for them,
        so the triggering action is never rolled back.
        """
        kind_value = kind.value if isinstance(kind, RewardKind) else str(kind)
        try:
            return await self.grant_reward(user_id, kind, context)
        except UnknownRewardKind as e:
            logger.error(
                "Reward kind missing from catalog",
                extra={"user_id": str(user_id), "kind": kind_value},
            )
            return RewardGrant(False, Decimal("0.00"), e.code, kind_value)
        except REWARD_FAILURES as e:
            logger.warning(
                "Reward grant failed",
                extra={"user_id": str(user_id), "kind": kind_value, "error_code": e.code},
            )
            return RewardGrant(False, Decimal("0.00"), e.code, kind_value)

    async def _call(self, awaitable: Awaitable[T], credit: dict[str, str] | None = None) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            if credit is not None:
                # A cancelled commit may still have landed
                logger.error(
                    "Ledger credit timed out, outcome unknown",
                    extra={**credit, "timeout_seconds": self.timeout_seconds},
                )
            raise LedgerUnavailable(
                "Ledger call timed out", {"timeout_seconds": self.timeout_seconds}
            ) from e

"""Reward grant, stats and catalog endpoints."""

import logging
from datetime import UTC, datetime
from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from culturebridge.core.dependencies import CurrentUserId, RewardEngineDep, get_ledger
from culturebridge.ledger.gateway import SqlLedgerGateway
from culturebridge.rewards.catalog import get_reward_catalog
from culturebridge.rewards.core import start_of_utc_day
from culturebridge.rewards.service import RewardContext
from culturebridge.schemas.common import Envelope
from culturebridge.schemas.rewards import (
    GrantRewardRequest,
    RewardGrantOut,
    RewardStatsOut,
    TransactionOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class CatalogEntryOut(BaseModel):
    kind: str
    category: str
    description: str
    usd_value: Decimal
    token_amount: Decimal
    daily_count_limit: int | None


class CatalogOut(BaseModel):
    token_price_usd: Decimal
    daily_reward_cap: Decimal
    ecosystem_reward_pool: Decimal
    rewards: list[CatalogEntryOut]


@router.post("/grant", response_model=Envelope[RewardGrantOut])
async def grant_reward(
    payload: GrantRewardRequest,
    reward_engine: RewardEngineDep,
    caller_id: CurrentUserId,
):
    """
    Grant a reward for a trigger kind.

    Returns granted=false with a reason when the daily cap or the kind's
    daily limit leaves nothing to credit. Unknown kinds are 400 and ledger
    failures 503.
    """
    grant = await reward_engine.grant_reward(
        payload.user_id,
        payload.kind,
        RewardContext(
            amount=payload.amount,
            description=payload.description,
            tier=payload.tier,
            streak_days=payload.streak_days,
            quality_score=payload.quality_score,
        ),
    )
    logger.info(
        "Reward grant requested",
        extra={
            "requested_by": str(caller_id),
            "user_id": str(payload.user_id),
            "kind": grant.kind,
            "granted": grant.granted,
            "reason": grant.reason,
        },
    )
    return Envelope(data=RewardGrantOut.from_grant(grant))


@router.get("/stats", response_model=Envelope[RewardStatsOut])
async def get_reward_stats(
    user_id: CurrentUserId,
    reward_engine: RewardEngineDep,
    ledger: SqlLedgerGateway = Depends(get_ledger),
):
    """Balance, today's and this month's rewards, and recent transactions."""
    now = datetime.now(UTC)
    today_start = start_of_utc_day(now)
    month_start = today_start.replace(day=1)

    summary = await ledger.reward_summary(user_id, today_start, month_start)
    transactions = await ledger.recent_transactions(user_id)
    daily_cap = reward_engine.daily_cap
    return Envelope(
        data=RewardStatsOut(
            balance=summary["balance"],
            total_earned=summary["total_earned"],
            today=summary["today"],
            this_month=summary["this_month"],
            daily_cap=daily_cap,
            remaining_today=max(Decimal("0.00"), daily_cap - summary["today"]),
            by_kind=summary["by_kind"],
            recent_transactions=[TransactionOut.model_validate(t) for t in transactions],
        )
    )


@router.get("/catalog", response_model=Envelope[CatalogOut])
async def get_catalog():
    """Trigger kinds with their nominal CBT amounts."""
    catalog = get_reward_catalog()
    return Envelope(
        data=CatalogOut(
            token_price_usd=catalog.token_price_usd,
            daily_reward_cap=catalog.daily_reward_cap,
            ecosystem_reward_pool=catalog.ecosystem_reward_pool,
            rewards=[
                CatalogEntryOut(
                    kind=rule.kind.value,
                    category=rule.category,
                    description=rule.description,
                    usd_value=rule.usd_value,
                    token_amount=catalog.token_amount(rule.kind),
                    daily_count_limit=rule.daily_count_limit,
                )
                for rule in catalog.rules
            ],
        )
    )

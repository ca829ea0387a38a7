"""Pydantic schemas for reward grants and reward stats."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from culturebridge.models.ledger import TransactionStatus
from culturebridge.rewards.service import RewardGrant


class RewardGrantOut(BaseModel):
    """Outcome of a grant request."""

    granted: bool
    amount: Decimal
    reason: str
    kind: str
    transaction_id: UUID | None = None

    @classmethod
    def from_grant(cls, grant: RewardGrant) -> "RewardGrantOut":
        return cls(
            granted=grant.granted,
            amount=grant.amount,
            reason=grant.reason,
            kind=grant.kind,
            transaction_id=grant.transaction_id,
        )


class GrantRewardRequest(BaseModel):
    """Internal trigger: grant a reward to a user."""

    user_id: UUID
    kind: str = Field(..., min_length=1, max_length=40, description="Reward trigger kind")
    amount: Decimal | None = Field(None, gt=0, description="Explicit amount; skips catalog pricing")
    description: str | None = Field(None, max_length=255)
    tier: str | None = Field(None, description="User tier (BRONZE..DIAMOND)")
    streak_days: int | None = Field(None, ge=0)
    quality_score: float | None = Field(None, ge=0, le=100)


class TransactionOut(BaseModel):
    """Ledger transaction."""

    id: UUID
    kind: str
    category: str
    amount: Decimal
    description: str
    status: TransactionStatus
    created_at: datetime

    class Config:
        from_attributes = True


class RewardStatsOut(BaseModel):
    """Wallet and daily-cap view for one user."""

    balance: Decimal
    total_earned: Decimal
    today: Decimal
    this_month: Decimal
    daily_cap: Decimal
    remaining_today: Decimal
    by_kind: dict[str, Decimal]
    recent_transactions: list[TransactionOut]

"""
Off-chain CBT ledger.

The gateway is the system of record for balances and transaction history.
Each call runs in its own database session so a ledger failure can never roll
back the domain action that triggered a reward.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from culturebridge.core.app_exceptions import InsufficientCapacity, LedgerUnavailable
from culturebridge.models.ledger import (
    TokenTransaction,
    TransactionStatus,
    TransactionType,
    UserWallet,
)

logger = logging.getLogger(__name__)

CBT_QUANT = Decimal("0.01")


@dataclass(frozen=True)
class CreditReceipt:
    """Result of a successful credit."""

    transaction_id: UUID
    user_id: UUID
    amount: Decimal
    kind: str
    balance: Decimal
    created_at: datetime


class LedgerGateway(Protocol):
    """Balance writes and daily accounting reads."""

    async def credit(
        self,
        user_id: UUID,
        amount: Decimal,
        kind: str,
        description: str,
        *,
        category: str = "GENERAL",
        occurred_at: datetime | None = None,
    ) -> CreditReceipt: ...

    async def daily_total(self, user_id: UUID, since: datetime) -> Decimal: ...

    async def daily_count(self, user_id: UUID, kind: str, since: datetime) -> int: ...

    async def get_balance(self, user_id: UUID) -> Decimal: ...


def _utc(value: datetime) -> datetime:
    # created_at is compared as stored; SQLite drops the offset
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CBT_QUANT, rounding=ROUND_HALF_UP)


class SqlLedgerGateway:
    """
    SQL-backed ledger.

    `credit` writes the wallet balance and the transaction row in a single
    database transaction: both persist or neither does.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        reward_pool_limit: Decimal | None = None,
    ):
        self._session_factory = session_factory
        self._reward_pool_limit = reward_pool_limit

    async def credit(
        self,
        user_id: UUID,
        amount: Decimal,
        kind: str,
        description: str,
        *,
        category: str = "GENERAL",
        occurred_at: datetime | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> CreditReceipt:
        """
        Credit a user's wallet and append one transaction record.

        Raises:
            InsufficientCapacity: The reward pool cannot cover the amount
            LedgerUnavailable: The store failed
        """
        amount = _to_decimal(amount)
        occurred_at = _utc(occurred_at or datetime.now(UTC))

        try:
            async with self._session_factory() as db:
                async with db.begin():
                    if self._reward_pool_limit is not None:
                        distributed = await db.scalar(
                            select(func.coalesce(func.sum(UserWallet.total_earned), 0))
                        )
                        if _to_decimal(distributed) + amount > self._reward_pool_limit:
                            raise InsufficientCapacity(
                                details={
                                    "requested": str(amount),
                                    "pool_limit": str(self._reward_pool_limit),
                                }
                            )

                    wallet = await db.get(UserWallet, user_id)
                    if wallet is None:
                        wallet = UserWallet(
                            user_id=user_id,
                            balance=Decimal("0.00"),
                            total_earned=Decimal("0.00"),
                        )
                        db.add(wallet)
                    wallet.balance = _to_decimal(wallet.balance) + amount
                    wallet.total_earned = _to_decimal(wallet.total_earned) + amount
                    wallet.last_reward_at = occurred_at

                    transaction = TokenTransaction(
                        user_id=user_id,
                        tx_type=TransactionType.REWARD,
                        kind=kind,
                        category=category,
                        amount=amount,
                        description=description[:255],
                        status=TransactionStatus.CONFIRMED,
                        metadata_json=metadata or {},
                        created_at=occurred_at,
                    )
                    db.add(transaction)
                    await db.flush()
                    balance = _to_decimal(wallet.balance)
                    transaction_id = transaction.id
        except SQLAlchemyError as e:
            logger.error(
                "Ledger credit failed",
                extra={"user_id": str(user_id), "kind": kind, "error": str(e)},
            )
            raise LedgerUnavailable("Ledger credit failed", {"kind": kind}) from e

        logger.info(
            "Ledger credit",
            extra={"user_id": str(user_id), "kind": kind, "amount": str(amount)},
        )
        return CreditReceipt(
            transaction_id=transaction_id,
            user_id=user_id,
            amount=amount,
            kind=kind,
            balance=balance,
            created_at=occurred_at,
        )

    async def daily_total(self, user_id: UUID, since: datetime) -> Decimal:
        """Sum of confirmed reward credits since `since`."""
        stmt = select(func.coalesce(func.sum(TokenTransaction.amount), 0)).where(
            TokenTransaction.user_id == user_id,
            TokenTransaction.tx_type == TransactionType.REWARD,
            TokenTransaction.status == TransactionStatus.CONFIRMED,
            TokenTransaction.created_at >= _utc(since),
        )
        return _to_decimal(await self._scalar(stmt))

    async def daily_count(self, user_id: UUID, kind: str, since: datetime) -> int:
        """Number of confirmed credits of one kind since `since`."""
        stmt = select(func.count(TokenTransaction.id)).where(
            TokenTransaction.user_id == user_id,
            TokenTransaction.kind == kind,
            TokenTransaction.status == TransactionStatus.CONFIRMED,
            TokenTransaction.created_at >= _utc(since),
        )
        return int(await self._scalar(stmt) or 0)

    async def get_balance(self, user_id: UUID) -> Decimal:
        """Current wallet balance (0 for users never credited)."""
        stmt = select(UserWallet.balance).where(UserWallet.user_id == user_id)
        return _to_decimal(await self._scalar(stmt))

    async def recent_transactions(self, user_id: UUID, limit: int = 20) -> list[TokenTransaction]:
        """Newest transactions first."""
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(TokenTransaction)
                    .where(TokenTransaction.user_id == user_id)
                    .order_by(TokenTransaction.created_at.desc())
                    .limit(limit)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise LedgerUnavailable("Ledger read failed") from e

    async def reward_summary(self, user_id: UUID, today_start: datetime, month_start: datetime) -> dict:
        """
        Reward totals for the stats view.

        Returns:
            Dict with balance, total_earned, today, this_month and by_kind totals
        """
        try:
            async with self._session_factory() as db:
                wallet = await db.get(UserWallet, user_id)
                by_kind_rows = await db.execute(
                    select(TokenTransaction.kind, func.sum(TokenTransaction.amount))
                    .where(
                        TokenTransaction.user_id == user_id,
                        TokenTransaction.tx_type == TransactionType.REWARD,
                        TokenTransaction.status == TransactionStatus.CONFIRMED,
                    )
                    .group_by(TokenTransaction.kind)
                )
                by_kind = {kind: _to_decimal(total) for kind, total in by_kind_rows.all()}
        except SQLAlchemyError as e:
            raise LedgerUnavailable("Ledger read failed") from e

        return {
            "balance": _to_decimal(wallet.balance if wallet else None),
            "total_earned": _to_decimal(wallet.total_earned if wallet else None),
            "today": await self.daily_total(user_id, today_start),
            "this_month": await self.daily_total(user_id, month_start),
            "by_kind": by_kind,
        }

    async def _scalar(self, stmt) -> Any:
        try:
            async with self._session_factory() as db:
                return await db.scalar(stmt)
        except SQLAlchemyError as e:
            raise LedgerUnavailable("Ledger read failed") from e

"""In-memory stand-ins for the ledger."""

import asyncio
import uuid
from collections import defaultdict
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from culturebridge.ledger.gateway import CreditReceipt


class FakeLedger:
    """
    Ledger kept in memory.

    Every call yields to the event loop first so concurrent grants interleave
    the way they would against a real store.
    """

    def __init__(self, delay: float = 0.0, fail_with: Exception | None = None):
        self.delay = delay
        self.fail_with = fail_with
        self.receipts: list[CreditReceipt] = []
        self.seeded: dict[UUID, Decimal] = defaultdict(lambda: Decimal("0.00"))
        self.calls = 0

    def seed_daily_total(self, user_id: UUID, amount: Decimal) -> None:
        self.seeded[user_id] += amount

    async def _enter(self) -> None:
        self.calls += 1
        await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with

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
        await self._enter()
        receipt = CreditReceipt(
            transaction_id=uuid.uuid4(),
            user_id=user_id,
            amount=amount,
            kind=kind,
            balance=await self.get_balance(user_id) + amount,
            created_at=occurred_at or datetime.now(UTC),
        )
        self.receipts.append(receipt)
        return receipt

    async def daily_total(self, user_id: UUID, since: datetime) -> Decimal:
        await self._enter()
        credited = sum(
            (r.amount for r in self.receipts if r.user_id == user_id and r.created_at >= since),
            Decimal("0.00"),
        )
        return self.seeded[user_id] + credited

    async def daily_count(self, user_id: UUID, kind: str, since: datetime) -> int:
        await self._enter()
        return sum(
            1
            for r in self.receipts
            if r.user_id == user_id and r.kind == kind and r.created_at >= since
        )

    async def get_balance(self, user_id: UUID) -> Decimal:
        if self.fail_with is not None:
            raise self.fail_with
        return sum((r.amount for r in self.receipts if r.user_id == user_id), Decimal("0.00"))

    def credited(self, user_id: UUID) -> Decimal:
        return sum((r.amount for r in self.receipts if r.user_id == user_id), Decimal("0.00"))

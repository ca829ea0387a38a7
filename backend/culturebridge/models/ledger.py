"""Off-chain CBT ledger models."""

import uuid
from enum import Enum as PyEnum

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    Index,
    Numeric,
    String,
    Uuid,
)
from sqlalchemy.sql import func

from culturebridge.db.base import Base


class TransactionType(str, PyEnum):
    """Ledger transaction type."""

    REWARD = "REWARD"
    TRANSFER = "TRANSFER"
    CULTURAL_EXCHANGE = "CULTURAL_EXCHANGE"
    MARKETPLACE = "MARKETPLACE"


class TransactionStatus(str, PyEnum):
    """Ledger transaction status."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"


class UserWallet(Base):
    """Per-user CBT balance."""

    __tablename__ = "user_wallets"

    user_id = Column(Uuid(as_uuid=True), primary_key=True)
    balance = Column(Numeric(18, 2), nullable=False, default=0)
    total_earned = Column(Numeric(18, 2), nullable=False, default=0)
    last_reward_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)


class TokenTransaction(Base):
    """Transaction history entry; one per credit."""

    __tablename__ = "token_transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False)
    tx_type = Column(
        Enum(TransactionType, name="token_transaction_type"),
        nullable=False,
        default=TransactionType.REWARD,
    )
    kind = Column(String(40), nullable=False)  # reward trigger kind
    category = Column(String(40), nullable=False, default="GENERAL")
    amount = Column(Numeric(18, 2), nullable=False)
    description = Column(String(255), nullable=False, default="")
    status = Column(
        Enum(TransactionStatus, name="token_transaction_status"),
        nullable=False,
        default=TransactionStatus.CONFIRMED,
    )
    metadata_json = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_token_transactions_user_created", "user_id", "created_at"),
        Index("ix_token_transactions_user_kind_created", "user_id", "kind", "created_at"),
    )

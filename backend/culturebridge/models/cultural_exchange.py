"""Cultural exchange models."""

import uuid
from enum import Enum as PyEnum

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from culturebridge.db.base import Base


class ExchangeStatus(str, PyEnum):
    """Cultural exchange status."""

    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class ParticipantRole(str, PyEnum):
    """Role within an exchange."""

    MODERATOR = "MODERATOR"
    PARTICIPANT = "PARTICIPANT"


class CulturalExchange(Base):
    """A cultural exchange activity."""

    __tablename__ = "cultural_exchanges"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    creator_id = Column(Uuid(as_uuid=True), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    target_languages_json = Column(JSON, nullable=False, default=list)
    status = Column(
        Enum(ExchangeStatus, name="exchange_status"),
        nullable=False,
        default=ExchangeStatus.ACTIVE,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    participants = relationship(
        "CulturalExchangeParticipant",
        back_populates="exchange",
        cascade="all, delete-orphan",
    )
    languages = relationship(
        "CulturalExchangeLanguage",
        back_populates="exchange",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("ix_cultural_exchanges_status", "status"),)


class CulturalExchangeParticipant(Base):
    """Membership of a user in an exchange."""

    __tablename__ = "cultural_exchange_participants"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    exchange_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("cultural_exchanges.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = Column(Uuid(as_uuid=True), nullable=False)
    role = Column(
        Enum(ParticipantRole, name="exchange_participant_role"),
        nullable=False,
        default=ParticipantRole.PARTICIPANT,
    )
    joined_at = Column(DateTime(timezone=True), nullable=False)

    exchange = relationship("CulturalExchange", back_populates="participants")

    __table_args__ = (
        UniqueConstraint("exchange_id", "user_id", name="uq_exchange_participant"),
        Index("ix_exchange_participants_user_id", "user_id"),
    )


class CulturalExchangeLanguage(Base):
    """One target language of an exchange; indexed for per-language listing."""

    __tablename__ = "cultural_exchange_languages"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    exchange_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("cultural_exchanges.id", ondelete="CASCADE"),
        nullable=False,
    )
    language = Column(String(16), nullable=False)

    exchange = relationship("CulturalExchange", back_populates="languages")

    __table_args__ = (
        UniqueConstraint("exchange_id", "language", name="uq_exchange_language"),
        Index("ix_exchange_languages_language", "language"),
    )

"""Cultural exchange participation."""

import logging
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from culturebridge.core.app_exceptions import InputValidationError, NotFoundError
from culturebridge.models.cultural_exchange import (
    CulturalExchange,
    CulturalExchangeLanguage,
    CulturalExchangeParticipant,
    ExchangeStatus,
    ParticipantRole,
)

logger = logging.getLogger(__name__)


class ParticipationCounter(Protocol):
    """Supplies participation counts for the CULTURAL_EXPLORER achievement."""

    async def count_participations(self, user_id: UUID) -> int: ...


class SqlParticipationCounter:
    """Counts exchange memberships in the database."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_participations(self, user_id: UUID) -> int:
        count = await self.db.scalar(
            select(func.count(CulturalExchangeParticipant.id)).where(
                CulturalExchangeParticipant.user_id == user_id
            )
        )
        return int(count or 0)


async def get_exchange(db: AsyncSession, exchange_id: UUID) -> CulturalExchange:
    """Exchange with participants; NotFoundError if absent."""
    result = await db.execute(
        select(CulturalExchange)
        .where(CulturalExchange.id == exchange_id)
        .options(selectinload(CulturalExchange.participants))
        .execution_options(populate_existing=True)
    )
    exchange = result.scalar_one_or_none()
    if exchange is None:
        raise NotFoundError("Cultural exchange not found", {"exchange_id": str(exchange_id)})
    return exchange


async def create_exchange(
    db: AsyncSession,
    creator_id: UUID,
    title: str,
    description: str,
    target_languages: list[str],
    now: datetime | None = None,
) -> CulturalExchange:
    """
    Create an exchange; the creator joins as MODERATOR.

    Raises:
        InputValidationError: Blank title or no target language
    """
    if not title or not title.strip():
        raise InputValidationError("Title must not be empty")
    languages = list(
        dict.fromkeys(lang.strip() for lang in target_languages if lang and lang.strip())
    )
    if not languages:
        raise InputValidationError("At least one target language is required")

    now = now or datetime.now(UTC)
    exchange = CulturalExchange(
        creator_id=creator_id,
        title=title.strip(),
        description=description or "",
        target_languages_json=languages,
        languages=[CulturalExchangeLanguage(language=lang) for lang in languages],
        status=ExchangeStatus.ACTIVE,
        created_at=now,
        participants=[
            CulturalExchangeParticipant(
                user_id=creator_id,
                role=ParticipantRole.MODERATOR,
                joined_at=now,
            )
        ],
    )
    db.add(exchange)
    await db.commit()
    logger.info(f"Cultural exchange {exchange.id} created by {creator_id}")
    return exchange


async def join_exchange(
    db: AsyncSession,
    exchange_id: UUID,
    user_id: UUID,
    now: datetime | None = None,
) -> CulturalExchange:
    """
    Add a participant to an ACTIVE exchange.

    Raises:
        NotFoundError: No such exchange
        InputValidationError: Exchange closed or user already a participant
    """
    exchange = await get_exchange(db, exchange_id)
    if exchange.status != ExchangeStatus.ACTIVE:
        raise InputValidationError("Cultural exchange is closed", {"exchange_id": str(exchange_id)})
    if any(p.user_id == user_id for p in exchange.participants):
        raise InputValidationError("Already a participant", {"exchange_id": str(exchange_id)})

    exchange.participants.append(
        CulturalExchangeParticipant(
            user_id=user_id,
            role=ParticipantRole.PARTICIPANT,
            joined_at=now or datetime.now(UTC),
        )
    )
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise InputValidationError("Already a participant", {"exchange_id": str(exchange_id)}) from e
    logger.info(f"User {user_id} joined cultural exchange {exchange_id}")
    return exchange


async def list_active_exchanges(
    db: AsyncSession,
    language: str | None = None,
    limit: int = 20,
    with_participants: bool = True,
) -> list[CulturalExchange]:
    """
    Active exchanges, newest first, optionally for one target language.

    Participants are only loaded when asked for; without them the rows must
    not be used for membership checks.
    """
    stmt = (
        select(CulturalExchange)
        .where(CulturalExchange.status == ExchangeStatus.ACTIVE)
        .order_by(CulturalExchange.created_at.desc())
        .limit(limit)
    )
    if language:
        stmt = stmt.where(
            CulturalExchange.languages.any(CulturalExchangeLanguage.language == language)
        )
    if with_participants:
        stmt = stmt.options(selectinload(CulturalExchange.participants))
    result = await db.execute(stmt)
    return list(result.scalars().all())

"""
Learning service entry points.

Orchestrates the session lifecycle, progress tracker, achievement evaluator
and reward engine. Reward grants are best effort: the learning or exchange
action is committed first and a failed grant is reported as a warning.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from culturebridge.core.app_exceptions import LedgerUnavailable, NotFoundError
from culturebridge.exchanges import service as exchange_service
from culturebridge.exchanges.service import ParticipationCounter
from culturebridge.learning.achievements.service import (
    AchievementAward,
    build_achievement_context,
    evaluate_achievements,
    list_achievements,
)
from culturebridge.learning.constants import SKILL_SESSION_TYPE
from culturebridge.learning.progress.core import SessionSummary, weakest_skill
from culturebridge.learning.progress.service import (
    add_cbt_earned,
    find_language,
    get_progress,
    record_session_completion,
)
from culturebridge.learning.sessions import service as session_service
from culturebridge.learning.sessions.core import as_utc
from culturebridge.models.cultural_exchange import CulturalExchange
from culturebridge.models.learning_progress import UserAchievement, UserLearningProgress
from culturebridge.models.learning_session import LearningSession, ProficiencyLevel, SessionType
from culturebridge.rewards.catalog import RewardKind
from culturebridge.rewards.service import RewardContext, RewardEngine, RewardGrant

logger = logging.getLogger(__name__)

# Re-exported lifecycle operations
create_learning_session = session_service.create_learning_session
complete_exercise = session_service.complete_exercise
abandon_session = session_service.abandon_session

MAX_EXCHANGE_RECOMMENDATIONS = 3


@dataclass
class SessionCompletion:
    """Everything a session completion produced."""

    session: LearningSession
    reward: RewardGrant
    achievements: list[AchievementAward]
    progress: UserLearningProgress | None
    total_cbt_credited: Decimal
    warnings: list[str] = field(default_factory=list)


@dataclass
class ExchangeAction:
    exchange: CulturalExchange
    reward: RewardGrant
    achievements: list[AchievementAward]
    warnings: list[str] = field(default_factory=list)


@dataclass
class LearningStats:
    progress: UserLearningProgress
    achievements: list[UserAchievement]
    recent_sessions: list[LearningSession]
    cultural_exchange_count: int
    wallet_balance: Decimal | None
    warnings: list[str] = field(default_factory=list)


def _reward_warning(label: str, grant: RewardGrant) -> str | None:
    """Warning text for a grant that credited nothing."""
    if grant.granted:
        return None
    return f"{label} reward not granted: {grant.reason}"


async def complete_session(
    db: AsyncSession,
    user_id: UUID,
    session_id: UUID,
    reward_engine: RewardEngine,
    counter: ParticipationCounter,
    now: datetime | None = None,
) -> SessionCompletion:
    """
    Complete a session and run its side effects.

    Order: lifecycle completion (committed) -> progress update -> session
    reward (LANGUAGE_LEARNING, computed amount) -> achievements -> cumulative
    CBT on progress. Only the lifecycle step can fail the call.

    Raises:
        NotFoundError: Session absent or not owned by the user
        SessionAlreadyTerminal: Session already COMPLETED or ABANDONED
    """
    now = as_utc(now or datetime.now(UTC))
    warnings: list[str] = []

    session = await session_service.complete_session(db, user_id, session_id, now=now)
    summary = SessionSummary(
        duration_seconds=session.duration_seconds or 0,
        accuracy=session.score_pct,
        session_type=session.session_type,
        exercise_count=len(session.exercises),
    )
    language = session.target_language
    session_reward = session.reward_cbt or Decimal("0.00")
    title = session.title

    try:
        await record_session_completion(db, user_id, language, summary, now.date())
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            "Progress update failed",
            extra={"user_id": str(user_id), "session_id": str(session_id), "error": str(e)},
        )
        warnings.append("Progress update failed")

    reward = await reward_engine.grant_reward_safely(
        user_id,
        RewardKind.LANGUAGE_LEARNING,
        RewardContext(amount=session_reward, description=f"Completed {title}", now=now),
    )
    warning = _reward_warning("Session", reward)
    if warning:
        warnings.append(warning)
    credited = reward.amount if reward.granted else Decimal("0.00")

    context = await build_achievement_context(
        db, user_id, counter, language=language, session_accuracy=summary.accuracy
    )
    awards = await evaluate_achievements(db, user_id, context, reward_engine, now=now)
    for award in awards:
        if award.reward.granted:
            credited += award.reward.amount
        else:
            warnings.append(f"Achievement {award.code} reward not granted: {award.reward.reason}")

    if credited > 0:
        await add_cbt_earned(db, user_id, credited)
        await db.commit()

    return SessionCompletion(
        session=await session_service.get_owned_session(db, session_id, user_id, refresh=True),
        reward=reward,
        achievements=awards,
        progress=await get_progress(db, user_id, refresh=True),
        total_cbt_credited=credited,
        warnings=warnings,
    )


async def get_user_learning_stats(
    db: AsyncSession,
    user_id: UUID,
    counter: ParticipationCounter,
    reward_engine: RewardEngine | None = None,
) -> LearningStats:
    """
    Progress, achievements, recent sessions, exchange count and balance.

    Raises:
        NotFoundError: User has no learning progress yet
    """
    progress = await get_progress(db, user_id, refresh=True)
    if progress is None:
        raise NotFoundError("Learning progress not found", {"user_id": str(user_id)})

    warnings: list[str] = []
    balance = None
    if reward_engine is not None:
        try:
            balance = await reward_engine.ledger.get_balance(user_id)
        except LedgerUnavailable:
            warnings.append("Wallet balance unavailable")

    return LearningStats(
        progress=progress,
        achievements=await list_achievements(db, user_id),
        recent_sessions=await session_service.list_recent_sessions(db, user_id),
        cultural_exchange_count=await counter.count_participations(user_id),
        wallet_balance=balance,
        warnings=warnings,
    )


async def get_recommended_content(
    db: AsyncSession,
    user_id: UUID,
    target_language: str,
) -> list[dict[str, Any]]:
    """
    Recommendations for what to study next.

    New users get beginner vocabulary and cultural-context sessions. Known
    users get a HIGH-priority session for their weakest skill in the target
    language, followed by up to three active exchanges for that language.
    """
    progress = await get_progress(db, user_id)
    if progress is None:
        return [
            {
                "type": SessionType.VOCABULARY.value,
                "level": ProficiencyLevel.BEGINNER.value,
                "title": "Essential vocabulary",
                "description": "Learn the 100 most common words",
                "priority": "HIGH",
            },
            {
                "type": SessionType.CULTURAL_CONTEXT.value,
                "level": ProficiencyLevel.BEGINNER.value,
                "title": "Culture basics",
                "description": "Discover the basic cultural background",
                "priority": "MEDIUM",
            },
        ]

    lang = find_language(progress, target_language)
    if lang is None:
        return []

    skill = weakest_skill(lang.skills_json or {})
    recommendations: list[dict[str, Any]] = [
        {
            "type": SKILL_SESSION_TYPE[skill].value,
            "level": lang.current_level.value,
            "title": f"{skill.value.title()} practice",
            "description": f"Focused training for your {skill.value} skill",
            "priority": "HIGH",
        }
    ]
    exchanges = await exchange_service.list_active_exchanges(
        db, target_language, limit=MAX_EXCHANGE_RECOMMENDATIONS, with_participants=False
    )
    recommendations.extend(
        {
            "type": "CULTURAL_EXCHANGE",
            "id": str(exchange.id),
            "title": exchange.title,
            "description": exchange.description,
            "priority": "MEDIUM",
        }
        for exchange in exchanges
    )
    return recommendations


async def create_cultural_exchange(
    db: AsyncSession,
    user_id: UUID,
    title: str,
    description: str,
    target_languages: list[str],
    reward_engine: RewardEngine,
    counter: ParticipationCounter,
    now: datetime | None = None,
) -> ExchangeAction:
    """Create an exchange, then reward the creator (best effort)."""
    exchange = await exchange_service.create_exchange(
        db, user_id, title, description, target_languages, now=now
    )
    return await _reward_exchange_action(
        db, user_id, exchange, "Created a cultural exchange", reward_engine, counter, now
    )


async def join_cultural_exchange(
    db: AsyncSession,
    user_id: UUID,
    exchange_id: UUID,
    reward_engine: RewardEngine,
    counter: ParticipationCounter,
    now: datetime | None = None,
) -> ExchangeAction:
    """Join an exchange, then reward the participant (best effort)."""
    exchange = await exchange_service.join_exchange(db, exchange_id, user_id, now=now)
    return await _reward_exchange_action(
        db, user_id, exchange, "Joined a cultural exchange", reward_engine, counter, now
    )


async def _reward_exchange_action(
    db: AsyncSession,
    user_id: UUID,
    exchange: CulturalExchange,
    description: str,
    reward_engine: RewardEngine,
    counter: ParticipationCounter,
    now: datetime | None,
) -> ExchangeAction:
    warnings: list[str] = []
    reward = await reward_engine.grant_reward_safely(
        user_id,
        RewardKind.CULTURAL_EXCHANGE,
        RewardContext(description=description, now=now),
    )
    warning = _reward_warning("Exchange", reward)
    if warning:
        warnings.append(warning)

    context = await build_achievement_context(db, user_id, counter)
    awards = await evaluate_achievements(db, user_id, context, reward_engine, now=now)
    credited = sum((a.reward.amount for a in awards if a.reward.granted), Decimal("0.00"))
    if credited > 0:
        await add_cbt_earned(db, user_id, credited)
        await db.commit()

    return ExchangeAction(
        exchange=await exchange_service.get_exchange(db, exchange.id),
        reward=reward,
        achievements=awards,
        warnings=warnings,
    )

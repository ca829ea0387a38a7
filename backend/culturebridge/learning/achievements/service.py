"""
Achievement evaluator.

Each achievement is granted at most once per user. The granted set is read
first; the unique (user_id, achievement) constraint is the final guard. A
grant is committed before its reward is requested, and a failure in one
achievement never stops evaluation of the others.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from culturebridge.exchanges.service import ParticipationCounter
from culturebridge.learning.achievements.core import (
    ACHIEVEMENT_RULES,
    AchievementContext,
    AchievementRule,
    pending_rules,
)
from culturebridge.learning.constants import Skill
from culturebridge.learning.progress.service import current_streak, find_language, get_progress
from culturebridge.models.learning_progress import UserAchievement
from culturebridge.rewards.catalog import RewardKind
from culturebridge.rewards.service import RewardContext, RewardEngine, RewardGrant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementAward:
    """A newly granted achievement and the outcome of its reward."""

    code: str
    description: str
    cbt_reward: Decimal
    reward: RewardGrant


async def get_granted_codes(db: AsyncSession, user_id: UUID) -> set[str]:
    result = await db.execute(
        select(UserAchievement.achievement).where(UserAchievement.user_id == user_id)
    )
    return set(result.scalars().all())


async def list_achievements(db: AsyncSession, user_id: UUID) -> list[UserAchievement]:
    result = await db.execute(
        select(UserAchievement)
        .where(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.earned_at)
    )
    return list(result.scalars().all())


async def build_achievement_context(
    db: AsyncSession,
    user_id: UUID,
    counter: ParticipationCounter,
    language: str | None = None,
    session_accuracy: float | None = None,
) -> AchievementContext:
    """Collect progress, session and participation facts into one context."""
    progress = await get_progress(db, user_id)
    total_lessons = 0
    streak = 0
    words_learned = 0
    if progress is not None:
        total_lessons = progress.total_lessons_completed or 0
        streak = current_streak(progress)
        if language:
            lang = find_language(progress, language)
            if lang is not None:
                vocabulary = (lang.skills_json or {}).get(Skill.VOCABULARY.value, {})
                words_learned = int(vocabulary.get("words_learned", 0))

    return AchievementContext(
        total_lessons_completed=total_lessons,
        current_streak=streak,
        session_accuracy=session_accuracy,
        language=language,
        words_learned=words_learned,
        cultural_exchange_count=await counter.count_participations(user_id),
    )


async def evaluate_achievements(
    db: AsyncSession,
    user_id: UUID,
    context: AchievementContext,
    reward_engine: RewardEngine,
    now: datetime | None = None,
    rules: tuple[AchievementRule, ...] = ACHIEVEMENT_RULES,
) -> list[AchievementAward]:
    """
    Grant every newly satisfied achievement.

    Args:
        db: Database session
        user_id: User ID
        context: Evaluation context
        reward_engine: Engine used for the one-time LEARNING_REWARD grants
        now: Grant time
        rules: Ordered rules to evaluate

    Returns:
        Newly granted achievements in evaluation order
    """
    now = now or datetime.now(UTC)
    granted = await get_granted_codes(db, user_id)
    awards: list[AchievementAward] = []

    for rule in pending_rules(granted, rules):
        code = rule.code.value
        try:
            satisfied = rule.condition(context)
        except Exception as e:
            logger.error(
                "Achievement condition failed",
                extra={"user_id": str(user_id), "achievement": code, "error": str(e)},
            )
            continue
        if not satisfied:
            continue

        db.add(
            UserAchievement(
                user_id=user_id,
                achievement=code,
                description=rule.description,
                cbt_reward=rule.cbt_reward,
                language=context.language,
                earned_at=now,
            )
        )
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.info(
                "Achievement already granted",
                extra={"user_id": str(user_id), "achievement": code},
            )
            continue
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "Achievement grant failed",
                extra={"user_id": str(user_id), "achievement": code, "error": str(e)},
            )
            continue

        granted.add(code)
        reward = await reward_engine.grant_reward_safely(
            user_id,
            RewardKind.LEARNING_REWARD,
            RewardContext(
                amount=rule.cbt_reward,
                description=f"Achievement earned: {rule.description}",
                now=now,
            ),
        )
        logger.info(
            "Achievement granted",
            extra={"user_id": str(user_id), "achievement": code, "rewarded": reward.granted},
        )
        awards.append(AchievementAward(code, rule.description, rule.cbt_reward, reward))

    return awards

"""
Progress tracker service.

Loads and updates UserLearningProgress / UserLanguageProgress rows. Functions
flush but leave the commit to the caller.
"""

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from culturebridge.learning.progress.core import (
    SessionSummary,
    apply_skill_update,
    apply_weekly_goals,
    experience_gain,
    new_skills,
    new_weekly_goals,
    proficiency_for,
    raise_level,
    rank_for,
    update_streak,
    weekly_increments,
)
from culturebridge.models.learning_progress import UserLanguageProgress, UserLearningProgress
from culturebridge.models.learning_session import ProficiencyLevel

logger = logging.getLogger(__name__)


async def get_progress(db: AsyncSession, user_id: UUID, refresh: bool = False) -> UserLearningProgress | None:
    """Progress record with its languages, or None for users with no session yet."""
    stmt = (
        select(UserLearningProgress)
        .where(UserLearningProgress.user_id == user_id)
        .options(selectinload(UserLearningProgress.languages))
    )
    if refresh:
        stmt = stmt.execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


def find_language(progress: UserLearningProgress, language: str) -> UserLanguageProgress | None:
    return next((lang for lang in progress.languages if lang.language == language), None)


async def ensure_language_progress(
    db: AsyncSession,
    user_id: UUID,
    language: str,
    target_level: ProficiencyLevel = ProficiencyLevel.INTERMEDIATE,
) -> tuple[UserLearningProgress, UserLanguageProgress]:
    """
    Get or lazily create the progress record and its entry for `language`.

    Returns:
        (progress, language_progress)
    """
    progress = await get_progress(db, user_id)
    if progress is None:
        progress = UserLearningProgress(
            user_id=user_id,
            total_lessons_completed=0,
            total_study_minutes=0.0,
            average_session_minutes=0.0,
            experience_points=0,
            rank="NOVICE",
            total_cbt_earned=Decimal("0.00"),
            languages=[],
        )
        db.add(progress)
        logger.info(f"Created learning progress for user {user_id}")

    lang = find_language(progress, language)
    if lang is None:
        lang = UserLanguageProgress(
            user_id=user_id,
            language=language,
            current_level=ProficiencyLevel.BEGINNER,
            target_level=target_level,
            streak_days=0,
            longest_streak=0,
            last_study_date=None,
            total_study_minutes=0.0,
            skills_json=new_skills(),
            weekly_goals_json=new_weekly_goals(),
            week_start=None,
        )
        progress.languages.append(lang)

    await db.flush()
    return progress, lang


def current_streak(progress: UserLearningProgress) -> int:
    """User streak: the best streak over all languages."""
    return max((lang.streak_days or 0 for lang in progress.languages), default=0)


async def record_session_completion(
    db: AsyncSession,
    user_id: UUID,
    language: str,
    summary: SessionSummary,
    today: date,
) -> UserLearningProgress:
    """
    Fold a completed session into the user's progress.

    Updates, for the session's language: study time, streak, the trained
    skill, weekly goals (reset lazily on a new ISO week) and proficiency
    tier. Then the overall stats: lessons, minutes, average, experience and
    rank.

    Args:
        db: Database session
        user_id: User ID
        language: Session target language
        summary: Duration, accuracy, type and exercise count of the session
        today: UTC calendar day of completion

    Returns:
        Updated progress record
    """
    progress, lang = await ensure_language_progress(db, user_id, language)

    lang.total_study_minutes = round((lang.total_study_minutes or 0.0) + summary.minutes, 2)

    streak, longest = update_streak(
        lang.streak_days or 0,
        lang.longest_streak or 0,
        lang.last_study_date,
        today,
    )
    lang.streak_days = streak
    lang.longest_streak = longest
    lang.last_study_date = today

    skills = apply_skill_update(lang.skills_json, summary)
    lang.skills_json = skills
    lang.current_level = raise_level(lang.current_level, proficiency_for(skills))

    goals, week_start = apply_weekly_goals(
        lang.weekly_goals_json, lang.week_start, today, weekly_increments(summary)
    )
    lang.weekly_goals_json = goals
    lang.week_start = week_start

    progress.total_lessons_completed = (progress.total_lessons_completed or 0) + 1
    progress.total_study_minutes = round((progress.total_study_minutes or 0.0) + summary.minutes, 2)
    progress.average_session_minutes = round(
        progress.total_study_minutes / progress.total_lessons_completed, 2
    )
    progress.experience_points = (progress.experience_points or 0) + experience_gain(
        summary.accuracy, summary.minutes, current_streak(progress)
    )
    progress.rank = rank_for(progress.experience_points)

    await db.flush()
    logger.info(
        "Progress updated",
        extra={
            "user_id": str(user_id),
            "language": language,
            "streak_days": streak,
            "experience_points": progress.experience_points,
        },
    )
    return progress


async def add_cbt_earned(db: AsyncSession, user_id: UUID, amount: Decimal) -> None:
    """Accumulate credited learning rewards on the progress record."""
    if amount <= 0:
        return
    await db.execute(
        update(UserLearningProgress)
        .where(UserLearningProgress.user_id == user_id)
        .values(total_cbt_earned=UserLearningProgress.total_cbt_earned + amount)
        .execution_options(synchronize_session=False)
    )

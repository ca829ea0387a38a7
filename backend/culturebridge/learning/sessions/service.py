"""Learning session persistence: create, load, answer, complete, abandon."""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from culturebridge.core.app_exceptions import InputValidationError, NotFoundError
from culturebridge.core.config import settings
from culturebridge.learning.content import (
    ExerciseContent,
    SessionContent,
    generate_learning_content,
    generate_materials,
)
from culturebridge.learning.progress.service import ensure_language_progress
from culturebridge.learning.sessions.core import abandon, complete, record_exercise_answer
from culturebridge.models.learning_session import (
    ExerciseResult,
    LearningExercise,
    LearningSession,
    ProficiencyLevel,
    SessionStatus,
    SessionType,
)

logger = logging.getLogger(__name__)


def parse_session_type(value: SessionType | str) -> SessionType:
    try:
        return SessionType(value)
    except ValueError as e:
        raise InputValidationError(
            f"Unsupported session type: {value}", {"session_type": str(value)}
        ) from e


def parse_level(value: ProficiencyLevel | str) -> ProficiencyLevel:
    try:
        return ProficiencyLevel(value)
    except ValueError as e:
        raise InputValidationError(f"Unknown proficiency level: {value}", {"level": str(value)}) from e


async def create_learning_session(
    db: AsyncSession,
    user_id: UUID,
    session_type: SessionType | str,
    target_language: str,
    native_language: str,
    level: ProficiencyLevel | str = ProficiencyLevel.BEGINNER,
    custom_exercises: list[ExerciseContent] | None = None,
    title: str | None = None,
    description: str | None = None,
    now: datetime | None = None,
) -> LearningSession:
    """
    Create an IN_PROGRESS session.

    Content comes from the session type's template unless custom exercises
    are supplied. The user's progress record (and the entry for the target
    language) is created lazily here.

    Raises:
        InputValidationError: Unknown session type or level, blank language,
            or an empty custom exercise list
    """
    session_type = parse_session_type(session_type)
    level = parse_level(level)
    if not target_language or not target_language.strip():
        raise InputValidationError("Target language is required")
    if not native_language or not native_language.strip():
        raise InputValidationError("Native language is required")

    if custom_exercises is not None:
        if not custom_exercises:
            raise InputValidationError("Custom content must contain at least one exercise")
        content = SessionContent(
            title=title or f"{session_type.value.replace('_', ' ').title()} session",
            description=description or "",
            materials=generate_materials(session_type, target_language, level),
            exercises=list(custom_exercises),
        )
    else:
        content = generate_learning_content(session_type, target_language, native_language, level)

    await ensure_language_progress(db, user_id, target_language)

    now = now or datetime.now(UTC)
    session = LearningSession(
        user_id=user_id,
        session_type=session_type,
        target_language=target_language,
        native_language=native_language,
        level=level,
        title=title or content.title,
        description=description or content.description,
        materials_json=content.materials,
        status=SessionStatus.IN_PROGRESS,
        started_at=now,
        ended_at=None,
        duration_seconds=None,
        score_correct=0,
        score_total=len(content.exercises),
        score_pct=0.0,
        reward_cbt=None,
        created_at=now,
        exercises=[
            LearningExercise(
                position=position,
                exercise_type=exercise.exercise_type,
                points=exercise.points,
                question=exercise.question,
                options_json=exercise.options,
                correct_answer=exercise.correct_answer,
                explanation=exercise.explanation,
            )
            for position, exercise in enumerate(content.exercises)
        ],
        results=[],
    )
    db.add(session)
    await db.commit()

    logger.info(
        "Learning session created",
        extra={
            "user_id": str(user_id),
            "session_id": str(session.id),
            "session_type": session_type.value,
            "exercises": len(content.exercises),
        },
    )
    return session


async def get_owned_session(
    db: AsyncSession,
    session_id: UUID,
    user_id: UUID,
    refresh: bool = False,
) -> LearningSession:
    """
    Load a session with exercises and results.

    Raises:
        NotFoundError: Absent, or owned by another user
    """
    stmt = (
        select(LearningSession)
        .where(LearningSession.id == session_id)
        .options(
            selectinload(LearningSession.exercises),
            selectinload(LearningSession.results),
        )
    )
    if refresh:
        stmt = stmt.execution_options(populate_existing=True)
    result = await db.execute(stmt)
    session = result.scalar_one_or_none()

    if session is None or session.user_id != user_id:
        raise NotFoundError("Learning session not found", {"session_id": str(session_id)})
    return session


async def complete_exercise(
    db: AsyncSession,
    user_id: UUID,
    session_id: UUID,
    index: int,
    answer: str,
    time_spent_seconds: int = 0,
    now: datetime | None = None,
) -> tuple[LearningSession, ExerciseResult]:
    """Record an answer and persist the recomputed score."""
    session = await get_owned_session(db, session_id, user_id)
    result = record_exercise_answer(
        session, index, answer, time_spent_seconds, now or datetime.now(UTC)
    )
    await db.commit()
    return session, result


async def complete_session(
    db: AsyncSession,
    user_id: UUID,
    session_id: UUID,
    now: datetime | None = None,
) -> LearningSession:
    """
    Move the session to COMPLETED and store its computed reward.

    The reward is not credited here.
    """
    session = await get_owned_session(db, session_id, user_id)
    reward = complete(
        session,
        now or datetime.now(UTC),
        base_reward=settings.SESSION_BASE_REWARD,
        speed_bonus=settings.SESSION_SPEED_BONUS,
        speed_threshold_seconds=settings.SESSION_SPEED_BONUS_THRESHOLD_SECONDS,
    )
    await db.commit()
    logger.info(
        "Learning session completed",
        extra={
            "user_id": str(user_id),
            "session_id": str(session_id),
            "score_pct": session.score_pct,
            "duration_seconds": session.duration_seconds,
            "reward_cbt": str(reward),
        },
    )
    return session


async def abandon_session(
    db: AsyncSession,
    user_id: UUID,
    session_id: UUID,
    now: datetime | None = None,
) -> LearningSession:
    """Move the session to ABANDONED."""
    session = await get_owned_session(db, session_id, user_id)
    abandon(session, now or datetime.now(UTC))
    await db.commit()
    logger.info(f"Learning session {session_id} abandoned by {user_id}")
    return session


async def list_recent_sessions(
    db: AsyncSession,
    user_id: UUID,
    limit: int | None = None,
) -> list[LearningSession]:
    """Newest sessions first."""
    result = await db.execute(
        select(LearningSession)
        .where(LearningSession.user_id == user_id)
        .order_by(LearningSession.created_at.desc())
        .limit(limit or settings.RECENT_SESSIONS_LIMIT)
    )
    return list(result.scalars().all())

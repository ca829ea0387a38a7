"""Learning session, progress and recommendation endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from culturebridge.core.dependencies import (
    CurrentUserId,
    DbSession,
    ParticipationCounterDep,
    RewardEngineDep,
)
from culturebridge.learning import service as learning_service
from culturebridge.learning.sessions.service import get_owned_session
from culturebridge.schemas.common import Envelope
from culturebridge.schemas.learning import (
    AchievementAwardOut,
    AchievementOut,
    ExerciseAnswer,
    ExerciseAnswerOut,
    ExerciseResultOut,
    LearningStatsOut,
    ProgressOut,
    RecommendationOut,
    ScoreOut,
    SessionCompletionOut,
    SessionCreate,
    SessionListItem,
    SessionOut,
)
from culturebridge.schemas.rewards import RewardGrantOut

router = APIRouter()


# ============================================================================
# Sessions
# ============================================================================


@router.post(
    "/sessions",
    response_model=Envelope[SessionOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_learning_session(
    payload: SessionCreate,
    db: DbSession,
    user_id: CurrentUserId,
):
    """
    Create a learning session.

    Content is generated from the session type's template unless custom
    exercises are supplied.
    """
    session = await learning_service.create_learning_session(
        db,
        user_id,
        session_type=payload.session_type,
        target_language=payload.target_language,
        native_language=payload.native_language,
        level=payload.level,
        custom_exercises=(
            [exercise.to_content() for exercise in payload.exercises]
            if payload.exercises is not None
            else None
        ),
        title=payload.title,
        description=payload.description,
    )
    return Envelope(data=SessionOut.from_model(session))


@router.get("/sessions/{session_id}", response_model=Envelope[SessionOut])
async def get_learning_session(
    session_id: UUID,
    db: DbSession,
    user_id: CurrentUserId,
):
    """Get one of the caller's sessions."""
    session = await get_owned_session(db, session_id, user_id)
    return Envelope(data=SessionOut.from_model(session))


@router.post(
    "/sessions/{session_id}/exercises/{index}",
    response_model=Envelope[ExerciseAnswerOut],
)
async def complete_exercise(
    session_id: UUID,
    index: int,
    payload: ExerciseAnswer,
    db: DbSession,
    user_id: CurrentUserId,
):
    """Answer an exercise; re-answers update the same record."""
    session, result = await learning_service.complete_exercise(
        db,
        user_id,
        session_id,
        index,
        payload.answer,
        payload.time_spent_seconds,
    )
    return Envelope(
        data=ExerciseAnswerOut(
            session_id=session.id,
            result=ExerciseResultOut.model_validate(result),
            score=ScoreOut(
                correct=session.score_correct,
                total=session.score_total,
                percentage=session.score_pct,
            ),
            status=session.status,
        )
    )


@router.post(
    "/sessions/{session_id}/complete",
    response_model=Envelope[SessionCompletionOut],
)
async def complete_session(
    session_id: UUID,
    db: DbSession,
    user_id: CurrentUserId,
    reward_engine: RewardEngineDep,
    counter: ParticipationCounterDep,
):
    """
    Complete a session.

    The completion always persists; reward or achievement failures come back
    as warnings.
    """
    completion = await learning_service.complete_session(
        db, user_id, session_id, reward_engine, counter
    )
    return Envelope(
        data=SessionCompletionOut(
            session=SessionOut.from_model(completion.session),
            reward=RewardGrantOut.from_grant(completion.reward),
            achievements=[AchievementAwardOut.from_award(a) for a in completion.achievements],
            total_cbt_credited=completion.total_cbt_credited,
            progress=ProgressOut.from_model(completion.progress) if completion.progress else None,
        ),
        warnings=completion.warnings,
    )


@router.post("/sessions/{session_id}/abandon", response_model=Envelope[SessionOut])
async def abandon_session(
    session_id: UUID,
    db: DbSession,
    user_id: CurrentUserId,
):
    """Abandon an in-progress session (no reward)."""
    await learning_service.abandon_session(db, user_id, session_id)
    session = await get_owned_session(db, session_id, user_id, refresh=True)
    return Envelope(data=SessionOut.from_model(session))


# ============================================================================
# Progress
# ============================================================================


@router.get("/stats", response_model=Envelope[LearningStatsOut])
async def get_user_learning_stats(
    db: DbSession,
    user_id: CurrentUserId,
    reward_engine: RewardEngineDep,
    counter: ParticipationCounterDep,
):
    """Progress, achievements, recent sessions and wallet balance."""
    stats = await learning_service.get_user_learning_stats(db, user_id, counter, reward_engine)
    return Envelope(
        data=LearningStatsOut(
            progress=ProgressOut.from_model(stats.progress),
            achievements=[AchievementOut.model_validate(a) for a in stats.achievements],
            recent_sessions=[SessionListItem.model_validate(s) for s in stats.recent_sessions],
            cultural_exchange_count=stats.cultural_exchange_count,
            wallet_balance=stats.wallet_balance,
        ),
        warnings=stats.warnings,
    )


@router.get("/recommendations", response_model=Envelope[list[RecommendationOut]])
async def get_recommended_content(
    db: DbSession,
    user_id: CurrentUserId,
    target_language: str = Query(..., min_length=2, max_length=16),
):
    """What to study next in a target language."""
    recommendations = await learning_service.get_recommended_content(db, user_id, target_language)
    return Envelope(data=[RecommendationOut(**r) for r in recommendations])

"""Pydantic schemas for learning sessions, progress and recommendations."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from culturebridge.learning.achievements.service import AchievementAward
from culturebridge.learning.content import ExerciseContent
from culturebridge.learning.progress.service import current_streak
from culturebridge.models.learning_progress import UserLearningProgress
from culturebridge.models.learning_session import (
    ExerciseType,
    LearningSession,
    ProficiencyLevel,
    SessionStatus,
    SessionType,
)
from culturebridge.schemas.rewards import RewardGrantOut

# ============================================================================
# Session Schemas
# ============================================================================


class CustomExercise(BaseModel):
    """Caller-supplied exercise."""

    exercise_type: ExerciseType
    points: int = Field(1, ge=1, le=100)
    question: str = Field(..., min_length=1)
    correct_answer: str = Field(..., min_length=1)
    options: list[str] | None = None
    explanation: str | None = None

    def to_content(self) -> ExerciseContent:
        return ExerciseContent(
            exercise_type=self.exercise_type,
            points=self.points,
            question=self.question,
            correct_answer=self.correct_answer,
            options=self.options,
            explanation=self.explanation,
        )


class SessionCreate(BaseModel):
    """Request to create a learning session."""

    session_type: str = Field(..., description="VOCABULARY, GRAMMAR, CONVERSATION, ...")
    target_language: str = Field(..., min_length=2, max_length=16)
    native_language: str = Field(..., min_length=2, max_length=16)
    level: str = Field(ProficiencyLevel.BEGINNER.value, description="Proficiency level")
    title: str | None = Field(None, max_length=200)
    description: str | None = None
    exercises: list[CustomExercise] | None = Field(
        None, description="Custom exercises (null = generated from template)"
    )


class ExerciseOut(BaseModel):
    """Exercise as shown to the learner (no answer)."""

    index: int
    exercise_type: ExerciseType
    points: int
    question: str
    options: list[str] | None


class ExerciseResultOut(BaseModel):
    """Completion record for one exercise index."""

    exercise_index: int
    user_answer: str
    is_correct: bool
    attempts: int
    time_spent_seconds: int
    completed_at: datetime

    class Config:
        from_attributes = True


class ScoreOut(BaseModel):
    correct: int
    total: int
    percentage: float


class SessionOut(BaseModel):
    """Learning session with exercises and results."""

    id: UUID
    user_id: UUID
    session_type: SessionType
    target_language: str
    native_language: str
    level: ProficiencyLevel
    title: str
    description: str | None
    materials: list[dict[str, Any]]
    status: SessionStatus
    started_at: datetime
    ended_at: datetime | None
    duration_seconds: int | None
    score: ScoreOut
    reward_cbt: Decimal | None
    exercises: list[ExerciseOut]
    results: list[ExerciseResultOut]

    @classmethod
    def from_model(cls, session: LearningSession) -> "SessionOut":
        return cls(
            id=session.id,
            user_id=session.user_id,
            session_type=session.session_type,
            target_language=session.target_language,
            native_language=session.native_language,
            level=session.level,
            title=session.title,
            description=session.description,
            materials=session.materials_json or [],
            status=session.status,
            started_at=session.started_at,
            ended_at=session.ended_at,
            duration_seconds=session.duration_seconds,
            score=ScoreOut(
                correct=session.score_correct,
                total=session.score_total,
                percentage=session.score_pct,
            ),
            reward_cbt=session.reward_cbt,
            exercises=[
                ExerciseOut(
                    index=exercise.position,
                    exercise_type=exercise.exercise_type,
                    points=exercise.points,
                    question=exercise.question,
                    options=exercise.options_json,
                )
                for exercise in session.exercises
            ],
            results=[ExerciseResultOut.model_validate(r) for r in session.results],
        )


class SessionListItem(BaseModel):
    """Session summary for the stats view."""

    id: UUID
    session_type: SessionType
    target_language: str
    title: str
    status: SessionStatus
    score_pct: float
    duration_seconds: int | None
    reward_cbt: Decimal | None
    started_at: datetime
    ended_at: datetime | None

    class Config:
        from_attributes = True


class ExerciseAnswer(BaseModel):
    """Answer submission for one exercise index."""

    answer: str = Field(..., min_length=1)
    time_spent_seconds: int = Field(0, ge=0)


class ExerciseAnswerOut(BaseModel):
    """Recorded result plus the recomputed session score."""

    session_id: UUID
    result: ExerciseResultOut
    score: ScoreOut
    status: SessionStatus


# ============================================================================
# Progress Schemas
# ============================================================================


class LanguageProgressOut(BaseModel):
    language: str
    current_level: ProficiencyLevel
    target_level: ProficiencyLevel
    streak_days: int
    longest_streak: int
    last_study_date: date | None
    total_study_minutes: float
    skills: dict[str, dict[str, Any]]
    weekly_goals: dict[str, dict[str, Any]]
    week_start: date | None


class ProgressOut(BaseModel):
    """Overall stats with per-language progress."""

    user_id: UUID
    total_lessons_completed: int
    total_study_minutes: float
    average_session_minutes: float
    experience_points: int
    rank: str
    total_cbt_earned: Decimal
    current_streak: int
    languages: list[LanguageProgressOut]

    @classmethod
    def from_model(cls, progress: UserLearningProgress) -> "ProgressOut":
        return cls(
            user_id=progress.user_id,
            total_lessons_completed=progress.total_lessons_completed,
            total_study_minutes=progress.total_study_minutes,
            average_session_minutes=progress.average_session_minutes,
            experience_points=progress.experience_points,
            rank=progress.rank,
            total_cbt_earned=progress.total_cbt_earned,
            current_streak=current_streak(progress),
            languages=[
                LanguageProgressOut(
                    language=lang.language,
                    current_level=lang.current_level,
                    target_level=lang.target_level,
                    streak_days=lang.streak_days,
                    longest_streak=lang.longest_streak,
                    last_study_date=lang.last_study_date,
                    total_study_minutes=lang.total_study_minutes,
                    skills=lang.skills_json or {},
                    weekly_goals=lang.weekly_goals_json or {},
                    week_start=lang.week_start,
                )
                for lang in progress.languages
            ],
        )


class AchievementOut(BaseModel):
    achievement: str
    description: str
    cbt_reward: Decimal
    language: str | None
    earned_at: datetime

    class Config:
        from_attributes = True


class AchievementAwardOut(BaseModel):
    """Newly granted achievement and its reward outcome."""

    code: str
    description: str
    cbt_reward: Decimal
    reward: RewardGrantOut

    @classmethod
    def from_award(cls, award: AchievementAward) -> "AchievementAwardOut":
        return cls(
            code=award.code,
            description=award.description,
            cbt_reward=award.cbt_reward,
            reward=RewardGrantOut.from_grant(award.reward),
        )


class SessionCompletionOut(BaseModel):
    session: SessionOut
    reward: RewardGrantOut
    achievements: list[AchievementAwardOut]
    total_cbt_credited: Decimal
    progress: ProgressOut | None


class LearningStatsOut(BaseModel):
    progress: ProgressOut
    achievements: list[AchievementOut]
    recent_sessions: list[SessionListItem]
    cultural_exchange_count: int
    wallet_balance: Decimal | None


class RecommendationOut(BaseModel):
    type: str
    title: str
    description: str
    priority: str
    level: str | None = None
    id: str | None = None

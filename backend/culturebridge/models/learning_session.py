"""Learning session models for the session lifecycle."""

import uuid
from enum import Enum as PyEnum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from culturebridge.db.base import Base


class SessionType(str, PyEnum):
    """Learning session type."""

    VOCABULARY = "VOCABULARY"
    GRAMMAR = "GRAMMAR"
    CONVERSATION = "CONVERSATION"
    PRONUNCIATION = "PRONUNCIATION"
    LISTENING = "LISTENING"
    READING = "READING"
    WRITING = "WRITING"
    CULTURAL_CONTEXT = "CULTURAL_CONTEXT"


class SessionStatus(str, PyEnum):
    """Learning session status. COMPLETED and ABANDONED are terminal."""

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"


class ExerciseType(str, PyEnum):
    """Exercise type."""

    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    FILL_BLANK = "FILL_BLANK"
    TRANSLATION = "TRANSLATION"
    PRONUNCIATION = "PRONUNCIATION"
    CONVERSATION = "CONVERSATION"
    LISTENING = "LISTENING"
    READING = "READING"
    WRITING = "WRITING"


class ProficiencyLevel(str, PyEnum):
    """Proficiency tiers, lowest first."""

    BEGINNER = "BEGINNER"
    ELEMENTARY = "ELEMENTARY"
    INTERMEDIATE = "INTERMEDIATE"
    UPPER_INTERMEDIATE = "UPPER_INTERMEDIATE"
    ADVANCED = "ADVANCED"
    PROFICIENT = "PROFICIENT"


class LearningSession(Base):
    """A single learning session owned by one user."""

    __tablename__ = "learning_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False)

    # Configuration
    session_type = Column(Enum(SessionType, name="learning_session_type"), nullable=False)
    target_language = Column(String(16), nullable=False)
    native_language = Column(String(16), nullable=False)
    level = Column(Enum(ProficiencyLevel, name="proficiency_level"), nullable=False)

    # Content
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    materials_json = Column(JSON, nullable=False, default=list)

    status = Column(
        Enum(SessionStatus, name="learning_session_status"),
        nullable=False,
        default=SessionStatus.IN_PROGRESS,
    )

    # Progress
    started_at = Column(DateTime(timezone=True), nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    duration_seconds = Column(Integer, nullable=True)

    # Aggregate score, recomputed after every answer
    score_correct = Column(Integer, nullable=False, default=0)
    score_total = Column(Integer, nullable=False, default=0)
    score_pct = Column(Float, nullable=False, default=0.0)  # 0.00 to 100.00

    # Completion reward handed to the reward engine
    reward_cbt = Column(Numeric(18, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    exercises = relationship(
        "LearningExercise",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="LearningExercise.position",
    )
    results = relationship(
        "ExerciseResult",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ExerciseResult.exercise_index",
    )

    __table_args__ = (
        Index("ix_learning_sessions_user_created", "user_id", "created_at"),
        Index("ix_learning_sessions_status", "status"),
    )


class LearningExercise(Base):
    """Exercise within a session; position is the exercise index."""

    __tablename__ = "learning_exercises"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("learning_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    position = Column(Integer, nullable=False)  # 0-based

    exercise_type = Column(Enum(ExerciseType, name="exercise_type"), nullable=False)
    points = Column(Integer, nullable=False, default=1)
    question = Column(Text, nullable=False)
    options_json = Column(JSON, nullable=True)
    correct_answer = Column(Text, nullable=False)
    explanation = Column(Text, nullable=True)

    session = relationship("LearningSession", back_populates="exercises")

    __table_args__ = (
        UniqueConstraint("session_id", "position", name="uq_learning_exercise_position"),
    )


class ExerciseResult(Base):
    """Completion record for one exercise index; re-answers update it in place."""

    __tablename__ = "learning_exercise_results"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("learning_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    exercise_index = Column(Integer, nullable=False)

    user_answer = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    attempts = Column(Integer, nullable=False, default=1)
    time_spent_seconds = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime(timezone=True), nullable=False)

    session = relationship("LearningSession", back_populates="results")

    __table_args__ = (
        UniqueConstraint("session_id", "exercise_index", name="uq_exercise_result_index"),
    )

"""Learning progress and achievement models."""

import uuid

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from culturebridge.db.base import Base
from culturebridge.models.learning_session import ProficiencyLevel


class UserLearningProgress(Base):
    """One record per user; created lazily, never deleted."""

    __tablename__ = "user_learning_progress"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, unique=True)

    # Overall stats
    total_lessons_completed = Column(Integer, nullable=False, default=0)
    total_study_minutes = Column(Float, nullable=False, default=0.0)
    average_session_minutes = Column(Float, nullable=False, default=0.0)
    experience_points = Column(Integer, nullable=False, default=0)
    rank = Column(String(20), nullable=False, default="NOVICE")
    total_cbt_earned = Column(Numeric(18, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    languages = relationship(
        "UserLanguageProgress",
        back_populates="progress",
        cascade="all, delete-orphan",
        order_by="UserLanguageProgress.created_at",
    )


class UserLanguageProgress(Base):
    """Per-language skills, streak and weekly goals."""

    __tablename__ = "user_language_progress"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    progress_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("user_learning_progress.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = Column(Uuid(as_uuid=True), nullable=False)
    language = Column(String(16), nullable=False)

    current_level = Column(
        Enum(ProficiencyLevel, name="proficiency_level"),
        nullable=False,
        default=ProficiencyLevel.BEGINNER,
    )
    target_level = Column(
        Enum(ProficiencyLevel, name="proficiency_level"),
        nullable=False,
        default=ProficiencyLevel.INTERMEDIATE,
    )

    # Streak
    streak_days = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_study_date = Column(Date, nullable=True)  # UTC calendar day

    total_study_minutes = Column(Float, nullable=False, default=0.0)

    # {"vocabulary": {"level": 0.0, "words_learned": 0, "accuracy": 0.0}, ...}
    skills_json = Column(JSON, nullable=False, default=dict)
    # {"study_minutes": {"target": 300, "achieved": 0.0}, ...}
    weekly_goals_json = Column(JSON, nullable=False, default=dict)
    week_start = Column(Date, nullable=True)  # Monday of the ISO week the counters belong to

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    progress = relationship("UserLearningProgress", back_populates="languages")

    __table_args__ = (
        UniqueConstraint("user_id", "language", name="uq_user_language_progress"),
        Index("ix_user_language_progress_user_id", "user_id"),
    )


class UserAchievement(Base):
    """Granted achievement; at most one row per (user, achievement)."""

    __tablename__ = "user_achievements"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False)
    achievement = Column(String(40), nullable=False)
    description = Column(String(200), nullable=False)
    cbt_reward = Column(Numeric(18, 2), nullable=False, default=0)
    language = Column(String(16), nullable=True)
    earned_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "achievement", name="uq_user_achievement"),
        Index("ix_user_achievements_user_id", "user_id"),
    )

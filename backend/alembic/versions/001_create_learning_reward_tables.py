"""Create wallet, learning and cultural exchange tables

Revision ID: 001
Revises:
Create Date: 2026-10-18 10:00:00.000000

Adds:
- user_wallets / token_transactions: reward ledger
- learning_sessions / learning_exercises / learning_exercise_results
- user_learning_progress / user_language_progress / user_achievements
- cultural_exchanges / cultural_exchange_participants / cultural_exchange_languages
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

PROFICIENCY_LEVELS = (
    "BEGINNER",
    "ELEMENTARY",
    "INTERMEDIATE",
    "UPPER_INTERMEDIATE",
    "ADVANCED",
    "PROFICIENT",
)
ENUM_TYPES = (
    "token_transaction_type",
    "token_transaction_status",
    "learning_session_type",
    "learning_session_status",
    "proficiency_level",
    "exercise_type",
    "exchange_status",
    "exchange_participant_role",
)


def _enum(name: str, *values: str) -> postgresql.ENUM:
    enum = postgresql.ENUM(*values, name=name, create_type=False)
    enum.create(op.get_bind(), checkfirst=True)
    return enum


def upgrade() -> None:
    tx_type_enum = _enum(
        "token_transaction_type", "REWARD", "TRANSFER", "CULTURAL_EXCHANGE", "MARKETPLACE"
    )
    tx_status_enum = _enum("token_transaction_status", "PENDING", "CONFIRMED", "FAILED")
    session_type_enum = _enum(
        "learning_session_type",
        "VOCABULARY",
        "GRAMMAR",
        "CONVERSATION",
        "PRONUNCIATION",
        "LISTENING",
        "READING",
        "WRITING",
        "CULTURAL_CONTEXT",
    )
    session_status_enum = _enum("learning_session_status", "IN_PROGRESS", "COMPLETED", "ABANDONED")
    level_enum = _enum("proficiency_level", *PROFICIENCY_LEVELS)
    exercise_type_enum = _enum(
        "exercise_type",
        "MULTIPLE_CHOICE",
        "FILL_BLANK",
        "TRANSLATION",
        "PRONUNCIATION",
        "CONVERSATION",
        "LISTENING",
        "READING",
        "WRITING",
    )
    exchange_status_enum = _enum("exchange_status", "ACTIVE", "CLOSED")
    role_enum = _enum("exchange_participant_role", "MODERATOR", "PARTICIPANT")

    # Ledger
    op.create_table(
        "user_wallets",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("balance", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("total_earned", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("last_reward_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        "token_transactions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tx_type", tx_type_enum, nullable=False, server_default="REWARD"),
        sa.Column("kind", sa.String(40), nullable=False),
        sa.Column("category", sa.String(40), nullable=False, server_default="GENERAL"),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("description", sa.String(255), nullable=False, server_default=""),
        sa.Column("status", tx_status_enum, nullable=False, server_default="CONFIRMED"),
        sa.Column("metadata_json", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_token_transactions_user_created", "token_transactions", ["user_id", "created_at"]
    )
    op.create_index(
        "ix_token_transactions_user_kind_created",
        "token_transactions",
        ["user_id", "kind", "created_at"],
    )

    # Learning sessions
    op.create_table(
        "learning_sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("session_type", session_type_enum, nullable=False),
        sa.Column("target_language", sa.String(16), nullable=False),
        sa.Column("native_language", sa.String(16), nullable=False),
        sa.Column("level", level_enum, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("materials_json", sa.JSON(), nullable=False),
        sa.Column("status", session_status_enum, nullable=False, server_default="IN_PROGRESS"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("score_correct", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("score_total", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("score_pct", sa.Float(), nullable=False, server_default="0"),
        sa.Column("reward_cbt", sa.Numeric(18, 2), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_learning_sessions_user_created", "learning_sessions", ["user_id", "created_at"]
    )
    op.create_index("ix_learning_sessions_status", "learning_sessions", ["status"])

    op.create_table(
        "learning_exercises",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "session_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("learning_sessions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("exercise_type", exercise_type_enum, nullable=False),
        sa.Column("points", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("options_json", sa.JSON(), nullable=True),
        sa.Column("correct_answer", sa.Text(), nullable=False),
        sa.Column("explanation", sa.Text(), nullable=True),
        sa.UniqueConstraint("session_id", "position", name="uq_learning_exercise_position"),
    )
    op.create_table(
        "learning_exercise_results",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "session_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("learning_sessions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("exercise_index", sa.Integer(), nullable=False),
        sa.Column("user_answer", sa.Text(), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("time_spent_seconds", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("session_id", "exercise_index", name="uq_exercise_result_index"),
    )

    # Progress and achievements
    op.create_table(
        "user_learning_progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column("total_lessons_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_study_minutes", sa.Float(), nullable=False, server_default="0"),
        sa.Column("average_session_minutes", sa.Float(), nullable=False, server_default="0"),
        sa.Column("experience_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rank", sa.String(20), nullable=False, server_default="NOVICE"),
        sa.Column("total_cbt_earned", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        "user_language_progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "progress_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("user_learning_progress.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("language", sa.String(16), nullable=False),
        sa.Column("current_level", level_enum, nullable=False, server_default="BEGINNER"),
        sa.Column("target_level", level_enum, nullable=False, server_default="INTERMEDIATE"),
        sa.Column("streak_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_study_date", sa.Date(), nullable=True),
        sa.Column("total_study_minutes", sa.Float(), nullable=False, server_default="0"),
        sa.Column("skills_json", sa.JSON(), nullable=False),
        sa.Column("weekly_goals_json", sa.JSON(), nullable=False),
        sa.Column("week_start", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "language", name="uq_user_language_progress"),
    )
    op.create_index("ix_user_language_progress_user_id", "user_language_progress", ["user_id"])

    op.create_table(
        "user_achievements",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("achievement", sa.String(40), nullable=False),
        sa.Column("description", sa.String(200), nullable=False),
        sa.Column("cbt_reward", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("language", sa.String(16), nullable=True),
        sa.Column("earned_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "achievement", name="uq_user_achievement"),
    )
    op.create_index("ix_user_achievements_user_id", "user_achievements", ["user_id"])

    # Cultural exchanges
    op.create_table(
        "cultural_exchanges",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("creator_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("target_languages_json", sa.JSON(), nullable=False),
        sa.Column("status", exchange_status_enum, nullable=False, server_default="ACTIVE"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_cultural_exchanges_status", "cultural_exchanges", ["status"])

    op.create_table(
        "cultural_exchange_participants",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "exchange_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("cultural_exchanges.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("role", role_enum, nullable=False, server_default="PARTICIPANT"),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("exchange_id", "user_id", name="uq_exchange_participant"),
    )
    op.create_index(
        "ix_exchange_participants_user_id", "cultural_exchange_participants", ["user_id"]
    )

    op.create_table(
        "cultural_exchange_languages",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "exchange_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("cultural_exchanges.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("language", sa.String(16), nullable=False),
        sa.UniqueConstraint("exchange_id", "language", name="uq_exchange_language"),
    )
    op.create_index(
        "ix_exchange_languages_language", "cultural_exchange_languages", ["language"]
    )


def downgrade() -> None:
    op.drop_table("cultural_exchange_languages")
    op.drop_table("cultural_exchange_participants")
    op.drop_table("cultural_exchanges")
    op.drop_table("user_achievements")
    op.drop_table("user_language_progress")
    op.drop_table("user_learning_progress")
    op.drop_table("learning_exercise_results")
    op.drop_table("learning_exercises")
    op.drop_table("learning_sessions")
    op.drop_table("token_transactions")
    op.drop_table("user_wallets")
    for name in ENUM_TYPES:
        op.execute(f"DROP TYPE IF EXISTS {name} CASCADE")

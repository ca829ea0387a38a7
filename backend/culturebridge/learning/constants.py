"""Constants for learning progress and achievements."""

from decimal import Decimal
from enum import Enum

from culturebridge.models.learning_session import ProficiencyLevel, SessionType


class Skill(str, Enum):
    """Tracked language skills."""

    VOCABULARY = "vocabulary"
    GRAMMAR = "grammar"
    LISTENING = "listening"
    SPEAKING = "speaking"
    READING = "reading"
    WRITING = "writing"


class AchievementCode(str, Enum):
    """Achievement identifiers, in evaluation order."""

    FIRST_LESSON = "FIRST_LESSON"
    WEEK_STREAK = "WEEK_STREAK"
    MONTH_STREAK = "MONTH_STREAK"
    PERFECT_SCORE = "PERFECT_SCORE"
    VOCABULARY_MASTER = "VOCABULARY_MASTER"
    CULTURAL_EXPLORER = "CULTURAL_EXPLORER"


# Fresh skill map for a new language; every skill carries a 0-100 level
DEFAULT_SKILLS: dict[str, dict[str, float]] = {
    Skill.VOCABULARY.value: {"level": 0.0, "words_learned": 0, "accuracy": 0.0},
    Skill.GRAMMAR.value: {"level": 0.0, "rules_learned": 0, "accuracy": 0.0},
    Skill.LISTENING.value: {"level": 0.0, "hours_listened": 0.0, "accuracy": 0.0},
    Skill.SPEAKING.value: {"level": 0.0, "pronunciation_score": 0.0, "conversation_hours": 0.0},
    Skill.READING.value: {"level": 0.0, "articles_read": 0, "comprehension_score": 0.0},
    Skill.WRITING.value: {"level": 0.0, "essays_written": 0, "grammar_accuracy": 0.0},
}

# Level gain per session at 100% accuracy
SKILL_WEIGHTS: dict[Skill, float] = {
    Skill.VOCABULARY: 5.0,
    Skill.GRAMMAR: 5.0,
    Skill.SPEAKING: 6.0,
    Skill.READING: 4.0,
    Skill.WRITING: 5.0,
    Skill.LISTENING: 3.0,
}

# Session type -> skill it trains
SESSION_SKILL: dict[SessionType, Skill] = {
    SessionType.VOCABULARY: Skill.VOCABULARY,
    SessionType.GRAMMAR: Skill.GRAMMAR,
    SessionType.CONVERSATION: Skill.SPEAKING,
    SessionType.PRONUNCIATION: Skill.SPEAKING,
    SessionType.LISTENING: Skill.LISTENING,
    SessionType.READING: Skill.READING,
    SessionType.CULTURAL_CONTEXT: Skill.READING,
    SessionType.WRITING: Skill.WRITING,
}

# Weakest skill -> session type to recommend
SKILL_SESSION_TYPE: dict[Skill, SessionType] = {
    Skill.VOCABULARY: SessionType.VOCABULARY,
    Skill.GRAMMAR: SessionType.GRAMMAR,
    Skill.LISTENING: SessionType.LISTENING,
    Skill.SPEAKING: SessionType.CONVERSATION,
    Skill.READING: SessionType.READING,
    Skill.WRITING: SessionType.WRITING,
}

WEEKLY_GOAL_TARGETS: dict[str, float] = {
    "study_minutes": 300,
    "lessons_completed": 5,
    "vocabulary_words": 50,
    "conversation_minutes": 60,
}

# (minimum mean skill level, tier), highest first
PROFICIENCY_THRESHOLDS: tuple[tuple[float, ProficiencyLevel], ...] = (
    (85.0, ProficiencyLevel.PROFICIENT),
    (70.0, ProficiencyLevel.ADVANCED),
    (50.0, ProficiencyLevel.UPPER_INTERMEDIATE),
    (30.0, ProficiencyLevel.INTERMEDIATE),
    (15.0, ProficiencyLevel.ELEMENTARY),
    (0.0, ProficiencyLevel.BEGINNER),
)

PROFICIENCY_ORDER: tuple[ProficiencyLevel, ...] = tuple(ProficiencyLevel)

# (minimum experience points, rank), highest first
RANK_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (10000, "GRANDMASTER"),
    (5000, "MASTER"),
    (2000, "EXPERT"),
    (1000, "SCHOLAR"),
    (300, "APPRENTICE"),
    (0, "NOVICE"),
)

BASE_EXPERIENCE = 10

# Achievement thresholds and fixed CBT rewards
WEEK_STREAK_DAYS = 7
MONTH_STREAK_DAYS = 30
VOCABULARY_MASTER_WORDS = 500
CULTURAL_EXPLORER_EXCHANGES = 10

ACHIEVEMENT_REWARDS: dict[AchievementCode, Decimal] = {
    AchievementCode.FIRST_LESSON: Decimal("5"),
    AchievementCode.WEEK_STREAK: Decimal("10"),
    AchievementCode.MONTH_STREAK: Decimal("50"),
    AchievementCode.PERFECT_SCORE: Decimal("15"),
    AchievementCode.VOCABULARY_MASTER: Decimal("25"),
    AchievementCode.CULTURAL_EXPLORER: Decimal("30"),
}

"""Declarative achievement conditions over a single evaluation context."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from culturebridge.learning.constants import (
    ACHIEVEMENT_REWARDS,
    CULTURAL_EXPLORER_EXCHANGES,
    MONTH_STREAK_DAYS,
    VOCABULARY_MASTER_WORDS,
    WEEK_STREAK_DAYS,
    AchievementCode,
)


@dataclass(frozen=True)
class AchievementContext:
    """Every field any achievement condition may read."""

    total_lessons_completed: int = 0
    current_streak: int = 0
    session_accuracy: float | None = None  # None outside a session completion
    language: str | None = None
    words_learned: int = 0  # vocabulary words for `language`
    cultural_exchange_count: int = 0


@dataclass(frozen=True)
class AchievementRule:
    code: AchievementCode
    description: str
    cbt_reward: Decimal
    condition: Callable[[AchievementContext], bool]


# Evaluation order
ACHIEVEMENT_RULES: tuple[AchievementRule, ...] = (
    AchievementRule(
        AchievementCode.FIRST_LESSON,
        "Completed the first lesson",
        ACHIEVEMENT_REWARDS[AchievementCode.FIRST_LESSON],
        lambda ctx: ctx.total_lessons_completed >= 1,
    ),
    AchievementRule(
        AchievementCode.WEEK_STREAK,
        "Studied 7 days in a row",
        ACHIEVEMENT_REWARDS[AchievementCode.WEEK_STREAK],
        lambda ctx: ctx.current_streak >= WEEK_STREAK_DAYS,
    ),
    AchievementRule(
        AchievementCode.MONTH_STREAK,
        "Studied 30 days in a row",
        ACHIEVEMENT_REWARDS[AchievementCode.MONTH_STREAK],
        lambda ctx: ctx.current_streak >= MONTH_STREAK_DAYS,
    ),
    AchievementRule(
        AchievementCode.PERFECT_SCORE,
        "Scored 100% in a session",
        ACHIEVEMENT_REWARDS[AchievementCode.PERFECT_SCORE],
        lambda ctx: ctx.session_accuracy is not None and ctx.session_accuracy == 100,
    ),
    AchievementRule(
        AchievementCode.VOCABULARY_MASTER,
        "Learned 500 words",
        ACHIEVEMENT_REWARDS[AchievementCode.VOCABULARY_MASTER],
        lambda ctx: ctx.words_learned >= VOCABULARY_MASTER_WORDS,
    ),
    AchievementRule(
        AchievementCode.CULTURAL_EXPLORER,
        "Took part in 10 cultural exchanges",
        ACHIEVEMENT_REWARDS[AchievementCode.CULTURAL_EXPLORER],
        lambda ctx: ctx.cultural_exchange_count >= CULTURAL_EXPLORER_EXCHANGES,
    ),
)


def pending_rules(
    granted: set[str],
    rules: tuple[AchievementRule, ...] = ACHIEVEMENT_RULES,
) -> list[AchievementRule]:
    """Rules not yet in the granted set, in evaluation order."""
    return [rule for rule in rules if rule.code.value not in granted]

"""
Progress arithmetic: skills, streaks, weekly goals, tier, experience, rank.

All functions are pure and return new values; JSON maps are copied so the
caller can assign them back and have the change detected.
"""

import copy
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from culturebridge.learning.constants import (
    BASE_EXPERIENCE,
    DEFAULT_SKILLS,
    PROFICIENCY_ORDER,
    PROFICIENCY_THRESHOLDS,
    RANK_THRESHOLDS,
    SESSION_SKILL,
    SKILL_WEIGHTS,
    WEEKLY_GOAL_TARGETS,
    Skill,
)
from culturebridge.models.learning_session import ProficiencyLevel, SessionType


@dataclass(frozen=True)
class SessionSummary:
    """What a completed session contributes to progress."""

    duration_seconds: int
    accuracy: float  # 0-100
    session_type: SessionType
    exercise_count: int

    @property
    def minutes(self) -> float:
        return self.duration_seconds / 60

    @property
    def hours(self) -> float:
        return self.duration_seconds / 3600


def new_skills() -> dict[str, dict[str, Any]]:
    return copy.deepcopy(DEFAULT_SKILLS)


def new_weekly_goals() -> dict[str, dict[str, float]]:
    return {goal: {"target": target, "achieved": 0.0} for goal, target in WEEKLY_GOAL_TARGETS.items()}


def iso_week_start(day: date) -> date:
    """Monday of the ISO week containing `day`."""
    return day - timedelta(days=day.weekday())


def update_streak(
    streak_days: int,
    longest_streak: int,
    last_study_date: date | None,
    today: date,
) -> tuple[int, int]:
    """
    Advance a per-language streak for a session on `today`.

    Yesterday extends the streak, today leaves it unchanged, anything else
    (including no previous session) restarts it at 1.

    Returns:
        (streak_days, longest_streak)
    """
    if last_study_date == today and streak_days > 0:
        streak = streak_days
    elif last_study_date == today - timedelta(days=1):
        streak = streak_days + 1
    else:
        streak = 1
    return streak, max(longest_streak, streak)


def apply_skill_update(skills: dict[str, Any], summary: SessionSummary) -> dict[str, Any]:
    """
    Apply one session to the skill map.

    Only the skill the session type trains changes. Its level grows by
    accuracy/100 * weight, capped at 100, and never decreases.
    """
    updated = copy.deepcopy(skills) if skills else new_skills()
    skill = SESSION_SKILL[summary.session_type]
    entry = dict(DEFAULT_SKILLS[skill.value])
    entry.update(updated.get(skill.value, {}))
    accuracy = summary.accuracy

    if summary.session_type == SessionType.VOCABULARY:
        entry["words_learned"] = entry.get("words_learned", 0) + summary.exercise_count
        entry["accuracy"] = accuracy
    elif summary.session_type == SessionType.GRAMMAR:
        entry["rules_learned"] = entry.get("rules_learned", 0) + 1
        entry["accuracy"] = accuracy
    elif summary.session_type == SessionType.CONVERSATION:
        entry["conversation_hours"] = round(entry.get("conversation_hours", 0.0) + summary.hours, 4)
        entry["pronunciation_score"] = accuracy
    elif summary.session_type == SessionType.PRONUNCIATION:
        entry["pronunciation_score"] = accuracy
    elif summary.session_type == SessionType.LISTENING:
        entry["hours_listened"] = round(entry.get("hours_listened", 0.0) + summary.hours, 4)
        entry["accuracy"] = accuracy
    elif summary.session_type in (SessionType.READING, SessionType.CULTURAL_CONTEXT):
        entry["articles_read"] = entry.get("articles_read", 0) + 1
        entry["comprehension_score"] = accuracy
    elif summary.session_type == SessionType.WRITING:
        entry["essays_written"] = entry.get("essays_written", 0) + 1
        entry["grammar_accuracy"] = accuracy

    level = float(entry.get("level", 0.0))
    entry["level"] = round(min(100.0, level + accuracy / 100 * SKILL_WEIGHTS[skill]), 2)
    updated[skill.value] = entry
    return updated


def weekly_increments(summary: SessionSummary) -> dict[str, float]:
    """Weekly-goal counters a session advances."""
    increments = {
        "study_minutes": summary.minutes,
        "lessons_completed": 1,
    }
    if summary.session_type == SessionType.VOCABULARY:
        increments["vocabulary_words"] = summary.exercise_count
    if summary.session_type == SessionType.CONVERSATION:
        increments["conversation_minutes"] = summary.minutes
    return increments


def apply_weekly_goals(
    goals: dict[str, Any] | None,
    week_start: date | None,
    today: date,
    increments: dict[str, float],
) -> tuple[dict[str, Any], date]:
    """
    Add session increments to the weekly goals.

    Counters from an earlier ISO week are reset first; the reset happens
    here, on write, rather than on a schedule.

    Returns:
        (goals, week_start)
    """
    current_week = iso_week_start(today)
    if not goals or week_start != current_week:
        fresh = new_weekly_goals()
        if goals:
            for goal, data in goals.items():
                if goal in fresh:
                    fresh[goal]["target"] = data.get("target", fresh[goal]["target"])
        goals = fresh
    else:
        goals = copy.deepcopy(goals)

    for goal, value in increments.items():
        if goal in goals:
            goals[goal]["achieved"] = round(goals[goal].get("achieved", 0.0) + value, 2)
    return goals, current_week


def mean_skill_level(skills: dict[str, Any]) -> float:
    levels = [float(skills.get(skill.value, {}).get("level", 0.0)) for skill in Skill]
    return sum(levels) / len(levels)


def proficiency_for(skills: dict[str, Any]) -> ProficiencyLevel:
    """Tier implied by the mean skill level."""
    mean = mean_skill_level(skills)
    for threshold, level in PROFICIENCY_THRESHOLDS:
        if mean >= threshold:
            return level
    return ProficiencyLevel.BEGINNER


def raise_level(current: ProficiencyLevel, candidate: ProficiencyLevel) -> ProficiencyLevel:
    """Higher of two tiers; a tier is never lowered."""
    if PROFICIENCY_ORDER.index(candidate) > PROFICIENCY_ORDER.index(current):
        return candidate
    return current


def experience_gain(accuracy: float, minutes: float, streak_days: int) -> int:
    """
    Experience for one session.

    10 base, +1 per 10% accuracy, +1 per full minute; x1.5 on a 7+ day
    streak, x1.2 on a 3+ day streak.
    """
    experience = BASE_EXPERIENCE + math.floor(accuracy / 10) + math.floor(minutes)
    if streak_days >= 7:
        experience *= 1.5
    elif streak_days >= 3:
        experience *= 1.2
    return math.floor(experience)


def rank_for(experience_points: int) -> str:
    for threshold, rank in RANK_THRESHOLDS:
        if experience_points >= threshold:
            return rank
    return "NOVICE"


def weakest_skill(skills: dict[str, Any]) -> Skill:
    """Lowest-level skill; vocabulary when nothing is below 100."""
    weakest = Skill.VOCABULARY
    lowest = 100.0
    for skill in Skill:
        level = float(skills.get(skill.value, {}).get("level", 0.0))
        if level < lowest:
            lowest = level
            weakest = skill
    return weakest

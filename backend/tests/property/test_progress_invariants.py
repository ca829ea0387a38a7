"""Property-based tests for progress tracking invariants."""

from datetime import date, timedelta

from hypothesis import given, settings, strategies as st

from culturebridge.learning.constants import PROFICIENCY_ORDER, Skill
from culturebridge.learning.progress.core import (
    SessionSummary,
    apply_skill_update,
    new_skills,
    proficiency_for,
    raise_level,
    update_streak,
)
from culturebridge.models.learning_session import ProficiencyLevel, SessionType

sessions = st.lists(
    st.tuples(
        st.integers(min_value=0, max_value=3),  # days since previous session
        st.sampled_from(list(SessionType)),
        st.floats(min_value=0.0, max_value=100.0, allow_nan=False),
    ),
    min_size=1,
    max_size=40,
)


@settings(max_examples=100, deadline=None)
@given(history=sessions)
def test_progress_is_monotonic(history) -> None:
    """
    Property: replaying any session history keeps progress well formed.

    Invariants:
    - 1 <= streak <= longest streak
    - Skill levels never decrease and stay within [0, 100]
    - Proficiency tier never decreases
    """
    day = date(2025, 1, 1)
    streak, longest, last = 0, 0, None
    skills = new_skills()
    level = ProficiencyLevel.BEGINNER

    for gap, session_type, accuracy in history:
        day = day + timedelta(days=gap)
        streak, longest = update_streak(streak, longest, last, day)
        last = day
        assert 1 <= streak <= longest

        before = {s.value: skills[s.value]["level"] for s in Skill}
        skills = apply_skill_update(
            skills,
            SessionSummary(
                duration_seconds=600,
                accuracy=accuracy,
                session_type=session_type,
                exercise_count=3,
            ),
        )
        for skill in Skill:
            after = skills[skill.value]["level"]
            assert before[skill.value] <= after <= 100.0

        new_level = raise_level(level, proficiency_for(skills))
        assert PROFICIENCY_ORDER.index(new_level) >= PROFICIENCY_ORDER.index(level)
        level = new_level

"""Property-based tests for learning session invariants."""

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from hypothesis import given, settings, strategies as st

from culturebridge.core.app_exceptions import (
    ExerciseIndexOutOfRange,
    SessionAlreadyTerminal,
)
from culturebridge.learning.sessions.core import (
    abandon,
    complete,
    compute_completion_reward,
    record_exercise_answer,
)
from culturebridge.models.learning_session import (
    ExerciseType,
    LearningExercise,
    LearningSession,
    ProficiencyLevel,
    SessionStatus,
    SessionType,
)

T0 = datetime(2025, 6, 11, 10, 0, tzinfo=UTC)


def _session(exercise_count: int) -> LearningSession:
    """Unsaved IN_PROGRESS session whose correct answers are 'a0', 'a1', ..."""
    return LearningSession(
        id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        session_type=SessionType.VOCABULARY,
        target_language="es",
        native_language="en",
        level=ProficiencyLevel.BEGINNER,
        title="Property session",
        materials_json=[],
        status=SessionStatus.IN_PROGRESS,
        started_at=T0,
        score_correct=0,
        score_total=exercise_count,
        score_pct=0.0,
        exercises=[
            LearningExercise(
                position=i,
                exercise_type=ExerciseType.FILL_BLANK,
                points=1,
                question=f"q{i}",
                correct_answer=f"a{i}",
            )
            for i in range(exercise_count)
        ],
        results=[],
    )


answers = st.lists(
    st.tuples(st.integers(min_value=0, max_value=7), st.booleans()),
    max_size=30,
)


@settings(max_examples=100, deadline=None)
@given(exercise_count=st.integers(min_value=1, max_value=6), attempts=answers)
def test_score_tracks_distinct_correct_indices(exercise_count: int, attempts) -> None:
    """
    Property: any answer sequence keeps the score consistent.

    Invariants:
    - At most one result per exercise index
    - Attempts per index equal the number of valid answers to it
    - A correct result is never downgraded
    - score_correct counts indices ever answered correctly
    - 0 <= score_pct <= 100
    """
    session = _session(exercise_count)
    ever_correct: set[int] = set()
    answer_counts: dict[int, int] = {}

    for index, correct in attempts:
        answer = f"a{index}" if correct else "wrong"
        if index >= exercise_count:
            with pytest.raises(ExerciseIndexOutOfRange):
                record_exercise_answer(session, index, answer, 1, T0)
            continue
        record_exercise_answer(session, index, answer, 1, T0)
        answer_counts[index] = answer_counts.get(index, 0) + 1
        if correct:
            ever_correct.add(index)

    indices = [r.exercise_index for r in session.results]
    assert len(indices) == len(set(indices))
    assert {r.exercise_index: r.attempts for r in session.results} == answer_counts
    assert {r.exercise_index for r in session.results if r.is_correct} == ever_correct
    assert session.score_correct == len(ever_correct)
    assert session.score_total == exercise_count
    assert 0.0 <= session.score_pct <= 100.0


@settings(max_examples=50, deadline=None)
@given(
    exercise_count=st.integers(min_value=1, max_value=6),
    duration=st.integers(min_value=0, max_value=7200),
    abandon_first=st.booleans(),
)
def test_terminal_state_is_final(exercise_count: int, duration: int, abandon_first: bool) -> None:
    """
    Property: COMPLETED and ABANDONED never change again.

    Invariants:
    - Every further answer, completion or abandonment raises
    - Only completion stores a reward
    """
    session = _session(exercise_count)
    end = T0 + timedelta(seconds=duration)
    if abandon_first:
        abandon(session, end)
        expected = SessionStatus.ABANDONED
    else:
        complete(session, end, Decimal("2"), Decimal("0.5"), 300)
        expected = SessionStatus.COMPLETED

    with pytest.raises(SessionAlreadyTerminal):
        record_exercise_answer(session, 0, "a0", 1, end)
    with pytest.raises(SessionAlreadyTerminal):
        complete(session, end, Decimal("2"), Decimal("0.5"), 300)
    with pytest.raises(SessionAlreadyTerminal):
        abandon(session, end)

    assert session.status == expected
    assert session.duration_seconds == duration
    assert session.results == []
    if abandon_first:
        assert session.reward_cbt is None
    else:
        assert session.reward_cbt == (Decimal("2.50") if duration < 300 else Decimal("2.00"))


@settings(max_examples=200, deadline=None)
@given(
    accuracy=st.floats(min_value=0.0, max_value=100.0, allow_nan=False),
    duration=st.integers(min_value=0, max_value=10_000),
)
def test_completion_reward_bounds(accuracy: float, duration: int) -> None:
    """Property: reward lies in [base, 2 * base + bonus] with two decimals."""
    reward = compute_completion_reward(accuracy, duration, Decimal("2"), Decimal("0.5"), 300)
    assert Decimal("2.00") <= reward <= Decimal("4.50")
    assert reward == reward.quantize(Decimal("0.01"))

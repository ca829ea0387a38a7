"""
Learning session state machine and scoring.

Pure functions over LearningSession objects: they mutate the passed
instances and never touch the database. IN_PROGRESS moves once to COMPLETED
or ABANDONED; both are terminal.
"""

from datetime import UTC, datetime
from decimal import Decimal

from culturebridge.core.app_exceptions import (
    ExerciseIndexOutOfRange,
    InputValidationError,
    SessionAlreadyTerminal,
)
from culturebridge.models.learning_session import (
    ExerciseResult,
    LearningExercise,
    LearningSession,
    SessionStatus,
)
from culturebridge.rewards.catalog import to_cbt


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def grade_answer(exercise: LearningExercise, answer: str) -> bool:
    """Exact string match against the correct answer."""
    return answer == exercise.correct_answer


def assert_in_progress(session: LearningSession) -> None:
    """Raise SessionAlreadyTerminal unless the session is IN_PROGRESS."""
    if session.status != SessionStatus.IN_PROGRESS:
        status = session.status.value if isinstance(session.status, SessionStatus) else str(session.status)
        raise SessionAlreadyTerminal(session.id, status)


def get_exercise(session: LearningSession, index: int) -> LearningExercise:
    total = len(session.exercises)
    if index < 0 or index >= total:
        raise ExerciseIndexOutOfRange(index, total)
    return session.exercises[index]


def compute_score(results: list[ExerciseResult], total_exercises: int) -> tuple[int, int, float]:
    """
    Aggregate score from the completion records.

    Each exercise index counts once, however many attempts it took.

    Returns:
        (correct_count, total_exercises, percentage rounded to 2 decimals)
    """
    correct = len({r.exercise_index for r in results if r.is_correct})
    if total_exercises <= 0:
        return correct, 0, 0.0
    return correct, total_exercises, round(100 * correct / total_exercises, 2)


def apply_score(session: LearningSession) -> None:
    correct, total, pct = compute_score(list(session.results), len(session.exercises))
    session.score_correct = correct
    session.score_total = total
    session.score_pct = pct


def record_exercise_answer(
    session: LearningSession,
    index: int,
    answer: str,
    time_spent_seconds: int,
    now: datetime,
) -> ExerciseResult:
    """
    Record an answer for one exercise index.

    A re-answer updates the existing record in place: attempts go up by one,
    and an incorrect record is upgraded when the new answer is correct. A
    correct record is never downgraded. The aggregate score is recomputed on
    every call.

    Raises:
        SessionAlreadyTerminal: Session is COMPLETED or ABANDONED
        InputValidationError: Empty answer or negative time
        ExerciseIndexOutOfRange: No exercise at index
    """
    assert_in_progress(session)
    if answer is None or not answer.strip():
        raise InputValidationError("Answer must not be empty", {"index": index})
    if time_spent_seconds < 0:
        raise InputValidationError("Time spent must not be negative", {"time_spent": time_spent_seconds})

    exercise = get_exercise(session, index)
    correct = grade_answer(exercise, answer)

    result = next((r for r in session.results if r.exercise_index == index), None)
    if result is None:
        result = ExerciseResult(
            exercise_index=index,
            user_answer=answer,
            is_correct=correct,
            attempts=1,
            time_spent_seconds=time_spent_seconds,
            completed_at=now,
        )
        session.results.append(result)
    else:
        result.attempts = (result.attempts or 0) + 1
        result.time_spent_seconds = (result.time_spent_seconds or 0) + time_spent_seconds
        result.completed_at = now
        if not result.is_correct:
            result.user_answer = answer
            result.is_correct = correct

    apply_score(session)
    return result


def compute_completion_reward(
    accuracy: float | Decimal,
    duration_seconds: int,
    base_reward: Decimal,
    speed_bonus: Decimal,
    speed_threshold_seconds: int,
) -> Decimal:
    """base * (1 + accuracy/100), plus the speed bonus under the threshold; 2 decimals."""
    reward = base_reward * (1 + Decimal(str(accuracy)) / 100)
    if duration_seconds < speed_threshold_seconds:
        reward += speed_bonus
    return to_cbt(reward)


def complete(
    session: LearningSession,
    now: datetime,
    base_reward: Decimal,
    speed_bonus: Decimal,
    speed_threshold_seconds: int,
) -> Decimal:
    """
    Move an IN_PROGRESS session to COMPLETED.

    Sets end time and duration, and stores the completion reward. The reward
    is only computed here; crediting it is the reward engine's job.

    Returns:
        Completion reward in CBT
    """
    assert_in_progress(session)
    ended_at = as_utc(now)
    duration = max(0, int((ended_at - as_utc(session.started_at)).total_seconds()))

    apply_score(session)
    # score_pct is rounded for display; the reward uses the exact ratio
    exact_accuracy = (
        Decimal(100) * session.score_correct / session.score_total
        if session.score_total
        else Decimal(0)
    )
    reward = compute_completion_reward(
        exact_accuracy, duration, base_reward, speed_bonus, speed_threshold_seconds
    )

    session.ended_at = ended_at
    session.duration_seconds = duration
    session.status = SessionStatus.COMPLETED
    session.reward_cbt = reward
    return reward


def abandon(session: LearningSession, now: datetime) -> None:
    """Move an IN_PROGRESS session to ABANDONED (no reward)."""
    assert_in_progress(session)
    ended_at = as_utc(now)
    session.ended_at = ended_at
    session.duration_seconds = max(0, int((ended_at - as_utc(session.started_at)).total_seconds()))
    session.status = SessionStatus.ABANDONED

"""End-to-end tests for session completion side effects."""

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from culturebridge.core.app_exceptions import LedgerUnavailable, NotFoundError, SessionAlreadyTerminal
from culturebridge.learning import service as learning_service
from culturebridge.learning.constants import Skill
from culturebridge.learning.progress.service import current_streak, find_language
from culturebridge.models.learning_session import SessionStatus, SessionType
from culturebridge.rewards.catalog import RewardCatalog
from culturebridge.rewards.service import RewardEngine
from tests.helpers.fakes import FakeLedger
from tests.helpers.seed import make_exercises, seed_achievement, seed_progress

T0 = datetime(2025, 6, 11, 10, 0, tzinfo=UTC)
YESTERDAY = date(2025, 6, 10)


async def _answer_all(db: AsyncSession, user_id, session, answer: str = "yes") -> None:
    for index in range(len(session.exercises)):
        await learning_service.complete_exercise(db, user_id, session.id, index, answer)


@pytest.mark.asyncio
async def test_week_streak_completion(db_session: AsyncSession, user_id, reward_engine, counter, ledger):
    """
    Sixth consecutive day plus a perfect session.

    The session pays 2 * (1 + 100/100) + 0.5 = 4.5 CBT, WEEK_STREAK pays 10
    and PERFECT_SCORE pays 15; FIRST_LESSON was granted earlier.
    """
    await seed_progress(db_session, user_id, "es", total_lessons=6, streak_days=6, last_study_date=YESTERDAY)
    await seed_achievement(db_session, user_id, "FIRST_LESSON")
    session = await learning_service.create_learning_session(
        db_session,
        user_id,
        SessionType.VOCABULARY,
        "es",
        "en",
        custom_exercises=make_exercises(5),
        now=T0,
    )
    await _answer_all(db_session, user_id, session)

    completion = await learning_service.complete_session(
        db_session, user_id, session.id, reward_engine, counter, now=T0 + timedelta(seconds=200)
    )

    assert completion.session.status == SessionStatus.COMPLETED
    assert completion.session.reward_cbt == Decimal("4.50")
    assert completion.reward.granted is True
    assert completion.reward.amount == Decimal("4.50")
    assert completion.reward.kind == "LANGUAGE_LEARNING"
    assert [a.code for a in completion.achievements] == ["WEEK_STREAK", "PERFECT_SCORE"]
    assert completion.total_cbt_credited == Decimal("29.50")
    assert completion.warnings == []

    progress = completion.progress
    lang = find_language(progress, "es")
    assert current_streak(progress) == 7
    assert lang.last_study_date == date(2025, 6, 11)
    assert lang.skills_json[Skill.VOCABULARY.value]["words_learned"] == 5
    assert progress.total_lessons_completed == 7
    assert Decimal(str(progress.total_cbt_earned)) == Decimal("29.50")
    assert await ledger.get_balance(user_id) == Decimal("29.50")


@pytest.mark.asyncio
async def test_first_completion_grants_first_lesson(db_session: AsyncSession, user_id, reward_engine, counter):
    session = await learning_service.create_learning_session(
        db_session, user_id, SessionType.GRAMMAR, "de", "en", now=T0
    )

    completion = await learning_service.complete_session(
        db_session, user_id, session.id, reward_engine, counter, now=T0 + timedelta(minutes=10)
    )

    # No answers: 2 * (1 + 0) and no speed bonus
    assert completion.reward.amount == Decimal("2.00")
    assert [a.code for a in completion.achievements] == ["FIRST_LESSON"]
    assert completion.total_cbt_credited == Decimal("7.00")
    assert completion.progress.total_lessons_completed == 1


@pytest.mark.asyncio
async def test_completion_persists_when_ledger_down(db_session: AsyncSession, user_id, counter):
    engine = RewardEngine(FakeLedger(fail_with=LedgerUnavailable()), RewardCatalog())
    session = await learning_service.create_learning_session(
        db_session, user_id, SessionType.VOCABULARY, "es", "en", now=T0
    )

    completion = await learning_service.complete_session(
        db_session, user_id, session.id, engine, counter, now=T0 + timedelta(minutes=1)
    )

    assert completion.session.status == SessionStatus.COMPLETED
    assert completion.reward.granted is False
    assert completion.total_cbt_credited == Decimal("0.00")
    assert completion.warnings == [
        "Session reward not granted: LEDGER_UNAVAILABLE",
        "Achievement FIRST_LESSON reward not granted: LEDGER_UNAVAILABLE",
    ]
    assert completion.progress.total_lessons_completed == 1
    assert Decimal(str(completion.progress.total_cbt_earned)) == Decimal("0")

    stats = await learning_service.get_user_learning_stats(db_session, user_id, counter, engine)
    assert stats.wallet_balance is None
    assert stats.warnings == ["Wallet balance unavailable"]


@pytest.mark.asyncio
async def test_second_completion_is_rejected(db_session: AsyncSession, user_id, reward_engine, counter):
    session = await learning_service.create_learning_session(
        db_session, user_id, SessionType.READING, "es", "en", now=T0
    )
    await learning_service.complete_session(
        db_session, user_id, session.id, reward_engine, counter, now=T0 + timedelta(minutes=5)
    )

    with pytest.raises(SessionAlreadyTerminal):
        await learning_service.complete_session(db_session, user_id, session.id, reward_engine, counter)


@pytest.mark.asyncio
async def test_stats_for_user_without_progress(db_session: AsyncSession, user_id, counter):
    with pytest.raises(NotFoundError):
        await learning_service.get_user_learning_stats(db_session, user_id, counter)


@pytest.mark.asyncio
async def test_stats_include_achievements_sessions_and_balance(
    db_session: AsyncSession, user_id, reward_engine, counter
):
    session = await learning_service.create_learning_session(
        db_session, user_id, SessionType.VOCABULARY, "es", "en", now=T0
    )
    await learning_service.complete_session(
        db_session, user_id, session.id, reward_engine, counter, now=T0 + timedelta(minutes=10)
    )

    stats = await learning_service.get_user_learning_stats(db_session, user_id, counter, reward_engine)

    assert stats.progress.total_lessons_completed == 1
    assert [a.achievement for a in stats.achievements] == ["FIRST_LESSON"]
    assert [s.id for s in stats.recent_sessions] == [session.id]
    assert stats.cultural_exchange_count == 0
    assert stats.wallet_balance == Decimal("7.00")
    assert stats.warnings == []


@pytest.mark.asyncio
async def test_recommendations_for_new_user(db_session: AsyncSession, user_id):
    recommendations = await learning_service.get_recommended_content(db_session, user_id, "es")

    assert [(r["type"], r["priority"]) for r in recommendations] == [
        ("VOCABULARY", "HIGH"),
        ("CULTURAL_CONTEXT", "MEDIUM"),
    ]


@pytest.mark.asyncio
async def test_recommendations_target_weakest_skill(db_session: AsyncSession, user_id, reward_engine, counter):
    await seed_progress(db_session, user_id, "es")
    await learning_service.create_cultural_exchange(
        db_session, user_id, "Tapas night", "Food and idioms", ["es"], reward_engine, counter, now=T0
    )
    await learning_service.create_cultural_exchange(
        db_session, user_id, "Oktoberfest", "Beer vocabulary", ["de"], reward_engine, counter, now=T0
    )

    recommendations = await learning_service.get_recommended_content(db_session, user_id, "es")

    # All skills at 0: the first skill in order is the weakest
    assert recommendations[0]["type"] == "VOCABULARY"
    assert recommendations[0]["priority"] == "HIGH"
    assert [r["title"] for r in recommendations[1:]] == ["Tapas night"]
    assert recommendations[1]["priority"] == "MEDIUM"


@pytest.mark.asyncio
async def test_recommendations_for_untracked_language(db_session: AsyncSession, user_id):
    await seed_progress(db_session, user_id, "es")
    assert await learning_service.get_recommended_content(db_session, user_id, "ja") == []

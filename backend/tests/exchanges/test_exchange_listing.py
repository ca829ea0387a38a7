"""Tests for active exchange listing."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from culturebridge.exchanges import service as exchange_service
from culturebridge.models.cultural_exchange import CulturalExchangeLanguage

T0 = datetime(2025, 6, 11, 12, 0, tzinfo=UTC)


async def _create(db: AsyncSession, title: str, languages: list[str], minutes: int):
    return await exchange_service.create_exchange(
        db, uuid4(), title, "", languages, now=T0 + timedelta(minutes=minutes)
    )


@pytest.mark.asyncio
async def test_language_filter_applies_before_limit(db_session: AsyncSession):
    for i in range(4):
        await _create(db_session, f"es-{i}", ["es"], minutes=i)
    # Newer exchanges in another language must not crowd out the matches
    for i in range(5):
        await _create(db_session, f"de-{i}", ["de"], minutes=10 + i)

    exchanges = await exchange_service.list_active_exchanges(
        db_session, "es", limit=3, with_participants=False
    )

    assert [e.title for e in exchanges] == ["es-3", "es-2", "es-1"]


@pytest.mark.asyncio
async def test_multi_language_exchange_matches_each_language(db_session: AsyncSession):
    await _create(db_session, "Iberia", ["es", "pt", "es"], minutes=0)

    for language in ("es", "pt"):
        [exchange] = await exchange_service.list_active_exchanges(db_session, language)
        assert exchange.title == "Iberia"
        assert exchange.target_languages_json == ["es", "pt"]
    assert await exchange_service.list_active_exchanges(db_session, "fr") == []

    rows = (await db_session.execute(select(CulturalExchangeLanguage.language))).scalars().all()
    assert sorted(rows) == ["es", "pt"]


@pytest.mark.asyncio
async def test_listing_without_language_returns_newest_first(db_session: AsyncSession):
    await _create(db_session, "older", ["ja"], minutes=0)
    await _create(db_session, "newer", ["ko"], minutes=5)

    exchanges = await exchange_service.list_active_exchanges(db_session, limit=10)

    assert [e.title for e in exchanges] == ["newer", "older"]
    assert all(len(e.participants) == 1 for e in exchanges)

"""Tests for the learning API endpoints."""

from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import AsyncClient

VOCABULARY_ANSWERS = ["Option A", "how", "Hello, nice to meet you"]


async def _create_session(client: AsyncClient, headers: dict, **overrides) -> dict:
    payload = {"session_type": "VOCABULARY", "target_language": "es", "native_language": "en"}
    payload.update(overrides)
    response = await client.post("/v1/learning/sessions", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_create_session(async_client: AsyncClient, auth_headers, user_id):
    data = await _create_session(async_client, auth_headers)

    assert data["user_id"] == str(user_id)
    assert data["status"] == "IN_PROGRESS"
    assert data["score"] == {"correct": 0, "total": 3, "percentage": 0.0}
    assert [e["index"] for e in data["exercises"]] == [0, 1, 2]
    # answers are never exposed
    assert all("correct_answer" not in e for e in data["exercises"])


@pytest.mark.asyncio
async def test_create_session_with_custom_exercises(async_client: AsyncClient, auth_headers):
    data = await _create_session(
        async_client,
        auth_headers,
        title="Colours",
        exercises=[
            {"exercise_type": "FILL_BLANK", "question": "Red is ___", "correct_answer": "rojo"},
            {"exercise_type": "FILL_BLANK", "question": "Blue is ___", "correct_answer": "azul"},
        ],
    )

    assert data["title"] == "Colours"
    assert data["score"]["total"] == 2


@pytest.mark.asyncio
async def test_unknown_session_type_is_validation_error(async_client: AsyncClient, auth_headers):
    response = await async_client.post(
        "/v1/learning/sessions",
        json={"session_type": "DANCING", "target_language": "es", "native_language": "en"},
        headers=auth_headers,
    )

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_missing_identity_is_unauthorized(async_client: AsyncClient):
    response = await async_client.post(
        "/v1/learning/sessions",
        json={"session_type": "VOCABULARY", "target_language": "es", "native_language": "en"},
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_answer_exercise(async_client: AsyncClient, auth_headers):
    session = await _create_session(async_client, auth_headers)

    response = await async_client.post(
        f"/v1/learning/sessions/{session['id']}/exercises/0",
        json={"answer": "Option A", "time_spent_seconds": 9},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["result"]["is_correct"] is True
    assert data["result"]["attempts"] == 1
    assert data["score"]["correct"] == 1
    assert data["score"]["percentage"] == 33.33


@pytest.mark.asyncio
async def test_answer_out_of_range(async_client: AsyncClient, auth_headers):
    session = await _create_session(async_client, auth_headers)

    response = await async_client.post(
        f"/v1/learning/sessions/{session['id']}/exercises/7",
        json={"answer": "Option A"},
        headers=auth_headers,
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "EXERCISE_INDEX_OUT_OF_RANGE"


@pytest.mark.asyncio
async def test_empty_answer_rejected(async_client: AsyncClient, auth_headers):
    session = await _create_session(async_client, auth_headers)

    response = await async_client.post(
        f"/v1/learning/sessions/{session['id']}/exercises/0",
        json={"answer": ""},
        headers=auth_headers,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_session_of_other_user_is_not_found(async_client: AsyncClient, auth_headers):
    session = await _create_session(async_client, auth_headers)

    response = await async_client.get(
        f"/v1/learning/sessions/{session['id']}",
        headers={"X-User-Id": str(uuid4())},
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_complete_session_rewards_and_achievements(async_client: AsyncClient, auth_headers):
    session = await _create_session(async_client, auth_headers)
    for index, answer in enumerate(VOCABULARY_ANSWERS):
        await async_client.post(
            f"/v1/learning/sessions/{session['id']}/exercises/{index}",
            json={"answer": answer},
            headers=auth_headers,
        )

    response = await async_client.post(
        f"/v1/learning/sessions/{session['id']}/complete", headers=auth_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["warnings"] == []
    data = body["data"]
    assert data["session"]["status"] == "COMPLETED"
    assert data["reward"]["granted"] is True
    assert Decimal(str(data["reward"]["amount"])) == Decimal("4.50")
    assert [a["code"] for a in data["achievements"]] == ["FIRST_LESSON", "PERFECT_SCORE"]
    assert Decimal(str(data["total_cbt_credited"])) == Decimal("24.50")
    assert data["progress"]["current_streak"] == 1
    assert data["progress"]["total_lessons_completed"] == 1

    again = await async_client.post(
        f"/v1/learning/sessions/{session['id']}/complete", headers=auth_headers
    )
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "SESSION_ALREADY_TERMINAL"


@pytest.mark.asyncio
async def test_abandon_session(async_client: AsyncClient, auth_headers):
    session = await _create_session(async_client, auth_headers)

    response = await async_client.post(
        f"/v1/learning/sessions/{session['id']}/abandon", headers=auth_headers
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "ABANDONED"
    assert data["reward_cbt"] is None


@pytest.mark.asyncio
async def test_stats(async_client: AsyncClient, auth_headers):
    missing = await async_client.get("/v1/learning/stats", headers=auth_headers)
    assert missing.status_code == 404

    session = await _create_session(async_client, auth_headers)
    await async_client.post(f"/v1/learning/sessions/{session['id']}/complete", headers=auth_headers)

    response = await async_client.get("/v1/learning/stats", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["progress"]["total_lessons_completed"] == 1
    assert [a["achievement"] for a in data["achievements"]] == ["FIRST_LESSON"]
    assert [s["id"] for s in data["recent_sessions"]] == [session["id"]]
    assert data["cultural_exchange_count"] == 0
    # 2.50 session reward (no correct answers, speed bonus) + 5 FIRST_LESSON
    assert Decimal(str(data["wallet_balance"])) == Decimal("7.50")


@pytest.mark.asyncio
async def test_recommendations(async_client: AsyncClient, auth_headers):
    response = await async_client.get(
        "/v1/learning/recommendations", params={"target_language": "es"}, headers=auth_headers
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert [r["type"] for r in data] == ["VOCABULARY", "CULTURAL_CONTEXT"]
    assert data[0]["priority"] == "HIGH"

"""Tests for the rewards API endpoints."""

from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_grant_reward(async_client: AsyncClient, auth_headers):
    recipient = uuid4()

    response = await async_client.post(
        "/v1/rewards/grant",
        json={"user_id": str(recipient), "kind": "REGISTRATION"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["granted"] is True
    assert data["reason"] == "granted"
    assert Decimal(str(data["amount"])) == Decimal("20.00")
    assert data["transaction_id"] is not None


@pytest.mark.asyncio
async def test_grant_clamped_then_refused(async_client: AsyncClient, auth_headers):
    recipient = str(uuid4())

    amounts = []
    for _ in range(2):
        response = await async_client.post(
            "/v1/rewards/grant",
            json={"user_id": recipient, "kind": "LEARNING_REWARD", "amount": "30"},
            headers=auth_headers,
        )
        amounts.append(response.json()["data"])
    refused = await async_client.post(
        "/v1/rewards/grant",
        json={"user_id": recipient, "kind": "LEARNING_REWARD", "amount": "1"},
        headers=auth_headers,
    )

    assert [a["reason"] for a in amounts] == ["granted", "clamped_to_daily_cap"]
    assert Decimal(str(amounts[1]["amount"])) == Decimal("20.00")
    assert refused.status_code == 200
    assert refused.json()["data"]["granted"] is False
    assert refused.json()["data"]["reason"] == "daily_cap_reached"


@pytest.mark.asyncio
async def test_grant_unknown_kind(async_client: AsyncClient, auth_headers):
    response = await async_client.post(
        "/v1/rewards/grant",
        json={"user_id": str(uuid4()), "kind": "NOT_A_KIND"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "UNKNOWN_REWARD_KIND"


@pytest.mark.asyncio
async def test_reward_stats(async_client: AsyncClient, auth_headers, user_id):
    await async_client.post(
        "/v1/rewards/grant",
        json={"user_id": str(user_id), "kind": "CULTURAL_EXCHANGE"},
        headers=auth_headers,
    )

    response = await async_client.get("/v1/rewards/stats", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert Decimal(str(data["balance"])) == Decimal("10.00")
    assert Decimal(str(data["today"])) == Decimal("10.00")
    assert Decimal(str(data["remaining_today"])) == Decimal("40.00")
    assert {k: Decimal(str(v)) for k, v in data["by_kind"].items()} == {"CULTURAL_EXCHANGE": Decimal("10.00")}
    assert [t["kind"] for t in data["recent_transactions"]] == ["CULTURAL_EXCHANGE"]


@pytest.mark.asyncio
async def test_catalog(async_client: AsyncClient):
    response = await async_client.get("/v1/rewards/catalog")

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["rewards"]) == 18
    daily_login = next(r for r in data["rewards"] if r["kind"] == "DAILY_LOGIN")
    assert Decimal(str(daily_login["token_amount"])) == Decimal("1.00")
    assert daily_login["daily_count_limit"] == 1

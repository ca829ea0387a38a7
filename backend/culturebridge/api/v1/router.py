"""API v1 router - includes all v1 endpoints."""

from fastapi import APIRouter

from culturebridge.api.v1.endpoints import exchanges, health, learning, rewards

api_router = APIRouter()

api_router.include_router(health.router, prefix="", tags=["Health"])
api_router.include_router(learning.router, prefix="/learning", tags=["Learning"])
api_router.include_router(rewards.router, prefix="/rewards", tags=["Rewards"])
api_router.include_router(exchanges.router, prefix="/exchanges", tags=["Cultural Exchanges"])

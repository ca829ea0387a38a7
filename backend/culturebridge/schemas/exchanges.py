"""Pydantic schemas for cultural exchanges."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from culturebridge.models.cultural_exchange import (
    CulturalExchange,
    ExchangeStatus,
    ParticipantRole,
)
from culturebridge.schemas.learning import AchievementAwardOut
from culturebridge.schemas.rewards import RewardGrantOut


class ExchangeCreate(BaseModel):
    """Request to create a cultural exchange."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    target_languages: list[str] = Field(..., min_length=1)


class ParticipantOut(BaseModel):
    user_id: UUID
    role: ParticipantRole
    joined_at: datetime

    class Config:
        from_attributes = True


class ExchangeOut(BaseModel):
    id: UUID
    creator_id: UUID
    title: str
    description: str
    target_languages: list[str]
    status: ExchangeStatus
    participant_count: int
    participants: list[ParticipantOut]
    created_at: datetime

    @classmethod
    def from_model(cls, exchange: CulturalExchange) -> "ExchangeOut":
        return cls(
            id=exchange.id,
            creator_id=exchange.creator_id,
            title=exchange.title,
            description=exchange.description,
            target_languages=exchange.target_languages_json or [],
            status=exchange.status,
            participant_count=len(exchange.participants),
            participants=[ParticipantOut.model_validate(p) for p in exchange.participants],
            created_at=exchange.created_at,
        )


class ExchangeActionOut(BaseModel):
    """Exchange after create/join with the reward outcome."""

    exchange: ExchangeOut
    reward: RewardGrantOut
    achievements: list[AchievementAwardOut]

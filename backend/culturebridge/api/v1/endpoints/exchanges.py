"""Cultural exchange endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from culturebridge.core.dependencies import (
    CurrentUserId,
    DbSession,
    ParticipationCounterDep,
    RewardEngineDep,
)
from culturebridge.exchanges.service import list_active_exchanges
from culturebridge.learning import service as learning_service
from culturebridge.learning.service import ExchangeAction
from culturebridge.schemas.common import Envelope
from culturebridge.schemas.exchanges import ExchangeActionOut, ExchangeCreate, ExchangeOut
from culturebridge.schemas.learning import AchievementAwardOut
from culturebridge.schemas.rewards import RewardGrantOut

router = APIRouter()


def _action_envelope(action: ExchangeAction) -> Envelope[ExchangeActionOut]:
    return Envelope(
        data=ExchangeActionOut(
            exchange=ExchangeOut.from_model(action.exchange),
            reward=RewardGrantOut.from_grant(action.reward),
            achievements=[AchievementAwardOut.from_award(a) for a in action.achievements],
        ),
        warnings=action.warnings,
    )


@router.post(
    "",
    response_model=Envelope[ExchangeActionOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_exchange(
    payload: ExchangeCreate,
    db: DbSession,
    user_id: CurrentUserId,
    reward_engine: RewardEngineDep,
    counter: ParticipationCounterDep,
):
    """Create an exchange; the creator joins as moderator and is rewarded."""
    action = await learning_service.create_cultural_exchange(
        db,
        user_id,
        payload.title,
        payload.description,
        payload.target_languages,
        reward_engine,
        counter,
    )
    return _action_envelope(action)


@router.post("/{exchange_id}/join", response_model=Envelope[ExchangeActionOut])
async def join_exchange(
    exchange_id: UUID,
    db: DbSession,
    user_id: CurrentUserId,
    reward_engine: RewardEngineDep,
    counter: ParticipationCounterDep,
):
    """Join an active exchange."""
    action = await learning_service.join_cultural_exchange(
        db, user_id, exchange_id, reward_engine, counter
    )
    return _action_envelope(action)


@router.get("", response_model=Envelope[list[ExchangeOut]])
async def list_exchanges(
    db: DbSession,
    _user_id: CurrentUserId,
    language: str | None = Query(None, max_length=16),
    limit: int = Query(20, ge=1, le=100),
):
    """Active exchanges, newest first."""
    exchanges = await list_active_exchanges(db, language, limit=limit)
    return Envelope(data=[ExchangeOut.from_model(e) for e in exchanges])

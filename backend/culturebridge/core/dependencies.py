"""FastAPI dependencies for caller identity, database and reward wiring."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from culturebridge.db.session import AsyncSessionLocal, get_db
from culturebridge.exchanges.service import SqlParticipationCounter
from culturebridge.ledger.gateway import SqlLedgerGateway
from culturebridge.rewards.catalog import get_reward_catalog
from culturebridge.rewards.service import RewardEngine


def get_current_user_id(
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> UUID:
    """Caller identity, set by the upstream gateway after authentication."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "UNAUTHORIZED", "message": "X-User-Id header missing"},
        )
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "UNAUTHORIZED", "message": "X-User-Id must be a UUID"},
        ) from None


def get_ledger() -> SqlLedgerGateway:
    """Ledger on its own sessions, capped by the ecosystem reward pool."""
    return SqlLedgerGateway(
        AsyncSessionLocal,
        reward_pool_limit=get_reward_catalog().ecosystem_reward_pool,
    )


def get_reward_engine(
    ledger: Annotated[SqlLedgerGateway, Depends(get_ledger)],
) -> RewardEngine:
    return RewardEngine(ledger, get_reward_catalog())


def get_participation_counter(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SqlParticipationCounter:
    return SqlParticipationCounter(db)


CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
RewardEngineDep = Annotated[RewardEngine, Depends(get_reward_engine)]
ParticipationCounterDep = Annotated[SqlParticipationCounter, Depends(get_participation_counter)]

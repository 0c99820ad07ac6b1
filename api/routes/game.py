"""Game API endpoints."""

from fastapi import APIRouter, Depends
from typing import Annotated

from api.schemas import BetRequest, RoundResponse, WalletResponse
from api.session import get_registry, session_id_from_header
from core.errors import NoActiveRound
from core.registry import SessionRegistry

router = APIRouter()

SessionId = Annotated[str, Depends(session_id_from_header)]
Registry = Annotated[SessionRegistry, Depends(get_registry)]


@router.get("/state")
async def get_state(session_id: SessionId, registry: Registry) -> RoundResponse:
    """Get the round in play, e.g. after a reconnect."""
    view = await registry.active_round(session_id)
    if view is None:
        raise NoActiveRound()
    return RoundResponse.from_view(view)


@router.post("/new")
async def new_round(
    request: BetRequest,
    session_id: SessionId,
    registry: Registry,
) -> RoundResponse:
    """Place a bet and deal cards."""
    view = await registry.start_round(session_id, request.amount)
    return RoundResponse.from_view(view)


@router.post("/hit")
async def hit(session_id: SessionId, registry: Registry) -> RoundResponse:
    """Player draws a card."""
    view = await registry.hit(session_id)
    return RoundResponse.from_view(view)


@router.post("/stand")
async def stand(session_id: SessionId, registry: Registry) -> RoundResponse:
    """Player stands, dealer plays."""
    view = await registry.stand(session_id)
    return RoundResponse.from_view(view)


@router.post("/restart")
async def restart(session_id: SessionId, registry: Registry) -> WalletResponse:
    """Reset the wallet to the starting balance."""
    balance = await registry.reset_wallet(session_id)
    return WalletResponse.build(balance, message="Wallet reset. Place your bet!")

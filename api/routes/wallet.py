"""Session and wallet endpoints."""

from fastapi import APIRouter, Depends
from typing import Annotated

from api.schemas import WalletResponse
from api.session import get_registry, get_session_signer, session_id_from_header
from core.registry import SessionRegistry

router = APIRouter()


@router.post("/new")
async def new_session(
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> WalletResponse:
    """Open a wallet and return its signed session token."""
    session_id, balance = await registry.create_session()
    token = get_session_signer().sign(session_id)
    return WalletResponse.build(
        balance,
        message="Welcome! Place your bet to start.",
        session_id=token,
    )


@router.get("")
async def resume_session(
    session_id: Annotated[str, Depends(session_id_from_header)],
    registry: Annotated[SessionRegistry, Depends(get_registry)],
) -> WalletResponse:
    """Balance of an existing session."""
    balance = await registry.resume_session(session_id)
    return WalletResponse.build(balance, message="Welcome back!")

"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field

from config import config
from core.cards import Card
from core.settlement import format_money
from core.session import RoundView


class BetRequest(BaseModel):
    """Request to start a round."""

    amount: int = Field(..., description="Bet amount in minor units (cents)")


class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    rank: str
    suit: str
    code: str
    value: int
    image_url: str

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            rank=card.rank.value,
            suit=card.suit.value,
            code=card.code,
            value=card.value,
            image_url=card.image_url(config.game.card_image_base),
        )


class WalletResponse(BaseModel):
    """Wallet balance."""

    session_id: str | None = None
    balance: int
    balance_display: str
    message: str = ""

    @classmethod
    def build(cls, balance: int, message: str = "", session_id: str | None = None) -> "WalletResponse":
        return cls(
            session_id=session_id,
            balance=balance,
            balance_display=format_money(balance, config.game.minor_per_major),
            message=message,
        )


class RoundResponse(BaseModel):
    """Round state; the dealer score stays hidden until the round is settled."""

    message: str
    state: str
    player_cards: list[CardResponse]
    dealer_cards: list[CardResponse]
    player_score: int
    dealer_score: int | None
    is_game_over: bool
    outcome: str | None
    bet: int
    balance: int
    balance_display: str

    @classmethod
    def from_view(cls, view: RoundView) -> "RoundResponse":
        return cls(
            message=view.message,
            state=view.state.name,
            player_cards=[CardResponse.from_card(c) for c in view.player_cards],
            dealer_cards=[CardResponse.from_card(c) for c in view.dealer_cards],
            player_score=view.player_score,
            dealer_score=view.dealer_score,
            is_game_over=view.settled,
            outcome=view.outcome.value if view.outcome else None,
            bet=view.bet,
            balance=view.balance,
            balance_display=format_money(view.balance, config.game.minor_per_major),
        )


class ErrorResponse(BaseModel):
    """Error body returned for every engine error."""

    error: str
    detail: str
    balance: int | None = None
    bet: int | None = None

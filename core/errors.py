"""Error taxonomy shared by the engine, the registry and the API layer."""

from typing import Any


class BlackjackError(Exception):
    """Base class for every error the engine reports to its caller."""

    code: str = "blackjack_error"
    status_code: int = 400

    def __init__(self, message: str | None = None, **context: Any) -> None:
        self.message = message or self.__class__.__doc__ or self.code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for a response body."""
        return {"error": self.code, "detail": self.message, **self.context}


class UnknownSession(BlackjackError):
    """No wallet exists for this session."""

    code = "unknown_session"
    status_code = 404


class InvalidBet(BlackjackError):
    """Bet must be a positive whole amount."""

    code = "invalid_bet"
    status_code = 400


class InsufficientFunds(BlackjackError):
    """Bet exceeds the wallet balance."""

    code = "insufficient_funds"
    status_code = 400

    def __init__(self, bet: int, balance: int) -> None:
        super().__init__(
            f"Bet of {bet} exceeds balance of {balance}",
            bet=bet,
            balance=balance,
        )
        self.bet = bet
        self.balance = balance


class RoundAlreadyActive(BlackjackError):
    """A round is already in progress. Finish it first."""

    code = "round_already_active"
    status_code = 409


class NoActiveRound(BlackjackError):
    """No round in progress. Start a new game first."""

    code = "no_active_round"
    status_code = 409


class InvalidTransition(BlackjackError):
    """Action is not allowed in the current round state."""

    code = "invalid_transition"
    status_code = 409


class ShoeEmpty(BlackjackError):
    """Cannot draw from an empty shoe."""

    code = "shoe_empty"
    status_code = 500


class StorageUnavailable(BlackjackError):
    """Wallet storage is unavailable."""

    code = "storage_unavailable"
    status_code = 503

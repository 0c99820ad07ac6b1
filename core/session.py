"""Player session: one wallet, one bet, at most one round in play."""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from core.cards import Card, Shoe
from core.errors import (
    InsufficientFunds,
    InvalidBet,
    NoActiveRound,
    RoundAlreadyActive,
    ShoeEmpty,
    UnknownSession,
)
from core.game import Outcome, Round, RoundState
from core.game.events import EventHandler
from core.ledger import Ledger
from core.settlement import net_result, settlement_credit

logger = logging.getLogger(__name__)

# $1000.00 in cents
DEFAULT_STARTING_BALANCE = 100_000

ShoeFactory = Callable[[], Shoe]


@dataclass(frozen=True)
class RoundView:
    """Snapshot of a round handed to the transport layer."""

    message: str
    player_cards: list[Card]
    dealer_cards: list[Card]
    player_score: int
    dealer_score: int | None
    settled: bool
    outcome: Outcome | None
    state: RoundState
    bet: int
    balance: int

    @classmethod
    def from_round(cls, game_round: Round, balance: int) -> "RoundView":
        """
        Build a view of ``game_round``.

        The full dealer hand is always included; the dealer score is only
        reported once the round is settled.
        """
        settled = game_round.is_settled()
        return cls(
            message=game_round.message,
            player_cards=list(game_round.player_hand.cards),
            dealer_cards=list(game_round.dealer_hand.cards),
            player_score=game_round.player_hand.value,
            dealer_score=game_round.dealer_hand.value if settled else None,
            settled=settled,
            outcome=game_round.outcome,
            state=game_round.state,
            bet=game_round.bet,
            balance=balance,
        )


class Session:
    """
    Binds a round lifecycle to a ledger wallet.

    The ledger holds the authoritative balance; the session reads it on
    every operation and never caches it between calls. Callers must
    serialise operations on one session (the registry holds a lock per
    session id).
    """

    def __init__(
        self,
        session_id: str,
        ledger: Ledger,
        starting_balance: int = DEFAULT_STARTING_BALANCE,
        shoe_factory: ShoeFactory | None = None,
        event_handler: EventHandler | None = None,
    ) -> None:
        self.session_id = session_id
        self.ledger = ledger
        self.starting_balance = starting_balance
        self.bet = 0
        self.round: Round | None = None
        self.last_activity = time.monotonic()
        self._shoe_factory = shoe_factory or Shoe
        self._event_handler = event_handler

    def touch(self) -> None:
        """Record activity for idle eviction."""
        self.last_activity = time.monotonic()

    @property
    def has_active_round(self) -> bool:
        return self.round is not None and not self.round.is_settled()

    @property
    def has_unpaid_round(self) -> bool:
        """A settled round whose credit has not reached the ledger yet."""
        return (
            self.round is not None
            and self.round.is_settled()
            and not self.round.settlement_recorded
        )

    async def balance(self) -> int:
        """Current wallet balance from the ledger."""
        balance = await self.ledger.get(self.session_id)
        if balance is None:
            raise UnknownSession(f"Unknown session: {self.session_id}")
        return balance

    async def start_round(self, bet: int) -> RoundView:
        """
        Debit the bet, deal a new round, and settle it at once on a natural.

        Raises:
            UnknownSession: No wallet for this session
            InvalidBet: Bet is not a positive integer
            InsufficientFunds: Bet exceeds the balance
            RoundAlreadyActive: A round is still in play
        """
        if self.has_unpaid_round:
            # Pay out the previous round before taking a new stake
            await self._settle(self.round)
        balance = await self.balance()

        if isinstance(bet, bool) or not isinstance(bet, int) or bet <= 0:
            raise InvalidBet(f"Bet must be a positive whole amount, got {bet!r}")
        if bet > balance:
            raise InsufficientFunds(bet=bet, balance=balance)
        if self.has_active_round:
            raise RoundAlreadyActive()

        # Stake leaves the wallet before any card is dealt
        balance -= bet
        await self.ledger.set(self.session_id, balance)

        game_round = Round(shoe=self._shoe_factory(), bet=bet)
        if self._event_handler is not None:
            game_round.subscribe(self._event_handler)
        self.bet = bet
        self.round = game_round
        logger.info("Session %s bet %d, balance now %d", self.session_id, bet, balance)

        return await self._advance(game_round, game_round.deal, balance)

    async def hit(self) -> RoundView:
        """Player hits; a 21 stands automatically and a bust settles."""
        game_round = self._require_round()
        return await self._advance(game_round, game_round.hit)

    async def stand(self) -> RoundView:
        """Player stands; the dealer plays out and the round settles."""
        game_round = self._require_round()
        return await self._advance(game_round, game_round.stand)

    async def reset_wallet(self) -> int:
        """Restore the starting balance and drop any round in play, whatever its state."""
        if self.round is not None:
            logger.info(
                "Session %s discarding %s round on wallet reset",
                self.session_id,
                self.round.state,
            )
        self.round = None
        self.bet = 0
        await self.ledger.set(self.session_id, self.starting_balance)
        logger.info("Session %s wallet reset to %d", self.session_id, self.starting_balance)
        return self.starting_balance

    async def current_view(self) -> RoundView | None:
        """View of the round in play, if any."""
        if self.round is None:
            return None
        return RoundView.from_round(self.round, await self.balance())

    def _require_round(self) -> Round:
        if self.round is None:
            raise NoActiveRound()
        return self.round

    async def _advance(
        self,
        game_round: Round,
        action: Callable[[], Outcome | None],
        balance: int | None = None,
    ) -> RoundView:
        """Run one round transition and settle if it finished the round."""
        try:
            action()
        except ShoeEmpty:
            await self._abort(game_round)
            raise

        if game_round.is_settled():
            balance = await self._settle(game_round)
        elif balance is None:
            balance = await self.balance()

        return RoundView.from_round(game_round, balance)

    async def _settle(self, game_round: Round) -> int:
        """
        Credit the wallet for a settled round, once.

        The round is only marked paid after the credit is stored, so a
        failed write leaves it in place and the next call retries it.
        """
        balance = await self.balance()

        if not game_round.settlement_recorded:
            outcome = game_round.outcome
            balance += settlement_credit(outcome, game_round.bet)  # type: ignore
            await self.ledger.set(self.session_id, balance)
            game_round.record_settlement()
            logger.info(
                "Session %s settled %s on bet %d (net %+d), balance now %d",
                self.session_id,
                outcome.value,
                game_round.bet,
                net_result(outcome, game_round.bet),
                balance,
            )

        if self.round is game_round:
            self.round = None
            self.bet = 0
        return balance

    async def _abort(self, game_round: Round) -> None:
        """Refund the stake and drop a round that could not be dealt out."""
        logger.error(
            "Session %s ran out of cards in state %s; refunding bet %d",
            self.session_id,
            game_round.state,
            game_round.bet,
        )
        if self.round is game_round:
            self.round = None
            self.bet = 0
        balance = await self.balance()
        await self.ledger.set(self.session_id, balance + game_round.bet)

"""Single-round blackjack engine with a state machine."""

from random import Random
from typing import Callable

from transitions import Machine

from core.cards import Card, Shoe
from core.errors import InvalidTransition
from core.hand import BLACKJACK, Hand
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.state import Outcome, RoundState

WELCOME_MESSAGE = "Welcome to Blackjack!"


class Round:
    """
    One round of blackjack over one shoe.

    Pure game logic: no wallet, no storage. The owning session reads
    ``outcome`` after each call and settles the bet when the round reaches
    SETTLED.

    Out-of-state calls: ``deal()`` outside DEALING and ``hit()``/``stand()``
    before the deal raise InvalidTransition. Once SETTLED, ``hit()`` and
    ``stand()`` are no-ops that return the settled outcome.
    """

    # Dealer draws below this total and stands on every 17, soft or hard
    DEALER_STANDS_ON = 17

    STATES = [s.name.lower() for s in RoundState]

    TRANSITIONS = [
        {"trigger": "begin_player_turn", "source": "dealing", "dest": "player_turn"},
        {"trigger": "settle_natural", "source": "dealing", "dest": "settled"},
        {"trigger": "settle_bust", "source": "player_turn", "dest": "settled"},
        {"trigger": "begin_dealer_turn", "source": "player_turn", "dest": "dealer_turn"},
        {"trigger": "settle_showdown", "source": "dealer_turn", "dest": "settled"},
    ]

    def __init__(
        self,
        shoe: Shoe | None = None,
        bet: int = 0,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a round waiting to be dealt.

        Args:
            shoe: Shoe to deal from (a freshly shuffled one if not provided)
            bet: Stake riding on this round, kept for reporting
            rng: Random number generator used when building the shoe
        """
        self.shoe = shoe or Shoe(rng=rng)
        self.bet = bet
        self.player_hand = Hand()
        self.dealer_hand = Hand()
        self.outcome: Outcome | None = None
        self.message = ""
        self.events = EventEmitter()
        self._settlement_recorded = False

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="dealing",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> RoundState:
        """Get current round state as enum."""
        return RoundState[self._machine_state.upper()]  # type: ignore

    def is_settled(self) -> bool:
        """Check if the round has reached its outcome."""
        return self.state == RoundState.SETTLED

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to round events."""
        self.events.subscribe(handler, event_type)

    def deal(self) -> Outcome | None:
        """
        Deal two cards each (player, player, dealer, dealer) and check naturals.

        Returns:
            The outcome if a natural settled the round, otherwise None
        """
        if self.state != RoundState.DEALING:
            raise InvalidTransition(f"Cannot deal in state {self.state}")

        for hand in (self.player_hand, self.player_hand, self.dealer_hand, self.dealer_hand):
            self._deal_card_to_hand(hand)

        player_bj = self.player_hand.is_blackjack
        dealer_bj = self.dealer_hand.is_blackjack

        self.events.emit_new(
            EventType.ROUND_DEALT,
            player_value=self.player_hand.value,
            dealer_upcard=self.dealer_hand.cards[0].code,
        )

        if player_bj and dealer_bj:
            self._settle(
                Outcome.PUSH,
                "Push! Both player and dealer have Blackjack.",
                self.settle_natural,
            )
        elif player_bj:
            self._settle(Outcome.PLAYER_BLACKJACK, "Blackjack! Player wins!", self.settle_natural)
        elif dealer_bj:
            self._settle(Outcome.DEALER_WINS, "Dealer has Blackjack. Dealer wins.", self.settle_natural)
        else:
            self.message = WELCOME_MESSAGE
            self.begin_player_turn()

        return self.outcome

    def hit(self) -> Outcome | None:
        """
        Player takes one card.

        A bust settles the round without the dealer drawing. Reaching exactly
        21 stands automatically in the same call, so a 21 never waits for
        another player action.

        Returns:
            The outcome if the round is settled, otherwise None
        """
        if self.is_settled():
            return self.outcome
        if self.state != RoundState.PLAYER_TURN:
            raise InvalidTransition(f"Cannot hit in state {self.state}")

        self._deal_card_to_hand(self.player_hand)
        value = self.player_hand.value
        self.events.emit_new(EventType.PLAYER_HIT, hand_value=value)

        if value > BLACKJACK:
            self._settle(
                Outcome.PLAYER_BUST,
                f"Player busts with {value}! Dealer wins.",
                self.settle_bust,
            )
        elif value == BLACKJACK:
            return self.stand()

        return self.outcome

    def stand(self) -> Outcome:
        """
        Player stands; dealer draws to 17 and the hands are compared.

        Returns:
            The settled outcome
        """
        if self.is_settled():
            return self.outcome  # type: ignore[return-value]
        if self.state != RoundState.PLAYER_TURN:
            raise InvalidTransition(f"Cannot stand in state {self.state}")

        self.events.emit_new(EventType.PLAYER_STAND, hand_value=self.player_hand.value)
        self.begin_dealer_turn()

        while self.dealer_hand.value < self.DEALER_STANDS_ON:
            self._deal_card_to_hand(self.dealer_hand)
            self.events.emit_new(EventType.DEALER_HITS, hand_value=self.dealer_hand.value)

        outcome, message = self._showdown()
        self._settle(outcome, message, self.settle_showdown)
        return outcome

    @property
    def settlement_recorded(self) -> bool:
        """True once the wallet has been credited for this round."""
        return self._settlement_recorded

    def record_settlement(self) -> None:
        """Mark the payout as applied; a round can be paid only once."""
        if not self.is_settled():
            raise InvalidTransition(f"Cannot pay out a round in state {self.state}")
        if self._settlement_recorded:
            raise InvalidTransition("Round has already been paid out")
        self._settlement_recorded = True

    def _showdown(self) -> tuple[Outcome, str]:
        """Compare the standing player hand against the finished dealer hand."""
        player = self.player_hand.value
        dealer = self.dealer_hand.value

        if dealer > BLACKJACK:
            return Outcome.PLAYER_WINS, f"Dealer busts with {dealer}! Player wins."
        if player > dealer:
            return Outcome.PLAYER_WINS, f"Player wins with {player} against {dealer}."
        if player < dealer:
            return Outcome.DEALER_WINS, f"Dealer wins with {dealer} against {player}."
        return Outcome.PUSH, f"It's a tie (Push) with {player}."

    def _settle(self, outcome: Outcome, message: str, trigger: Callable[[], bool]) -> None:
        """Record the outcome and fire the transition into SETTLED."""
        self.outcome = outcome
        self.message = message
        trigger()
        self.events.emit_new(
            EventType.ROUND_SETTLED,
            outcome=outcome.value,
            player_value=self.player_hand.value,
            dealer_value=self.dealer_hand.value,
        )

    def _deal_card_to_hand(self, hand: Hand) -> Card:
        """Deal a card to a hand."""
        card = self.shoe.draw()
        hand.add_card(card)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=card.code,
            hand="dealer" if hand is self.dealer_hand else "player",
            hand_value=hand.value,
        )
        return card

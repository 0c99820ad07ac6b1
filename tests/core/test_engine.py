"""Tests for the round state machine."""

import pytest
from random import Random

from core.cards import Shoe
from core.errors import InvalidTransition, ShoeEmpty
from core.game import EventType, Outcome, Round, RoundState
from core.game.engine import WELCOME_MESSAGE
from core.game.state import VALID_TRANSITIONS, is_valid_transition


def stacked_round(*codes: str, bet: int = 100) -> Round:
    return Round(shoe=Shoe.stacked(codes), bet=bet)


def codes(hand) -> list[str]:
    return [c.code for c in hand]


class TestStateTable:
    """Tests for the transition table."""

    def test_machine_transitions_are_valid(self):
        """Every trigger wired into the engine is an allowed transition."""
        for t in Round.TRANSITIONS:
            source = RoundState[t["source"].upper()]
            dest = RoundState[t["dest"].upper()]
            assert is_valid_transition(source, dest), t["trigger"]

    def test_settled_is_terminal(self):
        assert VALID_TRANSITIONS[RoundState.SETTLED] == []
        assert not is_valid_transition(RoundState.SETTLED, RoundState.PLAYER_TURN)

    def test_state_str(self):
        assert str(RoundState.PLAYER_TURN) == "Player Turn"


class TestDeal:
    """Tests for the initial deal."""

    def test_new_round_is_dealing(self):
        game_round = Round(rng=Random(1))
        assert game_round.state == RoundState.DEALING
        assert game_round.outcome is None

    def test_deal_order_player_player_dealer_dealer(self):
        game_round = stacked_round("0S", "5H", "9D", "8C")
        assert game_round.deal() is None
        assert codes(game_round.player_hand) == ["0S", "5H"]
        assert codes(game_round.dealer_hand) == ["9D", "8C"]
        assert game_round.state == RoundState.PLAYER_TURN
        assert game_round.message == WELCOME_MESSAGE

    def test_player_natural(self):
        """Player {10, A} against dealer 17 settles as a blackjack."""
        game_round = stacked_round("0S", "AH", "9D", "8C")
        assert game_round.deal() == Outcome.PLAYER_BLACKJACK
        assert game_round.state == RoundState.SETTLED
        assert game_round.message == "Blackjack! Player wins!"

    def test_dealer_natural(self):
        game_round = stacked_round("0S", "9H", "AD", "KC")
        assert game_round.deal() == Outcome.DEALER_WINS
        assert game_round.is_settled()
        assert game_round.message == "Dealer has Blackjack. Dealer wins."

    def test_double_natural_is_push(self):
        game_round = stacked_round("0S", "AH", "KD", "AC")
        assert game_round.deal() == Outcome.PUSH
        assert game_round.message == "Push! Both player and dealer have Blackjack."

    def test_deal_twice_raises(self):
        game_round = stacked_round("0S", "5H", "9D", "8C")
        game_round.deal()
        with pytest.raises(InvalidTransition):
            game_round.deal()

    def test_deal_emits_events(self):
        game_round = stacked_round("0S", "5H", "9D", "8C")
        seen = []
        game_round.subscribe(seen.append)
        game_round.deal()

        types = [e.event_type for e in seen]
        assert types.count(EventType.CARD_DEALT) == 4
        assert types[-1] == EventType.ROUND_DEALT
        assert seen[-1].data["dealer_upcard"] == "9D"


class TestHit:
    """Tests for the player hitting."""

    def test_hit_before_deal_raises(self):
        game_round = stacked_round("0S", "5H", "9D", "8C")
        with pytest.raises(InvalidTransition):
            game_round.hit()

    def test_hit_keeps_turn(self):
        game_round = stacked_round("0S", "2H", "9D", "8C", "3S")
        game_round.deal()
        assert game_round.hit() is None
        assert game_round.player_hand.value == 15
        assert game_round.state == RoundState.PLAYER_TURN

    def test_bust_from_15_to_25(self):
        """A bust reports the exact total and the dealer never draws."""
        game_round = stacked_round("0S", "5H", "9D", "8C", "KC", "2D")
        game_round.deal()

        assert game_round.hit() == Outcome.PLAYER_BUST
        assert game_round.is_settled()
        assert game_round.message == "Player busts with 25! Dealer wins."
        assert len(game_round.dealer_hand) == 2
        assert game_round.shoe.cards_remaining == 1

    def test_hit_to_21_stands_automatically(self):
        game_round = stacked_round("5S", "6H", "0D", "7C", "KH")
        game_round.deal()

        assert game_round.hit() == Outcome.PLAYER_WINS
        assert game_round.is_settled()
        assert game_round.message == "Player wins with 21 against 17."
        event_types = [e.event_type for e in game_round.events.history]
        assert EventType.PLAYER_STAND in event_types

    def test_hit_after_settled_is_noop(self):
        game_round = stacked_round("0S", "5H", "9D", "8C", "KC", "2D")
        game_round.deal()
        game_round.hit()

        assert game_round.hit() == Outcome.PLAYER_BUST
        assert len(game_round.player_hand) == 3
        assert game_round.shoe.cards_remaining == 1


class TestStand:
    """Tests for standing and the dealer's play."""

    def test_stand_before_deal_raises(self):
        game_round = stacked_round("0S", "5H", "9D", "8C")
        with pytest.raises(InvalidTransition):
            game_round.stand()

    def test_dealer_draws_from_12_to_17(self):
        """Player 18 stands, dealer draws 12 -> 17 and stops."""
        game_round = stacked_round("0S", "8H", "7D", "5C", "5H", "9S")
        game_round.deal()

        assert game_round.stand() == Outcome.PLAYER_WINS
        assert game_round.dealer_hand.value == 17
        assert codes(game_round.dealer_hand) == ["7D", "5C", "5H"]
        assert game_round.message == "Player wins with 18 against 17."

    def test_dealer_stands_on_soft_17(self):
        game_round = stacked_round("0S", "9H", "AD", "6C", "5H")
        game_round.deal()

        assert game_round.stand() == Outcome.PLAYER_WINS
        assert len(game_round.dealer_hand) == 2

    def test_dealer_bust(self):
        game_round = stacked_round("0S", "8H", "0D", "6C", "KH")
        game_round.deal()

        assert game_round.stand() == Outcome.PLAYER_WINS
        assert game_round.message == "Dealer busts with 26! Player wins."

    def test_dealer_wins_higher(self):
        game_round = stacked_round("0S", "7H", "0D", "9C")
        game_round.deal()

        assert game_round.stand() == Outcome.DEALER_WINS
        assert game_round.message == "Dealer wins with 19 against 17."

    def test_tie_is_push(self):
        game_round = stacked_round("0S", "8H", "0D", "8C")
        game_round.deal()

        assert game_round.stand() == Outcome.PUSH
        assert game_round.message == "It's a tie (Push) with 18."

    def test_stand_twice_is_noop(self):
        game_round = stacked_round("0S", "8H", "7D", "5C", "5H", "9S")
        game_round.deal()
        game_round.stand()
        dealer_cards = codes(game_round.dealer_hand)

        assert game_round.stand() == Outcome.PLAYER_WINS
        assert codes(game_round.dealer_hand) == dealer_cards

    def test_stand_emits_settled_event(self):
        game_round = stacked_round("0S", "8H", "0D", "8C")
        settled = []
        game_round.subscribe(settled.append, EventType.ROUND_SETTLED)
        game_round.deal()
        game_round.stand()

        assert len(settled) == 1
        assert settled[0].data["outcome"] == "push"

    def test_running_out_of_cards_raises(self):
        game_round = stacked_round("0S", "5H", "9D", "2C")
        game_round.deal()
        with pytest.raises(ShoeEmpty):
            game_round.stand()


class TestSettlementLatch:
    """Tests for the pay-once latch."""

    def test_record_settlement_once(self):
        game_round = stacked_round("0S", "AH", "9D", "8C")
        game_round.deal()

        assert not game_round.settlement_recorded
        game_round.record_settlement()
        assert game_round.settlement_recorded
        with pytest.raises(InvalidTransition):
            game_round.record_settlement()

    def test_cannot_record_unsettled_round(self):
        game_round = stacked_round("0S", "5H", "9D", "8C")
        game_round.deal()
        with pytest.raises(InvalidTransition):
            game_round.record_settlement()

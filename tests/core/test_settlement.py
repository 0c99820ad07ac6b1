"""Tests for the payout table and money formatting."""

import pytest

from core.game import Outcome
from core.settlement import format_money, net_result, settlement_credit


@pytest.mark.parametrize(
    "outcome,credit",
    [
        (Outcome.PLAYER_BLACKJACK, 250),
        (Outcome.PLAYER_WINS, 200),
        (Outcome.PUSH, 100),
        (Outcome.DEALER_WINS, 0),
        (Outcome.PLAYER_BUST, 0),
    ],
)
def test_settlement_credit(outcome, credit):
    """Credits include the stake, which was debited up front."""
    assert settlement_credit(outcome, 100) == credit


def test_every_outcome_has_a_payout():
    for outcome in Outcome:
        assert isinstance(settlement_credit(outcome, 10), int)


def test_blackjack_on_odd_bet_rounds_down():
    # 3:2 on 5 cents is 7.5 cents; the half cent is not paid
    assert settlement_credit(Outcome.PLAYER_BLACKJACK, 5) == 12
    assert net_result(Outcome.PLAYER_BLACKJACK, 5) == 7


def test_repeated_blackjacks_do_not_drift():
    """Integer arithmetic stays exact across many 3:2 payouts."""
    balance = 100_000
    for _ in range(1000):
        balance -= 1_000
        balance += settlement_credit(Outcome.PLAYER_BLACKJACK, 1_000)
    assert balance == 100_000 + 1000 * 1_500


@pytest.mark.parametrize(
    "outcome,net",
    [
        (Outcome.PLAYER_BLACKJACK, 150),
        (Outcome.PLAYER_WINS, 100),
        (Outcome.PUSH, 0),
        (Outcome.DEALER_WINS, -100),
        (Outcome.PLAYER_BUST, -100),
    ],
)
def test_net_result(outcome, net):
    assert net_result(outcome, 100) == net


@pytest.mark.parametrize(
    "amount,text",
    [
        (100_000, "1000.00"),
        (101_550, "1015.50"),
        (5, "0.05"),
        (0, "0.00"),
    ],
)
def test_format_money(amount, text):
    assert format_money(amount) == text

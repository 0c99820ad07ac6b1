"""Payout table and money helpers.

All amounts are integers in minor currency units (cents). Decimal is used
only for the 3:2 arithmetic, and the result is rounded down to a whole unit.
"""

from decimal import ROUND_DOWN, Decimal

from core.game.state import Outcome

# Credit returned to the wallet per unit staked. The stake was debited when
# the round started, so these include the stake itself.
PAYOUT_MULTIPLIERS: dict[Outcome, Decimal] = {
    Outcome.PLAYER_BLACKJACK: Decimal("2.5"),  # stake + 3:2
    Outcome.PLAYER_WINS: Decimal("2"),  # stake + 1:1
    Outcome.PUSH: Decimal("1"),  # stake back
    Outcome.DEALER_WINS: Decimal("0"),
    Outcome.PLAYER_BUST: Decimal("0"),
}


def settlement_credit(outcome: Outcome, bet: int) -> int:
    """
    Amount to credit back to the wallet for a settled round.

    Args:
        outcome: Terminal outcome of the round
        bet: Stake in minor units, already debited

    Returns:
        Credit in minor units
    """
    credit = Decimal(bet) * PAYOUT_MULTIPLIERS[outcome]
    return int(credit.to_integral_value(rounding=ROUND_DOWN))


def net_result(outcome: Outcome, bet: int) -> int:
    """Net change to the wallet over the whole round (credit minus stake)."""
    return settlement_credit(outcome, bet) - bet


def format_money(amount: int, minor_per_major: int = 100) -> str:
    """Render minor units as a fixed two-place major amount, e.g. 101550 -> '1015.50'."""
    places = len(str(minor_per_major)) - 1
    value = Decimal(amount) / Decimal(minor_per_major)
    return f"{value:.{places}f}"

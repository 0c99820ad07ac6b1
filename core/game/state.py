"""Round states and outcomes."""

from enum import Enum, auto


class RoundState(Enum):
    """
    Round state machine states.

    Flow: DEALING → PLAYER_TURN → DEALER_TURN → SETTLED
    A natural on the deal goes DEALING → SETTLED, a player bust goes
    PLAYER_TURN → SETTLED.
    """

    DEALING = auto()
    PLAYER_TURN = auto()
    DEALER_TURN = auto()
    SETTLED = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


class Outcome(Enum):
    """Terminal result of a round; drives the payout table."""

    PLAYER_BLACKJACK = "player_blackjack"
    PLAYER_WINS = "player_wins"
    DEALER_WINS = "dealer_wins"
    PLAYER_BUST = "player_bust"
    PUSH = "push"


# Valid state transitions
VALID_TRANSITIONS: dict[RoundState, list[RoundState]] = {
    RoundState.DEALING: [RoundState.PLAYER_TURN, RoundState.SETTLED],
    RoundState.PLAYER_TURN: [RoundState.DEALER_TURN, RoundState.SETTLED],
    RoundState.DEALER_TURN: [RoundState.SETTLED],
    RoundState.SETTLED: [],  # Terminal state
}


def is_valid_transition(from_state: RoundState, to_state: RoundState) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Desired state

    Returns:
        True if the transition is allowed
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])

"""Pytest fixtures for blackjack session tests."""

from collections import deque
from random import Random

import pytest
import pytest_asyncio

from core.cards import Card, Shoe, Rank, Suit
from core.hand import Hand
from core.ledger import InMemoryLedger
from core.registry import SessionRegistry
from core.session import Session

STARTING_BALANCE = 100_000


class StackedShoes:
    """Shoe factory that deals queued card orders, then falls back to seeded shoes."""

    def __init__(self, seed: int = 42) -> None:
        self._queue: deque[tuple[str, ...]] = deque()
        self._rng = Random(seed)

    def push(self, *codes: str) -> None:
        """Queue the draw order for the next round's shoe."""
        self._queue.append(codes)

    def __call__(self) -> Shoe:
        if self._queue:
            return Shoe.stacked(self._queue.popleft())
        return Shoe(rng=self._rng)


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def shoe(rng):
    """A shuffled single-deck shoe."""
    return Shoe(rng=rng)


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    hand = Hand()
    hand.add_card(Card(Rank.ACE, Suit.SPADES))
    hand.add_card(Card(Rank.KING, Suit.HEARTS))
    return hand


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    hand = Hand()
    hand.add_card(Card(Rank.ACE, Suit.SPADES))
    hand.add_card(Card(Rank.SIX, Suit.HEARTS))
    return hand


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    hand = Hand()
    hand.add_card(Card(Rank.TEN, Suit.SPADES))
    hand.add_card(Card(Rank.SIX, Suit.HEARTS))
    return hand


@pytest.fixture
def bust_hand():
    """A busted hand."""
    hand = Hand()
    hand.add_card(Card(Rank.TEN, Suit.SPADES))
    hand.add_card(Card(Rank.SIX, Suit.HEARTS))
    hand.add_card(Card(Rank.KING, Suit.CLUBS))
    return hand


@pytest.fixture
def ledger():
    """Empty in-memory wallet ledger."""
    return InMemoryLedger()


@pytest.fixture
def stacked_shoes():
    """Shoe factory whose next shoes can be stacked per test."""
    return StackedShoes()


@pytest_asyncio.fixture
async def session(ledger, stacked_shoes):
    """A session with a funded wallet and stackable shoes."""
    await ledger.set("player-1", STARTING_BALANCE)
    return Session(
        "player-1",
        ledger,
        starting_balance=STARTING_BALANCE,
        shoe_factory=stacked_shoes,
    )


@pytest.fixture
def registry(ledger, stacked_shoes):
    """A session registry over the in-memory ledger."""
    return SessionRegistry(
        ledger,
        starting_balance=STARTING_BALANCE,
        session_ttl=60,
        shoe_factory=stacked_shoes,
    )


"""Core blackjack engine - 100% UI-agnostic."""

from core.cards import Card, Shoe, Rank, Suit
from core.hand import Hand, score
from core.ledger import Ledger, InMemoryLedger, RedisLedger
from core.registry import SessionRegistry
from core.session import RoundView, Session

__all__ = [
    "Card",
    "Shoe",
    "Rank",
    "Suit",
    "Hand",
    "score",
    "Ledger",
    "InMemoryLedger",
    "RedisLedger",
    "SessionRegistry",
    "RoundView",
    "Session",
]

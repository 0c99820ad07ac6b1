"""Card and Shoe classes - immutable card representations."""

from dataclasses import dataclass
from enum import Enum
from random import Random, SystemRandom
from typing import Iterable, Iterator

from core.errors import ShoeEmpty

DEFAULT_IMAGE_BASE = "https://deckofcardsapi.com/static/img"


class Suit(Enum):
    """Card suits."""

    SPADES = "Spades"
    HEARTS = "Hearts"
    DIAMONDS = "Diamonds"
    CLUBS = "Clubs"

    def __str__(self) -> str:
        symbols = {
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♦",
            Suit.HEARTS: "♥",
            Suit.SPADES: "♠",
        }
        return symbols[self]

    @property
    def code(self) -> str:
        """Single-letter suit code ('S', 'H', 'D', 'C')."""
        return self.value[0]


class Rank(Enum):
    """Card ranks, valued by their display label."""

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"

    def __str__(self) -> str:
        return self.value

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self == Rank.ACE:
            return 11
        if self in (Rank.JACK, Rank.QUEEN, Rank.KING):
            return 10
        return int(self.value)

    @property
    def code(self) -> str:
        """Rank part of the card code; ten is written as '0'."""
        return "0" if self == Rank.TEN else self.value

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the nominal blackjack point value."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    @property
    def code(self) -> str:
        """Display code such as 'AS', 'KH' or '0D' (ten of diamonds)."""
        return f"{self.rank.code}{self.suit.code}"

    @property
    def name(self) -> str:
        """Readable name, e.g. 'A of Spades'."""
        return f"{self.rank} of {self.suit.value}"

    def image_url(self, base: str = DEFAULT_IMAGE_BASE) -> str:
        """URL of the card face image."""
        return f"{base.rstrip('/')}/{self.code}.png"

    @classmethod
    def from_code(cls, s: str) -> "Card":
        """Create a card from a code like 'AS', '0H', '10H' or 'kd'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card code: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        rank_map = {rank.code: rank for rank in Rank}
        rank_map["10"] = Rank.TEN
        suit_map = {suit.code: suit for suit in Suit}

        if rank_str not in rank_map:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in suit_map:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(rank_map[rank_str], suit_map[suit_str])


def full_deck() -> list[Card]:
    """All 52 cards in suit-major order."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


class Shoe:
    """A single shuffled deck, dealt from one end without replacement."""

    SIZE = 52

    def __init__(self, rng: Random | None = None) -> None:
        """
        Build the 52 cards and shuffle them once.

        Args:
            rng: Random number generator for shuffling. Defaults to the
                operating system entropy source.
        """
        self._rng = rng or SystemRandom()
        self._cards: list[Card] = full_deck()
        self._size = len(self._cards)
        self._shuffle()

    @classmethod
    def stacked(cls, cards: Iterable[Card | str]) -> "Shoe":
        """
        Build an unshuffled shoe that deals ``cards`` in the given order.

        Cards may be given as Card objects or codes ('AS', '0H').
        """
        ordered = [c if isinstance(c, Card) else Card.from_code(c) for c in cards]
        if len(set(ordered)) != len(ordered):
            raise ValueError("Stacked shoe contains duplicate cards")
        if len(ordered) > cls.SIZE:
            raise ValueError("Stacked shoe cannot hold more than 52 cards")

        shoe = cls.__new__(cls)
        shoe._rng = None
        # Draws pop from the end of the list
        shoe._cards = list(reversed(ordered))
        shoe._size = len(ordered)
        return shoe

    def _shuffle(self) -> None:
        """Fisher-Yates shuffle: swap each index with a uniform index at or below it."""
        cards = self._cards
        for i in range(len(cards) - 1, 0, -1):
            j = self._rng.randint(0, i)
            cards[i], cards[j] = cards[j], cards[i]

    def draw(self) -> Card:
        """Remove and return the next card."""
        if not self._cards:
            raise ShoeEmpty()
        return self._cards.pop()

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)

    @property
    def cards_dealt(self) -> int:
        """Return the number of cards dealt."""
        return self._size - len(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        """Iterate remaining cards in draw order."""
        return reversed(self._cards)

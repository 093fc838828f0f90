from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal

Rank = Literal["A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K"]
Suit = Literal["hearts", "diamonds", "clubs", "spades"]

RANKS: tuple[Rank, ...] = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K")
SUITS: tuple[Suit, ...] = ("hearts", "diamonds", "clubs", "spades")

DECK_SIZE = len(RANKS) * len(SUITS)


@dataclass(frozen=True)
class Card:
    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank} of {self.suit}"


def full_deck() -> list[Card]:
    """All 52 cards, unshuffled, grouped by suit."""
    return [Card(rank=rank, suit=suit) for suit in SUITS for rank in RANKS]


def has_rank(hand: Iterable[Card], rank: str) -> bool:
    return any(card.rank == rank for card in hand)


def count_ranks(hand: Sequence[Card]) -> dict[Rank, int]:
    counts: dict[Rank, int] = {}
    for card in hand:
        counts[card.rank] = counts.get(card.rank, 0) + 1
    return counts

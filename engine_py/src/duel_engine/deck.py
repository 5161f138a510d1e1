"""
Deck creation, shuffling and drawing.
"""

import random
from typing import Iterator, List, Optional

from .constants import DECK_SIZE, create_catalog
from .errors import DeckEmpty, DeckExhausted
from .models import Card, SessionState


def shuffle_deck(deck: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Shuffle a deck uniformly.

    Args:
        deck: Cards to shuffle
        rng: Optional random source for deterministic shuffling

    Returns:
        Shuffled copy of the deck
    """
    deck_copy = deck.copy()
    (rng or random).shuffle(deck_copy)
    return deck_copy


class Deck:
    """Ordered remaining cards; the front is drawn next."""

    def __init__(self, cards: Optional[List[Card]] = None):
        self._cards: List[Card] = list(cards or [])

    @classmethod
    def generate(cls, rng: Optional[random.Random] = None) -> "Deck":
        return cls(shuffle_deck(create_catalog(), rng))

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(list(self._cards))

    def __contains__(self, card: Card) -> bool:
        return card in self._cards

    @property
    def is_empty(self) -> bool:
        return not self._cards

    def draw(self, n: int, exact: bool = True) -> List[Card]:
        """
        Remove and return up to n cards from the front.

        Raises:
            DeckExhausted: exact is set and fewer than n cards remain;
                the deck is left untouched.
        """
        if exact and len(self._cards) < n:
            raise DeckExhausted(f"Deck exhausted. Cannot deal {n} cards ({len(self._cards)} left).")
        drawn = self._cards[:n]
        del self._cards[:n]
        return drawn

    def draw_one(self) -> Card:
        if not self._cards:
            raise DeckEmpty("The deck is empty. There are no more cards to deal.")
        return self._cards.pop(0)


def validate_deck_integrity(state: SessionState) -> bool:
    """
    Validate that all cards are accounted for and no duplicates exist.

    Args:
        state: Session state to validate

    Returns:
        True if every catalog card sits in exactly one of deck, hands, center, discard
    """
    all_cards = state.card_locations()
    return (
        len(all_cards) == DECK_SIZE and
        len(set(all_cards)) == DECK_SIZE and
        set(all_cards) == set(create_catalog())
    )

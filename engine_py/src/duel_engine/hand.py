"""
Fixed-capacity player hand.
"""

from typing import List, Optional

from .constants import HAND_SIZE
from .errors import HandFull
from .models import Card


class Hand:
    """Seven card slots; a slot index never moves once a card lands in it."""

    def __init__(self, capacity: int = HAND_SIZE):
        self.capacity = capacity
        self._slots: List[Optional[Card]] = [None] * capacity

    def __contains__(self, card: Card) -> bool:
        return card in self._slots

    def __repr__(self) -> str:
        return f"Hand({[str(c) if c else None for c in self._slots]})"

    @property
    def is_full(self) -> bool:
        return self.remaining_count() >= self.capacity

    def add_card(self, card: Card) -> int:
        """Put card in the first empty slot and return that slot index."""
        for i, held in enumerate(self._slots):
            if held is None:
                self._slots[i] = card
                return i
        raise HandFull("Your hand is full. No more cards can be added.")

    def remove_card(self, card: Card) -> bool:
        """Clear the first slot holding card; False if it is not held."""
        for i, held in enumerate(self._slots):
            if held == card:
                self._slots[i] = None
                return True
        return False

    def remaining_count(self) -> int:
        return sum(1 for c in self._slots if c is not None)

    def deal(self, cards: List[Card]):
        if len(cards) > self.capacity:
            raise HandFull(f"Cannot deal {len(cards)} cards into {self.capacity} slots")
        self._slots = list(cards) + [None] * (self.capacity - len(cards))

    def clear(self):
        self._slots = [None] * self.capacity

    def slots(self) -> List[Optional[Card]]:
        return list(self._slots)

    def cards(self) -> List[Card]:
        return [c for c in self._slots if c is not None]

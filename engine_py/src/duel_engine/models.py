"""Game models and data structures"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .deck import Deck
    from .hand import Hand

WILD_RANKS = (8, 9)
DRAW_PENALTY_RANK = 9
EXTRA_TURN_RANK = 7


@dataclass(frozen=True)
class Card:
    suit: str  # A|B|C|D
    rank: int  # 0..9

    def __str__(self) -> str:
        return f"{self.suit}-{self.rank}"

    @property
    def is_wild(self) -> bool:
        return self.rank in WILD_RANKS

    @property
    def is_draw_penalty(self) -> bool:
        return self.rank == DRAW_PENALTY_RANK

    @property
    def is_extra_turn(self) -> bool:
        return self.rank == EXTRA_TURN_RANK


class Slot(IntEnum):
    ONE = 1
    TWO = 2

    def other(self) -> "Slot":
        return Slot.TWO if self is Slot.ONE else Slot.ONE


class Phase(str, Enum):
    AWAITING_PLAYERS = "awaiting_players"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass
class Notification:
    """An outbound message; target None means every connection."""
    event: str
    data: Dict[str, Any] = field(default_factory=dict)
    target: Optional[str] = None

    @property
    def is_broadcast(self) -> bool:
        return self.target is None


@dataclass
class SessionState:
    deck: "Deck"
    hands: Dict[Slot, "Hand"]
    phase: Phase = Phase.AWAITING_PLAYERS
    connections: Dict[Slot, str] = field(default_factory=dict)  # slot -> connection id
    center: Optional[Card] = None
    discard: List[Card] = field(default_factory=list)  # covered center cards, oldest first
    turn: Optional[Slot] = None
    pass_count: int = 0
    last_passer: Optional[Slot] = None
    winner: Optional[Slot] = None
    version: int = 0
    generation: int = 0  # bumped on every reset

    def slot_of(self, connection_id: str) -> Optional[Slot]:
        for slot, conn in self.connections.items():
            if conn == connection_id:
                return slot
        return None

    def connection_of(self, slot: Slot) -> Optional[str]:
        return self.connections.get(slot)

    def free_slot(self) -> Optional[Slot]:
        for slot in Slot:
            if slot not in self.connections:
                return slot
        return None

    @property
    def is_full(self) -> bool:
        return len(self.connections) == len(Slot)

    @property
    def lifecycle(self) -> str:
        """empty | waiting | active | finished"""
        if self.phase == Phase.FINISHED:
            return "finished"
        if self.phase == Phase.IN_PROGRESS:
            return "active"
        if self.connections:
            return "waiting"
        return "empty"

    def increment_version(self):
        self.version += 1

    def replace_center(self, card: Card):
        if self.center is not None:
            self.discard.append(self.center)
        self.center = card

    def card_locations(self) -> List[Card]:
        """Every card currently held by the deck, a hand, the center or the discard pile."""
        cards = list(self.deck)
        for hand in self.hands.values():
            cards.extend(hand.cards())
        if self.center is not None:
            cards.append(self.center)
        cards.extend(self.discard)
        return cards

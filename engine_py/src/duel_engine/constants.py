"""Game constants and the card catalog"""

import re
from typing import Any, FrozenSet, List, Tuple

from .errors import InvalidFormat
from .models import DRAW_PENALTY_RANK, EXTRA_TURN_RANK, WILD_RANKS, Card

SUITS = ['A', 'B', 'C', 'D']
RANKS = list(range(10))

HAND_SIZE = 7
DECK_SIZE = len(SUITS) * len(RANKS)

CARD_PATTERN = re.compile(r"([A-D])-([0-9])")

# Outbound event names
EVENT_DEAL = "deal"
EVENT_CENTER_UPDATE = "center_update"
EVENT_INITIAL_TURN = "initial_turn"
EVENT_GAME_START = "game_start"
EVENT_TURN_UPDATE = "turn_update"
EVENT_MESSAGE = "message"
EVENT_CARD_RECEIVED = "card_received"
EVENT_INVALID_PLAY = "invalid_play"
EVENT_GAME_OVER = "game_over"
EVENT_GAME_RESET = "game_reset"
EVENT_STATE = "state"

# Stalled double-pass policies (both passed, deck empty)
STALL_HOLD = "hold"
STALL_ADVANCE = "advance"
STALL_DRAW = "draw"


def create_catalog() -> List[Card]:
    return [Card(suit, rank) for suit in SUITS for rank in RANKS]


def _subset(ranks: Tuple[int, ...]) -> FrozenSet[Card]:
    return frozenset(card for card in create_catalog() if card.rank in ranks)


WILD_CARDS = _subset(WILD_RANKS)
DRAW_PENALTY_CARDS = _subset((DRAW_PENALTY_RANK,))
EXTRA_TURN_CARDS = _subset((EXTRA_TURN_RANK,))


def parse_card(raw: Any) -> Card:
    """Parse a wire card id such as "B-3"; anything else is InvalidFormat."""
    if isinstance(raw, Card):
        return raw
    if not isinstance(raw, str):
        raise InvalidFormat("Invalid card format!")
    match = CARD_PATTERN.fullmatch(raw)
    if not match:
        raise InvalidFormat("Invalid card format!")
    return Card(match.group(1), int(match.group(2)))

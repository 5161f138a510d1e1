"""
Play and pass validation.
"""

import logging
from typing import Any, Optional

from .constants import parse_card
from .errors import CardNotInHand, IncompatibleCard, NotYourTurn
from .models import Card, Phase, SessionState, Slot

logger = logging.getLogger(__name__)


def is_compatible(card: Card, center: Optional[Card]) -> bool:
    """
    Check whether card may be played on center.

    Precedence matters: a wild center accepts anything before the candidate
    is even looked at, then a wild candidate, then an empty center, and only
    then the suit/rank match.
    """
    if center is not None and center.is_wild:
        return True
    if card.is_wild:
        return True
    if center is None:
        return True
    return card.suit == center.suit or card.rank == center.rank


def validate_turn(state: SessionState, slot: Optional[Slot], message: str = "It's not your turn!"):
    if state.phase != Phase.IN_PROGRESS or slot is None or state.turn != slot:
        raise NotYourTurn(message)


def validate_play(state: SessionState, slot: Optional[Slot], raw_card: Any) -> Card:
    """
    Validate a card play attempt.

    Args:
        state: Current session state
        slot: Slot of the acting player (None if the connection holds no slot)
        raw_card: Card id as received from the client

    Returns:
        The parsed card

    Raises:
        InvalidFormat, NotYourTurn, CardNotInHand or IncompatibleCard,
        checked in that order.
    """
    card = parse_card(raw_card)
    validate_turn(state, slot)

    if card not in state.hands[slot]:
        raise CardNotInHand("That card is not in your hand!")

    if not is_compatible(card, state.center):
        logger.info(f"Incompatible: {card} does not match center card {state.center}")
        raise IncompatibleCard("Incompatible card!")

    return card


def validate_pass(state: SessionState, slot: Optional[Slot]):
    """Validate a pass attempt; only the turn holder may pass."""
    validate_turn(state, slot, "It's not your turn to pass!")

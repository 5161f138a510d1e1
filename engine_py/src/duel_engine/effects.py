"""
Special card effects implementation.
"""

import logging
from typing import List

from .constants import EVENT_CARD_RECEIVED, EVENT_MESSAGE, EVENT_TURN_UPDATE
from .errors import DeckEmpty, HandFull
from .models import Card, Notification, SessionState, Slot

logger = logging.getLogger(__name__)


def message(text: str, target: str = None) -> Notification:
    return Notification(EVENT_MESSAGE, {"text": text}, target)


def apply_draw_penalty(state: SessionState, player: Slot) -> List[Notification]:
    """
    Rank 9 effect - the opponent draws one card from the deck.

    The play that triggered it stands even when the draw cannot happen;
    the opponent is only told why.

    Args:
        state: Current session state
        player: Slot that played the nine

    Returns:
        Notifications for the opponent
    """
    opponent = player.other()
    opponent_conn = state.connection_of(opponent)
    hand = state.hands[opponent]

    try:
        if hand.is_full:
            raise HandFull("Your hand is full. No more cards can be added.")
        card = state.deck.draw_one()
    except (HandFull, DeckEmpty) as e:
        logger.info(f"Player {int(opponent)} cannot receive a bonus card: {e.code}")
        return [message(e.message, opponent_conn)]

    position = hand.add_card(card)
    logger.info(f"Player {int(opponent)} received {card} at position {position + 1}")
    return [
        Notification(EVENT_CARD_RECEIVED, {"card": str(card), "position": position + 1}, opponent_conn),
        message(f"You received card {card} because of a special play!", opponent_conn),
    ]


def apply_extra_turn(state: SessionState, player: Slot) -> List[Notification]:
    """Rank 7 effect - the turn stays with the player who played it."""
    logger.info(f"Extra turn: player {int(player)} keeps the turn")
    return [
        message("You played a card that blocked your opponent and you play again!",
                state.connection_of(player)),
        message(f"Player {int(player)} played a card that blocked you and will play again!",
                state.connection_of(player.other())),
    ]


def advance_turn(state: SessionState) -> List[Notification]:
    state.turn = state.turn.other()
    logger.info(f"Turn passed to player {int(state.turn)}")
    return [Notification(EVENT_TURN_UPDATE, {"turn": int(state.turn)})]


def resolve_effects(state: SessionState, player: Slot, card: Card) -> List[Notification]:
    """
    Resolve the effects of a successfully played card.

    The draw penalty and the extra turn are checked independently; no card
    carries both. Every card without an extra turn passes the turn on.
    """
    notifications = []
    if card.is_draw_penalty:
        notifications.extend(apply_draw_penalty(state, player))
    if card.is_extra_turn:
        notifications.extend(apply_extra_turn(state, player))
    else:
        notifications.extend(advance_turn(state))
    return notifications

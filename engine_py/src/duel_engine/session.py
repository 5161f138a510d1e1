"""
Session manager: seats two connections and serializes their intents.
"""

import logging
import random
import threading
from typing import Any, List, Optional

from .constants import EVENT_DEAL, EVENT_GAME_RESET, EVENT_INVALID_PLAY, EVENT_STATE, HAND_SIZE
from .effects import message
from .engine import MatchEngine, create_session
from .errors import DeckExhausted, GameError, SessionFull
from .models import Notification, Phase, SessionState, Slot
from .rules import RuleConfig, default_rules
from .serialization import sanitize_state

logger = logging.getLogger(__name__)


class SessionManager:
    """Owns the single game session; every intent goes through here."""

    def __init__(self, rules: RuleConfig = default_rules, rng: Optional[random.Random] = None):
        self.rules = rules
        self.rng = rng or random.Random(rules.seed)
        self.state: SessionState = create_session(self.rng)
        self.engine = MatchEngine(self.state, rules, self.rng)
        self._lock = threading.RLock()

    def join(self, connection_id: str) -> List[Notification]:
        """
        Seat a new connection and deal it seven cards.

        Raises:
            SessionFull: both slots are taken
            DeckExhausted: the deck cannot supply a full hand; nobody is seated
        """
        with self._lock:
            state = self.state
            slot = state.free_slot()
            if slot is None:
                logger.info(f"Rejecting {connection_id}: session full")
                raise SessionFull("The game is already full.")

            cards = state.deck.draw(HAND_SIZE)
            state.connections[slot] = connection_id
            state.hands[slot].deal(cards)
            state.increment_version()
            logger.info(f"Player {int(slot)} connected: {connection_id}")

            notifications = [self._deal_notification(slot)]
            if state.is_full:
                notifications.extend(self.engine.start())
            else:
                notifications.append(message("Waiting for another player to join.", connection_id))
            return notifications

    def leave(self, connection_id: str) -> List[Notification]:
        """Drop a connection; a seated player leaving wipes the whole game."""
        with self._lock:
            slot = self.state.slot_of(connection_id)
            if slot is None:
                return []
            logger.info(f"Player {int(slot)} disconnected: {connection_id}")
            self.state.connections.pop(slot)
            self.state.hands[slot].clear()
            self.engine.reset()
            self.state.connections.clear()
            return [
                message("A player disconnected. The game has been reset."),
                Notification(EVENT_GAME_RESET),
            ]

    def play_card(self, connection_id: str, raw_card: Any) -> List[Notification]:
        with self._lock:
            slot = self.state.slot_of(connection_id)
            try:
                return self.engine.play_card(slot, raw_card)
            except GameError as e:
                return [self._rejection(connection_id, e)]

    def pass_turn(self, connection_id: str) -> List[Notification]:
        with self._lock:
            slot = self.state.slot_of(connection_id)
            try:
                return self.engine.pass_turn(slot)
            except GameError as e:
                return [self._rejection(connection_id, e)]

    def request_state(self, connection_id: str) -> List[Notification]:
        with self._lock:
            slot = self.state.slot_of(connection_id)
            return [Notification(EVENT_STATE, sanitize_state(self.state, slot), connection_id)]

    def finish_reset(self, generation: int) -> List[Notification]:
        """
        Post-win reset; seats stay bound.

        A generation mismatch means the game was already reset (for example
        by a disconnect) while the delay was running.
        """
        with self._lock:
            if generation != self.state.generation or self.state.phase != Phase.FINISHED:
                logger.info("Skipping stale post-win reset")
                return []
            self.engine.reset()
            return [Notification(EVENT_GAME_RESET)]

    def rematch(self) -> List[Notification]:
        """Deal both seated players a new hand and start."""
        with self._lock:
            state = self.state
            if not state.is_full or state.phase != Phase.AWAITING_PLAYERS:
                return []
            if any(hand.remaining_count() for hand in state.hands.values()):
                return []
            notifications = []
            for slot in Slot:
                try:
                    cards = state.deck.draw(HAND_SIZE)
                except DeckExhausted as e:
                    logger.error(f"Cannot deal a rematch: {e.message}")
                    self.engine.reset()
                    return [message(e.message)]
                state.hands[slot].deal(cards)
                notifications.append(self._deal_notification(slot))
            state.increment_version()
            notifications.extend(self.engine.start())
            return notifications

    def ready(self, connection_id: str) -> List[Notification]:
        """A seated player asks for a new game after a post-win reset."""
        with self._lock:
            if self.state.slot_of(connection_id) is not None:
                notifications = self.rematch()
                if notifications:
                    logger.info(f"Rematch requested by {connection_id}")
                    return notifications
            return [message("There is no finished game waiting for a rematch.", connection_id)]

    def _deal_notification(self, slot: Slot) -> Notification:
        hand = self.state.hands[slot]
        return Notification(
            EVENT_DEAL,
            {"slot": int(slot), "cards": [str(c) if c else None for c in hand.slots()]},
            self.state.connection_of(slot),
        )

    def _rejection(self, connection_id: str, error: GameError) -> Notification:
        logger.info(f"Rejected action from {connection_id}: {error.code}")
        return Notification(EVENT_INVALID_PLAY, {"code": error.code, "message": error.message}, connection_id)

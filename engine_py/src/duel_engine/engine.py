"""Match engine: the turn state machine for one two-player game"""

import logging
import random
from typing import Any, List, Optional

from .constants import (
    EVENT_CENTER_UPDATE, EVENT_GAME_OVER, EVENT_GAME_START, EVENT_INITIAL_TURN,
    STALL_ADVANCE, STALL_DRAW,
)
from .deck import Deck
from .effects import advance_turn, message, resolve_effects
from .errors import CardNotFound, DeckEmpty
from .hand import Hand
from .models import Notification, Phase, SessionState, Slot
from .rules import RuleConfig, default_rules
from .validate import validate_pass, validate_play

logger = logging.getLogger(__name__)


def create_session(rng: Optional[random.Random] = None) -> SessionState:
    """A fresh, dealt-less session with a shuffled 40-card deck."""
    return SessionState(deck=Deck.generate(rng), hands={slot: Hand() for slot in Slot})


def center_update(state: SessionState) -> Notification:
    return Notification(EVENT_CENTER_UPDATE, {"card": str(state.center) if state.center else None})


class MatchEngine:
    def __init__(self, state: SessionState, rules: RuleConfig = default_rules,
                 rng: Optional[random.Random] = None):
        self.state = state
        self.rules = rules
        self.rng = rng or random.Random(rules.seed)

    def start(self) -> List[Notification]:
        """Pick the starting player and turn up the first center card."""
        state = self.state
        if not state.is_full:
            return [message("Waiting for more players to start the game.")]
        if state.deck.is_empty:
            return [message("Deck exhausted. The game cannot start.")]

        state.turn = self.rng.choice(list(Slot))
        state.replace_center(state.deck.draw_one())
        state.phase = Phase.IN_PROGRESS
        state.pass_count = 0
        state.last_passer = None
        state.winner = None
        state.increment_version()

        starter = state.turn
        logger.info(f"Player {int(starter)} ({state.connection_of(starter)}) starts the game. Center card: {state.center}")
        return [
            center_update(state),
            Notification(EVENT_INITIAL_TURN, {"turn": int(starter)}),
            Notification(EVENT_GAME_START),
            message("You start! Center card played!", state.connection_of(starter)),
            message(f"Player {int(starter)} starts! Center card played!",
                    state.connection_of(starter.other())),
        ]

    def play_card(self, slot: Optional[Slot], raw_card: Any) -> List[Notification]:
        """
        Play a card from the slot's hand onto the center.

        Raises:
            GameError: the play was rejected; state is unchanged
        """
        state = self.state
        card = validate_play(state, slot, raw_card)

        if not state.hands[slot].remove_card(card):
            logger.warning(f"Consistency check failed: {card} validated but not removable "
                           f"from player {int(slot)}'s hand")
            raise CardNotFound("Error removing the card from your hand!")
        logger.info(f"Player {int(slot)} played {card}")

        state.replace_center(card)
        state.pass_count = 0
        state.last_passer = None
        notifications = [center_update(state)]

        notifications.extend(resolve_effects(state, slot, card))

        if state.hands[slot].remaining_count() == 0:
            notifications.extend(self._finish(slot))

        state.increment_version()
        return notifications

    def pass_turn(self, slot: Optional[Slot]) -> List[Notification]:
        state = self.state
        validate_pass(state, slot)

        state.pass_count += 1
        state.last_passer = slot
        logger.info(f"Player {int(slot)} passed (pass count: {state.pass_count})")

        if state.pass_count >= 2:
            notifications = self._double_pass(slot)
        else:
            notifications = advance_turn(state)
            notifications.extend([
                message(f"You passed. It's now player {int(state.turn)}'s turn!",
                        state.connection_of(slot)),
                message(f"Player {int(slot)} passed. It's your turn to play!",
                        state.connection_of(state.turn)),
            ])
        state.increment_version()
        return notifications

    def _double_pass(self, passer: Slot) -> List[Notification]:
        state = self.state
        notifications = [message("Two consecutive passes! Adding a new card to the center.")]
        state.pass_count = 0
        state.last_passer = None

        try:
            state.replace_center(state.deck.draw_one())
        except DeckEmpty:
            notifications.append(message("Deck exhausted. There are no more cards to add to the center."))
            notifications.extend(self._stalled(passer))
            return notifications

        logger.info(f"New center card after two passes: {state.center}")
        notifications.append(center_update(state))
        notifications.extend(advance_turn(state))
        notifications.extend(self._turn_narration(passer))
        return notifications

    def _stalled(self, passer: Slot) -> List[Notification]:
        """Both players passed and nothing can refresh the center."""
        policy = self.rules.stalled_pass_policy
        logger.info(f"Double pass on an empty deck, policy: {policy}")
        if policy == STALL_ADVANCE:
            return advance_turn(self.state) + self._turn_narration(
                passer, "The center card stays. It's your turn now!")
        if policy == STALL_DRAW:
            return self._finish(None)
        return []

    def _turn_narration(self, passer: Slot,
                        text: str = "It's your turn now! Center card played!") -> List[Notification]:
        state = self.state
        return [
            message(text, state.connection_of(state.turn)),
            message(f"Player {int(passer)} passed. It's now player {int(state.turn)}'s turn.",
                    state.connection_of(state.turn.other())),
        ]

    def _finish(self, winner: Optional[Slot]) -> List[Notification]:
        state = self.state
        state.phase = Phase.FINISHED
        state.winner = winner
        state.turn = None
        if winner is None:
            logger.info("Game finished in a draw")
            text = "Neither player can continue. The game ends in a draw."
        else:
            logger.info(f"Player {int(winner)} won the game")
            text = f"Player {int(winner)} won the game!"
        return [
            message(text),
            Notification(EVENT_GAME_OVER, {"winner": int(winner) if winner else None}),
        ]

    def reset(self):
        """Fresh shuffled deck, empty hands and center; seats are kept."""
        state = self.state
        logger.info("Resetting game state")
        state.deck = Deck.generate(self.rng)
        for hand in state.hands.values():
            hand.clear()
        state.center = None
        state.discard = []
        state.turn = None
        state.pass_count = 0
        state.last_passer = None
        state.winner = None
        state.phase = Phase.AWAITING_PLAYERS
        state.generation += 1
        state.increment_version()

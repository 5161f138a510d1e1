# engine_py/src/duel_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    code = "GAME_ERROR"

    def __init__(self, message: str, code: str = None):
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(f"[{self.code}] {message}")


# Specific error codes
INVALID_FORMAT = "INVALID_FORMAT"
NOT_YOUR_TURN = "NOT_YOUR_TURN"
CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
INCOMPATIBLE_CARD = "INCOMPATIBLE_CARD"
DECK_EXHAUSTED = "DECK_EXHAUSTED"
DECK_EMPTY = "DECK_EMPTY"
HAND_FULL = "HAND_FULL"
SESSION_FULL = "SESSION_FULL"
CARD_NOT_FOUND = "CARD_NOT_FOUND"


class InvalidFormat(GameError):
    code = INVALID_FORMAT


class NotYourTurn(GameError):
    code = NOT_YOUR_TURN


class CardNotInHand(GameError):
    code = CARD_NOT_IN_HAND


class IncompatibleCard(GameError):
    code = INCOMPATIBLE_CARD


class DeckExhausted(GameError):
    """Fewer cards left than an exact-count draw requires."""
    code = DECK_EXHAUSTED


class DeckEmpty(GameError):
    code = DECK_EMPTY


class HandFull(GameError):
    code = HAND_FULL


class SessionFull(GameError):
    code = SESSION_FULL


class CardNotFound(GameError):
    """Removal of a card the hand does not hold; hand/deck invariants are broken."""
    code = CARD_NOT_FOUND

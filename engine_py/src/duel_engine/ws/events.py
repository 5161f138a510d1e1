"""
WebSocket event models and validation.
"""

import time
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

from .. import constants
from ..models import Notification


class EventType(str, Enum):
    """Inbound event types."""
    PLAY_CARD = "play_card"
    PASS_TURN = "pass_turn"
    REQUEST_STATE = "request_state"
    READY = "ready"


class OutboundEventType(str, Enum):
    """Outbound event types."""
    DEAL = constants.EVENT_DEAL
    CENTER_UPDATE = constants.EVENT_CENTER_UPDATE
    INITIAL_TURN = constants.EVENT_INITIAL_TURN
    GAME_START = constants.EVENT_GAME_START
    TURN_UPDATE = constants.EVENT_TURN_UPDATE
    MESSAGE = constants.EVENT_MESSAGE
    CARD_RECEIVED = constants.EVENT_CARD_RECEIVED
    INVALID_PLAY = constants.EVENT_INVALID_PLAY
    GAME_OVER = constants.EVENT_GAME_OVER
    GAME_RESET = constants.EVENT_GAME_RESET
    STATE = constants.EVENT_STATE
    ERROR = "error"


class ErrorCode(str, Enum):
    """Error codes for client events."""
    INVALID_EVENT = "INVALID_EVENT"
    SESSION_FULL = "SESSION_FULL"
    DECK_EXHAUSTED = "DECK_EXHAUSTED"
    INTERNAL = "INTERNAL"


# Inbound event models
class BaseEvent(BaseModel):
    """Base event model."""
    type: EventType


class PlayCardEvent(BaseEvent):
    """Play a card onto the center."""
    type: EventType = EventType.PLAY_CARD
    # Left untyped: a malformed card is a game rejection, not a bad frame
    card: Any = None


class PassTurnEvent(BaseEvent):
    """Pass turn event."""
    type: EventType = EventType.PASS_TURN


class RequestStateEvent(BaseEvent):
    """Request a state snapshot."""
    type: EventType = EventType.REQUEST_STATE


class ReadyEvent(BaseEvent):
    """Ask for a new game once the finished one has been reset."""
    type: EventType = EventType.READY


# Union type for all inbound events
InboundEvent = Union[
    PlayCardEvent,
    PassTurnEvent,
    RequestStateEvent,
    ReadyEvent,
]


# Outbound event models
class OutboundEvent(BaseModel):
    """Game notification delivered to a client."""
    type: OutboundEventType
    data: Dict[str, Any]
    timestamp: float


class ErrorEvent(BaseModel):
    """Error event."""
    type: OutboundEventType = OutboundEventType.ERROR
    code: ErrorCode
    message: str
    timestamp: float


def parse_inbound_event(data: Any) -> InboundEvent:
    """
    Parse raw event data into appropriate event model.

    Args:
        data: Raw event data from WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")

    event_type = data.get("type")

    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    event_map = {
        EventType.PLAY_CARD: PlayCardEvent,
        EventType.PASS_TURN: PassTurnEvent,
        EventType.REQUEST_STATE: RequestStateEvent,
        EventType.READY: ReadyEvent,
    }

    try:
        return event_map[event_type](**data)
    except Exception as e:
        raise ValueError(f"Invalid event data: {str(e)}")


def create_outbound_event(notification: Notification) -> OutboundEvent:
    """Wrap an engine notification for the wire."""
    return OutboundEvent(
        type=OutboundEventType(notification.event),
        data=notification.data,
        timestamp=time.time()
    )


def create_error_event(code: ErrorCode, message: str, timestamp: Optional[float] = None) -> ErrorEvent:
    """Create an error event."""
    return ErrorEvent(
        code=code,
        message=message,
        timestamp=timestamp if timestamp is not None else time.time()
    )

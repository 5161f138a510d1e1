"""
WebSocket transport for the duel game.
"""

import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional, Union

import orjson
from fastapi import WebSocket, WebSocketDisconnect, status

from ..constants import EVENT_GAME_OVER
from ..errors import DeckExhausted, SessionFull
from ..models import Notification
from ..rules import RuleConfig, default_rules
from ..session import SessionManager
from .events import (
    ErrorCode, InboundEvent, PassTurnEvent, PlayCardEvent, ReadyEvent, RequestStateEvent,
    create_error_event, create_outbound_event, parse_inbound_event,
)

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections and broadcasting."""

    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}

    def connect(self, connection_id: str, websocket: WebSocket):
        self.active_connections[connection_id] = websocket
        logger.info(f"Connection {connection_id} registered")

    def disconnect(self, connection_id: str):
        if connection_id in self.active_connections:
            del self.active_connections[connection_id]
            logger.info(f"Connection {connection_id} removed")

    async def send_personal_message(self, message: Dict[str, Any], connection_id: str):
        websocket = self.active_connections.get(connection_id)
        if websocket is None:
            return
        try:
            await websocket.send_text(orjson.dumps(message).decode())
        except Exception as e:
            logger.error(f"Error sending message to {connection_id}: {e}")
            self.disconnect(connection_id)

    async def broadcast(self, message: Dict[str, Any]):
        for connection_id in list(self.active_connections):
            await self.send_personal_message(message, connection_id)


class GameWebSocketManager:
    def __init__(self, rules: RuleConfig = default_rules, session: Optional[SessionManager] = None):
        self.rules = rules
        self.session = session or SessionManager(rules)
        self.connection_manager = ConnectionManager()
        self.reset_task: Optional[asyncio.Task] = None

    async def handle_websocket(self, websocket: WebSocket):
        connection_id = str(uuid.uuid4())[:8]
        await websocket.accept()
        logger.info(f"A user connected: {connection_id}")

        try:
            notifications = self.session.join(connection_id)
        except SessionFull as e:
            await self._refuse(websocket, ErrorCode.SESSION_FULL, e.message)
            return
        except DeckExhausted as e:
            await self._refuse(websocket, ErrorCode.DECK_EXHAUSTED, e.message)
            return

        self.connection_manager.connect(connection_id, websocket)
        try:
            await self.dispatch(notifications)
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", status.WS_1000_NORMAL_CLOSURE))
                # Binary frames carry the same JSON as text frames
                data = message.get("text")
                if data is None:
                    data = message.get("bytes")
                await self.handle_message(data, connection_id)
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected: {connection_id}")
        except Exception as e:
            logger.error(f"WebSocket error for {connection_id}: {e}")
        finally:
            self.connection_manager.disconnect(connection_id)
            await self.dispatch(self.session.leave(connection_id))

    async def handle_message(self, data: Union[str, bytes, None], connection_id: str):
        try:
            event = parse_inbound_event(orjson.loads(data))
        except (ValueError, TypeError) as e:
            await self.send_error(connection_id, ErrorCode.INVALID_EVENT, str(e))
            return

        try:
            notifications = self.handle_event(connection_id, event)
        except Exception:
            logger.exception(f"Error handling {event.type.value} from {connection_id}")
            await self.send_error(connection_id, ErrorCode.INTERNAL,
                                  "An error occurred while processing your action.")
            return

        await self.dispatch(notifications)

    def handle_event(self, connection_id: str, event: InboundEvent) -> List[Notification]:
        if isinstance(event, PlayCardEvent):
            return self.session.play_card(connection_id, event.card)
        elif isinstance(event, PassTurnEvent):
            return self.session.pass_turn(connection_id)
        elif isinstance(event, RequestStateEvent):
            return self.session.request_state(connection_id)
        elif isinstance(event, ReadyEvent):
            return self.session.ready(connection_id)
        else:
            raise ValueError(f"Unhandled event type: {type(event)}")

    async def dispatch(self, notifications: List[Notification]):
        for notification in notifications:
            payload = create_outbound_event(notification).model_dump(mode="json")
            if notification.is_broadcast:
                await self.connection_manager.broadcast(payload)
            else:
                await self.connection_manager.send_personal_message(payload, notification.target)

            if notification.event == EVENT_GAME_OVER:
                self.schedule_reset()

    def schedule_reset(self):
        generation = self.session.state.generation
        logger.info(f"Game over, resetting in {self.rules.reset_delay}s")
        self.reset_task = asyncio.create_task(self.reset_after_win(generation))

    async def reset_after_win(self, generation: int):
        await asyncio.sleep(self.rules.reset_delay)
        try:
            notifications = self.session.finish_reset(generation)
            if notifications and self.rules.auto_rematch:
                notifications.extend(self.session.rematch())
        except Exception:
            logger.exception("Error resetting the game after a win")
            return
        await self.dispatch(notifications)

    async def send_error(self, connection_id: str, code: ErrorCode, message: str):
        error_event = create_error_event(code, message)
        await self.connection_manager.send_personal_message(error_event.model_dump(mode="json"), connection_id)

    async def _refuse(self, websocket: WebSocket, code: ErrorCode, message: str):
        logger.info(f"Refusing connection: {message}")
        error_event = create_error_event(code, message)
        await websocket.send_text(orjson.dumps(error_event.model_dump(mode="json")).decode())
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)

    def health(self) -> Dict[str, Any]:
        state = self.session.state
        return {
            "status": "healthy",
            "phase": state.phase.value,
            "lifecycle": state.lifecycle,
            "players": len(state.connections),
            "connections": len(self.connection_manager.active_connections),
        }

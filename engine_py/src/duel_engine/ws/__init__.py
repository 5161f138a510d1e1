"""
WebSocket transport and event handling for the duel game.
"""

from .events import *
from .server import ConnectionManager, GameWebSocketManager

__all__ = ["ConnectionManager", "GameWebSocketManager"]

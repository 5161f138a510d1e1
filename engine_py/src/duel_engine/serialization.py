"""
State serialization and sanitization utilities.
"""

from typing import Any, Dict, Optional

from .models import SessionState, Slot


def sanitize_state(state: SessionState, viewer: Optional[Slot] = None) -> Dict[str, Any]:
    """
    Sanitize session state for transmission to clients.

    Args:
        state: Session state to sanitize
        viewer: Slot of the player viewing the state (to show their cards)

    Returns:
        Sanitized state dictionary safe for JSON transmission
    """
    sanitized = {
        "version": state.version,
        "phase": state.phase.value,
        "lifecycle": state.lifecycle,
        "center": str(state.center) if state.center else None,
        "turn": int(state.turn) if state.turn else None,
        "pass_count": state.pass_count,
        "winner": int(state.winner) if state.winner else None,
        "deck_count": len(state.deck),
        "discard_count": len(state.discard),
        "you": int(viewer) if viewer else None,
        "players": {},
    }

    for slot in Slot:
        hand = state.hands[slot]
        sanitized_player = {
            "slot": int(slot),
            "connected": slot in state.connections,
            "hand_count": hand.remaining_count(),
        }

        # Show full hand only to the viewer
        if slot == viewer:
            sanitized_player["hand"] = [str(c) if c else None for c in hand.slots()]

        sanitized["players"][str(int(slot))] = sanitized_player

    return sanitized

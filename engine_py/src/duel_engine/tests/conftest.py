"""
Shared fixtures for the duel engine tests.
"""

import random

import pytest

from duel_engine.constants import create_catalog, parse_card
from duel_engine.deck import Deck
from duel_engine.models import Phase, Slot
from duel_engine.rules import create_rules
from duel_engine.session import SessionManager

PLAYER_ONE = "conn-1"
PLAYER_TWO = "conn-2"


def make_manager(seed=42, **rule_overrides):
    rules = create_rules(**rule_overrides)
    return SessionManager(rules, rng=random.Random(seed))


def arrange(manager, center, hand_one, hand_two, turn=Slot.ONE, deck=None):
    """
    Put a started game into a known position.

    Without an explicit deck the remaining catalog cards become the deck,
    so the 40-card conservation still holds.
    """
    state = manager.state
    state.hands[Slot.ONE].deal([parse_card(c) for c in hand_one])
    state.hands[Slot.TWO].deal([parse_card(c) for c in hand_two])
    state.center = parse_card(center) if center else None
    state.discard = []
    if deck is None:
        used = set(state.hands[Slot.ONE].cards()) | set(state.hands[Slot.TWO].cards())
        if state.center:
            used.add(state.center)
        state.deck = Deck([c for c in create_catalog() if c not in used])
    else:
        state.deck = Deck([parse_card(c) for c in deck])
    state.turn = turn
    state.phase = Phase.IN_PROGRESS
    state.pass_count = 0
    state.last_passer = None
    return state


def events(notifications):
    return [n.event for n in notifications]


@pytest.fixture
def manager():
    """A session with both players seated and the game started."""
    m = make_manager()
    m.join(PLAYER_ONE)
    m.join(PLAYER_TWO)
    return m

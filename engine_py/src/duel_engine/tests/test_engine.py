"""
Tests for the match engine turn state machine.
"""

import logging
import random

import pytest

from conftest import PLAYER_ONE, PLAYER_TWO, arrange, events, make_manager
from duel_engine.constants import (
    EVENT_CARD_RECEIVED, EVENT_CENTER_UPDATE, EVENT_DEAL, EVENT_GAME_OVER,
    EVENT_GAME_START, EVENT_INITIAL_TURN, EVENT_MESSAGE, EVENT_TURN_UPDATE, parse_card,
)
from duel_engine.deck import Deck, validate_deck_integrity
from duel_engine.errors import (
    CardNotFound, CardNotInHand, IncompatibleCard, InvalidFormat, NotYourTurn,
)
from duel_engine.models import Phase, Slot
from duel_engine.validate import is_compatible


def hand_ids(state, slot):
    return [str(c) for c in state.hands[slot].cards()]


# Start

def test_start_turns_up_center_and_picks_starter():
    m = make_manager()
    m.join(PLAYER_ONE)
    notes = m.join(PLAYER_TWO)
    state = m.state

    assert state.phase == Phase.IN_PROGRESS
    assert state.turn in (Slot.ONE, Slot.TWO)
    assert state.center is not None
    assert len(state.deck) == 40 - 14 - 1
    assert validate_deck_integrity(state)

    assert events(notes) == [
        EVENT_DEAL, EVENT_CENTER_UPDATE, EVENT_INITIAL_TURN, EVENT_GAME_START,
        EVENT_MESSAGE, EVENT_MESSAGE,
    ]
    assert notes[1].data == {"card": str(state.center)}
    assert notes[2].data == {"turn": int(state.turn)}
    assert notes[4].target == state.connection_of(state.turn)
    assert notes[4].data["text"] == "You start! Center card played!"
    assert notes[5].target == state.connection_of(state.turn.other())
    assert notes[5].data["text"] == f"Player {int(state.turn)} starts! Center card played!"


def test_either_player_can_start():
    starters = set()
    for seed in range(40):
        m = make_manager(seed=seed)
        m.join(PLAYER_ONE)
        m.join(PLAYER_TWO)
        starters.add(m.state.turn)
    assert starters == {Slot.ONE, Slot.TWO}


def test_start_waits_for_second_player():
    m = make_manager()
    m.join(PLAYER_ONE)
    notes = m.engine.start()
    assert events(notes) == [EVENT_MESSAGE]
    assert m.state.phase == Phase.AWAITING_PLAYERS
    assert m.state.center is None


# Play validation

def test_invalid_format_checked_before_turn(manager):
    arrange(manager, "A-3", ["A-1"], ["B-2"], turn=Slot.ONE)
    with pytest.raises(InvalidFormat):
        manager.engine.play_card(Slot.TWO, "Z-1")
    with pytest.raises(InvalidFormat):
        manager.engine.play_card(Slot.ONE, None)


def test_play_out_of_turn(manager):
    arrange(manager, "A-3", ["A-1"], ["A-2"], turn=Slot.ONE)
    with pytest.raises(NotYourTurn):
        manager.engine.play_card(Slot.TWO, "A-2")


def test_play_without_a_seat(manager):
    arrange(manager, "A-3", ["A-1"], ["A-2"], turn=Slot.ONE)
    with pytest.raises(NotYourTurn):
        manager.engine.play_card(None, "A-1")


def test_play_card_not_in_hand(manager):
    arrange(manager, "A-3", ["A-1"], ["A-2"], turn=Slot.ONE)
    with pytest.raises(CardNotInHand):
        manager.engine.play_card(Slot.ONE, "A-2")


def test_play_incompatible_card_leaves_state_unchanged(manager):
    state = arrange(manager, "A-3", ["B-5", "A-1"], ["C-2"], turn=Slot.ONE)
    version = state.version
    with pytest.raises(IncompatibleCard):
        manager.engine.play_card(Slot.ONE, "B-5")
    assert str(state.center) == "A-3"
    assert hand_ids(state, Slot.ONE) == ["B-5", "A-1"]
    assert state.turn == Slot.ONE
    assert state.version == version


def test_unremovable_card_is_rejected_and_logged(manager, monkeypatch, caplog):
    state = arrange(manager, "A-3", ["A-5", "A-1"], ["C-2"], turn=Slot.ONE)
    monkeypatch.setattr(state.hands[Slot.ONE], "remove_card", lambda card: False)
    with caplog.at_level(logging.WARNING):
        with pytest.raises(CardNotFound):
            manager.engine.play_card(Slot.ONE, "A-5")
    assert "Consistency check failed" in caplog.text
    assert str(state.center) == "A-3"
    assert state.turn == Slot.ONE


# Successful plays and effects

def test_play_moves_card_to_center_and_passes_turn(manager):
    state = arrange(manager, "A-3", ["A-5", "B-1"], ["C-2", "D-2"], turn=Slot.ONE)
    state.pass_count = 1
    state.last_passer = Slot.TWO

    notes = manager.engine.play_card(Slot.ONE, "A-5")

    assert str(state.center) == "A-5"
    assert [str(c) for c in state.discard] == ["A-3"]
    assert hand_ids(state, Slot.ONE) == ["B-1"]
    assert state.turn == Slot.TWO
    assert state.pass_count == 0
    assert state.last_passer is None
    assert events(notes) == [EVENT_CENTER_UPDATE, EVENT_TURN_UPDATE]
    assert notes[0].is_broadcast and notes[0].data == {"card": "A-5"}
    assert notes[1].data == {"turn": 2}
    assert validate_deck_integrity(state)


def test_rank_match_across_suits(manager):
    state = arrange(manager, "A-3", ["C-3", "B-1"], ["C-2"], turn=Slot.ONE)
    manager.engine.play_card(Slot.ONE, "C-3")
    assert str(state.center) == "C-3"


def test_extra_turn_keeps_turn(manager):
    state = arrange(manager, "C-3", ["C-7", "C-1"], ["B-2"], turn=Slot.ONE)

    notes = manager.engine.play_card(Slot.ONE, "C-7")

    assert state.turn == Slot.ONE
    assert events(notes) == [EVENT_CENTER_UPDATE, EVENT_MESSAGE, EVENT_MESSAGE]
    assert notes[1].target == PLAYER_ONE
    assert notes[2].target == PLAYER_TWO
    assert notes[1].data["text"] != notes[2].data["text"]
    # and the same player may go again
    manager.engine.play_card(Slot.ONE, "C-1")


def test_draw_penalty_gives_opponent_a_card(manager):
    state = arrange(manager, "A-3", ["D-9", "A-1"],
                    ["B-0", "B-1", "B-2", "B-3", "B-4", "B-5"], turn=Slot.ONE)
    deck_before = len(state.deck)
    front = list(state.deck)[0]

    notes = manager.engine.play_card(Slot.ONE, "D-9")

    assert state.hands[Slot.TWO].remaining_count() == 7
    assert front in state.hands[Slot.TWO]
    assert len(state.deck) == deck_before - 1
    assert events(notes) == [EVENT_CENTER_UPDATE, EVENT_CARD_RECEIVED, EVENT_MESSAGE, EVENT_TURN_UPDATE]
    assert notes[1].target == PLAYER_TWO
    assert notes[1].data == {"card": str(front), "position": 7}
    assert state.turn == Slot.TWO
    assert validate_deck_integrity(state)


def test_draw_penalty_lands_in_freed_slot(manager):
    state = arrange(manager, "A-3", ["D-9", "A-1"], ["B-0", "B-1", "B-2"], turn=Slot.ONE)
    state.hands[Slot.TWO].remove_card(parse_card("B-0"))
    state.deck = Deck(list(state.deck) + [parse_card("B-0")])

    notes = manager.engine.play_card(Slot.ONE, "D-9")

    assert notes[1].data["position"] == 1


def test_draw_penalty_skipped_when_opponent_hand_full(manager):
    full = ["B-0", "B-1", "B-2", "B-3", "B-4", "B-5", "B-6"]
    state = arrange(manager, "A-3", ["D-9", "A-1"], full, turn=Slot.ONE)
    deck_before = len(state.deck)

    notes = manager.engine.play_card(Slot.ONE, "D-9")

    assert hand_ids(state, Slot.TWO) == full
    assert len(state.deck) == deck_before
    assert str(state.center) == "D-9"
    assert events(notes) == [EVENT_CENTER_UPDATE, EVENT_MESSAGE, EVENT_TURN_UPDATE]
    assert notes[1].target == PLAYER_TWO
    assert "full" in notes[1].data["text"]


def test_draw_penalty_skipped_when_deck_empty(manager):
    state = arrange(manager, "A-3", ["D-9", "A-1"], ["B-0"], turn=Slot.ONE, deck=[])

    notes = manager.engine.play_card(Slot.ONE, "D-9")

    assert hand_ids(state, Slot.TWO) == ["B-0"]
    assert notes[1].target == PLAYER_TWO
    assert "empty" in notes[1].data["text"]
    assert state.turn == Slot.TWO


# Passing

def test_first_pass_hands_turn_over(manager):
    state = arrange(manager, "A-3", ["B-1"], ["C-2"], turn=Slot.ONE)

    notes = manager.engine.pass_turn(Slot.ONE)

    assert state.turn == Slot.TWO
    assert state.pass_count == 1
    assert state.last_passer == Slot.ONE
    assert events(notes) == [EVENT_TURN_UPDATE, EVENT_MESSAGE, EVENT_MESSAGE]
    assert notes[1].target == PLAYER_ONE
    assert notes[2].target == PLAYER_TWO


def test_pass_out_of_turn(manager):
    arrange(manager, "A-3", ["B-1"], ["C-2"], turn=Slot.ONE)
    with pytest.raises(NotYourTurn):
        manager.engine.pass_turn(Slot.TWO)


def test_double_pass_turns_up_new_center(manager):
    state = arrange(manager, "A-3", ["B-1"], ["C-2"], turn=Slot.ONE)
    manager.engine.pass_turn(Slot.ONE)
    deck_before = len(state.deck)
    front = list(state.deck)[0]

    notes = manager.engine.pass_turn(Slot.TWO)

    assert state.center == front
    assert len(state.deck) == deck_before - 1
    assert state.pass_count == 0
    assert state.last_passer is None
    assert state.turn == Slot.ONE
    assert events(notes) == [
        EVENT_MESSAGE, EVENT_CENTER_UPDATE, EVENT_TURN_UPDATE, EVENT_MESSAGE, EVENT_MESSAGE,
    ]
    assert notes[0].is_broadcast
    assert notes[3].target == PLAYER_ONE
    assert notes[4].target == PLAYER_TWO
    assert validate_deck_integrity(state)


def test_play_between_passes_resets_escalation(manager):
    state = arrange(manager, "A-3", ["B-1", "A-4"], ["A-2", "C-6"], turn=Slot.ONE)
    manager.engine.pass_turn(Slot.ONE)
    manager.engine.play_card(Slot.TWO, "A-2")
    assert state.pass_count == 0
    manager.engine.pass_turn(Slot.ONE)
    assert state.pass_count == 1
    assert str(state.center) == "A-2"


def _double_pass_on_empty_deck(policy):
    m = make_manager(stalled_pass_policy=policy)
    m.join(PLAYER_ONE)
    m.join(PLAYER_TWO)
    state = arrange(m, "A-3", ["B-1"], ["C-2"], turn=Slot.ONE, deck=[])
    m.engine.pass_turn(Slot.ONE)
    return m, state, m.engine.pass_turn(Slot.TWO)


def test_double_pass_empty_deck_hold():
    m, state, notes = _double_pass_on_empty_deck("hold")
    assert state.turn == Slot.TWO
    assert state.pass_count == 0
    assert str(state.center) == "A-3"
    assert events(notes) == [EVENT_MESSAGE, EVENT_MESSAGE]


def test_double_pass_empty_deck_advance():
    m, state, notes = _double_pass_on_empty_deck("advance")
    assert state.turn == Slot.ONE
    assert state.pass_count == 0
    assert state.phase == Phase.IN_PROGRESS
    assert EVENT_TURN_UPDATE in events(notes)
    assert EVENT_CENTER_UPDATE not in events(notes)
    narration = notes[-2]
    assert narration.target == PLAYER_ONE
    assert narration.data["text"] == "The center card stays. It's your turn now!"


def test_double_pass_empty_deck_draw():
    m, state, notes = _double_pass_on_empty_deck("draw")
    assert state.phase == Phase.FINISHED
    assert state.winner is None
    assert notes[-1].event == EVENT_GAME_OVER
    assert notes[-1].data == {"winner": None}


# Winning

def test_last_card_wins(manager):
    state = arrange(manager, "A-3", ["A-4"], ["B-1", "C-2"], turn=Slot.ONE)

    notes = manager.engine.play_card(Slot.ONE, "A-4")

    assert state.phase == Phase.FINISHED
    assert state.winner == Slot.ONE
    assert state.turn is None
    assert events(notes)[-2:] == [EVENT_MESSAGE, EVENT_GAME_OVER]
    assert notes[-1].is_broadcast
    assert notes[-1].data == {"winner": 1}
    assert state.lifecycle == "finished"


def test_extra_turn_card_can_win(manager):
    state = arrange(manager, "A-3", ["A-7"], ["B-1"], turn=Slot.ONE)
    manager.engine.play_card(Slot.ONE, "A-7")
    assert state.phase == Phase.FINISHED
    assert state.winner == Slot.ONE


def test_finished_game_rejects_actions(manager):
    arrange(manager, "A-3", ["A-4"], ["B-1"], turn=Slot.ONE)
    manager.engine.play_card(Slot.ONE, "A-4")
    with pytest.raises(NotYourTurn):
        manager.engine.play_card(Slot.TWO, "B-1")
    with pytest.raises(NotYourTurn):
        manager.engine.pass_turn(Slot.TWO)
    with pytest.raises(NotYourTurn):
        manager.engine.pass_turn(Slot.ONE)


# Reset

def test_reset_keeps_seats(manager):
    manager.engine.reset()
    state = manager.state
    assert state.phase == Phase.AWAITING_PLAYERS
    assert state.connections == {Slot.ONE: PLAYER_ONE, Slot.TWO: PLAYER_TWO}
    assert len(state.deck) == 40
    assert state.center is None
    assert state.discard == []
    assert state.turn is None
    assert all(h.remaining_count() == 0 for h in state.hands.values())
    assert validate_deck_integrity(state)


# Conservation under play

@pytest.mark.parametrize("seed", range(6))
def test_cards_are_conserved_through_a_game(seed):
    m = make_manager(seed=seed)
    m.join(PLAYER_ONE)
    m.join(PLAYER_TWO)
    state = m.state
    rng = random.Random(seed)

    for _ in range(400):
        if state.phase != Phase.IN_PROGRESS:
            break
        slot = state.turn
        candidates = [c for c in state.hands[slot].cards() if is_compatible(c, state.center)]
        if candidates and rng.random() < 0.8:
            m.engine.play_card(slot, str(rng.choice(candidates)))
        else:
            m.engine.pass_turn(slot)

        assert validate_deck_integrity(state)
        assert state.pass_count < 2
        assert all(h.remaining_count() <= 7 for h in state.hands.values())

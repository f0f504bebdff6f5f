"""Tests for companion locks."""

from manor.companions import evaluate, forget, is_locked, partners_by_player
from manor.rooms import START_ROOM
from manor.rules import Role
from manor.state import GameState, Player

STUDY = "THE FLICKERING LAMP STUDY"
CELLAR = "FORGOTTEN CELLAR"


def _add(state: GameState, pin: str, role: Role = Role.VICTIM, room: str = START_ROOM) -> Player:
    p = Player(id=len(state.players) + 1, pin=pin, name=f"P{pin}", role=role, room=room)
    state.players.append(p)
    return p


def test_partners_only_between_living_victims(state):
    _add(state, "11", room=STUDY)
    _add(state, "12", room=STUDY)
    _add(state, "13", room=STUDY, role=Role.KILLER)
    dead = _add(state, "14", room=STUDY)
    dead.alive = False
    _add(state, "15", room=CELLAR)
    assert partners_by_player(state) == {"11": {"12"}, "12": {"11"}}


def test_same_pair_two_rounds_in_a_row_locks_both(state):
    _add(state, "11", room=STUDY)
    _add(state, "12", room=STUDY)

    assert evaluate(state, 1) == []
    locked = evaluate(state, 2)

    assert sorted(locked) == ["11", "12"]
    assert state.companions.locked_until == {"11": 3, "12": 3}
    assert is_locked(state, "11", 3)
    assert not is_locked(state, "11", 4)


def test_pair_split_up_does_not_lock(state):
    a = _add(state, "11", room=STUDY)
    _add(state, "12", room=STUDY)
    evaluate(state, 1)
    a.room = CELLAR
    assert evaluate(state, 2) == []
    a.room = STUDY
    # Last round's baseline is now empty, so meeting again starts over
    assert evaluate(state, 3) == []


def test_new_partner_does_not_lock(state):
    a = _add(state, "11", room=STUDY)
    b = _add(state, "12", room=STUDY)
    c = _add(state, "13", room=CELLAR)
    evaluate(state, 1)
    b.room = CELLAR
    a.room = CELLAR
    c.room = CELLAR
    # a and b are still together: both locked, c is new to both and stays free
    assert sorted(evaluate(state, 2)) == ["11", "12"]
    assert not is_locked(state, "13", 3)


def test_active_lock_is_not_extended(state):
    _add(state, "11", room=STUDY)
    _add(state, "12", room=STUDY)
    evaluate(state, 1)
    evaluate(state, 2)
    assert state.companions.locked_until["11"] == 3

    # Still paired while the lock covers round 3: no re-evaluation
    assert evaluate(state, 3) == []
    assert state.companions.locked_until["11"] == 3

    # Lock has lapsed by round 4, pairing repeated again
    assert sorted(evaluate(state, 4)) == ["11", "12"]
    assert state.companions.locked_until["11"] == 5


def test_lock_duration_setting(state):
    state.settings.companion_lock_duration = 3
    _add(state, "11", room=STUDY)
    _add(state, "12", room=STUDY)
    evaluate(state, 1)
    evaluate(state, 2)
    assert state.companions.locked_until["12"] == 5


def test_forget_removes_pin(state):
    _add(state, "11", room=STUDY)
    _add(state, "12", room=STUDY)
    evaluate(state, 1)
    evaluate(state, 2)
    forget(state, "11")
    assert "11" not in state.companions.locked_until
    assert "11" not in state.companions.last_partners
    assert state.companions.last_partners["12"] == set()

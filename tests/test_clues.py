"""Tests for the clue bank."""

import pytest

from manor.clues import (
    can_claim,
    chunk_sentence,
    claim,
    claimed_count,
    distribute_round_clues,
    load,
    release,
    release_all,
    unclaimed_count,
    unclaimed_in,
)
from manor.errors import EmptySentence, StateConflictError
from manor.ledger import MoveRecord
from manor.rooms import ROOMS, START_ROOM
from manor.rules import Role
from manor.state import Clue, GameState, Player

BUTLER = "THE BUTLER HID THE KNIFE IN THE WALL"
SIXTEEN_WORDS = "the butler hid the knife in the wall behind the portrait of the late lord ashby"

STUDY = "THE FLICKERING LAMP STUDY"
UNDERHOUSE = "THE UNDERHOUSE"
PARLOR = "PARLOR OF ECHOES"


def _add(state: GameState, pin: str, role: Role = Role.VICTIM, room: str = START_ROOM) -> Player:
    p = Player(id=len(state.players) + 1, pin=pin, name=f"P{pin}", role=role, room=room)
    state.players.append(p)
    return p


def _moved(state: GameState, *players: Player) -> None:
    for p in players:
        state.ledger.record_move(MoveRecord(state.round_index, p.pin, START_ROOM, p.room))


def _conserved(state: GameState) -> bool:
    return unclaimed_count(state) + claimed_count(state) == len(state.clues.fragments)


def test_chunk_sizes_front_loaded():
    assert chunk_sentence("one two three four five six seven", 3) == [
        "one two three",
        "four five",
        "six seven",
    ]


def test_chunk_caps_fragment_count():
    words = " ".join(f"w{i}" for i in range(20))
    fragments = chunk_sentence(words, 16)
    assert len(fragments) == 16
    assert [len(f.split()) for f in fragments] == [2, 2, 2, 2] + [1] * 12
    assert " ".join(fragments) == words


def test_chunk_collapses_whitespace_and_handles_empty():
    assert chunk_sentence("  a   b  ", 16) == ["a", "b"]
    assert chunk_sentence("   ", 16) == []


def test_eight_words_make_eight_single_word_fragments(state, rng):
    assert chunk_sentence(BUTLER, len(ROOMS) * 2) == BUTLER.split()

    supply = load(state, BUTLER, rng)

    assert len(supply.fragments) == 8
    assert sorted(supply.fragments) == sorted(BUTLER.split())
    # Dealt two per room in room order: the first four rooms fill up, the rest stay empty
    for room in ROOMS[:4]:
        assert None not in supply.per_room[room]
    for room in ROOMS[4:]:
        assert supply.per_room[room] == [None, None]
    dealt = [text for room in ROOMS for text in supply.per_room[room] if text is not None]
    assert dealt == supply.fragments
    assert _conserved(state)


def test_load_rejects_empty_sentence(state, rng):
    with pytest.raises(EmptySentence):
        load(state, "   \t ", rng)
    with pytest.raises(EmptySentence):
        load(state, None, rng)


def test_load_clears_claimed_clues(state, rng):
    p = _add(state, "11")
    p.clues.append(Clue(room=STUDY, text="old"))
    load(state, SIXTEEN_WORDS, rng)
    assert p.clues == []
    assert unclaimed_count(state) == 16


def test_claim_until_empty_then_release(state, rng):
    load(state, SIXTEEN_WORDS, rng)
    room = ROOMS[0]
    first = claim(state, room)
    second = claim(state, room)
    assert first and second and first != second
    assert claim(state, room) is None
    assert state.clues.per_room[room] == [None, None]

    release(state, room, second)
    assert state.clues.per_room[room] == [second, None]
    assert unclaimed_in(state, room) == [second]


def test_claim_in_unknown_room_is_none(state, rng):
    load(state, SIXTEEN_WORDS, rng)
    assert claim(state, "THE ATTIC") is None


def test_release_into_full_room_conflicts(state, rng):
    load(state, SIXTEEN_WORDS, rng)
    with pytest.raises(StateConflictError):
        release(state, ROOMS[0], "extra")


def test_release_all_returns_clues_to_origin(state, rng):
    load(state, SIXTEEN_WORDS, rng)
    p = _add(state, "11", room=STUDY)
    text = claim(state, UNDERHOUSE)
    p.clues.append(Clue(room=UNDERHOUSE, text=text))
    assert _conserved(state)

    assert release_all(state, p) == 1
    assert p.clues == []
    assert text in unclaimed_in(state, UNDERHOUSE)
    assert _conserved(state)


def test_distribution_waits_for_every_living_player(state, rng):
    load(state, SIXTEEN_WORDS, rng)
    v1 = _add(state, "11", room=STUDY)
    v2 = _add(state, "12", room=UNDERHOUSE)
    killer = _add(state, "13", role=Role.KILLER, room=PARLOR)

    _moved(state, v1, v2)
    assert not can_claim(state, v1, STUDY)
    assert distribute_round_clues(state) == {}

    _moved(state, killer)
    granted = distribute_round_clues(state)

    assert set(granted) == {"11", "12"}
    assert granted["11"].room == STUDY
    assert granted["12"].room == UNDERHOUSE
    assert v1.clues == [granted["11"]]
    assert killer.clues == []
    assert _conserved(state)
    # Only once per round
    assert distribute_round_clues(state) == {}


def test_shared_room_gets_nothing(state, rng):
    load(state, SIXTEEN_WORDS, rng)
    v1 = _add(state, "11", room=STUDY)
    v2 = _add(state, "12", room=STUDY)
    killer = _add(state, "13", role=Role.KILLER, room=PARLOR)
    _moved(state, v1, v2, killer)

    assert distribute_round_clues(state) == {}
    assert unclaimed_count(state) == 16


def test_one_clue_per_room_per_victim(state, rng):
    load(state, SIXTEEN_WORDS, rng)
    v1 = _add(state, "11", room=STUDY)
    _moved(state, v1)
    assert can_claim(state, v1, STUDY)
    v1.clues.append(Clue(room=STUDY, text=claim(state, STUDY)))
    assert unclaimed_in(state, STUDY)
    assert not can_claim(state, v1, STUDY)


def test_companion_lock_blocks_claim(state, rng):
    load(state, SIXTEEN_WORDS, rng)
    v1 = _add(state, "11", room=STUDY)
    _moved(state, v1)
    state.companions.locked_until["11"] = state.round_index
    assert not can_claim(state, v1, STUDY)
    state.companions.locked_until["11"] = state.round_index - 1
    assert can_claim(state, v1, STUDY)


def test_only_living_victims_claim(state, rng):
    load(state, SIXTEEN_WORDS, rng)
    killer = _add(state, "11", role=Role.KILLER, room=STUDY)
    unknown = _add(state, "12", role=Role.UNKNOWN, room=UNDERHOUSE)
    _moved(state, killer, unknown)
    assert not can_claim(state, killer, STUDY)
    assert not can_claim(state, unknown, UNDERHOUSE)


def test_empty_room_cannot_be_claimed(state, rng):
    load(state, BUTLER, rng)
    v1 = _add(state, "11", room=ROOMS[-1])
    _moved(state, v1)
    assert not can_claim(state, v1, ROOMS[-1])

"""Clue bank: fragments of the secret sentence hidden in the rooms.

A fragment lives in exactly one place at a time, either a room slot or a
Victim's clue list, so ``unclaimed + claimed == len(fragments)`` always holds.
"""

import logging
import random
from typing import Optional

from manor.companions import is_locked
from manor.errors import EmptySentence, StateConflictError
from manor.rooms import ROOMS
from manor.rules import SLOTS_PER_ROOM, Role
from manor.state import Clue, ClueSupply, GameState, Player

logger = logging.getLogger(__name__)


def normalize_sentence(sentence: Optional[str]) -> str:
    return " ".join(str(sentence or "").split())


def chunk_sentence(sentence: str, max_fragments: int) -> list[str]:
    """Split sentence into at most max_fragments chunks of near-equal word count.

    Remainder words go to the earliest chunks, so sizes never increase along the list.
    """
    words = normalize_sentence(sentence).split()
    count = min(max_fragments, len(words))
    if count <= 0:
        return []
    base, remainder = divmod(len(words), count)
    fragments: list[str] = []
    index = 0
    for i in range(count):
        size = base + (1 if i < remainder else 0)
        fragments.append(" ".join(words[index:index + size]))
        index += size
    return fragments


def load(state: GameState, sentence: Optional[str], rng: random.Random) -> ClueSupply:
    """Replace the clue supply with fragments of sentence and clear every player's clues."""
    normalized = normalize_sentence(sentence)
    if not normalized:
        raise EmptySentence()

    fragments = chunk_sentence(normalized, len(ROOMS) * SLOTS_PER_ROOM)
    rng.shuffle(fragments)

    per_room: dict[str, list[Optional[str]]] = {}
    supply = iter(fragments)
    for room in ROOMS:
        per_room[room] = [next(supply, None) for _ in range(SLOTS_PER_ROOM)]

    state.clues = ClueSupply(sentence=normalized, fragments=list(fragments), per_room=per_room)
    for p in state.players:
        p.clues = []
    logger.info("Loaded %d clue fragments across %d rooms", len(fragments), len(ROOMS))
    return state.clues


def unclaimed_in(state: GameState, room: str) -> list[str]:
    return [text for text in state.clues.per_room.get(room, ()) if text is not None]


def claim(state: GameState, room: str) -> Optional[str]:
    """Take the first unclaimed fragment in room, or None if the room is empty."""
    slots = state.clues.per_room.get(room)
    if not slots:
        return None
    for i, text in enumerate(slots):
        if text is not None:
            slots[i] = None
            return text
    return None


def release(state: GameState, room: str, text: str) -> None:
    """Put a claimed fragment back into the first free slot of its room."""
    slots = state.clues.per_room.get(room)
    if slots is None or None not in slots:
        raise StateConflictError(f"No free clue slot in {room} to return a fragment to.")
    slots[slots.index(None)] = text


def release_all(state: GameState, player: Player) -> int:
    """Return every clue player holds to its room. Returns how many were returned."""
    returned = 0
    for clue in player.clues:
        release(state, clue.room, clue.text)
        returned += 1
    player.clues = []
    return returned


def can_claim(state: GameState, player: Player, room: str) -> bool:
    """Whether player may pick up a fragment in room right now."""
    if not player.alive or player.role != Role.VICTIM:
        return False
    if not unclaimed_in(state, room):
        return False
    if any(c.room == room for c in player.clues):
        return False
    if is_locked(state, player.pin):
        return False
    if not state.ledger.all_living_have_moved(state.round_index, state.players):
        return False
    occupants = state.living_in(room)
    return len(occupants) == 1 and occupants[0].pin == player.pin


def distribute_round_clues(state: GameState) -> dict[str, Clue]:
    """Hand out fragments once the whole table has moved. Runs at most once per round.

    Returns pin -> clue for every Victim who received one.
    """
    if state.clues.distributed_round == state.round_index:
        return {}
    if not state.ledger.all_living_have_moved(state.round_index, state.players):
        return {}
    state.clues.distributed_round = state.round_index

    # Decide eligibility for everyone before any slot changes
    eligible = [p for p in state.players if can_claim(state, p, p.room)]
    granted: dict[str, Clue] = {}
    for p in eligible:
        text = claim(state, p.room)
        if text is None:
            continue
        clue = Clue(room=p.room, text=text)
        p.clues.append(clue)
        granted[p.pin] = clue
    if granted:
        logger.info("Round %d: %d clue(s) handed out", state.round_index, len(granted))
    return granted


def claimed_count(state: GameState) -> int:
    return sum(len(p.clues) for p in state.players)


def unclaimed_count(state: GameState) -> int:
    return sum(len(unclaimed_in(state, room)) for room in state.clues.per_room)

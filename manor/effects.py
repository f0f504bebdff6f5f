"""Round effects: latch promotion, sanctuary selection, scatter and ghost events."""

import logging
import random

from manor.rooms import ROOMS
from manor.rules import GhostEvent
from manor.state import GameState

logger = logging.getLogger(__name__)


def choose_sanctuary(state: GameState, rng: random.Random) -> list[str]:
    count = min(state.settings.sanctuary_room_count, len(ROOMS))
    state.effects.sanctuary_rooms = rng.sample(list(ROOMS), count)
    return list(state.effects.sanctuary_rooms)


def active_sanctuary_rooms(state: GameState) -> list[str]:
    if not state.effects.sanctuary.active:
        return []
    return list(state.effects.sanctuary_rooms)


def promote_all(state: GameState, rng: random.Random) -> dict[str, bool]:
    """Move every armed effect into this round. Returns the new active values."""
    effects = state.effects
    active = {name: latch.promote() for name, latch in effects.latches().items()}
    if effects.sanctuary.active:
        choose_sanctuary(state, rng)
    else:
        effects.sanctuary_rooms = []
    return active


def scatter(state: GameState, rng: random.Random, include_dead: bool = False) -> dict[str, str]:
    """Send players to a random room other than their own. Returns pin -> new room."""
    moved: dict[str, str] = {}
    for p in state.players:
        if not p.alive and not include_dead:
            continue
        choices = [r for r in ROOMS if r != p.room] or list(ROOMS)
        p.room = rng.choice(choices)
        moved[p.pin] = p.room
    logger.info("Round %d: scattered %d player(s)", state.round_index, len(moved))
    return moved


def shove(state: GameState, rng: random.Random) -> dict[str, str]:
    moved = scatter(state, rng)
    state.effects.last_shove_round = state.round_index
    return moved


def apply_ghost_event(state: GameState, event: GhostEvent, rng: random.Random) -> dict[str, str]:
    """Apply event to the current round. Returns scattered positions for a shove, else {}."""
    effects = state.effects
    if event == GhostEvent.REVEAL:
        effects.reveal_dots.active = True
    elif event == GhostEvent.GAZE:
        effects.killer_gaze.active = True
    elif event == GhostEvent.SCREAM:
        effects.scream.active = True
    elif event == GhostEvent.INTERVENE:
        effects.dead_intervene.active = True
    elif event == GhostEvent.SANCTUARY:
        effects.sanctuary.active = True
        choose_sanctuary(state, rng)
    elif event == GhostEvent.SHOVE:
        return shove(state, rng)
    else:
        raise ValueError(f"Unknown ghost event: {event!r}")
    return {}

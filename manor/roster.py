"""Roster: registration, lookups, removal and role assignment."""

import logging
import random
from typing import Optional

from manor import clues, companions
from manor.errors import NoPlayers, NotFoundError, RegistrationClosed, StateConflictError, ValidationError
from manor.rooms import START_ROOM
from manor.rules import PIN_MAX, PIN_MIN, REGISTRATION_CLOSES_AT_ROUND, Role
from manor.state import GameState, Player

logger = logging.getLogger(__name__)

MAX_PLAYER_NAME_LENGTH = 50


def generate_pin(state: GameState, rng: random.Random) -> str:
    """Pick a free two-digit join code."""
    taken = {p.pin for p in state.players}
    free = [str(n) for n in range(PIN_MIN, PIN_MAX + 1) if str(n) not in taken]
    if not free:
        raise StateConflictError("No join codes left; the manor is full.")
    return rng.choice(free)


def register(state: GameState, name: Optional[str], rng: random.Random) -> Player:
    trimmed = str(name or "").strip()
    if not trimmed:
        raise ValidationError("Name is required.")
    if len(trimmed) > MAX_PLAYER_NAME_LENGTH:
        raise ValidationError(f"Name must be at most {MAX_PLAYER_NAME_LENGTH} characters.")
    if state.round_index >= REGISTRATION_CLOSES_AT_ROUND:
        raise RegistrationClosed()
    pin = generate_pin(state, rng)

    player = Player(id=state.next_player_id, pin=pin, name=trimmed, room=START_ROOM)
    state.next_player_id += 1
    state.players.append(player)
    logger.info("Registered player %d (%s)", player.id, player.pin)
    return player


def find_by_pin(state: GameState, pin) -> Optional[Player]:
    if pin is None:
        return None
    return state.get_player_by_pin(str(pin))


def find_by_id(state: GameState, player_id) -> Optional[Player]:
    try:
        return state.get_player(int(player_id))
    except (TypeError, ValueError):
        return None


def require_pin(state: GameState, pin, what: str = "Player") -> Player:
    player = find_by_pin(state, pin)
    if player is None:
        raise NotFoundError(f"{what} not found.")
    return player


def require_id(state: GameState, player_id) -> Player:
    player = find_by_id(state, player_id)
    if player is None:
        raise NotFoundError("Player not found.")
    return player


def remove(state: GameState, player_id, pin) -> Player:
    """Remove the player matching both id and pin, along with everything recorded about them."""
    player = find_by_id(state, player_id)
    if player is None or player.pin != str(pin).strip():
        raise NotFoundError("Player not found.")
    clues.release_all(state, player)
    state.players.remove(player)
    state.ledger.purge_pin(player.pin)
    companions.forget(state, player.pin)
    logger.info("Removed player %d (%s)", player.id, player.pin)
    return player


def set_role(state: GameState, player: Player, role: Role) -> None:
    """Assign role; anyone leaving the Victim role gives their clues back."""
    if player.role == Role.VICTIM and role != Role.VICTIM:
        clues.release_all(state, player)
    player.role = role


def set_alive(state: GameState, player: Player, alive: bool) -> None:
    """Flip alive; dying gives every held clue back to its room."""
    if player.alive and not alive:
        clues.release_all(state, player)
    player.alive = alive


def update_player(state: GameState, player_id, role: Optional[Role] = None, alive: Optional[bool] = None) -> Player:
    """GM override of role and/or alive flag."""
    player = require_id(state, player_id)
    if role is not None:
        set_role(state, player, Role(role))
    if alive is not None:
        set_alive(state, player, bool(alive))
    return player


def randomize_roles(state: GameState, rng: random.Random) -> Player:
    """Make every living player a Victim, then promote one at random to Killer. Returns the Killer."""
    alive = state.get_alive_players()
    if not alive:
        raise NoPlayers()
    killer = alive[rng.randrange(len(alive))]
    for p in alive:
        set_role(state, p, Role.KILLER if p is killer else Role.VICTIM)
    logger.info("Roles randomized among %d living players", len(alive))
    return killer

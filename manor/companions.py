"""Companion locks: Victims who keep sharing a room lose clue access for a while."""

import logging
from collections import defaultdict
from itertools import combinations
from typing import Optional

from manor.rules import Role
from manor.state import GameState

logger = logging.getLogger(__name__)


def is_locked(state: GameState, pin: str, round_index: Optional[int] = None) -> bool:
    """True if pin is under a companion lock covering round_index (default: current round)."""
    if round_index is None:
        round_index = state.round_index
    until = state.companions.locked_until.get(pin)
    return until is not None and until >= round_index


def partners_by_player(state: GameState) -> dict[str, set[str]]:
    """Living Victims grouped by room; every Victim mapped to the other Victims sharing their room."""
    rooms: dict[str, list[str]] = defaultdict(list)
    for p in state.players:
        if p.alive and p.role == Role.VICTIM:
            rooms[p.room].append(p.pin)
    partners: dict[str, set[str]] = defaultdict(set)
    for pins in rooms.values():
        for a, b in combinations(pins, 2):
            partners[a].add(b)
            partners[b].add(a)
    return dict(partners)


def evaluate(state: GameState, completed_round: int) -> list[str]:
    """Lock Victims who repeated last round's pairing. Returns the newly locked pins.

    Players whose lock still covers completed_round are skipped. The current
    pairing becomes the baseline for the next evaluation either way.
    """
    locks = state.companions
    duration = state.settings.companion_lock_duration
    current = partners_by_player(state)
    newly_locked: list[str] = []
    for pin, partners in current.items():
        if is_locked(state, pin, completed_round):
            continue
        if partners & locks.last_partners.get(pin, set()):
            locks.locked_until[pin] = completed_round + duration
            newly_locked.append(pin)
    locks.last_partners = current
    if newly_locked:
        logger.info(
            "Round %d: companion lock on %s until round %d",
            completed_round,
            ", ".join(newly_locked),
            completed_round + duration,
        )
    return newly_locked


def forget(state: GameState, pin: str) -> None:
    """Drop pin from lock and pairing records."""
    locks = state.companions
    locks.locked_until.pop(pin, None)
    locks.last_partners.pop(pin, None)
    for partners in locks.last_partners.values():
        partners.discard(pin)

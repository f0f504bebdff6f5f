"""Round engine: owns one game's state and serializes every operation on it.

All mutating operations validate completely before touching state, so a
rejected call leaves the game exactly as it was.
"""

import logging
import random
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional

from manor import clues, companions, effects, ghosts, roster
from manor.config import EngineConfig
from manor.errors import (
    GameError,
    NotFoundError,
    PermissionDeniedError,
    StateConflictError,
    TimingError,
    ValidationError,
)
from manor.ledger import GhostVoteRecord, KillRecord, MoveRecord, VoteRecord
from manor.rooms import is_adjacent, is_room
from manor.rules import KILLER_ADVANTAGE_MOVE_QUOTA, MOVE_QUOTA, GhostEvent, KillReason, Role
from manor.state import Clue, ClueSupply, GameSettings, GameState, Player

logger = logging.getLogger(__name__)

TOGGLEABLE_EFFECTS = ("reveal_dots", "killer_gaze", "scream", "dead_intervene", "sanctuary", "shove")


@dataclass
class MoveOutcome:
    """Result of a move: the record, the clue the mover got (if any), and every clue handed out."""

    record: MoveRecord
    clue: Optional[Clue] = None
    granted: dict[str, Clue] = field(default_factory=dict)


@dataclass
class RoundReport:
    """What happened at a round boundary."""

    round_index: int
    executed_pin: Optional[str] = None
    locked_pins: list[str] = field(default_factory=list)
    active_effects: dict[str, bool] = field(default_factory=dict)
    sanctuary_rooms: list[str] = field(default_factory=list)
    scattered: dict[str, str] = field(default_factory=dict)
    ghost_event: Optional[GhostEvent] = None


# --- gates (pure checks, raise on failure, never mutate) ---


def move_quota(state: GameState, player: Player) -> int:
    if player.role == Role.KILLER and state.is_killer_advantage_round():
        return KILLER_ADVANTAGE_MOVE_QUOTA
    return MOVE_QUOTA


def moves_left(state: GameState, player: Player) -> int:
    return max(0, move_quota(state, player) - state.ledger.move_count(state.round_index, player.pin))


def check_move(state: GameState, player: Player, room: Optional[str], stay: bool = False) -> str:
    """Validate a move and return the destination room."""
    if not player.alive:
        raise PermissionDeniedError("Dead players cannot move.")
    current = player.room
    if stay:
        if player.role != Role.KILLER:
            raise PermissionDeniedError("Only the Killer can stay where they are.")
        if state.ledger.kills_in_room(state.round_index - 1, current):
            raise TimingError("Blood was spilled here last round. You cannot linger.")
        dest = current
    else:
        dest = str(room or "").strip()
        if not is_room(dest):
            raise ValidationError("Invalid room.")
        if dest == current:
            raise ValidationError("You must move to a different room.")
        if not is_adjacent(current, dest):
            raise ValidationError("You cannot move there from this room.")
    if moves_left(state, player) <= 0:
        raise TimingError("You already moved this round.")
    return dest


def check_vote(state: GameState, voter: Player, target: Optional[Player]) -> None:
    if not voter.alive:
        raise PermissionDeniedError("Dead players cannot vote.")
    if target is None:
        raise NotFoundError("Target not found.")
    if target.pin == voter.pin:
        raise ValidationError("You cannot vote for yourself.")
    if not target.alive:
        raise ValidationError("That player is already dead.")
    if state.ledger.has_voted(state.round_index, voter.pin):
        raise TimingError("You already voted this round.")


def check_kill(state: GameState, killer: Player, victim: Optional[Player]) -> None:
    """Every condition a kill must satisfy, in the order they are reported."""
    round_index = state.round_index
    if killer.role != Role.KILLER:
        raise PermissionDeniedError("You are not the Killer.")
    if not killer.alive:
        raise PermissionDeniedError("Dead killers cannot kill.")
    if state.effects.dead_intervene.active:
        raise TimingError("The dead hold your hand still this round.")
    if state.ledger.has_any_kill(round_index):
        raise TimingError("You have already killed this round.")
    if not state.ledger.all_living_victims_have_moved(round_index, state.players):
        raise TimingError("You cannot kill until every living victim has moved this round.")
    if not state.is_killer_advantage_round() and state.ledger.real_move_count(round_index, killer.pin) == 0:
        raise TimingError("You must move before you can kill.")
    if victim is None:
        raise NotFoundError("Target not found.")
    if not victim.alive or victim.pin == killer.pin:
        raise ValidationError("Invalid victim.")
    if victim.room != killer.room:
        raise StateConflictError("You are not alone with that victim.")
    others = [p for p in state.living_in(killer.room) if p.pin != killer.pin]
    if len(others) != 1 or others[0].pin != victim.pin:
        raise StateConflictError("Too many eyes are watching. You hesitate.")
    if killer.room in effects.active_sanctuary_rooms(state):
        raise StateConflictError("This room is a sanctuary this round.")


def kill_target(state: GameState, killer: Player) -> Optional[Player]:
    """The player killer could strike right now, if any."""
    others = [p for p in state.living_in(killer.room) if p.pin != killer.pin]
    if len(others) != 1:
        return None
    try:
        check_kill(state, killer, others[0])
    except GameError:
        return None
    return others[0]


class RoundEngine:
    """One game instance. Every operation runs under the same re-entrant lock."""

    def __init__(self, config: Optional[EngineConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or EngineConfig()
        self.rng = rng or random.Random(self.config.seed)
        self._lock = threading.RLock()
        self._state = self._fresh_state()

    def _fresh_state(self) -> GameState:
        c = self.config
        return GameState(
            settings=GameSettings(
                ghost_event_interval=c.ghost_event_interval,
                killer_advantage_interval=c.killer_advantage_interval,
                killer_advantage_enabled=c.killer_advantage_enabled,
                companion_lock_duration=c.companion_lock_duration,
                sanctuary_room_count=c.sanctuary_room_count,
            )
        )

    @contextmanager
    def locked(self) -> Iterator[GameState]:
        """Hold the game lock and expose the state, for reads that must see one consistent snapshot."""
        with self._lock:
            yield self._state

    @property
    def round_index(self) -> int:
        with self._lock:
            return self._state.round_index

    # --- game lifecycle ---

    def new_game(self) -> GameState:
        """Throw away the whole game and start over."""
        with self._lock:
            self._state = self._fresh_state()
            logger.info("New game started")
            return self._state

    # --- player operations ---

    def register(self, name: Optional[str]) -> Player:
        with self._lock:
            return roster.register(self._state, name, self.rng)

    def rejoin(self, pin) -> Player:
        with self._lock:
            return roster.require_pin(self._state, pin, "PIN")

    def move(self, pin, room: Optional[str], stay: bool = False) -> MoveOutcome:
        with self._lock:
            state = self._state
            player = roster.require_pin(state, pin)
            dest = check_move(state, player, room, stay)
            record = MoveRecord(round_index=state.round_index, pin=player.pin, from_room=player.room, to_room=dest)
            state.ledger.record_move(record)
            player.room = dest
            granted = clues.distribute_round_clues(state)
            return MoveOutcome(record=record, clue=granted.get(player.pin), granted=granted)

    def vote(self, pin, target_pin) -> VoteRecord:
        with self._lock:
            state = self._state
            voter = roster.require_pin(state, pin, "Voter")
            target = roster.find_by_pin(state, target_pin)
            check_vote(state, voter, target)
            record = VoteRecord(round_index=state.round_index, voter_pin=voter.pin, target_pin=target.pin)
            state.ledger.record_vote(record)
            return record

    def ghost_vote(self, pin, event) -> GhostVoteRecord:
        with self._lock:
            state = self._state
            voter = roster.require_pin(state, pin)
            if voter.alive:
                raise PermissionDeniedError("Only the dead can cast ghost votes.")
            try:
                choice = GhostEvent(event)
            except ValueError:
                raise ValidationError("Unknown ghost event.") from None
            return ghosts.cast(state, voter.pin, choice)

    def kill(self, pin, target_pin) -> KillRecord:
        with self._lock:
            state = self._state
            killer = roster.require_pin(state, pin, "Killer")
            victim = roster.find_by_pin(state, target_pin)
            check_kill(state, killer, victim)
            record = self._kill(victim, KillReason.DIRECT)
            clues.distribute_round_clues(state)
            logger.info("Round %d: kill in %s (victim %s)", state.round_index, record.room, victim.pin)
            return record

    def _kill(self, victim: Player, reason: KillReason) -> KillRecord:
        state = self._state
        roster.set_alive(state, victim, False)
        record = KillRecord(
            round_index=state.round_index,
            room=victim.room,
            victim_pin=victim.pin,
            resolved=True,
            reason=reason,
        )
        state.ledger.record_kill(record)
        return record

    # --- round transition ---

    def advance_round(self) -> RoundReport:
        """Close the current round and open the next one."""
        with self._lock:
            state = self._state
            completed = state.round_index

            executed_pin = None
            target_pin = state.ledger.majority_target(completed)
            target = roster.find_by_pin(state, target_pin)
            if target is not None and target.alive:
                self._kill(target, KillReason.VOTE_EXECUTION)
                executed_pin = target.pin
                logger.info("Round %d: %s executed by vote", completed, target.pin)

            locked_pins = companions.evaluate(state, completed)

            state.round_index += 1
            effects.promote_all(state, self.rng)
            scattered: dict[str, str] = {}
            if state.effects.shove.active:
                scattered = effects.shove(state, self.rng)

            ghost_event = None
            if ghosts.is_resolution_round(state):
                ghost_event = ghosts.resolve(state)
                if ghost_event is not None:
                    scattered.update(effects.apply_ghost_event(state, ghost_event, self.rng))

            logger.info("Advanced to round %d", state.round_index)
            return RoundReport(
                round_index=state.round_index,
                executed_pin=executed_pin,
                locked_pins=locked_pins,
                active_effects={name: latch.active for name, latch in state.effects.latches().items()},
                sanctuary_rooms=effects.active_sanctuary_rooms(state),
                scattered=scattered,
                ghost_event=ghost_event,
            )

    # --- GM operations ---

    def update_player(self, player_id, role=None, alive: Optional[bool] = None) -> Player:
        with self._lock:
            if role is not None:
                try:
                    role = Role(role)
                except ValueError:
                    raise ValidationError("Invalid role.") from None
            player = roster.update_player(self._state, player_id, role=role, alive=alive)
            clues.distribute_round_clues(self._state)
            return player

    def remove_player(self, player_id, pin) -> Player:
        with self._lock:
            removed = roster.remove(self._state, player_id, pin)
            # The departed player may have been the last one holding up the barrier
            clues.distribute_round_clues(self._state)
            return removed

    def randomize_roles(self) -> list[Player]:
        with self._lock:
            roster.randomize_roles(self._state, self.rng)
            clues.distribute_round_clues(self._state)
            return list(self._state.players)

    def toggle_effect(self, name: str) -> bool:
        """Flip the armed side of an effect; it takes hold at the next round. Returns the armed value."""
        if name not in TOGGLEABLE_EFFECTS:
            raise ValidationError(f"Unknown effect: {name}")
        with self._lock:
            latch = self._state.effects.latches()[name]
            latch.armed = not latch.armed
            logger.info("Effect %s armed=%s", name, latch.armed)
            return latch.armed

    def toggle_killer_clue_visibility(self) -> bool:
        with self._lock:
            settings = self._state.settings
            settings.killer_clue_visibility = not settings.killer_clue_visibility
            return settings.killer_clue_visibility

    def set_killer_advantage(self, interval: Optional[int] = None, toggle: bool = False) -> GameSettings:
        if interval is not None and int(interval) < 1:
            raise ValidationError("Interval must be at least 1.")
        with self._lock:
            settings = self._state.settings
            if interval is not None:
                settings.killer_advantage_interval = int(interval)
            if toggle:
                settings.killer_advantage_enabled = not settings.killer_advantage_enabled
            return settings

    def set_ghost_event_interval(self, interval: int) -> GameSettings:
        if int(interval) < 1:
            raise ValidationError("Interval must be at least 1.")
        with self._lock:
            self._state.settings.ghost_event_interval = int(interval)
            return self._state.settings

    def scatter_players(self, include_dead: bool = False) -> dict[str, str]:
        with self._lock:
            return effects.scatter(self._state, self.rng, include_dead=include_dead)

    def generate_clues(self, sentence: Optional[str]) -> ClueSupply:
        with self._lock:
            return clues.load(self._state, sentence, self.rng)

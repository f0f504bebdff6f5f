"""Pydantic request/response models for the API."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from manor.clues import unclaimed_count, unclaimed_in
from manor.effects import active_sanctuary_rooms
from manor.engine import RoundReport, kill_target, moves_left
from manor.ghosts import pending_tally
from manor.rooms import ROOMS, describe, neighbors
from manor.roster import MAX_PLAYER_NAME_LENGTH
from manor.rules import GhostEvent, Role
from manor.state import GameState, Player

# Validation constants (no magic numbers in validation)
MAX_SENTENCE_LENGTH = 500
MAX_INTERVAL = 100


# --- requests ---


class RegisterRequest(BaseModel):
    name: str = Field(..., max_length=MAX_PLAYER_NAME_LENGTH)


class PinRequest(BaseModel):
    """Body carrying only a player's join code (rejoin, state)."""

    pin: str


class MoveRequest(BaseModel):
    pin: str
    room: Optional[str] = Field(default=None, description="Destination; ignored when stay is set")
    stay: bool = Field(default=False, description="Killer only: spend the move staying put")


class TargetRequest(BaseModel):
    """Body for vote and kill."""

    pin: str
    target_pin: str


class GhostVoteRequest(BaseModel):
    pin: str
    event: GhostEvent


class UnlockRequest(BaseModel):
    gm_pin: str


class UpdatePlayerRequest(BaseModel):
    id: int
    role: Optional[Role] = None
    alive: Optional[bool] = None


class RemovePlayerRequest(BaseModel):
    id: int
    pin: str


class KillerAdvantageRequest(BaseModel):
    interval: Optional[int] = Field(default=None, ge=1, le=MAX_INTERVAL)
    toggle: bool = Field(default=False, description="Flip whether advantage rounds are enabled")


class GhostIntervalRequest(BaseModel):
    interval: int = Field(..., ge=1, le=MAX_INTERVAL)


class ScatterRequest(BaseModel):
    include_dead: bool = False


class GenerateCluesRequest(BaseModel):
    sentence: str = Field(..., max_length=MAX_SENTENCE_LENGTH)

    @field_validator("sentence")
    @classmethod
    def collapse_whitespace(cls, v: str) -> str:
        return " ".join(v.split())


# --- responses ---


class CluePublic(BaseModel):
    room: str
    text: str


class PlayerBrief(BaseModel):
    """Player as listed to other players: no role, no location."""

    id: int
    name: str
    pin: str
    alive: bool


class PlayerPublic(BaseModel):
    """Full player record (own view, GM roster)."""

    id: int
    name: str
    pin: str
    role: str
    alive: bool
    room: str
    clues: list[CluePublic] = Field(default_factory=list)


class PlayerRef(BaseModel):
    name: str
    pin: str


class RoomInfo(BaseModel):
    room: str
    description: str
    living: list[PlayerRef]
    bodies: list[PlayerRef]


class RoomDot(BaseModel):
    room: str
    total: int


class PlayerStateResponse(BaseModel):
    """What one player is allowed to see this round."""

    ok: bool = True
    round: int
    player: PlayerPublic
    room_info: RoomInfo
    allowed_rooms: list[str]
    roster: list[PlayerBrief]
    moves_left: int
    can_kill: bool = False
    kill_target: Optional[PlayerRef] = None
    killer_advantage: bool = False
    reveal_dots: bool = False
    room_dots: Optional[list[RoomDot]] = None
    room_clues: list[str] = Field(default_factory=list)
    gaze: Optional[dict[str, list[str]]] = Field(default=None, description="Killer only, while killer gaze is active")
    scream_room: Optional[str] = Field(default=None, description="Room of the latest kill, while scream is active")
    sanctuary_rooms: list[str] = Field(default_factory=list)
    dead_intervene: bool = False
    companion_locked_until: Optional[int] = None
    ghost_vote: Optional[str] = None
    ghost_events: list[str] = Field(default_factory=list)


class RosterResponse(BaseModel):
    ok: bool = True
    round: int
    players: list[PlayerPublic]


class RoundResponse(BaseModel):
    ok: bool = True
    round: int
    executed_pin: Optional[str] = None
    locked_pins: list[str] = Field(default_factory=list)
    active_effects: dict[str, bool] = Field(default_factory=dict)
    sanctuary_rooms: list[str] = Field(default_factory=list)
    scattered: dict[str, str] = Field(default_factory=dict)
    ghost_event: Optional[str] = None


class ClueSupplyResponse(BaseModel):
    ok: bool = True
    sentence: str
    fragments: list[str]
    per_room: dict[str, list[Optional[str]]]


class SummaryRoom(BaseModel):
    room: str
    players: list[PlayerBrief]
    clues: list[str]


class TallyEntry(BaseModel):
    pin: str
    name: str
    count: int


class KillPublic(BaseModel):
    victim_pin: str
    victim_name: str
    room: str
    resolved: bool
    reason: str


class EffectPublic(BaseModel):
    active: bool
    armed: bool


class SummaryResponse(BaseModel):
    """Everything the GM sees."""

    ok: bool = True
    round: int
    rooms: list[SummaryRoom]
    not_moved: list[PlayerPublic]
    not_voted: list[PlayerPublic]
    players: list[PlayerPublic]
    votes_by_target: list[TallyEntry]
    majority_target: Optional[str] = None
    kills: list[KillPublic]
    effects: dict[str, EffectPublic]
    sanctuary_rooms: list[str]
    settings: dict[str, int | bool]
    killer_advantage_round: bool
    companion_locks: dict[str, int]
    ghost_votes: dict[str, int]
    last_ghost_event: Optional[str] = None
    last_ghost_event_round: Optional[int] = None
    clue_total: int
    clues_unclaimed: int


# --- converters ---


def player_to_public(p: Player) -> PlayerPublic:
    return PlayerPublic(
        id=p.id,
        name=p.name,
        pin=p.pin,
        role=p.role.value,
        alive=p.alive,
        room=p.room,
        clues=[CluePublic(room=c.room, text=c.text) for c in p.clues],
    )


def player_to_brief(p: Player) -> PlayerBrief:
    return PlayerBrief(id=p.id, name=p.name, pin=p.pin, alive=p.alive)


def _ref(p: Player) -> PlayerRef:
    return PlayerRef(name=p.name, pin=p.pin)


def player_state_to_public(state: GameState, player: Player) -> PlayerStateResponse:
    """Build one player's view; call while holding the engine lock."""
    room = player.room
    here = [p for p in state.players if p.room == room]
    is_killer = player.role == Role.KILLER
    fx = state.effects

    target = kill_target(state, player) if is_killer else None

    room_dots = None
    if fx.reveal_dots.active:
        counts = {r: 0 for r in ROOMS}
        for p in state.players:
            counts[p.room] = counts.get(p.room, 0) + 1
        room_dots = [RoomDot(room=r, total=n) for r, n in counts.items()]

    if is_killer:
        room_clues = unclaimed_in(state, room) if state.settings.killer_clue_visibility else []
    else:
        room_clues = [c.text for c in player.clues if c.room == room]

    gaze = None
    if is_killer and fx.killer_gaze.active:
        gaze = {r: [p.name for p in state.living_in(r) if p.pin != player.pin] for r in ROOMS}

    scream_room = None
    if fx.scream.active:
        last_kill = state.ledger.last_direct_kill()
        scream_room = last_kill.room if last_kill else None

    locked_until = state.companions.locked_until.get(player.pin)
    if locked_until is not None and locked_until < state.round_index:
        locked_until = None

    ghost_vote = None
    if not player.alive:
        record = state.ledger.ghost_vote_for(state.round_index, player.pin)
        ghost_vote = record.event.value if record else None

    return PlayerStateResponse(
        round=state.round_index,
        player=player_to_public(player),
        room_info=RoomInfo(
            room=room,
            description=describe(room),
            living=[_ref(p) for p in here if p.alive],
            bodies=[_ref(p) for p in here if not p.alive],
        ),
        allowed_rooms=list(neighbors(room)),
        roster=[player_to_brief(p) for p in state.players],
        moves_left=moves_left(state, player) if player.alive else 0,
        can_kill=target is not None,
        kill_target=_ref(target) if target else None,
        killer_advantage=is_killer and state.is_killer_advantage_round(),
        reveal_dots=fx.reveal_dots.active,
        room_dots=room_dots,
        room_clues=room_clues,
        gaze=gaze,
        scream_room=scream_room,
        sanctuary_rooms=active_sanctuary_rooms(state),
        dead_intervene=fx.dead_intervene.active,
        companion_locked_until=locked_until,
        ghost_vote=ghost_vote,
        ghost_events=[e.value for e in GhostEvent] if not player.alive else [],
    )


def roster_to_public(state: GameState) -> RosterResponse:
    return RosterResponse(round=state.round_index, players=[player_to_public(p) for p in state.players])


def round_report_to_public(report: RoundReport) -> RoundResponse:
    return RoundResponse(
        round=report.round_index,
        executed_pin=report.executed_pin,
        locked_pins=report.locked_pins,
        active_effects=report.active_effects,
        sanctuary_rooms=report.sanctuary_rooms,
        scattered=report.scattered,
        ghost_event=report.ghost_event.value if report.ghost_event else None,
    )


def clue_supply_to_public(state: GameState) -> ClueSupplyResponse:
    supply = state.clues
    return ClueSupplyResponse(
        sentence=supply.sentence,
        fragments=list(supply.fragments),
        per_room={room: list(slots) for room, slots in supply.per_room.items()},
    )


def summary_to_public(state: GameState) -> SummaryResponse:
    """GM summary; call while holding the engine lock."""
    round_index = state.round_index
    ledger = state.ledger
    by_pin = {p.pin: p for p in state.players}

    rooms = [
        SummaryRoom(
            room=r,
            players=[player_to_brief(p) for p in state.players if p.room == r],
            clues=unclaimed_in(state, r),
        )
        for r in ROOMS
    ]
    alive = state.get_alive_players()
    not_moved = [player_to_public(p) for p in alive if not ledger.has_moved(round_index, p.pin)]
    not_voted = [player_to_public(p) for p in alive if not ledger.has_voted(round_index, p.pin)]

    votes_by_target = [
        TallyEntry(pin=pin, name=by_pin[pin].name if pin in by_pin else f"PIN {pin}", count=count)
        for pin, count in ledger.vote_tally(round_index).most_common()
    ]
    kills = [
        KillPublic(
            victim_pin=k.victim_pin,
            victim_name=by_pin[k.victim_pin].name if k.victim_pin in by_pin else f"PIN {k.victim_pin}",
            room=k.room,
            resolved=k.resolved,
            reason=k.reason.value,
        )
        for k in ledger.kills_in(round_index)
    ]
    s = state.settings
    return SummaryResponse(
        round=round_index,
        rooms=rooms,
        not_moved=not_moved,
        not_voted=not_voted,
        players=[player_to_public(p) for p in state.players],
        votes_by_target=votes_by_target,
        majority_target=ledger.majority_target(round_index),
        kills=kills,
        effects={
            name: EffectPublic(active=latch.active, armed=latch.armed)
            for name, latch in state.effects.latches().items()
        },
        sanctuary_rooms=active_sanctuary_rooms(state),
        settings={
            "ghost_event_interval": s.ghost_event_interval,
            "killer_advantage_interval": s.killer_advantage_interval,
            "killer_advantage_enabled": s.killer_advantage_enabled,
            "companion_lock_duration": s.companion_lock_duration,
            "sanctuary_room_count": s.sanctuary_room_count,
            "killer_clue_visibility": s.killer_clue_visibility,
        },
        killer_advantage_round=state.is_killer_advantage_round(),
        companion_locks={
            pin: until for pin, until in state.companions.locked_until.items() if until >= round_index
        },
        ghost_votes={event.value: count for event, count in pending_tally(state).items()},
        last_ghost_event=state.ghosts.last_event.value if state.ghosts.last_event else None,
        last_ghost_event_round=state.ghosts.last_event_round,
        clue_total=len(state.clues.fragments),
        clues_unclaimed=unclaimed_count(state),
    )

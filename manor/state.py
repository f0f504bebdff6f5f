"""Game state types for Manor of Whispers."""

from dataclasses import dataclass, field
from typing import Optional

from manor.ledger import TurnLedger
from manor.rooms import START_ROOM
from manor.rules import FIRST_ROUND, GhostEvent, Role


@dataclass(frozen=True)
class Clue:
    """A fragment a Victim has picked up, remembered with the room it came from."""

    room: str
    text: str


@dataclass
class Player:
    """A registered player."""

    id: int
    pin: str
    name: str
    role: Role = Role.UNKNOWN
    alive: bool = True
    room: str = START_ROOM
    clues: list[Clue] = field(default_factory=list)


@dataclass
class EffectLatch:
    """Two-stage latch: GM toggles ``armed``; advance_round promotes it to ``active``."""

    active: bool = False
    armed: bool = False

    def promote(self) -> bool:
        """Move armed into active and clear armed. Returns the new active value."""
        self.active = self.armed
        self.armed = False
        return self.active


@dataclass
class RoundEffects:
    """Per-round rule modifiers."""

    reveal_dots: EffectLatch = field(default_factory=EffectLatch)
    killer_gaze: EffectLatch = field(default_factory=EffectLatch)
    scream: EffectLatch = field(default_factory=EffectLatch)
    dead_intervene: EffectLatch = field(default_factory=EffectLatch)
    sanctuary: EffectLatch = field(default_factory=EffectLatch)
    shove: EffectLatch = field(default_factory=EffectLatch)
    sanctuary_rooms: list[str] = field(default_factory=list)
    last_shove_round: Optional[int] = None

    def latches(self) -> dict[str, EffectLatch]:
        return {
            "reveal_dots": self.reveal_dots,
            "killer_gaze": self.killer_gaze,
            "scream": self.scream,
            "dead_intervene": self.dead_intervene,
            "sanctuary": self.sanctuary,
            "shove": self.shove,
        }


@dataclass
class ClueSupply:
    """Fragments from the last generated sentence and where the unclaimed ones sit."""

    sentence: str = ""
    fragments: list[str] = field(default_factory=list)
    per_room: dict[str, list[Optional[str]]] = field(default_factory=dict)
    # round in which the movement-barrier distribution last ran
    distributed_round: Optional[int] = None


@dataclass
class CompanionLocks:
    locked_until: dict[str, int] = field(default_factory=dict)
    last_partners: dict[str, set[str]] = field(default_factory=dict)


@dataclass
class GhostArbiterState:
    checkpoint: int = 0
    last_event: Optional[GhostEvent] = None
    last_event_round: Optional[int] = None


@dataclass
class GameSettings:
    """GM-adjustable settings; initialised from EngineConfig on every new game."""

    ghost_event_interval: int
    killer_advantage_interval: int
    killer_advantage_enabled: bool
    companion_lock_duration: int
    sanctuary_room_count: int
    killer_clue_visibility: bool = True


@dataclass
class GameState:
    """Full game state."""

    settings: GameSettings
    round_index: int = FIRST_ROUND
    players: list[Player] = field(default_factory=list)
    next_player_id: int = 1
    ledger: TurnLedger = field(default_factory=TurnLedger)
    clues: ClueSupply = field(default_factory=ClueSupply)
    effects: RoundEffects = field(default_factory=RoundEffects)
    companions: CompanionLocks = field(default_factory=CompanionLocks)
    ghosts: GhostArbiterState = field(default_factory=GhostArbiterState)

    def get_alive_players(self) -> list[Player]:
        """Return list of alive players."""
        return [p for p in self.players if p.alive]

    def get_player(self, player_id: int) -> Optional[Player]:
        """Return player by id or None."""
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def get_player_by_pin(self, pin: str) -> Optional[Player]:
        """Return player by join code or None."""
        pin = str(pin).strip()
        for p in self.players:
            if p.pin == pin:
                return p
        return None

    def living_in(self, room: str) -> list[Player]:
        return [p for p in self.players if p.alive and p.room == room]

    def is_killer_advantage_round(self) -> bool:
        s = self.settings
        return s.killer_advantage_enabled and self.round_index % s.killer_advantage_interval == 0

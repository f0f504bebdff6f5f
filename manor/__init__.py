"""Round engine for Manor of Whispers."""

from manor.config import EngineConfig
from manor.engine import MoveOutcome, RoundEngine, RoundReport, check_kill, check_move, check_vote
from manor.errors import (
    GameError,
    NotFoundError,
    PermissionDeniedError,
    StateConflictError,
    TimingError,
    Unauthorized,
    ValidationError,
)
from manor.rules import GhostEvent, KillReason, Role
from manor.state import Clue, GameState, Player

__all__ = [
    "EngineConfig",
    "RoundEngine",
    "RoundReport",
    "MoveOutcome",
    "check_kill",
    "check_move",
    "check_vote",
    "GameError",
    "NotFoundError",
    "PermissionDeniedError",
    "StateConflictError",
    "TimingError",
    "Unauthorized",
    "ValidationError",
    "GhostEvent",
    "KillReason",
    "Role",
    "Clue",
    "GameState",
    "Player",
]

"""Game rules and constants for Manor of Whispers."""

from enum import Enum


class Role(str, Enum):
    """Player roles in the game."""

    UNKNOWN = "Unknown"
    VICTIM = "Victim"
    KILLER = "Killer"


class GhostEvent(str, Enum):
    """Events the dead can vote for. Declaration order is the tie-break order."""

    REVEAL = "reveal"
    GAZE = "gaze"
    SCREAM = "scream"
    SHOVE = "shove"
    INTERVENE = "intervene"
    SANCTUARY = "sanctuary"


class KillReason(str, Enum):
    """Why a player died."""

    DIRECT = "direct"
    VOTE_EXECUTION = "vote_execution"


# Round counter starts here on a fresh game
FIRST_ROUND = 1

# Registration is refused once the round counter reaches this value
REGISTRATION_CLOSES_AT_ROUND = 2

# Clue slots dealt to each room
SLOTS_PER_ROOM = 2

# Join codes are two-digit numbers in this inclusive range
PIN_MIN = 10
PIN_MAX = 99

# Moves allowed per round (the Killer gets the advantage quota on advantage rounds)
MOVE_QUOTA = 1
KILLER_ADVANTAGE_MOVE_QUOTA = 2

# Defaults for the configurable intervals
DEFAULT_GHOST_EVENT_INTERVAL = 3
DEFAULT_KILLER_ADVANTAGE_INTERVAL = 3
DEFAULT_COMPANION_LOCK_DURATION = 1
DEFAULT_SANCTUARY_ROOM_COUNT = 2

DEFAULT_GM_SECRET = "1313"

"""Room graph: the fixed rooms of the manor and how they connect."""

ROOMS = (
    "WHISPERING HALL",
    "THE FLICKERING LAMP STUDY",
    "THE SILENT BEDROOM",
    "PARLOR OF ECHOES",
    "THE BLOOD-STAINED KITCHEN",
    "THE UNDERHOUSE",
    "FORGOTTEN CELLAR",
    "THE IRON CHAMBER",
)

START_ROOM = "WHISPERING HALL"

# Adjacency is listed per room and is not required to be symmetric.
ROOM_CONNECTIONS: dict[str, tuple[str, ...]] = {
    "WHISPERING HALL": (
        "THE FLICKERING LAMP STUDY",
        "THE SILENT BEDROOM",
        "PARLOR OF ECHOES",
        "THE BLOOD-STAINED KITCHEN",
        "THE UNDERHOUSE",
    ),
    "THE FLICKERING LAMP STUDY": (
        "WHISPERING HALL",
        "THE SILENT BEDROOM",
    ),
    "THE SILENT BEDROOM": (
        "WHISPERING HALL",
        "THE FLICKERING LAMP STUDY",
        "PARLOR OF ECHOES",
    ),
    "PARLOR OF ECHOES": (
        "WHISPERING HALL",
        "THE SILENT BEDROOM",
        "THE BLOOD-STAINED KITCHEN",
    ),
    "THE BLOOD-STAINED KITCHEN": (
        "WHISPERING HALL",
        "PARLOR OF ECHOES",
    ),
    "THE UNDERHOUSE": (
        "WHISPERING HALL",
        "FORGOTTEN CELLAR",
        "THE IRON CHAMBER",
    ),
    "FORGOTTEN CELLAR": (
        "THE UNDERHOUSE",
        "THE IRON CHAMBER",
    ),
    "THE IRON CHAMBER": (
        "THE UNDERHOUSE",
        "FORGOTTEN CELLAR",
    ),
}

ROOM_DESCRIPTIONS: dict[str, str] = {
    "FORGOTTEN CELLAR": (
        "Moist air, dripping pipes, and footprints that don't match anyone still alive. "
        "Something down here moves, but never waits to be seen."
    ),
    "THE UNDERHOUSE": (
        "The house breathes down here. Wooden beams groan like they're holding in secrets, or bodies. "
        "It feels wrong to speak, in case something hears you."
    ),
    "THE IRON CHAMBER": (
        "Cold metal. No windows. Your voice sounds swallowed. Chains hang loosely, swinging slightly, "
        "though there's no draft. Were they just used?"
    ),
    "THE BLOOD-STAINED KITCHEN": (
        "No smell of food. Just iron. The stains are old, but still wet in places, "
        "as if someone keeps adding to them."
    ),
    "THE FLICKERING LAMP STUDY": (
        "The lamp flickers, though the air is still. Papers rustle, pages turn, "
        "without wind and without anyone touching them."
    ),
    "PARLOR OF ECHOES": (
        "You hear footsteps, but they're perfectly delayed, like a second version of you is walking "
        "just behind, where you never dare to look."
    ),
    "WHISPERING HALL": (
        "The whispers aren't from ghosts. They're gossiping about the last kill. They repeat a single "
        "name, over and over, until you realize it's yours."
    ),
    "THE SILENT BEDROOM": (
        "The pillow still holds the shape of a head, and a dark stain where it stopped breathing. "
        "The room is silent because what happened here was loud."
    ),
}

UNKNOWN_ROOM_DESCRIPTION = "Something about this room feels wrong, like you arrived a moment too late."


def is_room(name: str) -> bool:
    """True if name is one of the manor's rooms."""
    return name in ROOM_CONNECTIONS


def neighbors(room: str) -> tuple[str, ...]:
    """Rooms reachable in one move from room; empty for an unknown room."""
    return ROOM_CONNECTIONS.get(room, ())


def is_adjacent(from_room: str, to_room: str) -> bool:
    return to_room in neighbors(from_room)


def describe(room: str) -> str:
    return ROOM_DESCRIPTIONS.get(room, UNKNOWN_ROOM_DESCRIPTION)

"""Engine configuration read from the environment."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from manor.rules import (
    DEFAULT_COMPANION_LOCK_DURATION,
    DEFAULT_GHOST_EVENT_INTERVAL,
    DEFAULT_GM_SECRET,
    DEFAULT_KILLER_ADVANTAGE_INTERVAL,
    DEFAULT_SANCTUARY_ROOM_COUNT,
)

logger = logging.getLogger(__name__)

# Env var names
ENV_GHOST_EVENT_INTERVAL = "MANOR_GHOST_EVENT_INTERVAL"
ENV_KILLER_ADVANTAGE_INTERVAL = "MANOR_KILLER_ADVANTAGE_INTERVAL"
ENV_KILLER_ADVANTAGE = "MANOR_KILLER_ADVANTAGE"
ENV_COMPANION_LOCK_DURATION = "MANOR_COMPANION_LOCK_DURATION"
ENV_SANCTUARY_ROOMS = "MANOR_SANCTUARY_ROOMS"
ENV_SEED = "MANOR_SEED"
ENV_GM_SECRET = "MANOR_GM_SECRET"

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class EngineConfig:
    """Defaults a fresh game starts from. GM settings override some of these per game."""

    ghost_event_interval: int = DEFAULT_GHOST_EVENT_INTERVAL
    killer_advantage_interval: int = DEFAULT_KILLER_ADVANTAGE_INTERVAL
    killer_advantage_enabled: bool = False
    companion_lock_duration: int = DEFAULT_COMPANION_LOCK_DURATION
    sanctuary_room_count: int = DEFAULT_SANCTUARY_ROOM_COUNT
    seed: Optional[int] = None
    gm_secret: str = DEFAULT_GM_SECRET

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config from MANOR_* env vars; malformed values fall back to defaults."""
        defaults = cls()
        return cls(
            ghost_event_interval=_env_int(ENV_GHOST_EVENT_INTERVAL, defaults.ghost_event_interval, minimum=1),
            killer_advantage_interval=_env_int(
                ENV_KILLER_ADVANTAGE_INTERVAL, defaults.killer_advantage_interval, minimum=1
            ),
            killer_advantage_enabled=os.environ.get(ENV_KILLER_ADVANTAGE, "").strip().lower() in _TRUTHY,
            companion_lock_duration=_env_int(
                ENV_COMPANION_LOCK_DURATION, defaults.companion_lock_duration, minimum=0
            ),
            sanctuary_room_count=_env_int(ENV_SANCTUARY_ROOMS, defaults.sanctuary_room_count, minimum=1),
            seed=_env_int(ENV_SEED, None),
            gm_secret=os.environ.get(ENV_GM_SECRET) or defaults.gm_secret,
        )


def _env_int(name: str, default: Optional[int], minimum: Optional[int] = None) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer; using %s", name, raw, default)
        return default
    if minimum is not None and value < minimum:
        logger.warning("Ignoring %s=%d: must be >= %d; using %s", name, value, minimum, default)
        return default
    return value

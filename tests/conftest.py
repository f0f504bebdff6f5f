"""Shared fixtures."""

import random

import pytest

from manor.config import EngineConfig
from manor.engine import RoundEngine
from manor.state import GameSettings, GameState


@pytest.fixture
def state() -> GameState:
    return GameState(
        settings=GameSettings(
            ghost_event_interval=3,
            killer_advantage_interval=3,
            killer_advantage_enabled=False,
            companion_lock_duration=1,
            sanctuary_room_count=2,
        )
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def engine() -> RoundEngine:
    return RoundEngine(EngineConfig(), rng=random.Random(42))

"""Tests for environment-driven engine configuration."""

from manor.config import (
    ENV_COMPANION_LOCK_DURATION,
    ENV_GHOST_EVENT_INTERVAL,
    ENV_GM_SECRET,
    ENV_KILLER_ADVANTAGE,
    ENV_KILLER_ADVANTAGE_INTERVAL,
    ENV_SANCTUARY_ROOMS,
    ENV_SEED,
    EngineConfig,
)
from manor.engine import RoundEngine

ALL_VARS = (
    ENV_COMPANION_LOCK_DURATION,
    ENV_GHOST_EVENT_INTERVAL,
    ENV_GM_SECRET,
    ENV_KILLER_ADVANTAGE,
    ENV_KILLER_ADVANTAGE_INTERVAL,
    ENV_SANCTUARY_ROOMS,
    ENV_SEED,
)


def _clear(monkeypatch):
    for name in ALL_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_env(monkeypatch):
    _clear(monkeypatch)
    assert EngineConfig.from_env() == EngineConfig()
    config = EngineConfig()
    assert config.ghost_event_interval == 3
    assert config.killer_advantage_interval == 3
    assert config.killer_advantage_enabled is False
    assert config.gm_secret == "1313"


def test_reads_env(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv(ENV_GHOST_EVENT_INTERVAL, "5")
    monkeypatch.setenv(ENV_KILLER_ADVANTAGE_INTERVAL, "4")
    monkeypatch.setenv(ENV_KILLER_ADVANTAGE, "yes")
    monkeypatch.setenv(ENV_COMPANION_LOCK_DURATION, "0")
    monkeypatch.setenv(ENV_SANCTUARY_ROOMS, "3")
    monkeypatch.setenv(ENV_SEED, "99")
    monkeypatch.setenv(ENV_GM_SECRET, "7777")

    config = EngineConfig.from_env()

    assert config.ghost_event_interval == 5
    assert config.killer_advantage_interval == 4
    assert config.killer_advantage_enabled is True
    assert config.companion_lock_duration == 0
    assert config.sanctuary_room_count == 3
    assert config.seed == 99
    assert config.gm_secret == "7777"


def test_malformed_values_fall_back(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv(ENV_GHOST_EVENT_INTERVAL, "often")
    monkeypatch.setenv(ENV_KILLER_ADVANTAGE_INTERVAL, "0")
    monkeypatch.setenv(ENV_COMPANION_LOCK_DURATION, "-2")
    monkeypatch.setenv(ENV_KILLER_ADVANTAGE, "maybe")

    config = EngineConfig.from_env()

    assert config.ghost_event_interval == 3
    assert config.killer_advantage_interval == 3
    assert config.companion_lock_duration == 1
    assert config.killer_advantage_enabled is False


def test_seed_makes_pins_repeatable():
    names = ["A", "B", "C", "D"]
    first = RoundEngine(EngineConfig(seed=7))
    second = RoundEngine(EngineConfig(seed=7))
    assert [first.register(n).pin for n in names] == [second.register(n).pin for n in names]

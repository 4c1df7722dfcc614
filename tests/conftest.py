"""Shared fixtures: in-memory collaborators, seeded randomness, temp configs."""
from __future__ import annotations

import random
from pathlib import Path

import pytest

from colored_names.config.palette import ChatColor
from colored_names.config.settings import reset_settings
from colored_names.config.store import ConfigStore
from colored_names.service.color_engine import ColorEngine
from colored_names.service.presence import InMemoryPresence
from tests.helpers import RecordingScoreboard, write_config


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    for key in ("CPN_CONFIG_PATH", "CPN_TEAM_PREFIX", "CPN_RANDOM_SEED", "VERBOSE_LOGGING"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def presence() -> InMemoryPresence:
    return InMemoryPresence()


@pytest.fixture
def scoreboard() -> RecordingScoreboard:
    return RecordingScoreboard()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return write_config(tmp_path / "config.yml", [ChatColor.RED, ChatColor.BLUE])


@pytest.fixture
def engine(presence, scoreboard, config_path, rng) -> ColorEngine:
    return ColorEngine(
        presence=presence,
        store=ConfigStore(config_path),
        scoreboard=scoreboard,
        rng=rng,
    )

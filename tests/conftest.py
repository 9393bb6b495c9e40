"""Pytest configuration and shared fixtures.

This module provides common fixtures for all tests in the Hearth Watcher
test suite: a controllable clock, a small card table, and a builder for
client log lines.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from hearth_watcher.data.cards import CardDatabase
from hearth_watcher.ingestion.pipeline import ParserPipeline
from hearth_watcher.models.enums import Position
from hearth_watcher.models.game_state import GameState


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from hearth_watcher.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "HEARTH_WATCHER_LOG_FILE": "/tmp/hearth/Player.log",
        "HEARTH_WATCHER_LINES_PER_UPDATE": "50",
        "HEARTH_WATCHER_UPDATE_EVERY_TURN": "true",
        "HEARTH_WATCHER_LOG_LEVEL": "debug",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Clock
# =============================================================================


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Provide a clock starting at t=1000s."""
    return FakeClock()


# =============================================================================
# Card Data
# =============================================================================


SAMPLE_CARDS = [
    {"id": "CS2_029", "dbfId": 315, "name": "Fireball"},
    {"id": "CS2_182", "dbfId": 1688, "name": "Chillwind Yeti"},
    {"id": "CS2_200", "dbfId": 1686, "name": "Boulderfist Ogre"},
    {"id": "EX1_066", "dbfId": 906, "name": "Acidic Swamp Ooze"},
    {"id": "EX1_130", "dbfId": 1004, "name": "Noble Sacrifice"},
    {"id": "UNG_028", "dbfId": 41168, "name": "Open the Waygate"},
    {"id": "DS1_184", "dbfId": 141, "name": "Tracking"},
    {"id": "HERO_08", "dbfId": 637, "name": "Jaina Proudmoore"},
]


@pytest.fixture
def cards() -> CardDatabase:
    """Provide a small card table."""
    return CardDatabase.from_records(SAMPLE_CARDS)


@pytest.fixture
def game_state(clock: FakeClock) -> GameState:
    """Provide an empty game state driven by the fake clock."""
    return GameState(clock=clock)


@pytest.fixture
def pipeline(cards: CardDatabase) -> ParserPipeline:
    """Provide a pipeline with the built-in recognizers."""
    return ParserPipeline(cards)


# =============================================================================
# Log Lines
# =============================================================================


class LogLines:
    """Builds client log lines in the format the game writes them."""

    PREFIX = "D 18:04:12.3456789 "

    def _line(self, label: str, content: str, indent: int) -> str:
        return f"{self.PREFIX}{label} -{' ' * indent}{content}"

    def game_state(self, content: str, indent: int = 1) -> str:
        return self._line("[Power] GameState.DebugPrintPower()", content, indent)

    def print_game(self, content: str, indent: int = 1) -> str:
        return self._line("[Power] GameState.DebugPrintGame()", content, indent)

    def task_list(self, content: str, indent: int = 4) -> str:
        return self._line("[Power] PowerTaskList.DebugPrintPower()", content, indent)

    def choices(self, content: str, indent: int = 1) -> str:
        return self._line("[Power] GameState.DebugPrintEntityChoices()", content, indent)

    def chosen(self, content: str, indent: int = 1) -> str:
        return self._line("[Power] GameState.DebugPrintEntitiesChosen()", content, indent)

    def loading(self, content: str) -> str:
        return self._line("[LoadingScreen] MulliganManager.HandleGameStart()", content, 1)

    @staticmethod
    def card(
        name: str,
        entity_id: int,
        card_code: str,
        player_id: int,
        zone: str = "PLAY",
        zone_pos: int = 0,
    ) -> str:
        return (
            f"[entityName={name} id={entity_id} zone={zone} zonePos={zone_pos} "
            f"cardId={card_code} player={player_id}]"
        )

    def zone_change(
        self,
        name: str,
        entity_id: int,
        card_code: str,
        player_id: int,
        source: str,
        destination: str,
    ) -> str:
        zone = destination.split(" ")[-1] if destination else ""
        ref = self.card(name, entity_id, card_code, player_id, zone=zone)
        return self._line(
            "[Zone] ZoneChangeList.ProcessChanges()",
            f"id=1 local=False {ref} zone from {source} -> {destination}",
            1,
        )

    def create_game(self) -> list[str]:
        return [self.game_state("CREATE_GAME")]

    def players(self, first: str = "Alice#1111", second: str = "Bob#2222") -> list[str]:
        return [
            self.print_game(f"PlayerID=1, PlayerName={first}"),
            self.print_game(f"PlayerID=2, PlayerName={second}"),
        ]

    def current_player(self, name: str, value: int = 1) -> str:
        return self.game_state(f"TAG_CHANGE Entity={name} tag=CURRENT_PLAYER value={value}", indent=4)

    def game_tag(self, entity: str, tag: str, value: str) -> str:
        return self.task_list(f"TAG_CHANGE Entity={entity} tag={tag} value={value}")

    def play_state(self, name: str, status: str) -> str:
        return self.game_tag(name, "PLAYSTATE", status)


@pytest.fixture
def log() -> LogLines:
    """Provide the log line builder."""
    return LogLines()


@pytest.fixture
def started_state(
    game_state: GameState,
    pipeline: ParserPipeline,
    log: LogLines,
) -> GameState:
    """A game state with a started match and both players joined.

    Alice (id 1) sits at the bottom, Bob (id 2) at the top.
    """
    pipeline.process_lines([*log.create_game(), *log.players()], game_state)
    game_state.players[1].position = Position.TOP
    return game_state

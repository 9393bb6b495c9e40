"""Hearth Watcher - live game state from the Hearthstone client log.

The client appends debug lines to a log file as a match progresses.
The watcher tails that file, runs every new line through an ordered set
of recognizers, and keeps a GameState describing the running match:
players, turns, mulligan, deck and hand bookkeeping, secrets, quests,
discover choices and a log of attacks, plays and secret triggers.

Example:
    >>> from pathlib import Path
    >>> from hearth_watcher import LogWatcher, WatcherEvent, WatcherSettings
    >>>
    >>> watcher = LogWatcher(WatcherSettings(log_file=Path("Player.log")))
    >>> watcher.subscribe(WatcherEvent.STATE_CHANGED, lambda state: print(state.num_players))
    >>> watcher.start()

Modules:
    core: Configuration, logging, and base exceptions.
    models: Game state, players, cards, entities and the match log.
    data: Card table and static game metadata.
    ingestion: Line and block recognizers, entity resolution.
    engine: File tailing, change notification and the watcher facade.
"""

from __future__ import annotations

# Core
from hearth_watcher.core.config import WatcherSettings, get_settings
from hearth_watcher.core.exceptions import HearthWatcherError, StartupError
from hearth_watcher.core.logging import configure_logging, get_logger

# Card data
from hearth_watcher.data.cards import CardDatabase, CardRecord

# Engine
from hearth_watcher.engine.notifier import ChangeNotifier, WatcherEvent
from hearth_watcher.engine.watcher import LogWatcher

# Ingestion
from hearth_watcher.ingestion.pipeline import ParserPipeline

# Models
from hearth_watcher.models.game_state import GameState, Player
from hearth_watcher.models.match_log import MatchLogEntry


__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core
    "WatcherSettings",
    "get_settings",
    "HearthWatcherError",
    "StartupError",
    "configure_logging",
    "get_logger",
    # Card data
    "CardDatabase",
    "CardRecord",
    # Engine
    "ChangeNotifier",
    "WatcherEvent",
    "LogWatcher",
    # Ingestion
    "ParserPipeline",
    # Models
    "GameState",
    "Player",
    "MatchLogEntry",
]

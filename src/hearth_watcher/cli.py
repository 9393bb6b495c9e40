"""Command-line entry point.

Usage:
    hearth-watcher follow [--log-file PATH] [--cards cards.json] ...
    hearth-watcher replay Player.log [--cards cards.json]
"""

from __future__ import annotations

import argparse
import json
import threading
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from hearth_watcher.core.config import WatcherSettings
from hearth_watcher.core.exceptions import HearthWatcherError
from hearth_watcher.core.logging import configure_logging, get_logger
from hearth_watcher.engine.notifier import WatcherEvent
from hearth_watcher.engine.watcher import LogWatcher
from hearth_watcher.models.game_state import GameState


logger = get_logger(__name__)


def summarize(state: GameState) -> dict[str, Any]:
    """Condense a game state into a JSON-friendly summary."""
    return {
        "start_time": state.start_time,
        "match_duration": state.match_duration,
        "complete": state.complete,
        "mulligan_active": state.mulligan_active,
        "players": [
            {
                "id": player.id,
                "name": player.name,
                "position": player.position.value,
                "status": player.status.value,
                "turn": player.turn,
                "turns_played": len(player.turn_history),
                "card_count": player.card_count,
                "cards_replaced_in_mulligan": player.cards_replaced_in_mulligan,
                "secrets": [secret.card_name for secret in player.secrets],
                "quests": [f"{quest.card_name} {quest.progress}/{quest.requirement}" for quest in player.quests],
            }
            for player in state.players
        ],
        "match_log_entries": len(state.match_log),
    }


def _settings_from_args(args: argparse.Namespace) -> WatcherSettings:
    overrides: dict[str, Any] = {}
    for field in ("log_file", "log_directory", "card_data_file", "lines_per_update", "log_level"):
        value = getattr(args, field, None)
        if value is not None:
            overrides[field] = value
    if getattr(args, "update_every_turn", False):
        overrides["update_every_turn"] = True
    if args.json_logs:
        overrides["json_logs"] = True
    return WatcherSettings(**overrides)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--cards", dest="card_data_file", type=Path, help="Path to cards.json")
    parser.add_argument("--log-level", default=None, help="Logging level")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")


def main(argv: list[str] | None = None, *, stop_event: threading.Event | None = None) -> int:
    parser = argparse.ArgumentParser(prog="hearth-watcher", description="Hearthstone log watcher")
    sub = parser.add_subparsers(dest="command", required=True)

    p_follow = sub.add_parser("follow", help="Follow the live client log")
    p_follow.add_argument("--log-file", type=Path, help="Client log file (platform default if omitted)")
    p_follow.add_argument("--log-directory", type=Path, help="Directory for per-match output logs")
    p_follow.add_argument("--lines-per-update", type=int, help="Lines per processing chunk")
    p_follow.add_argument("--update-every-turn", action="store_true", help="Publish at turn boundaries")
    _add_common_arguments(p_follow)

    p_replay = sub.add_parser("replay", help="Parse a saved log and print the final state")
    p_replay.add_argument("log_file", type=Path, help="Saved client log")
    _add_common_arguments(p_replay)

    args = parser.parse_args(argv)

    try:
        settings = _settings_from_args(args)
        configure_logging(level=settings.log_level, json_format=settings.json_logs)
        watcher = LogWatcher(settings)
    except (HearthWatcherError, ValidationError) as exc:
        logger.error("Cannot start watcher", error=str(exc))
        return 1

    if args.command == "replay":
        text = watcher.log_file.read_text(encoding="utf-8", errors="replace")
        state = watcher.parse_text(text)
        print(json.dumps(summarize(state), indent=2))
        return 0

    watcher.subscribe(
        WatcherEvent.STATE_CHANGED,
        lambda state: print(json.dumps(summarize(state))),
    )
    stop_event = stop_event or threading.Event()
    watcher.start()
    try:
        while not stop_event.wait(0.5):
            pass
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""The log watcher: tailer, parser pipeline and notifier wired together.

Typical use::

    watcher = LogWatcher(WatcherSettings(log_file=Path("Player.log")))
    watcher.subscribe(WatcherEvent.STATE_CHANGED, render)
    watcher.start()
    ...
    watcher.stop()

Lines are parsed on the tailer's worker thread. Subscribers run on that
thread too, after the batch that triggered them has been applied.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from hearth_watcher.core.config import WatcherSettings, get_settings
from hearth_watcher.core.exceptions import StartupError
from hearth_watcher.core.logging import get_logger
from hearth_watcher.data.cards import CardDatabase
from hearth_watcher.engine.notifier import ChangeNotifier, Subscriber, WatcherEvent
from hearth_watcher.engine.recorder import MatchRecorder
from hearth_watcher.engine.tailer import IncrementalTailer
from hearth_watcher.ingestion.pipeline import ParserPipeline
from hearth_watcher.models.game_state import GameState


if TYPE_CHECKING:
    from pathlib import Path


logger = get_logger(__name__)


class LogWatcher:
    """Follow the game client's log and keep a GameState current.

    Attributes:
        settings: Settings the watcher was constructed with.
        log_file: Resolved path of the tailed log.
        cards: Card table used by the recognizers.
        game_state: The live state (read-only for subscribers).
        notifier: Subscriber registry.
        recorder: Per-match output log writer, None when disabled.
    """

    def __init__(
        self,
        settings: WatcherSettings | None = None,
        *,
        cards: CardDatabase | None = None,
        notifier: ChangeNotifier | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the watcher and validate its paths.

        Args:
            settings: Watcher settings; loaded from the environment if None.
            cards: Card table; loaded from ``card_data_file`` if None.
            notifier: Subscriber registry to publish to.
            clock: Time source for the game state.

        Raises:
            UnsupportedPlatformError: If no log file is set and the
                platform has no default.
            StartupError: If the log file's directory does not exist.
            CardDataError: If the card data file cannot be loaded.
        """
        self.settings = settings or get_settings()
        self.log_file: Path = self.settings.resolved_log_file()

        logger.info("Log file path", path=str(self.log_file))
        if not self.log_file.parent.is_dir():
            raise StartupError("Log file path does not exist", path=str(self.log_file.parent))

        self.recorder: MatchRecorder | None = None
        if self.settings.log_directory is not None:
            logger.info("Output log directory", path=str(self.settings.log_directory))
            self.settings.log_directory.mkdir(parents=True, exist_ok=True)
            self.recorder = MatchRecorder(self.settings.log_directory, self.log_file.suffix)

        if cards is None:
            if self.settings.card_data_file is not None:
                cards = CardDatabase.from_json(self.settings.card_data_file)
            else:
                logger.warning("No card data configured, card tracking disabled")
                cards = CardDatabase()
        self.cards = cards

        self.game_state = GameState(clock=clock)
        self.notifier = notifier or ChangeNotifier()
        self.pipeline = ParserPipeline(self.cards)
        self._parse_lock = threading.RLock()
        self._tailer = IncrementalTailer(
            self.log_file,
            self.parse_lines,
            debounce_seconds=self.settings.debounce_seconds,
            poll_interval=self.settings.poll_interval,
            lines_per_update=self.settings.lines_per_update,
        )

    @property
    def tailer(self) -> IncrementalTailer:
        return self._tailer

    @property
    def running(self) -> bool:
        return self._tailer.running

    def subscribe(self, event: WatcherEvent, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function removing it."""
        return self.notifier.subscribe(event, callback)

    def start(self) -> None:
        """Reset the state and start following the log."""
        with self._parse_lock:
            self.game_state.reset()
            self.pipeline.reset()
        self._tailer.start()
        logger.info("Log watcher started")

    def stop(self) -> None:
        """Stop following the log. The next start re-reads it from the top."""
        self._tailer.stop()
        if self.recorder is not None:
            self.recorder.close()
        logger.info("Log watcher stopped")

    def parse_lines(self, lines: Iterable[str]) -> GameState:
        """Apply lines in order and publish the resulting changes.

        ``STATE_CHANGED`` is published once after the batch when any line
        changed the state. With ``update_every_turn`` it is also published
        mid-batch as soon as a new main phase starts. ``TURN_CHANGED`` is
        published whenever the player holding the turn changes.

        Returns:
            The live game state.
        """
        with self._parse_lock:
            state = self.game_state
            updated = False
            last_turn_start = state.turn_start_time
            last_owner = self._turn_owner()

            for line in lines:
                updated = self.pipeline.process_line(line, state) or updated

                owner = self._turn_owner()
                if owner != last_owner:
                    last_owner = owner
                    if owner is not None:
                        self.notifier.publish(WatcherEvent.TURN_CHANGED, state)

                if (
                    updated
                    and self.settings.update_every_turn
                    and state.turn_start_time != last_turn_start
                ):
                    last_turn_start = state.turn_start_time
                    self.notifier.publish(WatcherEvent.STATE_CHANGED, state)
                    updated = False

                if self.recorder is not None:
                    self.recorder.record(line, state)

            if updated:
                self.notifier.publish(WatcherEvent.STATE_CHANGED, state)
            return state

    def parse_text(self, text: str) -> GameState:
        """Split a chunk of log text into lines and apply them."""
        return self.parse_lines(text.splitlines())

    def _turn_owner(self) -> int | None:
        current = self.game_state.get_current_player()
        return current.id if current else None


__all__ = ["LogWatcher"]

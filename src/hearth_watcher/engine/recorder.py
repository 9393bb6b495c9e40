"""Per-match output logs.

While a match is running, every consumed line is copied to a file named
after the match: ``<start_ms>_<player1>_vs_<player2><ext>``. The name is
only known once both players have joined, so earlier lines are buffered
and flushed when the file is opened. The file is closed when the match
completes.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from hearth_watcher.core.logging import get_logger


if TYPE_CHECKING:
    from hearth_watcher.models.game_state import GameState

logger = get_logger(__name__)

_RESERVED_CHARACTERS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
MAX_FILENAME_LENGTH = 255


def sanitize_filename(name: str, replacement: str = "!") -> str:
    """Replace characters that are not allowed in file names."""
    cleaned = _RESERVED_CHARACTERS.sub(replacement, name).strip(" .")
    if cleaned in ("", ".", ".."):
        cleaned = replacement
    return cleaned[:MAX_FILENAME_LENGTH]


class MatchRecorder:
    """Copy the lines of each match to its own file.

    Attributes:
        log_directory: Directory receiving the per-match files.
        suffix: Extension of the files (that of the tailed log).
        current_path: Path of the file being written, if any.
        written_paths: Every file opened so far, in order.
    """

    def __init__(self, log_directory: Path, suffix: str = ".log") -> None:
        self.log_directory = Path(log_directory)
        self.suffix = suffix
        self.current_path: Path | None = None
        self.written_paths: list[Path] = []
        self._stream: TextIO | None = None
        self._queued: list[str] = []
        self._match_start: float | None = None
        self._failed = False

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    @property
    def queued_lines(self) -> list[str]:
        return list(self._queued)

    def filename_for(self, game_state: GameState) -> str:
        players = game_state.get_all_players()
        first = players[0].name if players else "unknown"
        second = players[1].name if len(players) > 1 else "unknown"
        start_ms = int((game_state.start_time or 0) * 1000)
        return sanitize_filename(f"{start_ms}_{first}_vs_{second}{self.suffix}")

    def record(self, line: str, game_state: GameState) -> None:
        """Copy one consumed line, given the state after the line was parsed.

        Write failures are logged and stop recording of the current
        match; they never reach the caller.
        """
        if not game_state.active and not game_state.complete:
            return

        if game_state.start_time != self._match_start:
            # A new match started before the previous file was closed.
            self.close()
            self._queued = []
            self._match_start = game_state.start_time
            self._failed = False

        if self._failed:
            return

        try:
            if self._stream is None and game_state.active and game_state.num_players == 2:
                self._open(game_state)

            if self._stream is not None:
                self._stream.write(line + "\n")
            elif game_state.active:
                self._queued.append(line + "\n")

            if game_state.complete and self._stream is not None:
                self.close()
        except OSError as exc:
            logger.warning("Cannot write match log", path=str(self.current_path), error=str(exc))
            self._abandon()

    def close(self) -> None:
        if self._stream is None:
            return
        self._stream.close()
        logger.info("Match log closed", path=str(self.current_path))
        self._stream = None
        self.current_path = None

    def _abandon(self) -> None:
        stream, self._stream = self._stream, None
        self._failed = True
        self._queued = []
        self.current_path = None
        if stream is not None:
            try:
                stream.close()
            except OSError as exc:
                logger.warning("Cannot close match log", error=str(exc))

    def _open(self, game_state: GameState) -> None:
        self.log_directory.mkdir(parents=True, exist_ok=True)
        path = self.log_directory / self.filename_for(game_state)
        # Line buffered, so readers see each line as soon as it is consumed.
        self._stream = open(path, "w", encoding="utf-8", buffering=1)
        self.current_path = path
        self.written_paths.append(path)
        self._stream.write("".join(self._queued))
        self._queued = []
        logger.info("Match log opened", path=str(path))


__all__ = ["sanitize_filename", "MatchRecorder"]

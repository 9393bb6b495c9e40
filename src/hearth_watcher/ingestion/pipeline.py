"""The parser pipeline: runs every recognizer over every line, in order.

One pipeline owns the open-block slots of its block parsers, so two
pipelines (for example in tests) never interfere with each other.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from hearth_watcher.core.logging import get_logger
from hearth_watcher.ingestion.factory import BlockParser, BlockSlot, Recognizer
from hearth_watcher.ingestion.line_parsers import build_line_parsers


if TYPE_CHECKING:
    import structlog

    from hearth_watcher.data.cards import CardDatabase
    from hearth_watcher.models.game_state import GameState

logger = get_logger(__name__)


class ParserPipeline:
    """Ordered collection of recognizers applied to log lines.

    Example:
        >>> pipeline = ParserPipeline(CardDatabase())
        >>> changed = pipeline.process_line(line, game_state)
    """

    def __init__(
        self,
        cards: CardDatabase,
        *,
        parsers: Sequence[Recognizer] | None = None,
        parser_logger: structlog.BoundLogger | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            cards: Card table consulted by card-related recognizers.
            parsers: Recognizers to use instead of the built-in set.
            parser_logger: Base logger injected into every recognizer.
        """
        self.parsers: list[Recognizer] = list(parsers) if parsers is not None else build_line_parsers(cards)
        base_logger = parser_logger or get_logger("hearth_watcher.parsers")
        self._loggers = [base_logger.bind(parser=parser.name) for parser in self.parsers]
        self._slots: dict[int, BlockSlot[Any]] = {
            index: parser.new_slot()
            for index, parser in enumerate(self.parsers)
            if isinstance(parser, BlockParser)
        }
        logger.debug("ParserPipeline initialized", parsers=[p.name for p in self.parsers])

    def process_line(self, line: str, game_state: GameState) -> bool:
        """Offer one line to every recognizer.

        A recognizer that raises is logged and skipped; the line still
        reaches the remaining recognizers.

        Returns:
            True if any recognizer changed observable state.
        """
        changed = False
        for index, parser in enumerate(self.parsers):
            parser_logger = self._loggers[index]
            try:
                if isinstance(parser, BlockParser):
                    updated = parser.parse(line, game_state, self._slots[index], parser_logger)
                else:
                    updated = parser.parse(line, game_state, parser_logger)
            except Exception:
                parser_logger.exception("Parser failed on line", line=line[:200])
                continue
            changed = changed or updated
        return changed

    def process_lines(self, lines: Iterable[str], game_state: GameState) -> bool:
        """Offer lines in order. Returns True if any line changed state."""
        changed = False
        for line in lines:
            changed = self.process_line(line, game_state) or changed
        return changed

    def reset(self) -> None:
        """Close every open block."""
        for slot in self._slots.values():
            slot.close()


__all__ = ["ParserPipeline"]

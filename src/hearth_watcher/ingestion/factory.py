"""Line and block parser definitions.

Every line the client writes looks like::

    [Power] GameState.DebugPrintPower() -     TAG_CHANGE Entity=... tag=... value=...
    <------------- label -------------->  <-> indentation, then content

A parser is a plain record: a name, a label regex selecting the emitting
subsystem, a content regex, and a handler. Parsers are evaluated in the
order they are declared, every line against every parser.

Block parsers recognize multi-line records. The client marks nesting
only through the indentation column, so a block's body is the run of
same-label lines at the body indentation that follow a start line.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import structlog

from hearth_watcher.core.exceptions import ParserDefinitionError


if TYPE_CHECKING:
    from hearth_watcher.models.game_state import GameState


S = TypeVar("S")

Groups = Mapping[str, str]
LineHandler = Callable[[Groups, "GameState", structlog.BoundLogger], bool]
BlockInitializer = Callable[[Groups, "GameState", structlog.BoundLogger], S | None]
BlockLineHandler = Callable[[Groups, "GameState", S, structlog.BoundLogger], bool]


class Label:
    """Label regexes of the subsystems the watcher listens to."""

    POWER_GAME_STATE = r"\[Power\] GameState\.DebugPrintPower\(\)"
    POWER_GAME_STATE_OR_GAME = r"\[Power\] GameState\.DebugPrint(?:Power|Game)\(\)"
    POWER_ENTITIES_CHOSEN = r"\[Power\] GameState\.DebugPrintEntitiesChosen\(\)"
    POWER_ENTITY_CHOICES = r"\[Power\] GameState\.DebugPrintEntityChoices\(\)"
    POWER_TASK_LIST = r"\[Power\] PowerTaskList\.DebugPrintPower\(\)"
    ZONE_PROCESS_CHANGES = r"\[Zone\] ZoneChangeList\.ProcessChanges\(\)"
    LOADING_SCREEN_GAME_START = r"\[LoadingScreen\] MulliganManager\.HandleGameStart\(\)"


def make_full_regex(label: str, content: str, *, parser: str | None = None) -> re.Pattern[str]:
    """Compile ``<label> -<indentation><content>``.

    The indentation is captured as the ``indent`` group.

    Raises:
        ParserDefinitionError: If the expression does not compile.
    """
    try:
        return re.compile(rf"{label} -(?P<indent>\s+){content}")
    except re.error as exc:
        raise ParserDefinitionError(f"Invalid parser expression: {exc}", parser=parser) from exc


def _content_groups(match: re.Match[str]) -> dict[str, str]:
    groups = match.groupdict(default="")
    groups.pop("indent", None)
    return groups


@dataclass
class BlockSlot(Generic[S]):
    """The single open block of one block parser.

    Owned by the pipeline that evaluates the parser, so independent
    pipelines never share block state.

    Attributes:
        indent: Indentation width of the block's body lines.
        state: Accumulated block state, None when no block is open.
    """

    indent: int = 0
    state: S | None = None

    @property
    def is_open(self) -> bool:
        return self.state is not None

    def open(self, indent: int, state: S) -> None:
        self.indent = indent
        self.state = state

    def close(self) -> None:
        self.indent = 0
        self.state = None


@dataclass(frozen=True)
class LineParser:
    """A stateless single-line recognizer.

    Attributes:
        name: Human-readable name, bound to the parser's logger.
        label: Regex of the emitting subsystem.
        regex: Content regex; its named groups reach the handler.
        handler: ``(groups, game_state, logger) -> changed``.
    """

    name: str
    label: str
    regex: str
    handler: LineHandler
    pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "pattern", make_full_regex(self.label, self.regex, parser=self.name))

    def parse(self, line: str, game_state: GameState, logger: structlog.BoundLogger) -> bool:
        """Run the handler if the line matches.

        Returns:
            Whether the handler changed observable state.
        """
        match = self.pattern.search(line)
        if not match:
            return False
        return bool(self.handler(_content_groups(match), game_state, logger))


@dataclass(frozen=True)
class BlockParser(Generic[S]):
    """A recognizer for indentation-scoped multi-line records.

    A line matching ``start_regex`` discards any open block and asks
    ``initialize_block_state`` for a new state; None declines the block.
    While a block is open, each same-label line is classified by its
    indentation: equal to the body indentation forwards the line to
    ``line_handler`` when it matches ``line_regex``; shallower closes the
    block; deeper is nested content and is skipped.

    Attributes:
        name: Human-readable name, bound to the parser's logger.
        label: Regex of the emitting subsystem.
        start_regex: Content regex of the line opening a block.
        initialize_block_state: ``(groups, game_state, logger) -> state | None``.
        line_regex: Content regex of the body lines the handler wants.
        line_handler: ``(groups, game_state, block_state, logger) -> changed``.
        indent_offset: Body indentation relative to the start line.
        notify_on_start: Report a change when a block is opened.
    """

    name: str
    label: str
    start_regex: str
    initialize_block_state: BlockInitializer[S]
    line_regex: str
    line_handler: BlockLineHandler[S]
    indent_offset: int = 0
    notify_on_start: bool = False
    start_pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)
    body_pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)
    line_pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.indent_offset < 0:
            raise ParserDefinitionError("indent_offset must not be negative", parser=self.name)
        object.__setattr__(
            self, "start_pattern", make_full_regex(self.label, self.start_regex, parser=self.name)
        )
        object.__setattr__(
            self, "body_pattern", make_full_regex(self.label, r"(?P<content>.*)$", parser=self.name)
        )
        try:
            object.__setattr__(self, "line_pattern", re.compile(self.line_regex))
        except re.error as exc:
            raise ParserDefinitionError(f"Invalid line expression: {exc}", parser=self.name) from exc

    def new_slot(self) -> BlockSlot[S]:
        return BlockSlot()

    def parse(
        self,
        line: str,
        game_state: GameState,
        slot: BlockSlot[S],
        logger: structlog.BoundLogger,
    ) -> bool:
        """Feed one line to the block parser.

        Args:
            line: Raw log line.
            game_state: State to mutate.
            slot: This parser's open block, mutated in place.
            logger: Logger bound to this parser.

        Returns:
            Whether observable state changed.
        """
        start = self.start_pattern.search(line)
        if start:
            slot.close()
            block_state = self.initialize_block_state(_content_groups(start), game_state, logger)
            if block_state is None:
                return False
            slot.open(len(start["indent"]) + self.indent_offset, block_state)
            return self.notify_on_start

        if not slot.is_open:
            return False

        body = self.body_pattern.search(line)
        if not body:
            return False

        indent = len(body["indent"])
        if indent < slot.indent:
            slot.close()
            return False
        if indent > slot.indent:
            return False

        match = self.line_pattern.search(body["content"])
        if not match:
            return False
        return bool(self.line_handler(match.groupdict(default=""), game_state, slot.state, logger))


Recognizer = LineParser | BlockParser[Any]


__all__ = [
    "Label",
    "make_full_regex",
    "BlockSlot",
    "LineParser",
    "BlockParser",
    "Recognizer",
    "Groups",
    "LineHandler",
]

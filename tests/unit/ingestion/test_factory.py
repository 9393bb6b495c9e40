"""Tests for line and block parser records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pytest

from hearth_watcher.core.exceptions import ParserDefinitionError
from hearth_watcher.core.logging import get_logger
from hearth_watcher.ingestion.factory import BlockParser, Label, LineParser, make_full_regex
from hearth_watcher.models.game_state import GameState


if TYPE_CHECKING:
    from collections.abc import Mapping


logger = get_logger("tests.factory")

LABEL = "[Power] GameState.DebugPrintPower()"
OTHER_LABEL = "[Power] PowerTaskList.DebugPrintPower()"


def line(content: str, indent: int, label: str = LABEL) -> str:
    return f"{label} -{' ' * indent}{content}"


@dataclass
class Collected:
    name: str
    tags: list[tuple[str, str]] = field(default_factory=list)


def make_block_parser(indent_offset: int = 4, notify_on_start: bool = False) -> BlockParser[Collected]:
    def initialize(groups: Mapping[str, str], state: GameState, log: object) -> Collected | None:
        if groups["name"] == "declined":
            return None
        return Collected(name=groups["name"])

    def handle(groups: Mapping[str, str], state: GameState, block: Collected, log: object) -> bool:
        block.tags.append((groups["tag"], groups["value"]))
        return True

    return BlockParser(
        name="collector",
        label=Label.POWER_GAME_STATE,
        start_regex=r"FULL_ENTITY - Creating (?P<name>\w+)",
        initialize_block_state=initialize,
        line_regex=r"^tag=(?P<tag>\S+) value=(?P<value>\S*)",
        line_handler=handle,
        indent_offset=indent_offset,
        notify_on_start=notify_on_start,
    )


class TestMakeFullRegex:
    """Tests for make_full_regex."""

    def test_captures_indent(self) -> None:
        """Test the indentation is captured and content follows it."""
        pattern = make_full_regex(Label.POWER_GAME_STATE, r"CREATE_GAME")

        match = pattern.search("D 18:00:00.0 " + line("CREATE_GAME", 1))

        assert match is not None
        assert match["indent"] == " "

    def test_label_must_match(self) -> None:
        """Test content under another label is not matched."""
        pattern = make_full_regex(Label.POWER_GAME_STATE, r"CREATE_GAME")

        assert pattern.search(line("CREATE_GAME", 1, OTHER_LABEL)) is None

    def test_invalid_expression(self) -> None:
        """Test broken expressions fail at definition time."""
        with pytest.raises(ParserDefinitionError) as exc_info:
            make_full_regex(Label.POWER_GAME_STATE, r"(unclosed", parser="broken")

        assert exc_info.value.details["parser"] == "broken"


class TestLineParser:
    """Tests for LineParser."""

    def test_handler_receives_groups(self, game_state: GameState) -> None:
        """Test named groups reach the handler without the indent."""
        seen: list[dict[str, str]] = []

        def handler(groups: Mapping[str, str], state: GameState, log: object) -> bool:
            seen.append(dict(groups))
            return True

        parser = LineParser(
            name="player",
            label=Label.POWER_GAME_STATE,
            regex=r"PlayerID=(?P<id>\d+)(?:, PlayerName=(?P<name>.+))?",
            handler=handler,
        )

        assert parser.parse(line("PlayerID=3", 1), game_state, logger) is True
        assert seen == [{"id": "3", "name": ""}]

    def test_no_match(self, game_state: GameState) -> None:
        """Test unmatched lines never call the handler."""
        parser = LineParser(
            name="never",
            label=Label.POWER_GAME_STATE,
            regex=r"CREATE_GAME",
            handler=lambda groups, state, log: pytest.fail("handler called"),
        )

        assert parser.parse(line("TAG_CHANGE", 1), game_state, logger) is False


class TestBlockParser:
    """Tests for BlockParser indentation semantics."""

    def test_body_lines_at_block_indent(self, game_state: GameState) -> None:
        """Test body lines at the block indentation are forwarded."""
        parser = make_block_parser()
        slot = parser.new_slot()

        parser.parse(line("FULL_ENTITY - Creating alpha", 4), game_state, slot, logger)
        changed = parser.parse(line("tag=COST value=4", 8), game_state, slot, logger)

        assert changed is True
        assert slot.is_open
        assert slot.indent == 8
        assert slot.state is not None
        assert slot.state.tags == [("COST", "4")]

    def test_deeper_lines_are_skipped(self, game_state: GameState) -> None:
        """Test nested content does not reach the handler or close the block."""
        parser = make_block_parser()
        slot = parser.new_slot()
        parser.parse(line("FULL_ENTITY - Creating alpha", 4), game_state, slot, logger)

        assert parser.parse(line("tag=NESTED value=1", 12), game_state, slot, logger) is False
        parser.parse(line("tag=COST value=4", 8), game_state, slot, logger)

        assert slot.state is not None
        assert slot.state.tags == [("COST", "4")]

    def test_shallower_line_closes_block(self, game_state: GameState) -> None:
        """Test a line shallower than the body ends the block."""
        parser = make_block_parser()
        slot = parser.new_slot()
        parser.parse(line("FULL_ENTITY - Creating alpha", 4), game_state, slot, logger)

        parser.parse(line("BLOCK_END", 4), game_state, slot, logger)

        assert not slot.is_open
        assert parser.parse(line("tag=COST value=4", 8), game_state, slot, logger) is False

    def test_other_labels_are_ignored(self, game_state: GameState) -> None:
        """Test interleaved lines of other subsystems leave the block open."""
        parser = make_block_parser()
        slot = parser.new_slot()
        parser.parse(line("FULL_ENTITY - Creating alpha", 4), game_state, slot, logger)

        parser.parse(line("unrelated", 0, OTHER_LABEL), game_state, slot, logger)
        parser.parse(line("tag=COST value=4", 8), game_state, slot, logger)

        assert slot.state is not None
        assert slot.state.tags == [("COST", "4")]

    def test_new_start_replaces_open_block(self, game_state: GameState) -> None:
        """Test a start line discards the previous block."""
        parser = make_block_parser()
        slot = parser.new_slot()
        parser.parse(line("FULL_ENTITY - Creating alpha", 4), game_state, slot, logger)

        parser.parse(line("FULL_ENTITY - Creating beta", 4), game_state, slot, logger)

        assert slot.state is not None
        assert slot.state.name == "beta"

    def test_declined_block_leaves_nothing_open(self, game_state: GameState) -> None:
        """Test a declined start closes any open block."""
        parser = make_block_parser()
        slot = parser.new_slot()
        parser.parse(line("FULL_ENTITY - Creating alpha", 4), game_state, slot, logger)

        changed = parser.parse(line("FULL_ENTITY - Creating declined", 4), game_state, slot, logger)

        assert changed is False
        assert not slot.is_open

    def test_body_line_not_matching_is_dropped(self, game_state: GameState) -> None:
        """Test body lines outside the line expression are ignored."""
        parser = make_block_parser()
        slot = parser.new_slot()
        parser.parse(line("FULL_ENTITY - Creating alpha", 4), game_state, slot, logger)

        assert parser.parse(line("something else", 8), game_state, slot, logger) is False
        assert slot.is_open

    def test_notify_on_start(self, game_state: GameState) -> None:
        """Test opening a block can itself report a change."""
        quiet = make_block_parser()
        loud = make_block_parser(notify_on_start=True)
        start = line("FULL_ENTITY - Creating alpha", 4)

        assert quiet.parse(start, game_state, quiet.new_slot(), logger) is False
        assert loud.parse(start, game_state, loud.new_slot(), logger) is True

    def test_negative_offset_rejected(self) -> None:
        """Test the body cannot sit left of its start line."""
        with pytest.raises(ParserDefinitionError):
            make_block_parser(indent_offset=-1)

    def test_slots_are_independent(self, game_state: GameState) -> None:
        """Test two slots of one parser do not share block state."""
        parser = make_block_parser()
        first, second = parser.new_slot(), parser.new_slot()

        parser.parse(line("FULL_ENTITY - Creating alpha", 4), game_state, first, logger)

        assert first.is_open
        assert not second.is_open

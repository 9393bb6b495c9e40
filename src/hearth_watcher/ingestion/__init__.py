"""Ingestion: turning raw log lines into game state mutations.

Modules:
    factory: Line and block parser records.
    line_parsers: The ordered set of recognizers.
    pipeline: Applies recognizers to lines.
    entity_parser: Parsing of entity strings.
    entity_resolver: Name resolution and history backfill.
"""

from __future__ import annotations

from hearth_watcher.ingestion.entity_parser import (
    CardReference,
    parse_card_reference,
    parse_entity,
)
from hearth_watcher.ingestion.entity_resolver import merge_entity, resolve_entity
from hearth_watcher.ingestion.factory import (
    BlockParser,
    BlockSlot,
    Label,
    LineParser,
    make_full_regex,
)
from hearth_watcher.ingestion.line_parsers import build_line_parsers
from hearth_watcher.ingestion.pipeline import ParserPipeline


__all__ = [
    "CardReference",
    "parse_card_reference",
    "parse_entity",
    "merge_entity",
    "resolve_entity",
    "BlockParser",
    "BlockSlot",
    "Label",
    "LineParser",
    "make_full_regex",
    "build_line_parsers",
    "ParserPipeline",
]

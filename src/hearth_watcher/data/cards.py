"""Static card metadata lookup.

The client log refers to cards by a textual card id (``EX1_130``). The
watcher needs the numeric database id and display name, which come from
an external JSON table shaped like::

    [{"id": "EX1_130", "dbfId": 1004, "name": "Noble Sacrifice"}, ...]

A lookup miss is not an error: callers drop the fact that needed it.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from hearth_watcher.core.exceptions import CardDataError
from hearth_watcher.core.logging import get_logger


logger = get_logger(__name__)


class CardRecord(BaseModel):
    """One row of the card table."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(description="Textual card id")
    dbf_id: int = Field(alias="dbfId", description="Numeric database id")
    name: str = Field(default="", description="Display name")


_RECORDS = TypeAdapter(list[CardRecord])


class CardDatabase:
    """Card records keyed by textual card id.

    Example:
        >>> db = CardDatabase.from_json(Path("cards.json"))
        >>> db.get("EX1_130").dbf_id
        1004
    """

    def __init__(self, records: Iterable[CardRecord] = ()) -> None:
        self._cards: dict[str, CardRecord] = {record.id: record for record in records}

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._cards

    def get(self, card_id: str | None) -> CardRecord | None:
        """Look up a card, returning None on a miss."""
        if not card_id:
            return None
        return self._cards.get(card_id)

    @classmethod
    def from_records(cls, records: Iterable[dict[str, object]]) -> CardDatabase:
        """Build a database from raw JSON-like rows."""
        try:
            return cls(_RECORDS.validate_python(list(records)))
        except ValidationError as exc:
            raise CardDataError("Invalid card records", details={"errors": exc.error_count()}) from exc

    @classmethod
    def from_json(cls, path: Path) -> CardDatabase:
        """Load the card table from a JSON file.

        Raises:
            CardDataError: If the file is missing or malformed.
        """
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise CardDataError(f"Cannot read card data: {exc}", source_file=str(path)) from exc

        try:
            records = _RECORDS.validate_python(raw)
        except ValidationError as exc:
            raise CardDataError(
                "Card data does not match the expected schema",
                source_file=str(path),
                details={"errors": exc.error_count()},
            ) from exc

        logger.info("Card data loaded", source_file=str(path), cards=len(records))
        return cls(records)


__all__ = ["CardRecord", "CardDatabase"]

"""Parsing of entity strings embedded in log lines.

The client describes entities in three ways::

    [entityName=Fireball id=42 zone=HAND zonePos=3 cardId=CS2_029 player=1]
    GameEntity
    SomePlayer#1234
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from hearth_watcher.models.entities import (
    CardEntity,
    Entity,
    EntityFact,
    GameEntity,
    PlayerEntity,
)
from hearth_watcher.models.enums import Position


if TYPE_CHECKING:
    from hearth_watcher.data.cards import CardDatabase
    from hearth_watcher.models.game_state import GameState


CARD_REFERENCE_PATTERN = re.compile(
    r"\[entityName=(?P<cardName>.*?) id=(?P<entityId>\d+) zone=(?P<zone>\S*) "
    r"zonePos=(?P<zonePos>\d+) cardId=(?P<cardId>\S*) player=(?P<playerId>\d+)\]"
)

GAME_ENTITY = "GameEntity"


@dataclass(frozen=True)
class CardReference:
    """A bracketed card entity string, split into its fields."""

    entity_id: int
    card_name: str
    zone: str
    zone_pos: int
    card_code: str
    player_id: int

    def side(self, state: GameState) -> Position | None:
        """Side of the controlling player, if that player is registered."""
        player = state.get_player_by_id(self.player_id)
        return player.position if player else None

    def to_fact(
        self,
        state: GameState,
        cards: CardDatabase,
        tags: dict[str, str] | None = None,
    ) -> EntityFact:
        """Convert to a partial fact for the entity resolver."""
        record = cards.get(self.card_code)
        return EntityFact(
            entity_id=self.entity_id,
            card_id=record.dbf_id if record else None,
            card_name=self.card_name,
            player=self.side(state),
            tags=tags or {},
        )


def parse_card_reference(text: str) -> CardReference | None:
    """Parse a bracketed card entity string."""
    match = CARD_REFERENCE_PATTERN.search(text)
    if not match:
        return None
    return CardReference(
        entity_id=int(match["entityId"]),
        card_name=match["cardName"],
        zone=match["zone"],
        zone_pos=int(match["zonePos"]),
        card_code=match["cardId"],
        player_id=int(match["playerId"]),
    )


def parse_entity(text: str, state: GameState) -> Entity | None:
    """Parse any entity string.

    Card entities are returned as they appear on the line, merged with
    nothing; use the game state's entity map for accumulated facts.

    Returns:
        The entity, or None for an empty reference (``0`` or blank).
    """
    text = text.strip()
    if not text or text == "0":
        return None

    reference = parse_card_reference(text)
    if reference is not None:
        return CardEntity(
            entity_id=reference.entity_id,
            card_name=reference.card_name,
            player=reference.side(state) or Position.BOTTOM,
        )

    if text == GAME_ENTITY:
        return GameEntity()

    player = state.get_player_by_name(text)
    return PlayerEntity(name=text, player=player.position if player else Position.BOTTOM)


__all__ = [
    "CARD_REFERENCE_PATTERN",
    "CardReference",
    "parse_card_reference",
    "parse_entity",
]

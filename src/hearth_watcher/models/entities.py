"""Entity models for the Hearthstone log watcher.

Entities are the id-addressable objects the client log talks about:
cards, players, and the game itself. Only card entities carry data the
watcher accumulates over time; player and game entities are references.

Models:
    CardEntity: Last-known facts about one card entity.
    PlayerEntity: Reference to a player by screen side.
    GameEntity: The game itself.
    EntityFact: A partial observation about a card entity.
    EntityProps: Snapshot of a card entity recorded in the match log.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from hearth_watcher.models.enums import EntityTag, Position


UNKNOWN_CARD_NAME = "UNKNOWN ENTITY [cardType=INVALID]"


def is_empty_name(card_name: str | None) -> bool:
    """Check whether a card name is missing or the client's placeholder."""
    return not card_name or card_name == UNKNOWN_CARD_NAME


class CardEntity(BaseModel):
    """Everything known so far about one card entity.

    Attributes:
        entity_id: Process-unique id assigned by the client. Never changes.
        card_id: Numeric database id, unknown until resolved.
        card_name: Display name, empty until resolved.
        player: Side owning the entity.
        tags: Raw tag name to raw tag value.
    """

    model_config = ConfigDict(extra="forbid")

    type: Literal["card"] = "card"
    entity_id: int = Field(frozen=True, description="Client entity id")
    card_id: int | None = Field(default=None, description="Numeric database id")
    card_name: str = Field(default="", description="Display name")
    player: Position = Field(default=Position.BOTTOM, description="Owning side")
    tags: dict[str, str] = Field(default_factory=dict, description="Raw tags")

    @property
    def has_name(self) -> bool:
        """Whether the entity's name has been revealed."""
        return not is_empty_name(self.card_name)


class PlayerEntity(BaseModel):
    """A player referenced by name in a log line."""

    type: Literal["player"] = "player"
    name: str
    player: Position = Position.BOTTOM


class GameEntity(BaseModel):
    """The ``GameEntity`` token."""

    type: Literal["game"] = "game"


Entity = CardEntity | PlayerEntity | GameEntity


class EntityFact(BaseModel):
    """A partial observation about a card entity.

    Unset fields (``None``) mean "not observed by this line" and never
    overwrite what is already known.
    """

    entity_id: int
    card_id: int | None = None
    card_name: str | None = None
    player: Position | None = None
    tags: dict[str, str] = Field(default_factory=dict)


class EntityProps(BaseModel):
    """Snapshot of a card entity taken when a match action is recorded.

    Attributes:
        entity_id: Entity the snapshot was taken from.
        card_id: Numeric database id at snapshot time.
        card_name: Display name at snapshot time (may be a placeholder).
        player: Owning side.
        damage: Damage dealt to this entity by the action.
        healing: Healing received from the action.
        dead: Whether the entity died during the action.
        tags: Derived display tags.
    """

    entity_id: int
    card_id: int | None = None
    card_name: str = ""
    player: Position = Position.BOTTOM
    damage: int | None = None
    healing: int | None = None
    dead: bool | None = None
    tags: list[EntityTag] | None = None

    @classmethod
    def from_entity(cls, entity: CardEntity, **overrides: object) -> EntityProps:
        """Snapshot an entity, applying extra properties on top.

        Args:
            entity: Entity to snapshot.
            **overrides: Snapshot fields to set (damage, dead, ...).

        Returns:
            A new, independent snapshot.
        """
        props = cls(
            entity_id=entity.entity_id,
            card_id=entity.card_id,
            card_name=entity.card_name,
            player=entity.player,
            tags=identify_special_tags(entity),
        )
        return props.model_copy(update=overrides)


def identify_special_tags(entity: CardEntity | None) -> list[EntityTag] | None:
    """Derive the display tags of an entity from its raw tags.

    A corrupted card is only reported as ``corrupt``; ``can-corrupt`` is
    reported for cards that are corruptible but not yet corrupted.

    Returns:
        The derived tags, or None when there are none.
    """
    if entity is None or not entity.tags:
        return None

    tags: list[EntityTag] = []
    if entity.tags.get("CORRUPTEDCARD") == "1":
        tags.append(EntityTag.CORRUPT)
    elif entity.tags.get("CORRUPT") == "1":
        tags.append(EntityTag.CAN_CORRUPT)

    return tags or None


__all__ = [
    "UNKNOWN_CARD_NAME",
    "is_empty_name",
    "CardEntity",
    "PlayerEntity",
    "GameEntity",
    "Entity",
    "EntityFact",
    "EntityProps",
    "identify_special_tags",
]

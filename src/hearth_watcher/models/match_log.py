"""Match log models.

A match log entry records one action (an attack, a card play, or a
secret trigger) with snapshots of the entities involved. Entries are
appended once and never removed; the only in-place edits are death and
damage marks made while the action's block is still being read, and the
name patches applied by the entity resolver.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from hearth_watcher.models.entities import CardEntity, EntityProps
from hearth_watcher.models.enums import MatchLogType


class MatchLogEntry(BaseModel):
    """One recorded match action.

    Attributes:
        type: Kind of action.
        mana_spent: Mana spent on the action.
        source: Snapshot of the acting entity.
        targets: Snapshots of affected entities, unique by entity id.

    Example:
        >>> entry = MatchLogEntry.create(MatchLogType.ATTACK, attacker)
        >>> entry.add_target(defender, damage=3)
    """

    type: MatchLogType
    mana_spent: int = 0
    source: EntityProps
    targets: list[EntityProps] = Field(default_factory=list)

    @classmethod
    def create(
        cls,
        log_type: MatchLogType,
        source: CardEntity,
        **props: object,
    ) -> MatchLogEntry:
        """Create an entry with a snapshot of its source."""
        return cls(type=log_type, source=EntityProps.from_entity(source, **props))

    def add_target(self, entity: CardEntity | None, **props: object) -> None:
        """Add a target snapshot.

        Ignored if the entity is None or is already a target.
        """
        if entity is None or self.get_target(entity.entity_id) is not None:
            return
        self.targets.append(EntityProps.from_entity(entity, **props))

    def get_target(self, entity_id: int) -> EntityProps | None:
        """Return the target snapshot for an entity id, if any."""
        for target in self.targets:
            if target.entity_id == entity_id:
                return target
        return None

    def participants(self) -> list[EntityProps]:
        """Source followed by all targets."""
        return [self.source, *self.targets]

    def mark_deaths(self, deaths: set[int]) -> set[int]:
        """Mark the source and targets whose entity id is in ``deaths``.

        Returns:
            The subset of ``deaths`` present in this entry.
        """
        marked: set[int] = set()
        for props in self.participants():
            if props.entity_id in deaths:
                props.dead = True
                marked.add(props.entity_id)
        return marked


__all__ = ["MatchLogEntry"]

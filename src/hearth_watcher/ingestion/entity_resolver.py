"""Entity resolution: repairing forward references.

The client often mentions an entity before it reveals the entity's name
(a card drawn by the opponent, a minion summoned mid-effect). Match log
entries recorded in the meantime carry the placeholder name. Once a
later line supplies the name, the entity's record is merged and every
snapshot still carrying the placeholder is patched in place.

Merge rule, per field: an incoming value wins unless it is unset, in
which case the existing value is kept. Tags merge key by key.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hearth_watcher.core.logging import get_logger
from hearth_watcher.models.entities import (
    CardEntity,
    EntityFact,
    identify_special_tags,
    is_empty_name,
)
from hearth_watcher.models.enums import Position


if TYPE_CHECKING:
    from hearth_watcher.models.game_state import GameState

logger = get_logger(__name__)


def merge_entity(existing: CardEntity | None, fact: EntityFact) -> CardEntity:
    """Merge a partial fact over the last-known record of an entity.

    Args:
        existing: Last-known record, or None for a first mention.
        fact: The new observation.

    Returns:
        A new record; ``existing`` is not modified.
    """
    if existing is None:
        existing = CardEntity(entity_id=fact.entity_id)

    card_name = existing.card_name
    if fact.card_name and (is_empty_name(card_name) or not is_empty_name(fact.card_name)):
        card_name = fact.card_name

    return CardEntity(
        entity_id=existing.entity_id,
        card_id=fact.card_id if fact.card_id is not None else existing.card_id,
        card_name=card_name,
        player=fact.player or existing.player or Position.BOTTOM,
        tags={**existing.tags, **fact.tags},
    )


def resolve_entity(state: GameState, fact: EntityFact) -> bool:
    """Record a fact about an entity and backfill anything that needed it.

    Steps: merge the fact into ``state.entities``, refresh the derived
    tags of every card referencing the entity, and, if the entity now has
    a name and was waiting for one, patch every match log snapshot that
    still carries the placeholder name.

    Args:
        state: Game state owning the entity map and the match log.
        fact: The new observation.

    Returns:
        True if any card or match log snapshot was modified.
    """
    merged = merge_entity(state.entities.get(fact.entity_id), fact)
    state.entities[fact.entity_id] = merged
    changed = False

    tags = identify_special_tags(merged) or []
    for player in state.players:
        for card in player.cards:
            if card.entity_id == merged.entity_id and card.tags != tags:
                card.tags = list(tags)
                changed = True

    if not merged.has_name:
        state.missing_entity_ids.add(merged.entity_id)
        return changed
    if merged.entity_id not in state.missing_entity_ids:
        return changed

    patch = {
        "entity_id": merged.entity_id,
        "card_name": merged.card_name,
        "card_id": merged.card_id,
    }
    patched = 0
    for entry in state.match_log:
        if entry.source.entity_id == merged.entity_id and is_empty_name(entry.source.card_name):
            entry.source = entry.source.model_copy(update=patch)
            patched += 1
        for index, target in enumerate(entry.targets):
            if target.entity_id == merged.entity_id and is_empty_name(target.card_name):
                entry.targets[index] = target.model_copy(update=patch)
                patched += 1

    state.missing_entity_ids.discard(merged.entity_id)
    logger.debug(
        "Entity resolved",
        entity_id=merged.entity_id,
        card_name=merged.card_name,
        patched_snapshots=patched,
    )
    return changed or patched > 0


__all__ = ["merge_entity", "resolve_entity"]

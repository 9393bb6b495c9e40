"""Data models for the reconstructed match.

Modules:
    enums: Tokens of the client log (zones, teams, statuses, ...).
    entities: Entity variants and match-log snapshots.
    match_log: Recorded match actions.
    game_state: Players, cards, secrets, quests and the GameState root.
"""

from __future__ import annotations

from hearth_watcher.models.entities import (
    UNKNOWN_CARD_NAME,
    CardEntity,
    Entity,
    EntityFact,
    EntityProps,
    GameEntity,
    PlayerEntity,
    identify_special_tags,
    is_empty_name,
)
from hearth_watcher.models.enums import (
    CardClass,
    CardState,
    EntityTag,
    MatchLogType,
    PlayStatus,
    Position,
    Team,
    Zone,
)
from hearth_watcher.models.game_state import (
    Card,
    Discovery,
    GameState,
    Player,
    Quest,
    Secret,
    TurnRecord,
)
from hearth_watcher.models.match_log import MatchLogEntry


__all__ = [
    # Enums
    "CardClass",
    "CardState",
    "EntityTag",
    "MatchLogType",
    "PlayStatus",
    "Position",
    "Team",
    "Zone",
    # Entities
    "UNKNOWN_CARD_NAME",
    "CardEntity",
    "Entity",
    "EntityFact",
    "EntityProps",
    "GameEntity",
    "PlayerEntity",
    "identify_special_tags",
    "is_empty_name",
    # Match log
    "MatchLogEntry",
    # Game state
    "Card",
    "Discovery",
    "GameState",
    "Player",
    "Quest",
    "Secret",
    "TurnRecord",
]

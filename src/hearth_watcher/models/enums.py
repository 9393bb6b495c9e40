"""Enumeration types for the Hearthstone log watcher.

String values match the literal tokens written by the game client, so a
captured token can be compared against an enum member directly.
"""

from __future__ import annotations

from enum import StrEnum


class Position(StrEnum):
    """Screen side of a player (bottom is the local player)."""

    TOP = "top"
    BOTTOM = "bottom"


class Team(StrEnum):
    """Side token used by zone-change lines."""

    FRIENDLY = "FRIENDLY"
    OPPOSING = "OPPOSING"

    @property
    def position(self) -> Position:
        """Screen side the team is drawn on."""
        return Position.BOTTOM if self is Team.FRIENDLY else Position.TOP


class Zone(StrEnum):
    """Zones the watcher gives special treatment to."""

    DECK = "DECK"
    HAND = "HAND"
    SECRET = "SECRET"
    PLAY = "PLAY"
    GRAVEYARD = "GRAVEYARD"


class CardState(StrEnum):
    """Coarse location of a tracked card."""

    DECK = "DECK"
    HAND = "HAND"
    OTHERS = "OTHERS"


class PlayStatus(StrEnum):
    """Terminal status of a player. Empty while the match is running."""

    UNSET = ""
    WON = "WON"
    LOST = "LOST"
    TIED = "TIED"


class EntityTag(StrEnum):
    """Derived display tags attached to cards and snapshots."""

    CORRUPT = "corrupt"
    CAN_CORRUPT = "can-corrupt"


class MatchLogType(StrEnum):
    """Kinds of recorded match actions."""

    ATTACK = "attack"
    PLAY = "play"
    TRIGGER = "trigger"


class CardClass(StrEnum):
    """Hero classes, used to attribute secrets and quests."""

    DEMONHUNTER = "DEMONHUNTER"
    DRUID = "DRUID"
    HUNTER = "HUNTER"
    MAGE = "MAGE"
    PALADIN = "PALADIN"
    PRIEST = "PRIEST"
    ROGUE = "ROGUE"
    SHAMAN = "SHAMAN"
    WARLOCK = "WARLOCK"
    WARRIOR = "WARRIOR"
    NEUTRAL = "NEUTRAL"


__all__ = [
    "Position",
    "Team",
    "Zone",
    "CardState",
    "PlayStatus",
    "EntityTag",
    "MatchLogType",
    "CardClass",
]

"""Static data consulted by the line parsers."""

from __future__ import annotations

from hearth_watcher.data.cards import CardDatabase, CardRecord
from hearth_watcher.data.meta import DECK_CARD_COUNT, QUESTS, SECRET_CLASSES, QuestInfo


__all__ = [
    "CardDatabase",
    "CardRecord",
    "DECK_CARD_COUNT",
    "QUESTS",
    "SECRET_CLASSES",
    "QuestInfo",
]

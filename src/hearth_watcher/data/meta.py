"""Static game metadata: deck size, secret classes and quest requirements."""

from __future__ import annotations

from pydantic import BaseModel

from hearth_watcher.models.enums import CardClass


DECK_CARD_COUNT = 30


class QuestInfo(BaseModel):
    """Static data of a quest card."""

    card_class: CardClass
    requirement: int
    sidequest: bool = False


# Textual card id -> class of the secret.
SECRET_CLASSES: dict[str, CardClass] = {
    # Hunter
    "EX1_533": CardClass.HUNTER,  # Misdirection
    "EX1_554": CardClass.HUNTER,  # Snake Trap
    "EX1_609": CardClass.HUNTER,  # Snipe
    "EX1_610": CardClass.HUNTER,  # Explosive Trap
    "EX1_611": CardClass.HUNTER,  # Freezing Trap
    # Mage
    "EX1_287": CardClass.MAGE,  # Counterspell
    "EX1_289": CardClass.MAGE,  # Ice Barrier
    "EX1_294": CardClass.MAGE,  # Mirror Entity
    "EX1_295": CardClass.MAGE,  # Ice Block
    "EX1_594": CardClass.MAGE,  # Vaporize
    "tt_010": CardClass.MAGE,  # Spellbender
    # Paladin
    "EX1_130": CardClass.PALADIN,  # Noble Sacrifice
    "EX1_132": CardClass.PALADIN,  # Eye for an Eye
    "EX1_136": CardClass.PALADIN,  # Redemption
    "EX1_379": CardClass.PALADIN,  # Repentance
    # Rogue
    "LOOT_204": CardClass.ROGUE,  # Cheat Death
    "LOOT_210": CardClass.ROGUE,  # Sudden Betrayal
    "LOOT_214": CardClass.ROGUE,  # Evasion
}

# Textual card id -> quest data.
QUESTS: dict[str, QuestInfo] = {
    "UNG_028": QuestInfo(card_class=CardClass.MAGE, requirement=6),  # Open the Waygate
    "UNG_067": QuestInfo(card_class=CardClass.ROGUE, requirement=4),  # The Caverns Below
    "UNG_116": QuestInfo(card_class=CardClass.DRUID, requirement=5),  # Jungle Giants
    "UNG_829": QuestInfo(card_class=CardClass.WARLOCK, requirement=6),  # Lakkari Sacrifice
    "UNG_920": QuestInfo(card_class=CardClass.HUNTER, requirement=7),  # The Marsh Queen
    "UNG_934": QuestInfo(card_class=CardClass.WARRIOR, requirement=7),  # Fire Plume's Heart
    "UNG_940": QuestInfo(card_class=CardClass.PRIEST, requirement=7),  # Awaken the Makers
    "UNG_942": QuestInfo(card_class=CardClass.SHAMAN, requirement=10),  # Unite the Murlocs
    "UNG_954": QuestInfo(card_class=CardClass.PALADIN, requirement=6),  # The Last Kaleidosaur
}


__all__ = ["DECK_CARD_COUNT", "QuestInfo", "SECRET_CLASSES", "QUESTS"]

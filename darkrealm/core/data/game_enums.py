"""Centralized game enums and constants.

This module contains all core game enums that are used across multiple modules,
eliminating duplication and providing a single source of truth.
"""

from enum import Enum, auto
from typing import Optional


class CharacterClass(Enum):
    """Playable classes with distinct growth tables."""
    WARRIOR = "warrior"
    ROGUE = "rogue"
    MAGE = "mage"

    @classmethod
    def parse(cls, value: str) -> Optional["CharacterClass"]:
        """Return the matching class, or None for unknown class names."""
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError):
            return None


class ItemType(Enum):
    """Item categories."""
    WEAPON = "weapon"
    ARMOR = "armor"
    AMULET = "amulet"
    RING = "ring"
    TRINKET = "trinket"
    CONSUMABLE = "consumable"
    MATERIAL = "material"
    QUEST = "quest"


class Rarity(Enum):
    """Item rarity, totally ordered from common to artifact."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"
    ARTIFACT = "artifact"

    @property
    def rank(self) -> int:
        """Position in the rarity order, common being 0."""
        return _RARITY_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank >= other.rank


_RARITY_ORDER = list(Rarity)


class EffectType(Enum):
    """Effect kinds carried by items and skills."""
    HEAL = "heal"
    DAMAGE = "damage"
    BUFF = "buff"
    DEBUFF = "debuff"
    ON_HIT = "on-hit"
    ON_KILL = "on-kill"
    PASSIVE = "passive"


class EquipmentSlot(Enum):
    """Slots a character can equip one item into."""
    WEAPON = "weapon"
    ARMOR = "armor"
    AMULET = "amulet"
    RING = "ring"
    TRINKET = "trinket"


class CombatState(Enum):
    """Lifecycle of a single encounter."""
    NOT_STARTED = auto()
    IN_PROGRESS = auto()
    VICTORY = auto()
    DEFEAT = auto()
    FLED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (CombatState.VICTORY, CombatState.DEFEAT, CombatState.FLED)


class ObjectiveType(Enum):
    """Kinds of countable quest objectives."""
    KILL = "kill"
    COLLECT = "collect"
    EXPLORE = "explore"


class QuestStatus(Enum):
    """Per-character quest lifecycle. No regression between states."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Item types that occupy an equipment slot
EQUIPMENT_SLOT_FOR_TYPE = {
    ItemType.WEAPON: EquipmentSlot.WEAPON,
    ItemType.ARMOR: EquipmentSlot.ARMOR,
    ItemType.AMULET: EquipmentSlot.AMULET,
    ItemType.RING: EquipmentSlot.RING,
    ItemType.TRINKET: EquipmentSlot.TRINKET,
}

CHARACTER_CLASS_NAMES = {
    CharacterClass.WARRIOR: "Warrior",
    CharacterClass.ROGUE: "Rogue",
    CharacterClass.MAGE: "Mage",
}

COMBAT_STATE_NAMES = {
    CombatState.NOT_STARTED: "Not started",
    CombatState.IN_PROGRESS: "In progress",
    CombatState.VICTORY: "Victory",
    CombatState.DEFEAT: "Defeat",
    CombatState.FLED: "Fled",
}

"""Core data structures and definitions.

This package contains fundamental data types and game definitions:
- data_structures.py: frozen snapshots for characters, items, enemies and quests
- game_enums.py: centralized enums for classes, rarities, effects and states
- game_info.py: class templates loaded from YAML
"""

from .data_structures import (
    STAT_NAMES,
    Character,
    CombatSkill,
    Combatant,
    Enemy,
    Item,
    ItemEffect,
    Quest,
    QuestLog,
    QuestObjective,
    QuestProgress,
    QuestRewards,
    Resource,
    Stats,
    validate_stats,
)
from .game_enums import (
    CHARACTER_CLASS_NAMES,
    COMBAT_STATE_NAMES,
    EQUIPMENT_SLOT_FOR_TYPE,
    CharacterClass,
    CombatState,
    EffectType,
    EquipmentSlot,
    ItemType,
    ObjectiveType,
    QuestStatus,
    Rarity,
)
from .game_info import CLASS_DATA, ClassInfo, default_data_path, get_class_info, resolve_class_name

__all__ = [
    "STAT_NAMES",
    "Character",
    "CombatSkill",
    "Combatant",
    "Enemy",
    "Item",
    "ItemEffect",
    "Quest",
    "QuestLog",
    "QuestObjective",
    "QuestProgress",
    "QuestRewards",
    "Resource",
    "Stats",
    "validate_stats",
    "CHARACTER_CLASS_NAMES",
    "COMBAT_STATE_NAMES",
    "EQUIPMENT_SLOT_FOR_TYPE",
    "CharacterClass",
    "CombatState",
    "EffectType",
    "EquipmentSlot",
    "ItemType",
    "ObjectiveType",
    "QuestStatus",
    "Rarity",
    "CLASS_DATA",
    "ClassInfo",
    "default_data_path",
    "get_class_info",
    "resolve_class_name",
]

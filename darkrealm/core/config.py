"""
Rule configuration for combat, loot, progression and the economy.

Every tunable constant lives in a GameRules dataclass. Defaults match the
packaged ``rules.yaml``; a custom YAML file can override any subset of keys.
"""
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional

import numpy as np
import yaml

from .data.game_enums import Rarity
from .data.game_info import default_data_path


@dataclass(frozen=True)
class CombatRules:
    base_hit_chance: float = 85
    hit_chance_per_agility: float = 2
    min_hit_chance: float = 10
    max_hit_chance: float = 95
    strength_coefficient: float = 0.1
    defense_coefficient: float = 0.05
    default_skill_damage: int = 10
    base_flee_chance: float = 50
    flee_chance_per_agility: float = 2


@dataclass(frozen=True)
class EnemyRules:
    base_health: int = 50
    base_damage: int = 5
    base_defense: int = 2
    base_experience: int = 20
    level_multiplier: float = 0.2
    catalog_level_range: int = 2
    name_prefixes: tuple[str, ...] = ("Fierce", "Dark", "Cursed", "Ancient", "Corrupted")
    name_types: tuple[str, ...] = ("Warrior", "Beast", "Demon", "Specter", "Dragon")


def _default_rarity_chances() -> dict[Rarity, float]:
    return {
        Rarity.COMMON: 0.60,
        Rarity.UNCOMMON: 0.25,
        Rarity.RARE: 0.10,
        Rarity.EPIC: 0.04,
        Rarity.LEGENDARY: 0.01,
    }


@dataclass(frozen=True)
class LootRules:
    min_items: int = 1
    max_items: int = 3
    value_per_level: int = 10
    rarity_chances: Mapping[Rarity, float] = field(default_factory=_default_rarity_chances)


@dataclass(frozen=True)
class ProgressionRules:
    experience_base: int = 100


@dataclass(frozen=True)
class EconomyRules:
    starting_gold: int = 100
    sell_ratio: float = 0.5


@dataclass(frozen=True)
class GameRules:
    """All rule constants, grouped by subsystem."""
    combat: CombatRules = field(default_factory=CombatRules)
    enemy: EnemyRules = field(default_factory=EnemyRules)
    loot: LootRules = field(default_factory=LootRules)
    progression: ProgressionRules = field(default_factory=ProgressionRules)
    economy: EconomyRules = field(default_factory=EconomyRules)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Check rule consistency.

        Raises:
            ValueError: If bounds are inverted, loot counts are out of range or
                the rarity distribution does not sum to 1.0
        """
        combat = self.combat
        if not 0 <= combat.min_hit_chance <= combat.max_hit_chance <= 100:
            raise ValueError("Hit chance bounds must satisfy 0 <= min <= max <= 100")
        if combat.default_skill_damage < 0:
            raise ValueError("Default skill damage cannot be negative")

        if self.enemy.level_multiplier < 0:
            raise ValueError("Enemy level multiplier cannot be negative")
        if not self.enemy.name_prefixes or not self.enemy.name_types:
            raise ValueError("Enemy name tables cannot be empty")

        loot = self.loot
        if not 1 <= loot.min_items <= loot.max_items:
            raise ValueError("Loot counts must satisfy 1 <= min_items <= max_items")
        if loot.value_per_level <= 0:
            raise ValueError("Loot value per level must be positive")
        chances = np.array(list(loot.rarity_chances.values()), dtype=np.float64)
        if chances.size == 0 or np.any(chances < 0) or not np.isclose(chances.sum(), 1.0):
            raise ValueError(f"Rarity chances must be non-negative and sum to 1.0, got {chances.sum():.4f}")

        if self.progression.experience_base <= 0:
            raise ValueError("Experience base must be positive")
        if not 0 <= self.economy.sell_ratio <= 1:
            raise ValueError("Sell ratio must be between 0 and 1")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameRules":
        """Build rules from a mapping of sections, keeping defaults for missing keys."""
        defaults = cls()
        sections = {}
        for section in fields(cls):
            overrides = dict(data.get(section.name) or {})
            base = getattr(defaults, section.name)
            known = {f.name for f in fields(base)}
            unknown = set(overrides) - known
            if unknown:
                raise ValueError(f"Unknown {section.name} rules: {sorted(unknown)}")
            if "rarity_chances" in overrides:
                overrides["rarity_chances"] = {
                    Rarity(name): float(chance) for name, chance in overrides["rarity_chances"].items()
                }
            for key in ("name_prefixes", "name_types"):
                if key in overrides:
                    overrides[key] = tuple(overrides[key])
            sections[section.name] = replace(base, **overrides)
        return cls(**sections)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "GameRules":
        """Load rules from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file cannot be parsed or holds invalid rules
        """
        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise FileNotFoundError(f"Rules file not found: {yaml_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse rules file {yaml_path}: {e}")

        if not isinstance(data, Mapping):
            raise ValueError(f"Rules file {yaml_path} must contain a mapping")
        return cls.from_dict(data)


def load_default_rules(yaml_path: Optional[str] = None) -> GameRules:
    """Load the packaged rules.yaml, or a custom file if one is given."""
    return GameRules.from_yaml(yaml_path or default_data_path("rules.yaml"))

"""
Loot generation for defeated enemies.

A drop is 1-3 items. Each item's rarity is rolled from the cumulative rarity
distribution and its value scales with enemy level and rarity rank. The item
base (name, type, bonuses) comes from the enemy's loot table when it has one,
otherwise from a generic list.
"""
from dataclasses import replace
from typing import Optional

import numpy as np

from ..core.config import GameRules
from ..core.data import Enemy, Item, ItemType, Rarity
from ..core.errors import InvalidInputError
from ..core.rng import IdSource, RandomSource, UuidIdSource, pick_index

# Bases used when an enemy has no loot table of its own
GENERIC_LOOT_BASES: tuple[tuple[str, ItemType], ...] = (
    ("Blade", ItemType.WEAPON),
    ("Cuirass", ItemType.ARMOR),
    ("Charm", ItemType.AMULET),
    ("Signet", ItemType.RING),
    ("Bone Fetish", ItemType.TRINKET),
    ("Grave Dust", ItemType.MATERIAL),
)


class LootGenerator:
    """Rolls item drops from a defeated enemy."""

    def __init__(self, rules: Optional[GameRules] = None, id_source: Optional[IdSource] = None):
        self.rules = rules or GameRules()
        self.id_source = id_source or UuidIdSource()

        chances = self.rules.loot.rarity_chances
        self._rarities: list[Rarity] = list(chances.keys())
        weights = np.array(list(chances.values()), dtype=np.float64)
        self._cumulative = np.cumsum(weights)
        self._last_drawable = int(np.flatnonzero(weights > 0)[-1])

    @property
    def max_items(self) -> int:
        return self.rules.loot.max_items

    def roll_rarity(self, rng: RandomSource) -> Rarity:
        """Draw a rarity from the cumulative distribution."""
        roll = float(rng.random())
        # Zero-chance rarities own no part of [0, 1)
        index = int(np.searchsorted(self._cumulative, roll, side="right"))
        # Float sums can end a hair under 1.0
        return self._rarities[min(index, self._last_drawable)]

    def item_value(self, enemy_level: int, rarity: Rarity) -> int:
        return enemy_level * self.rules.loot.value_per_level * (1 + rarity.rank)

    def generate_loot(self, enemy: Enemy, rng: RandomSource) -> tuple[Item, ...]:
        """
        Generate the drop for a defeated enemy.

        Args:
            enemy: The defeated enemy
            rng: Source for count, rarity and base rolls

        Returns:
            Between min_items and max_items new item instances, each with a
            positive value

        Raises:
            InvalidInputError: If the enemy is missing or its level is below 1
        """
        if not isinstance(enemy, Enemy):
            raise InvalidInputError("Invalid enemy")
        if enemy.level < 1:
            raise InvalidInputError("Enemy level must be at least 1")

        loot_rules = self.rules.loot
        count = int(rng.integers(loot_rules.min_items, loot_rules.max_items + 1))
        count = max(loot_rules.min_items, min(loot_rules.max_items, count))

        return tuple(self._create_item(enemy, rng) for _ in range(count))

    def _create_item(self, enemy: Enemy, rng: RandomSource) -> Item:
        rarity = self.roll_rarity(rng)
        value = self.item_value(enemy.level, rarity)
        item_id = self.id_source.next_id("loot")

        if enemy.loot_table:
            base = enemy.loot_table[pick_index(rng, len(enemy.loot_table))]
            return replace(base, id=item_id, rarity=rarity, value=value)

        base_name, item_type = GENERIC_LOOT_BASES[pick_index(rng, len(GENERIC_LOOT_BASES))]
        return Item(
            id=item_id,
            name=f"{rarity.value.title()} {base_name}",
            item_type=item_type,
            rarity=rarity,
            value=value,
            description=f"A {rarity.value} {base_name.lower()} dropped by a level {enemy.level} {enemy.name}",
        )

"""
Test utilities and helper functions for the darkrealm test suite.

This module provides a scripted random source and builders that make
character, enemy and quest snapshots convenient to set up.
"""
from collections import deque
from typing import Iterable, Optional

from darkrealm.core.data import (
    Character,
    CombatSkill,
    EffectType,
    Enemy,
    EquipmentSlot,
    Item,
    ItemEffect,
    ItemType,
    ObjectiveType,
    Quest,
    QuestObjective,
    QuestRewards,
    Resource,
    Stats,
)
from darkrealm.game.progression import ProgressionEngine


class ScriptedRandom:
    """Random source that replays queued values.

    ``random()`` returns the next queued float (0.0 once exhausted, which
    makes every percentage roll succeed). ``integers(low, high)`` returns
    the next queued int, or ``low`` once exhausted.
    """

    def __init__(self, randoms: Iterable[float] = (), integers: Iterable[int] = ()):
        self._randoms = deque(randoms)
        self._integers = deque(integers)
        self.calls: list[tuple] = []

    def random(self) -> float:
        value = self._randoms.popleft() if self._randoms else 0.0
        self.calls.append(("random", value))
        return value

    def integers(self, low: int, high: int) -> int:
        value = self._integers.popleft() if self._integers else low
        self.calls.append(("integers", low, high, value))
        return value


# Percentage rolls: 0.0 always lands, 0.99 misses anything below 99%
HIT = 0.0
MISS = 0.99


class CharacterBuilder:
    """Builder for character snapshots."""

    def __init__(self, name: str = "Hero", character_class: str = "warrior"):
        self.name = name
        self.character_class = character_class
        self.stats = Stats(10, 6, 4, 10)
        self.level = 1
        self.experience = 0
        self.health: Optional[int] = None
        self.energy: Optional[Resource] = None
        self.inventory: list[Item] = []
        self.equipment: dict[EquipmentSlot, Item] = {}
        self.gold = 0
        self.skills: list[CombatSkill] = [CombatSkill("skill-slash", "Slash", damage=10)]

    def with_stats(self, strength: int, agility: int, intelligence: int, vitality: int) -> "CharacterBuilder":
        self.stats = Stats(strength, agility, intelligence, vitality)
        return self

    def with_level(self, level: int, experience: int = 0) -> "CharacterBuilder":
        self.level = level
        self.experience = experience
        return self

    def with_health(self, current: int) -> "CharacterBuilder":
        self.health = current
        return self

    def with_energy(self, current: int, maximum: Optional[int] = None) -> "CharacterBuilder":
        self.energy = Resource(current, maximum if maximum is not None else current)
        return self

    def with_item(self, item: Item) -> "CharacterBuilder":
        self.inventory.append(item)
        return self

    def with_equipped(self, item: Item) -> "CharacterBuilder":
        self.equipment[item.equipment_slot] = item
        return self

    def with_gold(self, gold: int) -> "CharacterBuilder":
        self.gold = gold
        return self

    def with_skill(self, skill: CombatSkill) -> "CharacterBuilder":
        self.skills.append(skill)
        return self

    def build(self) -> Character:
        maximum = ProgressionEngine.max_health(self.stats)
        current = maximum if self.health is None else self.health
        return Character(
            id=f"char-{self.name.lower()}",
            name=self.name,
            character_class=self.character_class,
            stats=self.stats,
            health=Resource(current, maximum),
            level=self.level,
            experience=self.experience,
            energy=self.energy,
            inventory=tuple(self.inventory),
            equipment=dict(self.equipment),
            gold=self.gold,
            skills=tuple(self.skills),
        )


class EnemyBuilder:
    """Builder for enemy snapshots."""

    def __init__(self, name: str = "Feral Ghoul"):
        self.name = name
        self.level = 1
        self.health = 50
        self.damage = 5
        self.defense = 2
        self.experience = 20
        self.loot_table: tuple[Item, ...] = ()

    def with_level(self, level: int) -> "EnemyBuilder":
        self.level = level
        return self

    def with_health(self, health: int) -> "EnemyBuilder":
        self.health = health
        return self

    def with_damage(self, damage: int) -> "EnemyBuilder":
        self.damage = damage
        return self

    def with_defense(self, defense: int) -> "EnemyBuilder":
        self.defense = defense
        return self

    def with_experience(self, experience: int) -> "EnemyBuilder":
        self.experience = experience
        return self

    def with_loot(self, *items: Item) -> "EnemyBuilder":
        self.loot_table = tuple(items)
        return self

    def build(self) -> Enemy:
        return Enemy(
            id=f"enemy-{self.name.lower().replace(' ', '-')}",
            name=self.name,
            level=self.level,
            health=self.health,
            max_health=self.health,
            damage=self.damage,
            defense=self.defense,
            experience=self.experience,
            loot_table=self.loot_table,
        )


def make_item(
    item_id: str = "item-1",
    name: str = "Rusty Dagger",
    item_type: ItemType = ItemType.WEAPON,
    value: int = 10,
    **kwargs
) -> Item:
    """Create an item with sensible defaults."""
    return Item(id=item_id, name=name, item_type=item_type, value=value, **kwargs)


def make_potion(item_id: str = "potion-1", heal: int = 50) -> Item:
    return make_item(item_id, "Health Potion", ItemType.CONSUMABLE, 5,
                     effects=(ItemEffect(EffectType.HEAL, heal),))


def make_quest(
    quest_id: str = "quest-test",
    required: Iterable[int] = (3, 3),
    level_requirement: int = 1,
    rewards: Optional[QuestRewards] = None
) -> Quest:
    """Quest with one kill objective per entry in ``required``, targeting Feral Ghoul, Blood Cultist, ..."""
    targets = ("Feral Ghoul", "Blood Cultist", "Rabid Werewolf", "Ancient Vampire")
    objectives = tuple(
        QuestObjective(f"obj-{index + 1}", ObjectiveType.KILL, targets[index % len(targets)], count)
        for index, count in enumerate(required)
    )
    return Quest(
        id=quest_id,
        title=quest_id.replace("-", " ").title(),
        objectives=objectives,
        rewards=rewards or QuestRewards(experience=150, gold=50),
        level_requirement=level_requirement,
    )

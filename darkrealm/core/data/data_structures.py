"""Immutable snapshots for characters, items, enemies and quests.

Every rules-core function takes these snapshots and returns new ones, so all
types here are frozen dataclasses. Sequences are stored as tuples; mappings
are copied on every change and never mutated in place.

Data Flow:
1. Catalog / repository dicts -> snapshots (``from_dict``)
2. Snapshot -> core operation -> new snapshot
3. New snapshot -> repository write-back
"""

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Union

from ..errors import InvalidInputError
from .game_enums import (
    EQUIPMENT_SLOT_FOR_TYPE,
    EffectType,
    EquipmentSlot,
    ItemType,
    ObjectiveType,
    QuestStatus,
    Rarity,
)

STAT_NAMES = ("strength", "agility", "intelligence", "vitality")

# Older records spell two of the stats differently
STAT_ALIASES = {
    "dexterity": "agility",
    "constitution": "vitality",
}


def _require_non_negative_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidInputError(f"{name} cannot be negative, got {value}")


@dataclass(frozen=True)
class Stats:
    """The four core attributes. All values are non-negative integers."""
    strength: int = 0
    agility: int = 0
    intelligence: int = 0
    vitality: int = 0

    def __post_init__(self):
        for name in STAT_NAMES:
            _require_non_negative_int(name, getattr(self, name))

    def __add__(self, other: "Stats") -> "Stats":
        if not isinstance(other, Stats):
            return NotImplemented
        return Stats(**{name: getattr(self, name) + getattr(other, name) for name in STAT_NAMES})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], partial: bool = False) -> "Stats":
        """Build stats from a mapping, accepting the dexterity/constitution aliases.

        Args:
            data: Mapping of stat name to value
            partial: If True, missing stats default to 0 (used for item bonuses)

        Raises:
            InvalidInputError: If a stat is missing (and partial is False),
                negative or not an integer
        """
        if not isinstance(data, Mapping):
            raise InvalidInputError(f"Stats must be a mapping, got {type(data).__name__}")

        values: dict[str, Any] = {}
        for key, value in data.items():
            name = STAT_ALIASES.get(key, key)
            if name in STAT_NAMES:
                values[name] = value

        if not partial:
            missing = [name for name in STAT_NAMES if name not in values]
            if missing:
                raise InvalidInputError(f"Missing stats: {', '.join(missing)}")
        return cls(**values)

    def to_dict(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in STAT_NAMES}


def validate_stats(stats: Any) -> Stats:
    """Reject anything that is not a valid Stats snapshot.

    Returns:
        The same stats object, for chaining
    """
    if not isinstance(stats, Stats):
        raise InvalidInputError(f"Invalid stats: {stats!r}")
    for name in STAT_NAMES:
        _require_non_negative_int(name, getattr(stats, name))
    return stats


@dataclass(frozen=True)
class Resource:
    """A bounded pool such as health or energy."""
    current: int
    maximum: int

    def __post_init__(self):
        _require_non_negative_int("maximum", self.maximum)
        _require_non_negative_int("current", self.current)
        if self.current > self.maximum:
            raise InvalidInputError(f"current ({self.current}) exceeds maximum ({self.maximum})")

    @classmethod
    def full(cls, maximum: int) -> "Resource":
        return cls(maximum, maximum)

    def with_current(self, value: int) -> "Resource":
        """Return a copy with current clamped into [0, maximum]."""
        return Resource(max(0, min(self.maximum, value)), self.maximum)

    def refill(self) -> "Resource":
        return Resource(self.maximum, self.maximum)

    @property
    def is_depleted(self) -> bool:
        return self.current <= 0


@dataclass(frozen=True)
class ItemEffect:
    """An effect carried by an item or skill."""
    effect_type: EffectType
    value: float
    duration: Optional[int] = None
    chance: Optional[float] = None
    name: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.effect_type, EffectType):
            raise InvalidInputError(f"Unknown effect type: {self.effect_type!r}")
        if self.value < 0:
            raise InvalidInputError("Effect value cannot be negative")
        if self.duration is not None and self.duration < 0:
            raise InvalidInputError("Effect duration cannot be negative")
        if self.chance is not None and not 0 <= self.chance <= 1:
            raise InvalidInputError("Effect chance must be between 0 and 1")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ItemEffect":
        try:
            effect_type = EffectType(data["type"])
        except (KeyError, ValueError):
            raise InvalidInputError(f"Malformed effect: {dict(data)!r}")
        return cls(
            effect_type=effect_type,
            value=data.get("value", 0),
            duration=data.get("duration"),
            chance=data.get("chance"),
            name=data.get("name"),
        )


@dataclass(frozen=True)
class Item:
    """An item instance. Bonuses and restrictions are optional."""
    id: str
    name: str
    item_type: ItemType
    rarity: Rarity = Rarity.COMMON
    value: int = 0
    description: str = ""
    stat_bonuses: Stats = field(default_factory=Stats)
    effects: tuple[ItemEffect, ...] = ()
    level_requirement: int = 0
    class_restrictions: tuple[str, ...] = ()

    def __post_init__(self):
        _require_non_negative_int("value", self.value)
        _require_non_negative_int("level_requirement", self.level_requirement)

    @property
    def equipment_slot(self) -> Optional[EquipmentSlot]:
        """The slot this item occupies when equipped, or None."""
        return EQUIPMENT_SLOT_FOR_TYPE.get(self.item_type)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Item":
        try:
            item_type = ItemType(data["type"])
            rarity = Rarity(data.get("rarity", "common"))
        except (KeyError, ValueError) as e:
            raise InvalidInputError(f"Malformed item {data.get('id')!r}: {e}")
        restrictions = data.get("class_restrictions") or ()
        return cls(
            id=str(data["id"]),
            name=data["name"],
            item_type=item_type,
            rarity=rarity,
            value=data.get("value", 0),
            description=data.get("description", ""),
            stat_bonuses=Stats.from_dict(data.get("stats") or {}, partial=True),
            effects=tuple(ItemEffect.from_dict(e) for e in data.get("effects") or ()),
            level_requirement=data.get("level_requirement", 0),
            class_restrictions=tuple(c.lower() for c in restrictions),
        )


@dataclass(frozen=True)
class CombatSkill:
    """A combat action a character can use."""
    id: str
    name: str
    description: str = ""
    damage: Optional[int] = None
    healing: int = 0
    energy_cost: int = 0
    cooldown: int = 0
    effects: tuple[ItemEffect, ...] = ()

    def __post_init__(self):
        if self.damage is not None and self.damage < 0:
            raise InvalidInputError("Base damage cannot be negative")
        _require_non_negative_int("healing", self.healing)
        _require_non_negative_int("energy_cost", self.energy_cost)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CombatSkill":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            description=data.get("description", ""),
            damage=data.get("damage"),
            healing=data.get("healing", 0),
            energy_cost=data.get("energy_cost", 0),
            cooldown=data.get("cooldown", 0),
            effects=tuple(ItemEffect.from_dict(e) for e in data.get("effects") or ()),
        )


@dataclass(frozen=True)
class Enemy:
    """An ephemeral opponent, generated per encounter."""
    id: str
    name: str
    level: int
    health: int
    max_health: int
    damage: int
    defense: int
    experience: int
    loot_table: tuple[Item, ...] = ()

    def __post_init__(self):
        if self.level < 1:
            raise InvalidInputError("Enemy level must be at least 1")
        for name in ("health", "max_health", "damage", "defense", "experience"):
            _require_non_negative_int(name, getattr(self, name))
        if self.health > self.max_health:
            raise InvalidInputError("Enemy health exceeds its maximum")

    @property
    def is_defeated(self) -> bool:
        return self.health <= 0

    def with_health(self, value: int) -> "Enemy":
        return replace(self, health=max(0, min(self.max_health, value)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Enemy":
        health = data["health"]
        return cls(
            id=str(data["id"]),
            name=data["name"],
            level=data["level"],
            health=health,
            max_health=data.get("max_health", health),
            damage=data["damage"],
            defense=data["defense"],
            experience=data["experience"],
            loot_table=tuple(Item.from_dict(i) for i in data.get("loot") or ()),
        )


@dataclass(frozen=True)
class QuestObjective:
    """A single countable quest sub-goal."""
    id: str
    objective_type: ObjectiveType
    target: str
    required: int
    description: str = ""

    def __post_init__(self):
        if isinstance(self.required, bool) or not isinstance(self.required, int) or self.required < 1:
            raise InvalidInputError(f"Objective {self.id} must require at least 1")


@dataclass(frozen=True)
class QuestRewards:
    """Payout granted once when a completed quest is claimed."""
    experience: int = 0
    gold: int = 0
    items: tuple[str, ...] = ()  # catalog item ids

    def __post_init__(self):
        _require_non_negative_int("experience", self.experience)
        _require_non_negative_int("gold", self.gold)


@dataclass(frozen=True)
class Quest:
    """Read-only quest definition from the catalog."""
    id: str
    title: str
    objectives: tuple[QuestObjective, ...]
    rewards: QuestRewards = field(default_factory=QuestRewards)
    level_requirement: int = 1
    description: str = ""

    def get_objective(self, objective_id: str) -> Optional[QuestObjective]:
        for objective in self.objectives:
            if objective.id == objective_id:
                return objective
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Quest":
        objectives = []
        for obj in data.get("objectives") or ():
            try:
                objective_type = ObjectiveType(obj["type"])
            except (KeyError, ValueError):
                raise InvalidInputError(f"Malformed objective in quest {data.get('id')!r}: {obj!r}")
            objectives.append(QuestObjective(
                id=str(obj["id"]),
                objective_type=objective_type,
                target=obj["target"],
                required=obj["required"],
                description=obj.get("description", ""),
            ))
        rewards = data.get("rewards") or {}
        return cls(
            id=str(data["id"]),
            title=data["title"],
            objectives=tuple(objectives),
            rewards=QuestRewards(
                experience=rewards.get("experience", 0),
                gold=rewards.get("gold", 0),
                items=tuple(str(i) for i in rewards.get("items") or ()),
            ),
            level_requirement=data.get("level_requirement", 1),
            description=data.get("description", ""),
        )


@dataclass(frozen=True)
class QuestProgress:
    """One character's progress through one quest.

    Required counts are copied from the quest on acceptance so that progress
    can be advanced without a catalog lookup.
    """
    quest_id: str
    status: QuestStatus = QuestStatus.NOT_STARTED
    objectives: Mapping[str, int] = field(default_factory=dict)
    required: Mapping[str, int] = field(default_factory=dict)
    rewards_claimed: bool = False

    @property
    def is_complete(self) -> bool:
        """True when every objective counter has reached its required count."""
        return all(self.objectives.get(obj_id, 0) >= count for obj_id, count in self.required.items())


@dataclass(frozen=True)
class QuestLog:
    """Quest state held on a character."""
    active: Mapping[str, QuestProgress] = field(default_factory=dict)
    completed: frozenset[str] = frozenset()

    def holds(self, quest_id: str) -> bool:
        return quest_id in self.active or quest_id in self.completed


EquipmentMap = Mapping[EquipmentSlot, Item]


@dataclass(frozen=True)
class Character:
    """A player character snapshot."""
    id: str
    name: str
    character_class: str
    stats: Stats
    health: Resource
    level: int = 1
    experience: int = 0
    energy: Optional[Resource] = None
    inventory: tuple[Item, ...] = ()
    equipment: EquipmentMap = field(default_factory=dict)
    gold: int = 0
    skills: tuple[CombatSkill, ...] = ()
    quests: QuestLog = field(default_factory=QuestLog)

    def __post_init__(self):
        if isinstance(self.level, bool) or not isinstance(self.level, int) or self.level < 1:
            raise InvalidInputError(f"Level must be at least 1, got {self.level!r}")
        _require_non_negative_int("experience", self.experience)
        _require_non_negative_int("gold", self.gold)
        validate_stats(self.stats)

        equipped_ids = {item.id for item in self.equipment.values()}
        doubled = equipped_ids.intersection(item.id for item in self.inventory)
        if doubled:
            raise InvalidInputError(f"Items both equipped and carried: {', '.join(sorted(doubled))}")

    @property
    def is_alive(self) -> bool:
        return not self.health.is_depleted

    def effective_stats(self) -> Stats:
        """Base stats plus the bonuses of every equipped item."""
        total = self.stats
        for item in self.equipment.values():
            total = total + item.stat_bonuses
        return total

    def get_skill(self, skill_id: str) -> Optional[CombatSkill]:
        for skill in self.skills:
            if skill.id == skill_id:
                return skill
        return None

    def find_item(self, item_id: str) -> Optional[Item]:
        for item in self.inventory:
            if item.id == item_id:
                return item
        return None


Combatant = Union[Character, Enemy]

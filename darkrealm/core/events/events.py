"""Game events published by the service layer.

Event Design Principles:
- Events are immutable dataclasses
- Every event names the character it concerns
- Events carry snapshots and enums rather than loose strings
- The pure rules core never publishes; the service publishes after each call
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from abc import ABC
from enum import Enum, auto

if TYPE_CHECKING:
    from ..data.data_structures import Enemy, Item
    from ...game.managers.log_manager import LogLevel


class EventType(Enum):
    """Types of game events that managers can subscribe to."""
    # Combat Events
    COMBAT_STARTED = auto()
    COMBAT_ROUND_RESOLVED = auto()
    ENEMY_DEFEATED = auto()
    CHARACTER_DEFEATED = auto()
    CHARACTER_FLED = auto()
    LOOT_DROPPED = auto()

    # Progression Events
    CHARACTER_LEVELED_UP = auto()

    # Quest Events
    QUEST_ACCEPTED = auto()
    QUEST_OBJECTIVE_UPDATED = auto()
    QUEST_COMPLETED = auto()
    REWARDS_CLAIMED = auto()

    # Logging Events
    LOG_MESSAGE = auto()


@dataclass(frozen=True)
class GameEvent(ABC):
    """Base class for all game events."""
    character_id: str
    event_type: EventType = field(init=False)


@dataclass(frozen=True)
class CombatStarted(GameEvent):
    """Event emitted when an encounter begins."""
    encounter_id: str
    enemy: "Enemy"

    def __post_init__(self):
        # Set event_type since dataclass frozen=True prevents normal assignment
        object.__setattr__(self, 'event_type', EventType.COMBAT_STARTED)


@dataclass(frozen=True)
class CombatRoundResolved(GameEvent):
    """Event emitted after each combat round."""
    encounter_id: str
    round_number: int
    log: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.COMBAT_ROUND_RESOLVED)


@dataclass(frozen=True)
class EnemyDefeated(GameEvent):
    """Event emitted when the character wins an encounter."""
    encounter_id: str
    enemy: "Enemy"
    experience_gained: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ENEMY_DEFEATED)


@dataclass(frozen=True)
class CharacterDefeated(GameEvent):
    """Event emitted when the character loses an encounter."""
    encounter_id: str
    enemy_name: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.CHARACTER_DEFEATED)


@dataclass(frozen=True)
class CharacterFled(GameEvent):
    """Event emitted when the character escapes an encounter."""
    encounter_id: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.CHARACTER_FLED)


@dataclass(frozen=True)
class LootDropped(GameEvent):
    """Event emitted when a defeated enemy drops items."""
    items: tuple["Item", ...]

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.LOOT_DROPPED)


@dataclass(frozen=True)
class CharacterLeveledUp(GameEvent):
    """Event emitted once per level gained."""
    new_level: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.CHARACTER_LEVELED_UP)


@dataclass(frozen=True)
class QuestAccepted(GameEvent):
    """Event emitted when a quest moves to in-progress."""
    quest_id: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.QUEST_ACCEPTED)


@dataclass(frozen=True)
class QuestObjectiveUpdated(GameEvent):
    """Event emitted when an objective counter changes."""
    quest_id: str
    objective_id: str
    current: int
    required: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.QUEST_OBJECTIVE_UPDATED)


@dataclass(frozen=True)
class QuestCompleted(GameEvent):
    """Event emitted when every objective of a quest is met."""
    quest_id: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.QUEST_COMPLETED)


@dataclass(frozen=True)
class RewardsClaimed(GameEvent):
    """Event emitted when quest rewards are paid out."""
    quest_id: str
    experience: int
    gold: int
    item_names: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.REWARDS_CLAIMED)


@dataclass(frozen=True)
class LogMessage(GameEvent):
    """Event emitted when a log message is created."""
    message: str
    category: str
    level: "LogLevel"
    source: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.LOG_MESSAGE)

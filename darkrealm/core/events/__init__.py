"""Event system for publisher-subscriber communication.

This package contains the event-driven reporting layer:
- event_manager.py: publisher-subscriber event routing
- events.py: event definitions emitted by the service layer
"""

from .event_manager import EventManager, EventSubscriber, PendingEvent
from .events import (
    GameEvent,
    EventType,
    CombatStarted,
    CombatRoundResolved,
    EnemyDefeated,
    CharacterDefeated,
    CharacterFled,
    LootDropped,
    CharacterLeveledUp,
    QuestAccepted,
    QuestObjectiveUpdated,
    QuestCompleted,
    RewardsClaimed,
    LogMessage,
)

__all__ = [
    "EventManager",
    "EventSubscriber",
    "PendingEvent",
    "GameEvent",
    "EventType",
    "CombatStarted",
    "CombatRoundResolved",
    "EnemyDefeated",
    "CharacterDefeated",
    "CharacterFled",
    "LootDropped",
    "CharacterLeveledUp",
    "QuestAccepted",
    "QuestObjectiveUpdated",
    "QuestCompleted",
    "RewardsClaimed",
    "LogMessage",
]

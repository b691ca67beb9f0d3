"""
Log management for game messages and debugging.

The rules core never writes output. The service publishes LogMessage and
domain events through the EventManager; this manager subscribes, turns them
into categorized entries and keeps a bounded buffer for display or saving.
"""
import os
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Optional

from ...core.events import (
    CharacterDefeated,
    CharacterFled,
    CharacterLeveledUp,
    CombatRoundResolved,
    CombatStarted,
    EnemyDefeated,
    EventType,
    GameEvent,
    LogMessage,
    LootDropped,
    QuestAccepted,
    QuestCompleted,
    QuestObjectiveUpdated,
    RewardsClaimed,
)

if TYPE_CHECKING:
    from ...core.events.event_manager import EventManager


class LogCategory(Enum):
    """Categories for log messages."""
    SYSTEM = auto()       # Initialization, loading
    COMBAT = auto()       # Encounters and rounds
    LOOT = auto()         # Item drops
    PROGRESSION = auto()  # Experience and level-ups
    QUEST = auto()        # Quest lifecycle
    ECONOMY = auto()      # Buying, selling, equipment
    DEBUG = auto()
    WARNING = auto()
    ERROR = auto()


CATEGORY_TAGS = {
    LogCategory.SYSTEM: "SYS",
    LogCategory.COMBAT: "CBT",
    LogCategory.LOOT: "LOT",
    LogCategory.PROGRESSION: "PRG",
    LogCategory.QUEST: "QST",
    LogCategory.ECONOMY: "ECO",
    LogCategory.DEBUG: "DBG",
    LogCategory.WARNING: "WRN",
    LogCategory.ERROR: "ERR",
}


class LogLevel(Enum):
    """Log levels for filtering."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass
class LogEntry:
    """A single log line with metadata."""
    text: str
    category: LogCategory
    level: LogLevel = LogLevel.INFO
    character_id: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self, include_timestamp: bool = False, include_category: bool = True) -> str:
        parts = []
        if include_timestamp:
            parts.append(f"[{self.timestamp.strftime('%H:%M:%S')}]")
        if include_category:
            parts.append(f"[{CATEGORY_TAGS.get(self.category, '???')}]")
        parts.append(self.text)
        return " ".join(parts)


class LogManager:
    """Collects game log entries from the event bus with category and level filtering."""

    def __init__(
        self,
        event_manager: "EventManager",
        max_messages: int = 1000,
        default_level: LogLevel = LogLevel.INFO
    ):
        """Initialize the log manager.

        Args:
            event_manager: Event manager to subscribe to (required)
            max_messages: Maximum number of entries kept in the buffer
            default_level: Minimum level returned by get_messages
        """
        self.messages: deque[LogEntry] = deque(maxlen=max_messages)
        self.log_level = default_level
        self.enabled_categories = set(LogCategory)
        self.event_manager = event_manager

        self._formatters: dict[EventType, Callable[[GameEvent], Optional[LogEntry]]] = {
            EventType.LOG_MESSAGE: self._from_log_message,
            EventType.COMBAT_STARTED: self._from_combat_started,
            EventType.COMBAT_ROUND_RESOLVED: self._from_round,
            EventType.ENEMY_DEFEATED: self._from_enemy_defeated,
            EventType.CHARACTER_DEFEATED: self._from_character_defeated,
            EventType.CHARACTER_FLED: self._from_fled,
            EventType.LOOT_DROPPED: self._from_loot,
            EventType.CHARACTER_LEVELED_UP: self._from_level_up,
            EventType.QUEST_ACCEPTED: self._from_quest_accepted,
            EventType.QUEST_OBJECTIVE_UPDATED: self._from_objective,
            EventType.QUEST_COMPLETED: self._from_quest_completed,
            EventType.REWARDS_CLAIMED: self._from_rewards,
        }
        self._setup_event_subscriptions()

    def _setup_event_subscriptions(self) -> None:
        for event_type in self._formatters:
            self.event_manager.subscribe(
                event_type,
                self._handle_event,
                subscriber_name=f"LogManager.{event_type.name.lower()}"
            )

    def _handle_event(self, event: GameEvent) -> None:
        formatter = self._formatters.get(event.event_type)
        if formatter is None:
            return
        entry = formatter(event)
        if entry is not None:
            self.messages.append(entry)

    # Event formatters

    def _from_log_message(self, event: LogMessage) -> LogEntry:
        try:
            category = LogCategory[event.category.upper()]
        except (KeyError, AttributeError):
            category = LogCategory.SYSTEM
        level = event.level if isinstance(event.level, LogLevel) else LogLevel.INFO
        return LogEntry(f"[{event.source}] {event.message}" if level == LogLevel.DEBUG else event.message,
                        category, level, event.character_id)

    def _from_combat_started(self, event: CombatStarted) -> LogEntry:
        enemy = event.enemy
        return LogEntry(f"A level {enemy.level} {enemy.name} appears!", LogCategory.COMBAT,
                        character_id=event.character_id)

    def _from_round(self, event: CombatRoundResolved) -> LogEntry:
        return LogEntry(f"Round {event.round_number}: " + " ".join(event.log), LogCategory.COMBAT,
                        LogLevel.DEBUG, event.character_id)

    def _from_enemy_defeated(self, event: EnemyDefeated) -> LogEntry:
        return LogEntry(f"{event.enemy.name} defeated (+{event.experience_gained} XP)", LogCategory.COMBAT,
                        character_id=event.character_id)

    def _from_character_defeated(self, event: CharacterDefeated) -> LogEntry:
        return LogEntry(f"Slain by {event.enemy_name}", LogCategory.COMBAT, LogLevel.WARNING, event.character_id)

    def _from_fled(self, event: CharacterFled) -> LogEntry:
        return LogEntry("Fled from combat", LogCategory.COMBAT, character_id=event.character_id)

    def _from_loot(self, event: LootDropped) -> Optional[LogEntry]:
        if not event.items:
            return None
        names = ", ".join(f"{item.name} ({item.rarity.value})" for item in event.items)
        return LogEntry(f"Loot: {names}", LogCategory.LOOT, character_id=event.character_id)

    def _from_level_up(self, event: CharacterLeveledUp) -> LogEntry:
        return LogEntry(f"Reached level {event.new_level}", LogCategory.PROGRESSION,
                        character_id=event.character_id)

    def _from_quest_accepted(self, event: QuestAccepted) -> LogEntry:
        return LogEntry(f"Quest accepted: {event.quest_id}", LogCategory.QUEST, character_id=event.character_id)

    def _from_objective(self, event: QuestObjectiveUpdated) -> LogEntry:
        return LogEntry(f"{event.quest_id}/{event.objective_id}: {event.current}/{event.required}",
                        LogCategory.QUEST, LogLevel.DEBUG, event.character_id)

    def _from_quest_completed(self, event: QuestCompleted) -> LogEntry:
        return LogEntry(f"Quest completed: {event.quest_id}", LogCategory.QUEST, character_id=event.character_id)

    def _from_rewards(self, event: RewardsClaimed) -> LogEntry:
        text = f"Rewards for {event.quest_id}: {event.experience} XP, {event.gold} gold"
        if event.item_names:
            text += ", " + ", ".join(event.item_names)
        return LogEntry(text, LogCategory.QUEST, character_id=event.character_id)

    # Direct logging

    def log(
        self,
        text: str,
        category: LogCategory = LogCategory.SYSTEM,
        level: LogLevel = LogLevel.INFO
    ) -> None:
        self.messages.append(LogEntry(text=text, category=category, level=level))

    def system(self, text: str) -> None:
        self.log(text, LogCategory.SYSTEM)

    def debug(self, text: str) -> None:
        self.log(text, LogCategory.DEBUG, LogLevel.DEBUG)

    def warning(self, text: str) -> None:
        self.log(text, LogCategory.WARNING, LogLevel.WARNING)

    def error(self, text: str) -> None:
        self.log(text, LogCategory.ERROR, LogLevel.ERROR)

    def get_messages(
        self,
        count: Optional[int] = None,
        categories: Optional[set[LogCategory]] = None,
        character_id: Optional[str] = None
    ) -> list[LogEntry]:
        """Get recent entries that pass the level and category filters.

        Args:
            count: Maximum number of entries to return (None for all)
            categories: Categories to include (None for all enabled)
            character_id: Only entries about this character

        Returns:
            Oldest-first list of the most recent matching entries
        """
        wanted = categories if categories is not None else self.enabled_categories
        filtered = [
            entry for entry in self.messages
            if entry.category in wanted
            and entry.category in self.enabled_categories
            and entry.level.value >= self.log_level.value
            and (character_id is None or entry.character_id == character_id)
        ]
        if count is not None and count < len(filtered):
            return filtered[-count:]
        return filtered

    def clear(self) -> None:
        self.messages.clear()

    def enable_category(self, category: LogCategory) -> None:
        self.enabled_categories.add(category)

    def disable_category(self, category: LogCategory) -> None:
        self.enabled_categories.discard(category)

    def set_log_level(self, level: LogLevel) -> None:
        self.log_level = level

    def is_debug_enabled(self) -> bool:
        return LogCategory.DEBUG in self.enabled_categories and self.log_level == LogLevel.DEBUG

    def toggle_debug(self) -> None:
        """Toggle debug message visibility."""
        if self.is_debug_enabled():
            self.set_log_level(LogLevel.INFO)
        else:
            self.enable_category(LogCategory.DEBUG)
            self.set_log_level(LogLevel.DEBUG)

    def save_log_to_file(self, log_dir: str = "logs") -> Optional[str]:
        """Write every buffered entry, ignoring filters, to a timestamped file.

        Returns:
            Path of the written file, or None if it could not be written
        """
        filepath = os.path.join(log_dir, f"log_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log")
        try:
            os.makedirs(log_dir, exist_ok=True)
            with open(filepath, "w", encoding="utf-8") as f:
                f.write("Dark Realm - Game Log\n")
                f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
                f.write("=" * 60 + "\n\n")
                if not self.messages:
                    f.write("No messages to save.\n")
                for entry in self.messages:
                    timestamp = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
                    f.write(f"[{timestamp}] [{entry.category.name}] [{entry.level.name}] {entry.text}\n")
        except OSError as e:
            self.error(f"Failed to save log file: {e}")
            return None

        self.system(f"Game log saved to {filepath}")
        return filepath

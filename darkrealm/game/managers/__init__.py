"""Manager systems for service coordination.

This package contains the classes that sit between callers and the pure
rules core: the game service and the event-driven log manager.
"""

from .game_service import CharacterRepository, GameService, InMemoryCharacterRepository
from .log_manager import LogCategory, LogEntry, LogLevel, LogManager

__all__ = [
    "CharacterRepository",
    "GameService",
    "InMemoryCharacterRepository",
    "LogCategory",
    "LogEntry",
    "LogLevel",
    "LogManager",
]

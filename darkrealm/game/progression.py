"""
Progression system: experience curve, level-ups and derived resource caps.

The experience curve is ``base * level**2``. Experience past a threshold
carries over into the next level, and a single large grant can cross several
thresholds in one call.
"""
from dataclasses import dataclass, replace
from typing import Optional

import numpy as np

from ..core.config import GameRules
from ..core.data import STAT_NAMES, Character, Resource, Stats, get_class_info, validate_stats
from ..core.errors import InvalidInputError


@dataclass(frozen=True)
class ProgressionResult:
    """Outcome of granting experience."""
    character: Character
    levels_gained: int = 0


class ProgressionEngine:
    """Level-dependent derived values and experience accounting."""

    def __init__(self, rules: Optional[GameRules] = None):
        self.rules = rules or GameRules()

    def experience_required(self, level: int) -> int:
        """Experience needed to advance past ``level``."""
        if isinstance(level, bool) or not isinstance(level, int) or level < 1:
            raise InvalidInputError(f"Level must be at least 1, got {level!r}")
        return self.rules.progression.experience_base * level * level

    @staticmethod
    def max_health(stats: Stats) -> int:
        validate_stats(stats)
        return 100 + stats.vitality * 10

    @staticmethod
    def max_energy(stats: Stats) -> int:
        validate_stats(stats)
        return 50 + stats.intelligence * 5 + stats.vitality * 2

    @staticmethod
    def stat_growth(stats: Stats, new_level: int, character_class: str) -> Stats:
        """Apply one level of class growth.

        A factor ``f`` grants ``floor(f*(L-1)) - floor(f*(L-2))`` points when
        reaching level ``L``, so fractional factors accumulate across levels.
        Unknown classes grow with the balanced table.

        Args:
            stats: Stats before the level-up
            new_level: The level being reached (at least 2)
            character_class: Class name or thematic alias

        Returns:
            New stats, never lower than the input
        """
        validate_stats(stats)
        if isinstance(new_level, bool) or not isinstance(new_level, int) or new_level < 2:
            raise InvalidInputError(f"Growth applies from level 2 upward, got {new_level!r}")

        growth = get_class_info(character_class).growth
        factors = np.array([growth[name] for name in STAT_NAMES], dtype=np.float64)
        current = np.array([getattr(stats, name) for name in STAT_NAMES], dtype=np.int64)

        # Rounding guards against 0.1-style float drift just below an integer
        reached = np.floor(np.round(factors * (new_level - 1), 9))
        previous = np.floor(np.round(factors * (new_level - 2), 9))
        gains = np.maximum(0, reached - previous).astype(np.int64)

        return Stats(**{name: int(value) for name, value in zip(STAT_NAMES, current + gains)})

    def level_up(self, character: Character) -> Character:
        """Advance one level: grow stats and refill health/energy to the new caps."""
        new_level = character.level + 1
        new_stats = self.stat_growth(character.stats, new_level, character.character_class)
        energy = character.energy
        if energy is not None:
            energy = Resource.full(self.max_energy(new_stats))

        return replace(
            character,
            level=new_level,
            stats=new_stats,
            health=Resource.full(self.max_health(new_stats)),
            energy=energy,
        )

    def grant_experience(self, character: Character, amount: int) -> ProgressionResult:
        """Add experience, levelling up as many times as the total allows.

        Raises:
            InvalidInputError: If amount is negative or not an integer
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise InvalidInputError(f"Experience amount must be a non-negative integer, got {amount!r}")

        experience = character.experience + amount
        updated = replace(character, experience=experience)
        levels_gained = 0

        required = self.experience_required(updated.level)
        while updated.experience >= required:
            remainder = updated.experience - required
            updated = replace(self.level_up(updated), experience=remainder)
            levels_gained += 1
            required = self.experience_required(updated.level)

        return ProgressionResult(updated, levels_gained)

    def add_experience(self, character: Character, amount: int) -> Character:
        """Add experience and return the updated character."""
        return self.grant_experience(character, amount).character

    def experience_to_next_level(self, character: Character) -> int:
        return self.experience_required(character.level) - character.experience

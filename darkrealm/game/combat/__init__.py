"""Combat system components.

This package contains the core combat logic with clear separation of concerns:
- battle_calculator.py: hit chance, damage and flee formulas (read-only)
- combat_resolver.py: encounter state machine and round resolution
"""

from .battle_calculator import BattleCalculator, BattleForecast
from .combat_resolver import CombatResolver, CombatResult, Encounter, FleeResult

__all__ = [
    "BattleCalculator",
    "BattleForecast",
    "CombatResolver",
    "CombatResult",
    "Encounter",
    "FleeResult",
]

"""
Battle calculation system: hit chance, damage and flee formulas.

This module holds the read-only combat formulas, separate from encounter
resolution, so the UI can show forecasts without touching game state.
"""
import math
from dataclasses import dataclass
from typing import Iterable, Optional

from ...core.config import GameRules
from ...core.data import Character, Combatant, EffectType, Enemy, ItemEffect, validate_stats
from ...core.errors import InvalidInputError
from ...core.rng import RandomSource, roll_percent


@dataclass(frozen=True)
class BattleForecast:
    """Predicted outcome of one exchange, for display."""
    hit_chance: float
    damage: int
    enemy_hit_chance: float
    enemy_damage: int


class BattleCalculator:
    """Calculates hit chances and damage between characters and enemies."""

    def __init__(self, rules: Optional[GameRules] = None):
        self.rules = rules or GameRules()

    @staticmethod
    def _agility(combatant: Combatant) -> int:
        # Enemies have no agility stat
        if isinstance(combatant, Character):
            return validate_stats(combatant.effective_stats()).agility
        return 0

    def hit_chance(self, attacker: Combatant, defender: Combatant) -> float:
        """Percentage chance that an attack lands, clamped to the configured bounds."""
        combat = self.rules.combat
        agility_diff = self._agility(attacker) - self._agility(defender)
        chance = combat.base_hit_chance + agility_diff * combat.hit_chance_per_agility
        return max(combat.min_hit_chance, min(combat.max_hit_chance, chance))

    def calculate_damage(
        self,
        attacker: Combatant,
        defender: Combatant,
        base_damage: float,
        effects: Iterable[ItemEffect] = ()
    ) -> int:
        """
        Calculate damage dealt by one hit.

        Formula: base * (1 + strength * k1) * (1 - defense * k2), then each buff
        multiplies by (1 + value) and each debuff by (1 - value). The result is
        floored and never below 1.

        Args:
            attacker: Character (strength applies) or enemy (flat damage)
            defender: Character (vitality mitigates) or enemy (defense mitigates)
            base_damage: Damage before modifiers
            effects: Skill or item effects; only buff and debuff matter here

        Returns:
            Final damage, at least 1

        Raises:
            InvalidInputError: For negative base damage, negative defense or
                negative effect values
        """
        if base_damage < 0:
            raise InvalidInputError("Base damage cannot be negative")
        combat = self.rules.combat

        damage = float(base_damage)
        if isinstance(attacker, Character):
            strength = validate_stats(attacker.effective_stats()).strength
            damage *= 1 + strength * combat.strength_coefficient

        if isinstance(defender, Character):
            mitigation = validate_stats(defender.effective_stats()).vitality
        elif isinstance(defender, Enemy):
            if defender.defense < 0:
                raise InvalidInputError("Defense cannot be negative")
            mitigation = defender.defense
        else:
            raise InvalidInputError(f"Invalid defender: {defender!r}")
        damage *= 1 - mitigation * combat.defense_coefficient

        for effect in effects:
            if effect.value < 0:
                raise InvalidInputError("Effect value cannot be negative")
            if effect.effect_type == EffectType.BUFF:
                damage *= 1 + effect.value
            elif effect.effect_type == EffectType.DEBUFF:
                damage *= 1 - effect.value

        # Rounding guards against float drift just below an integer
        return max(1, math.floor(round(damage, 9)))

    def flee_chance(self, character: Character) -> float:
        combat = self.rules.combat
        agility = self._agility(character)
        chance = combat.base_flee_chance + agility * combat.flee_chance_per_agility
        return max(0.0, min(100.0, chance))

    @staticmethod
    def roll(chance: float, rng: RandomSource) -> bool:
        """True when a percentage roll lands at or under ``chance``."""
        return roll_percent(rng) <= chance

    def calculate_forecast(
        self,
        character: Character,
        enemy: Enemy,
        base_damage: Optional[float] = None,
        effects: Iterable[ItemEffect] = ()
    ) -> BattleForecast:
        """Hit chances and damage for both sides of one round."""
        if base_damage is None:
            base_damage = self.rules.combat.default_skill_damage
        return BattleForecast(
            hit_chance=self.hit_chance(character, enemy),
            damage=self.calculate_damage(character, enemy, base_damage, effects),
            enemy_hit_chance=self.hit_chance(enemy, character),
            enemy_damage=self.calculate_damage(enemy, character, enemy.damage),
        )

"""
Combat resolution system for turn-based encounters.

This module runs the encounter state machine: each round the character acts
with a skill, then a surviving enemy strikes back. Victory hands out loot and
experience; defeat ends the encounter with no rewards. All functions take
snapshots and return new ones.
"""
import math
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from ...core.config import GameRules
from ...core.data import Character, CombatSkill, CombatState, Enemy, Item
from ...core.errors import InvalidInputError, InvalidStateTransitionError, NotFoundError
from ...core.rng import IdSource, RandomSource, UuidIdSource, pick_index
from ..loot import LootGenerator
from ..progression import ProgressionEngine
from .battle_calculator import BattleCalculator


@dataclass(frozen=True)
class Encounter:
    """One combat session between a character and a single enemy."""
    id: str
    character_id: str
    enemy: Enemy
    state: CombatState = CombatState.NOT_STARTED
    round_number: int = 0

    @property
    def is_over(self) -> bool:
        return self.state.is_terminal


@dataclass(frozen=True)
class CombatResult:
    """Result of one combat round."""
    character: Character
    enemy: Enemy
    encounter: Encounter
    log: tuple[str, ...]
    is_over: bool = False
    victory: bool = False
    loot: tuple[Item, ...] = ()
    experience_gained: int = 0
    levels_gained: int = 0
    damage_dealt: int = 0
    damage_taken: int = 0


@dataclass(frozen=True)
class FleeResult:
    """Result of an attempt to escape."""
    success: bool
    character: Character
    encounter: Encounter
    log: tuple[str, ...]
    damage_taken: int = 0


class CombatResolver:
    """Handles encounter setup and round resolution."""

    def __init__(
        self,
        rules: Optional[GameRules] = None,
        progression: Optional[ProgressionEngine] = None,
        loot_generator: Optional[LootGenerator] = None,
        id_source: Optional[IdSource] = None
    ):
        self.rules = rules or GameRules()
        self.id_source = id_source or UuidIdSource()
        self.calculator = BattleCalculator(self.rules)
        self.progression = progression or ProgressionEngine(self.rules)
        self.loot_generator = loot_generator or LootGenerator(self.rules, self.id_source)

    # Enemy generation

    def generate_enemy(self, level: int, rng: RandomSource) -> Enemy:
        """
        Generate an enemy scaled to ``level``.

        Base health/damage/defense/experience are multiplied by
        ``1 + level * level_multiplier`` and floored.

        Raises:
            InvalidInputError: If level is below 1
        """
        if isinstance(level, bool) or not isinstance(level, int) or level < 1:
            raise InvalidInputError("Enemy level must be at least 1")

        enemy_rules = self.rules.enemy
        multiplier = 1 + level * enemy_rules.level_multiplier

        def scaled(base: int) -> int:
            return math.floor(round(base * multiplier, 9))

        health = scaled(enemy_rules.base_health)
        return Enemy(
            id=self.id_source.next_id("enemy"),
            name=self.generate_enemy_name(rng),
            level=level,
            health=health,
            max_health=health,
            damage=scaled(enemy_rules.base_damage),
            defense=scaled(enemy_rules.base_defense),
            experience=scaled(enemy_rules.base_experience),
        )

    def generate_enemy_name(self, rng: RandomSource) -> str:
        prefixes = self.rules.enemy.name_prefixes
        types = self.rules.enemy.name_types
        prefix = prefixes[pick_index(rng, len(prefixes))]
        kind = types[pick_index(rng, len(types))]
        return f"{prefix} {kind}"

    def pick_enemy(self, level: int, rng: RandomSource, candidates: Sequence[Enemy] = ()) -> Enemy:
        """Choose a catalog enemy near ``level``, or generate one if none fits.

        The chosen template is copied with a fresh instance id and full health.
        """
        if isinstance(level, bool) or not isinstance(level, int) or level < 1:
            raise InvalidInputError("Enemy level must be at least 1")

        level_range = self.rules.enemy.catalog_level_range
        eligible = [enemy for enemy in candidates if abs(enemy.level - level) <= level_range]
        if not eligible:
            return self.generate_enemy(level, rng)

        template = eligible[pick_index(rng, len(eligible))]
        return replace(template, id=self.id_source.next_id("enemy"), health=template.max_health)

    # Encounter lifecycle

    def start_encounter(self, character: Character, enemy: Enemy) -> Encounter:
        """Open an encounter against a given enemy."""
        if not character.is_alive:
            raise InvalidStateTransitionError(f"{character.name} cannot fight while defeated")
        if enemy.is_defeated:
            raise InvalidStateTransitionError(f"{enemy.name} is already defeated")
        return Encounter(
            id=self.id_source.next_id("encounter"),
            character_id=character.id,
            enemy=enemy,
            state=CombatState.IN_PROGRESS,
        )

    def initiate_combat(self, character: Character, rng: RandomSource, level: Optional[int] = None) -> Encounter:
        """Generate an enemy for ``level`` (default: the character's level) and start fighting."""
        enemy = self.generate_enemy(level if level is not None else character.level, rng)
        return self.start_encounter(character, enemy)

    def _check_can_act(self, encounter: Encounter, character: Character) -> None:
        if encounter.state != CombatState.IN_PROGRESS:
            raise InvalidStateTransitionError(
                f"Encounter {encounter.id} is {encounter.state.name.lower()}, not in progress"
            )
        if character.id != encounter.character_id:
            raise InvalidInputError(f"Character {character.id} is not part of encounter {encounter.id}")
        if not character.is_alive:
            raise InvalidStateTransitionError(f"{character.name} cannot act while defeated")

    # Round resolution

    def resolve_action(
        self,
        encounter: Encounter,
        character: Character,
        skill_id: str,
        rng: RandomSource
    ) -> CombatResult:
        """
        Resolve one round: the character uses a skill, then the enemy answers.

        Args:
            encounter: An in-progress encounter
            character: The acting character snapshot
            skill_id: Id of one of the character's skills
            rng: Source for hit and loot rolls

        Returns:
            CombatResult with updated snapshots and the round's log

        Raises:
            InvalidStateTransitionError: If the encounter is over or the
                character is defeated
            NotFoundError: If the character has no such skill
            InvalidInputError: If the skill costs more energy than available
        """
        self._check_can_act(encounter, character)
        skill = character.get_skill(skill_id)
        if skill is None:
            raise NotFoundError("skill", skill_id)

        character = self._pay_energy(character, skill)
        enemy = encounter.enemy
        log: list[str] = []
        damage_dealt = 0

        if skill.healing:
            healed = character.health.with_current(character.health.current + skill.healing)
            log.append(f"{character.name} recovers {healed.current - character.health.current} health.")
            character = replace(character, health=healed)

        if skill.damage is None or skill.damage > 0:
            if self.calculator.roll(self.calculator.hit_chance(character, enemy), rng):
                base_damage = skill.damage if skill.damage is not None else self.rules.combat.default_skill_damage
                damage_dealt = self.calculator.calculate_damage(character, enemy, base_damage, skill.effects)
                enemy = enemy.with_health(enemy.health - damage_dealt)
                log.append(f"{character.name} uses {skill.name} for {damage_dealt} damage!")
            else:
                log.append(f"{character.name}'s {skill.name} missed!")

        round_number = encounter.round_number + 1
        if enemy.is_defeated:
            return self._resolve_victory(encounter, character, enemy, round_number, log, rng, damage_dealt)

        character, damage_taken = self._enemy_turn(character, enemy, log, rng)
        state = CombatState.IN_PROGRESS
        if not character.is_alive:
            log.append(f"{character.name} has been defeated!")
            state = CombatState.DEFEAT

        updated_encounter = replace(encounter, enemy=enemy, state=state, round_number=round_number)
        return CombatResult(
            character=character,
            enemy=enemy,
            encounter=updated_encounter,
            log=tuple(log),
            is_over=state.is_terminal,
            victory=False,
            damage_dealt=damage_dealt,
            damage_taken=damage_taken,
        )

    def resolve_combat_round(
        self,
        character: Character,
        enemy: Enemy,
        skill_id: str,
        rng: RandomSource
    ) -> CombatResult:
        """Resolve a single round without a stored encounter."""
        encounter = self.start_encounter(character, enemy)
        return self.resolve_action(encounter, character, skill_id, rng)

    def flee(self, encounter: Encounter, character: Character, rng: RandomSource) -> FleeResult:
        """
        Try to escape. On failure the enemy gets an immediate attack.

        Returns:
            FleeResult; the encounter is FLED on success, DEFEAT if the free
            attack kills the character, otherwise still in progress
        """
        self._check_can_act(encounter, character)

        if self.calculator.roll(self.calculator.flee_chance(character), rng):
            return FleeResult(
                success=True,
                character=character,
                encounter=replace(encounter, state=CombatState.FLED),
                log=("You successfully fled from combat!",),
            )

        log = ["Failed to flee from combat!"]
        character, damage_taken = self._enemy_turn(character, encounter.enemy, log, rng)
        state = CombatState.IN_PROGRESS
        if not character.is_alive:
            log.append(f"{character.name} has been defeated!")
            state = CombatState.DEFEAT

        return FleeResult(
            success=False,
            character=character,
            encounter=replace(encounter, state=state, round_number=encounter.round_number + 1),
            log=tuple(log),
            damage_taken=damage_taken,
        )

    def _pay_energy(self, character: Character, skill: CombatSkill) -> Character:
        if character.energy is None or skill.energy_cost == 0:
            return character
        if character.energy.current < skill.energy_cost:
            raise InvalidInputError(
                f"{skill.name} needs {skill.energy_cost} energy, {character.name} has {character.energy.current}"
            )
        return replace(character, energy=character.energy.with_current(character.energy.current - skill.energy_cost))

    def _enemy_turn(
        self,
        character: Character,
        enemy: Enemy,
        log: list[str],
        rng: RandomSource
    ) -> tuple[Character, int]:
        """The enemy attacks once. Returns the updated character and damage taken."""
        if not self.calculator.roll(self.calculator.hit_chance(enemy, character), rng):
            log.append(f"{enemy.name}'s attack missed!")
            return character, 0

        damage = self.calculator.calculate_damage(enemy, character, enemy.damage)
        health = character.health.with_current(character.health.current - damage)
        log.append(f"{enemy.name} attacks for {damage} damage!")
        return replace(character, health=health), damage

    def _resolve_victory(
        self,
        encounter: Encounter,
        character: Character,
        enemy: Enemy,
        round_number: int,
        log: list[str],
        rng: RandomSource,
        damage_dealt: int
    ) -> CombatResult:
        log.append(f"{enemy.name} has been defeated!")

        loot = self.loot_generator.generate_loot(enemy, rng)
        if loot:
            log.append("You found:")
            log.extend(f"- {item.name}" for item in loot)
            character = replace(character, inventory=character.inventory + loot)
        else:
            log.append("No loot was found.")

        progression = self.progression.grant_experience(character, enemy.experience)
        character = progression.character
        log.append(f"{character.name} gains {enemy.experience} experience.")
        if progression.levels_gained:
            log.append(f"{character.name} reached level {character.level}!")

        return CombatResult(
            character=character,
            enemy=enemy,
            encounter=replace(encounter, enemy=enemy, state=CombatState.VICTORY, round_number=round_number),
            log=tuple(log),
            is_over=True,
            victory=True,
            loot=loot,
            experience_gained=enemy.experience,
            levels_gained=progression.levels_gained,
            damage_dealt=damage_dealt,
        )

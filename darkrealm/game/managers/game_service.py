"""
Game service: the single entry point shared by HTTP handlers and offline play.

Each action loads a character snapshot, runs a pure rules operation, writes
the result back and publishes events. Actions on the same character are
serialized with a per-character lock, so at most one mutating action per
character is in flight at a time.
"""
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Iterator, Optional, Protocol

from ...core.config import GameRules, load_default_rules
from ...core.data import Character, EquipmentSlot, ObjectiveType, Quest, QuestProgress, QuestStatus
from ...core.events import (
    CharacterDefeated,
    CharacterFled,
    CharacterLeveledUp,
    CombatRoundResolved,
    CombatStarted,
    EnemyDefeated,
    EventManager,
    LogMessage,
    LootDropped,
    QuestAccepted,
    QuestCompleted,
    QuestObjectiveUpdated,
    RewardsClaimed,
)
from ...core.errors import InvalidStateTransitionError, NotFoundError
from ...core.rng import IdSource, RandomSource, UuidIdSource, create_rng
from ..catalog import GameCatalog
from ..character_factory import CharacterFactory
from ..combat import CombatResolver, CombatResult, Encounter, FleeResult
from ..inventory import InventoryManager
from ..loot import LootGenerator
from ..progression import ProgressionEngine
from ..quests import ClaimResult, QuestTracker
from .log_manager import LogLevel


class CharacterRepository(Protocol):
    """Storage for character snapshots."""

    def get(self, character_id: str) -> Character:
        """Return the stored snapshot or raise NotFoundError."""
        ...

    def put(self, character: Character) -> None:
        ...


class InMemoryCharacterRepository:
    """Dict-backed repository for offline play and tests."""

    def __init__(self):
        self._characters: dict[str, Character] = {}
        self._lock = threading.Lock()

    def get(self, character_id: str) -> Character:
        with self._lock:
            try:
                return self._characters[character_id]
            except KeyError:
                raise NotFoundError("character", character_id)

    def put(self, character: Character) -> None:
        with self._lock:
            self._characters[character.id] = character

    def __len__(self) -> int:
        return len(self._characters)


@dataclass
class _CharacterLock:
    lock: threading.RLock = field(default_factory=threading.RLock)
    users: int = 0


class GameService:
    """Coordinates repository, rules core and event publishing."""

    def __init__(
        self,
        repository: Optional[CharacterRepository] = None,
        rules: Optional[GameRules] = None,
        catalog: Optional[GameCatalog] = None,
        event_manager: Optional[EventManager] = None,
        rng: Optional[RandomSource] = None,
        id_source: Optional[IdSource] = None
    ):
        self.repository = repository if repository is not None else InMemoryCharacterRepository()
        self.rules = rules or load_default_rules()
        self.id_source = id_source or UuidIdSource()
        self.catalog = catalog or GameCatalog.load_from_file(id_source=self.id_source)
        self.event_manager = event_manager or EventManager()
        self.rng = rng if rng is not None else create_rng()

        self.progression = ProgressionEngine(self.rules)
        self.combat = CombatResolver(
            self.rules,
            self.progression,
            LootGenerator(self.rules, self.id_source),
            self.id_source,
        )
        self.quests = QuestTracker(self.progression, self.catalog)
        self.inventory = InventoryManager(self.rules)
        self.factory = CharacterFactory(self.rules, self.catalog)

        self._encounters: dict[str, Encounter] = {}
        self._locks: dict[str, _CharacterLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _character_lock(self, character_id: str) -> Iterator[None]:
        """Hold the character's lock; it is discarded once no action holds or awaits it."""
        with self._locks_guard:
            entry = self._locks.get(character_id)
            if entry is None:
                entry = self._locks[character_id] = _CharacterLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[character_id]

    def _emit_log(self, message: str, character_id: str, category: str = "SYSTEM",
                  level: LogLevel = LogLevel.INFO) -> None:
        self.event_manager.publish(
            LogMessage(character_id=character_id, message=message, category=category, level=level,
                       source="GameService"),
            source="GameService"
        )

    def _flush_events(self, character_id: str) -> None:
        self.event_manager.process_events(character_id)

    # Characters

    def create_character(self, name: str, character_class: str) -> Character:
        character = self.factory.create(name, character_class, self.id_source)
        self.repository.put(character)
        self._emit_log(f"{character.name} the {character.character_class} enters the realm", character.id)
        self._flush_events(character.id)
        return character

    def get_character(self, character_id: str) -> Character:
        return self.repository.get(character_id)

    def rest(self, character_id: str) -> Character:
        """Refill health and energy outside combat."""
        with self._character_lock(character_id):
            self._require_no_combat(character_id)
            character = self.repository.get(character_id)
            energy = character.energy.refill() if character.energy is not None else None
            character = replace(character, health=character.health.refill(), energy=energy)
            self.repository.put(character)
        return character

    # Combat

    def _require_no_combat(self, character_id: str) -> None:
        if character_id in self._encounters:
            raise InvalidStateTransitionError(f"Character {character_id} is in combat")

    def get_encounter(self, character_id: str) -> Encounter:
        try:
            return self._encounters[character_id]
        except KeyError:
            raise NotFoundError("encounter for character", character_id)

    def start_combat(self, character_id: str, level: Optional[int] = None) -> Encounter:
        """Open an encounter with a catalog enemy near ``level`` or a generated one.

        Raises:
            InvalidStateTransitionError: If the character is already fighting
                or is defeated
        """
        with self._character_lock(character_id):
            self._require_no_combat(character_id)
            character = self.repository.get(character_id)
            enemy_level = level if level is not None else character.level
            enemy = self.combat.pick_enemy(enemy_level, self.rng, self.catalog.enemy_templates())
            encounter = self.combat.start_encounter(character, enemy)
            self._encounters[character_id] = encounter
            self.event_manager.publish(
                CombatStarted(character_id=character_id, encounter_id=encounter.id, enemy=enemy),
                source="GameService"
            )
        self._flush_events(character_id)
        return encounter

    def combat_action(self, character_id: str, skill_id: str) -> CombatResult:
        """Resolve one round of the character's current encounter."""
        with self._character_lock(character_id):
            encounter = self.get_encounter(character_id)
            character = self.repository.get(character_id)
            result = self.combat.resolve_action(encounter, character, skill_id, self.rng)

            updated = result.character
            self.event_manager.publish(
                CombatRoundResolved(character_id=character_id, encounter_id=encounter.id,
                                    round_number=result.encounter.round_number, log=result.log),
                source="GameService"
            )

            if result.victory:
                updated = self._on_victory(updated, result)
            elif result.is_over:
                self.event_manager.publish(
                    CharacterDefeated(character_id=character_id, encounter_id=encounter.id,
                                      enemy_name=result.enemy.name),
                    source="GameService"
                )

            if result.is_over:
                del self._encounters[character_id]
            else:
                self._encounters[character_id] = result.encounter
            self.repository.put(updated)

        self._flush_events(character_id)
        return replace(result, character=updated)

    def _on_victory(self, character: Character, result: CombatResult) -> Character:
        character_id = character.id
        self.event_manager.publish(
            EnemyDefeated(character_id=character_id, encounter_id=result.encounter.id, enemy=result.enemy,
                          experience_gained=result.experience_gained),
            source="GameService"
        )
        self.event_manager.publish(LootDropped(character_id=character_id, items=result.loot), source="GameService")
        first_new_level = character.level - result.levels_gained + 1
        for new_level in range(first_new_level, character.level + 1):
            self.event_manager.publish(CharacterLeveledUp(character_id=character_id, new_level=new_level),
                                       source="GameService")
        return self._advance_quests(character, ObjectiveType.KILL, result.enemy.name)

    def _advance_quests(self, character: Character, objective_type: ObjectiveType, target: str) -> Character:
        """Advance matching objectives of every active quest."""
        for quest_id, progress in character.quests.active.items():
            if progress.status != QuestStatus.IN_PROGRESS or quest_id not in self.catalog.quests:
                continue
            quest = self.catalog.get_quest(quest_id)
            updated = self.quests.record_progress(progress, quest, objective_type, target)
            if updated == progress:
                continue
            character = self.quests.track(character, updated)
            self._publish_progress(character.id, progress, updated)
        return character

    def _publish_progress(self, character_id: str, before: QuestProgress, after: QuestProgress) -> None:
        for objective_id, current in after.objectives.items():
            if before.objectives.get(objective_id) != current:
                self.event_manager.publish(
                    QuestObjectiveUpdated(character_id=character_id, quest_id=after.quest_id,
                                          objective_id=objective_id, current=current,
                                          required=after.required[objective_id]),
                    source="GameService"
                )
        if before.status != QuestStatus.COMPLETED and after.status == QuestStatus.COMPLETED:
            self.event_manager.publish(QuestCompleted(character_id=character_id, quest_id=after.quest_id),
                                       source="GameService")

    def flee(self, character_id: str) -> FleeResult:
        with self._character_lock(character_id):
            encounter = self.get_encounter(character_id)
            character = self.repository.get(character_id)
            result = self.combat.flee(encounter, character, self.rng)

            if result.success:
                self.event_manager.publish(CharacterFled(character_id=character_id, encounter_id=encounter.id),
                                           source="GameService")
            elif result.encounter.state.is_terminal:
                self.event_manager.publish(
                    CharacterDefeated(character_id=character_id, encounter_id=encounter.id,
                                      enemy_name=encounter.enemy.name),
                    source="GameService"
                )

            if result.encounter.is_over:
                del self._encounters[character_id]
            else:
                self._encounters[character_id] = result.encounter
            self.repository.put(result.character)

        self._flush_events(character_id)
        return result

    # Quests

    def accept_quest(self, character_id: str, quest_id: str) -> Character:
        with self._character_lock(character_id):
            character = self.repository.get(character_id)
            quest = self.catalog.get_quest(quest_id)
            progress = self.quests.accept_quest(character, quest)
            character = self.quests.track(character, progress)
            self.repository.put(character)
            self.event_manager.publish(QuestAccepted(character_id=character_id, quest_id=quest_id),
                                       source="GameService")
        self._flush_events(character_id)
        return character

    def update_objective(self, character_id: str, quest_id: str, objective_id: str, amount: int = 1) -> Character:
        with self._character_lock(character_id):
            character = self.repository.get(character_id)
            progress = character.quests.active.get(quest_id)
            if progress is None:
                raise NotFoundError("active quest", quest_id)
            updated = self.quests.update_objective(progress, objective_id, amount)
            character = self.quests.track(character, updated)
            self.repository.put(character)
            self._publish_progress(character_id, progress, updated)
        self._flush_events(character_id)
        return character

    def claim_rewards(self, character_id: str, quest_id: str) -> ClaimResult:
        """Pay out a completed quest. A second claim raises InvalidStateTransitionError."""
        with self._character_lock(character_id):
            character = self.repository.get(character_id)
            quest = self.catalog.get_quest(quest_id)
            progress = character.quests.active.get(quest_id)
            if progress is None:
                if quest_id in character.quests.completed:
                    raise InvalidStateTransitionError(f"Rewards for {quest.title} have already been claimed")
                raise NotFoundError("active quest", quest_id)

            result = self.quests.claim_rewards(character, quest, progress)
            self.repository.put(result.character)

            rewards = result.rewards
            self.event_manager.publish(
                RewardsClaimed(character_id=character_id, quest_id=quest_id, experience=rewards.experience,
                               gold=rewards.gold, item_names=tuple(item.name for item in rewards.items)),
                source="GameService"
            )
            level = result.character.level
            for new_level in range(level - rewards.levels_gained + 1, level + 1):
                self.event_manager.publish(CharacterLeveledUp(character_id=character_id, new_level=new_level),
                                           source="GameService")
        self._flush_events(character_id)
        return result

    def available_quests(self, character_id: str) -> list[Quest]:
        character = self.repository.get(character_id)
        return self.quests.available_quests(character, self.catalog.quests.values())

    # Inventory and market

    def _update_inventory(self, character_id: str, operation, *args) -> Character:
        with self._character_lock(character_id):
            self._require_no_combat(character_id)
            character = operation(self.repository.get(character_id), *args)
            self.repository.put(character)
        return character

    def equip_item(self, character_id: str, item_id: str) -> Character:
        return self._update_inventory(character_id, self.inventory.equip_item, item_id)

    def unequip_item(self, character_id: str, slot: EquipmentSlot) -> Character:
        return self._update_inventory(character_id, self.inventory.unequip_item, slot)

    def use_item(self, character_id: str, item_id: str) -> Character:
        return self._update_inventory(character_id, self.inventory.use_item, item_id)

    def drop_item(self, character_id: str, item_id: str) -> Character:
        return self._update_inventory(character_id, self.inventory.drop_item, item_id)

    def buy_item(self, character_id: str, catalog_item_id: str) -> Character:
        """Buy a fresh copy of a catalog item."""
        item = self.catalog.create_item(catalog_item_id)
        character = self._update_inventory(character_id, self.inventory.buy_item, item)
        self._emit_log(f"Bought {item.name} for {item.value} gold", character_id, "ECONOMY")
        self._flush_events(character_id)
        return character

    def sell_item(self, character_id: str, item_id: str) -> Character:
        character = self._update_inventory(character_id, self.inventory.sell_item, item_id)
        self._emit_log(f"Sold item {item_id}", character_id, "ECONOMY")
        self._flush_events(character_id)
        return character

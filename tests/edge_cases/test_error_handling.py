"""
Edge case and error handling tests.

Tests the error hierarchy, boundary values and that failed actions leave
their input snapshots untouched.
"""
import pytest

from darkrealm.core.data import CombatSkill, Enemy, QuestObjective, ObjectiveType, Resource, Stats
from darkrealm.core.errors import (
    GameLogicError,
    InsufficientGoldError,
    InvalidInputError,
    InvalidStateTransitionError,
    NotFoundError,
    RequirementNotMetError,
)
from darkrealm.game.combat import CombatResolver
from darkrealm.game.inventory import InventoryManager
from darkrealm.game.quests import QuestTracker
from tests.test_utils import CharacterBuilder, ScriptedRandom, make_item, make_quest


class TestErrorHierarchy:
    """Test error types and messages."""

    @pytest.mark.parametrize("error", [
        InvalidInputError("bad"),
        InvalidStateTransitionError("nope"),
        NotFoundError("skill", "skill-x"),
        RequirementNotMetError("level", 3, 1),
        InsufficientGoldError(10, 5),
    ])
    def test_all_are_game_logic_errors(self, error):
        assert isinstance(error, GameLogicError)

    def test_messages(self):
        assert str(NotFoundError("skill", "skill-x")) == "Unknown skill: skill-x"
        assert str(InsufficientGoldError(10, 5)) == "Not enough gold: costs 10, have 5"
        assert "level needs 3, has 1" in str(RequirementNotMetError("level", 3, 1))


class TestBoundaryValues:
    """Test values at the edges of their ranges."""

    def test_zero_stats_allowed(self):
        assert Stats() == Stats(0, 0, 0, 0)

    def test_negative_resource_maximum(self):
        with pytest.raises(InvalidInputError):
            Resource(0, -1)

    def test_enemy_level_zero_rejected(self):
        with pytest.raises(InvalidInputError):
            Enemy(id="e", name="Shade", level=0, health=1, max_health=1, damage=1, defense=0, experience=0)

    def test_enemy_negative_defense_rejected(self):
        with pytest.raises(InvalidInputError):
            Enemy(id="e", name="Shade", level=1, health=1, max_health=1, damage=1, defense=-1, experience=0)

    def test_objective_requires_positive_count(self):
        with pytest.raises(InvalidInputError):
            QuestObjective("o", ObjectiveType.KILL, "Ghoul", 0)

    def test_negative_skill_damage_rejected(self):
        with pytest.raises(InvalidInputError):
            CombatSkill("s", "Broken", damage=-3)

    def test_zero_amount_update_keeps_progress(self, progression, warrior):
        tracker = QuestTracker(progression)
        progress = tracker.accept_quest(warrior, make_quest(required=(2,)))

        assert tracker.update_objective(progress, "obj-1", 0) == progress

    def test_quest_without_objectives_rejected(self, progression, warrior):
        tracker = QuestTracker(progression)

        with pytest.raises(InvalidInputError):
            tracker.accept_quest(warrior, make_quest(required=()))

    def test_exact_gold_purchase(self):
        character = CharacterBuilder().with_gold(10).build()

        assert InventoryManager().buy_item(character, make_item(value=10)).gold == 0

    def test_free_item_sells_for_nothing(self):
        character = CharacterBuilder().with_gold(3).with_item(make_item(value=1)).build()

        assert InventoryManager().sell_item(character, "item-1").gold == 3


class TestFailedActionsLeaveStateUntouched:
    """Test that errors do not half-apply changes."""

    def test_failed_purchase(self):
        character = CharacterBuilder().with_gold(5).build()

        with pytest.raises(InsufficientGoldError):
            InventoryManager().buy_item(character, make_item(value=10))

        assert character.gold == 5
        assert character.inventory == ()

    def test_failed_skill_keeps_encounter(self, warrior, ghoul):
        resolver = CombatResolver()
        encounter = resolver.start_encounter(warrior, ghoul)

        with pytest.raises(NotFoundError):
            resolver.resolve_action(encounter, warrior, "skill-missing", ScriptedRandom())

        result = resolver.resolve_action(encounter, warrior, "skill-slash", ScriptedRandom([0.0, 0.99]))
        assert result.encounter.round_number == 1

    def test_failed_equip_keeps_inventory(self):
        blade = make_item("blade", level_requirement=9)
        character = CharacterBuilder().with_item(blade).build()

        with pytest.raises(RequirementNotMetError):
            InventoryManager().equip_item(character, "blade")

        assert character.inventory == (blade,)
        assert character.equipment == {}

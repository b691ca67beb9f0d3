"""
Unit tests for character creation.
"""
from dataclasses import replace

import pytest

from darkrealm.core.data import EquipmentSlot, ItemType, Resource, Stats
from darkrealm.core.errors import InvalidInputError
from darkrealm.core.rng import CounterIdSource
from darkrealm.game.character_factory import CharacterFactory
from darkrealm.game.inventory import InventoryManager
from tests.test_utils import make_item


@pytest.fixture
def factory(rules, catalog):
    return CharacterFactory(rules, catalog)


class TestCharacterFactory:
    """Test new characters."""

    def test_warrior(self, factory):
        character = factory.create("Varek", "warrior", CounterIdSource())

        assert character.id == "character-1"
        assert character.level == 1
        assert character.experience == 0
        assert character.stats == Stats(10, 6, 4, 10)
        assert character.health == Resource(200, 200)
        assert character.energy == Resource(90, 90)
        assert character.gold == 100
        assert [skill.id for skill in character.skills] == ["skill-slash"]

    def test_starter_gear_equipped(self, factory):
        character = factory.create("Varek", "warrior")

        assert character.equipment[EquipmentSlot.WEAPON].name == "Rusty Dagger"
        assert character.equipment[EquipmentSlot.ARMOR].name == "Leather Vest"
        assert [item.name for item in character.inventory] == ["Health Potion"]
        assert character.effective_stats() == Stats(13, 6, 4, 12)

    def test_thematic_class(self, factory):
        character = factory.create("Lilith", "Necromancer")

        assert character.character_class == "necromancer"
        assert character.stats == Stats(3, 5, 12, 5)
        assert character.skills[0].name == "Fireball"

    def test_unknown_class_is_balanced(self, factory):
        character = factory.create("Wanderer", "bard")

        assert character.character_class == "bard"
        assert character.stats == Stats(6, 6, 6, 6)

    def test_thematic_class_keeps_its_restrictions(self, factory):
        character = factory.create("Mircalla", "Vampire")
        fang = make_item("fang", "Vampiric Ring", ItemType.RING, class_restrictions=("vampire",))
        blade = make_item("blade", "Silver-Edged Blade", class_restrictions=("warrior",))
        character = replace(character, inventory=character.inventory + (fang, blade))

        assert character.character_class == "vampire"
        assert character.stats == Stats(10, 6, 4, 10)
        equipped = InventoryManager().equip_item(InventoryManager().equip_item(character, "fang"), "blade")
        assert equipped.equipment[EquipmentSlot.RING] == fang
        assert equipped.equipment[EquipmentSlot.WEAPON] == blade

    def test_name_trimmed(self, factory):
        assert factory.create("  Al  ", "rogue").name == "Al"

    @pytest.mark.parametrize("name", ["", "A", "x" * 31, None])
    def test_invalid_name(self, factory, name):
        with pytest.raises(InvalidInputError):
            factory.create(name, "warrior")

    def test_missing_class(self, factory):
        with pytest.raises(InvalidInputError):
            factory.create("Varek", " ")

"""
Unit tests for the InventoryManager.

Tests equipping with slot swaps and restrictions, consumables, and
market buy/sell.
"""
import pytest

from darkrealm.core.data import EffectType, EquipmentSlot, ItemEffect, ItemType, Resource, Stats
from darkrealm.core.errors import (
    InsufficientGoldError,
    InvalidInputError,
    InvalidStateTransitionError,
    NotFoundError,
    RequirementNotMetError,
)
from darkrealm.game.inventory import InventoryManager
from tests.test_utils import CharacterBuilder, make_item, make_potion


@pytest.fixture
def inventory():
    return InventoryManager()


@pytest.fixture
def dagger():
    return make_item("dagger", "Rusty Dagger", stat_bonuses=Stats(strength=3))


class TestEquipment:
    """Test equipping and unequipping."""

    def test_equip_moves_item_to_slot(self, inventory, dagger):
        character = CharacterBuilder().with_stats(10, 6, 4, 10).with_item(dagger).build()

        equipped = inventory.equip_item(character, "dagger")

        assert equipped.equipment[EquipmentSlot.WEAPON] == dagger
        assert equipped.inventory == ()
        assert equipped.effective_stats().strength == 13

    def test_equip_swaps_previous_item(self, inventory, dagger):
        old = make_item("club", "Gravedigger's Shovel")
        character = CharacterBuilder().with_equipped(old).with_item(dagger).build()

        equipped = inventory.equip_item(character, "dagger")

        assert equipped.equipment[EquipmentSlot.WEAPON] == dagger
        assert equipped.inventory == (old,)

    def test_consumable_cannot_be_equipped(self, inventory):
        character = CharacterBuilder().with_item(make_potion()).build()

        with pytest.raises(InvalidInputError):
            inventory.equip_item(character, "potion-1")

    def test_level_requirement(self, inventory):
        blade = make_item("blade", "Silver-Edged Blade", level_requirement=3)
        character = CharacterBuilder().with_item(blade).build()

        with pytest.raises(RequirementNotMetError):
            inventory.equip_item(character, "blade")

    def test_class_restriction(self, inventory):
        staff = make_item("staff", "Bone Staff", class_restrictions=("mage",))
        character = CharacterBuilder(character_class="warrior").with_item(staff).build()

        with pytest.raises(RequirementNotMetError):
            inventory.equip_item(character, "staff")

    def test_class_restriction_accepts_alias(self, inventory):
        blade = make_item("blade", "Silver-Edged Blade", class_restrictions=("warrior", "rogue"))
        character = CharacterBuilder(character_class="Vampire").with_item(blade).build()

        equipped = inventory.equip_item(character, "blade")

        assert equipped.equipment[EquipmentSlot.WEAPON] == blade

    def test_equip_missing_item(self, inventory):
        with pytest.raises(NotFoundError):
            inventory.equip_item(CharacterBuilder().build(), "ghost")

    def test_unequip(self, inventory, dagger):
        character = CharacterBuilder().with_equipped(dagger).build()

        unequipped = inventory.unequip_item(character, EquipmentSlot.WEAPON)

        assert EquipmentSlot.WEAPON not in unequipped.equipment
        assert unequipped.inventory == (dagger,)

    def test_unequip_empty_slot(self, inventory):
        with pytest.raises(NotFoundError):
            inventory.unequip_item(CharacterBuilder().build(), EquipmentSlot.RING)


class TestConsumables:
    """Test using and dropping items."""

    def test_use_potion(self, inventory):
        character = CharacterBuilder().with_stats(10, 6, 4, 10).with_health(100).with_item(make_potion()).build()

        healed = inventory.use_item(character, "potion-1")

        assert healed.health == Resource(150, 200)
        assert healed.inventory == ()

    def test_heal_clamped(self, inventory):
        character = CharacterBuilder().with_stats(10, 6, 4, 10).with_health(190).with_item(make_potion()).build()

        assert inventory.use_item(character, "potion-1").health.current == 200

    def test_use_non_consumable(self, inventory, dagger):
        character = CharacterBuilder().with_item(dagger).build()

        with pytest.raises(InvalidInputError):
            inventory.use_item(character, "dagger")

    def test_drop(self, inventory, dagger):
        character = CharacterBuilder().with_item(dagger).build()

        assert inventory.drop_item(character, "dagger").inventory == ()
        with pytest.raises(NotFoundError):
            inventory.drop_item(character, "ghost")

    def test_apply_effects(self, warrior):
        effects = (
            ItemEffect(EffectType.DAMAGE, 30),
            ItemEffect(EffectType.BUFF, 0.5),
            ItemEffect(EffectType.PASSIVE, 3),
        )

        assert InventoryManager.apply_effects(warrior, effects).health.current == 170
        assert InventoryManager.apply_effects(warrior, (ItemEffect(EffectType.DAMAGE, 500),)).health.current == 0


class TestMarket:
    """Test buying and selling."""

    def test_buy(self, inventory, dagger):
        character = CharacterBuilder().with_gold(20).build()

        bought = inventory.buy_item(character, dagger)

        assert bought.gold == 10
        assert bought.inventory == (dagger,)

    def test_buy_without_gold(self, inventory, dagger):
        character = CharacterBuilder().with_gold(5).build()

        with pytest.raises(InsufficientGoldError) as exc_info:
            inventory.buy_item(character, dagger)

        assert isinstance(exc_info.value, InvalidStateTransitionError)
        assert exc_info.value.cost == 10

    def test_sell_half_value_rounded_down(self, inventory):
        vest = make_item("vest", "Leather Vest", ItemType.ARMOR, 15)
        character = CharacterBuilder().with_gold(0).with_item(vest).build()

        sold = inventory.sell_item(character, "vest")

        assert sold.gold == 7
        assert sold.inventory == ()

    def test_sell_equipped_item_not_found(self, inventory, dagger):
        character = CharacterBuilder().with_equipped(dagger).build()

        with pytest.raises(NotFoundError):
            inventory.sell_item(character, "dagger")


class TestDuplicateCopies:
    """Test that actions on a stacked id touch one copy only."""

    @pytest.fixture
    def stocked(self):
        return CharacterBuilder().with_stats(10, 6, 4, 10).with_health(100).with_gold(0) \
            .with_item(make_potion()).with_item(make_potion()).with_item(make_potion()).build()

    def test_sell_one_copy(self, inventory, stocked):
        sold = inventory.sell_item(stocked, "potion-1")

        assert len(sold.inventory) == 2
        assert sold.gold == 2

    def test_use_one_copy(self, inventory, stocked):
        healed = inventory.use_item(stocked, "potion-1")

        assert len(healed.inventory) == 2
        assert healed.health.current == 150

    def test_drop_one_copy(self, inventory, stocked):
        assert len(inventory.drop_item(stocked, "potion-1").inventory) == 2

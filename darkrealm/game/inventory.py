"""
Inventory, equipment and market operations.

Each equipment slot holds at most one item; an item is either carried or
equipped, never both. Selling returns a fixed share of an item's value.
"""
import math
from dataclasses import replace
from typing import Iterable, Optional

from ..core.config import GameRules
from ..core.data import Character, EffectType, EquipmentSlot, Item, ItemEffect, ItemType, resolve_class_name
from ..core.errors import InsufficientGoldError, InvalidInputError, NotFoundError, RequirementNotMetError


class InventoryManager:
    """Equip, use, drop, buy and sell items on character snapshots."""

    def __init__(self, rules: Optional[GameRules] = None):
        self.rules = rules or GameRules()

    @staticmethod
    def _take(character: Character, item_id: str) -> tuple[Item, tuple[Item, ...]]:
        """Remove the first inventory item with ``item_id``; other copies stay carried."""
        for index, item in enumerate(character.inventory):
            if item.id == item_id:
                return item, character.inventory[:index] + character.inventory[index + 1:]
        raise NotFoundError("item", item_id)

    @staticmethod
    def check_requirements(character: Character, item: Item) -> None:
        """Raise RequirementNotMetError if the character may not equip ``item``."""
        if character.level < item.level_requirement:
            raise RequirementNotMetError("level", item.level_requirement, character.level)
        if item.class_restrictions:
            requested = character.character_class.strip().lower()
            if requested not in item.class_restrictions and \
                    resolve_class_name(requested) not in item.class_restrictions:
                raise RequirementNotMetError("class", "/".join(item.class_restrictions), character.character_class)

    def equip_item(self, character: Character, item_id: str) -> Character:
        """
        Move an item from the inventory into its slot.

        Whatever occupied the slot goes back into the inventory.

        Raises:
            NotFoundError: If the item is not carried
            InvalidInputError: If the item type cannot be equipped
            RequirementNotMetError: If level or class restrictions are not met
        """
        item, inventory = self._take(character, item_id)
        slot = item.equipment_slot
        if slot is None:
            raise InvalidInputError(f"{item.name} ({item.item_type.value}) cannot be equipped")
        self.check_requirements(character, item)

        equipment = dict(character.equipment)
        previous = equipment.get(slot)
        if previous is not None:
            inventory = inventory + (previous,)
        equipment[slot] = item
        return replace(character, inventory=inventory, equipment=equipment)

    def unequip_item(self, character: Character, slot: EquipmentSlot) -> Character:
        if slot not in character.equipment:
            raise NotFoundError("equipped item in slot", slot.value)
        equipment = dict(character.equipment)
        item = equipment.pop(slot)
        return replace(character, inventory=character.inventory + (item,), equipment=equipment)

    def use_item(self, character: Character, item_id: str) -> Character:
        """Consume an item, applying its effects.

        Raises:
            NotFoundError: If the item is not carried
            InvalidInputError: If the item is not a consumable
        """
        item, inventory = self._take(character, item_id)
        if item.item_type != ItemType.CONSUMABLE:
            raise InvalidInputError(f"{item.name} is not a consumable")
        return self.apply_effects(replace(character, inventory=inventory), item.effects)

    def drop_item(self, character: Character, item_id: str) -> Character:
        _, inventory = self._take(character, item_id)
        return replace(character, inventory=inventory)

    def buy_item(self, character: Character, item: Item) -> Character:
        """Pay an item's value and add it to the inventory."""
        if character.gold < item.value:
            raise InsufficientGoldError(item.value, character.gold)
        if character.find_item(item.id) is not None:
            raise InvalidInputError(f"Item {item.id} is already carried")
        return replace(character, gold=character.gold - item.value, inventory=character.inventory + (item,))

    def sell_price(self, item: Item) -> int:
        return math.floor(item.value * self.rules.economy.sell_ratio)

    def sell_item(self, character: Character, item_id: str) -> Character:
        """Sell a carried item for its sell price."""
        item, inventory = self._take(character, item_id)
        return replace(character, gold=character.gold + self.sell_price(item), inventory=inventory)

    @staticmethod
    def apply_effects(character: Character, effects: Iterable[ItemEffect]) -> Character:
        """
        Apply immediate effects outside combat.

        Heal and damage change health, clamped into [0, max]. Buffs and
        debuffs only matter in damage calculation and trigger effects
        (on-hit, on-kill, passive) have no immediate result, so both are
        skipped here.
        """
        health = character.health
        for effect in effects:
            amount = int(effect.value)
            if effect.effect_type == EffectType.HEAL:
                health = health.with_current(health.current + amount)
            elif effect.effect_type == EffectType.DAMAGE:
                health = health.with_current(health.current - amount)
        return replace(character, health=health)

"""Character creation from class templates."""

from typing import Optional

from ..core.config import GameRules
from ..core.data import Character, Resource, get_class_info
from ..core.errors import InvalidInputError
from ..core.rng import IdSource, UuidIdSource
from .catalog import GameCatalog
from .inventory import InventoryManager
from .progression import ProgressionEngine

# Catalog ids every new character starts with; equippable ones are equipped
STARTER_ITEMS = ("rusty-dagger", "leather-vest", "health-potion")

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 30


class CharacterFactory:
    """Builds level 1 characters with stats, pools, a class skill and starter gear."""

    def __init__(
        self,
        rules: Optional[GameRules] = None,
        catalog: Optional[GameCatalog] = None,
        starter_items: tuple[str, ...] = STARTER_ITEMS
    ):
        self.rules = rules or GameRules()
        self.catalog = catalog or GameCatalog.load_from_file()
        self.starter_items = starter_items
        self.inventory = InventoryManager(self.rules)

    def create(self, name: str, character_class: str, id_source: Optional[IdSource] = None) -> Character:
        """
        Create a new character.

        Args:
            name: Display name, 2-30 characters after trimming
            character_class: warrior, rogue, mage or a thematic alias; unknown
                classes use the balanced template
            id_source: Source of the character id (random by default)

        Returns:
            Level 1 character at full health and energy

        Raises:
            InvalidInputError: If the name is missing or has the wrong length
        """
        if not isinstance(name, str):
            raise InvalidInputError("Character name is required")
        name = name.strip()
        if not MIN_NAME_LENGTH <= len(name) <= MAX_NAME_LENGTH:
            raise InvalidInputError(
                f"Character name must be {MIN_NAME_LENGTH}-{MAX_NAME_LENGTH} characters, got {len(name)}"
            )
        if not isinstance(character_class, str) or not character_class.strip():
            raise InvalidInputError("Character class is required")

        id_source = id_source or UuidIdSource()
        info = get_class_info(character_class)
        stats = info.base_stats

        character = Character(
            id=id_source.next_id("character"),
            name=name,
            character_class=character_class.strip().lower(),
            stats=stats,
            health=Resource.full(ProgressionEngine.max_health(stats)),
            energy=Resource.full(ProgressionEngine.max_energy(stats)),
            gold=self.rules.economy.starting_gold,
            skills=(info.starter_skill,),
            inventory=self.catalog.resolve_items(self.starter_items),
        )

        for item in character.inventory:
            if item.equipment_slot is not None and item.equipment_slot not in character.equipment:
                character = self.inventory.equip_item(character, item.id)
        return character

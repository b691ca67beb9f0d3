"""Read-only catalog of item, enemy and quest definitions.

Definitions are loaded from YAML (the packaged ``catalog.yaml`` by default)
and looked up by id. Items handed to characters are copies with their own
instance ids so that two copies of the same definition never share an id.
"""

from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import yaml

from ..core.data import Enemy, Item, Quest, default_data_path
from ..core.errors import GameLogicError, NotFoundError
from ..core.rng import IdSource, UuidIdSource


class GameCatalog:
    """Reference data lookups by id."""

    def __init__(
        self,
        items: Iterable[Item] = (),
        enemies: Iterable[Enemy] = (),
        quests: Iterable[Quest] = (),
        id_source: Optional[IdSource] = None
    ):
        self.items: dict[str, Item] = {item.id: item for item in items}
        self.enemies: dict[str, Enemy] = {enemy.id: enemy for enemy in enemies}
        self.quests: dict[str, Quest] = {quest.id: quest for quest in quests}
        self.id_source = id_source or UuidIdSource()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], id_source: Optional[IdSource] = None) -> "GameCatalog":
        """Build a catalog from parsed catalog data."""
        return cls(
            items=[Item.from_dict(entry) for entry in data.get("items") or ()],
            enemies=[Enemy.from_dict(entry) for entry in data.get("enemies") or ()],
            quests=[Quest.from_dict(entry) for entry in data.get("quests") or ()],
            id_source=id_source,
        )

    @classmethod
    def load_from_file(cls, file_path: Optional[str] = None, id_source: Optional[IdSource] = None) -> "GameCatalog":
        """Load a catalog from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file cannot be parsed or holds malformed entries
        """
        file_path = file_path or default_data_path("catalog.yaml")
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise FileNotFoundError(f"Catalog file not found: {file_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse catalog {Path(file_path).name}: {e}")

        try:
            catalog = cls.from_dict(data, id_source)
        except (KeyError, TypeError, GameLogicError) as e:
            raise ValueError(f"Invalid catalog entry in {Path(file_path).name}: {e}")

        missing = catalog.missing_reward_items()
        if missing:
            raise ValueError(f"Quest rewards reference unknown items in {Path(file_path).name}: {missing}")
        return catalog

    def missing_reward_items(self) -> list[str]:
        return sorted({
            item_id
            for quest in self.quests.values()
            for item_id in quest.rewards.items
            if item_id not in self.items
        })

    def get_item(self, item_id: str) -> Item:
        try:
            return self.items[item_id]
        except KeyError:
            raise NotFoundError("item", item_id)

    def get_enemy(self, enemy_id: str) -> Enemy:
        try:
            return self.enemies[enemy_id]
        except KeyError:
            raise NotFoundError("enemy", enemy_id)

    def get_quest(self, quest_id: str) -> Quest:
        try:
            return self.quests[quest_id]
        except KeyError:
            raise NotFoundError("quest", quest_id)

    def create_item(self, item_id: str) -> Item:
        """A copy of a catalog item with a fresh instance id."""
        return replace(self.get_item(item_id), id=self.id_source.next_id(item_id))

    def resolve_items(self, item_ids: Iterable[str]) -> tuple[Item, ...]:
        return tuple(self.create_item(item_id) for item_id in item_ids)

    def enemy_templates(self) -> list[Enemy]:
        return list(self.enemies.values())

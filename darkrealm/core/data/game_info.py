"""Static class information loaded from the packaged class templates.

Templates are loaded once from ``assets/data/classes.yaml`` and converted to
ClassInfo records holding base stats, growth factors and the starter skill.
"""

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import yaml

from .data_structures import STAT_NAMES, CombatSkill, Stats
from .game_enums import CharacterClass

BALANCED_TEMPLATE = "balanced"


@dataclass(frozen=True)
class ClassInfo:
    """Static information about a playable class."""
    name: str
    base_stats: Stats
    growth: Mapping[str, float]
    starter_skill: CombatSkill


def _assets_dir() -> str:
    current_dir = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(os.path.dirname(os.path.dirname(current_dir)), "assets", "data")


def default_data_path(filename: str) -> str:
    """Absolute path of a file shipped in ``assets/data``."""
    return os.path.join(_assets_dir(), filename)


def _parse_class_info(name: str, data: Mapping[str, Any]) -> ClassInfo:
    growth = data["growth"]
    missing = [stat for stat in STAT_NAMES if stat not in growth]
    if missing:
        raise KeyError(f"growth for {name} is missing {', '.join(missing)}")
    if any(float(growth[stat]) < 0 for stat in STAT_NAMES):
        raise ValueError(f"growth for {name} cannot be negative")
    return ClassInfo(
        name=name,
        base_stats=Stats.from_dict(data["base_stats"]),
        growth={stat: float(growth[stat]) for stat in STAT_NAMES},
        starter_skill=CombatSkill.from_dict(data["starter_skill"]),
    )


def load_class_templates(yaml_path: Optional[str] = None) -> tuple[dict[str, ClassInfo], dict[str, str]]:
    """Load class templates and class aliases from YAML.

    Args:
        yaml_path: Template file; defaults to the packaged classes.yaml

    Returns:
        Tuple of (template name -> ClassInfo, alias -> template name)

    Raises:
        FileNotFoundError: If the template file does not exist
        ValueError: If the file is not valid template data
    """
    yaml_path = yaml_path or default_data_path("classes.yaml")
    try:
        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Class templates file not found: {yaml_path}")

    try:
        templates = {
            name: _parse_class_info(name, template)
            for name, template in data["class_templates"].items()
        }
        templates[BALANCED_TEMPLATE] = _parse_class_info(BALANCED_TEMPLATE, data[BALANCED_TEMPLATE])
        aliases = {alias.lower(): target for alias, target in (data.get("class_aliases") or {}).items()}
    except (KeyError, TypeError) as e:
        raise ValueError(f"Invalid template structure in {yaml_path}: {e}")

    for character_class in CharacterClass:
        if character_class.value not in templates:
            raise ValueError(f"No template for class {character_class.value} in {yaml_path}")
    unknown_targets = set(aliases.values()) - set(templates)
    if unknown_targets:
        raise ValueError(f"Aliases point at unknown classes in {yaml_path}: {sorted(unknown_targets)}")

    return templates, aliases


CLASS_DATA, CLASS_ALIASES = load_class_templates()


def get_class_info(character_class: str) -> ClassInfo:
    """Template for a class name, falling back to the balanced template.

    Thematic aliases (vampire, necromancer, ...) resolve to their class.
    """
    key = (character_class or "").strip().lower()
    key = CLASS_ALIASES.get(key, key)
    return CLASS_DATA.get(key, CLASS_DATA[BALANCED_TEMPLATE])


def resolve_class_name(character_class: str) -> str:
    """Canonical class name for a requested class or alias.

    Unknown names are returned lower-cased and keep the balanced template.
    """
    key = (character_class or "").strip().lower()
    return CLASS_ALIASES.get(key, key)

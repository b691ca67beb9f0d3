"""
Basic test fixtures for the darkrealm test suite.

Provides rules, catalog, event bus and character fixtures shared by the
unit, integration and edge case tests.
"""

import sys
import os
import pytest

# Add the project root to the Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from darkrealm.core.config import GameRules
from darkrealm.core.events.event_manager import EventManager
from darkrealm.core.rng import CounterIdSource
from darkrealm.game.catalog import GameCatalog
from darkrealm.game.progression import ProgressionEngine
from tests.test_utils import CharacterBuilder, EnemyBuilder


@pytest.fixture
def rules():
    """Default game rules."""
    return GameRules()


@pytest.fixture
def id_source():
    """Deterministic id source."""
    return CounterIdSource()


@pytest.fixture
def event_manager():
    """Create an event manager for testing."""
    return EventManager()


@pytest.fixture
def catalog(id_source):
    """The packaged catalog with deterministic instance ids."""
    return GameCatalog.load_from_file(id_source=id_source)


@pytest.fixture
def progression(rules):
    return ProgressionEngine(rules)


@pytest.fixture
def warrior():
    """Level 1 warrior with base stats 10/6/4/10 and no gear."""
    return CharacterBuilder("Varek", "warrior").with_stats(10, 6, 4, 10).build()


@pytest.fixture
def ghoul():
    """Level 1 enemy with 50 health and 2 defense."""
    return EnemyBuilder("Feral Ghoul").with_level(1).with_health(50).with_defense(2).build()

"""Injected sources of randomness and identifiers.

The rules core never calls an ambient random function. Every roll goes
through a RandomSource passed in by the caller; numpy's Generator satisfies
the protocol directly, and tests can pass a scripted source instead.
"""

import itertools
import uuid
from typing import Optional, Protocol

import numpy as np


class RandomSource(Protocol):
    """The two draws the core needs."""

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        ...

    def integers(self, low: int, high: int) -> int:
        """Uniform integer in [low, high)."""
        ...


def create_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create a seedable generator for combat and loot rolls."""
    return np.random.default_rng(seed)


def roll_percent(rng: RandomSource) -> float:
    """Uniform roll in [0, 100)."""
    return float(rng.random()) * 100


def pick_index(rng: RandomSource, count: int) -> int:
    """Uniform index into a sequence of ``count`` elements."""
    if count <= 0:
        raise ValueError("Cannot pick from an empty sequence")
    return int(rng.integers(0, count))


class IdSource(Protocol):
    """Generator of ids for ephemeral objects (enemy and loot instances)."""

    def next_id(self, prefix: str) -> str:
        ...


class UuidIdSource:
    """Random UUID-based ids."""

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{uuid.uuid4().hex[:12]}"


class CounterIdSource:
    """Monotonic counter ids, deterministic for tests and replays."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._counter)}"

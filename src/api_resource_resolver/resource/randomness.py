"""Randomness capability handed to the resolver.

Template selection and ancestor tie-breaks both go through ``choose``, so
tests can swap in a seeded or scripted source.
"""

import random
from typing import Protocol, Sequence, TypeVar

T = TypeVar("T")


class Randomness(Protocol):
    def choose(self, candidates: Sequence[T]) -> T: ...


class SeededRandomness:
    """Uniform choice backed by its own ``random.Random``."""

    def __init__(self, seed: int | None = None):
        self._rng = random.Random(seed)

    def choose(self, candidates: Sequence[T]) -> T:
        if not candidates:
            raise ValueError("Cannot choose from an empty collection")
        return self._rng.choice(list(candidates))

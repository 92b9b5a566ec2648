"""
RNG - Seedable Random Source
============================

Every randomized branch of a round (drop type, size, position, end-of-round
fact, effect colors and motion) draws from one seedable source so that a
fixed seed replays the same round.
"""

from __future__ import annotations

import random
from typing import Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


class GameRng:
    """
    Thin wrapper around random.Random exposing the draws the game needs.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize random source.

        Args:
            seed: Random seed for reproducibility. Random if None.
        """
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> Optional[int]:
        """Seed the source was last (re)initialized with."""
        return self._seed

    def bernoulli(self, probability: float) -> bool:
        """True with the given probability."""
        return self._rng.random() < probability

    def uniform(self, low: float, high: float) -> float:
        """
        Uniform draw in [low, high).

        A degenerate range (high <= low) returns low.
        """
        if high <= low:
            return low
        return low + self._rng.random() * (high - low)

    def choice(self, items: Sequence[T]) -> T:
        """Uniformly pick one item."""
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        return items[int(self._rng.random() * len(items))]

    def random(self) -> float:
        """Uniform draw in [0, 1)."""
        return self._rng.random()

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the source with optional new seed.

        Args:
            seed: New random seed. Keeps current if None.
        """
        if seed is not None:
            self._seed = seed
        self._rng = random.Random(self._seed)

    def get_state(self) -> Tuple:
        """Get internal state for checkpointing."""
        return self._rng.getstate()

    def set_state(self, state: Tuple) -> None:
        """Restore internal state."""
        self._rng.setstate(state)

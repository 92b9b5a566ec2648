"""
Spawner
=======

Builds randomized drops for the active round.
"""

from __future__ import annotations

from typing import Optional

from drop_rush.core.config_loader import GameConfig, RoundConfig, get_config
from drop_rush.core.drop import Drop
from drop_rush.core.rng import GameRng


class Spawner:
    """
    Creates one drop per spawn tick.

    The controller owns the periodic timer and decides whether a tick is
    still valid; the spawner only rolls the dice.

    - Type: Bernoulli(bad_probability) decides bad vs good
    - Size: base_size * U[min_multiplier, max_multiplier)
    - X: U[0, container_width - size), clamped to >= 0
    """

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[GameRng] = None):
        """
        Initialize spawner.

        Args:
            config: Game configuration. Uses default if None.
            rng: Shared random source. A fresh unseeded one if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = rng if rng is not None else GameRng()
        self._base_size = config.spawner.base_size
        self._min_mult = config.spawner.min_size_multiplier
        self._max_mult = config.spawner.max_size_multiplier
        self._container_width = float(config.spawner.container_width)
        self._next_uid: int = 1
        self._spawned: int = 0

    @property
    def container_width(self) -> float:
        return self._container_width

    @container_width.setter
    def container_width(self, value: float) -> None:
        """Presentation layers update this when the container is resized."""
        self._container_width = max(0.0, float(value))

    @property
    def spawned(self) -> int:
        """Drops created since the last reset."""
        return self._spawned

    def roll_size(self) -> float:
        return self._base_size * self._rng.uniform(self._min_mult, self._max_mult)

    def roll_x(self, size: float) -> float:
        return self._rng.uniform(0.0, max(0.0, self._container_width - size))

    def spawn(self, round_config: RoundConfig, now_ms: int, generation: int) -> Drop:
        """
        Create a new drop.

        Args:
            round_config: Active difficulty preset.
            now_ms: Current scheduler time.
            generation: Round generation the drop belongs to.

        Returns:
            The new, unresolved Drop.
        """
        is_bad = self._rng.bernoulli(round_config.bad_probability)
        size = self.roll_size()
        x = self.roll_x(size)

        drop = Drop(
            uid=self._next_uid,
            is_bad=is_bad,
            size=size,
            x=x,
            born_at_ms=now_ms,
            lifetime_ms=round_config.fall_duration_ms,
            generation=generation
        )
        self._next_uid += 1
        self._spawned += 1
        return drop

    def reset(self) -> None:
        """Reset per-round counters. UIDs keep increasing across rounds."""
        self._spawned = 0

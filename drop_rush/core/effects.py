"""
Effects
=======

Randomized particle bursts and confetti, built as render commands.
"""

from __future__ import annotations

import math
from typing import List, Optional

from drop_rush.core.config_loader import GameConfig, get_config
from drop_rush.core.feedback import ConfettiPiece, Particle, ParticleBurst
from drop_rush.core.rng import GameRng


class EffectFactory:
    """Builds effect commands from the shared random source."""

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[GameRng] = None):
        if config is None:
            config = get_config()

        self._fx = config.effects
        self._rng = rng if rng is not None else GameRng()

    def particle_burst(self, x: float, y: float, count: Optional[int] = None) -> ParticleBurst:
        """
        Burst of particles flying out from (x, y).

        Args:
            x, y: Burst center in container coordinates.
            count: Number of particles. Uses config if None.
        """
        if count is None:
            count = self._fx.particle_count

        jitter = self._fx.particle_jitter
        particles = []
        for _ in range(count):
            angle = self._rng.uniform(0.0, math.pi * 2)
            dist = self._rng.uniform(self._fx.particle_min_distance, self._fx.particle_max_distance)
            particles.append(Particle(
                offset_x=self._rng.uniform(-jitter / 2, jitter / 2),
                offset_y=self._rng.uniform(-jitter / 2, jitter / 2),
                dx=math.cos(angle) * dist,
                dy=-(math.sin(angle) * dist),   # screen Y grows downward
                rotation=self._rng.uniform(0.0, 360.0),
                color=self._rng.choice(self._fx.particle_palette)
            ))

        return ParticleBurst(
            x=x,
            y=y,
            particles=tuple(particles),
            lifetime_ms=self._fx.particle_lifetime_ms
        )

    def confetti(self, container_width: float, count: Optional[int] = None) -> List[ConfettiPiece]:
        """Confetti pieces spread over the container width."""
        if count is None:
            count = self._fx.confetti_count

        max_x = max(0.0, container_width - self._fx.confetti_width)
        return [
            ConfettiPiece(
                x=self._rng.uniform(0.0, max_x),
                color=self._rng.choice(self._fx.confetti_palette),
                lifetime_ms=self._fx.confetti_lifetime_ms
            )
            for _ in range(count)
        ]

"""
Drop Entity
===========

A single spawned, clickable object that resolves at most once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from drop_rush.core.scheduler import TimerHandle


@dataclass
class Drop:
    """
    Runtime state of one falling drop.

    ``x`` is the left edge inside the container; ``size`` is both width and
    height in pixels.
    """
    uid: int
    is_bad: bool
    size: float
    x: float
    born_at_ms: int
    lifetime_ms: int
    generation: int
    resolved: bool = False
    expiry: Optional[TimerHandle] = field(default=None, repr=False, compare=False)

    @property
    def kind(self) -> str:
        """'bad' or 'good'."""
        return "bad" if self.is_bad else "good"

    def resolve(self) -> bool:
        """
        Mark the drop as resolved.

        Returns:
            True on the first call, False on every later call.
        """
        if self.resolved:
            return False
        self.resolved = True
        if self.expiry is not None:
            self.expiry.cancel()
        return True

    def progress(self, now_ms: int) -> float:
        """Fraction of the fall completed, clamped to [0, 1]."""
        if self.lifetime_ms <= 0:
            return 1.0
        t = (now_ms - self.born_at_ms) / self.lifetime_ms
        return max(0.0, min(1.0, t))

    def y(self, now_ms: int, container_height: float) -> float:
        """Top edge of the drop; starts one drop-size above the container."""
        return -self.size + self.progress(now_ms) * (container_height + self.size)

    def center(self, now_ms: int, container_height: float):
        """(x, y) center of the drop at now_ms."""
        half = self.size / 2
        return (self.x + half, self.y(now_ms, container_height) + half)

    def contains(self, px: float, py: float, now_ms: int, container_height: float) -> bool:
        """Hit test against the drop's circular footprint."""
        cx, cy = self.center(now_ms, container_height)
        radius = self.size / 2
        return (px - cx) ** 2 + (py - cy) ** 2 <= radius ** 2

"""
State Snapshot
==============

Packs round state into fixed-size numpy arrays for bots and renderers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import numpy as np

from drop_rush.core.config_loader import GameConfig, get_config
from drop_rush.core.drop import Drop


@dataclass
class RoundSnapshot:
    """
    Round state at one instant.

    Drop arrays are fixed-size with masking for the variable live-drop count.
    Slots are filled oldest drop first.
    """
    # Core state
    phase: str
    score: int
    time_left: int
    target_score: int
    now_ms: int
    live_count: int

    # Container info (for normalization)
    container_width: float
    container_height: float

    # Drop arrays (fixed size, padded)
    drop_uid: np.ndarray              # (MAX_DROPS,) int32, -1 when empty
    drop_x: np.ndarray                # (MAX_DROPS,) float32 left edge
    drop_y: np.ndarray                # (MAX_DROPS,) float32 top edge
    drop_size: np.ndarray             # (MAX_DROPS,) float32
    drop_progress: np.ndarray         # (MAX_DROPS,) float32 in [0, 1]
    drop_is_bad: np.ndarray           # (MAX_DROPS,) bool
    drop_mask: np.ndarray             # (MAX_DROPS,) bool

    @property
    def good_uids(self) -> np.ndarray:
        """UIDs of live good drops."""
        return self.drop_uid[self.drop_mask & ~self.drop_is_bad]

    def to_dict(self) -> Dict[str, np.ndarray]:
        """Convert to a flat dictionary of numpy values."""
        return {
            "score": np.array(self.score, dtype=np.int64),
            "time_left": np.array(self.time_left, dtype=np.int32),
            "target_score": np.array(self.target_score, dtype=np.int32),
            "now_ms": np.array(self.now_ms, dtype=np.int64),
            "live_count": np.array(self.live_count, dtype=np.int32),
            "container_width": np.array(self.container_width, dtype=np.float32),
            "container_height": np.array(self.container_height, dtype=np.float32),
            "drop_uid": self.drop_uid,
            "drop_x": self.drop_x,
            "drop_y": self.drop_y,
            "drop_size": self.drop_size,
            "drop_progress": self.drop_progress,
            "drop_is_bad": self.drop_is_bad,
            "drop_mask": self.drop_mask,
        }


class SnapshotBuilder:
    """Builds round snapshots with pre-allocated arrays."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._max_drops = config.spawner.max_live_drops

        # Pre-allocate arrays
        self._uid = np.full(self._max_drops, -1, dtype=np.int32)
        self._x = np.zeros(self._max_drops, dtype=np.float32)
        self._y = np.zeros(self._max_drops, dtype=np.float32)
        self._size = np.zeros(self._max_drops, dtype=np.float32)
        self._progress = np.zeros(self._max_drops, dtype=np.float32)
        self._is_bad = np.zeros(self._max_drops, dtype=bool)
        self._mask = np.zeros(self._max_drops, dtype=bool)

    @property
    def max_drops(self) -> int:
        return self._max_drops

    def build(
        self,
        drops: Iterable[Drop],
        now_ms: int,
        phase: str,
        score: int,
        time_left: int,
        target_score: int,
        container_width: float,
        container_height: float
    ) -> RoundSnapshot:
        """Build a snapshot from current round state."""
        # Reset arrays
        self._uid.fill(-1)
        self._x.fill(0)
        self._y.fill(0)
        self._size.fill(0)
        self._progress.fill(0)
        self._is_bad.fill(False)
        self._mask.fill(False)

        live = sorted(drops, key=lambda d: d.uid)
        count = min(len(live), self._max_drops)

        for i, drop in enumerate(live[:count]):
            self._uid[i] = drop.uid
            self._x[i] = drop.x
            self._y[i] = drop.y(now_ms, container_height)
            self._size[i] = drop.size
            self._progress[i] = drop.progress(now_ms)
            self._is_bad[i] = drop.is_bad
            self._mask[i] = True

        return RoundSnapshot(
            phase=phase,
            score=score,
            time_left=time_left,
            target_score=target_score,
            now_ms=now_ms,
            live_count=len(live),
            container_width=float(container_width),
            container_height=float(container_height),
            drop_uid=self._uid.copy(),
            drop_x=self._x.copy(),
            drop_y=self._y.copy(),
            drop_size=self._size.copy(),
            drop_progress=self._progress.copy(),
            drop_is_bad=self._is_bad.copy(),
            drop_mask=self._mask.copy()
        )

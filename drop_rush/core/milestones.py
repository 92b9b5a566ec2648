"""
Milestone Notifier
==================

Fires one-time notifications when the score first reaches a threshold.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional, Set, Tuple

from drop_rush.core.config_loader import GameConfig, MilestoneConfig, get_config


class MilestoneNotifier:
    """
    Tracks which thresholds have been shown during the current round.

    Every check scans the whole ascending list, so a score that jumps past
    several thresholds at once fires all of them, lowest first.
    """

    def __init__(
        self,
        milestones: Optional[Iterable[MilestoneConfig]] = None,
        config: Optional[GameConfig] = None
    ):
        """
        Initialize notifier.

        Args:
            milestones: Explicit milestone list. Taken from config if None.
            config: Game configuration. Uses default if None.
        """
        if milestones is None:
            if config is None:
                config = get_config()
            milestones = config.milestones

        self._milestones: Tuple[MilestoneConfig, ...] = tuple(
            sorted(milestones, key=lambda m: m.threshold)
        )
        self._shown: Set[int] = set()

    @property
    def milestones(self) -> Tuple[MilestoneConfig, ...]:
        return self._milestones

    @property
    def shown(self) -> FrozenSet[int]:
        """Thresholds already notified this round."""
        return frozenset(self._shown)

    def check(self, score: int) -> List[MilestoneConfig]:
        """
        Mark and return every not-yet-shown milestone with threshold <= score.

        Args:
            score: Current score.

        Returns:
            Newly reached milestones in ascending threshold order.
        """
        reached = []
        for milestone in self._milestones:
            if milestone.threshold <= score and milestone.threshold not in self._shown:
                self._shown.add(milestone.threshold)
                reached.append(milestone)
        return reached

    def reset(self) -> None:
        """Forget shown milestones (round start / reset)."""
        self._shown.clear()

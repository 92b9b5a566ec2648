"""
Scoring System
==============

Applies catch rewards and penalties; score never drops below zero.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    delta: int
    score: int
    drop_uid: int
    is_penalty: bool

    def __repr__(self) -> str:
        kind = "penalty" if self.is_penalty else "catch"
        return f"ScoreEvent({kind} {self.delta:+d} -> {self.score})"


class ScoreTracker:
    """
    Tracks the round score and per-round drop outcomes.

    - Good drop caught: +1
    - Bad drop clicked: -1, floored at 0
    - Drop expired: no change, counted only
    """

    REWARD = 1
    PENALTY = 1

    def __init__(self):
        self._score: int = 0
        self._caught: int = 0
        self._penalized: int = 0
        self._expired: int = 0

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def caught(self) -> int:
        """Good drops clicked this round."""
        return self._caught

    @property
    def penalized(self) -> int:
        """Bad drops clicked this round."""
        return self._penalized

    @property
    def expired(self) -> int:
        """Drops that fell out unclicked this round."""
        return self._expired

    def apply_catch(self, drop_uid: int) -> ScoreEvent:
        """Apply the reward for a good drop."""
        self._score += self.REWARD
        self._caught += 1
        return ScoreEvent(delta=self.REWARD, score=self._score, drop_uid=drop_uid, is_penalty=False)

    def apply_penalty(self, drop_uid: int) -> ScoreEvent:
        """Apply the penalty for a bad drop."""
        before = self._score
        self._score = max(0, self._score - self.PENALTY)
        self._penalized += 1
        return ScoreEvent(
            delta=self._score - before,
            score=self._score,
            drop_uid=drop_uid,
            is_penalty=True
        )

    def record_expired(self) -> None:
        self._expired += 1

    def reset(self) -> None:
        """Reset score and counters to zero."""
        self._score = 0
        self._caught = 0
        self._penalized = 0
        self._expired = 0

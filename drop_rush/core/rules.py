"""
Round Rules
===========

End-of-round classification, result messages and follow-up actions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlencode

from drop_rush.core.config_loader import GameConfig, RoundConfig, get_config
from drop_rush.core.rng import GameRng

# Actions offered on the end-of-round panel
ACTION_SHARE = "share"
ACTION_DONATE = "donate"
ACTION_PLAY_AGAIN = "play_again"
END_ACTIONS: Tuple[str, ...] = (ACTION_SHARE, ACTION_DONATE, ACTION_PLAY_AGAIN)


@dataclass(frozen=True)
class RoundResult:
    """Outcome of a finished round."""
    won: bool
    score: int
    target_score: int
    difficulty: str
    message: str
    fact: str
    actions: Tuple[str, ...] = END_ACTIONS
    caught: int = 0
    penalized: int = 0
    expired: int = 0

    @staticmethod
    def win(score: int, round_config: RoundConfig, fact: str, **counters) -> "RoundResult":
        return RoundResult(
            won=True,
            score=score,
            target_score=round_config.target_score,
            difficulty=round_config.name,
            message=f"\U0001F389 Winner! You scored {score}!",
            fact=fact,
            **counters
        )

    @staticmethod
    def loss(score: int, round_config: RoundConfig, fact: str, **counters) -> "RoundResult":
        return RoundResult(
            won=False,
            score=score,
            target_score=round_config.target_score,
            difficulty=round_config.name,
            message=f"Try again! Score at least {round_config.target_score} to win.",
            fact=fact,
            **counters
        )


def is_win(score: int, round_config: RoundConfig) -> bool:
    """A round is won when the final score reaches the target."""
    return score >= round_config.target_score


class EndOfRoundResolver:
    """
    Turns a final score into a RoundResult.

    Picks one fact uniformly from the configured list for every round,
    won or lost.
    """

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[GameRng] = None):
        """
        Initialize resolver.

        Args:
            config: Game configuration. Uses default if None.
            rng: Shared random source. A fresh unseeded one if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = rng if rng is not None else GameRng()
        self._facts = config.facts
        self._links = config.links

    def pick_fact(self) -> str:
        return self._rng.choice(self._facts)

    def resolve(
        self,
        score: int,
        round_config: RoundConfig,
        caught: int = 0,
        penalized: int = 0,
        expired: int = 0
    ) -> RoundResult:
        """
        Classify the final score.

        Args:
            score: Final score.
            round_config: Difficulty the round was played on.
            caught, penalized, expired: Round counters carried into the result.

        Returns:
            RoundResult with message, fact and actions.
        """
        fact = self.pick_fact()
        counters = dict(caught=caught, penalized=penalized, expired=expired)
        if is_win(score, round_config):
            return RoundResult.win(score, round_config, fact, **counters)
        return RoundResult.loss(score, round_config, fact, **counters)

    def share_text(self, result: RoundResult) -> str:
        """Text for the share dialog."""
        return self._links.share_template.format(
            score=result.score,
            difficulty=result.difficulty,
            target=result.target_score
        )

    def share_url(self, result: RoundResult) -> str:
        """Share link with the text pre-filled."""
        query = urlencode({"text": self.share_text(result)})
        return f"{self._links.share_url}?{query}"

    @property
    def donate_url(self) -> str:
        return self._links.donate_url

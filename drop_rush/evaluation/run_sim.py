"""
Simulation Harness
==================

Plays rounds headlessly with a simple clicking bot and reports score and
win-rate statistics per difficulty. Useful for checking that the presets
stay winnable after tuning game_config.yaml.

Usage:
    python -m drop_rush.evaluation.run_sim --difficulty all --seeds 50
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from drop_rush.core.config_loader import GameConfig, load_config
from drop_rush.core.game import RoundController
from drop_rush.core.state_snapshot import RoundSnapshot

FRAME_MS = 16


class ClickerBot:
    """
    Imperfect human stand-in.

    Each frame it may click at most one drop that has been visible for at
    least ``reaction_ms``. It targets good drops, hits them with
    probability ``accuracy`` and mistakes a bad drop for a good one with
    probability ``confusion``. After a click it waits ``cooldown_ms``.
    """

    def __init__(
        self,
        accuracy: float = 0.9,
        confusion: float = 0.1,
        reaction_ms: int = 350,
        cooldown_ms: int = 250,
        seed: Optional[int] = None
    ):
        self.accuracy = accuracy
        self.confusion = confusion
        self.reaction_ms = reaction_ms
        self.cooldown_ms = cooldown_ms
        self._rng = np.random.default_rng(seed)
        self._ready_at = 0

    def act(self, snapshot: RoundSnapshot, fall_duration_ms: int) -> Optional[int]:
        """
        Pick a drop to click.

        Returns:
            Drop UID, or None to do nothing this frame.
        """
        if snapshot.now_ms < self._ready_at:
            return None

        min_progress = self.reaction_ms / max(1, fall_duration_ms)
        visible = snapshot.drop_mask & (snapshot.drop_progress >= min_progress)
        if not visible.any():
            return None

        good = np.flatnonzero(visible & ~snapshot.drop_is_bad)
        bad = np.flatnonzero(visible & snapshot.drop_is_bad)

        if len(bad) and self._rng.random() < self.confusion:
            index = int(bad[np.argmax(snapshot.drop_progress[bad])])
        elif len(good):
            if self._rng.random() >= self.accuracy:
                self._ready_at = snapshot.now_ms + self.cooldown_ms
                return None
            # Closest to falling out first
            index = int(good[np.argmax(snapshot.drop_progress[good])])
        else:
            return None

        self._ready_at = snapshot.now_ms + self.cooldown_ms
        return int(snapshot.drop_uid[index])


@dataclass
class SimResult:
    """Result for a single seed."""
    seed: int
    difficulty: str
    final_score: int
    won: bool
    caught: int
    penalized: int
    expired: int
    elapsed_time: float


@dataclass
class SimSummary:
    """Summary of simulation across all seeds for one difficulty."""
    difficulty: str
    target_score: int
    win_rate: float
    mean_score: float
    std_score: float
    min_score: int
    max_score: int
    median_score: float
    results: List[SimResult]


def simulate_round(
    config: GameConfig,
    difficulty: str,
    seed: int,
    bot: ClickerBot,
    verbose: bool = False
) -> SimResult:
    """
    Play one full round on a fresh controller.

    Args:
        config: Game configuration.
        difficulty: Difficulty preset name.
        seed: Random seed for the round.
        bot: Bot making the clicks.
        verbose: If True, print the result line.

    Returns:
        SimResult for this seed.
    """
    controller = RoundController(config=config, difficulty=difficulty, seed=seed)
    fall_ms = controller.round_config.fall_duration_ms
    start_time = time.time()

    controller.start()
    while controller.is_running:
        controller.advance(FRAME_MS)
        if not controller.is_running:
            break
        uid = bot.act(controller.snapshot(), fall_ms)
        if uid is not None:
            controller.click(uid)

    elapsed = time.time() - start_time
    outcome = controller.last_result

    result = SimResult(
        seed=seed,
        difficulty=controller.difficulty,
        final_score=outcome.score,
        won=outcome.won,
        caught=outcome.caught,
        penalized=outcome.penalized,
        expired=outcome.expired,
        elapsed_time=elapsed
    )

    if verbose:
        print(f"  Seed {seed}: score={result.final_score}/{outcome.target_score} "
              f"{'WIN' if result.won else 'loss'} caught={result.caught} "
              f"penalized={result.penalized} expired={result.expired}")

    return result


def simulate_difficulty(
    config: GameConfig,
    difficulty: str,
    seeds: List[int],
    accuracy: float = 0.9,
    confusion: float = 0.1,
    reaction_ms: int = 350,
    cooldown_ms: int = 250,
    verbose: bool = True
) -> SimSummary:
    """
    Simulate every seed on one difficulty.

    Returns:
        SimSummary with aggregate statistics.
    """
    if verbose:
        print(f"Simulating '{difficulty}' on {len(seeds)} seeds...")

    results: List[SimResult] = []
    for seed in seeds:
        bot = ClickerBot(
            accuracy=accuracy,
            confusion=confusion,
            reaction_ms=reaction_ms,
            cooldown_ms=cooldown_ms,
            seed=seed
        )
        results.append(simulate_round(config, difficulty, seed, bot, verbose=verbose))

    scores = [r.final_score for r in results]
    return SimSummary(
        difficulty=difficulty,
        target_score=config.get_difficulty(difficulty).target_score,
        win_rate=float(np.mean([r.won for r in results])),
        mean_score=float(np.mean(scores)),
        std_score=float(np.std(scores)),
        min_score=int(min(scores)),
        max_score=int(max(scores)),
        median_score=float(np.median(scores)),
        results=results
    )


def print_summary(summaries: List[SimSummary]) -> None:
    print()
    print("=" * 50)
    print("SIMULATION SUMMARY")
    print("=" * 50)
    for s in summaries:
        print(f"{s.difficulty} (target {s.target_score})")
        print(f"  Win rate:      {s.win_rate * 100:.1f}%")
        print(f"  Mean score:    {s.mean_score:.2f} (std {s.std_score:.2f})")
        print(f"  Min / Max:     {s.min_score} / {s.max_score}")
        print(f"  Median score:  {s.median_score:.2f}")
    print("=" * 50)


def save_results(summaries: List[SimSummary], output_path: str) -> None:
    """Save simulation results to JSON."""
    data: Dict[str, object] = {
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "difficulties": [
            {
                "difficulty": s.difficulty,
                "target_score": s.target_score,
                "win_rate": s.win_rate,
                "mean_score": s.mean_score,
                "std_score": s.std_score,
                "min_score": s.min_score,
                "max_score": s.max_score,
                "median_score": s.median_score,
                "results": [
                    {
                        "seed": r.seed,
                        "final_score": r.final_score,
                        "won": r.won,
                        "caught": r.caught,
                        "penalized": r.penalized,
                        "expired": r.expired,
                    }
                    for r in s.results
                ],
            }
            for s in summaries
        ],
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)

    print(f"Results saved to {output_path}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Simulate Drop Rush rounds with a bot")
    parser.add_argument("--difficulty", type=str, default="all",
                        help="Difficulty name, or 'all'")
    parser.add_argument("--seeds", type=int, default=20, help="Number of seeds")
    parser.add_argument("--base-seed", type=int, default=0, help="First seed")
    parser.add_argument("--accuracy", type=float, default=0.9)
    parser.add_argument("--confusion", type=float, default=0.1)
    parser.add_argument("--reaction", type=int, default=350, help="Reaction time in ms")
    parser.add_argument("--cooldown", type=int, default=250, help="Time between clicks in ms")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--output", type=str, default=None, help="Path to save results JSON")
    parser.add_argument("--quiet", action="store_true", help="Reduce output verbosity")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}")
        return 1

    if args.difficulty == "all":
        difficulties = list(config.difficulty_names)
    elif args.difficulty in config.difficulty_names:
        difficulties = [args.difficulty]
    else:
        print(f"Unknown difficulty '{args.difficulty}', expected one of "
              f"{list(config.difficulty_names)} or 'all'")
        return 1

    seeds = list(range(args.base_seed, args.base_seed + args.seeds))
    summaries = [
        simulate_difficulty(
            config,
            name,
            seeds,
            accuracy=args.accuracy,
            confusion=args.confusion,
            reaction_ms=args.reaction,
            cooldown_ms=args.cooldown,
            verbose=not args.quiet
        )
        for name in difficulties
    ]

    print_summary(summaries)

    if args.output:
        save_results(summaries, args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())

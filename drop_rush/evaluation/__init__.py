"""
Evaluation Package
==================

Headless bot simulation for checking difficulty balance.
"""

from drop_rush.evaluation.run_sim import ClickerBot, simulate_difficulty, simulate_round

__all__ = ["ClickerBot", "simulate_difficulty", "simulate_round"]

"""
Drop Rush Core - headless round logic.

This module provides the round state machine and all supporting systems
(difficulty table, scheduler, spawner, scoring, milestones, end-of-round
rules). Rendering and audio live in render_pygame and audio and are not
imported here so the core runs without pygame.

Main exports:
- RoundController: Round state machine (start/tick/end/reset)
- GameConfig: Configuration loaded from game_config.yaml
- Scheduler: Virtual-clock timer queue driving the round
- RecordingFeedback: Feedback sink collecting render commands and cues
"""

from drop_rush.core.config_loader import GameConfig, RoundConfig, load_config
from drop_rush.core.difficulty_table import DifficultyTable
from drop_rush.core.feedback import AudioCue, FeedbackSink, NullFeedback, RecordingFeedback
from drop_rush.core.game import Phase, RoundController, RoundState
from drop_rush.core.rules import RoundResult
from drop_rush.core.scheduler import Scheduler

__all__ = [
    "GameConfig",
    "RoundConfig",
    "load_config",
    "DifficultyTable",
    "AudioCue",
    "FeedbackSink",
    "NullFeedback",
    "RecordingFeedback",
    "Phase",
    "RoundController",
    "RoundState",
    "RoundResult",
    "Scheduler",
]

"""
Drop Rush
=========

A casual arcade game: catch the clean drops, dodge the dirty ones, and
reach the target score before the countdown runs out.

- core: round state machine, spawner, scoring, milestones, feedback
- evaluation: headless bot simulation for difficulty balancing

All tunable parameters live in game_config.yaml.
"""

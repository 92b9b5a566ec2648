"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml

DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(__file__)),
    "game_config.yaml"
)


@dataclass(frozen=True)
class RoundConfig:
    """Parameters of a single difficulty preset."""
    name: str
    target_score: int            # Score needed to win
    duration_seconds: int        # Round length
    spawn_interval_ms: int       # Time between spawned drops
    fall_duration_ms: int        # Time a drop stays on screen
    bad_probability: float       # Chance a spawned drop is bad


@dataclass(frozen=True)
class SpawnerConfig:
    """Drop geometry and container size."""
    base_size: float
    min_size_multiplier: float
    max_size_multiplier: float
    container_width: int
    container_height: int
    max_live_drops: int

    @property
    def min_size(self) -> float:
        return self.base_size * self.min_size_multiplier

    @property
    def max_size(self) -> float:
        return self.base_size * self.max_size_multiplier


@dataclass(frozen=True)
class EffectsConfig:
    """Visual feedback tuning."""
    particle_count: int
    particle_lifetime_ms: int
    particle_jitter: float
    particle_min_distance: float
    particle_max_distance: float
    bounce_ms: int
    explode_ms: int
    confetti_count: int
    confetti_lifetime_ms: int
    confetti_width: float
    toast_lifetime_ms: int
    particle_palette: Tuple[Tuple[int, int, int], ...]
    confetti_palette: Tuple[Tuple[int, int, int], ...]


@dataclass(frozen=True)
class MilestoneConfig:
    """One-time notification tied to a score threshold."""
    threshold: int
    message: str


@dataclass(frozen=True)
class LinksConfig:
    """External share/donate targets."""
    share_url: str
    donate_url: str
    share_template: str


@dataclass(frozen=True)
class AudioConfig:
    """Audio backend settings."""
    enabled: bool
    volume: float
    sample_rate: int
    clips: Tuple[Tuple[str, str], ...]   # (cue name, file path) pairs

    def clip_for(self, cue_name: str) -> Optional[str]:
        """Configured clip path for a cue, or None."""
        for name, path in self.clips:
            if name == cue_name:
                return path
        return None


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    default_difficulty: str
    difficulties: Tuple[RoundConfig, ...]
    spawner: SpawnerConfig
    effects: EffectsConfig
    milestones: Tuple[MilestoneConfig, ...]
    facts: Tuple[str, ...]
    links: LinksConfig
    audio: AudioConfig

    @property
    def difficulty_names(self) -> Tuple[str, ...]:
        """Preset names in declaration order."""
        return tuple(d.name for d in self.difficulties)

    def get_difficulty(self, name: str) -> RoundConfig:
        """Get a difficulty preset by name."""
        for difficulty in self.difficulties:
            if difficulty.name == name:
                return difficulty
        raise ValueError(f"Unknown difficulty: {name}")


def _parse_color(color_data) -> Tuple[int, int, int]:
    """Parse an RGB color given as '#RRGGBB' or [R, G, B]."""
    if isinstance(color_data, str):
        value = color_data.lstrip("#")
        if len(value) != 6:
            raise ValueError(f"Color must be '#RRGGBB', got {color_data!r}")
        return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
    if len(color_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {color_data}")
    return (int(color_data[0]), int(color_data[1]), int(color_data[2]))


def _parse_difficulty(name: str, data: dict) -> RoundConfig:
    """Parse a single difficulty preset from YAML."""
    return RoundConfig(
        name=str(name),
        target_score=int(data["target_score"]),
        duration_seconds=int(data["duration_seconds"]),
        spawn_interval_ms=int(data["spawn_interval_ms"]),
        fall_duration_ms=int(data["fall_duration_ms"]),
        bad_probability=float(data["bad_probability"])
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if not config.difficulties:
        raise ValueError("At least one difficulty preset is required")

    if config.default_difficulty not in config.difficulty_names:
        raise ValueError(
            f"default_difficulty '{config.default_difficulty}' is not one of "
            f"{list(config.difficulty_names)}"
        )

    for d in config.difficulties:
        if not 0.0 <= d.bad_probability <= 1.0:
            raise ValueError(
                f"{d.name}: bad_probability must be in [0, 1], got {d.bad_probability}"
            )
        if d.duration_seconds <= 0:
            raise ValueError(f"{d.name}: duration_seconds must be positive")
        if d.spawn_interval_ms <= 0 or d.fall_duration_ms <= 0:
            raise ValueError(f"{d.name}: spawn_interval_ms and fall_duration_ms must be positive")
        if d.target_score < 0:
            raise ValueError(f"{d.name}: target_score must be non-negative")

    spawner = config.spawner
    if spawner.base_size <= 0:
        raise ValueError("spawner.base_size must be positive")
    if spawner.min_size_multiplier <= 0 or spawner.min_size_multiplier > spawner.max_size_multiplier:
        raise ValueError(
            f"Invalid size multiplier range "
            f"[{spawner.min_size_multiplier}, {spawner.max_size_multiplier}]"
        )
    if spawner.container_width <= 0 or spawner.container_height <= 0:
        raise ValueError("Container dimensions must be positive")

    # Milestones must be strictly ascending
    thresholds = [m.threshold for m in config.milestones]
    for prev, cur in zip(thresholds, thresholds[1:]):
        if cur <= prev:
            raise ValueError(f"Milestone thresholds must be strictly ascending, got {thresholds}")

    if not config.facts:
        raise ValueError("At least one fact is required")

    if not config.effects.particle_palette or not config.effects.confetti_palette:
        raise ValueError("Effect palettes must not be empty")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    difficulties = tuple(
        _parse_difficulty(name, data)
        for name, data in raw["difficulties"].items()
    )

    spawner_data = raw["spawner"]
    spawner = SpawnerConfig(
        base_size=float(spawner_data.get("base_size", 60)),
        min_size_multiplier=float(spawner_data.get("min_size_multiplier", 0.5)),
        max_size_multiplier=float(spawner_data.get("max_size_multiplier", 1.3)),
        container_width=int(spawner_data.get("container_width", 600)),
        container_height=int(spawner_data.get("container_height", 600)),
        max_live_drops=int(spawner_data.get("max_live_drops", 64))
    )

    fx_data = raw.get("effects", {})
    effects = EffectsConfig(
        particle_count=int(fx_data.get("particle_count", 8)),
        particle_lifetime_ms=int(fx_data.get("particle_lifetime_ms", 800)),
        particle_jitter=float(fx_data.get("particle_jitter", 8)),
        particle_min_distance=float(fx_data.get("particle_min_distance", 24)),
        particle_max_distance=float(fx_data.get("particle_max_distance", 58)),
        bounce_ms=int(fx_data.get("bounce_ms", 160)),
        explode_ms=int(fx_data.get("explode_ms", 700)),
        confetti_count=int(fx_data.get("confetti_count", 40)),
        confetti_lifetime_ms=int(fx_data.get("confetti_lifetime_ms", 1500)),
        confetti_width=float(fx_data.get("confetti_width", 12)),
        toast_lifetime_ms=int(fx_data.get("toast_lifetime_ms", 2200)),
        particle_palette=tuple(
            _parse_color(c) for c in fx_data.get("particle_palette", ["#FFC907"])
        ),
        confetti_palette=tuple(
            _parse_color(c) for c in fx_data.get("confetti_palette", ["#FFC907"])
        )
    )

    milestones = tuple(
        MilestoneConfig(threshold=int(m["threshold"]), message=str(m["message"]))
        for m in raw.get("milestones", [])
    )

    facts = tuple(str(f) for f in raw.get("facts", []))

    links_data = raw.get("links", {})
    links = LinksConfig(
        share_url=str(links_data.get("share_url", "")),
        donate_url=str(links_data.get("donate_url", "")),
        share_template=str(links_data.get("share_template", "I scored {score}!"))
    )

    # Parse audio (optional section)
    audio_data = raw.get("audio", {})
    clips: Dict[str, str] = audio_data.get("clips") or {}
    audio = AudioConfig(
        enabled=bool(audio_data.get("enabled", True)),
        volume=float(audio_data.get("volume", 0.8)),
        sample_rate=int(audio_data.get("sample_rate", 44100)),
        clips=tuple((str(k), str(v)) for k, v in clips.items())
    )

    config = GameConfig(
        default_difficulty=str(raw.get("default_difficulty", "normal")),
        difficulties=difficulties,
        spawner=spawner,
        effects=effects,
        milestones=milestones,
        facts=facts,
        links=links,
        audio=audio
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config

"""
Difficulty Table
================

Provides convenient access to the difficulty presets loaded from config.
"""

from __future__ import annotations

from typing import Optional, Tuple

from drop_rush.core.config_loader import GameConfig, RoundConfig, get_config


class DifficultyTable:
    """
    Static mapping from difficulty name to RoundConfig.

    Lookups with an unknown name fall back to the default preset, the same
    way the difficulty selector treats an unrecognised value.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize table from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._presets: Tuple[RoundConfig, ...] = config.difficulties
        self._default_name = config.default_difficulty

    def __len__(self) -> int:
        return len(self._presets)

    def __contains__(self, name: object) -> bool:
        return any(p.name == name for p in self._presets)

    def __getitem__(self, name: str) -> RoundConfig:
        """Get preset by exact name."""
        for preset in self._presets:
            if preset.name == name:
                return preset
        raise KeyError(f"Unknown difficulty '{name}', expected one of {list(self.names)}")

    def __iter__(self):
        return iter(self._presets)

    @property
    def names(self) -> Tuple[str, ...]:
        """Preset names in declaration order."""
        return tuple(p.name for p in self._presets)

    @property
    def default_name(self) -> str:
        return self._default_name

    @property
    def default(self) -> RoundConfig:
        """The default preset."""
        return self[self._default_name]

    def get(self, name: Optional[str]) -> RoundConfig:
        """
        Get preset by name, falling back to the default.

        Args:
            name: Difficulty name (case-insensitive). None selects the default.

        Returns:
            Matching RoundConfig, or the default preset if no match.
        """
        if name is None:
            return self.default
        name_lower = name.lower()
        for preset in self._presets:
            if preset.name.lower() == name_lower:
                return preset
        return self.default


"""
Tests for configuration loading and the difficulty table.
"""

import pytest
import yaml

from drop_rush.core.config_loader import DEFAULT_CONFIG_PATH, get_config, load_config, reload_config
from drop_rush.core.difficulty_table import DifficultyTable


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def raw_config():
    """Default YAML as a plain dict, for writing modified copies."""
    with open(DEFAULT_CONFIG_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def write_config(tmp_path, raw):
    path = tmp_path / "game_config.yaml"
    path.write_text(yaml.safe_dump(raw), encoding="utf-8")
    return str(path)


class TestLoadConfig:
    """Test YAML parsing."""

    def test_presets(self, config):
        """Default presets carry the tuned values."""
        easy = config.get_difficulty("easy")
        normal = config.get_difficulty("normal")
        hard = config.get_difficulty("hard")

        assert (easy.target_score, easy.duration_seconds) == (10, 45)
        assert (easy.spawn_interval_ms, easy.fall_duration_ms) == (800, 4500)
        assert easy.bad_probability == pytest.approx(0.12)

        assert (normal.target_score, normal.duration_seconds) == (20, 30)
        assert (normal.spawn_interval_ms, normal.fall_duration_ms) == (500, 4000)
        assert normal.bad_probability == pytest.approx(0.25)

        assert (hard.target_score, hard.duration_seconds) == (30, 20)
        assert (hard.spawn_interval_ms, hard.fall_duration_ms) == (300, 3200)
        assert hard.bad_probability == pytest.approx(0.35)

    def test_default_difficulty(self, config):
        assert config.default_difficulty == "normal"
        assert config.difficulty_names == ("easy", "normal", "hard")

    def test_milestones_ascending(self, config):
        thresholds = [m.threshold for m in config.milestones]
        assert thresholds == [1, 5, 10, 15, 20]

    def test_colors_parsed(self, config):
        assert config.effects.particle_palette[0] == (0xFF, 0xC9, 0x07)
        assert len(config.effects.confetti_palette) == 8

    def test_facts_present(self, config):
        assert len(config.facts) > 0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_unknown_difficulty_lookup(self, config):
        with pytest.raises(ValueError):
            config.get_difficulty("nightmare")

    def test_config_is_frozen(self, config):
        with pytest.raises(Exception):
            config.get_difficulty("easy").target_score = 1

    def test_reload_replaces_cache(self, tmp_path, raw_config):
        raw_config["difficulties"]["easy"]["target_score"] = 3
        path = write_config(tmp_path, raw_config)

        try:
            reloaded = reload_config(path)
            assert reloaded.get_difficulty("easy").target_score == 3
            assert get_config() is reloaded
        finally:
            reload_config()


class TestValidation:
    """Test config validation errors."""

    def test_probability_out_of_range(self, tmp_path, raw_config):
        raw_config["difficulties"]["hard"]["bad_probability"] = 1.5
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_non_positive_interval(self, tmp_path, raw_config):
        raw_config["difficulties"]["normal"]["spawn_interval_ms"] = 0
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_default_difficulty_must_exist(self, tmp_path, raw_config):
        raw_config["default_difficulty"] = "impossible"
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_milestones_must_ascend(self, tmp_path, raw_config):
        raw_config["milestones"] = [
            {"threshold": 5, "message": "five"},
            {"threshold": 1, "message": "one"},
        ]
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_empty_facts(self, tmp_path, raw_config):
        raw_config["facts"] = []
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))

    def test_inverted_size_range(self, tmp_path, raw_config):
        raw_config["spawner"]["min_size_multiplier"] = 2.0
        raw_config["spawner"]["max_size_multiplier"] = 1.0
        with pytest.raises(ValueError):
            load_config(write_config(tmp_path, raw_config))


class TestDifficultyTable:
    """Test name -> preset mapping."""

    def test_lookup_by_name(self, config):
        table = DifficultyTable(config)
        assert table["hard"].target_score == 30
        assert "easy" in table
        assert len(table) == 3

    def test_unknown_name_falls_back_to_default(self, config):
        table = DifficultyTable(config)
        assert table.get("nightmare").name == "normal"
        assert table.get(None).name == "normal"

    def test_lookup_case_insensitive(self, config):
        table = DifficultyTable(config)
        assert table.get("HARD").name == "hard"

    def test_strict_lookup_raises(self, config):
        table = DifficultyTable(config)
        with pytest.raises(KeyError):
            table["nightmare"]

"""
Tests for numpy snapshots, the simulation harness and tone synthesis.
"""

import json

import numpy as np
import pytest

from drop_rush.core.audio import CUE_TONES, Tone, mix_tones, synthesize_tone
from drop_rush.core.config_loader import load_config
from drop_rush.core.feedback import AudioCue
from drop_rush.core.game import RoundController
from drop_rush.evaluation.run_sim import ClickerBot, main, simulate_difficulty, simulate_round


@pytest.fixture
def config():
    return load_config()


class TestSnapshot:
    """Test snapshot array layout."""

    def test_idle_snapshot_empty(self, config):
        snap = RoundController(config=config, seed=0).snapshot()
        max_drops = config.spawner.max_live_drops

        assert snap.phase == "idle"
        assert snap.live_count == 0
        assert snap.drop_uid.shape == (max_drops,)
        assert snap.drop_uid.dtype == np.int32
        assert snap.drop_x.dtype == np.float32
        assert not snap.drop_mask.any()
        assert (snap.drop_uid == -1).all()

    def test_running_snapshot_matches_live_drops(self, config):
        controller = RoundController(config=config, seed=0)
        controller.start()
        controller.advance(2200)

        snap = controller.snapshot()
        live = controller.live_drops

        assert snap.live_count == len(live)
        assert snap.drop_mask.sum() == len(live)
        assert list(snap.drop_uid[:len(live)]) == [d.uid for d in live]
        assert list(snap.drop_is_bad[:len(live)]) == [d.is_bad for d in live]
        assert set(snap.good_uids) == {d.uid for d in live if not d.is_bad}
        assert ((snap.drop_progress >= 0) & (snap.drop_progress <= 1)).all()

    def test_snapshot_is_a_copy(self, config):
        controller = RoundController(config=config, seed=0)
        controller.start()
        controller.advance(1000)

        first = controller.snapshot()
        uids = first.drop_uid.copy()
        controller.end()
        controller.snapshot()

        assert (first.drop_uid == uids).all()

    def test_to_dict_keys(self, config):
        d = RoundController(config=config, seed=0).snapshot().to_dict()
        assert {"score", "time_left", "drop_mask", "drop_x"} <= set(d)


class TestSimulation:
    """Test the headless bot harness."""

    def test_perfect_bot_wins_easy(self, config):
        bot = ClickerBot(accuracy=1.0, confusion=0.0, seed=0)
        result = simulate_round(config, "easy", seed=0, bot=bot)

        assert result.won
        assert result.penalized == 0
        assert result.final_score == result.caught

    def test_idle_bot_loses(self, config):
        bot = ClickerBot(accuracy=0.0, confusion=0.0, seed=0)
        result = simulate_round(config, "normal", seed=0, bot=bot)

        assert not result.won
        assert result.final_score == 0
        assert result.expired > 0

    def test_deterministic_per_seed(self, config):
        a = simulate_round(config, "hard", 3, ClickerBot(seed=3))
        b = simulate_round(config, "hard", 3, ClickerBot(seed=3))
        assert (a.final_score, a.caught, a.penalized) == (b.final_score, b.caught, b.penalized)

    def test_summary(self, config):
        summary = simulate_difficulty(config, "easy", [0, 1, 2], verbose=False)
        assert len(summary.results) == 3
        assert 0.0 <= summary.win_rate <= 1.0
        assert summary.min_score <= summary.median_score <= summary.max_score

    def test_cli_writes_json(self, tmp_path):
        output = tmp_path / "sim.json"
        code = main(["--difficulty", "easy", "--seeds", "2", "--quiet", "--output", str(output)])

        assert code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["difficulties"][0]["difficulty"] == "easy"
        assert len(data["difficulties"][0]["results"]) == 2

    def test_cli_unknown_difficulty(self):
        assert main(["--difficulty", "nightmare", "--seeds", "1", "--quiet"]) == 1


class TestToneSynthesis:
    """Test cue synthesis without an audio device."""

    def test_every_cue_has_tones(self):
        assert set(CUE_TONES) == set(AudioCue)

    def test_mix_shape_and_dtype(self):
        buffer = mix_tones(CUE_TONES[AudioCue.START], 44100)
        assert buffer.dtype == np.int16
        assert buffer.ndim == 2 and buffer.shape[1] == 2
        # Longest layer: 0.08 s delay + 0.09 s + 0.02 s tail
        assert buffer.shape[0] == pytest.approx(0.19 * 44100, abs=2)

    def test_mono_mixer_layout(self):
        stereo = mix_tones(CUE_TONES[AudioCue.FAIL], 22050, channels=2)
        mono = mix_tones(CUE_TONES[AudioCue.FAIL], 22050, channels=1)

        assert mono.ndim == 1
        assert mono.dtype == np.int16
        assert (mono == stereo[:, 0]).all()

    def test_multichannel_mixer_layout(self):
        buffer = mix_tones(CUE_TONES[AudioCue.WIN], 22050, channels=4)
        assert buffer.shape[1] == 4
        assert (buffer[:, 3] == buffer[:, 0]).all()

    def test_zero_channels_rejected(self):
        with pytest.raises(ValueError):
            mix_tones(CUE_TONES[AudioCue.WIN], 22050, channels=0)

    def test_envelope_silent_after_duration(self):
        samples = synthesize_tone(Tone(440, "sine", 0.1, 0.5), 8000)
        assert np.abs(samples).max() <= 0.5
        assert np.all(samples[int(0.1 * 8000) + 1:] == 0)

    @pytest.mark.parametrize("wave", ["sine", "triangle", "sawtooth", "square"])
    def test_waveforms_bounded(self, wave):
        samples = synthesize_tone(Tone(300, wave, 0.05, 1.0), 8000)
        assert np.abs(samples).max() <= 1.0

    def test_unknown_waveform(self):
        with pytest.raises(ValueError):
            synthesize_tone(Tone(300, "noise", 0.05, 1.0), 8000)

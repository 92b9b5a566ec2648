"""
Tests for end-of-round resolution: win/lose, facts, celebration and actions.
"""

from dataclasses import replace
from urllib.parse import parse_qs, urlparse

import pytest

from drop_rush.core.config_loader import load_config
from drop_rush.core.feedback import AudioCue, ConfettiPiece, RecordingFeedback, RoundMessage
from drop_rush.core.game import Phase, RoundController
from drop_rush.core.rng import GameRng
from drop_rush.core.rules import END_ACTIONS, EndOfRoundResolver, is_win


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def resolver(config):
    return EndOfRoundResolver(config, GameRng(0))


@pytest.fixture
def normal(config):
    return config.get_difficulty("normal")


class TestResolver:
    """Test score classification."""

    def test_reaching_target_wins(self, resolver, normal):
        result = resolver.resolve(20, normal)
        assert result.won
        assert "20" in result.message
        assert result.target_score == 20

    def test_one_short_loses(self, resolver, normal):
        result = resolver.resolve(19, normal)
        assert not result.won
        assert "20" in result.message

    def test_above_target_wins(self, resolver, normal):
        assert resolver.resolve(35, normal).won

    def test_zero_target_always_wins(self, normal):
        assert is_win(0, replace(normal, target_score=0))

    def test_fact_from_config(self, resolver, normal, config):
        for score in (0, 20):
            assert resolver.resolve(score, normal).fact in config.facts

    def test_actions(self, resolver, normal):
        assert resolver.resolve(0, normal).actions == END_ACTIONS
        assert resolver.resolve(20, normal).actions == END_ACTIONS

    def test_counters_carried(self, resolver, normal):
        result = resolver.resolve(3, normal, caught=5, penalized=2, expired=7)
        assert (result.caught, result.penalized, result.expired) == (5, 2, 7)


class TestLinks:
    """Test share/donate targets."""

    def test_share_url_contains_score(self, resolver, normal, config):
        result = resolver.resolve(21, normal)
        url = resolver.share_url(result)

        assert url.startswith(config.links.share_url)
        text = parse_qs(urlparse(url).query)["text"][0]
        assert "21" in text
        assert "normal" in text

    def test_donate_url(self, resolver, config):
        assert resolver.donate_url == config.links.donate_url


class TestControllerEnd:
    """Test the end-of-round feedback emitted by the controller."""

    def make_controller(self, config, target, feedback):
        presets = tuple(
            replace(d, target_score=target, bad_probability=0.0) for d in config.difficulties
        )
        return RoundController(
            config=replace(config, difficulties=presets), seed=4, feedback=feedback
        )

    def play(self, controller, catches):
        controller.start()
        caught = 0
        while controller.is_running:
            controller.advance(500)
            for drop in controller.live_drops:
                if caught < catches:
                    controller.click(drop.uid)
                    caught += 1

    def test_win_celebrates(self, config):
        feedback = RecordingFeedback()
        controller = self.make_controller(config, 20, feedback)

        self.play(controller, 20)

        result = controller.last_result
        assert result.won
        assert result.score == 20
        assert len(feedback.of_type(ConfettiPiece)) == config.effects.confetti_count
        assert AudioCue.WIN in feedback.cues
        assert AudioCue.LOSE not in feedback.cues

        message = [m for m in feedback.of_type(RoundMessage) if m.visible][-1]
        assert message.won
        assert message.fact in config.facts
        assert message.actions == END_ACTIONS

    def test_loss_no_confetti(self, config):
        feedback = RecordingFeedback()
        controller = self.make_controller(config, 20, feedback)

        self.play(controller, 19)

        assert controller.phase is Phase.ENDED
        assert not controller.last_result.won
        assert controller.last_result.score == 19
        assert feedback.of_type(ConfettiPiece) == []
        assert AudioCue.LOSE in feedback.cues
        assert AudioCue.WIN not in feedback.cues

    def test_confetti_within_container(self, config):
        feedback = RecordingFeedback()
        controller = self.make_controller(config, 0, feedback)
        controller.start()
        controller.end()

        width = controller.container_width
        for piece in feedback.of_type(ConfettiPiece):
            assert 0 <= piece.x <= width - config.effects.confetti_width

    def test_reset_hides_message(self, config):
        feedback = RecordingFeedback()
        controller = self.make_controller(config, 0, feedback)
        controller.start()
        controller.end()
        assert controller.get_render_data()["message"]

        controller.reset()
        assert feedback.of_type(RoundMessage)[-1].visible is False
        assert controller.get_render_data()["message"] == ""

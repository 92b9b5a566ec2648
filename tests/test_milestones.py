"""
Tests for one-time milestone notifications.
"""

from dataclasses import replace

import pytest

from drop_rush.core.config_loader import MilestoneConfig, load_config
from drop_rush.core.feedback import RecordingFeedback, Toast
from drop_rush.core.game import RoundController
from drop_rush.core.milestones import MilestoneNotifier


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def notifier(config):
    return MilestoneNotifier(config=config)


def all_good(config):
    return replace(
        config,
        difficulties=tuple(replace(d, bad_probability=0.0) for d in config.difficulties)
    )


class TestMilestoneNotifier:
    """Test threshold tracking."""

    def test_each_threshold_fires_once(self, notifier):
        fired = []
        for score in range(0, 21):
            fired.extend(m.threshold for m in notifier.check(score))

        assert fired == [1, 5, 10, 15, 20]
        assert notifier.shown == frozenset({1, 5, 10, 15, 20})

    def test_repeated_score_does_not_refire(self, notifier):
        assert [m.threshold for m in notifier.check(5)] == [1, 5]
        assert notifier.check(5) == []
        assert notifier.check(4) == []

    def test_jump_fires_all_crossed_in_order(self, notifier):
        reached = notifier.check(12)
        assert [m.threshold for m in reached] == [1, 5, 10]

    def test_zero_fires_nothing(self, notifier):
        assert notifier.check(0) == []

    def test_reset_allows_refire(self, notifier):
        notifier.check(20)
        notifier.reset()

        assert notifier.shown == frozenset()
        assert [m.threshold for m in notifier.check(1)] == [1]

    def test_unsorted_input_is_sorted(self):
        notifier = MilestoneNotifier(milestones=[
            MilestoneConfig(10, "ten"),
            MilestoneConfig(2, "two"),
        ])
        assert [m.message for m in notifier.check(10)] == ["two", "ten"]

    def test_messages_come_from_config(self, notifier, config):
        reached = notifier.check(1)
        assert reached[0].message == config.milestones[0].message


class TestControllerToasts:
    """Test milestone toasts emitted during a round."""

    def catch_all(self, controller, rounds):
        for _ in range(rounds):
            controller.advance(500)
            for drop in controller.live_drops:
                controller.click(drop.uid)

    def test_toasts_in_order(self, config):
        feedback = RecordingFeedback()
        controller = RoundController(config=all_good(config), seed=9, feedback=feedback)
        controller.start()

        self.catch_all(controller, 20)

        assert controller.score == 20
        toasts = feedback.of_type(Toast)
        assert [t.threshold for t in toasts] == [1, 5, 10, 15, 20]
        assert all(t.lifetime_ms == config.effects.toast_lifetime_ms for t in toasts)

    def test_toasts_reset_between_rounds(self, config):
        feedback = RecordingFeedback()
        controller = RoundController(config=all_good(config), seed=9, feedback=feedback)
        controller.start()
        self.catch_all(controller, 5)

        controller.play_again()
        assert controller.shown_milestones == frozenset()

        self.catch_all(controller, 1)
        assert [t.threshold for t in feedback.of_type(Toast)] == [1, 5, 1]

    def test_climbing_back_after_penalty_does_not_refire(self, config):
        """Score 5 -> 4 -> 5 notifies threshold 5 only once."""
        feedback = RecordingFeedback()
        mixed = replace(
            config,
            difficulties=tuple(replace(d, bad_probability=0.5) for d in config.difficulties)
        )
        controller = RoundController(config=mixed, seed=21, feedback=feedback)
        controller.start()

        plan = ["good"] * 5 + ["bad"] + ["good"]
        scores = []
        while plan and controller.is_running:
            controller.advance(500)
            for drop in controller.live_drops:
                if plan and drop.kind == plan[0]:
                    controller.click(drop.uid)
                    scores.append(controller.score)
                    plan.pop(0)

        assert plan == []
        assert scores == [1, 2, 3, 4, 5, 4, 5]
        assert [t.threshold for t in feedback.of_type(Toast)] == [1, 5]

    def test_penalty_never_fires_toast(self, config):
        feedback = RecordingFeedback()
        bad_only = replace(
            config,
            difficulties=tuple(replace(d, bad_probability=1.0) for d in config.difficulties)
        )
        controller = RoundController(config=bad_only, seed=9, feedback=feedback)
        controller.start()
        self.catch_all(controller, 10)

        assert feedback.of_type(Toast) == []

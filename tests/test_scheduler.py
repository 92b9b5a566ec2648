"""
Tests for the virtual-clock scheduler.
"""

import pytest

from drop_rush.core.scheduler import Scheduler


@pytest.fixture
def scheduler():
    return Scheduler()


class TestCallLater:
    """Test one-shot timers."""

    def test_fires_once_when_due(self, scheduler):
        calls = []
        scheduler.call_later(100, lambda: calls.append(scheduler.now_ms))

        scheduler.advance(99)
        assert calls == []

        scheduler.advance(1)
        assert calls == [100]

        scheduler.advance(1000)
        assert calls == [100]

    def test_cancelled_never_fires(self, scheduler):
        calls = []
        handle = scheduler.call_later(50, lambda: calls.append(1))
        handle.cancel()
        handle.cancel()  # idempotent

        scheduler.advance(100)
        assert calls == []
        assert scheduler.pending == 0

    def test_negative_delay_rejected(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.call_later(-1, lambda: None)

    def test_clock_set_to_due_time(self, scheduler):
        """Callbacks observe their own due time, not the advance target."""
        seen = []
        scheduler.call_later(30, lambda: seen.append(scheduler.now_ms))
        scheduler.call_later(70, lambda: seen.append(scheduler.now_ms))

        scheduler.advance(500)
        assert seen == [30, 70]
        assert scheduler.now_ms == 500

    def test_same_instant_fires_in_schedule_order(self, scheduler):
        order = []
        scheduler.call_later(10, lambda: order.append("a"))
        scheduler.call_later(10, lambda: order.append("b"))
        scheduler.call_later(10, lambda: order.append("c"))

        scheduler.advance(10)
        assert order == ["a", "b", "c"]

    def test_timer_scheduled_from_callback(self, scheduler):
        calls = []

        def first():
            calls.append("first")
            scheduler.call_later(5, lambda: calls.append("second"))

        scheduler.call_later(10, first)
        scheduler.advance(20)
        assert calls == ["first", "second"]


class TestCallEvery:
    """Test periodic timers."""

    def test_fires_every_interval(self, scheduler):
        times = []
        scheduler.call_every(250, lambda: times.append(scheduler.now_ms))

        scheduler.advance(1000)
        assert times == [250, 500, 750, 1000]

    def test_small_steps_match_big_step(self):
        a, b = Scheduler(), Scheduler()
        ta, tb = [], []
        a.call_every(300, lambda: ta.append(a.now_ms))
        b.call_every(300, lambda: tb.append(b.now_ms))

        a.advance(3000)
        for _ in range(300):
            b.advance(10)

        assert ta == tb

    def test_cancel_inside_callback(self, scheduler):
        count = []
        handle = None

        def tick():
            count.append(1)
            if len(count) == 3:
                handle.cancel()

        handle = scheduler.call_every(100, tick)
        scheduler.advance(1000)
        assert len(count) == 3

    def test_cancel_other_timer_due_same_instant(self, scheduler):
        """A timer cancelled by an earlier callback at the same instant is skipped."""
        fired = []
        victim = None

        def killer():
            fired.append("killer")
            victim.cancel()

        scheduler.call_every(100, killer)
        victim = scheduler.call_every(100, lambda: fired.append("victim"))

        scheduler.advance(100)
        assert fired == ["killer"]

    def test_non_positive_interval_rejected(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.call_every(0, lambda: None)


class TestClear:
    def test_clear_drops_everything(self, scheduler):
        calls = []
        scheduler.call_every(10, lambda: calls.append(1))
        scheduler.call_later(5, lambda: calls.append(2))

        scheduler.clear()
        scheduler.advance(100)

        assert calls == []
        assert scheduler.pending == 0

    def test_negative_advance_rejected(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.advance(-5)

"""
Tests for one-slot frame scheduling and inertial panning.

Covers:
- Manual scheduler: replace-not-queue, cancel, advance, run_until_idle
- Qt scheduler fires once on the event loop
- FrameThrottle keeps only the latest arguments
- Inertia: velocity tracking, start threshold, reduced motion, decay, cancel
"""
import pytest
from unittest.mock import MagicMock

from models.viewport import InertiaConfig
from components.frame_scheduler import ManualFrameScheduler, QtFrameScheduler, FrameThrottle
from components.inertial_pan import InertialPanController, ease_out_cubic


# ══════════════════════════════════════════════════════════════════════════
# Schedulers
# ══════════════════════════════════════════════════════════════════════════

class TestManualFrameScheduler:

    def test_request_replaces_pending(self, manual_scheduler):
        calls = []
        manual_scheduler.request_frame(lambda ts: calls.append('first'))
        manual_scheduler.request_frame(lambda ts: calls.append('second'))
        assert manual_scheduler.flush()
        assert calls == ['second']
        assert not manual_scheduler.flush()

    def test_cancel(self, manual_scheduler):
        callback = MagicMock()
        manual_scheduler.request_frame(callback)
        manual_scheduler.cancel()
        assert not manual_scheduler.is_pending
        assert not manual_scheduler.advance()
        callback.assert_not_called()

    def test_advance_passes_timestamp(self):
        scheduler = ManualFrameScheduler(start_ms=100, frame_ms=10)
        callback = MagicMock()
        scheduler.request_frame(callback)
        scheduler.advance()
        callback.assert_called_once_with(110)
        assert scheduler.now() == 110

    def test_run_until_idle_counts_chained_frames(self, manual_scheduler):
        remaining = {'n': 3}

        def step(_ts):
            remaining['n'] -= 1
            if remaining['n'] > 0:
                manual_scheduler.request_frame(step)

        manual_scheduler.request_frame(step)
        assert manual_scheduler.run_until_idle() == 3
        assert manual_scheduler.frames_run == 3


class TestQtFrameScheduler:

    def test_fires_once_with_latest_callback(self, qtbot):
        scheduler = QtFrameScheduler(interval_ms=1)
        calls = []
        scheduler.request_frame(lambda ts: calls.append('stale'))
        scheduler.request_frame(lambda ts: calls.append(ts))
        qtbot.waitUntil(lambda: len(calls) == 1, timeout=1000)
        assert isinstance(calls[0], float)
        assert not scheduler.is_pending

    def test_cancel_stops_timer(self, qtbot):
        scheduler = QtFrameScheduler(interval_ms=1)
        callback = MagicMock()
        scheduler.request_frame(callback)
        scheduler.cancel()
        qtbot.wait(20)
        callback.assert_not_called()

    def test_clock_is_monotonic(self, qtbot):
        scheduler = QtFrameScheduler()
        first = scheduler.now()
        qtbot.wait(5)
        assert scheduler.now() >= first


class TestFrameThrottle:

    def test_latest_arguments_win(self, manual_scheduler):
        target = MagicMock()
        throttle = FrameThrottle(target, manual_scheduler)
        throttle(1, 1)
        throttle(2, 2)
        throttle(3, 3)
        assert throttle.is_pending
        manual_scheduler.flush()
        target.assert_called_once_with(3, 3)
        assert not throttle.is_pending

    def test_flush_runs_immediately(self, manual_scheduler):
        target = MagicMock()
        throttle = FrameThrottle(target, manual_scheduler)
        throttle(5, 6)
        throttle.flush()
        target.assert_called_once_with(5, 6)
        assert not manual_scheduler.is_pending

    def test_cancel_drops_call(self, manual_scheduler):
        target = MagicMock()
        throttle = FrameThrottle(target, manual_scheduler)
        throttle(5, 6)
        throttle.cancel()
        manual_scheduler.flush()
        target.assert_not_called()


# ══════════════════════════════════════════════════════════════════════════
# Inertia
# ══════════════════════════════════════════════════════════════════════════

class TestInertialPan:

    @pytest.fixture
    def inertia(self, qtbot, manual_scheduler):
        return InertialPanController(manual_scheduler, InertiaConfig(min_velocity=0.1, friction=0.95,
                                                                     max_duration=600))

    def test_velocity_from_samples(self, inertia):
        inertia.track_velocity(0, 0, 0)
        inertia.track_velocity(10, -5, 10)
        assert inertia.velocity == (1.0, -0.5)

    def test_zero_dt_keeps_previous_velocity(self, inertia):
        inertia.track_velocity(0, 0, 0)
        inertia.track_velocity(10, 0, 10)
        inertia.track_velocity(50, 0, 10)
        assert inertia.velocity == (1.0, 0.0)

    def test_slow_release_does_not_glide(self, inertia):
        inertia.track_velocity(0, 0, 0)
        inertia.track_velocity(1, 0, 20)
        assert not inertia.start_inertia()
        assert not inertia.is_running

    def test_reduced_motion_disables_glide(self, qtbot, manual_scheduler):
        inertia = InertialPanController(manual_scheduler, reduced_motion=True)
        inertia.track_velocity(0, 0, 0)
        inertia.track_velocity(100, 0, 10)
        assert not inertia.start_inertia()
        assert not manual_scheduler.is_pending

    def test_glide_decays_to_zero_then_finishes(self, inertia, manual_scheduler):
        deltas = []
        finished = MagicMock()
        inertia.offsetDelta.connect(lambda dx, dy: deltas.append(dx))
        inertia.finished.connect(finished)

        inertia.track_velocity(0, 0, 0)
        inertia.track_velocity(10, 0, 10)
        assert inertia.start_inertia()

        frames = manual_scheduler.run_until_idle()

        # 600ms at 16ms per frame
        assert frames == 38
        assert deltas[0] > 0
        assert deltas[-1] == 0
        assert all(a >= b for a, b in zip(deltas, deltas[1:]))
        finished.assert_called_once()
        assert not inertia.is_running
        assert inertia.velocity == (0.0, 0.0)

    def test_duration_scales_with_speed(self, inertia, manual_scheduler):
        inertia.track_velocity(0, 0, 0)
        inertia.track_velocity(2, 0, 10)
        inertia.start_inertia()
        # 0.2 px/ms -> 200ms
        assert manual_scheduler.run_until_idle() == 13

    def test_cancel_stops_glide(self, inertia, manual_scheduler):
        finished = MagicMock()
        inertia.finished.connect(finished)
        inertia.track_velocity(0, 0, 0)
        inertia.track_velocity(10, 0, 10)
        inertia.start_inertia()
        manual_scheduler.advance()

        inertia.cancel_inertia()

        assert not inertia.is_running
        assert not manual_scheduler.is_pending
        assert inertia.velocity == (0.0, 0.0)
        finished.assert_not_called()

    def test_ease_out_cubic_endpoints(self):
        assert ease_out_cubic(0) == 0
        assert ease_out_cubic(1) == 1
        assert ease_out_cubic(0.5) == pytest.approx(0.875)

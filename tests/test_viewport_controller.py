"""
Tests for the ViewportController.

Covers:
- Wheel zoom anchored at the cursor, clamped at the dynamic minimum
- Keyboard shortcuts (zoom in/out, fit, 100%)
- Pan entry rules (middle/right button, Space + left button)
- Frame-throttled elastic pan, hard clamp on settle
- Inertia after a fast release, cancelled by a new pan
"""
import pytest
from unittest.mock import MagicMock

from models.events import PointerInput, WheelInput, KeyInput
from models.transform import Rect, Size
from models.viewport import Viewport
from utils.settings import EngineSettings
from components.frame_scheduler import ManualFrameScheduler
from components.viewport_controller import ViewportController

CONTENT = Size(1000, 500)
CONTAINER = Rect(0, 0, 800, 600)
CENTERED = Viewport(1.0, -500, -250)


@pytest.fixture
def controller(qtbot):
    vc = ViewportController(CONTENT, CONTAINER, scheduler_factory=ManualFrameScheduler)
    vc.set_viewport(CENTERED)
    return vc


def _pan_frames(controller):
    return controller.pan_throttle.scheduler


def _inertia_frames(controller):
    return controller.inertia.scheduler


# ══════════════════════════════════════════════════════════════════════════
# Zoom
# ══════════════════════════════════════════════════════════════════════════

class TestWheelZoom:

    def test_zero_delta_is_ignored(self, controller):
        assert not controller.wheel(WheelInput(100, 100, 0))
        assert controller.viewport == CENTERED

    def test_wheel_up_zooms_in_about_cursor(self, controller):
        before = controller.client_to_document((123, 456))
        assert controller.wheel(WheelInput(123, 456, -120))
        after = controller.client_to_document((123, 456))
        assert controller.viewport.zoom == pytest.approx(1.1)
        assert after.x == pytest.approx(before.x)
        assert after.y == pytest.approx(before.y)

    def test_wheel_down_zooms_out(self, controller):
        controller.wheel(WheelInput(400, 300, 120))
        assert controller.viewport.zoom == pytest.approx(0.9)

    def test_zoom_out_stops_at_dynamic_minimum(self, controller):
        for _ in range(30):
            controller.wheel(WheelInput(400, 300, 120))
        # (800 - 2 * 48) / 1000
        assert controller.min_zoom() == pytest.approx(0.704)
        assert controller.viewport.zoom == pytest.approx(0.704)

    def test_wheel_out_after_small_preset_never_zooms_in(self, qtbot):
        # Small document: the dynamic minimum is capped at 100%
        vc = ViewportController(Size(200, 200), Rect(0, 0, 1920, 1080),
                                scheduler_factory=ManualFrameScheduler)
        vc.apply_preset('50%')
        assert vc.min_zoom() == pytest.approx(1.0)

        vc.wheel(WheelInput(960, 540, 120))
        assert vc.viewport.zoom == pytest.approx(0.5)

        vc.zoom_out()
        assert vc.viewport.zoom == pytest.approx(0.5)

        vc.wheel(WheelInput(960, 540, -120))
        assert vc.viewport.zoom == pytest.approx(0.55)

    def test_container_offset_is_respected(self, qtbot):
        vc = ViewportController(CONTENT, Rect(200, 100, 800, 600), scheduler_factory=ManualFrameScheduler)
        vc.set_viewport(CENTERED)
        before = vc.client_to_document((500, 300))
        vc.wheel(WheelInput(500, 300, -1))
        after = vc.client_to_document((500, 300))
        assert after.x == pytest.approx(before.x)
        assert after.y == pytest.approx(before.y)

    def test_viewport_changed_emitted(self, controller):
        slot = MagicMock()
        controller.viewportChanged.connect(slot)
        controller.wheel(WheelInput(400, 300, -1))
        slot.assert_called_once_with(controller.viewport)

    def test_same_viewport_not_reemitted(self, controller):
        slot = MagicMock()
        controller.viewportChanged.connect(slot)
        controller.set_viewport(CENTERED)
        slot.assert_not_called()


class TestKeyboardShortcuts:

    def test_zoom_in_and_out(self, controller):
        assert controller.key_press(KeyInput('=', frozenset({'ctrl'})))
        assert controller.viewport.zoom == pytest.approx(1.2)
        assert controller.key_press(KeyInput('-', frozenset({'meta'})))
        assert controller.viewport.zoom == pytest.approx(1.0)

    def test_fit_and_reset(self, controller):
        controller.key_press(KeyInput('0', frozenset({'ctrl'})))
        viewport = controller.viewport
        assert viewport.zoom == pytest.approx(0.72)
        assert (viewport.offset_x, viewport.offset_y) == (pytest.approx(-360), pytest.approx(-180))
        controller.key_press(KeyInput('1', frozenset({'ctrl'})))
        assert controller.viewport == CENTERED

    def test_fit_margin_from_settings(self, qtbot):
        vc = ViewportController(CONTENT, CONTAINER, EngineSettings(fit_margin=0.0),
                                scheduler_factory=ManualFrameScheduler)
        vc.fit()
        assert vc.viewport.zoom == pytest.approx(0.8)

    def test_needs_command_modifier(self, controller):
        assert not controller.key_press(KeyInput('='))
        assert not controller.key_press(KeyInput('=', frozenset({'ctrl', 'shift'})))
        assert not controller.key_press(KeyInput('q', frozenset({'ctrl'})))
        assert controller.viewport == CENTERED

    def test_apply_preset(self, controller):
        controller.apply_preset('200%')
        assert controller.viewport == Viewport(2.0, -1000, -500)


# ══════════════════════════════════════════════════════════════════════════
# Panning
# ══════════════════════════════════════════════════════════════════════════

class TestPanEntry:

    def test_left_button_needs_space(self, controller):
        assert not controller.begin_pan(PointerInput(10, 10, button=0))
        controller.key_press(KeyInput('Space'))
        assert controller.space_pressed
        assert controller.begin_pan(PointerInput(10, 10, button=0))

    def test_space_release(self, controller):
        controller.key_press(KeyInput('Space'))
        controller.key_release(KeyInput('Space'))
        assert not controller.space_pressed
        assert not controller.begin_pan(PointerInput(10, 10, button=0))

    @pytest.mark.parametrize("button", [1, 2])
    def test_middle_and_right_buttons(self, controller, button):
        assert controller.begin_pan(PointerInput(10, 10, button=button))
        assert controller.is_panning

    def test_only_one_pan_at_a_time(self, controller):
        controller.begin_pan(PointerInput(10, 10, button=1, pointer_id=1))
        assert not controller.begin_pan(PointerInput(10, 10, button=1, pointer_id=2))

    def test_end_without_pan(self, controller):
        assert not controller.end_pan(PointerInput(0, 0))


class TestPanning:

    def test_pan_is_throttled_to_frames(self, controller):
        controller.begin_pan(PointerInput(100, 100, button=1, timestamp=0))
        controller.pan_move(PointerInput(150, 120, button=1, timestamp=5000))
        controller.pan_move(PointerInput(200, 150, button=1, timestamp=10000))
        assert controller.viewport == CENTERED

        _pan_frames(controller).flush()
        assert controller.viewport == Viewport(1.0, -400, -200)

    def test_other_pointer_is_ignored(self, controller):
        controller.begin_pan(PointerInput(100, 100, button=1, pointer_id=1))
        controller.pan_move(PointerInput(300, 300, button=1, pointer_id=2))
        assert not _pan_frames(controller).is_pending

    def test_elastic_then_settle(self, controller):
        controller.begin_pan(PointerInput(100, 100, button=1, timestamp=0))
        controller.pan_move(PointerInput(800, 100, button=1, timestamp=10000))
        _pan_frames(controller).flush()

        # Raw offset 200 past the upper bound 0, pulled back by resistance 0.7
        assert controller.viewport.offset_x == pytest.approx(140)

        # Slow release: no inertia, hard clamp
        assert not controller.end_pan(PointerInput(800, 100, button=1, timestamp=10000))
        assert controller.viewport == Viewport(1.0, 0, -250)
        assert not controller.is_panning

    def test_release_flushes_pending_pan(self, controller):
        controller.begin_pan(PointerInput(100, 100, button=1, timestamp=0))
        controller.pan_move(PointerInput(150, 100, button=1, timestamp=10000))
        controller.end_pan(PointerInput(150, 100, button=1, timestamp=10000))
        assert controller.viewport == Viewport(1.0, -450, -250)
        assert not _pan_frames(controller).is_pending


class TestInertia:

    def _fling(self, controller):
        controller.begin_pan(PointerInput(100, 100, button=1, timestamp=0))
        controller.pan_move(PointerInput(200, 100, button=1, timestamp=10))
        return controller.end_pan(PointerInput(200, 100, button=1, timestamp=10))

    def test_fast_release_glides_then_settles(self, controller):
        offsets = []
        controller.viewportChanged.connect(lambda vp: offsets.append(vp.offset_x))

        assert self._fling(controller)
        assert controller.viewport.offset_x == pytest.approx(-400)

        _inertia_frames(controller).run_until_idle()

        assert max(offsets) > -400
        assert not controller.inertia.is_running
        # Glide overshoots the bound, the settle clamp pulls it back
        assert controller.viewport.offset_x == 0

    def test_new_pan_cancels_glide(self, controller):
        self._fling(controller)
        _inertia_frames(controller).advance()
        assert controller.inertia.is_running

        controller.begin_pan(PointerInput(0, 0, button=1))

        assert not controller.inertia.is_running
        assert not _inertia_frames(controller).is_pending

    def test_preset_cancels_glide(self, controller):
        self._fling(controller)
        controller.reset_zoom()
        assert not controller.inertia.is_running
        assert controller.viewport == CENTERED

    def test_reduced_motion_settles_immediately(self, qtbot):
        vc = ViewportController(CONTENT, CONTAINER, EngineSettings(reduced_motion=True),
                                scheduler_factory=ManualFrameScheduler)
        vc.set_viewport(CENTERED)
        vc.begin_pan(PointerInput(100, 100, button=1, timestamp=0))
        vc.pan_move(PointerInput(200, 100, button=1, timestamp=10))
        assert not vc.end_pan(PointerInput(200, 100, button=1, timestamp=10))
        assert vc.viewport == Viewport(1.0, -400, -250)

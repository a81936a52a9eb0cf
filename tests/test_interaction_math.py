"""
Tests for gesture math and keyboard nudging.

Covers:
- Move / rotation deltas and 15 degree snapping
- Resize about the opposite anchor (corner, edge, aspect lock, minimum size)
- Multi-layer resize keeping relative layout
- Per-layer rotation keeps each layer's center
- Arrow-key nudging
"""
import pytest

from models.transform import Transform, Vec2
from utils.geometry import get_union_bounding_box
from services.interaction_math import (
    compute_move_delta, compute_rotation_delta, snap_angle, get_selection_center,
    rotation_preserves_center, apply_move, apply_resize, apply_rotate, nudge_transforms,
)
from services.layer_tree import update_layer

from conftest import make_layer


def _resize(transforms, handle, delta, locked=False):
    box = get_union_bounding_box(transforms.values())
    return apply_resize(transforms, handle, Vec2(*delta), box, locked)


# ══════════════════════════════════════════════════════════════════════════
# Deltas and angles
# ══════════════════════════════════════════════════════════════════════════

class TestDeltas:

    def test_move_delta(self):
        assert compute_move_delta(Vec2(10, 10), Vec2(15, 3)) == Vec2(5, -7)

    def test_rotation_delta_quarter_turn(self):
        assert compute_rotation_delta(Vec2(0, 0), Vec2(10, 0), Vec2(0, 10)) == pytest.approx(90)

    @pytest.mark.parametrize("angle,expected", [
        (22, 15), (23, 30), (7.5, 15), (-7.5, 0), (-8, -15), (180, 180),
    ])
    def test_snap_angle(self, angle, expected):
        assert snap_angle(angle) == expected

    def test_selection_center(self):
        center = get_selection_center([Transform(0, 0, 100, 100), Transform(100, 0, 100, 100)])
        assert (center.x, center.y) == (100, 50)
        assert get_selection_center([]) is None

    def test_rotation_preserves_center(self):
        before, after = rotation_preserves_center(Transform(10, 20, 80, 40, rotation=10), 35)
        assert after.x == pytest.approx(before.x)
        assert after.y == pytest.approx(before.y)


# ══════════════════════════════════════════════════════════════════════════
# Move / resize / rotate
# ══════════════════════════════════════════════════════════════════════════

class TestApplyMove:

    def test_uniform_translation(self):
        initial = {'a': Transform(0, 0, 10, 10), 'b': Transform(50, 50, 5, 5, rotation=30)}
        result = apply_move(initial, Vec2(3, -2))
        assert result['a'] == Transform(3, -2, 10, 10)
        assert result['b'] == Transform(53, 48, 5, 5, rotation=30)
        assert initial['a'] == Transform(0, 0, 10, 10)


class TestApplyResize:

    def test_corner_aspect_locked(self):
        result = _resize({'a': Transform(0, 0, 100, 100)}, 'bottom-right', (50, 25), locked=True)
        t = result['a']
        assert (t.x, t.y) == pytest.approx((0, 0))
        assert (t.width, t.height) == pytest.approx((150, 150))

    def test_corner_unlocked(self):
        t = _resize({'a': Transform(0, 0, 100, 100)}, 'bottom-right', (50, 25))['a']
        assert (t.width, t.height) == pytest.approx((150, 125))

    def test_top_left_anchors_bottom_right(self):
        t = _resize({'a': Transform(0, 0, 100, 100)}, 'top-left', (-10, -30))['a']
        assert t.x + t.width == pytest.approx(100)
        assert t.y + t.height == pytest.approx(100)
        assert (t.width, t.height) == pytest.approx((110, 130))

    def test_edge_handle_single_axis(self):
        t = _resize({'a': Transform(0, 0, 100, 100)}, 'left', (-20, 999))['a']
        assert (t.x, t.width) == pytest.approx((-20, 120))
        assert (t.y, t.height) == pytest.approx((0, 100))

    def test_minimum_size(self):
        t = _resize({'a': Transform(0, 0, 100, 100)}, 'bottom-right', (-500, -500))['a']
        assert (t.width, t.height) == pytest.approx((8, 8))
        assert (t.x, t.y) == pytest.approx((0, 0))

    def test_multi_layer_keeps_layout(self):
        initial = {'a': Transform(0, 0, 100, 100), 'b': Transform(100, 0, 100, 100)}
        result = _resize(initial, 'right', (200, 0))
        assert (result['a'].x, result['a'].width) == pytest.approx((0, 200))
        assert (result['b'].x, result['b'].width) == pytest.approx((200, 200))

    def test_no_box_returns_initial(self):
        initial = {'a': Transform(0, 0, 10, 10)}
        assert apply_resize(initial, 'right', Vec2(5, 0), None, False) == initial


class TestApplyRotate:

    def test_each_layer_turns_about_itself(self):
        initial = {'a': Transform(0, 0, 10, 10, rotation=5), 'b': Transform(100, 0, 10, 10)}
        result = apply_rotate(initial, 40)
        assert result['a'].rotation == 45
        assert result['b'].rotation == 40
        assert (result['b'].x, result['b'].y) == (100, 0)


# ══════════════════════════════════════════════════════════════════════════
# Nudging
# ══════════════════════════════════════════════════════════════════════════

class TestNudge:

    def test_arrow_steps(self, two_layers):
        moved = nudge_transforms(two_layers[1:], 'ArrowRight')
        assert moved['a'].x == 101
        large = nudge_transforms(two_layers[1:], 'ArrowUp', large=True)
        assert large['b'].y == 90

    def test_locked_and_base_skipped(self, two_layers):
        layers = update_layer(two_layers, 'b', locked=True)
        assert set(nudge_transforms(layers, 'ArrowDown')) == {'a'}

    def test_non_arrow_key(self, two_layers):
        assert nudge_transforms(two_layers, 'KeyA') == {}

"""Transform handle system - ABC-based handle architecture.

Each handle kind is a class that knows:
- Where it sits on the selection box (normalized coordinates)
- How to test if a document-space point hits it
- How to turn the current pointer position into new transforms
- Which cursor to show while hovering it

All positions and sizes are in document units. Callers convert the on-screen
handle size with scale_handle_size_for_zoom first.
"""

import math
from abc import ABC, abstractmethod

from PyQt5.QtCore import Qt

from models.transform import BoundingBox, Vec2
from services.interaction_math import (
    compute_move_delta, pointer_angle, snap_angle, apply_move, apply_resize, apply_rotate,
)
from services.snapping import compute_snap
from components.transform_handles.drag_context import GestureState
from constants import (
    HANDLE_MOVE, HANDLE_ROTATE, HANDLE_TOP, HANDLE_RIGHT, HANDLE_BOTTOM, HANDLE_LEFT,
    HANDLE_TOP_LEFT, HANDLE_TOP_RIGHT, HANDLE_BOTTOM_RIGHT, HANDLE_BOTTOM_LEFT,
    CORNER_HANDLES, RESIZE_HANDLES, HANDLE_KINDS,
    ASPECT_UNLOCK_MODIFIER, ROTATION_SNAP_MODIFIER,
    TRANSFORM_ROTATION_HANDLE_OFFSET,
)


class Handle(ABC):
    """Abstract base class for transform handles."""

    kind = None

    @abstractmethod
    def hit_test(self, point: Vec2, box: BoundingBox, handle_size: float) -> bool:
        """Test if a document-space point hits this handle.

        Args:
            point: Pointer position in document space
            box: Selection union box
            handle_size: Handle size in document units

        Returns:
            bool: True if the point hits this handle
        """
        pass

    @abstractmethod
    def drag(self, state: GestureState, point: Vec2, modifiers=frozenset(), snap_context=None):
        """Compute transforms for the current pointer position.

        Args:
            state: Gesture snapshot captured at pointer-down
            point: Current pointer position in document space
            modifiers: Modifier keys held for this pointer sample
            snap_context: SnapContext, or None to disable snapping

        Returns:
            tuple: (dict of layer id -> Transform, list of SnapGuide)
        """
        pass

    @abstractmethod
    def get_cursor(self):
        """Get the Qt cursor shape for this handle.

        Returns:
            Qt.CursorShape: Cursor to display when hovering over this handle
        """
        pass

    def locks_aspect(self, modifiers) -> bool:
        """Whether a gesture started with these modifiers keeps the aspect ratio"""
        return False


class MoveHandle(Handle):
    """Body of the selection box: translate, with snapping."""

    kind = HANDLE_MOVE

    def hit_test(self, point, box, handle_size):
        return box.min_x <= point.x <= box.max_x and box.min_y <= point.y <= box.max_y

    def drag(self, state, point, modifiers=frozenset(), snap_context=None):
        delta = compute_move_delta(state.start_point, point)
        guides = []
        if snap_context is not None:
            result = compute_snap(list(state.initial_transforms.values()), delta, snap_context)
            delta, guides = result.delta, result.guides
        return apply_move(state.initial_transforms, delta), guides

    def get_cursor(self):
        return Qt.SizeAllCursor


class ResizeHandle(Handle):
    """Corner or edge handle scaling the selection about the opposite anchor."""

    NORMALIZED_POSITIONS = {
        HANDLE_TOP_LEFT: (-1, -1),
        HANDLE_TOP_RIGHT: (1, -1),
        HANDLE_BOTTOM_RIGHT: (1, 1),
        HANDLE_BOTTOM_LEFT: (-1, 1),
        HANDLE_TOP: (0, -1),
        HANDLE_RIGHT: (1, 0),
        HANDLE_BOTTOM: (0, 1),
        HANDLE_LEFT: (-1, 0),
    }

    CURSORS = {
        HANDLE_TOP_LEFT: Qt.SizeFDiagCursor,
        HANDLE_BOTTOM_RIGHT: Qt.SizeFDiagCursor,
        HANDLE_TOP_RIGHT: Qt.SizeBDiagCursor,
        HANDLE_BOTTOM_LEFT: Qt.SizeBDiagCursor,
        HANDLE_TOP: Qt.SizeVerCursor,
        HANDLE_BOTTOM: Qt.SizeVerCursor,
        HANDLE_LEFT: Qt.SizeHorCursor,
        HANDLE_RIGHT: Qt.SizeHorCursor,
    }

    def __init__(self, kind):
        """
        Args:
            kind: One of the 8 resize handle kinds ('top-left', 'right', ...)
        """
        if kind not in self.NORMALIZED_POSITIONS:
            raise ValueError(f"Not a resize handle: {kind}")
        self.kind = kind
        self.norm_x, self.norm_y = self.NORMALIZED_POSITIONS[kind]

    @property
    def is_corner(self) -> bool:
        return self.kind in CORNER_HANDLES

    def position(self, box: BoundingBox) -> Vec2:
        center = box.center
        return Vec2(center.x + self.norm_x * box.width / 2, center.y + self.norm_y * box.height / 2)

    def hit_test(self, point, box, handle_size):
        pos = self.position(box)
        half = handle_size / 2
        return abs(point.x - pos.x) <= half and abs(point.y - pos.y) <= half

    def locks_aspect(self, modifiers) -> bool:
        # Edge handles never lock
        return self.is_corner and ASPECT_UNLOCK_MODIFIER not in modifiers

    def drag(self, state, point, modifiers=frozenset(), snap_context=None):
        delta = compute_move_delta(state.start_point, point)
        return apply_resize(state.initial_transforms, self.kind, delta, state.box, state.aspect_locked), []

    def get_cursor(self):
        return self.CURSORS[self.kind]


class RotateHandle(Handle):
    """Knob above the top edge: rotate each layer about its own center."""

    kind = HANDLE_ROTATE

    def __init__(self, offset_factor=TRANSFORM_ROTATION_HANDLE_OFFSET):
        """
        Args:
            offset_factor: Distance above the box top, in handle sizes
        """
        self.offset_factor = offset_factor

    def position(self, box: BoundingBox, handle_size: float) -> Vec2:
        return Vec2(box.center.x, box.min_y - handle_size * self.offset_factor)

    def hit_test(self, point, box, handle_size):
        pos = self.position(box, handle_size)
        return math.hypot(point.x - pos.x, point.y - pos.y) <= handle_size

    def drag(self, state, point, modifiers=frozenset(), snap_context=None):
        if state.box is None or state.initial_angle is None:
            return dict(state.initial_transforms), []
        current = pointer_angle(state.box.center, point)
        delta_angle = math.degrees(current - state.initial_angle)
        if ROTATION_SNAP_MODIFIER in modifiers:
            delta_angle = snap_angle(delta_angle)
        return apply_rotate(state.initial_transforms, delta_angle), []

    def get_cursor(self):
        return Qt.CrossCursor


def create_handle(kind: str) -> Handle:
    """Handle object for a handle kind

    Raises:
        ValueError: Unknown handle kind
    """
    if kind not in HANDLE_KINDS:
        raise ValueError(f"Unknown handle kind: {kind}")
    if kind == HANDLE_MOVE:
        return MoveHandle()
    if kind == HANDLE_ROTATE:
        return RotateHandle()
    return ResizeHandle(kind)


# Hit priority: rotate knob, then corners, then edges, then the body
_HIT_ORDER = [RotateHandle()] + [ResizeHandle(k) for k in RESIZE_HANDLES] + [MoveHandle()]


def get_handle_at_point(point: Vec2, box: BoundingBox, handle_size: float):
    """Handle kind under a document-space point, or None"""
    if box is None:
        return None
    for handle in _HIT_ORDER:
        if handle.hit_test(point, box, handle_size):
            return handle.kind
    return None

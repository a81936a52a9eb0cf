"""
Interaction math shared by the transform handles and keyboard nudging.

Transform maps are plain dicts of layer id -> Transform, in selection order.
Nothing here mutates its inputs.
"""
import math
from dataclasses import replace
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

from models.layer import Layer
from models.transform import Transform, BoundingBox, Vec2
from utils.geometry import get_rotated_bounding_box
from constants import (
    MIN_RESIZE_SIZE, MIN_BOX_SIZE, ROTATION_SNAP_INCREMENT,
    HANDLE_TOP, HANDLE_BOTTOM, HANDLE_LEFT, HANDLE_RIGHT,
    ARROW_KEYS, ARROW_KEY_MOVE_NORMAL, ARROW_KEY_MOVE_LARGE,
    LAYER_TYPE_BASE, LAYER_TYPE_GROUP,
)

TransformMap = Dict[str, Transform]


def compute_move_delta(start: Vec2, current: Vec2) -> Vec2:
    return Vec2(current.x - start.x, current.y - start.y)


def pointer_angle(center: Vec2, point: Vec2) -> float:
    """Angle of point around center in radians (Y-down)"""
    return math.atan2(point.y - center.y, point.x - center.x)


def compute_rotation_delta(center: Vec2, start_pointer: Vec2, current: Vec2) -> float:
    """Signed angle in degrees swept by the pointer around center"""
    return math.degrees(pointer_angle(center, current) - pointer_angle(center, start_pointer))


def snap_angle(angle: float, increment: float = ROTATION_SNAP_INCREMENT) -> float:
    """Snap to the nearest increment (halves round up)"""
    return math.floor(angle / increment + 0.5) * increment


def get_selection_center(transforms: Sequence[Transform]) -> Optional[Vec2]:
    """Average of the layers' own centers (None for an empty selection)"""
    if not transforms:
        return None
    sx = sum(t.center.x for t in transforms)
    sy = sum(t.center.y for t in transforms)
    return Vec2(sx / len(transforms), sy / len(transforms))


def rotation_preserves_center(transform: Transform, delta_angle: float) -> Tuple[Vec2, Vec2]:
    """Box centers before and after rotating a layer about its own center"""
    original = get_rotated_bounding_box(transform).center
    rotated = get_rotated_bounding_box(replace(transform, rotation=transform.rotation + delta_angle)).center
    return original, rotated


# ========================================
# Gesture application
# ========================================

def apply_move(initial: Mapping[str, Transform], delta: Vec2) -> TransformMap:
    return {layer_id: t.translated(delta.x, delta.y) for layer_id, t in initial.items()}


def apply_resize(initial: Mapping[str, Transform], handle: str, delta: Vec2,
                 box: Optional[BoundingBox], aspect_locked: bool) -> TransformMap:
    """Rescale every layer about the anchor opposite the dragged handle.

    Args:
        initial: Pre-gesture transforms
        handle: One of the 8 resize handle kinds ('top', 'bottom-right', ...)
        delta: Pointer delta in document units
        box: Union box of the selection at gesture start
        aspect_locked: Apply the larger of the two axis ratios to both axes

    Returns:
        New transform map; sizes never drop below MIN_RESIZE_SIZE
    """
    if box is None:
        return dict(initial)

    width = max(MIN_BOX_SIZE, box.width)
    height = max(MIN_BOX_SIZE, box.height)

    if HANDLE_LEFT in handle:
        scale_x_delta = -delta.x
    elif HANDLE_RIGHT in handle:
        scale_x_delta = delta.x
    else:
        scale_x_delta = 0.0
    if HANDLE_TOP in handle:
        scale_y_delta = -delta.y
    elif HANDLE_BOTTOM in handle:
        scale_y_delta = delta.y
    else:
        scale_y_delta = 0.0

    ratio_x = max(MIN_RESIZE_SIZE, width + scale_x_delta) / width
    ratio_y = max(MIN_RESIZE_SIZE, height + scale_y_delta) / height
    if aspect_locked:
        ratio_x = ratio_y = max(ratio_x, ratio_y)

    if HANDLE_LEFT in handle:
        anchor_x = box.max_x
    elif HANDLE_RIGHT in handle:
        anchor_x = box.min_x
    else:
        anchor_x = box.center.x
    if HANDLE_TOP in handle:
        anchor_y = box.max_y
    elif HANDLE_BOTTOM in handle:
        anchor_y = box.min_y
    else:
        anchor_y = box.center.y

    result = {}
    for layer_id, t in initial.items():
        center = t.center
        new_cx = anchor_x + (center.x - anchor_x) * ratio_x
        new_cy = anchor_y + (center.y - anchor_y) * ratio_y
        new_w = max(MIN_RESIZE_SIZE, t.width * ratio_x)
        new_h = max(MIN_RESIZE_SIZE, t.height * ratio_y)
        result[layer_id] = replace(t, x=new_cx - new_w / 2, y=new_cy - new_h / 2, width=new_w, height=new_h)
    return result


def apply_rotate(initial: Mapping[str, Transform], delta_angle: float) -> TransformMap:
    """Add delta_angle to each layer's own rotation (each turns about its own center)"""
    return {layer_id: replace(t, rotation=t.rotation + delta_angle) for layer_id, t in initial.items()}


# ========================================
# Keyboard nudging
# ========================================

def nudge_transforms(layers: Iterable[Layer], key: str, large: bool = False) -> TransformMap:
    """Arrow-key move for the selected layers

    Args:
        layers: Selected layers
        key: 'ArrowLeft', 'ArrowRight', 'ArrowUp' or 'ArrowDown'
        large: Use the large step (Shift held)

    Returns:
        Transform map for the layers that moved (locked, base and group
        layers are skipped; empty for non-arrow keys)
    """
    direction = ARROW_KEYS.get(key)
    if direction is None:
        return {}
    step = ARROW_KEY_MOVE_LARGE if large else ARROW_KEY_MOVE_NORMAL
    dx, dy = direction[0] * step, direction[1] * step
    return {
        layer.id: layer.transform.translated(dx, dy)
        for layer in layers
        if not layer.locked and layer.type not in (LAYER_TYPE_BASE, LAYER_TYPE_GROUP)
    }

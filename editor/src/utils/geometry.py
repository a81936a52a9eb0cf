"""Geometry for rotated/scaled rectangles.

All functions are total: degenerate transforms (zero width or height) give
zero-area boxes rather than errors.

Corner order is top-left, top-right, bottom-right, bottom-left of the
untransformed rectangle, so the polygon winding is consistent.
"""
import math
from typing import Iterable, List, Optional, Sequence

import numpy as np

from models.transform import Transform, BoundingBox, Vec2

# Local corner offsets relative to the rectangle center, in units of half-size
_UNIT_CORNERS = np.array([
    [-1.0, -1.0],
    [1.0, -1.0],
    [1.0, 1.0],
    [-1.0, 1.0],
])


def _rotation_matrix(degrees: float) -> np.ndarray:
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return np.array([[c, -s], [s, c]])


def _corner_array(transform: Transform) -> np.ndarray:
    """4x2 array of transformed corners (scale -> rotate -> translate, about center)"""
    half = np.array([transform.width / 2, transform.height / 2])
    local = _UNIT_CORNERS * half
    scaled = local * np.array([transform.scale_x, transform.scale_y])
    rotated = scaled @ _rotation_matrix(transform.rotation).T
    center = np.array([transform.x + half[0], transform.y + half[1]])
    return rotated + center


def get_transformed_corners(transform: Transform) -> List[Vec2]:
    """Corners of a layer's rectangle in document space.

    Args:
        transform: Layer transform

    Returns:
        List of 4 Vec2 (top-left, top-right, bottom-right, bottom-left before rotation)
    """
    return [Vec2(float(px), float(py)) for px, py in _corner_array(transform)]


def _box_from_array(points: np.ndarray) -> BoundingBox:
    mins = points.min(axis=0)
    maxs = points.max(axis=0)
    min_x, min_y = float(mins[0]), float(mins[1])
    max_x, max_y = float(maxs[0]), float(maxs[1])
    return BoundingBox(min_x, min_y, max_x, max_y, _envelope_corners(min_x, min_y, max_x, max_y))


def _envelope_corners(min_x, min_y, max_x, max_y):
    return (Vec2(min_x, min_y), Vec2(max_x, min_y), Vec2(max_x, max_y), Vec2(min_x, max_y))


def get_rotated_bounding_box(transform: Transform) -> BoundingBox:
    """Axis-aligned bounding box of a rotated/scaled rectangle.

    The returned corners are the rectangle's own rotated corners, so the box can
    be used both for AABB queries and as the layer's hit polygon.
    """
    points = _corner_array(transform)
    box = _box_from_array(points)
    corners = tuple(Vec2(float(px), float(py)) for px, py in points)
    return BoundingBox(box.min_x, box.min_y, box.max_x, box.max_y, corners)


def expand_bounding_boxes(boxes: Iterable[BoundingBox]) -> Optional[BoundingBox]:
    """Union envelope of several boxes.

    Args:
        boxes: Bounding boxes to merge

    Returns:
        Envelope box with its 4 axis-aligned corners, or None for empty input
    """
    boxes = list(boxes)
    if not boxes:
        return None
    extents = np.array([[b.min_x, b.min_y, b.max_x, b.max_y] for b in boxes])
    min_x, min_y = float(extents[:, 0].min()), float(extents[:, 1].min())
    max_x, max_y = float(extents[:, 2].max()), float(extents[:, 3].max())
    return BoundingBox(min_x, min_y, max_x, max_y, _envelope_corners(min_x, min_y, max_x, max_y))


def get_union_bounding_box(transforms: Iterable[Transform]) -> Optional[BoundingBox]:
    """Envelope of the rotated boxes of several transforms (None if empty)"""
    return expand_bounding_boxes(get_rotated_bounding_box(t) for t in transforms)


def point_in_polygon(point: Vec2, polygon: Sequence[Vec2]) -> bool:
    """Even-odd ray casting test.

    Points exactly on an edge may fall either way; callers only rely on
    interior points being inside.
    """
    px, py = point
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > py) != (yj > py):
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < x_cross:
                inside = not inside
        j = i
    return inside


def translate_bounding_box(box: BoundingBox, delta: Vec2) -> BoundingBox:
    dx, dy = delta
    return BoundingBox(
        box.min_x + dx, box.min_y + dy, box.max_x + dx, box.max_y + dy,
        tuple(Vec2(c.x + dx, c.y + dy) for c in box.corners),
    )


def translate_transform(transform: Transform, delta: Vec2) -> Transform:
    return transform.translated(delta.x, delta.y)


def rotate_point(point: Vec2, pivot: Vec2, degrees: float) -> Vec2:
    """Rotate a point about a pivot (Y-down, positive angles turn clockwise on screen)"""
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    dx, dy = point.x - pivot.x, point.y - pivot.y
    return Vec2(pivot.x + dx * c - dy * s, pivot.y + dx * s + dy * c)

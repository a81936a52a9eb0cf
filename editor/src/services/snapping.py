"""
Snap engine for moving selections.

Aligns the selection's union box (min edge on each axis) to the nearest
target within a zoom-scaled threshold. Targets per axis, in priority order
for equal distances:
    1. document edges (0 and document width/height)
    2. the grid line nearest the selection's min edge
    3. each sibling's min edge, max edge and center

Axes snap independently; each snapped axis produces one guide.
"""
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from models.layer import Layer
from models.transform import Transform, Vec2
from services.layer_tree import flatten_for_render, collect_descendant_ids
from utils.geometry import get_rotated_bounding_box, get_union_bounding_box
from constants import (
    DEFAULT_GRID_SIZE, DEFAULT_SNAP_THRESHOLD, SNAP_EPSILON, GRID_LEVELS, LAYER_TYPE_BASE,
)

ORIENTATION_VERTICAL = 'vertical'
ORIENTATION_HORIZONTAL = 'horizontal'


@dataclass(frozen=True)
class SnapGuide:
    """Alignment line that fired (vertical lines come from X snaps)"""
    id: str
    orientation: str
    position: float


@dataclass(frozen=True)
class SnapContext:
    """Inputs for compute_snap.

    threshold is in screen pixels; it is divided by zoom to get document units.
    """
    document_width: float
    document_height: float
    grid_size: float = DEFAULT_GRID_SIZE
    threshold: float = DEFAULT_SNAP_THRESHOLD
    zoom: float = 1.0
    siblings: Tuple[Transform, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SnapResult:
    delta: Vec2
    guides: List[SnapGuide]


def _js_round(value: float) -> int:
    """Round half up (towards +inf), unlike Python's banker's rounding"""
    return math.floor(value + 0.5)


def _nearest(value: float, targets: Iterable[float], threshold: float) -> Optional[float]:
    """First target at the smallest distance not above threshold"""
    best = None
    best_distance = math.inf
    for target in targets:
        distance = abs(target - value)
        if distance < best_distance and distance <= threshold + SNAP_EPSILON:
            best = target
            best_distance = distance
    return best


def _axis_targets(doc_extent: float, grid_size: float, edge: float,
                  sibling_values: Iterable[float]) -> List[float]:
    targets = [0.0, float(doc_extent)]
    if grid_size > 0:
        targets.append(_js_round(edge / grid_size) * grid_size)
    targets.extend(sibling_values)
    return list(dict.fromkeys(targets))


def compute_snap(transforms: Sequence[Transform], delta: Vec2, context: SnapContext) -> SnapResult:
    """Correct a proposed move delta so the selection aligns to nearby targets.

    Args:
        transforms: Pre-move transforms of the selected layers
        delta: Proposed translation in document units
        context: Grid, threshold, zoom, sibling transforms and document size

    Returns:
        SnapResult with the corrected delta and one guide per snapped axis
    """
    if not transforms:
        return SnapResult(Vec2(delta.x, delta.y), [])

    threshold = context.threshold / (context.zoom or 1.0)
    box = get_union_bounding_box(t.translated(delta.x, delta.y) for t in transforms)

    sibling_boxes = [get_rotated_bounding_box(t) for t in context.siblings]
    targets_x = _axis_targets(
        context.document_width, context.grid_size, box.min_x,
        (v for b in sibling_boxes for v in (b.min_x, b.max_x, b.center.x)),
    )
    targets_y = _axis_targets(
        context.document_height, context.grid_size, box.min_y,
        (v for b in sibling_boxes for v in (b.min_y, b.max_y, b.center.y)),
    )

    dx, dy = delta.x, delta.y
    guides = []

    snapped_x = _nearest(box.min_x, targets_x, threshold)
    if snapped_x is not None:
        dx += snapped_x - box.min_x
        guides.append(SnapGuide(f"snap-x-{_js_round(snapped_x * 10)}", ORIENTATION_VERTICAL, snapped_x))

    snapped_y = _nearest(box.min_y, targets_y, threshold)
    if snapped_y is not None:
        dy += snapped_y - box.min_y
        guides.append(SnapGuide(f"snap-y-{_js_round(snapped_y * 10)}", ORIENTATION_HORIZONTAL, snapped_y))

    return SnapResult(Vec2(dx, dy), guides)


def snap_targets_for(layers: Sequence[Layer], selected_ids: Iterable[str]) -> Tuple[Transform, ...]:
    """Sibling transforms a selection may snap to.

    Visible, non-base layers that are neither selected nor inside a selected group.
    """
    selected = set(selected_ids)
    for layer_id in list(selected):
        selected.update(collect_descendant_ids(layers, layer_id))
    return tuple(
        layer.transform for layer in flatten_for_render(layers)
        if layer.visible and layer.type != LAYER_TYPE_BASE and layer.id not in selected
    )


def grid_level_for_zoom(zoom: float) -> Tuple[float, int]:
    """Adaptive grid spacing for a zoom level

    Returns:
        (spacing in document units, subdivisions)
    """
    for min_zoom, max_zoom, spacing, subdivisions in GRID_LEVELS:
        if min_zoom <= zoom < max_zoom:
            return spacing, subdivisions
    _, _, spacing, subdivisions = GRID_LEVELS[2]
    return spacing, subdivisions

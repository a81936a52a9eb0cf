"""Gesture state dataclass for transform handle interactions.

Exists only between pointer-down and commit/cancel.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional

from models.transform import BoundingBox, Transform, Vec2


@dataclass
class GestureState:
    """Snapshot captured when a handle gesture starts.

    Replaces loose per-gesture attributes with a single object that is
    discarded as a whole on commit or cancel.
    """
    handle: str  # 'move', 'rotate' or one of the 8 resize handles
    pointer_id: int
    start_point: Vec2  # document space
    initial_transforms: Dict[str, Transform]
    box: Optional[BoundingBox]  # union box at gesture start
    aspect_locked: bool = False
    initial_angle: Optional[float] = None  # radians, rotate only
    modifiers: FrozenSet[str] = field(default_factory=frozenset)  # {'ctrl', 'alt', 'shift'} at start

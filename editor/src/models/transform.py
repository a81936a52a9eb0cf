"""Transform data structures for coordinate and state representation."""
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Tuple


@dataclass
class Vec2:
    """2D vector for coordinate pairs.

    Used for any x/y coordinate pair across different spaces:
    - Client pixels (pointer positions)
    - Document space positions
    - Deltas between two points
    """
    x: float
    y: float

    def __iter__(self):
        """Allow tuple unpacking: x, y = vec2"""
        return iter((self.x, self.y))


@dataclass(frozen=True)
class Transform:
    """Placement of a rectangular layer in document space.

    (x, y) is the unscaled, unrotated top-left corner. Scale and rotation
    (degrees) are both applied about the shape's own center.
    """
    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0

    @property
    def center(self) -> Vec2:
        """Center of the unscaled rectangle (pivot for scale and rotation)"""
        return Vec2(self.x + self.width / 2, self.y + self.height / 2)

    def translated(self, dx: float, dy: float) -> 'Transform':
        """Return a copy moved by (dx, dy)"""
        return replace(self, x=self.x + dx, y=self.y + dy)

    def is_valid(self) -> bool:
        """Check width/height are positive and scale factors finite and non-zero"""
        if not (self.width > 0 and self.height > 0):
            return False
        for s in (self.scale_x, self.scale_y):
            if not math.isfinite(s) or s == 0:
                return False
        return True

    def to_dict(self) -> Dict[str, float]:
        return {
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
            'rotation': self.rotation,
            'scaleX': self.scale_x,
            'scaleY': self.scale_y,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transform':
        """Build from a dict, accepting both camelCase and snake_case scale keys"""
        return cls(
            x=float(data.get('x', 0.0)),
            y=float(data.get('y', 0.0)),
            width=float(data.get('width', 0.0)),
            height=float(data.get('height', 0.0)),
            rotation=float(data.get('rotation', 0.0)),
            scale_x=float(data.get('scaleX', data.get('scale_x', 1.0))),
            scale_y=float(data.get('scaleY', data.get('scale_y', 1.0))),
        )


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box derived from one or more transforms. Never persisted."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float
    corners: Tuple[Vec2, ...] = field(default=(), compare=False)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Vec2:
        return Vec2((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)


@dataclass(frozen=True)
class Rect:
    """Screen rectangle (container or rendered document surface)"""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom


@dataclass(frozen=True)
class Size:
    width: float
    height: float

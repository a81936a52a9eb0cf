"""Viewport camera state and the tuning records for zoom, pan bounds and inertia."""
from dataclasses import dataclass

from constants import (
    ZOOM_MIN, ZOOM_MAX, ZOOM_STEP,
    PAN_MARGIN_FACTOR, PAN_RESISTANCE,
    INERTIA_MIN_VELOCITY, INERTIA_FRICTION, INERTIA_MAX_DURATION,
    DEFAULT_ZOOM, DEFAULT_OFFSET_X, DEFAULT_OFFSET_Y,
)


@dataclass(frozen=True)
class Viewport:
    """Camera over the document.

    offset_x/offset_y are screen-space translation of the document origin
    relative to the container center (already multiplied by zoom).
    """
    zoom: float = DEFAULT_ZOOM
    offset_x: float = DEFAULT_OFFSET_X
    offset_y: float = DEFAULT_OFFSET_Y


@dataclass(frozen=True)
class ZoomConfig:
    min_zoom: float = ZOOM_MIN
    max_zoom: float = ZOOM_MAX
    zoom_step: float = ZOOM_STEP


@dataclass(frozen=True)
class ElasticBoundsConfig:
    margin_factor: float = PAN_MARGIN_FACTOR
    resistance: float = PAN_RESISTANCE


@dataclass(frozen=True)
class PanBounds:
    min_x: float
    max_x: float
    min_y: float
    max_y: float


@dataclass(frozen=True)
class InertiaConfig:
    min_velocity: float = INERTIA_MIN_VELOCITY  # px/ms
    friction: float = INERTIA_FRICTION
    max_duration: float = INERTIA_MAX_DURATION  # ms

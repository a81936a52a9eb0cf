"""
Zoom math for the editor viewport.

Cursor-anchored zoom, fit/fill presets and the dynamic minimum zoom.
Container coordinates are relative to the container's top-left; viewport
offsets are relative to the container center (see utils.coordinate_transforms).

All functions are pure and return new Viewport values.
"""
import logging

from models.transform import Size
from models.viewport import Viewport, ZoomConfig
from constants import FIT_MARGIN

logger = logging.getLogger(__name__)


def clamp_zoom(zoom: float, config: ZoomConfig = ZoomConfig(), min_zoom: float = None) -> float:
    """Clamp a zoom value to the configured range

    Args:
        zoom: Requested zoom
        config: Zoom limits
        min_zoom: Optional raised lower bound (see calculate_min_zoom)
    """
    lower = config.min_zoom if min_zoom is None else max(config.min_zoom, min_zoom)
    return min(max(zoom, lower), config.max_zoom)


def calculate_min_zoom(content_size: Size, container_size: Size, padding: float,
                       base_min_zoom: float) -> float:
    """Smallest zoom at which content plus padding on each side still fits.

    Floored by base_min_zoom and capped at 1 so it never forces a zoom-in.
    Degenerate sizes fall back to base_min_zoom.
    """
    if content_size.width <= 0 or content_size.height <= 0:
        return base_min_zoom
    avail_w = container_size.width - 2 * padding
    avail_h = container_size.height - 2 * padding
    if avail_w <= 0 or avail_h <= 0:
        return base_min_zoom
    fit = min(avail_w / content_size.width, avail_h / content_size.height)
    return min(1.0, max(base_min_zoom, fit))


def zoom_about_point(viewport: Viewport, target_zoom: float, cursor_x: float, cursor_y: float,
                     container_size: Size, config: ZoomConfig = ZoomConfig(),
                     min_zoom: float = None) -> Viewport:
    """Zoom so the document point under the cursor stays under the cursor.

    Args:
        viewport: Current viewport
        target_zoom: Desired zoom (clamped)
        cursor_x, cursor_y: Cursor position relative to the container's top-left
        container_size: Container size in client pixels
        config: Zoom limits
        min_zoom: Optional raised lower bound

    Returns:
        New Viewport
    """
    new_zoom = clamp_zoom(target_zoom, config, min_zoom)

    # Document point currently under the cursor
    canvas_x = (cursor_x - container_size.width / 2 - viewport.offset_x) / viewport.zoom
    canvas_y = (cursor_y - container_size.height / 2 - viewport.offset_y) / viewport.zoom

    return Viewport(
        zoom=new_zoom,
        offset_x=cursor_x - container_size.width / 2 - canvas_x * new_zoom,
        offset_y=cursor_y - container_size.height / 2 - canvas_y * new_zoom,
    )


def zoom_about_center(viewport: Viewport, target_zoom: float, container_size: Size,
                      config: ZoomConfig = ZoomConfig(), min_zoom: float = None) -> Viewport:
    """Zoom anchored at the container center (toolbar buttons)"""
    return zoom_about_point(
        viewport, target_zoom,
        container_size.width / 2, container_size.height / 2,
        container_size, config, min_zoom,
    )


def calculate_fit_zoom(content_size: Size, container_size: Size, margin: float = FIT_MARGIN) -> float:
    """Zoom that fits the content inside the container shrunk by margin (0.1 = 10%)"""
    if content_size.width <= 0 or content_size.height <= 0:
        return 1.0
    zoom_x = container_size.width * (1 - margin) / content_size.width
    zoom_y = container_size.height * (1 - margin) / content_size.height
    return min(zoom_x, zoom_y)


def _centered(zoom: float, content_size: Size) -> Viewport:
    return Viewport(
        zoom=zoom,
        offset_x=-(content_size.width * zoom) / 2,
        offset_y=-(content_size.height * zoom) / 2,
    )


def fit_to_screen(content_size: Size, container_size: Size, margin: float = FIT_MARGIN,
                  config: ZoomConfig = ZoomConfig()) -> Viewport:
    """Viewport that fits and centers the content"""
    zoom = clamp_zoom(calculate_fit_zoom(content_size, container_size, margin), config)
    return _centered(zoom, content_size)


def get_preset_zoom(preset: str, content_size: Size, container_size: Size,
                    fit_margin: float = FIT_MARGIN) -> float:
    """Zoom level for a named preset ('fit', 'fill', '100%', '200%', '50%')

    Unknown presets give 1.0.
    """
    if preset == 'fit':
        return calculate_fit_zoom(content_size, container_size, fit_margin)
    if preset == 'fill':
        return calculate_fit_zoom(content_size, container_size, 0.0)
    if preset == '100%':
        return 1.0
    if preset == '200%':
        return 2.0
    if preset == '50%':
        return 0.5
    logger.warning(f"Unknown zoom preset {preset!r}, using 100%")
    return 1.0


def apply_zoom_preset(preset: str, content_size: Size, container_size: Size,
                      config: ZoomConfig = ZoomConfig(), fit_margin: float = FIT_MARGIN) -> Viewport:
    """Centered viewport at a preset zoom"""
    zoom = clamp_zoom(get_preset_zoom(preset, content_size, container_size, fit_margin), config)
    return _centered(zoom, content_size)

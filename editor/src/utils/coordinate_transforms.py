"""Coordinate transformation utilities for the editor viewport.

Provides conversion between the coordinate systems:
- Client space (pointer pixels, Y-down)
- Document space (document pixels, origin at the document's top-left)
- Device pixels (for crisp rendering)

The rendered document surface is positioned from the viewport as
    left = container.left + container.width / 2 + offset_x
    top  = container.top + container.height / 2 + offset_y
with size content * zoom.
"""
from models.transform import Vec2, Rect, Size
from models.viewport import Viewport
from constants import (
    TRANSFORM_HANDLE_MIN_EFFECTIVE_ZOOM, TRANSFORM_HANDLE_MAX_EFFECTIVE_ZOOM,
)


def client_to_document(point, viewport: Viewport, document_rect: Rect) -> Vec2:
    """Convert a client pixel position to document coordinates.

    Args:
        point: Client position (Vec2 or (x, y))
        viewport: Current viewport (zoom is used)
        document_rect: Client rect of the rendered document surface

    Returns:
        Vec2 in document space
    """
    x, y = point
    zoom = viewport.zoom or 1.0
    return Vec2(
        (x - document_rect.left) / zoom,
        (y - document_rect.top) / zoom,
    )


def document_to_client(point, viewport: Viewport, document_rect: Rect) -> Vec2:
    """Inverse of client_to_document"""
    x, y = point
    zoom = viewport.zoom or 1.0
    return Vec2(
        document_rect.left + x * zoom,
        document_rect.top + y * zoom,
    )


def document_rect_for_viewport(viewport: Viewport, container_rect: Rect, content_size: Size) -> Rect:
    """Where the document surface lands on screen for a given viewport.

    Args:
        viewport: Camera state
        container_rect: Client rect of the canvas container
        content_size: Document size in document pixels

    Returns:
        Client rect of the rendered document
    """
    return Rect(
        container_rect.left + container_rect.width / 2 + viewport.offset_x,
        container_rect.top + container_rect.height / 2 + viewport.offset_y,
        content_size.width * viewport.zoom,
        content_size.height * viewport.zoom,
    )


def scale_handle_size_for_zoom(size: float, zoom: float, device_pixel_ratio: float = 1.0) -> float:
    """Convert an on-screen handle size to document units.

    The effective zoom is clamped so handles stay usable at extreme zoom levels.
    """
    effective = zoom * (device_pixel_ratio or 1.0)
    effective = max(TRANSFORM_HANDLE_MIN_EFFECTIVE_ZOOM, min(TRANSFORM_HANDLE_MAX_EFFECTIVE_ZOOM, effective))
    return size / effective


def snap_to_pixel(value: float, device_pixel_ratio: float = 1.0) -> float:
    """Round a client coordinate to the nearest device pixel"""
    dpr = device_pixel_ratio or 1.0
    return round(value * dpr) / dpr


def snap_viewport_offsets(viewport: Viewport, device_pixel_ratio: float = 1.0) -> Viewport:
    """Viewport with offsets rounded to device pixels (zoom untouched)"""
    return Viewport(
        zoom=viewport.zoom,
        offset_x=snap_to_pixel(viewport.offset_x, device_pixel_ratio),
        offset_y=snap_to_pixel(viewport.offset_y, device_pixel_ratio),
    )

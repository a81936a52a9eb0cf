"""
Pan boundaries with elastic resistance.

The soft bounds let the document be dragged partway off-screen. While a pan
is in progress offsets beyond the bounds are pulled back by the resistance
factor; when the pan settles they are hard-clamped.
"""
from typing import Tuple

from models.transform import Size
from models.viewport import ElasticBoundsConfig, PanBounds


def calculate_pan_bounds(content_size: Size, viewport_size: Size, zoom: float,
                         config: ElasticBoundsConfig = ElasticBoundsConfig()) -> PanBounds:
    """Soft offset bounds for the current zoom

    The document's left edge may travel right until it sits margin_factor of
    the container width from the left side, and its right edge may travel left
    until it sits margin_factor of the width from the right side (same for Y).
    With margin_factor 0.5 the document always covers the container center.
    When the document is too small to satisfy both, it is pinned centered.

    Args:
        content_size: Document size in document pixels
        viewport_size: Container size in client pixels
        zoom: Current zoom
        config: Margin factor and resistance

    Returns:
        PanBounds in viewport offset space (offsets relative to the container center)
    """
    min_x, max_x = _axis_bounds(content_size.width * zoom, viewport_size.width, config.margin_factor)
    min_y, max_y = _axis_bounds(content_size.height * zoom, viewport_size.height, config.margin_factor)
    return PanBounds(min_x=min_x, max_x=max_x, min_y=min_y, max_y=max_y)


def _axis_bounds(document_extent: float, container_extent: float, margin_factor: float):
    lower = container_extent * (0.5 - margin_factor) - document_extent
    upper = container_extent * (margin_factor - 0.5)
    if lower > upper:
        centered = -document_extent / 2
        return centered, centered
    return lower, upper


def apply_elastic_resistance(offset: float, lower: float, upper: float,
                             config: ElasticBoundsConfig = ElasticBoundsConfig()) -> float:
    """Pull an out-of-range offset back toward the violated bound"""
    if offset < lower:
        return lower - (lower - offset) * config.resistance
    if offset > upper:
        return upper + (offset - upper) * config.resistance
    return offset


def constrain_viewport_with_elasticity(offset_x: float, offset_y: float, content_size: Size,
                                       viewport_size: Size, zoom: float,
                                       config: ElasticBoundsConfig = ElasticBoundsConfig()
                                       ) -> Tuple[float, float]:
    """Apply elastic resistance on both axes"""
    bounds = calculate_pan_bounds(content_size, viewport_size, zoom, config)
    return (
        apply_elastic_resistance(offset_x, bounds.min_x, bounds.max_x, config),
        apply_elastic_resistance(offset_y, bounds.min_y, bounds.max_y, config),
    )


def clamp_to_bounds(offset_x: float, offset_y: float, bounds: PanBounds) -> Tuple[float, float]:
    """Hard clamp used when a pan settles"""
    return (
        max(bounds.min_x, min(bounds.max_x, offset_x)),
        max(bounds.min_y, min(bounds.max_y, offset_y)),
    )

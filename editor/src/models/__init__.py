"""
Frame Composer - Data Models

This module contains the data model classes of the composition engine.
This is the MODEL in MVC architecture.

Public API: Transform, BoundingBox, Layer and Viewport.
Tree operations on the layer list live in services.layer_tree; the Document
model built on them is imported from models.document.
"""

from .transform import Vec2, Transform, BoundingBox, Rect, Size
from .layer import Layer, create_layer, create_base_layer
from .viewport import Viewport, ZoomConfig, ElasticBoundsConfig, PanBounds, InertiaConfig

__all__ = [
    'Vec2', 'Transform', 'BoundingBox', 'Rect', 'Size',
    'Layer', 'create_layer', 'create_base_layer',
    'Viewport', 'ZoomConfig', 'ElasticBoundsConfig', 'PanBounds', 'InertiaConfig',
]

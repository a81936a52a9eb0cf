"""
Shared fixtures for Frame Composer tests.

Provides layer lists, documents, a manual frame scheduler and input helpers.
"""
import sys
import os
import pytest

# Ensure editor/src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'editor', 'src'))

from models.transform import Transform, Rect, Size
from models.layer import create_layer, create_base_layer
from models.viewport import Viewport


DOC_WIDTH = 1920
DOC_HEIGHT = 1080


def make_layer(layer_id, x=0.0, y=0.0, width=100.0, height=100.0, order=0, **kwargs):
    """Image layer with a fixed id (extra kwargs go to the Layer)"""
    return create_layer(
        name=kwargs.pop('name', layer_id.upper()),
        transform=Transform(x, y, width, height, **kwargs.pop('transform_kwargs', {})),
        layer_id=layer_id,
        order=order,
        **kwargs
    )


def make_group(layer_id, order=0, **kwargs):
    return create_layer(
        name=kwargs.pop('name', layer_id.upper()),
        transform=Transform(0, 0, 100, 100),
        layer_type='group',
        layer_id=layer_id,
        order=order,
        **kwargs
    )


def sequential_ids(prefix="new"):
    """id_factory producing new-1, new-2, ..."""
    counter = {'n': 0}

    def factory():
        counter['n'] += 1
        return f"{prefix}-{counter['n']}"
    return factory


@pytest.fixture
def base_layer():
    return create_base_layer(DOC_WIDTH, DOC_HEIGHT, layer_id='base')


@pytest.fixture
def two_layers(base_layer):
    """Base plus A (order 1) and B (order 2) fully overlapping at (100, 100, 200, 200)"""
    return [
        base_layer,
        make_layer('a', 100, 100, 200, 200, order=1),
        make_layer('b', 100, 100, 200, 200, order=2),
    ]


@pytest.fixture
def grouped_layers(base_layer):
    """Base, group G holding C1 and C2, and a root layer D

    Root order: base, G, D
    """
    return [
        base_layer,
        make_group('g', order=1),
        make_layer('c1', 10, 10, order=0, parent_id='g'),
        make_layer('c2', 20, 20, order=1, parent_id='g'),
        make_layer('d', 300, 300, order=2),
    ]


@pytest.fixture
def manual_scheduler():
    from components.frame_scheduler import ManualFrameScheduler
    return ManualFrameScheduler()


@pytest.fixture
def identity_viewport():
    return Viewport(zoom=1.0, offset_x=0.0, offset_y=0.0)


@pytest.fixture
def origin_rect():
    """Document surface at client origin, 1:1"""
    return Rect(0, 0, DOC_WIDTH, DOC_HEIGHT)


@pytest.fixture
def doc_size():
    return Size(DOC_WIDTH, DOC_HEIGHT)

"""Explicit selection inputs.

Callers wrap whatever they have (a bare transform or a layer) in one of the
source types below; ``extract_transform`` is the only place that unwraps them.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from models.layer import Layer
from models.transform import Transform, BoundingBox
from utils.geometry import get_rotated_bounding_box, expand_bounding_boxes


@dataclass(frozen=True)
class TransformSource:
    transform: Transform


@dataclass(frozen=True)
class LayerSource:
    layer: Layer


SelectionSource = Union[TransformSource, LayerSource]


def extract_transform(source: SelectionSource) -> Transform:
    """Get the transform carried by a selection source

    Raises:
        TypeError: If source is not a TransformSource or LayerSource
    """
    if isinstance(source, TransformSource):
        return source.transform
    if isinstance(source, LayerSource):
        return source.layer.transform
    raise TypeError(f"Unsupported selection source: {type(source).__name__}")


def get_selection_bbox(sources: Iterable[SelectionSource]) -> Optional[BoundingBox]:
    """Union bounding box of every source (None when nothing is selected)"""
    return expand_bounding_boxes(
        get_rotated_bounding_box(extract_transform(s)) for s in sources
    )


def resolve_selection(layers: Sequence[Layer], selected_ids: Iterable[str]) -> List[Layer]:
    """Selected layers in selection order, unknown ids dropped"""
    by_id = {layer.id: layer for layer in layers}
    return [by_id[i] for i in selected_ids if i in by_id]

"""Layer record stored in a document's flat layer list.

Layers form a forest through ``parent_id``. The list itself is the storage;
tree views are rebuilt on demand by ``services.layer_tree``.
"""
import uuid as uuid_module
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from models.transform import Transform
from constants import (
    LAYER_TYPE_BASE, LAYER_TYPE_IMAGE, LAYER_TYPE_GROUP, LAYER_TYPES,
    BASE_LAYER_NAME,
)


@dataclass(frozen=True)
class Layer:
    """One node of the layer tree.

    Attributes:
        id: Unique layer id
        name: Display name
        type: 'base', 'image' or 'group'
        order: Index among siblings (dense per parent, re-derived after mutations)
        visible: Visibility flag
        locked: Locked layers are skipped by hit testing and nudging
        parent_id: Id of the parent group, None at root
        collapsed: Group UI state for the layer panel
        transform: Placement in document space
        asset_url: Optional image source
    """
    id: str
    name: str
    type: str
    transform: Transform
    order: int = 0
    visible: bool = True
    locked: bool = False
    parent_id: Optional[str] = None
    collapsed: bool = False
    asset_url: Optional[str] = None

    def __post_init__(self):
        if self.type not in LAYER_TYPES:
            raise ValueError(f"Unknown layer type: {self.type!r}")

    @property
    def is_base(self) -> bool:
        return self.type == LAYER_TYPE_BASE

    @property
    def is_group(self) -> bool:
        return self.type == LAYER_TYPE_GROUP

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'order': self.order,
            'visible': self.visible,
            'locked': self.locked,
            'parentId': self.parent_id,
            'collapsed': self.collapsed,
            'transform': self.transform.to_dict(),
            'assetUrl': self.asset_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Layer':
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            type=data.get('type', LAYER_TYPE_IMAGE),
            transform=Transform.from_dict(data.get('transform', {})),
            order=int(data.get('order', 0)),
            visible=bool(data.get('visible', True)),
            locked=bool(data.get('locked', False)),
            parent_id=data.get('parentId'),
            collapsed=bool(data.get('collapsed', False)),
            asset_url=data.get('assetUrl'),
        )


def generate_layer_id() -> str:
    """Fresh unique layer id"""
    return str(uuid_module.uuid4())


def create_layer(name: str, transform: Transform, layer_type: str = LAYER_TYPE_IMAGE,
                 layer_id: Optional[str] = None, **kwargs) -> Layer:
    """Create a new layer with a generated id unless one is given

    Args:
        name: Display name
        transform: Initial placement
        layer_type: 'image' or 'group'
        layer_id: Explicit id (generated when None)
        **kwargs: Any other Layer field (order, visible, locked, parent_id, ...)

    Returns:
        New Layer instance
    """
    return Layer(
        id=layer_id or generate_layer_id(),
        name=name,
        type=layer_type,
        transform=transform,
        **kwargs
    )


def create_base_layer(width: float, height: float, layer_id: Optional[str] = None) -> Layer:
    """Create the locked background layer covering the whole document"""
    return Layer(
        id=layer_id or generate_layer_id(),
        name=BASE_LAYER_NAME,
        type=LAYER_TYPE_BASE,
        transform=Transform(0.0, 0.0, width, height),
        order=0,
        visible=True,
        locked=True,
        parent_id=None,
    )

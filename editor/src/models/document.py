"""
Frame Composer - Document Model

THE MODEL for one composition. Owns the flat layer list and applies every
change through the pure functions in services.layer_tree, so the base layer
invariant holds after each call.

This class handles:
- Layer management (add, remove, move, duplicate, group, ungroup)
- Display flags (visibility with group cascade, lock, collapse)
- Committed transform batches from gestures and nudging
- Query API (render order, panel rows, hit testing, selection box)
- Snapshot API (for undo/redo support)

Persistence stays with the caller; the dirty flag marks unsaved changes.

Usage:
    doc = Document(name="Poster", width=1920, height=1080)
    layer_id = doc.add_layer("Photo", Transform(100, 100, 200, 200))
    doc.apply_transforms({layer_id: Transform(120, 100, 200, 200)})

    snapshot = doc.get_snapshot()
    doc.set_snapshot(snapshot)
"""

import logging
from typing import Dict, Iterable, List, Optional

from models.layer import Layer, create_layer, create_base_layer, generate_layer_id
from models.transform import Transform, BoundingBox, Size, Vec2
from models.selection import LayerSource, get_selection_bbox, resolve_selection
from services import layer_tree
from services.hit_test import hit_test_document
from services.snapping import SnapContext, snap_targets_for
from services.interaction_math import nudge_transforms
from constants import LAYER_TYPE_IMAGE, DEFAULT_GROUP_NAME, DEFAULT_GRID_SIZE, DEFAULT_SNAP_THRESHOLD


class Document:
    """Composition document with full layer operation API

    Properties:
        id: Document id
        name: Display name
        width, height: Document size in document pixels
        layers: Copy of the layer list
        dirty: True after any accepted change since the last mark_clean()
    """

    def __init__(self, name: str = "Untitled", width: float = 1920, height: float = 1080,
                 layers: Optional[Iterable[Layer]] = None, document_id: Optional[str] = None):
        """Create a document; a base layer is added when none is given"""
        self._logger = logging.getLogger('Document')
        self.id = document_id or generate_layer_id()
        self.name = name
        self.width = width
        self.height = height

        initial = list(layers) if layers is not None else []
        if not any(layer.is_base for layer in initial):
            initial.insert(0, create_base_layer(width, height))
        self._layers = layer_tree.ensure_base_invariant(initial)
        self._dirty = False

        self._logger.debug(f"Created document '{name}' ({width}x{height})")

    # ========================================
    # Properties
    # ========================================

    @property
    def layers(self) -> List[Layer]:
        return list(self._layers)

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark_clean(self):
        self._dirty = False

    def _commit(self, new_layers, action: str) -> bool:
        """Store the result of a tree operation

        Tree operations hand back their input list when they reject a change.

        Returns:
            True if the layer list changed
        """
        if new_layers is self._layers or list(new_layers) == self._layers:
            self._logger.debug(f"{action}: no change")
            return False
        self._layers = list(new_layers)
        self._dirty = True
        self._logger.debug(f"{action}: {len(self._layers)} layers")
        return True

    # ========================================
    # Query API
    # ========================================

    def get_layer(self, layer_id: str) -> Layer:
        """Get layer by id

        Raises:
            ValueError: If id not found
        """
        layer = layer_tree.find_layer(self._layers, layer_id)
        if layer is None:
            raise ValueError(f"Layer with id '{layer_id}' not found")
        return layer

    def has_layer(self, layer_id: str) -> bool:
        return layer_tree.find_layer(self._layers, layer_id) is not None

    def get_base_layer(self) -> Layer:
        return next(layer for layer in self._layers if layer.is_base)

    def get_children(self, parent_id: Optional[str]) -> List[Layer]:
        """Direct children of a group (or root layers for None), in order"""
        children = [layer for layer in self._layers if layer.parent_id == parent_id]
        return sorted(children, key=lambda layer: layer.order)

    def render_order(self) -> List[Layer]:
        """Drawable layers bottom to top"""
        return layer_tree.flatten_for_render(self._layers)

    def tree(self):
        return layer_tree.build_tree(self._layers)

    def panel_rows(self):
        """Layer panel rows (children of collapsed groups hidden)"""
        return layer_tree.flatten_tree(self._layers)

    def hit_test(self, point: Vec2, include_locked: bool = False) -> Optional[Layer]:
        return hit_test_document(self._layers, point, include_locked)

    def selection_bbox(self, layer_ids: Iterable[str]) -> Optional[BoundingBox]:
        """Union box of the selected layers (None for an empty selection)"""
        return get_selection_bbox(LayerSource(layer) for layer in self.resolve_selection(layer_ids))

    def resolve_selection(self, layer_ids: Iterable[str]) -> List[Layer]:
        return resolve_selection(self._layers, layer_ids)

    def snap_context(self, selected_ids: Iterable[str], zoom: float = 1.0,
                     grid_size: float = DEFAULT_GRID_SIZE,
                     threshold: float = DEFAULT_SNAP_THRESHOLD) -> SnapContext:
        """Snap inputs for moving the given selection"""
        return SnapContext(
            document_width=self.width,
            document_height=self.height,
            grid_size=grid_size,
            threshold=threshold,
            zoom=zoom,
            siblings=snap_targets_for(self._layers, selected_ids),
        )

    # ========================================
    # Layer management
    # ========================================

    def add_layer(self, name: str, transform: Transform, layer_type: str = LAYER_TYPE_IMAGE,
                  parent_id: Optional[str] = None, **kwargs) -> Optional[str]:
        """Add a layer on top of its siblings

        Returns:
            Id of the new layer, or None if it was rejected
        """
        order = len(self.get_children(parent_id))
        layer = create_layer(name, transform, layer_type, parent_id=parent_id, order=order, **kwargs)
        if not self._commit(layer_tree.add_layer(self._layers, layer), "add_layer"):
            return None
        return layer.id

    def insert_layer(self, layer: Layer) -> bool:
        """Add a prebuilt layer (duplicate ids and a second base are rejected)"""
        return self._commit(layer_tree.add_layer(self._layers, layer), "insert_layer")

    def remove_layer(self, layer_id: str) -> bool:
        """Remove a layer and its descendants"""
        return self._commit(layer_tree.remove_branch(self._layers, layer_id), "remove_layer")

    def remove_layers(self, layer_ids: Iterable[str]) -> bool:
        return self._commit(layer_tree.remove_layers(self._layers, layer_ids), "remove_layers")

    def move_layer(self, layer_id: str, target_parent_id: Optional[str], target_index: int) -> bool:
        return self._commit(
            layer_tree.move_layer(self._layers, layer_id, target_parent_id, target_index), "move_layer"
        )

    def duplicate_layer(self, layer_id: str) -> Optional[str]:
        """Duplicate a layer with its subtree

        Returns:
            Id of the top clone, or None if nothing was duplicated
        """
        created = []

        def id_factory():
            new_id = generate_layer_id()
            created.append(new_id)
            return new_id

        if not self._commit(layer_tree.duplicate_branch(self._layers, layer_id, id_factory), "duplicate_layer"):
            return None
        return created[0]

    def group_layers(self, layer_ids: Iterable[str], name: str = DEFAULT_GROUP_NAME) -> Optional[str]:
        """Group at least two layers

        Returns:
            Id of the new group, or None if grouping was rejected
        """
        created = []

        def id_factory():
            new_id = generate_layer_id()
            created.append(new_id)
            return new_id

        if not self._commit(layer_tree.group_layers(self._layers, layer_ids, name, id_factory), "group_layers"):
            return None
        return created[0]

    def ungroup_layer(self, group_id: str) -> bool:
        return self._commit(layer_tree.ungroup_layer(self._layers, group_id), "ungroup_layer")

    # ========================================
    # Display flags
    # ========================================

    def update_layer(self, layer_id: str, **changes) -> bool:
        """Change name/visible/locked/collapsed/transform/asset_url"""
        return self._commit(layer_tree.update_layer(self._layers, layer_id, **changes), "update_layer")

    def set_visibility(self, layer_id: str, visible: bool) -> bool:
        return self.update_layer(layer_id, visible=visible)

    def set_locked(self, layer_id: str, locked: bool) -> bool:
        return self.update_layer(layer_id, locked=locked)

    def toggle_collapse(self, layer_id: str, collapsed: bool) -> bool:
        return self._commit(layer_tree.toggle_collapse(self._layers, layer_id, collapsed), "toggle_collapse")

    # ========================================
    # Transforms
    # ========================================

    def apply_transforms(self, updates: Dict[str, Transform]) -> bool:
        """Apply a committed batch (e.g. from GestureController.committed)"""
        if not updates:
            return False
        return self._commit(layer_tree.apply_transform_updates(self._layers, updates), "apply_transforms")

    def nudge(self, layer_ids: Iterable[str], key: str, large: bool = False) -> bool:
        """Arrow-key move of the selected layers (locked layers stay put)"""
        return self.apply_transforms(nudge_transforms(self.resolve_selection(layer_ids), key, large))

    # ========================================
    # Snapshot API
    # ========================================

    def get_snapshot(self) -> Dict:
        """Get complete state snapshot (for undo)

        Returns:
            Serializable dictionary containing all document state
        """
        return {
            'id': self.id,
            'name': self.name,
            'width': self.width,
            'height': self.height,
            'layers': [layer.to_dict() for layer in self._layers],
        }

    def set_snapshot(self, snapshot: Dict):
        """Restore state from snapshot (for undo)

        Args:
            snapshot: Dictionary from get_snapshot()
        """
        self.id = snapshot.get('id', self.id)
        self.name = snapshot['name']
        self.width = snapshot['width']
        self.height = snapshot['height']
        layers = [Layer.from_dict(data) for data in snapshot['layers']]
        self._layers = layer_tree.ensure_base_invariant(layers)
        self._dirty = True

        self._logger.debug("Restored from snapshot")

"""
Layer tree operations on a document's flat layer list.

The list is the storage; parent/child structure is expressed through
``parent_id`` and tree views are rebuilt on demand. Every function here is
pure: it returns a new list and never mutates its input. Structural
operations finish by restoring the base layer invariant:

- exactly the base layer(s) sit at the root, first in order
- base is locked, visible and named BASE_LAYER_NAME
- sibling orders are dense 0..n-1 per parent

Rejected operations (unknown ids, base layer targets, cycles) log and
return the input list unchanged.

Paint order: trees and render lists are emitted bottom to top, so the base
layer comes first and the last element is drawn on top.
"""
import re
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from models.layer import Layer, create_layer, generate_layer_id
from models.transform import Transform
from constants import (
    LAYER_TYPE_BASE, LAYER_TYPE_GROUP, BASE_LAYER_NAME, DEFAULT_GROUP_NAME, COPY_SUFFIX,
)

logger = logging.getLogger(__name__)

_COPY_SUFFIX_RE = re.compile(r' copy( \d+)?$', re.IGNORECASE)

# Fields update_layer is allowed to change on non-base layers
_UPDATABLE_FIELDS = ('name', 'visible', 'locked', 'collapsed', 'transform', 'asset_url')


@dataclass
class LayerTreeNode:
    layer: Layer
    children: List['LayerTreeNode'] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.layer.id


@dataclass(frozen=True)
class FlattenedLayerNode:
    """Row of the layer panel view"""
    layer: Layer
    depth: int
    has_children: bool


# ========================================
# Internal helpers
# ========================================

def _collect_by_parent(layers: Iterable[Layer]) -> Dict[Optional[str], List[Layer]]:
    groups = {}
    for layer in layers:
        groups.setdefault(layer.parent_id, []).append(layer)
    return groups


def _apply(layers: Sequence[Layer], orders: Mapping[str, int] = None,
           parents: Mapping[str, Optional[str]] = None) -> List[Layer]:
    """Return a new list with order/parent overrides applied"""
    orders = orders or {}
    parents = parents or {}
    result = []
    for layer in layers:
        changes = {}
        if layer.id in orders and orders[layer.id] != layer.order:
            changes['order'] = orders[layer.id]
        if layer.id in parents and parents[layer.id] != layer.parent_id:
            changes['parent_id'] = parents[layer.id]
        result.append(replace(layer, **changes) if changes else layer)
    return result


def _sorted_siblings(layers: Iterable[Layer], parent_id: Optional[str],
                     exclude_id: str = None) -> List[Layer]:
    return sorted(
        (l for l in layers if l.parent_id == parent_id and l.id != exclude_id),
        key=lambda l: l.order,
    )


def _by_id(layers: Iterable[Layer]) -> Dict[str, Layer]:
    return {layer.id: layer for layer in layers}


# ========================================
# Ordering and invariants
# ========================================

def normalize_order(layers: Sequence[Layer]) -> List[Layer]:
    """Reassign dense sibling orders per parent, base layer(s) first at root.

    Siblings keep their relative order (stable sort on the current order).
    Buckets not reachable from the root (missing parents) are densified too.
    """
    by_parent = _collect_by_parent(layers)
    new_orders = {}
    visited = set()

    def assign(parent_id):
        if parent_id in visited:
            return
        visited.add(parent_id)
        siblings = sorted(by_parent.get(parent_id, []), key=lambda l: l.order)
        if parent_id is None:
            siblings = ([l for l in siblings if l.type == LAYER_TYPE_BASE] +
                        [l for l in siblings if l.type != LAYER_TYPE_BASE])
        for index, layer in enumerate(siblings):
            new_orders[layer.id] = index
            assign(layer.id)

    assign(None)
    for parent_id in by_parent:
        assign(parent_id)

    return _apply(layers, orders=new_orders)


def ensure_base_invariant(layers: Sequence[Layer]) -> List[Layer]:
    """Force base layer locked/visible/root/name, then re-normalize order.

    Idempotent: applying it twice gives the same list as applying it once.
    """
    fixed = []
    for layer in normalize_order(layers):
        if layer.type == LAYER_TYPE_BASE:
            layer = replace(layer, locked=True, visible=True, parent_id=None, name=BASE_LAYER_NAME)
        fixed.append(layer)
    return normalize_order(fixed)


# ========================================
# Tree views
# ========================================

def build_tree(layers: Sequence[Layer]) -> List[LayerTreeNode]:
    """Build the forest from parent_id references.

    Layers whose parent does not exist are re-rooted (parent_id None in the
    returned nodes). Roots and children are in paint order, base first.
    """
    normalized = normalize_order(layers)
    nodes = {}
    for layer in normalized:
        nodes[layer.id] = LayerTreeNode(layer)

    roots = []
    for node in nodes.values():
        parent_id = node.layer.parent_id
        if parent_id is not None and parent_id in nodes and parent_id != node.id:
            nodes[parent_id].children.append(node)
        else:
            if parent_id is not None:
                node.layer = replace(node.layer, parent_id=None)
            roots.append(node)

    def sort_children(siblings):
        siblings.sort(key=lambda n: n.layer.order)
        for child in siblings:
            sort_children(child.children)

    sort_children(roots)
    base = [n for n in roots if n.layer.type == LAYER_TYPE_BASE]
    others = [n for n in roots if n.layer.type != LAYER_TYPE_BASE]
    return base + others


def flatten_tree(layers: Sequence[Layer]) -> List[FlattenedLayerNode]:
    """Panel view: depth-first rows, children of collapsed nodes skipped"""
    result = []

    def walk(nodes, depth):
        for node in nodes:
            result.append(FlattenedLayerNode(node.layer, depth, bool(node.children)))
            if not node.layer.collapsed:
                walk(node.children, depth + 1)

    walk(build_tree(layers), 0)
    return result


def flatten_for_render(layers: Sequence[Layer]) -> List[Layer]:
    """Depth-first paint order list (bottom to top), group nodes omitted.

    A layer is emitted before its children; groups are walked into but not
    emitted because they have no visual of their own. Visibility is left to
    the consumer.
    """
    result = []

    def walk(nodes):
        for node in nodes:
            if node.layer.type != LAYER_TYPE_GROUP:
                result.append(node.layer)
            if node.children:
                walk(node.children)

    walk(build_tree(layers))
    return result


# ========================================
# Queries
# ========================================

def find_layer(layers: Iterable[Layer], layer_id: str) -> Optional[Layer]:
    for layer in layers:
        if layer.id == layer_id:
            return layer
    return None


def collect_descendant_ids(layers: Sequence[Layer], layer_id: str) -> List[str]:
    """Ids of every descendant of layer_id (depth-first, sibling order)"""
    by_parent = _collect_by_parent(layers)
    result = []
    seen = {layer_id}

    def collect(parent_id):
        for child in sorted(by_parent.get(parent_id, []), key=lambda l: l.order):
            if child.id in seen:
                continue
            seen.add(child.id)
            result.append(child.id)
            collect(child.id)

    collect(layer_id)
    return result


def get_layer_ancestors(layers: Sequence[Layer], layer_id: str) -> List[Layer]:
    """Ancestors from the direct parent up to the root"""
    by_id = _by_id(layers)
    ancestors = []
    seen = {layer_id}
    current = by_id.get(layer_id)
    while current is not None and current.parent_id is not None:
        parent = by_id.get(current.parent_id)
        if parent is None or parent.id in seen:
            break
        seen.add(parent.id)
        ancestors.append(parent)
        current = parent
    return ancestors


def is_descendant_of(layers: Sequence[Layer], ancestor_id: str,
                     possible_descendant_id: Optional[str]) -> bool:
    """True if possible_descendant_id is ancestor_id or lies inside its subtree"""
    if possible_descendant_id is None:
        return False
    if ancestor_id == possible_descendant_id:
        return True
    return any(a.id == ancestor_id for a in get_layer_ancestors(layers, possible_descendant_id))


def get_layer_depth(layers: Sequence[Layer], layer_id: str) -> int:
    return len(get_layer_ancestors(layers, layer_id))


# ========================================
# Structural mutations
# ========================================

def move_layer(layers: Sequence[Layer], layer_id: str, target_parent_id: Optional[str],
               target_index: int) -> List[Layer]:
    """Reparent and/or reorder a layer.

    Args:
        layers: Current layer list
        layer_id: Layer to move
        target_parent_id: New parent id (None for root)
        target_index: Position among the new siblings (clamped)

    Returns:
        New layer list, or the input unchanged when the move is rejected
        (unknown layer, base layer, unknown or base target parent, or a
        target parent inside the moved layer's subtree)
    """
    normalized = normalize_order(layers)
    by_id = _by_id(normalized)
    layer = by_id.get(layer_id)
    if layer is None:
        logger.debug(f"move_layer: unknown layer {layer_id}")
        return layers
    if layer.type == LAYER_TYPE_BASE:
        logger.warning("move_layer: base layer cannot be moved")
        return layers
    if target_parent_id is not None:
        target_parent = by_id.get(target_parent_id)
        if target_parent is None or target_parent.type == LAYER_TYPE_BASE:
            logger.warning(f"move_layer: invalid target parent {target_parent_id}")
            return layers
    if is_descendant_of(normalized, layer.id, target_parent_id):
        logger.warning(f"move_layer: moving {layer_id} under {target_parent_id} would create a cycle")
        return layers

    orders = {}
    for index, sibling in enumerate(_sorted_siblings(normalized, layer.parent_id, layer.id)):
        orders[sibling.id] = index

    siblings = _sorted_siblings(normalized, target_parent_id, layer.id)
    index = max(0, min(int(target_index), len(siblings)))
    siblings.insert(index, layer)
    for i, sibling in enumerate(siblings):
        orders[sibling.id] = i

    moved = _apply(normalized, orders=orders, parents={layer.id: target_parent_id})
    logger.debug(f"Moved layer {layer_id} to parent {target_parent_id} at {index}")
    return ensure_base_invariant(moved)


def cascade_visibility(layers: Sequence[Layer], root_id: str, visible: bool) -> List[Layer]:
    """Set visibility on a layer and every descendant in one pass"""
    if find_layer(layers, root_id) is None:
        logger.debug(f"cascade_visibility: unknown layer {root_id}")
        return layers
    ids = {root_id, *collect_descendant_ids(layers, root_id)}
    updated = [replace(l, visible=visible) if l.id in ids else l for l in layers]
    return ensure_base_invariant(updated)


def _copy_name(name: str) -> str:
    return _COPY_SUFFIX_RE.sub('', name) + COPY_SUFFIX


def duplicate_branch(layers: Sequence[Layer], layer_id: str,
                     id_factory: Callable[[], str] = generate_layer_id) -> List[Layer]:
    """Deep-clone a layer and its subtree, placed right after the original.

    Every clone gets a fresh id and a " copy" suffix (an existing
    " copy"/" copy N" suffix is replaced rather than stacked).
    """
    normalized = normalize_order(layers)
    target = find_layer(normalized, layer_id)
    if target is None or target.type == LAYER_TYPE_BASE:
        logger.warning(f"duplicate_branch: cannot duplicate {layer_id}")
        return layers

    by_parent = _collect_by_parent(normalized)
    clones = []

    def clone_branch(source, parent_id):
        clone = replace(source, id=id_factory(), name=_copy_name(source.name), parent_id=parent_id)
        clones.append(clone)
        for child in sorted(by_parent.get(source.id, []), key=lambda l: l.order):
            clone_branch(child, clone.id)
        return clone

    root_clone = clone_branch(target, target.parent_id)
    placed = move_layer(normalized + clones, root_clone.id, target.parent_id, target.order + 1)
    logger.debug(f"Duplicated {layer_id} as {root_clone.id} ({len(clones)} layers)")
    return ensure_base_invariant(placed)


def remove_branch(layers: Sequence[Layer], layer_id: str) -> List[Layer]:
    """Remove a layer and all its descendants (base layer refused)"""
    target = find_layer(layers, layer_id)
    if target is None:
        logger.debug(f"remove_branch: unknown layer {layer_id}")
        return layers
    if target.type == LAYER_TYPE_BASE:
        logger.warning("remove_branch: base layer cannot be removed")
        return layers
    ids = {layer_id, *collect_descendant_ids(layers, layer_id)}
    return ensure_base_invariant([l for l in layers if l.id not in ids])


def remove_layers(layers: Sequence[Layer], layer_ids: Iterable[str]) -> List[Layer]:
    """Remove several branches; base and unknown ids are skipped"""
    result = layers
    for layer_id in layer_ids:
        result = remove_branch(result, layer_id)
    return list(result)


def group_layers(layers: Sequence[Layer], layer_ids: Iterable[str], name: str = DEFAULT_GROUP_NAME,
                 id_factory: Callable[[], str] = generate_layer_id) -> List[Layer]:
    """Wrap at least two non-base layers in a new group.

    The group sits under the members' common parent (root if they differ) at
    the lowest member order, copies the first member's transform and is
    visible only if every member is. A hidden group hides its members.
    """
    by_id = _by_id(layers)
    unique_ids = list(dict.fromkeys(layer_ids))
    selected = [by_id[i] for i in unique_ids if i in by_id and by_id[i].type != LAYER_TYPE_BASE]
    if len(selected) < 2:
        logger.debug("group_layers: need at least two non-base layers")
        return layers

    first_parent = selected[0].parent_id
    parent_id = first_parent if all(l.parent_id == first_parent for l in selected) else None
    visible = all(l.visible for l in selected)

    group = create_layer(
        name=name,
        transform=selected[0].transform,
        layer_type=LAYER_TYPE_GROUP,
        layer_id=id_factory(),
        order=min(l.order for l in selected),
        visible=visible,
        parent_id=parent_id,
    )
    member_ids = {l.id for l in selected}
    updated = _apply(layers, parents={i: group.id for i in member_ids}) + [group]
    result = ensure_base_invariant(updated)
    if not visible:
        result = cascade_visibility(result, group.id, False)
    logger.debug(f"Grouped {len(selected)} layers into {group.id}")
    return result


def ungroup_layer(layers: Sequence[Layer], group_id: str) -> List[Layer]:
    """Move a group's direct children to the group's parent and delete the group.

    The children take the group's place among its siblings.
    """
    normalized = normalize_order(layers)
    group = find_layer(normalized, group_id)
    if group is None or group.type != LAYER_TYPE_GROUP:
        logger.debug(f"ungroup_layer: {group_id} is not a group")
        return layers

    children = _sorted_siblings(normalized, group.id)
    siblings = _sorted_siblings(normalized, group.parent_id)
    index = siblings.index(group)
    new_siblings = siblings[:index] + children + siblings[index + 1:]

    orders = {l.id: i for i, l in enumerate(new_siblings)}
    parents = {c.id: group.parent_id for c in children}
    remaining = [l for l in _apply(normalized, orders=orders, parents=parents) if l.id != group.id]
    logger.debug(f"Ungrouped {group_id} ({len(children)} children)")
    return ensure_base_invariant(remaining)


def toggle_collapse(layers: Sequence[Layer], layer_id: str, collapsed: bool) -> List[Layer]:
    if find_layer(layers, layer_id) is None:
        return layers
    return ensure_base_invariant(
        [replace(l, collapsed=collapsed) if l.id == layer_id else l for l in layers]
    )


def add_layer(layers: Sequence[Layer], layer: Layer) -> List[Layer]:
    """Append a layer.

    Duplicate ids, a second base layer, and an unknown or base parent are
    rejected (the input is returned unchanged).
    """
    if find_layer(layers, layer.id) is not None:
        logger.warning(f"add_layer: duplicate id {layer.id}")
        return layers
    if layer.type == LAYER_TYPE_BASE and any(l.type == LAYER_TYPE_BASE for l in layers):
        logger.warning("add_layer: document already has a base layer")
        return layers
    if layer.parent_id is not None:
        parent = find_layer(layers, layer.parent_id)
        if parent is None or parent.type == LAYER_TYPE_BASE:
            logger.warning(f"add_layer: invalid parent {layer.parent_id}")
            return layers
    return ensure_base_invariant(list(layers) + [layer])


def update_layer(layers: Sequence[Layer], layer_id: str, **changes) -> List[Layer]:
    """Update display fields of a layer.

    Base layer edits are rejected. Setting visibility on a group cascades to
    its descendants. Unknown field names are ignored.
    """
    target = find_layer(layers, layer_id)
    if target is None:
        logger.debug(f"update_layer: unknown layer {layer_id}")
        return layers
    if target.type == LAYER_TYPE_BASE:
        logger.warning("update_layer: base layer cannot be edited")
        return layers

    unknown = set(changes) - set(_UPDATABLE_FIELDS)
    if unknown:
        logger.warning(f"update_layer: ignoring fields {sorted(unknown)}")
    allowed = {k: v for k, v in changes.items() if k in _UPDATABLE_FIELDS}
    updated = [replace(l, **allowed) if l.id == layer_id else l for l in layers]
    if target.type == LAYER_TYPE_GROUP and 'visible' in allowed:
        updated = cascade_visibility(updated, layer_id, bool(allowed['visible']))
    return ensure_base_invariant(updated)


def apply_transform_updates(layers: Sequence[Layer], updates: Mapping[str, Transform]) -> List[Layer]:
    """Apply a committed batch of transforms (base and unknown ids skipped)"""
    result = []
    for layer in layers:
        if layer.id in updates and layer.type != LAYER_TYPE_BASE:
            layer = replace(layer, transform=updates[layer.id])
        result.append(layer)
    return ensure_base_invariant(result)

"""Deterministic overlay composition engine.

An overlay diff is applied in a fixed phase order, independent of how the
phases were written in the JSON document:

    remove -> add -> highlight -> modify

Removing a node cascades to every edge touching it before explicit edge
removals run. Nothing here mutates the input spec.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from stepviz.spec.models import (
    DiagramSpec,
    Edge,
    EntitySet,
    Node,
    OverlayDiff,
    SpecDiff,
    DiffRemove,
)

logger = logging.getLogger(__name__)

NodeMap = Dict[str, Node]
EdgeMap = Dict[str, Edge]


def structural_key(element: Any) -> str:
    """Serialize an element for structural equality.

    Two elements are considered equal iff their JSON serializations match.
    This is intentionally coarse: it is not field-aware, so a marker flag or a
    reordered metadata map counts as a modification.
    """
    if hasattr(element, "model_dump"):
        element = element.model_dump(by_alias=True)
    return json.dumps(element, ensure_ascii=False, default=str)


def structurally_equal(a: Any, b: Any) -> bool:
    return structural_key(a) == structural_key(b)


def _patched(model: Any, patch: Dict[str, Any]) -> Any:
    data = model.model_dump(by_alias=True)
    data.update(patch)
    data["_modified"] = True
    return type(model).model_validate(data)


def apply_diff(node_map: NodeMap, edge_map: EdgeMap, diff: Optional[OverlayDiff]) -> None:
    """Apply one overlay diff in place to ordered id-indexed maps."""
    if diff is None:
        return

    if diff.remove:
        for node_id in diff.remove.node_ids:
            node_map.pop(node_id, None)
            for edge_id in [eid for eid, e in edge_map.items() if e.touches(node_id)]:
                del edge_map[edge_id]
        for edge_id in diff.remove.edge_ids:
            edge_map.pop(edge_id, None)

    if diff.add:
        for node in diff.add.nodes:
            node_map[node.id] = node.model_copy(deep=True, update={"added": True})
        for edge in diff.add.edges:
            edge_map[edge.id] = edge.model_copy(deep=True, update={"added": True})

    if diff.highlight:
        for node_id in diff.highlight.node_ids:
            if node_id in node_map:
                node_map[node_id] = node_map[node_id].model_copy(update={"highlighted": True})
        for edge_id in diff.highlight.edge_ids:
            if edge_id in edge_map:
                edge_map[edge_id] = edge_map[edge_id].model_copy(update={"highlighted": True})

    if diff.modify:
        for patch in diff.modify.nodes:
            node = node_map.get(patch["id"])
            if node is not None:
                node_map[patch["id"]] = _patched(node, patch)
        for patch in diff.modify.edges:
            edge = edge_map.get(patch["id"])
            if edge is not None:
                edge_map[patch["id"]] = _patched(edge, patch)


def compose(spec: DiagramSpec, overlay_ids: Iterable[str] = ()) -> DiagramSpec:
    """Materialize ``spec`` with the given overlays applied in order."""
    composed = spec.model_copy(deep=True)
    node_map: NodeMap = {n.id: n for n in composed.nodes}
    edge_map: EdgeMap = {e.id: e for e in composed.edges}
    applied = list(overlay_ids)

    for overlay_id in applied:
        overlay = spec.overlay(overlay_id)
        if overlay is None:
            logger.warning("Overlay %s not found in spec %s; skipping", overlay_id, spec.id)
            continue
        apply_diff(node_map, edge_map, overlay.diff)

    composed.nodes = list(node_map.values())
    composed.edges = list(edge_map.values())
    composed.active_overlays = applied
    return composed


def scene_overlay_ids(spec: DiagramSpec, scene_ids: Iterable[str]) -> List[str]:
    """Concatenate the overlays of several scenes, first occurrence wins."""
    ordered: List[str] = []
    seen = set()
    for scene_id in scene_ids:
        scene = spec.scene(scene_id)
        if scene is None:
            logger.warning("Scene %s not found in spec %s; skipping", scene_id, spec.id)
            continue
        for overlay_id in scene.overlays:
            if overlay_id not in seen:
                seen.add(overlay_id)
                ordered.append(overlay_id)
    return ordered


def merge_scenes(spec: DiagramSpec, scene_ids: Iterable[str] = ()) -> DiagramSpec:
    return compose(spec, scene_overlay_ids(spec, scene_ids))


def calculate_diff(before: DiagramSpec, after: DiagramSpec) -> SpecDiff:
    """Compare two materialized specs by id.

    Ids only in ``before`` are removals, ids only in ``after`` are additions
    and shared ids whose structural serialization differs are modifications.
    """
    before_nodes = {n.id: n for n in before.nodes}
    after_nodes = {n.id: n for n in after.nodes}
    before_edges = {e.id: e for e in before.edges}
    after_edges = {e.id: e for e in after.edges}

    add = EntitySet()
    modify = EntitySet()
    remove = DiffRemove()

    remove.node_ids = [nid for nid in before_nodes if nid not in after_nodes]
    for nid, node in after_nodes.items():
        if nid not in before_nodes:
            add.nodes.append(node)
        elif not structurally_equal(before_nodes[nid], node):
            modify.nodes.append(node)

    remove.edge_ids = [eid for eid in before_edges if eid not in after_edges]
    for eid, edge in after_edges.items():
        if eid not in before_edges:
            add.edges.append(edge)
        elif not structurally_equal(before_edges[eid], edge):
            modify.edges.append(edge)

    return SpecDiff(add=add, remove=remove, modify=modify)

"""Deterministic translator from a materialized spec to Mermaid text.

One strategy per layout type; unknown layout types fall back to the flow
strategy. Identical input yields byte-identical output, which the render
cache and the golden tests rely on.
"""
from __future__ import annotations

import re
from typing import Callable, Dict, List

from stepviz.spec.models import DiagramSpec, Edge, LayoutType, Node, NodeType
from stepviz.translation import tables
from stepviz.translation.lines import LineBuilder

DEFAULT_GROUP = "default"

_FLOW_LABEL_STRIP = re.compile(r"[()|\[\]]")
_WHITESPACE = re.compile(r"\s+")
_MERMAID_ID = re.compile(r"[^0-9A-Za-z_-]+")


def sanitize_flow_label(label: str | None) -> str:
    """Strip characters that flowchart edge labels cannot carry."""
    cleaned = _FLOW_LABEL_STRIP.sub("", label or "")
    return _WHITESPACE.sub(" ", cleaned).strip()


def _quoted(text: str) -> str:
    return text.replace('"', "#quot;")


def _group_id(name: str) -> str:
    return _MERMAID_ID.sub("_", name).strip("_") or "group"


def _group_by(items: List, key: Callable) -> Dict[str, List]:
    groups: Dict[str, List] = {DEFAULT_GROUP: []}
    for item in items:
        groups.setdefault(key(item) or DEFAULT_GROUP, []).append(item)
    return groups


def format_edge_label(edge: Edge) -> str:
    """Sequence message text: kind glyph, label, bracketed metrics."""
    parts = [tables.kind_glyph(edge), edge.label or ""]
    metrics = tables.metric_annotations(edge.metrics)
    if metrics:
        parts.append(f"[{', '.join(metrics)}]")
    return " ".join(p for p in parts if p)


def _flow_edge_line(edge: Edge) -> str:
    label = sanitize_flow_label(edge.label) if edge.label else ""
    pipe = f"|{label}|" if label else ""
    return f"{edge.from_} {tables.flow_arrow(edge)}{pipe} {edge.to}"


def generate_sequence(spec: DiagramSpec) -> str:
    out = LineBuilder("sequenceDiagram")
    if spec.layout.numbered:
        out.line("autonumber")

    participants = sorted(spec.nodes, key=tables.sequence_rank)
    for node in participants:
        out.line(f"participant {node.id} as {tables.node_icon(node)}{node.display_label}")

    for phase, edges in _group_by(spec.edges, lambda e: e.phase).items():
        in_phase = phase != DEFAULT_GROUP
        with out.block(f"rect rgba({tables.phase_color(phase)})", enabled=in_phase, nest=True):
            if in_phase and participants:
                out.line(f"Note over {participants[0].id}: {phase}")
            for edge in edges:
                with out.block(f"rect rgba({tables.HIGHLIGHT_BLOCK_COLOR})", enabled=edge.highlighted, nest=True):
                    out.line(f"{edge.from_}{tables.sequence_arrow(edge)}{edge.to}: {format_edge_label(edge)}")

    return out.render()


def generate_flow(spec: DiagramSpec) -> str:
    out = LineBuilder("flowchart TB")

    for node in spec.nodes:
        open_, close = tables.node_shape(node)
        suffix = ":::highlight" if node.highlighted else ":::added" if node.added else ""
        out.line(f'{node.id}{open_}"{_quoted(node.display_label)}"{close}{suffix}')

    for edge in spec.edges:
        out.line(_flow_edge_line(edge))

    out.line()
    for class_def in tables.FLOW_CLASS_DEFS:
        out.line(class_def)

    # Link styles are addressed by edge position in declaration order.
    for position, edge in enumerate(spec.edges):
        if edge.highlighted:
            out.line(f"linkStyle {position} stroke:#FFD700,stroke-width:4px")
        elif edge.added:
            out.line(f"linkStyle {position} stroke:#228B22,stroke-width:3px,stroke-dasharray: 5 5")

    for node in spec.nodes:
        if node.highlighted or node.added:
            continue
        css_class = tables.style_class(node)
        if css_class:
            out.line(f"class {node.id} {css_class}")

    return out.render()


def generate_state(spec: DiagramSpec) -> str:
    out = LineBuilder("stateDiagram-v2")

    for node in spec.nodes:
        if node.node_type is not NodeType.STATE:
            continue
        out.line(f'state "{node.display_label}" as {node.id}')
        description = node.metadata.get("description")
        if description:
            out.line(f"{node.id} : {description}")

    for edge in spec.edges:
        label = f" : {edge.label}" if edge.label else ""
        out.line(f"{edge.from_} --> {edge.to}{label}")

    return out.render()


def generate_matrix(spec: DiagramSpec) -> str:
    out = LineBuilder("flowchart TB")

    for rack, nodes in _group_by(spec.nodes, lambda n: n.rack).items():
        in_rack = rack != DEFAULT_GROUP
        with out.block(f'subgraph {_group_id(rack)}["{_quoted(rack)}"]', enabled=in_rack, nest=True):
            for node in nodes:
                open_, close = tables.node_shape(node)
                label = _quoted(f"{tables.node_icon(node)}{node.display_label}")
                out.line(f'{node.id}{open_}"{label}"{close}')

    for edge in spec.edges:
        out.line(_flow_edge_line(edge))

    return out.render()


def generate_timeline(spec: DiagramSpec) -> str:
    out = LineBuilder("gitGraph")
    out.line('commit id: "Start"')

    branches = set()
    for node in spec.nodes:
        if node.node_type is not NodeType.EVENT:
            continue
        commit_id = node.display_label.replace('"', "'")
        out.line(f'commit id: "{commit_id}"')
        branch = node.metadata.get("branch")
        if branch:
            # gitGraph refuses to create the same branch twice
            out.line(f"checkout {branch}" if branch in branches else f"branch {branch}")
            branches.add(branch)

    return out.render()


GENERATORS: Dict[LayoutType, Callable[[DiagramSpec], str]] = {
    LayoutType.SEQUENCE: generate_sequence,
    LayoutType.FLOW: generate_flow,
    LayoutType.STATE: generate_state,
    LayoutType.MATRIX: generate_matrix,
    LayoutType.TIMELINE: generate_timeline,
}


def get_generator(layout: LayoutType | None) -> Callable[[DiagramSpec], str]:
    return GENERATORS.get(layout, GENERATORS[LayoutType.FLOW])


def generate_mermaid(spec: DiagramSpec) -> str:
    """Produce Mermaid diagram text for ``spec`` keyed by its layout type."""
    return get_generator(spec.layout_type)(spec)

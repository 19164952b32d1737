"""Dispatch tables for Mermaid text generation.

Each lookup has an explicit default arm; tags that are missing from a table
never raise.
"""
from __future__ import annotations

from typing import Dict, Optional, Tuple

from stepviz.spec.models import Edge, EdgeKind, EdgeMetrics, Node, NodeType

# Participant order for sequence diagrams.
SEQUENCE_TYPE_ORDER: Tuple[NodeType, ...] = (
    NodeType.CLIENT,
    NodeType.COORDINATOR,
    NodeType.STORAGE_NODE,
    NodeType.RACK,
    NodeType.SWITCH,
    NodeType.NOTE,
)

NODE_SHAPES: Dict[NodeType, Tuple[str, str]] = {
    NodeType.COORDINATOR: ("{{", "}}"),   # hexagon
    NodeType.STORAGE_NODE: ("[(", ")]"),  # cylinder
    NodeType.CLIENT: ("[", "]"),
    NodeType.RACK: ("{{", "}}"),
    NodeType.SWITCH: ("((", "))"),
    NodeType.NOTE: ("[", "]"),
    NodeType.STATE: ("[", "]"),
    NodeType.EVENT: ("(", ")"),
}
DEFAULT_SHAPE = NODE_SHAPES[NodeType.NOTE]

NODE_ICONS: Dict[NodeType, str] = {
    NodeType.COORDINATOR: "🎯 ",
    NodeType.STORAGE_NODE: "💾 ",
    NodeType.CLIENT: "💻 ",
    NodeType.RACK: "🏢 ",
    NodeType.SWITCH: "🔌 ",
    NodeType.NOTE: "📝 ",
}

SEQUENCE_ARROWS: Dict[EdgeKind, str] = {
    EdgeKind.CONTROL: "->>",
    EdgeKind.DATA: "-->>",
    EdgeKind.CACHE: "-)",
    EdgeKind.HEARTBEAT: "->>",
}
DEFAULT_SEQUENCE_ARROW = "->>"

FLOW_ARROWS: Dict[EdgeKind, str] = {
    EdgeKind.CONTROL: "-->",
    EdgeKind.DATA: "==>",
    EdgeKind.CACHE: "-.->",
    EdgeKind.HEARTBEAT: "-.->",
    EdgeKind.BIDIRECTIONAL: "<-->",
}
DEFAULT_FLOW_ARROW = "-->"

KIND_GLYPHS: Dict[EdgeKind, str] = {
    EdgeKind.CONTROL: "⚡",
    EdgeKind.DATA: "📦",
    EdgeKind.CACHE: "💾",
    EdgeKind.HEARTBEAT: "💓",
}

PHASE_COLORS: Dict[str, str] = {
    "setup": "200,200,255,0.2",
    "execution": "200,255,200,0.2",
    "cleanup": "255,200,200,0.2",
    "error": "255,100,100,0.3",
}
DEFAULT_PHASE_COLOR = "200,200,200,0.2"
HIGHLIGHT_BLOCK_COLOR = "255,220,0,0.3"

# Mermaid class names may not contain "-".
STYLE_CLASSES: Dict[NodeType, str] = {
    NodeType.COORDINATOR: "coordinator",
    NodeType.STORAGE_NODE: "storageNode",
    NodeType.CLIENT: "client",
    NodeType.RACK: "rack",
    NodeType.SWITCH: "switch",
    NodeType.NOTE: "note",
    NodeType.STATE: "state",
    NodeType.EVENT: "event",
}

FLOW_CLASS_DEFS: Tuple[str, ...] = (
    "classDef highlight fill:#FFD700,stroke:#B8860B,stroke-width:4px",
    "classDef added fill:#90EE90,stroke:#228B22,stroke-width:3px",
    "classDef highlightEdge stroke:#FFD700,stroke-width:4px",
    "classDef addedEdge stroke:#228B22,stroke-width:3px,stroke-dasharray: 5 5",
    "classDef coordinator fill:#CFE8FF,stroke:#2B6CB0,stroke-width:2px",
    "classDef storageNode fill:#D1FAE5,stroke:#059669,stroke-width:2px",
    "classDef client fill:#E5E7EB,stroke:#4B5563,stroke-width:2px",
)


def _kind(edge: Edge) -> Optional[EdgeKind]:
    return EdgeKind.parse(edge.kind)


def node_shape(node: Node) -> Tuple[str, str]:
    return NODE_SHAPES.get(node.node_type, DEFAULT_SHAPE)


def node_icon(node: Node) -> str:
    return NODE_ICONS.get(node.node_type, "")


def sequence_rank(node: Node) -> int:
    """Position in SEQUENCE_TYPE_ORDER; untyped and unknown nodes rank first."""
    node_type = node.node_type
    if node_type in SEQUENCE_TYPE_ORDER:
        return SEQUENCE_TYPE_ORDER.index(node_type)
    return -1


def sequence_arrow(edge: Edge) -> str:
    return SEQUENCE_ARROWS.get(_kind(edge), DEFAULT_SEQUENCE_ARROW)


def flow_arrow(edge: Edge) -> str:
    return FLOW_ARROWS.get(_kind(edge), DEFAULT_FLOW_ARROW)


def kind_glyph(edge: Edge) -> str:
    return KIND_GLYPHS.get(_kind(edge), "")


def phase_color(phase: str) -> str:
    return PHASE_COLORS.get(phase, DEFAULT_PHASE_COLOR)


def style_class(node: Node) -> Optional[str]:
    node_type = node.node_type
    if node_type is not None:
        return STYLE_CLASSES[node_type]
    if node.type:
        return "".join(ch for ch in node.type if ch.isalnum() or ch == "_") or None
    return None


def metric_annotations(metrics: Optional[EdgeMetrics]) -> list[str]:
    if metrics is None:
        return []
    annotations = []
    if metrics.size:
        annotations.append(metrics.size)
    if metrics.latency:
        annotations.append(metrics.latency)
    if metrics.throughput:
        annotations.append(f"@{metrics.throughput}")
    if metrics.frequency:
        annotations.append(f"⏰{metrics.frequency}")
    if metrics.payload:
        annotations.append(f"📦{metrics.payload}")
    return annotations

"""Plain-text companions to the rendered diagram (screen reader text, tooltips)."""
from __future__ import annotations

from stepviz.spec.models import DiagramSpec, Edge

DEFAULT_SUBJECT = "distributed system architecture"


def describe_spec(spec: DiagramSpec) -> str:
    labels = ", ".join(n.display_label for n in spec.nodes)
    return (
        f"This diagram shows {len(spec.nodes)} components connected by {len(spec.edges)} relationships. "
        f"Components include {labels}. "
        f"The system demonstrates {spec.title or DEFAULT_SUBJECT}."
    )


def edge_tooltip(edge: Edge) -> str:
    """Multi-line details for an edge: label, kind, then every known metric."""
    details = [edge.label, f"Type: {edge.kind}" if edge.kind else None]
    metrics = edge.metrics
    if metrics is not None:
        details.extend(
            [
                metrics.size and f"Size: {metrics.size}",
                metrics.latency and f"Latency: {metrics.latency}",
                metrics.throughput and f"Throughput: {metrics.throughput}",
                metrics.frequency and f"Frequency: {metrics.frequency}",
                metrics.payload and f"Payload: {metrics.payload}",
                metrics.purpose and f"Purpose: {metrics.purpose}",
            ]
        )
    return "\n".join(d for d in details if d)

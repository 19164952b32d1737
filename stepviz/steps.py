"""Derive navigable presentation steps from a diagram spec."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from stepviz.composer import compose
from stepviz.spec.models import DiagramSpec, Edge, EdgeKind, LayoutType, StepType


class Step(BaseModel):
    type: StepType
    index: int
    caption: str
    spec: DiagramSpec
    focus: Optional[List[str]] = None
    edge_id: Optional[str] = None
    scene_id: Optional[str] = None
    overlays: List[str] = Field(default_factory=list)


STEP_VERBS: Dict[EdgeKind, str] = {
    EdgeKind.CONTROL: "requests",
    EdgeKind.DATA: "transfers",
    EdgeKind.CACHE: "caches",
    EdgeKind.HEARTBEAT: "heartbeats to",
}
DEFAULT_STEP_VERB = "sends to"

INITIAL_CAPTION = "Initial state - no operations yet"
FINAL_CAPTION = "Complete flow"


def generate_step_caption(edge: Edge, spec: DiagramSpec) -> str:
    """Describe one message of a sequence diagram in plain words."""
    from_node = spec.node(edge.from_)
    to_node = spec.node(edge.to)
    from_label = from_node.display_label if from_node else edge.from_
    to_label = to_node.display_label if to_node else edge.to

    kind = EdgeKind.parse(edge.kind)
    verb = STEP_VERBS.get(kind, DEFAULT_STEP_VERB) if kind else DEFAULT_STEP_VERB

    if edge.label:
        caption = f"{from_label}: {edge.label}"
    else:
        caption = f"{from_label} {verb} {to_label}"

    if edge.metrics:
        metrics = [m for m in (edge.metrics.size, edge.metrics.latency) if m]
        if metrics:
            caption += f" ({', '.join(metrics)})"
    return caption


def _without_edges(spec: DiagramSpec) -> DiagramSpec:
    return spec.model_copy(deep=True, update={"edges": []})


def _cumulative_edges(spec: DiagramSpec, upto: int, mark_current: bool) -> DiagramSpec:
    edges = []
    for i, edge in enumerate(spec.edges[: upto + 1]):
        newest = i == upto
        update: Dict[str, Any] = {"highlighted": newest}
        if mark_current:
            update["current"] = newest
        edges.append(edge.model_copy(deep=True, update=update))
    return spec.model_copy(deep=True, update={"edges": edges})


def build_steps(spec: DiagramSpec) -> List[Step]:
    """Build the ordered list of steps for ``spec``.

    Rules stack in this order: an initial empty step for sequence and flow
    layouts, one step per edge for sequence layouts, one step per scene when
    ``spec`` has scenes (any layout), an initial state plus one step per
    transition for state layouts, and finally a step holding the untouched
    spec when anything was produced.
    """
    steps: List[Step] = []
    layout = spec.layout_type

    if layout in (LayoutType.SEQUENCE, LayoutType.FLOW):
        steps.append(Step(type=StepType.INITIAL, index=-1, caption=INITIAL_CAPTION, spec=_without_edges(spec)))

    if layout is LayoutType.SEQUENCE:
        for i, edge in enumerate(spec.edges):
            steps.append(
                Step(
                    type=StepType.EDGE,
                    index=i,
                    edge_id=edge.id,
                    caption=generate_step_caption(edge, spec),
                    focus=[edge.from_, edge.to],
                    spec=_cumulative_edges(spec, i, mark_current=True),
                )
            )

    for i, scene in enumerate(spec.scenes):
        steps.append(
            Step(
                type=StepType.SCENE,
                index=i,
                scene_id=scene.id,
                caption=scene.narrative or scene.name or scene.id,
                overlays=list(scene.overlays),
                spec=compose(spec, scene.overlays),
            )
        )

    if layout is LayoutType.STATE:
        steps.append(Step(type=StepType.STATE, index=0, caption="Initial state", spec=_without_edges(spec)))
        for i, edge in enumerate(spec.edges):
            label = edge.label or f"{edge.from_} → {edge.to}"
            steps.append(
                Step(
                    type=StepType.TRANSITION,
                    index=i + 1,
                    edge_id=edge.id,
                    caption=f"Transition: {label}",
                    spec=_cumulative_edges(spec, i, mark_current=False),
                )
            )

    if steps:
        steps.append(Step(type=StepType.FINAL, index=len(steps), caption=FINAL_CAPTION, spec=spec.model_copy(deep=True)))

    return steps


def export_steps(steps: List[Step], current: int = 0) -> List[Dict[str, Any]]:
    """Summaries of ``steps`` suitable for a step list widget."""
    return [
        {
            "index": i,
            "type": step.type.value,
            "caption": step.caption,
            "is_current": i == current,
        }
        for i, step in enumerate(steps)
    ]

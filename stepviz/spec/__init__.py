"""Diagram spec data model, loading and semantic validation."""

from stepviz.spec.loader import SpecLoadError, load_spec, parse_spec
from stepviz.spec.models import (
    DiagramSpec,
    Edge,
    EdgeKind,
    EdgeMetrics,
    LayoutType,
    Node,
    NodeType,
    Overlay,
    OverlayDiff,
    Scene,
    SpecDiff,
    StepType,
)
from stepviz.spec.validator import SpecValidationError, check_materialized, validate_spec

__all__ = [
    "DiagramSpec",
    "Edge",
    "EdgeKind",
    "EdgeMetrics",
    "LayoutType",
    "Node",
    "NodeType",
    "Overlay",
    "OverlayDiff",
    "Scene",
    "SpecDiff",
    "SpecLoadError",
    "SpecValidationError",
    "StepType",
    "check_materialized",
    "load_spec",
    "parse_spec",
    "validate_spec",
]

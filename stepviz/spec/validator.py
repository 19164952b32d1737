"""Semantic checks for diagram specs.

Structural problems are caught by the loader; these rules catch specs that
load fine but describe something the presentation cannot show correctly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List

from stepviz.spec.models import DiagramSpec, EdgeKind, NodeType

logger = logging.getLogger(__name__)


@dataclass
class RuleResult:
    rule: str
    errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


class SpecValidationError(ValueError):
    """Raised when one or more semantic rules fail."""

    def __init__(self, rule: str, errors: List[str]):
        super().__init__(f"Validation failed for {rule}: {', '.join(errors)}")
        self.rule = rule
        self.errors = errors


def coordinator_not_on_data_path(spec: DiagramSpec) -> RuleResult:
    coordinators = {n.id for n in spec.nodes if n.node_type is NodeType.COORDINATOR}
    return RuleResult(
        "CoordinatorNotOnDataPath",
        [
            f"Data edge {e.id} touches coordinator"
            for e in spec.edges
            if EdgeKind.parse(e.kind) is EdgeKind.DATA and (e.from_ in coordinators or e.to in coordinators)
        ],
    )


def version_non_negative(spec: DiagramSpec) -> RuleResult:
    errors = []
    for node in spec.nodes:
        version = node.metadata.get("version")
        if isinstance(version, (int, float)) and version < 0:
            errors.append(f"Node {node.id} has negative version {version}")
    return RuleResult("VersionMonotonicity", errors)


def edge_endpoints_exist(spec: DiagramSpec) -> RuleResult:
    node_ids = {n.id for n in spec.nodes}
    errors = []
    for edge in spec.edges:
        for end in (edge.from_, edge.to):
            if end not in node_ids:
                errors.append(f"Edge {edge.id} references missing node {end}")
    return RuleResult("EdgeEndpoints", errors)


def unique_ids(spec: DiagramSpec) -> RuleResult:
    errors = []
    for kind, ids in (("node", [n.id for n in spec.nodes]), ("edge", [e.id for e in spec.edges])):
        seen = set()
        for element_id in ids:
            if element_id in seen:
                errors.append(f"Duplicate {kind} id {element_id}")
            seen.add(element_id)
    return RuleResult("UniqueIds", errors)


def overlay_references(spec: DiagramSpec) -> RuleResult:
    node_ids = {n.id for n in spec.nodes}
    edge_ids = {e.id for e in spec.edges}
    errors = []
    for overlay in spec.overlays:
        diff = overlay.diff
        checks = []
        if diff.remove:
            checks += [("removes", "node", i, node_ids) for i in diff.remove.node_ids]
            checks += [("removes", "edge", i, edge_ids) for i in diff.remove.edge_ids]
        if diff.highlight:
            checks += [("highlights", "node", i, node_ids) for i in diff.highlight.node_ids]
            checks += [("highlights", "edge", i, edge_ids) for i in diff.highlight.edge_ids]
        if diff.modify:
            checks += [("modifies", "node", p["id"], node_ids) for p in diff.modify.nodes]
            checks += [("modifies", "edge", p["id"], edge_ids) for p in diff.modify.edges]
        for verb, kind, element_id, known in checks:
            if element_id not in known:
                errors.append(f"Overlay {overlay.id} {verb} non-existent {kind} {element_id}")
    overlay_ids = {o.id for o in spec.overlays}
    for scene in spec.scenes:
        errors += [f"Scene {scene.id} references unknown overlay {o}" for o in scene.overlays if o not in overlay_ids]
    return RuleResult("OverlayReferences", errors)


SEMANTIC_RULES: List[Callable[[DiagramSpec], RuleResult]] = [
    unique_ids,
    edge_endpoints_exist,
    coordinator_not_on_data_path,
    version_non_negative,
    overlay_references,
]


def run_rules(spec: DiagramSpec, rules: List[Callable[[DiagramSpec], RuleResult]] | None = None) -> List[RuleResult]:
    return [rule(spec) for rule in (rules or SEMANTIC_RULES)]


def validate_spec(spec: DiagramSpec) -> bool:
    """Run every semantic rule; raise SpecValidationError listing all failures."""
    errors: List[str] = []
    for result in run_rules(spec):
        if not result.valid:
            logger.debug("Rule %s failed for spec %s: %s", result.rule, spec.id, result.errors)
            errors.extend(result.errors)
    if errors:
        raise SpecValidationError("Semantic", errors)
    return True


def check_materialized(spec: DiagramSpec) -> bool:
    """Precondition for rendering a composed spec: unique ids, edges hit real nodes."""
    errors: List[str] = []
    for result in (unique_ids(spec), edge_endpoints_exist(spec)):
        errors.extend(result.errors)
    if errors:
        raise SpecValidationError("Materialized", errors)
    return True

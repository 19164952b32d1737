"""Translators from materialized specs to renderer input text.

No rendering happens here; output is plain text for the renderer layer.
"""

from stepviz.translation.describe import describe_spec, edge_tooltip
from stepviz.translation.mermaid import generate_mermaid, sanitize_flow_label

__all__ = ["describe_spec", "edge_tooltip", "generate_mermaid", "sanitize_flow_label"]

"""stepviz: stepped diagram presentations from declarative specs.

Components:
- composer: overlay diff algebra (remove -> add -> highlight -> modify)
- steps: derive navigable steps from a spec
- translation: spec -> Mermaid text, one strategy per layout
- renderers: external Mermaid renderers behind a bounded render cache
- navigator: step cursor with autoplay
"""

from stepviz.composer import calculate_diff, compose, merge_scenes
from stepviz.navigator import StepChange, StepNavigator
from stepviz.renderers.cache import RenderCache, RenderResult
from stepviz.spec.loader import load_spec, parse_spec
from stepviz.spec.models import DiagramSpec
from stepviz.steps import Step, build_steps
from stepviz.translation.mermaid import generate_mermaid

__all__ = [
    "DiagramSpec",
    "RenderCache",
    "RenderResult",
    "Step",
    "StepChange",
    "StepNavigator",
    "build_steps",
    "calculate_diff",
    "compose",
    "generate_mermaid",
    "load_spec",
    "merge_scenes",
    "parse_spec",
]

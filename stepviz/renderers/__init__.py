"""External Mermaid renderers and the render cache that guards them."""

from stepviz.renderers.base import DiagramRenderer, RenderError
from stepviz.renderers.cache import RenderCache, RenderResult, content_fingerprint, weak_fingerprint
from stepviz.renderers.router import build_renderer

__all__ = [
    "DiagramRenderer",
    "RenderCache",
    "RenderError",
    "RenderResult",
    "build_renderer",
    "content_fingerprint",
    "weak_fingerprint",
]

"""Renderer router: choose the Mermaid backend from settings."""
from __future__ import annotations

from typing import Callable, Dict, Optional

from stepviz.renderers.base import DiagramRenderer
from stepviz.renderers.fake_renderers import FakeMermaidRenderer
from stepviz.renderers.mermaid_renderer import DockerMermaidRenderer, HttpMermaidRenderer
from stepviz.utils.config import settings

RENDERERS: Dict[str, Callable[[], DiagramRenderer]] = {
    "fake": FakeMermaidRenderer,
    "docker": DockerMermaidRenderer,
    "http": HttpMermaidRenderer,
}


def build_renderer(name: Optional[str] = None) -> DiagramRenderer:
    choice = (name or settings.renderer).strip().lower()
    try:
        factory = RENDERERS[choice]
    except KeyError:
        raise ValueError(f"Unknown renderer '{choice}' (expected one of {', '.join(sorted(RENDERERS))})") from None
    return factory()

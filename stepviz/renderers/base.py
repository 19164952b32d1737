"""Contract for external Mermaid renderers."""
from __future__ import annotations

from typing import Protocol, runtime_checkable


class RenderError(RuntimeError):
    """Raised by a renderer when the description text could not be rendered."""

    def __init__(self, message: str, *, renderer: str = "", target: str = ""):
        super().__init__(message)
        self.renderer = renderer
        self.target = target


@runtime_checkable
class DiagramRenderer(Protocol):
    """Turns description text into a visual artifact (SVG text).

    ``target`` identifies where the artifact will be shown; renderers may use
    it to namespace element ids.
    """

    name: str

    async def render(self, text: str, target: str) -> str:
        ...

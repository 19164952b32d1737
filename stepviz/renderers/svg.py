"""SVG post-processing for renderer outputs."""
from __future__ import annotations

import re
from xml.etree import ElementTree as ET

from stepviz.renderers.base import RenderError

_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_XML_DECL = re.compile(r"^\s*<\?xml[^>]*\?>\s*")


def _strip_ns(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def normalize_svg(svg_text: str) -> str:
    """Drop the XML declaration and comments so equal diagrams store equal text."""
    text = _XML_DECL.sub("", svg_text or "")
    text = _COMMENT.sub("", text)
    return text.strip()


def validate_svg(svg_text: str) -> None:
    try:
        root = ET.fromstring(svg_text)
    except ET.ParseError as exc:
        raise RenderError(f"Renderer returned invalid SVG: {exc}") from exc
    if _strip_ns(root.tag) != "svg":
        raise RenderError(f"Renderer returned <{_strip_ns(root.tag)}> instead of <svg>")


def error_artifact(message: str) -> str:
    """Inline placeholder shown in place of a diagram that failed to render."""
    safe = message.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    return f'<div class="error">Failed to render diagram: {safe}</div>'

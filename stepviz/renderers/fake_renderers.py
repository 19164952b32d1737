"""In-process renderer that draws simple SVG without a Mermaid engine.

Good enough for offline use and tests: sequence diagrams get lifelines and
arrows, every other diagram kind is embedded as text lines.
"""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Dict, List

from stepviz.renderers.base import RenderError

_PARTICIPANT = re.compile(r"^participant\s+(?P<id>\S+)(?:\s+as\s+(?P<label>.+))?$")
_MESSAGE = re.compile(r"^(?P<src>\S+?)\s*(?P<arrow>-->>|->>|-\)|-->|->)\s*(?P<tgt>[^:\s]+)\s*:\s*(?P<label>.*)$")
_SKIP_KEYWORDS = {"autonumber", "rect", "end", "note"}


def _svg_root(width: int, height: int, target: str) -> ET.Element:
    return ET.Element(
        "svg",
        xmlns="http://www.w3.org/2000/svg",
        version="1.1",
        width=str(width),
        height=str(height),
        id=f"{target}-svg",
    )


def _text_svg(lines: List[str], target: str) -> str:
    root = _svg_root(600, 20 * len(lines) + 20, target)
    g = ET.SubElement(root, "g", id=f"{target}-text")
    for i, line in enumerate(lines):
        t = ET.SubElement(g, "text", x="10", y=str(20 * (i + 1)))
        t.text = line[:200]
    return ET.tostring(root, encoding="unicode")


def _sequence_svg(lines: List[str], target: str) -> str:
    participants: Dict[str, str] = {}
    events = []
    for line in lines[1:]:
        if line.split()[0].lower() in _SKIP_KEYWORDS:
            continue
        m = _PARTICIPANT.match(line)
        if m:
            participants[m.group("id")] = (m.group("label") or m.group("id")).strip()
            continue
        m = _MESSAGE.match(line)
        if m:
            for pid in (m.group("src"), m.group("tgt")):
                participants.setdefault(pid, pid)
            events.append(m.groupdict())

    width = 600
    margin = 40
    count = max(1, len(participants))
    step_x = (width - 2 * margin) / (count - 1) if count > 1 else 0
    lifeline_top = 40
    event_spacing = 40
    height = lifeline_top + event_spacing * (len(events) + 1) + 20

    root = _svg_root(width, height, target)
    xs: Dict[str, float] = {}
    for i, (pid, label) in enumerate(participants.items()):
        x = margin + i * step_x if count > 1 else width / 2
        xs[pid] = x
        g = ET.SubElement(root, "g", id=f"{target}-participant-{pid}")
        ET.SubElement(g, "rect", x=str(x - 30), y="5", width="60", height="24", rx="6")
        t = ET.SubElement(g, "text", x=str(x), y="22", **{"text-anchor": "middle"})
        t.text = label
        ET.SubElement(g, "line", x1=str(x), y1=str(lifeline_top), x2=str(x), y2=str(height - 10), **{"stroke-dasharray": "4 4"})

    y = lifeline_top + event_spacing
    for i, ev in enumerate(events):
        g = ET.SubElement(root, "g", id=f"{target}-message-{i}")
        sx, tx = xs[ev["src"]], xs[ev["tgt"]]
        ET.SubElement(g, "line", x1=str(sx), y1=str(y), x2=str(tx), y2=str(y))
        if ev["label"]:
            t = ET.SubElement(g, "text", x=str((sx + tx) / 2), y=str(y - 6), **{"text-anchor": "middle"})
            t.text = ev["label"]
        y += event_spacing

    return ET.tostring(root, encoding="unicode")


class FakeMermaidRenderer:
    name = "fake"

    async def render(self, text: str, target: str) -> str:
        lines = [l.strip() for l in (text or "").splitlines() if l.strip()]
        if not lines:
            raise RenderError("Mermaid text is empty", renderer=self.name, target=target)
        if lines[0].startswith("sequenceDiagram"):
            return _sequence_svg(lines, target)
        return _text_svg(lines, target)

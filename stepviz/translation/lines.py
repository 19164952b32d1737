"""Structured line builder for diagram description text."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List


class LineBuilder:
    """Collects indented lines and keeps block openers paired with ``end``.

    Every Mermaid grammar we emit closes blocks (``rect``, ``subgraph``) with a
    bare ``end`` at the opener's indentation, so blocks are opened through
    :meth:`block` rather than by pushing strings by hand.
    """

    def __init__(self, header: str, indent: str = "  ") -> None:
        self._lines: List[str] = [header]
        self._indent = indent
        self._depth = 1

    def line(self, text: str = "") -> "LineBuilder":
        self._lines.append(f"{self._indent * self._depth}{text}" if text else "")
        return self

    @contextmanager
    def block(self, opener: str, closer: str = "end", *, enabled: bool = True, nest: bool = False) -> Iterator["LineBuilder"]:
        """Wrap the lines emitted inside the ``with`` body in opener/closer.

        ``nest`` indents the body one extra level. A disabled block emits its
        body unwrapped, which keeps call sites free of duplicated branches.
        """
        if not enabled:
            yield self
            return
        self.line(opener)
        if nest:
            self._depth += 1
        try:
            yield self
        finally:
            if nest:
                self._depth -= 1
            self.line(closer)

    def render(self) -> str:
        return "\n".join(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

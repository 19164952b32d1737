"""Bounded, fingerprint-keyed cache in front of the external renderer."""
from __future__ import annotations

import asyncio
import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from stepviz.renderers.base import DiagramRenderer
from stepviz.renderers.svg import error_artifact, normalize_svg, validate_svg
from stepviz.spec.models import DiagramSpec
from stepviz.translation.mermaid import generate_mermaid
from stepviz.utils.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    ok: bool
    artifact: str
    fingerprint: str
    cached: bool = False
    error: Optional[str] = None

    @property
    def svg(self) -> Optional[str]:
        return self.artifact if self.ok else None


def weak_fingerprint(spec: DiagramSpec) -> str:
    """Cache key from id, node count, edge count and layout type.

    Two different specs that agree on all four collide, e.g. two scenes that
    only differ in which elements are highlighted.
    """
    return f"{spec.id or 'unknown'}-{len(spec.nodes)}-{len(spec.edges)}-{spec.layout.type or 'flow'}"


def content_fingerprint(spec: DiagramSpec) -> str:
    payload = json.dumps(spec.to_dict(), sort_keys=True, ensure_ascii=False, default=str)
    return f"{spec.id or 'unknown'}-{hashlib.sha256(payload.encode('utf-8')).hexdigest()[:16]}"


FINGERPRINTS: Dict[str, Callable[[DiagramSpec], str]] = {
    "weak": weak_fingerprint,
    "content": content_fingerprint,
}


class RenderCache:
    """Caches rendered artifacts, evicting the oldest insertion first.

    Access does not refresh an entry's position. Concurrent misses on one
    fingerprint share a single renderer call.
    """

    def __init__(
        self,
        renderer: DiagramRenderer,
        *,
        max_entries: Optional[int] = None,
        fingerprint_mode: Optional[str] = None,
        generator: Callable[[DiagramSpec], str] = generate_mermaid,
    ) -> None:
        mode = fingerprint_mode or settings.cache_fingerprint
        if mode not in FINGERPRINTS:
            raise ValueError(f"Unknown fingerprint mode '{mode}'")
        self.renderer = renderer
        self.max_entries = max_entries if max_entries is not None else settings.cache_max_entries
        self.fingerprint_mode = mode
        self._fingerprint = FINGERPRINTS[mode]
        self._generate = generator
        self._entries: Dict[str, str] = {}
        self._inflight: Dict[str, asyncio.Task] = {}

    def fingerprint(self, spec: DiagramSpec) -> str:
        return self._fingerprint(spec)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self._entries

    def keys(self) -> List[str]:
        return list(self._entries)

    def get(self, fingerprint: str) -> Optional[str]:
        return self._entries.get(fingerprint)

    def clear(self) -> None:
        self._entries.clear()

    def _store(self, fingerprint: str, artifact: str) -> None:
        self._entries[fingerprint] = artifact
        while len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("Evicted %s from render cache", oldest)

    async def get_or_render(self, spec: DiagramSpec, target: Optional[str] = None) -> Optional[RenderResult]:
        """Return the artifact for ``spec``, rendering it on a miss.

        Returns None when no render target is given. Renderer failures never
        propagate: the result carries an inline error artifact instead and
        the cache is left untouched.
        """
        target = settings.default_target if target is None else target
        if not target:
            logger.error("No render target given for spec %s; skipping render", spec.id)
            return None

        key = self.fingerprint(spec)
        artifact = self._entries.get(key)
        if artifact is not None:
            return RenderResult(ok=True, artifact=artifact, fingerprint=key, cached=True)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._render_miss(spec, key, target))
            self._inflight[key] = task
            task.add_done_callback(lambda _t, k=key: self._inflight.pop(k, None))
        return await asyncio.shield(task)

    async def _render_miss(self, spec: DiagramSpec, key: str, target: str) -> RenderResult:
        text = self._generate(spec)
        try:
            artifact = normalize_svg(await self.renderer.render(text, target))
            validate_svg(artifact)
        except Exception as exc:
            logger.error("Failed to render diagram %s into %s: %s", spec.id, target, exc)
            return RenderResult(ok=False, artifact=error_artifact(str(exc)), fingerprint=key, error=str(exc))
        self._store(key, artifact)
        return RenderResult(ok=True, artifact=artifact, fingerprint=key)

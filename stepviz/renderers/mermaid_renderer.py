"""Mermaid renderers backed by mermaid-cli (docker) or a Kroki-style HTTP server."""
from __future__ import annotations

import asyncio
import subprocess
import tempfile
from pathlib import Path

import httpx

from stepviz.renderers.base import RenderError
from stepviz.renderers.docker_client import run_docker_renderer
from stepviz.utils.config import settings


def _render_with_docker(image: str, mermaid_text: str, timeout: float) -> str:
    with tempfile.TemporaryDirectory() as tmp_dir:
        workdir = Path(tmp_dir)
        input_path = workdir / "input.mmd"
        output_path = workdir / "output.svg"
        input_path.write_text(mermaid_text, encoding="utf-8")
        run_docker_renderer(image, workdir, ["-i", "input.mmd", "-o", "output.svg"], timeout=timeout)
        if not output_path.exists():
            raise RenderError("mermaid-cli produced no output", renderer="docker")
        return output_path.read_text(encoding="utf-8")


class DockerMermaidRenderer:
    """Runs the mermaid-cli image in a worker thread."""

    name = "docker"

    def __init__(self, image: str | None = None, timeout: float | None = None) -> None:
        self.image = image or settings.mermaid_renderer_image
        self.timeout = timeout or settings.render_timeout

    async def render(self, text: str, target: str) -> str:
        try:
            return await asyncio.to_thread(_render_with_docker, self.image, text, self.timeout)
        except (OSError, subprocess.SubprocessError) as exc:
            raise RenderError(f"mermaid-cli failed: {exc}", renderer=self.name, target=target) from exc


class HttpMermaidRenderer:
    """POSTs Mermaid text to a Kroki-compatible endpoint and returns the SVG body."""

    name = "http"

    def __init__(self, url: str | None = None, timeout: float | None = None, client: httpx.AsyncClient | None = None) -> None:
        self.url = url or settings.mermaid_server_url
        self._client = client or httpx.AsyncClient(timeout=timeout or settings.render_timeout)

    async def render(self, text: str, target: str) -> str:
        headers = {"Content-Type": "text/plain; charset=utf-8", "Accept": "image/svg+xml"}
        try:
            response = await self._client.post(self.url, content=text.encode("utf-8"), headers=headers)
        except httpx.HTTPError as exc:
            raise RenderError(f"Mermaid server unreachable: {exc}", renderer=self.name, target=target) from exc
        if response.status_code >= 400:
            snippet = (response.text or "").strip()
            if len(snippet) > 300:
                snippet = snippet[:300] + "..."
            raise RenderError(
                f"Mermaid server failed ({response.status_code}): {snippet}",
                renderer=self.name,
                target=target,
            )
        return response.text

    async def aclose(self) -> None:
        await self._client.aclose()

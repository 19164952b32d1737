"""CLI interface."""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from stepviz.composer import calculate_diff, compose, merge_scenes, scene_overlay_ids
from stepviz.navigator import StepNavigator
from stepviz.renderers.cache import RenderCache
from stepviz.renderers.router import build_renderer
from stepviz.spec.loader import SpecLoadError, load_spec
from stepviz.spec.models import DiagramSpec
from stepviz.spec.validator import SpecValidationError, validate_spec
from stepviz.steps import build_steps, export_steps
from stepviz.translation.mermaid import generate_mermaid
from stepviz.utils.config import settings
from stepviz.utils.file_utils import ensure_dir, safe_file_stem, write_text_file

app = typer.Typer(add_completion=False, help="Render stepped diagram presentations from JSON specs.")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level.")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(path: Path) -> DiagramSpec:
    try:
        return load_spec(path)
    except (SpecLoadError, FileNotFoundError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=2)


@app.command()
def generate(
    spec_path: Path = typer.Argument(..., help="Path to a spec JSON file."),
    overlay: List[str] = typer.Option(None, "--overlay", "-o", help="Overlay id to apply (repeatable)."),
    scene: List[str] = typer.Option(None, "--scene", "-s", help="Scene id to apply (repeatable)."),
    step: Optional[int] = typer.Option(None, "--step", help="Print the Mermaid text of one step instead."),
):
    """Print Mermaid text for a spec, optionally with overlays, scenes or a single step."""
    spec = _load(spec_path)
    if step is not None:
        steps = build_steps(spec)
        if not 0 <= step < len(steps):
            raise typer.BadParameter(f"step must be between 0 and {len(steps) - 1}", param_hint="--step")
        materialized = steps[step].spec
    else:
        overlay_ids = scene_overlay_ids(spec, scene or []) + list(overlay or [])
        materialized = compose(spec, list(dict.fromkeys(overlay_ids))) if overlay_ids else spec
    typer.echo(generate_mermaid(materialized))


@app.command()
def steps(spec_path: Path = typer.Argument(..., help="Path to a spec JSON file.")):
    """List the presentation steps derived from a spec."""
    spec = _load(spec_path)
    typer.echo(json.dumps(export_steps(build_steps(spec)), indent=2, ensure_ascii=False))


@app.command()
def validate(spec_path: Path = typer.Argument(..., help="Path to a spec JSON file.")):
    """Run the semantic checks on a spec."""
    spec = _load(spec_path)
    try:
        validate_spec(spec)
    except SpecValidationError as exc:
        for error in exc.errors:
            typer.echo(f"- {error}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{spec.id}: ok")


@app.command()
def diff(
    spec_path: Path = typer.Argument(..., help="Path to a spec JSON file."),
    before: str = typer.Argument(..., help="Scene id for the starting state."),
    after: str = typer.Argument(..., help="Scene id for the end state."),
):
    """Show what changes between two scenes."""
    spec = _load(spec_path)
    result = calculate_diff(merge_scenes(spec, [before]), merge_scenes(spec, [after]))
    typer.echo(json.dumps(result.model_dump(by_alias=True, exclude_defaults=True), indent=2, ensure_ascii=False))


async def _render_all(spec: DiagramSpec, cache: RenderCache, out_dir: Path) -> List[dict]:
    navigator = StepNavigator(cache)
    navigator.load(spec)
    rendered = []
    for index, step in enumerate(navigator.steps):
        result = await navigator.go_to_step(index)
        base = out_dir / f"{safe_file_stem(spec.id or 'diagram')}-{index:02d}-{step.type.value}"
        write_text_file(base.with_suffix(".mmd"), generate_mermaid(step.spec))
        if result is not None and result.ok:
            write_text_file(base.with_suffix(".svg"), result.artifact)
        rendered.append(
            {
                "index": index,
                "caption": step.caption,
                "ok": bool(result and result.ok),
                "cached": bool(result and result.cached),
                "error": result.error if result else "no render target",
            }
        )
    return rendered


@app.command()
def render(
    spec_path: Path = typer.Argument(..., help="Path to a spec JSON file."),
    renderer: Optional[str] = typer.Option(None, "--renderer", "-r", help="fake, docker or http."),
    fingerprint: Optional[str] = typer.Option(None, "--fingerprint", help="Cache key mode: weak or content."),
    output_dir: Optional[str] = typer.Option(None, "--output-dir"),
):
    """Render every step of a spec to SVG files."""
    spec = _load(spec_path)
    try:
        cache = RenderCache(build_renderer(renderer), fingerprint_mode=fingerprint)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    out_dir = ensure_dir(output_dir or settings.output_dir)
    summary = asyncio.run(_render_all(spec, cache, out_dir))
    typer.echo(json.dumps(summary, indent=2, ensure_ascii=False))
    if not all(item["ok"] for item in summary):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

"""Cursor over a spec's steps, with autoplay and render wiring.

Everything here runs on one asyncio loop. The only suspension points are the
renderer call behind the cache and the autoplay sleep, so no locking is
needed; a render that finishes after the user has already moved on is
dropped instead of being published.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from stepviz.composer import compose
from stepviz.renderers.cache import RenderCache, RenderResult
from stepviz.spec.models import DiagramSpec
from stepviz.steps import Step, build_steps, export_steps
from stepviz.utils.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepChange:
    step: Step
    index: int
    total: int
    result: Optional[RenderResult] = None

    @property
    def is_first(self) -> bool:
        return self.index == 0

    @property
    def is_last(self) -> bool:
        return self.index == self.total - 1


StepListener = Callable[[StepChange], None]


def _running_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class StepNavigator:
    def __init__(
        self,
        cache: Optional[RenderCache] = None,
        *,
        target: Optional[str] = None,
        play_speed: Optional[int] = None,
    ) -> None:
        self.cache = cache
        self.target = settings.default_target if target is None else target
        self.play_speed = play_speed or settings.autoplay_interval_ms
        self.spec: Optional[DiagramSpec] = None
        self.steps: List[Step] = []
        self.is_playing = False
        self.last_result: Optional[RenderResult] = None
        self._current = 0
        self._play_task: Optional[asyncio.Task] = None
        self._listeners: List[StepListener] = []
        self._generation = 0
        self._active_overlays: List[str] = []

    # -- loading -----------------------------------------------------------

    def load(self, spec: DiagramSpec) -> List[Step]:
        """Make ``spec`` the active presentation and rewind to its first step."""
        self.stop_auto_play()
        self.spec = spec
        self.steps = build_steps(spec)
        self._current = 0
        self._generation += 1
        self._active_overlays = []
        self.last_result = None
        return self.steps

    def destroy(self) -> None:
        self.stop_auto_play()
        self.steps = []
        self.spec = None
        self._current = 0
        self._listeners.clear()
        self._active_overlays = []

    # -- accessors ---------------------------------------------------------

    @property
    def current_index(self) -> int:
        return self._current

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def current_step(self) -> Optional[Step]:
        if 0 <= self._current < len(self.steps):
            return self.steps[self._current]
        return None

    @property
    def current_spec(self) -> Optional[DiagramSpec]:
        """Materialized spec for the current step (the loaded spec if it has no steps)."""
        step = self.current_step
        return step.spec if step is not None else self.spec

    @property
    def play_task(self) -> Optional[asyncio.Task]:
        return self._play_task

    def export_steps(self) -> List[Dict[str, Any]]:
        return export_steps(self.steps, self._current)

    def clear_cache(self) -> None:
        if self.cache is not None:
            self.cache.clear()

    def on_step_change(self, listener: StepListener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unregisters it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    # -- overlays ----------------------------------------------------------

    @property
    def active_overlays(self) -> List[str]:
        return list(self._active_overlays)

    def toggle_overlay(self, overlay_id: str) -> bool:
        """Flip one overlay on or off; returns whether it is now active."""
        if overlay_id in self._active_overlays:
            self._active_overlays.remove(overlay_id)
            return False
        self._active_overlays.append(overlay_id)
        return True

    def clear_overlays(self) -> None:
        self._active_overlays = []

    def apply_scene(self, scene_id: str) -> List[str]:
        """Replace the active overlays with those of ``scene_id``."""
        scene = self.spec.scene(scene_id) if self.spec is not None else None
        if scene is None:
            logger.warning("Scene %s not found; active overlays unchanged", scene_id)
            return self.active_overlays
        self._active_overlays = list(dict.fromkeys(scene.overlays))
        return self.active_overlays

    def overlay_spec(self) -> Optional[DiagramSpec]:
        if self.spec is None:
            return None
        return compose(self.spec, self._active_overlays)

    async def render_overlays(self) -> Optional[RenderResult]:
        spec = self.overlay_spec()
        if spec is None or self.cache is None:
            return None
        self._generation += 1
        generation = self._generation
        result = await self.cache.get_or_render(spec, self.target)
        if generation != self._generation:
            logger.debug("Discarding stale overlay render for %s", spec.id)
            return None
        self.last_result = result
        return result

    # -- navigation --------------------------------------------------------

    def _emit(self, change: StepChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("Step listener failed for step %d", change.index)

    async def render_step(self, index: int) -> Optional[RenderResult]:
        if index < 0 or index >= len(self.steps):
            return None
        self._current = index
        step = self.steps[index]
        self._generation += 1
        generation = self._generation

        result = None
        if self.cache is not None:
            result = await self.cache.get_or_render(step.spec, self.target)
            if generation != self._generation:
                logger.debug("Discarding stale render for step %d", index)
                return None
            self.last_result = result

        self._emit(StepChange(step=step, index=index, total=len(self.steps), result=result))
        return result

    async def next(self) -> Optional[RenderResult]:
        if self._current < len(self.steps) - 1:
            return await self.render_step(self._current + 1)
        if self.is_playing:
            self.stop_auto_play()
        return None

    async def prev(self) -> Optional[RenderResult]:
        if self._current > 0:
            return await self.render_step(self._current - 1)
        return None

    async def go_to_step(self, index: int) -> Optional[RenderResult]:
        return await self.render_step(index)

    async def first(self) -> Optional[RenderResult]:
        return await self.render_step(0)

    async def last(self) -> Optional[RenderResult]:
        return await self.render_step(len(self.steps) - 1)

    async def reset(self) -> Optional[RenderResult]:
        self.stop_auto_play()
        self._current = 0
        return await self.render_step(0)

    # -- autoplay ----------------------------------------------------------

    def toggle_auto_play(self) -> bool:
        if self.is_playing:
            self.stop_auto_play()
        else:
            self.start_auto_play()
        return self.is_playing

    def start_auto_play(self) -> None:
        """Advance one step every ``play_speed`` ms; needs a running event loop."""
        if not self.steps:
            return
        loop = asyncio.get_running_loop()
        rewind = self._current >= len(self.steps) - 1
        self.stop_auto_play()
        self.is_playing = True
        self._play_task = loop.create_task(self._play_loop(rewind))

    def stop_auto_play(self) -> None:
        self.is_playing = False
        task, self._play_task = self._play_task, None
        if task is not None and not task.done() and task is not _running_task():
            task.cancel()

    def set_play_speed(self, milliseconds: int) -> None:
        if milliseconds <= 0:
            raise ValueError("play speed must be positive")
        self.play_speed = milliseconds
        if self.is_playing:
            self.stop_auto_play()
            self.start_auto_play()

    async def _play_loop(self, rewind: bool) -> None:
        if rewind:
            await self.render_step(0)
        while self._current < len(self.steps) - 1:
            await asyncio.sleep(self.play_speed / 1000)
            await self.next()
        if self._play_task is _running_task():
            self.stop_auto_play()

"""Core engine lifecycle & orchestration.

Two phases:

- ``initialize()`` builds the scene (and the window, unless headless), seals
  it, starts any asset loads, and returns a ``Ready`` handle.
- ``run()`` drives the frame loop until ``stop()`` is called, the window is
  closed, or ``max_ticks`` frames have run. It refuses to start before
  ``initialize()`` completed.

``shutdown()`` tears everything down explicitly. Headless mode feeds a
fixed frame delta instead of a wall clock, which is what the tests use.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import pygame

from config import FIXED_TIMESTEP, HEIGHT, WIDTH
from core.frame_loop import FrameLoop
from core.input import InputRouter
from core.loop_config import LoopConfig
from core.scene import SceneState
from world.assets import AssetLoader, LoadedModel
from world.nightscene import NightScene, build_night_scene

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ready:
    state: SceneState
    loop: FrameLoop
    scene: NightScene


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
class Engine:
    def __init__(
        self,
        config: Optional[LoopConfig] = None,
        *,
        headless: bool = False,
        width: int = WIDTH,
        height: int = HEIGHT,
        frame_dt: float = FIXED_TIMESTEP,
    ) -> None:
        self.config = (config or LoopConfig()).validate()
        self.headless = headless
        self.width = width
        self.height = height
        self.frame_dt = float(frame_dt)
        self.display = None
        self.renderer = None
        self.input: Optional[InputRouter] = None
        self.assets: Optional[AssetLoader] = None
        self.ready: Optional[Ready] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    def initialize(self) -> Ready:
        if self.ready is not None:
            return self.ready
        if not self.headless:  # pragma: no cover - visual
            # GL context must exist before the renderer touches OpenGL
            from core.display import Display
            from core.renderer import Renderer

            self.display = Display(self.width, self.height)
            self.renderer = Renderer(self.width, self.height)

        scene = build_night_scene(self.config, width=self.width, height=self.height)
        loop = FrameLoop(
            scene.state,
            stepper=scene.stepper,
            animator=scene.animator,
            picker=scene.picker,
            render_fn=self.renderer.render if self.renderer is not None else None,
        )
        self.input = InputRouter(
            scene.state,
            width=self.width,
            height=self.height,
            content_height=self.config.content_height,
            on_click=loop.click,
            orbit=scene.orbit,
            on_resize=self._on_resize,
        )
        if self.config.model_path:
            self.assets = AssetLoader()
            self.assets.load_async(self.config.model_path, on_ready=self._attach_model)

        self.ready = Ready(state=scene.state, loop=loop, scene=scene)
        logger.info("Engine ready (%s)", "headless" if self.headless else "windowed")
        return self.ready

    def _attach_model(self, model: LoadedModel) -> None:
        ready = self.ready
        if ready is None:
            return
        ready.state.add_visual(model.visual, interactive=True)
        ready.scene.animator.add_updater(model.mixer.update)
        logger.info("Model %s attached to the scene", model.name)

    def _on_resize(self, width: int, height: int) -> None:
        self.width, self.height = width, height
        if self.display is not None:  # pragma: no cover - visual
            self.display.resize(width, height)
        if self.renderer is not None:  # pragma: no cover - visual
            self.renderer.resize(width, height)

    # ------------------------------------------------------------------
    def handle_events(self) -> bool:  # pragma: no cover - visual
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                return False
            self.input.handle_event(event)
        return True

    def next_dt(self) -> float:
        if self.display is None:
            dt = self.frame_dt
        else:  # pragma: no cover - visual
            dt = self.display.tick()
        return max(0.0, min(dt, self.config.max_frame_dt))

    def run(self, max_ticks: Optional[int] = None) -> int:
        """Run the loop; return the number of ticks executed."""
        if self.ready is None:
            raise RuntimeError("Engine.run() called before initialize()")
        loop = self.ready.loop
        self._running = True
        ticks = 0
        logger.info("Frame loop started")
        try:
            while self._running:
                if max_ticks is not None and ticks >= max_ticks:
                    break
                dt = self.next_dt()
                if self.display is not None and not self.handle_events():  # pragma: no cover - visual
                    break
                # Finished asset loads are integrated between ticks only
                if self.assets is not None:
                    self.assets.poll()
                loop.tick(dt)
                if self.display is not None:  # pragma: no cover - visual
                    self.display.flip()
                ticks += 1
        finally:
            self._running = False
        logger.info("Frame loop stopped after %d ticks", ticks)
        stepper = self.ready.scene.stepper
        if stepper is not None:
            logger.debug("Physics ran %d integration steps", stepper.steps_taken)
        return ticks

    def stop(self) -> None:
        """Stop scheduling further ticks; the current tick still completes."""
        self._running = False

    def shutdown(self) -> None:
        self.stop()
        if self.assets is not None:
            self.assets.shutdown()
            self.assets = None
        if self.ready is not None:
            self.ready.state.teardown()
            self.ready = None
        if self.display is not None:  # pragma: no cover - visual
            self.display.close()
            self.display = None
            self.renderer = None
        logger.info("Engine shut down")


__all__ = ["Engine", "Ready"]

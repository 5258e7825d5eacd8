"""Per-frame update sequence.

One tick runs, in order and always to completion:

1. physics step (``SimulationStepper.step``)
2. transform sync (``core.sync.sync``)
3. procedural animation (``ProceduralAnimator.tick``)
4. hover picking, when the picker uses the hover policy
5. render hand-off (``render_fn(state, camera)``)

Clicks are picked between ticks. A click that arrives while a tick is in
progress (e.g. raised from inside the render callback) is deferred until
that tick has finished.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from core.scene import SceneState
from core.sync import sync

logger = logging.getLogger(__name__)

RenderFn = Callable[[SceneState, object], None]


class FrameLoop:
    def __init__(
        self,
        state: SceneState,
        *,
        stepper=None,
        animator=None,
        picker=None,
        render_fn: Optional[RenderFn] = None,
    ) -> None:
        self.state = state
        self.stepper = stepper
        self.animator = animator
        self.picker = picker
        self.render_fn = render_fn
        self.ticks = 0
        self._ticking = False
        self._pending_clicks = 0

    @property
    def ticking(self) -> bool:
        return self._ticking

    def tick(self, dt: float) -> None:
        if self._ticking:
            raise RuntimeError("FrameLoop.tick() re-entered while a tick is running")
        state = self.state
        self._ticking = True
        try:
            if self.stepper is not None:
                self.stepper.step(dt)
                sync(state.pairs)
            if self.animator is not None:
                self.animator.tick(state, dt)
            if self.picker is not None:
                self.picker.on_tick(state)
            if self.render_fn is not None:
                self.render_fn(state, state.camera)
        finally:
            self._ticking = False
        self.ticks += 1
        self._flush_clicks()

    def click(self):
        """Pick at the current pointer position (deferred if a tick is running)."""
        if self.picker is None:
            return None
        if self._ticking:
            self._pending_clicks += 1
            return None
        return self.picker.on_click(self.state)

    def _flush_clicks(self) -> None:
        while self._pending_clicks:
            self._pending_clicks -= 1
            self.picker.on_click(self.state)


__all__ = ["FrameLoop", "RenderFn"]

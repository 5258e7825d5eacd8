"""Procedural animation for everything the physics world does not own.

- ParticleField: particles fall, and any particle that drops below the
  floor is re-seeded at a random height in the reset range (no
  interpolation). Heights therefore always stay in [floor, reset_max].
- RotationAccumulator: spins a visual about one axis at a fixed rate; the
  angle is wrapped to [0, 2*pi).
- ScrollCameraRig (camera.scroll_rig) is re-applied every tick.
- Opaque per-tick updaters (e.g. a loaded model's animation mixer).

Entities are independent: no update reads another entity's state.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

import numpy as np

from core.visual import ParticleBuffer, Visual
from physics.math3d import AXES, quat_from_axis_angle, quat_multiply, wrap_angle

logger = logging.getLogger(__name__)

UpdateFn = Callable[[float], None]


class ParticleField:
    def __init__(
        self,
        buffer: ParticleBuffer,
        *,
        floor: float,
        reset_range: Tuple[float, float],
        step: float = 0.1,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        low, high = reset_range
        if not floor <= low <= high:
            raise ValueError(f"reset range {reset_range} must lie at or above floor {floor}")
        ys = buffer.ys
        if buffer.count and (ys.min() < floor or ys.max() > high):
            raise ValueError(
                f"initial particle heights must lie in [{floor}, {high}]"
            )
        # Particles only ever fall; anything else could leave the reset range
        if step < 0.0:
            raise ValueError(f"step must be >= 0, got {step!r}")
        if buffer.speeds is not None and buffer.count and buffer.speeds.min() < 0.0:
            raise ValueError("particle speeds must be >= 0")
        self.buffer = buffer
        self.floor = float(floor)
        self.reset_range = (float(low), float(high))
        self.step = float(step)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.resets = 0

    def tick(self, dt: float) -> int:
        """Advance every particle; return how many were re-seeded."""
        ys = self.buffer.ys
        if self.buffer.speeds is not None:
            ys -= self.buffer.speeds * dt
        else:
            ys -= self.step
        below = ys < self.floor
        count = int(np.count_nonzero(below))
        if count:
            ys[below] = self.rng.uniform(self.reset_range[0], self.reset_range[1], count)
            self.resets += count
        return count


class RotationAccumulator:
    def __init__(self, visual: Visual, axis: str = "y", rate: float = 1.0) -> None:
        if axis not in AXES:
            raise ValueError(f"axis must be one of {tuple(AXES)}, got {axis!r}")
        self.visual = visual
        self.axis = axis
        self.rate = float(rate)
        self.angle = 0.0
        self._base = visual.orientation

    def tick(self, dt: float) -> float:
        self.angle = wrap_angle(self.angle + self.rate * dt)
        spin = quat_from_axis_angle(AXES[self.axis], self.angle)
        self.visual.orientation = quat_multiply(spin, self._base)
        return self.angle


class ProceduralAnimator:
    def __init__(
        self,
        particle_fields: Optional[List[ParticleField]] = None,
        rotators: Optional[List[RotationAccumulator]] = None,
        scroll_rig=None,
        camera_controller=None,
    ) -> None:
        self.particle_fields = list(particle_fields or [])
        self.rotators = list(rotators or [])
        self.scroll_rig = scroll_rig
        self.camera_controller = camera_controller
        self.updaters: List[UpdateFn] = []

    def add_updater(self, fn: UpdateFn) -> None:
        self.updaters.append(fn)

    def tick(self, state, dt: float):
        for field in self.particle_fields:
            field.tick(dt)
        for rot in self.rotators:
            rot.tick(dt)
        if self.camera_controller is not None:
            self.camera_controller.update(dt)
        if self.scroll_rig is not None:
            self.scroll_rig.apply(state.scroll)
        if self.scroll_rig is not None or self.camera_controller is not None:
            state.camera.update_rotation()
        self._run_updaters(dt)
        return state

    def _run_updaters(self, dt: float) -> None:
        failed = []
        for fn in self.updaters:
            try:
                fn(dt)
            except Exception:
                # Cosmetic hooks must never stop the loop; drop the broken one
                logger.exception("Animation updater %r failed; disabling it", fn)
                failed.append(fn)
        for fn in failed:
            self.updaters.remove(fn)


__all__ = [
    "UpdateFn",
    "ParticleField",
    "RotationAccumulator",
    "ProceduralAnimator",
]

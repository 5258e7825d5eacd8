"""Simulation stepper: advances the physics world once per frame.

Two modes are supported:

- substep count (default): the frame delta is split into ``substeps``
  equal integration steps.
- fixed timestep: frame time is accumulated and consumed in ``fixed_timestep``
  increments, at most ``max_substeps`` per frame. Left-over time stays in
  the accumulator for the next frame; no interpolation is done, so bodies
  always reflect the last completed step.

The stepper only mutates body state. Visuals are updated separately by
``core.sync.sync`` after the step.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from physics.world import PhysicsWorld

logger = logging.getLogger(__name__)


class SimulationStepper:
    def __init__(
        self,
        world: PhysicsWorld,
        *,
        substeps: int = 10,
        fixed_timestep: Optional[float] = None,
        max_substeps: int = 10,
        max_frame_dt: float = 0.1,
    ) -> None:
        if substeps < 1:
            raise ValueError(f"substeps must be >= 1, got {substeps!r}")
        if fixed_timestep is not None and fixed_timestep <= 0.0:
            raise ValueError(f"fixed_timestep must be > 0, got {fixed_timestep!r}")
        if max_substeps < 1:
            raise ValueError(f"max_substeps must be >= 1, got {max_substeps!r}")
        self.world = world
        self.substeps = int(substeps)
        self.fixed_timestep = fixed_timestep
        self.max_substeps = int(max_substeps)
        self.max_frame_dt = float(max_frame_dt)
        self._accumulator = 0.0
        self.steps_taken = 0

    @property
    def accumulator(self) -> float:
        return self._accumulator

    def step(self, dt: float) -> int:
        """Advance the world by ``dt`` seconds; return the number of integration steps run."""
        dt = max(0.0, min(float(dt), self.max_frame_dt))
        if dt == 0.0:
            return 0

        if self.fixed_timestep is None:
            self.world.step(dt, self.substeps)
            self.steps_taken += self.substeps
            return self.substeps

        h = self.fixed_timestep
        self._accumulator += dt
        count = min(int(self._accumulator / h), self.max_substeps)
        if count:
            self.world.step(h * count, count)
            self._accumulator -= h * count
        if self._accumulator >= h:
            # Falling behind: drop the backlog instead of spiralling
            logger.debug("Dropping %.4fs of simulation backlog", self._accumulator)
            self._accumulator %= h
        self.steps_taken += count
        return count

    def apply_impulse(
        self, handle: int, impulse: Sequence[float], point: Optional[Sequence[float]] = None
    ) -> None:
        """Entry point for other components (e.g. the picker) to push a body."""
        self.world.apply_impulse(handle, impulse, point)

    def reset(self) -> None:
        self._accumulator = 0.0
        self.steps_taken = 0


__all__ = ["SimulationStepper"]

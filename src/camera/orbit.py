"""OrbitController: drag-to-orbit around a target with damping.

Mouse drags nudge target angles; ``update()`` eases the current angles
toward them and places the camera on a sphere around ``target``, facing it.
No screen-space panning.
"""

from __future__ import annotations

import math

from pygame.math import Vector3

from config import ORBIT_DAMPING, ORBIT_SENSITIVITY

_POLAR_EPS = 0.01


class OrbitController:
    def __init__(self, camera, target=(0.0, 0.0, 0.0), *, damping: float = ORBIT_DAMPING, sensitivity: float = ORBIT_SENSITIVITY):
        self.camera = camera
        self.target = Vector3(target)
        self.damping = max(0.0, min(1.0, float(damping)))
        self.sensitivity = float(sensitivity)

        offset = camera.position - self.target
        self.radius = max(offset.length(), 1e-6)
        self.azimuth = math.atan2(offset.x, offset.z)
        self.polar = math.acos(max(-1.0, min(1.0, offset.y / self.radius)))
        self.target_azimuth = self.azimuth
        self.target_polar = self.polar

    def on_drag(self, dx: float, dy: float) -> None:
        self.target_azimuth -= dx * self.sensitivity
        cand = self.target_polar - dy * self.sensitivity
        self.target_polar = max(_POLAR_EPS, min(math.pi - _POLAR_EPS, cand))

    def update(self, dt: float) -> None:
        if self.damping <= 0.0 or dt <= 0.0:
            self.azimuth = self.target_azimuth
            self.polar = self.target_polar
        else:
            # damping is the per-frame fraction at 60 Hz; rescale for dt
            alpha = 1.0 - (1.0 - self.damping) ** (dt * 60.0)
            self.azimuth += (self.target_azimuth - self.azimuth) * alpha
            self.polar += (self.target_polar - self.polar) * alpha

        sp = math.sin(self.polar)
        self.camera.position = self.target + Vector3(
            self.radius * sp * math.sin(self.azimuth),
            self.radius * math.cos(self.polar),
            self.radius * sp * math.cos(self.azimuth),
        )
        self.camera.look_at(self.target)


__all__ = ["OrbitController"]

import math
from typing import Tuple

import numpy as np
from pygame.math import Vector3

from config import WIDTH, HEIGHT, FOV, NEAR, FAR


class Camera:
    def __init__(self, position=None, rotation=None, width=WIDTH, height=HEIGHT, fov=FOV, near=NEAR, far=FAR):
        self.position = Vector3(position) if position is not None else Vector3(0, 0, 10)
        self.rotation = Vector3(rotation) if rotation is not None else Vector3(0, 0, 0)  # pitch (x), yaw (y), roll (z)
        self.fov = float(fov)
        self.near = float(near)
        self.far = float(far)
        self.aspect = 1.0
        self.set_aspect(width, height)

        # cached trig & direction vectors
        self._yaw_cos = 1.0
        self._yaw_sin = 0.0
        self._pitch_cos = 1.0
        self._pitch_sin = 0.0

        # NumPy rotation matrix (world -> camera)
        self._R = np.eye(3, dtype=np.float64)

        self.update_rotation()

    def set_aspect(self, width: float, height: float) -> None:
        """Viewport resize: only the aspect ratio matters to the camera."""
        if width <= 0 or height <= 0:
            return
        self.aspect = float(width) / float(height)

    @property
    def right(self) -> Vector3:
        return self._right

    @property
    def forward(self) -> Vector3:
        return self._forward

    @property
    def up(self) -> Vector3:
        return self._up

    def update_rotation(self):
        """Precompute trig, direction vectors (Vector3) and rotation matrix (numpy)."""
        cp = math.cos(self.rotation.x)
        sp = math.sin(self.rotation.x)
        cy = math.cos(self.rotation.y)
        sy = math.sin(self.rotation.y)

        self._yaw_cos = cy
        self._yaw_sin = sy
        self._pitch_cos = cp
        self._pitch_sin = sp

        self._right = Vector3(self._yaw_cos, 0, -self._yaw_sin)
        # Full forward vector (with vertical component when pitched)
        self._forward = Vector3(
            -self._pitch_cos * self._yaw_sin,
            self._pitch_sin,
            -self._pitch_cos * self._yaw_cos,
        )
        self._up = self._right.cross(self._forward)

        # yaw (around Y) then pitch (around X)
        Ry = np.array(
            [[cy, 0.0, -sy], [0.0, 1.0, 0.0], [sy, 0.0, cy]], dtype=np.float64
        )
        Rx = np.array(
            [[1.0, 0.0, 0.0], [0.0, cp, sp], [0.0, -sp, cp]], dtype=np.float64
        )
        # world -> camera matrix (application is R @ vector)
        self._R = Rx @ Ry

    def look_at(self, target) -> None:
        """Point the camera at ``target`` (roll is left untouched)."""
        d = Vector3(target) - self.position
        if d.length_squared() == 0:
            return
        d.normalize_ip()
        self.rotation.x = math.asin(max(-1.0, min(1.0, d.y)))
        self.rotation.y = math.atan2(-d.x, -d.z)
        self.update_rotation()

    def world_to_camera(self, point) -> np.ndarray:
        rel = Vector3(point) - self.position
        return self._R @ np.array([rel.x, rel.y, rel.z], dtype=np.float64)

    def view_matrix(self) -> np.ndarray:
        """4x4 world -> camera matrix (row-major; transpose for glLoadMatrixd)."""
        m = np.eye(4, dtype=np.float64)
        m[:3, :3] = self._R
        p = np.array([self.position.x, self.position.y, self.position.z], dtype=np.float64)
        m[:3, 3] = -(self._R @ p)
        return m

    def ray_from_ndc(self, x: float, y: float) -> Tuple[Vector3, Vector3]:
        """Return (origin, unit direction) of the ray through NDC ``(x, y)``."""
        half_h = math.tan(math.radians(self.fov * 0.5))
        half_w = half_h * self.aspect
        direction = self._forward + self._right * (x * half_w) + self._up * (y * half_h)
        return self.position.copy(), direction.normalize()

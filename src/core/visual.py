from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np
from pygame.math import Vector3

from physics.math3d import IDENTITY, Quaternion
from physics.shapes import Shape

Color = Tuple[float, float, float]


class Visual:
    """Renderable entity: transform, shape and appearance.

    ``default_color``/``default_scale`` are the resting appearance that the
    picker restores when a highlight is cleared.
    """

    def __init__(
        self,
        shape: Optional[Shape] = None,
        position=None,
        orientation: Quaternion = IDENTITY,
        scale: float = 1.0,
        color: Color = (1.0, 1.0, 1.0),
        name: str = "",
    ):
        self.shape = shape
        self.position = Vector3(position) if position is not None else Vector3(0, 0, 0)
        self.orientation = orientation
        self.scale = float(scale)
        self.color = tuple(color)
        self.default_color = tuple(color)
        self.default_scale = float(scale)
        self.name = name
        self.visible = True

    def __repr__(self) -> str:
        label = self.name or type(self.shape).__name__
        return f"<Visual {label} at ({self.position.x:.2f}, {self.position.y:.2f}, {self.position.z:.2f})>"

    @property
    def highlighted(self) -> bool:
        return self.color != self.default_color or self.scale != self.default_scale

    def highlight(self, color: Color, scale: float) -> None:
        self.color = tuple(color)
        self.scale = self.default_scale * float(scale)

    def reset_appearance(self) -> None:
        self.color = self.default_color
        self.scale = self.default_scale


class ParticleBuffer:
    """Flat ``[x0, y0, z0, x1, y1, z1, ...]`` position buffer.

    Particle ``i`` lives at indices ``3i, 3i+1, 3i+2``. Optional per-particle
    fall speeds are stored alongside.
    """

    def __init__(self, positions: Sequence[float], speeds: Optional[Sequence[float]] = None):
        data = np.asarray(positions, dtype=np.float64).ravel().copy()
        if data.size % 3 != 0:
            raise ValueError(f"particle buffer length must be a multiple of 3, got {data.size}")
        self.data = data
        if speeds is not None:
            speeds = np.asarray(speeds, dtype=np.float64).ravel().copy()
            if speeds.size != self.count:
                raise ValueError(
                    f"expected {self.count} particle speeds, got {speeds.size}"
                )
        self.speeds = speeds

    @property
    def count(self) -> int:
        return self.data.size // 3

    def __len__(self) -> int:
        return self.data.size

    @property
    def xyz(self) -> np.ndarray:
        """(N, 3) view over the buffer; writes go straight to ``data``."""
        return self.data.reshape(-1, 3)

    @property
    def ys(self) -> np.ndarray:
        return self.data[1::3]

    def particle(self, i: int) -> Tuple[float, float, float]:
        return (float(self.data[3 * i]), float(self.data[3 * i + 1]), float(self.data[3 * i + 2]))


class PointCloud(Visual):
    """A visual that draws every particle of a buffer as a point."""

    def __init__(self, buffer: ParticleBuffer, color: Color = (1.0, 1.0, 1.0), point_size: float = 3.0, name: str = ""):
        super().__init__(shape=None, color=color, name=name)
        self.buffer = buffer
        self.point_size = float(point_size)

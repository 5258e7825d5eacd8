"""Collision/picking shape descriptors shared by bodies and visuals.

Shapes are immutable and validated at construction: a non-positive
dimension is a setup error and raises ``ValueError`` immediately rather than
surfacing later inside a simulation step.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from pygame.math import Vector3


def _require_positive(name: str, value: float) -> float:
    value = float(value)
    if not value > 0.0:
        raise ValueError(f"{name} must be > 0, got {value!r}")
    return value


@dataclass(frozen=True)
class SphereShape:
    radius: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "radius", _require_positive("radius", self.radius))

    def inertia(self, mass: float) -> Vector3:
        i = 0.4 * mass * self.radius * self.radius
        return Vector3(i, i, i)


@dataclass(frozen=True)
class BoxShape:
    """Box given by its full edge lengths (width, height, depth)."""

    size: Tuple[float, float, float]

    def __post_init__(self) -> None:
        if len(self.size) != 3:
            raise ValueError(f"box size needs 3 components, got {self.size!r}")
        w, h, d = (_require_positive(f"box size[{i}]", s) for i, s in enumerate(self.size))
        object.__setattr__(self, "size", (w, h, d))

    @property
    def half_extents(self) -> Vector3:
        return Vector3(self.size) * 0.5

    def corners(self) -> list[Vector3]:
        hx, hy, hz = self.half_extents
        return [
            Vector3(sx * hx, sy * hy, sz * hz)
            for sx in (-1, 1)
            for sy in (-1, 1)
            for sz in (-1, 1)
        ]

    def inertia(self, mass: float) -> Vector3:
        w, h, d = self.size
        k = mass / 12.0
        return Vector3(k * (h * h + d * d), k * (w * w + d * d), k * (w * w + h * h))


@dataclass(frozen=True)
class PlaneShape:
    """Flat plane facing local +Y.

    ``width``/``depth`` bound it for rendering and picking; for collision the
    plane is treated as an infinite half-space below its surface.
    """

    width: float
    depth: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "width", _require_positive("plane width", self.width))
        object.__setattr__(self, "depth", _require_positive("plane depth", self.depth))

    def inertia(self, mass: float) -> Vector3:
        # Planes are static only, they never need an inertia tensor
        return Vector3(0, 0, 0)


Shape = Union[SphereShape, BoxShape, PlaneShape]

__all__ = ["SphereShape", "BoxShape", "PlaneShape", "Shape"]

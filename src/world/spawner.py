"""Helpers to scatter decorative meshes and particles inside a box-shaped area.

Mesh positions are drawn one at a time with a retry budget and a spatial
grid that keeps them apart; particle positions are generated in one
vectorized batch since they may overlap freely.
"""

from __future__ import annotations

import random
from collections import defaultdict
from typing import List, Optional, Tuple

import numpy as np
from pygame.math import Vector3


class SpatialGrid:
    """Simple spatial grid for fast spacing checks on the XZ plane."""

    def __init__(self, cell_size: float = 2.0):
        self.cell_size = max(cell_size, 1e-6)
        self.grid = defaultdict(list)

    def _get_cell_key(self, x: float, z: float) -> tuple[int, int]:
        return (int(x // self.cell_size), int(z // self.cell_size))

    def add(self, x: float, z: float, radius: float):
        self.grid[self._get_cell_key(x, z)].append((x, z, radius))

    def check_collision(self, x: float, z: float, radius: float, padding: float) -> bool:
        """Check if a disc at (x, z) overlaps anything already placed."""
        cx, cz = self._get_cell_key(x, z)
        for dx in (-1, 0, 1):
            for dz in (-1, 0, 1):
                for sx, sz, sr in self.grid.get((cx + dx, cz + dz), []):
                    required = radius + sr + padding
                    if (sx - x) ** 2 + (sz - z) ** 2 < required * required:
                        return True
        return False


def spawn_positions(
    count: int,
    *,
    spread: float,
    y_range: Tuple[float, float],
    radius: float = 0.5,
    padding: float = 0.25,
    max_retries: int = 8,
    rng: Optional[random.Random] = None,
) -> List[Vector3]:
    """Return ``count`` positions with x, z in [-spread, spread] and y in ``y_range``.

    Each position gets ``max_retries`` attempts to keep ``padding`` clear of
    the others; after that the last candidate is used anyway.
    """
    rng = rng or random.Random()
    # Cells must be at least one full spacing wide for the 3x3 neighbourhood check
    grid = SpatialGrid(cell_size=2.0 * radius + padding)
    out: List[Vector3] = []
    for _ in range(count):
        for _tries in range(max_retries):
            x = rng.uniform(-spread, spread)
            z = rng.uniform(-spread, spread)
            if not grid.check_collision(x, z, radius, padding):
                break
        y = rng.uniform(*y_range)
        grid.add(x, z, radius)
        out.append(Vector3(x, y, z))
    return out


def particle_positions(
    count: int,
    *,
    spread: float,
    y_range: Tuple[float, float],
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Flat ``[x0, y0, z0, ...]`` array of ``count`` random particle positions."""
    rng = rng if rng is not None else np.random.default_rng()
    xyz = np.empty((count, 3), dtype=np.float64)
    xyz[:, 0] = rng.uniform(-spread, spread, count)
    xyz[:, 1] = rng.uniform(y_range[0], y_range[1], count)
    xyz[:, 2] = rng.uniform(-spread, spread, count)
    return xyz.ravel()


__all__ = ["SpatialGrid", "spawn_positions", "particle_positions"]

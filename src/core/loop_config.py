"""Frame-loop configuration: which scene features are active and how they are tuned.

Defaults come from ``config.py``; ``main.py`` overrides them from the
command line.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple

from config import (
    CLICK_IMPULSE,
    CONTENT_HEIGHT,
    FIXED_TIMESTEP,
    GRAVITY,
    HIGHLIGHT_COLOR,
    HIGHLIGHT_SCALE,
    MAX_FRAME_DT,
    MAX_SUBSTEPS,
    MESH_COUNT,
    PARTICLE_COUNT,
    PARTICLE_FLOOR,
    PARTICLE_RESET_RANGE,
    PARTICLE_SPREAD,
    PARTICLE_STEP,
    SCROLL_BASE_Z,
    SCROLL_SCALE,
    SUBSTEPS,
)


class PickingPolicy(enum.Enum):
    OFF = "off"
    PERSISTENT = "persistent"
    HOVER = "hover"


@dataclass
class LoopConfig:
    # Feature toggles
    physics: bool = True
    particles: bool = True
    picking: PickingPolicy = PickingPolicy.PERSISTENT
    scroll_camera: bool = True
    orbit_controls: bool = False
    rotating_meshes: bool = True
    model_path: Optional[str] = None

    # Physics
    gravity: Tuple[float, float, float] = GRAVITY
    substeps: int = SUBSTEPS
    fixed_timestep: Optional[float] = None
    max_substeps: int = MAX_SUBSTEPS
    max_frame_dt: float = MAX_FRAME_DT
    mesh_count: int = MESH_COUNT

    # Particles
    particle_count: int = PARTICLE_COUNT
    particle_spread: float = PARTICLE_SPREAD
    particle_floor: float = PARTICLE_FLOOR
    particle_reset_range: Tuple[float, float] = PARTICLE_RESET_RANGE
    # None: fixed PARTICLE_STEP per tick; otherwise (min, max) fall speed in units/s
    particle_speed_range: Optional[Tuple[float, float]] = None
    particle_step: float = PARTICLE_STEP

    # Picking
    highlight_color: Tuple[float, float, float] = HIGHLIGHT_COLOR
    highlight_scale: float = HIGHLIGHT_SCALE
    click_impulse: float = CLICK_IMPULSE
    require_armed: bool = True

    # Scroll camera
    scroll_base: float = SCROLL_BASE_Z
    scroll_scale: float = SCROLL_SCALE
    scroll_mode: str = "linear"
    scroll_normalized: bool = False
    content_height: float = CONTENT_HEIGHT

    seed: Optional[int] = None

    def validate(self) -> "LoopConfig":
        if self.substeps < 1:
            raise ValueError("substeps must be >= 1")
        if self.max_substeps < 1:
            raise ValueError("max_substeps must be >= 1")
        if self.fixed_timestep is not None and self.fixed_timestep <= 0.0:
            raise ValueError("fixed_timestep must be > 0")
        if self.max_frame_dt <= 0.0:
            raise ValueError("max_frame_dt must be > 0")
        if self.mesh_count < 0 or self.particle_count < 0:
            raise ValueError("object counts must be >= 0")
        low, high = self.particle_reset_range
        if not self.particle_floor <= low <= high:
            raise ValueError(
                f"particle reset range {self.particle_reset_range} must lie above the floor {self.particle_floor}"
            )
        if self.particle_speed_range is not None:
            s_lo, s_hi = self.particle_speed_range
            if not 0.0 <= s_lo <= s_hi:
                raise ValueError("particle speed range must satisfy 0 <= min <= max")
        elif self.particle_step < 0.0:
            raise ValueError("particle_step must be >= 0")
        if self.highlight_scale <= 0.0:
            raise ValueError("highlight_scale must be > 0")
        if self.scroll_mode not in ("linear", "sine"):
            raise ValueError(f"unknown scroll mode {self.scroll_mode!r}")
        if self.scroll_camera and self.orbit_controls:
            raise ValueError("scroll camera and orbit controls both drive the camera; enable one")
        return self

    @property
    def upper_range_max(self) -> float:
        return self.particle_reset_range[1]


__all__ = ["PickingPolicy", "LoopConfig"]

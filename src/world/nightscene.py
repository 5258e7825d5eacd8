"""Night scene assembly: ground, falling fireflies, physics meshes and lights.

``NightScene`` builds a sealed ``SceneState`` together with the components
that drive it each frame (stepper, animator, picker and the camera rig).
Nothing here touches OpenGL, so the whole scene can be built headless.
"""

from __future__ import annotations

import logging
import random
import time
from typing import List, Optional

import numpy as np
from pygame.math import Vector3

from camera.camera import Camera
from camera.orbit import OrbitController
from camera.scroll_rig import ScrollCameraRig, ScrollMapping
from config import (
    AMBIENT_COLOR,
    AMBIENT_INTENSITY,
    BACKGROUND,
    CAMERA_START,
    CAMERA_TARGET,
    FAR,
    FOV,
    GROUND_COLOR,
    GROUND_SIZE,
    HEIGHT,
    MOON_COLOR,
    MOON_INTENSITY,
    MOON_POSITION,
    NEAR,
    PARTICLE_COLOR,
    WIDTH,
)
from core.loop_config import LoopConfig, PickingPolicy
from core.picking import Picker
from core.scene import SceneState
from core.visual import ParticleBuffer, PointCloud, Visual
from physics.shapes import BoxShape, PlaneShape, SphereShape
from physics.stepper import SimulationStepper
from physics.world import PhysicsWorld
from world.animator import ParticleField, ProceduralAnimator, RotationAccumulator
from world.spawner import particle_positions, spawn_positions

logger = logging.getLogger(__name__)

# Dropped meshes: spread on XZ, spawn heights, sizes
MESH_SPREAD = 8.0
MESH_HEIGHT_RANGE = (3.0, 12.0)
SPHERE_RADIUS = 0.5
BOX_SIZE = (1.0, 1.0, 1.0)

# Floating meshes that only spin (position, axis, rate in rad/s)
ROTATING_MESHES = (
    ((-6.0, 4.0, -6.0), "y", 0.5),
    ((6.0, 5.0, -4.0), "x", 0.8),
)


class NightScene:
    def __init__(self, config: Optional[LoopConfig] = None, *, width: int = WIDTH, height: int = HEIGHT) -> None:
        self.config = (config or LoopConfig()).validate()
        self.rng = random.Random(self.config.seed)
        self.np_rng = np.random.default_rng(self.config.seed)

        camera = Camera(position=CAMERA_START, width=width, height=height, fov=FOV, near=NEAR, far=FAR)
        camera.look_at(CAMERA_TARGET)
        self.state = SceneState(camera=camera, background=BACKGROUND)
        self.state.scroll.set_range(self.config.content_height, height)

        self.world: Optional[PhysicsWorld] = None
        self.stepper: Optional[SimulationStepper] = None
        self.particle_fields: List[ParticleField] = []
        self.rotators: List[RotationAccumulator] = []
        self.scroll_rig: Optional[ScrollCameraRig] = None
        self.orbit: Optional[OrbitController] = None
        self.picker: Optional[Picker] = None

        start_time = time.perf_counter()
        self._setup_lights()
        self._setup_physics()
        self._create_ground()
        self.log_timing("Setting up lights and ground", start_time, time.perf_counter())

        start_time = time.perf_counter()
        self._spawn_meshes()
        self.log_timing("Spawning meshes", start_time, time.perf_counter())

        start_time = time.perf_counter()
        self._spawn_fireflies()
        self.log_timing("Spawning fireflies", start_time, time.perf_counter())

        self._setup_camera_rig()
        self._setup_picking()
        self.animator = ProceduralAnimator(
            particle_fields=self.particle_fields,
            rotators=self.rotators,
            scroll_rig=self.scroll_rig,
            camera_controller=self.orbit,
        )
        self.state.seal()
        logger.info(
            "Night scene ready: %d visuals, %d bodies, %d particles",
            len(self.state.visuals),
            len(self.state.pairs),
            sum(f.buffer.count for f in self.particle_fields),
        )

    # ------------------------------------------------------------------
    def _setup_lights(self) -> None:
        self.state.lights = [
            {"type": "ambient", "color": AMBIENT_COLOR, "intensity": AMBIENT_INTENSITY},
            {
                "type": "directional",
                "color": MOON_COLOR,
                "intensity": MOON_INTENSITY,
                "position": MOON_POSITION,
            },
        ]

    def _setup_physics(self) -> None:
        if not self.config.physics:
            return
        self.world = PhysicsWorld(gravity=self.config.gravity)
        self.state.world = self.world
        self.stepper = SimulationStepper(
            self.world,
            substeps=self.config.substeps,
            fixed_timestep=self.config.fixed_timestep,
            max_substeps=self.config.max_substeps,
            max_frame_dt=self.config.max_frame_dt,
        )

    def _create_ground(self) -> None:
        shape = PlaneShape(GROUND_SIZE, GROUND_SIZE)
        ground = Visual(shape=shape, color=GROUND_COLOR, name="ground")
        if self.world is None:
            self.state.add_visual(ground)
            return
        handle = self.world.add_body(shape, mass=0.0, position=(0.0, 0.0, 0.0))
        self.state.pair(self.world.body(handle), ground)

    def _random_color(self):
        return tuple(self.rng.uniform(0.3, 1.0) for _ in range(3))

    def _spawn_meshes(self) -> None:
        positions = spawn_positions(
            self.config.mesh_count,
            spread=MESH_SPREAD,
            y_range=MESH_HEIGHT_RANGE,
            radius=max(SPHERE_RADIUS, max(BOX_SIZE) * 0.5),
            rng=self.rng,
        )
        for i, pos in enumerate(positions):
            shape = SphereShape(SPHERE_RADIUS) if i % 2 == 0 else BoxShape(BOX_SIZE)
            visual = Visual(shape=shape, position=pos, color=self._random_color(), name=f"mesh-{i}")
            if self.world is not None:
                handle = self.world.add_body(shape, mass=1.0, position=pos)
                self.state.pair(self.world.body(handle), visual)
            else:
                self.state.add_visual(visual)
            self.state.interactive.add(visual)

        if not self.config.rotating_meshes:
            return
        for i, (pos, axis, rate) in enumerate(ROTATING_MESHES):
            visual = Visual(shape=BoxShape(BOX_SIZE), position=pos, color=self._random_color(), name=f"spinner-{i}")
            self.state.add_visual(visual, interactive=True)
            self.rotators.append(RotationAccumulator(visual, axis=axis, rate=rate))

    def _spawn_fireflies(self) -> None:
        cfg = self.config
        if not cfg.particles or cfg.particle_count == 0:
            return
        low, high = cfg.particle_reset_range
        # Initial heights start at ground level (or the floor, if higher)
        start = min(max(cfg.particle_floor, 0.0), high)
        positions = particle_positions(
            cfg.particle_count,
            spread=cfg.particle_spread,
            y_range=(start, high),
            rng=self.np_rng,
        )
        speeds = None
        if cfg.particle_speed_range is not None:
            speeds = self.np_rng.uniform(*cfg.particle_speed_range, cfg.particle_count)
        buffer = ParticleBuffer(positions, speeds)
        self.state.add_visual(PointCloud(buffer, color=PARTICLE_COLOR, name="fireflies"))
        self.particle_fields.append(
            ParticleField(
                buffer,
                floor=cfg.particle_floor,
                reset_range=(low, high),
                step=cfg.particle_step,
                rng=self.np_rng,
            )
        )

    def _setup_camera_rig(self) -> None:
        cfg = self.config
        if cfg.scroll_camera:
            mapping = ScrollMapping(
                base=cfg.scroll_base,
                scale=cfg.scroll_scale,
                mode=cfg.scroll_mode,
                normalized=cfg.scroll_normalized,
            )
            self.scroll_rig = ScrollCameraRig(self.state.camera, mapping, axis="z")
        elif cfg.orbit_controls:
            self.orbit = OrbitController(self.state.camera, CAMERA_TARGET)

    def _setup_picking(self) -> None:
        cfg = self.config
        if cfg.picking is PickingPolicy.OFF:
            return
        self.picker = Picker(
            cfg.picking,
            highlight_color=cfg.highlight_color,
            highlight_scale=cfg.highlight_scale,
            require_armed=cfg.require_armed,
            stepper=self.stepper,
            click_impulse=cfg.click_impulse,
        )

    # ------------------------------------------------------------------
    def log_timing(self, message: str, start_time: float, end_time: float) -> None:
        """Logs timing information for scene setup phases."""
        logger.debug("%s took %.6f seconds", message, end_time - start_time)


def build_night_scene(config: Optional[LoopConfig] = None, **kwargs) -> NightScene:
    return NightScene(config, **kwargs)


__all__ = ["NightScene", "build_night_scene", "ROTATING_MESHES"]

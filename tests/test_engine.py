import json
import logging
import math

import pytest

from config import CAMERA_START, PARTICLE_COUNT
from core.engine import Engine
from core.loop_config import LoopConfig, PickingPolicy
from core.visual import PointCloud
from physics.shapes import PlaneShape
from world.nightscene import ROTATING_MESHES, build_night_scene


def _ndc(camera, point):
    p = camera.world_to_camera(point)
    half_h = math.tan(math.radians(camera.fov * 0.5))
    return (p[0] / -p[2]) / (half_h * camera.aspect), (p[1] / -p[2]) / half_h


def test_night_scene_contents():
    scene = build_night_scene(LoopConfig(seed=1, mesh_count=6))
    state = scene.state
    assert state.sealed
    assert state.background == (0.0, 0.0, 0.0, 1.0)
    assert [light["type"] for light in state.lights] == ["ambient", "directional"]
    # ground + meshes are simulated; the ground is not pickable
    assert len(state.pairs) == 1 + 6
    ground = state.pairs[0].visual
    assert isinstance(ground.shape, PlaneShape)
    assert ground not in state.interactive
    assert len(state.interactive) == 6 + len(ROTATING_MESHES)
    clouds = [v for v in state.visuals if isinstance(v, PointCloud)]
    assert len(clouds) == 1 and clouds[0].buffer.count == PARTICLE_COUNT
    ys = clouds[0].buffer.ys
    assert ys.min() >= 0.0 and ys.max() <= 50.0
    assert tuple(state.camera.position) == pytest.approx(CAMERA_START)
    assert scene.picker.policy is PickingPolicy.PERSISTENT


def test_night_scene_without_physics_or_particles():
    scene = build_night_scene(LoopConfig(physics=False, particles=False, rotating_meshes=False, mesh_count=3))
    assert scene.stepper is None
    assert scene.state.pairs == ()
    assert len(scene.state.interactive) == 3
    assert not scene.particle_fields


def test_night_scene_picking_off():
    scene = build_night_scene(LoopConfig(picking=PickingPolicy.OFF))
    assert scene.picker is None


def test_night_scene_orbit_mode():
    scene = build_night_scene(LoopConfig(scroll_camera=False, orbit_controls=True))
    assert scene.orbit is not None
    assert scene.scroll_rig is None


def test_same_seed_same_layout():
    a = build_night_scene(LoopConfig(seed=42))
    b = build_night_scene(LoopConfig(seed=42))
    assert [v.position for v in a.state.visuals] == [v.position for v in b.state.visuals]


def test_run_before_initialize_raises():
    with pytest.raises(RuntimeError):
        Engine(LoopConfig(seed=0), headless=True).run(max_ticks=1)


def test_headless_run_settles_meshes():
    engine = Engine(LoopConfig(seed=3), headless=True)
    ready = engine.initialize()
    assert engine.initialize() is ready
    try:
        assert engine.run(max_ticks=300) == 300
        assert ready.loop.ticks == 300
        for pair in ready.state.pairs:
            # Nothing falls through the ground
            assert pair.visual.position.y > -0.05
            assert pair.visual.position == pair.body.position
    finally:
        engine.shutdown()
    assert engine.ready is None
    assert ready.state.visuals == []


def test_scroll_moves_camera_during_run():
    engine = Engine(LoopConfig(seed=0), headless=True)
    ready = engine.initialize()
    try:
        engine.input.on_scroll(-5)
        engine.run(max_ticks=1)
        expected = 15.0 + ready.state.scroll.offset * 0.01
        assert ready.state.camera.position.z == pytest.approx(expected)
        assert ready.state.scroll.offset > 0
    finally:
        engine.shutdown()


def test_stop_from_inside_a_tick_finishes_that_tick():
    engine = Engine(LoopConfig(seed=0), headless=True)
    ready = engine.initialize()
    ready.scene.animator.add_updater(lambda dt: engine.stop())
    try:
        assert engine.run() == 1
    finally:
        engine.shutdown()


def test_click_selects_through_the_engine():
    engine = Engine(LoopConfig(seed=0, physics=False, particles=False, rotating_meshes=False), headless=True)
    ready = engine.initialize()
    try:
        camera = ready.state.camera
        x, y = min((_ndc(camera, v.position) for v in ready.state.interactive), key=lambda c: abs(c[0]) + abs(c[1]))
        engine.input.on_pointer_move((x + 1) / 2 * engine.width, (1 - y) / 2 * engine.height)
        engine.input.on_click()
        assert ready.state.selection is not None
        assert ready.state.selection.highlighted
    finally:
        engine.shutdown()


def test_model_asset_attaches_between_ticks(tmp_path):
    path = tmp_path / "lantern.json"
    path.write_text(
        json.dumps(
            {
                "name": "lantern",
                "shape": {"type": "sphere", "radius": 0.3},
                "position": [0, 2, 0],
                "animations": [{"name": "Bob", "type": "bob", "amplitude": 0.1}],
            }
        ),
        encoding="utf-8",
    )
    engine = Engine(LoopConfig(seed=0, model_path=str(path)), headless=True)
    ready = engine.initialize()
    try:
        engine.assets.wait(timeout=5)
        names = [v.name for v in ready.state.visuals]
        assert "lantern" in names
        engine.run(max_ticks=2)
    finally:
        engine.shutdown()


def test_missing_model_is_logged_and_loop_continues(tmp_path, caplog):
    engine = Engine(LoopConfig(seed=0, model_path=str(tmp_path / "nope.json")), headless=True)
    engine.initialize()
    try:
        with caplog.at_level(logging.WARNING, logger="world.assets"):
            engine.assets.wait(timeout=5)
            assert engine.run(max_ticks=3) == 3
    finally:
        engine.shutdown()
    assert "Failed to load model" in caplog.text

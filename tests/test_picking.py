import math

import pytest
from pygame.math import Vector3

from core.loop_config import PickingPolicy
from core.picking import Picker, Ray, intersect, pick, pick_ray
from core.visual import Visual
from physics.math3d import quat_from_axis_angle
from physics.shapes import PlaneShape, SphereShape
from physics.stepper import SimulationStepper
from physics.world import PhysicsWorld

from conftest import make_box, make_sphere

HIGHLIGHT = (1.0, 0.0, 0.0)


def ndc_for(camera, point):
    """NDC coordinates at which ``point`` appears on screen."""
    p = camera.world_to_camera(point)
    half_h = math.tan(math.radians(camera.fov * 0.5))
    half_w = half_h * camera.aspect
    return (p[0] / -p[2]) / half_w, (p[1] / -p[2]) / half_h


def test_pick_centre_hit(camera):
    target = make_sphere()
    assert pick((0, 0), camera, [target]) is target


def test_pick_distance_is_to_surface(camera):
    ray = Ray(Vector3(0, 0, 0), Vector3(0, 0, -1))
    hit, t = pick_ray(ray, [make_sphere(radius=1.0)])
    assert t == pytest.approx(4.0)


def test_pick_miss(camera):
    assert pick((0.95, 0.95), camera, [make_sphere()]) is None


def test_pick_empty_set(camera):
    assert pick((0, 0), camera, []) is None


def test_nearest_hit_wins_regardless_of_order(camera):
    far = make_sphere(position=(0, 0, -10), name="far")
    near = make_sphere(position=(0, 0, -5), name="near")
    assert pick((0, 0), camera, [far, near]) is near
    assert pick((0, 0), camera, [near, far]) is near


def test_equal_distance_resolves_to_first_inserted(camera):
    first = make_sphere(name="first")
    second = make_sphere(name="second")
    assert pick((0, 0), camera, [first, second]) is first
    assert pick((0, 0), camera, [second, first]) is second


def test_invisible_and_shapeless_visuals_are_skipped(camera):
    hidden = make_sphere(position=(0, 0, -3))
    hidden.visible = False
    shapeless = Visual(position=(0, 0, -2))
    target = make_sphere(position=(0, 0, -8))
    assert pick((0, 0), camera, [hidden, shapeless, target]) is target


def test_box_hit_respects_orientation_and_scale():
    ray = Ray(Vector3(0.6, 0, 0), Vector3(0, 0, -1))
    box = make_box(position=(0, 0, -5), size=(1, 1, 1))
    assert intersect(ray, box) is None
    box.scale = 1.5
    assert intersect(ray, box) == pytest.approx(5 - 0.75)
    box.scale = 1.0
    # 45 degrees about Y puts a corner at x = sqrt(0.5) ~ 0.707
    box.orientation = quat_from_axis_angle(Vector3(0, 1, 0), math.pi / 4)
    assert intersect(ray, box) is not None


def test_plane_hit_is_bounded():
    plane = Visual(shape=PlaneShape(10, 10), position=(0, -2, 0))
    down = Ray(Vector3(0, 0, 0), Vector3(0, -1, 0))
    assert intersect(down, plane) == pytest.approx(2.0)
    outside = Ray(Vector3(20, 0, 0), Vector3(0, -1, 0))
    assert intersect(outside, plane) is None
    parallel = Ray(Vector3(0, 0, 0), Vector3(1, 0, 0))
    assert intersect(parallel, plane) is None


def _scene(state, *visuals):
    for v in visuals:
        state.add_visual(v, interactive=True)
    return state


def test_unarmed_pointer_never_picks(state):
    _scene(state, make_sphere())
    picker = Picker(PickingPolicy.PERSISTENT, highlight_color=HIGHLIGHT)
    assert picker.on_click(state) is None
    picker = Picker(PickingPolicy.PERSISTENT, highlight_color=HIGHLIGHT, require_armed=False)
    assert picker.on_click(state) is not None


def test_persistent_selection_moves_and_clears(state):
    a = make_sphere(position=(0, 0, -5), name="a")
    b = make_sphere(position=(3, 0, -6), name="b")
    _scene(state, a, b)
    picker = Picker(PickingPolicy.PERSISTENT, highlight_color=HIGHLIGHT, highlight_scale=1.2)

    state.pointer.move_to(0, 0)
    assert picker.on_click(state) is a
    assert a.color == HIGHLIGHT and a.scale == pytest.approx(1.2)
    assert state.selection is a

    # Selection persists across ticks
    assert picker.on_tick(state) is a
    assert a.highlighted

    state.pointer.move_to(*ndc_for(state.camera, b.position))
    assert picker.on_click(state) is b
    assert not a.highlighted
    assert b.highlighted

    # Clicking empty space clears the selection
    state.pointer.move_to(-0.95, 0.95)
    assert picker.on_click(state) is None
    assert state.selection is None
    assert not a.highlighted and not b.highlighted


def test_hover_highlights_only_current_hit(state):
    a = make_sphere(position=(0, 0, -5), name="a")
    b = make_sphere(position=(3, 0, -6), name="b")
    _scene(state, a, b)
    picker = Picker(PickingPolicy.HOVER, highlight_color=HIGHLIGHT)

    state.pointer.move_to(0, 0)
    assert picker.on_tick(state) is a
    assert a.highlighted and not b.highlighted

    state.pointer.move_to(*ndc_for(state.camera, b.position))
    assert picker.on_tick(state) is b
    assert b.highlighted and not a.highlighted

    state.pointer.move_to(-0.95, 0.95)
    assert picker.on_tick(state) is None
    assert not a.highlighted and not b.highlighted


def test_hover_click_does_not_change_highlight(state):
    a = make_sphere()
    _scene(state, a)
    picker = Picker(PickingPolicy.HOVER, highlight_color=HIGHLIGHT)
    state.pointer.move_to(0, 0)
    assert picker.on_click(state) is a
    assert not a.highlighted


def test_off_policy_ignores_clicks(state):
    a = make_sphere()
    _scene(state, a)
    state.pointer.move_to(0, 0)
    picker = Picker(PickingPolicy.OFF)
    assert picker.on_click(state) is None
    assert picker.on_tick(state) is None
    assert not a.highlighted


def test_click_pushes_paired_body_along_ray(state):
    world = PhysicsWorld()
    h = world.add_body(SphereShape(1), mass=2.0, position=(0, 0, -5))
    visual = make_sphere()
    state.pair(world.body(h), visual)
    state.interactive.add(visual)
    picker = Picker(
        PickingPolicy.PERSISTENT,
        highlight_color=HIGHLIGHT,
        stepper=SimulationStepper(world),
        click_impulse=4.0,
    )
    state.pointer.move_to(0, 0)
    assert picker.on_click(state) is visual
    v = world.body(h).velocity
    assert v.z == pytest.approx(-2.0)
    assert v.x == pytest.approx(0.0, abs=1e-9)


def test_clear_resets_selection(state):
    a = make_sphere()
    _scene(state, a)
    picker = Picker(PickingPolicy.PERSISTENT, highlight_color=HIGHLIGHT, require_armed=False)
    picker.on_click(state)
    picker.clear(state)
    assert state.selection is None
    assert not a.highlighted


def test_highlight_scales_relative_to_resting_scale(state):
    a = Visual(shape=SphereShape(1.0), position=(0, 0, -10), scale=3.0, name="big")
    _scene(state, a)
    picker = Picker(PickingPolicy.PERSISTENT, highlight_color=HIGHLIGHT, highlight_scale=1.2)
    state.pointer.move_to(0, 0)
    assert picker.on_click(state) is a
    assert a.scale == pytest.approx(3.6)
    picker.clear(state)
    assert a.scale == pytest.approx(3.0)


def test_hits_beyond_far_plane_are_not_picked(state):
    far_away = make_sphere(position=(0, 0, -(state.camera.far + 5)), name="far")
    _scene(state, far_away)
    picker = Picker(PickingPolicy.PERSISTENT, highlight_color=HIGHLIGHT)
    state.pointer.move_to(0, 0)
    assert pick((0, 0), state.camera, [far_away]) is far_away
    assert picker.on_click(state) is None
    assert not far_away.highlighted

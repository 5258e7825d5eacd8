import math

import numpy as np
import pytest
from pygame.math import Vector3

from camera.camera import Camera
from camera.orbit import OrbitController


def _close(a, b, tol=1e-9):
    return (a - b).length() < tol


def test_default_basis_looks_down_negative_z(camera):
    assert _close(camera.forward, Vector3(0, 0, -1))
    assert _close(camera.right, Vector3(1, 0, 0))
    assert _close(camera.up, Vector3(0, 1, 0))


def test_look_at_points_forward_at_target():
    cam = Camera(position=(10, 10, 15))
    cam.look_at((0, 0, 0))
    expected = (Vector3(0, 0, 0) - Vector3(10, 10, 15)).normalize()
    assert _close(cam.forward, expected, 1e-6)


def test_world_to_camera_puts_target_on_axis():
    cam = Camera(position=(10, 10, 15))
    cam.look_at((0, 0, 0))
    p = cam.world_to_camera((0, 0, 0))
    assert p[0] == pytest.approx(0.0, abs=1e-9)
    assert p[1] == pytest.approx(0.0, abs=1e-9)
    assert p[2] < 0


def test_view_matrix_matches_world_to_camera():
    cam = Camera(position=(1, 2, 3), rotation=(0.3, -0.7, 0))
    point = (4, -1, 2)
    homogeneous = cam.view_matrix() @ np.array([*point, 1.0])
    assert np.allclose(homogeneous[:3], cam.world_to_camera(point))


def test_centre_ray_is_forward(camera):
    origin, direction = camera.ray_from_ndc(0, 0)
    assert origin == camera.position
    assert origin is not camera.position
    assert _close(direction, camera.forward)


def test_corner_ray_spans_fov(camera):
    _, direction = camera.ray_from_ndc(0, 1)
    angle = math.degrees(math.acos(direction.dot(camera.forward)))
    assert angle == pytest.approx(camera.fov / 2)


def test_set_aspect_ignores_degenerate_sizes(camera):
    camera.set_aspect(1000, 500)
    assert camera.aspect == pytest.approx(2.0)
    camera.set_aspect(0, 500)
    assert camera.aspect == pytest.approx(2.0)


def test_orbit_keeps_radius_and_faces_target():
    cam = Camera(position=(0, 0, 10))
    orbit = OrbitController(cam, (0, 0, 0), damping=0.25)
    orbit.on_drag(100, 0)
    for _ in range(120):
        orbit.update(1 / 60)
    assert cam.position.length() == pytest.approx(10.0)
    assert cam.position.x != pytest.approx(0.0)
    expected = (-cam.position).normalize()
    assert _close(cam.forward, expected, 1e-6)


def test_orbit_damping_eases_toward_target():
    cam = Camera(position=(0, 0, 10))
    orbit = OrbitController(cam, (0, 0, 0), damping=0.25)
    orbit.on_drag(100, 0)
    orbit.update(1 / 60)
    # One 60 Hz frame covers the damping fraction of the remaining angle
    assert orbit.azimuth == pytest.approx(orbit.target_azimuth * 0.25)


def test_orbit_polar_angle_is_clamped():
    cam = Camera(position=(0, 0, 10))
    orbit = OrbitController(cam, (0, 0, 0), damping=0.0)
    orbit.on_drag(0, 100000)
    orbit.update(1 / 60)
    assert 0 < orbit.polar < math.pi
    assert cam.position.y > 9.9

import pytest

from camera.camera import Camera
from core.scene import SceneState
from core.visual import Visual
from physics.shapes import BoxShape, SphereShape


@pytest.fixture
def camera():
    """Camera at the origin looking down -Z."""
    return Camera(position=(0, 0, 0), width=800, height=600)


@pytest.fixture
def state(camera):
    return SceneState(camera=camera)


def make_sphere(position=(0, 0, -5), radius=1.0, name="sphere"):
    return Visual(shape=SphereShape(radius), position=position, color=(0.2, 0.4, 0.6), name=name)


def make_box(position=(0, 0, -5), size=(1.0, 1.0, 1.0), name="box"):
    return Visual(shape=BoxShape(size), position=position, color=(0.6, 0.4, 0.2), name=name)

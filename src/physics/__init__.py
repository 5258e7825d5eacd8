from .shapes import SphereShape, BoxShape, PlaneShape, Shape
from .world import Body, PhysicsWorld, create_world
from .stepper import SimulationStepper

__all__ = [
    "SphereShape",
    "BoxShape",
    "PlaneShape",
    "Shape",
    "Body",
    "PhysicsWorld",
    "create_world",
    "SimulationStepper",
]

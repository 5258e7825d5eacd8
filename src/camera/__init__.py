from .camera import Camera
from .orbit import OrbitController
from .scroll_rig import ScrollCameraRig, ScrollMapping, scroll_progress

__all__ = [
    "Camera",
    "OrbitController",
    "ScrollCameraRig",
    "ScrollMapping",
    "scroll_progress",
]

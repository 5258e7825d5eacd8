"""Scroll-driven camera offset.

Maps a scroll offset to one camera position component with a fixed
function. The mapping is stateless: re-applying it with the same scroll
value gives the same camera position, so it is re-evaluated every tick.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

_MODES = ("linear", "sine")


def scroll_progress(offset: float, max_offset: float) -> float:
    """Normalized scroll progress in [0, 1]; 0 when there is nothing to scroll."""
    if not max_offset > 0.0 or not math.isfinite(max_offset):
        return 0.0
    return max(0.0, min(1.0, float(offset) / float(max_offset)))


@dataclass(frozen=True)
class ScrollMapping:
    """``base + scale * f(value)`` where f is identity or ``sin(2*pi*frequency*value)``.

    With ``normalized`` the value is the scroll progress (0..1), otherwise the
    raw pixel offset.
    """

    base: float
    scale: float = 0.01
    mode: str = "linear"
    normalized: bool = False
    frequency: float = 1.0

    def __post_init__(self) -> None:
        if self.mode not in _MODES:
            raise ValueError(f"scroll mapping mode must be one of {_MODES}, got {self.mode!r}")

    def __call__(self, offset: float, max_offset: float) -> float:
        if self.normalized:
            value = scroll_progress(offset, max_offset)
        else:
            value = float(offset) if math.isfinite(offset) else 0.0
        if self.mode == "linear":
            return self.base + self.scale * value
        return self.base + self.scale * math.sin(2.0 * math.pi * self.frequency * value)


class ScrollCameraRig:
    def __init__(self, camera, mapping: ScrollMapping, axis: str = "z") -> None:
        if axis not in ("x", "y", "z"):
            raise ValueError(f"axis must be x, y or z, got {axis!r}")
        self.camera = camera
        self.mapping = mapping
        self.axis = axis

    def apply(self, scroll) -> float:
        """Write the mapped value for ``scroll`` (offset/max_offset) onto the camera."""
        value = self.mapping(scroll.offset, scroll.max_offset)
        setattr(self.camera.position, self.axis, value)
        return value


__all__ = ["scroll_progress", "ScrollMapping", "ScrollCameraRig"]

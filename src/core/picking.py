"""Pointer picking: ray casting from the camera and selection highlighting.

``pick()`` returns the interactive visual whose surface is nearest along
the pointer ray. Candidates are visited in insertion order and replaced
only by a hit that is nearer by more than ``TIE_EPSILON``, so equidistant
candidates always resolve to the one inserted first.

Two selection policies are available (``PickingPolicy``):

- PERSISTENT: a pick (click) first restores the previous selection, then
  highlights the new hit, if any. A click on empty space clears the
  selection. The selection survives across ticks.
- HOVER: every tick all interactive visuals are restored, then only the
  visual under the pointer is highlighted for that tick.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from pygame.math import Vector3

from core.loop_config import PickingPolicy
from core.scene import SceneState
from core.visual import Color, Visual
from physics.math3d import quat_conjugate, quat_rotate
from physics.shapes import BoxShape, PlaneShape, SphereShape

logger = logging.getLogger(__name__)

TIE_EPSILON = 1e-9
_EPS = 1e-12


@dataclass(frozen=True)
class Ray:
    origin: Vector3
    direction: Vector3  # unit length

    def at(self, t: float) -> Vector3:
        return self.origin + self.direction * t


def ray_from_camera(camera, ndc: Tuple[float, float]) -> Ray:
    origin, direction = camera.ray_from_ndc(ndc[0], ndc[1])
    return Ray(origin, direction)


# ---------------------------------------------------------------------------
# Intersection tests: each returns the smallest positive distance or None
# ---------------------------------------------------------------------------
def intersect_sphere(ray: Ray, center: Vector3, radius: float) -> Optional[float]:
    oc = ray.origin - center
    b = oc.dot(ray.direction)
    c = oc.dot(oc) - radius * radius
    disc = b * b - c
    if disc < 0.0:
        return None
    root = math.sqrt(disc)
    t = -b - root
    if t > _EPS:
        return t
    t = -b + root  # origin inside the sphere
    return t if t > _EPS else None


def _to_local(ray: Ray, visual: Visual) -> Ray:
    inv = quat_conjugate(visual.orientation)
    return Ray(
        quat_rotate(inv, ray.origin - visual.position),
        quat_rotate(inv, ray.direction),
    )


def intersect_box(ray: Ray, visual: Visual) -> Optional[float]:
    """Slab test against the visual's oriented, scaled box."""
    local = _to_local(ray, visual)
    half = visual.shape.half_extents * visual.scale
    t_near, t_far = -math.inf, math.inf
    for i in range(3):
        o, d = local.origin[i], local.direction[i]
        if abs(d) < _EPS:
            if o < -half[i] or o > half[i]:
                return None
            continue
        t1 = (-half[i] - o) / d
        t2 = (half[i] - o) / d
        if t1 > t2:
            t1, t2 = t2, t1
        t_near = max(t_near, t1)
        t_far = min(t_far, t2)
        if t_near > t_far:
            return None
    if t_far <= _EPS:
        return None
    return t_near if t_near > _EPS else t_far


def intersect_plane(ray: Ray, visual: Visual) -> Optional[float]:
    """Hit on the finite, double-sided plane rectangle (local XZ)."""
    local = _to_local(ray, visual)
    d = local.direction.y
    if abs(d) < _EPS:
        return None
    t = -local.origin.y / d
    if t <= _EPS:
        return None
    hit = local.at(t)
    hw = 0.5 * visual.shape.width * visual.scale
    hd = 0.5 * visual.shape.depth * visual.scale
    if abs(hit.x) > hw or abs(hit.z) > hd:
        return None
    return t


def intersect(ray: Ray, visual: Visual) -> Optional[float]:
    shape = visual.shape
    if not visual.visible or shape is None:
        return None
    if isinstance(shape, SphereShape):
        return intersect_sphere(ray, visual.position, shape.radius * visual.scale)
    if isinstance(shape, BoxShape):
        return intersect_box(ray, visual)
    if isinstance(shape, PlaneShape):
        return intersect_plane(ray, visual)
    return None


def pick(pointer_ndc: Tuple[float, float], camera, interactive: Iterable[Visual]) -> Optional[Visual]:
    """Nearest interactive visual under ``pointer_ndc`` or None."""
    return pick_ray(ray_from_camera(camera, pointer_ndc), interactive)[0]


def pick_ray(ray: Ray, interactive: Iterable[Visual]) -> Tuple[Optional[Visual], Optional[float]]:
    best: Optional[Visual] = None
    best_t: Optional[float] = None
    for visual in interactive:
        t = intersect(ray, visual)
        if t is None:
            continue
        if best_t is None or t < best_t - TIE_EPSILON:
            best, best_t = visual, t
    return best, best_t


def _beyond_far(camera, ray: Ray, t: float) -> bool:
    """True when the hit lies past the far clip plane and is not drawn."""
    return -camera.world_to_camera(ray.at(t))[2] > camera.far


# ---------------------------------------------------------------------------
class Picker:
    """Applies the configured selection policy to a ``SceneState``.

    With ``click_impulse > 0`` a click on a visual that is paired with a
    body asks the stepper to push that body along the pointer ray.
    """

    def __init__(
        self,
        policy: PickingPolicy = PickingPolicy.PERSISTENT,
        *,
        highlight_color: Color = (1.0, 0.85, 0.2),
        highlight_scale: float = 1.2,
        require_armed: bool = True,
        stepper=None,
        click_impulse: float = 0.0,
    ) -> None:
        self.policy = policy
        self.highlight_color = tuple(highlight_color)
        self.highlight_scale = float(highlight_scale)
        self.require_armed = require_armed
        self.stepper = stepper
        self.click_impulse = float(click_impulse)

    def _cast(self, state: SceneState) -> Tuple[Optional[Visual], Ray]:
        ray = ray_from_camera(state.camera, state.pointer.ndc)
        if self.require_armed and not state.pointer.armed:
            return None, ray
        hit, t = pick_ray(ray, state.interactive)
        if hit is not None and _beyond_far(state.camera, ray, t):
            return None, ray
        return hit, ray

    def select(self, state: SceneState) -> Optional[Visual]:
        """Persistent pick: reset the previous selection, highlight the new hit."""
        hit, ray = self._cast(state)
        previous = state.selection
        if previous is not None:
            previous.reset_appearance()
        if hit is not None:
            hit.highlight(self.highlight_color, self.highlight_scale)
        state.selection = hit
        if hit is not previous:
            logger.debug("Selection changed: %r -> %r", previous, hit)
        if hit is not None:
            self._push(state, hit, ray)
        return hit

    def hover(self, state: SceneState) -> Optional[Visual]:
        """Transient pick: reset every interactive visual, highlight the hit for this tick."""
        for visual in state.interactive:
            visual.reset_appearance()
        hit, _ = self._cast(state)
        if hit is not None:
            hit.highlight(self.highlight_color, self.highlight_scale)
        state.selection = hit
        return hit

    def clear(self, state: SceneState) -> None:
        if state.selection is not None:
            state.selection.reset_appearance()
        state.selection = None

    def on_click(self, state: SceneState) -> Optional[Visual]:
        if self.policy is PickingPolicy.PERSISTENT:
            return self.select(state)
        if self.policy is PickingPolicy.HOVER:
            # Hover highlights every tick on its own; a click only pushes
            hit, ray = self._cast(state)
            if hit is not None:
                self._push(state, hit, ray)
            return hit
        return None

    def on_tick(self, state: SceneState) -> Optional[Visual]:
        if self.policy is PickingPolicy.HOVER:
            return self.hover(state)
        return state.selection

    def _push(self, state: SceneState, visual: Visual, ray: Ray) -> None:
        if self.stepper is None or self.click_impulse <= 0.0:
            return
        body = state.body_for(visual)
        if body is None or body.is_static:
            return
        self.stepper.apply_impulse(body.handle, ray.direction * self.click_impulse)


__all__ = [
    "Ray",
    "ray_from_camera",
    "intersect",
    "intersect_sphere",
    "intersect_box",
    "intersect_plane",
    "pick",
    "pick_ray",
    "Picker",
    "TIE_EPSILON",
]

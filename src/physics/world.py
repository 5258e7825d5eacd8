"""Small rigid-body world used by the frame loop.

Integrates dynamic bodies with semi-implicit Euler and resolves contacts
pairwise after every substep (positional correction followed by a normal
impulse with restitution and a Coulomb friction impulse). Contacts move
bodies linearly only; spin comes from impulses applied off-centre.

Supported contact pairs:
- sphere / plane, box / plane
- sphere / sphere, sphere / box
- box / box (world-aligned bounds of the rotated boxes)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pygame.math import Vector3

from physics.math3d import (
    IDENTITY,
    Quaternion,
    quat_conjugate,
    quat_integrate,
    quat_normalize,
    quat_rotate,
)
from physics.shapes import BoxShape, PlaneShape, Shape, SphereShape

logger = logging.getLogger(__name__)

# Below this approach speed (m/s) a contact is treated as resting: no bounce
RESTING_SPEED = 0.5
_UP = Vector3(0, 1, 0)

Contact = Tuple[Vector3, float]  # (normal pointing from b towards a, depth)


@dataclass
class Body:
    handle: int
    shape: Shape
    mass: float
    position: Vector3
    orientation: Quaternion = IDENTITY
    velocity: Vector3 = field(default_factory=lambda: Vector3(0, 0, 0))
    angular_velocity: Vector3 = field(default_factory=lambda: Vector3(0, 0, 0))
    restitution: float = 0.3
    friction: float = 0.4

    @property
    def is_static(self) -> bool:
        return self.mass == 0.0

    @property
    def inv_mass(self) -> float:
        return 0.0 if self.is_static else 1.0 / self.mass

    def world_corners(self) -> List[Vector3]:
        if not isinstance(self.shape, BoxShape):
            return []
        return [self.position + quat_rotate(self.orientation, c) for c in self.shape.corners()]


class PhysicsWorld:
    def __init__(
        self,
        gravity: Sequence[float] = (0.0, -9.82, 0.0),
        *,
        linear_damping: float = 0.01,
        angular_damping: float = 0.05,
    ) -> None:
        self.gravity = Vector3(gravity)
        self.linear_damping = float(linear_damping)
        self.angular_damping = float(angular_damping)
        self._bodies: Dict[int, Body] = {}
        self._next_handle = 0
        self.time = 0.0

    # ------------------------------------------------------------------
    def add_body(
        self,
        shape: Shape,
        mass: float,
        position: Sequence[float] = (0.0, 0.0, 0.0),
        orientation: Quaternion = IDENTITY,
        *,
        restitution: float = 0.3,
        friction: float = 0.4,
    ) -> int:
        """Register a body and return its handle.

        Raises ValueError for negative/non-finite mass or a dynamic plane.
        """
        mass = float(mass)
        if not math.isfinite(mass) or mass < 0.0:
            raise ValueError(f"body mass must be finite and >= 0, got {mass!r}")
        if isinstance(shape, PlaneShape) and mass > 0.0:
            raise ValueError("planes can only be static (mass = 0)")
        if not isinstance(shape, (SphereShape, BoxShape, PlaneShape)):
            raise ValueError(f"unsupported shape {shape!r}")
        if not 0.0 <= restitution <= 1.0:
            raise ValueError(f"restitution must be in [0, 1], got {restitution!r}")

        handle = self._next_handle
        self._next_handle += 1
        self._bodies[handle] = Body(
            handle=handle,
            shape=shape,
            mass=mass,
            position=Vector3(position),
            orientation=quat_normalize(tuple(orientation)),
            restitution=float(restitution),
            friction=max(0.0, float(friction)),
        )
        return handle

    def body(self, handle: int) -> Body:
        try:
            return self._bodies[handle]
        except KeyError:
            raise KeyError(f"unknown body handle {handle!r}") from None

    @property
    def bodies(self) -> List[Body]:
        return list(self._bodies.values())

    def remove_all(self) -> None:
        self._bodies.clear()

    def get_transform(self, handle: int) -> Tuple[Vector3, Quaternion]:
        b = self.body(handle)
        return b.position.copy(), b.orientation

    # ------------------------------------------------------------------
    def apply_impulse(
        self, handle: int, impulse: Sequence[float], point: Optional[Sequence[float]] = None
    ) -> None:
        """Change a body's momentum instantly.

        ``point`` is a world-space application point; when it is off the
        body's centre the impulse also adds angular velocity. Static bodies
        ignore impulses.
        """
        b = self.body(handle)
        if b.is_static:
            logger.debug("Ignoring impulse on static body %d", handle)
            return
        j = Vector3(impulse)
        b.velocity += j * b.inv_mass
        if point is None:
            return
        r = Vector3(point) - b.position
        torque = r.cross(j)
        if torque.length_squared() == 0.0:
            return
        inertia = b.shape.inertia(b.mass)
        # Solve in body space where the inertia tensor is diagonal
        local = quat_rotate(quat_conjugate(b.orientation), torque)
        local = Vector3(
            local.x / inertia.x if inertia.x else 0.0,
            local.y / inertia.y if inertia.y else 0.0,
            local.z / inertia.z if inertia.z else 0.0,
        )
        b.angular_velocity += quat_rotate(b.orientation, local)

    # ------------------------------------------------------------------
    def step(self, dt: float, substeps: int = 1) -> None:
        if dt <= 0.0:
            return
        substeps = max(1, int(substeps))
        h = dt / substeps
        dynamic = [b for b in self._bodies.values() if not b.is_static]
        pairs = [
            (a, b)
            for a, b in combinations(self._bodies.values(), 2)
            if not (a.is_static and b.is_static)
        ]
        for _ in range(substeps):
            self._integrate(dynamic, h)
            self._resolve(pairs)
            self.time += h

    def _integrate(self, bodies: Iterable[Body], h: float) -> None:
        lin = max(0.0, 1.0 - self.linear_damping * h)
        ang = max(0.0, 1.0 - self.angular_damping * h)
        for b in bodies:
            b.velocity += self.gravity * h
            b.velocity *= lin
            b.position += b.velocity * h
            b.angular_velocity *= ang
            b.orientation = quat_integrate(b.orientation, b.angular_velocity, h)

    def _resolve(self, pairs: Iterable[Tuple[Body, Body]]) -> None:
        for a, b in pairs:
            contact = collide(a, b)
            if contact is None:
                continue
            normal, depth = contact
            _resolve_contact(a, b, normal, depth)


# ---------------------------------------------------------------------------
# Narrow phase
# ---------------------------------------------------------------------------
def collide(a: Body, b: Body) -> Optional[Contact]:
    """Return (normal, depth) pushing ``a`` out of ``b``, or None."""
    sa, sb = a.shape, b.shape
    if isinstance(sa, PlaneShape) and not isinstance(sb, PlaneShape):
        flipped = collide(b, a)
        if flipped is None:
            return None
        return -flipped[0], flipped[1]

    if isinstance(sb, PlaneShape):
        if isinstance(sa, SphereShape):
            return _sphere_plane(a, b)
        if isinstance(sa, BoxShape):
            return _box_plane(a, b)
        return None
    if isinstance(sa, SphereShape) and isinstance(sb, SphereShape):
        return _sphere_sphere(a, b)
    if isinstance(sa, SphereShape) and isinstance(sb, BoxShape):
        return _sphere_box(a, b)
    if isinstance(sa, BoxShape) and isinstance(sb, SphereShape):
        flipped = _sphere_box(b, a)
        if flipped is None:
            return None
        return -flipped[0], flipped[1]
    if isinstance(sa, BoxShape) and isinstance(sb, BoxShape):
        return _box_box(a, b)
    return None


def _plane_normal(plane: Body) -> Vector3:
    return quat_rotate(plane.orientation, _UP)


def _sphere_plane(s: Body, p: Body) -> Optional[Contact]:
    n = _plane_normal(p)
    dist = (s.position - p.position).dot(n) - s.shape.radius
    if dist >= 0.0:
        return None
    return n, -dist


def _box_plane(box: Body, p: Body) -> Optional[Contact]:
    n = _plane_normal(p)
    lowest = min((c - p.position).dot(n) for c in box.world_corners())
    if lowest >= 0.0:
        return None
    return n, -lowest


def _sphere_sphere(a: Body, b: Body) -> Optional[Contact]:
    d = a.position - b.position
    dist = d.length()
    depth = a.shape.radius + b.shape.radius - dist
    if depth <= 0.0:
        return None
    n = d / dist if dist > 1e-9 else Vector3(_UP)
    return n, depth


def _sphere_box(s: Body, box: Body) -> Optional[Contact]:
    half = box.shape.half_extents
    inv = quat_conjugate(box.orientation)
    local = quat_rotate(inv, s.position - box.position)
    closest = Vector3(
        max(-half.x, min(half.x, local.x)),
        max(-half.y, min(half.y, local.y)),
        max(-half.z, min(half.z, local.z)),
    )
    diff = local - closest
    dist = diff.length()
    r = s.shape.radius
    if dist >= r:
        return None
    if dist > 1e-9:
        n_local = diff / dist
        depth = r - dist
    else:
        # Centre inside the box: push out through the nearest face
        gaps = [half[i] - abs(local[i]) for i in range(3)]
        axis = min(range(3), key=lambda i: gaps[i])
        n_local = Vector3(0, 0, 0)
        n_local[axis] = 1.0 if local[axis] >= 0.0 else -1.0
        depth = r + gaps[axis]
    return quat_rotate(box.orientation, n_local), depth


def _bounds(corners: List[Vector3]) -> Tuple[Vector3, Vector3]:
    lo = Vector3(min(c.x for c in corners), min(c.y for c in corners), min(c.z for c in corners))
    hi = Vector3(max(c.x for c in corners), max(c.y for c in corners), max(c.z for c in corners))
    return lo, hi


def _box_box(a: Body, b: Body) -> Optional[Contact]:
    a_lo, a_hi = _bounds(a.world_corners())
    b_lo, b_hi = _bounds(b.world_corners())
    best_axis = -1
    best_depth = math.inf
    for i in range(3):
        overlap = min(a_hi[i], b_hi[i]) - max(a_lo[i], b_lo[i])
        if overlap <= 0.0:
            return None
        if overlap < best_depth:
            best_depth = overlap
            best_axis = i
    n = Vector3(0, 0, 0)
    n[best_axis] = 1.0 if a.position[best_axis] >= b.position[best_axis] else -1.0
    return n, best_depth


def _resolve_contact(a: Body, b: Body, n: Vector3, depth: float) -> None:
    inv_a, inv_b = a.inv_mass, b.inv_mass
    total = inv_a + inv_b
    if total == 0.0:
        return

    a.position += n * (depth * inv_a / total)
    b.position -= n * (depth * inv_b / total)

    rel = a.velocity - b.velocity
    vn = rel.dot(n)
    if vn >= 0.0:
        return
    e = min(a.restitution, b.restitution) if -vn > RESTING_SPEED else 0.0
    j = -(1.0 + e) * vn / total
    a.velocity += n * (j * inv_a)
    b.velocity -= n * (j * inv_b)

    tangent = rel - n * vn
    vt = tangent.length()
    if vt <= 1e-9:
        return
    mu = math.sqrt(a.friction * b.friction)
    jt = min(vt / total, mu * j)
    t = tangent / vt
    a.velocity -= t * (jt * inv_a)
    b.velocity += t * (jt * inv_b)


def create_world(gravity: Sequence[float] = (0.0, -9.82, 0.0)) -> PhysicsWorld:
    return PhysicsWorld(gravity)


__all__ = ["Body", "PhysicsWorld", "create_world", "collide", "RESTING_SPEED"]

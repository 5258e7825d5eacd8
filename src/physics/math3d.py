"""Quaternion helpers for body and visual orientation.

Quaternions are plain ``(w, x, y, z)`` tuples so they can be copied and
compared exactly; vectors are ``pygame.math.Vector3``.
"""

from __future__ import annotations

import math
from typing import Tuple

from pygame.math import Vector3

Quaternion = Tuple[float, float, float, float]  # (w, x, y, z)

IDENTITY: Quaternion = (1.0, 0.0, 0.0, 0.0)
TWO_PI = 2.0 * math.pi

AXES = {
    "x": Vector3(1, 0, 0),
    "y": Vector3(0, 1, 0),
    "z": Vector3(0, 0, 1),
}


def quat_normalize(q: Quaternion) -> Quaternion:
    length = math.sqrt(sum(c * c for c in q))
    if length == 0:
        return IDENTITY
    return (q[0] / length, q[1] / length, q[2] / length, q[3] / length)


def quat_multiply(a: Quaternion, b: Quaternion) -> Quaternion:
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return (
        aw * bw - ax * bx - ay * by - az * bz,
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
    )


def quat_conjugate(q: Quaternion) -> Quaternion:
    return (q[0], -q[1], -q[2], -q[3])


def quat_from_axis_angle(axis: Vector3, angle: float) -> Quaternion:
    axis_length = axis.length()
    if axis_length == 0:
        return IDENTITY
    half = 0.5 * angle
    s = math.sin(half) / axis_length
    return (math.cos(half), axis.x * s, axis.y * s, axis.z * s)


def quat_rotate(q: Quaternion, v: Vector3) -> Vector3:
    """Rotate vector ``v`` by unit quaternion ``q``."""
    w, x, y, z = q
    u = Vector3(x, y, z)
    uv = u.cross(v)
    uuv = u.cross(uv)
    return v + (uv * w + uuv) * 2.0


def quat_integrate(q: Quaternion, angular_velocity: Vector3, dt: float) -> Quaternion:
    """Advance orientation by a constant angular velocity over ``dt``."""
    omega = angular_velocity.length()
    if omega == 0.0:
        return q
    delta = quat_from_axis_angle(angular_velocity / omega, omega * dt)
    return quat_normalize(quat_multiply(delta, q))


def quat_to_axis_angle(q: Quaternion) -> Tuple[float, Vector3]:
    """Return (angle_radians, unit_axis); identity maps to (0, +Y)."""
    w, x, y, z = quat_normalize(q)
    w = max(-1.0, min(1.0, w))
    angle = 2.0 * math.acos(w)
    s = math.sqrt(max(0.0, 1.0 - w * w))
    if s < 1e-9:
        return 0.0, Vector3(0, 1, 0)
    return angle, Vector3(x / s, y / s, z / s)


def wrap_angle(angle: float) -> float:
    """Wrap into [0, 2*pi) so long-running accumulators don't drift."""
    return angle % TWO_PI


__all__ = [
    "Quaternion",
    "IDENTITY",
    "AXES",
    "quat_normalize",
    "quat_multiply",
    "quat_conjugate",
    "quat_from_axis_angle",
    "quat_rotate",
    "quat_integrate",
    "quat_to_axis_angle",
    "wrap_angle",
]

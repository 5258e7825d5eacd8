"""Fixed-function OpenGL renderer for a ``SceneState``.

Draws every visible visual with the legacy pipeline: spheres through a GLU
quadric, boxes and planes as immediate-mode quads, and point clouds from
their particle buffer via a client-side vertex array. Lighting is one
ambient term plus a directional "moon" light taken from ``state.lights``.

The renderer only reads scene state; it never mutates it.
"""

from __future__ import annotations

import math

import numpy as np
from OpenGL.GL import (
    GL_AMBIENT,
    GL_COLOR_BUFFER_BIT,
    GL_COLOR_MATERIAL,
    GL_DEPTH_BUFFER_BIT,
    GL_DEPTH_TEST,
    GL_DIFFUSE,
    GL_DOUBLE,
    GL_LEQUAL,
    GL_LIGHT0,
    GL_LIGHT_MODEL_AMBIENT,
    GL_LIGHTING,
    GL_MODELVIEW,
    GL_NORMALIZE,
    GL_POINTS,
    GL_POSITION,
    GL_PROJECTION,
    GL_QUADS,
    GL_VERTEX_ARRAY,
    glBegin,
    glClear,
    glClearColor,
    glColor3f,
    glDepthFunc,
    glDisable,
    glDisableClientState,
    glDrawArrays,
    glEnable,
    glEnableClientState,
    glEnd,
    glLightfv,
    glLightModelfv,
    glLoadIdentity,
    glMatrixMode,
    glNormal3f,
    glPointSize,
    glPopMatrix,
    glPushMatrix,
    glRotatef,
    glScalef,
    glTranslatef,
    glVertex3f,
    glVertexPointer,
    glViewport,
)
from OpenGL.GLU import gluNewQuadric, gluPerspective, gluSphere

from core.visual import PointCloud, Visual
from physics.math3d import quat_to_axis_angle
from physics.shapes import BoxShape, PlaneShape, SphereShape

# Unit cube faces: (normal, 4 corners) with corners in [-1, 1]
_CUBE_FACES = (
    ((0, 0, 1), ((-1, -1, 1), (1, -1, 1), (1, 1, 1), (-1, 1, 1))),
    ((0, 0, -1), ((1, -1, -1), (-1, -1, -1), (-1, 1, -1), (1, 1, -1))),
    ((0, 1, 0), ((-1, 1, 1), (1, 1, 1), (1, 1, -1), (-1, 1, -1))),
    ((0, -1, 0), ((-1, -1, -1), (1, -1, -1), (1, -1, 1), (-1, -1, 1))),
    ((1, 0, 0), ((1, -1, 1), (1, -1, -1), (1, 1, -1), (1, 1, 1))),
    ((-1, 0, 0), ((-1, -1, -1), (-1, -1, 1), (-1, 1, 1), (-1, 1, -1))),
)


class Renderer:  # pragma: no cover - visual
    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._quadric = gluNewQuadric()
        glEnable(GL_DEPTH_TEST)
        glDepthFunc(GL_LEQUAL)
        glEnable(GL_NORMALIZE)
        glEnable(GL_COLOR_MATERIAL)
        self.resize(width, height)

    def resize(self, width: int, height: int) -> None:
        self.width, self.height = width, height
        glViewport(0, 0, width, height)

    # ------------------------------------------------------------------
    def render(self, state, camera) -> None:
        glClearColor(*state.background)
        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)

        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        gluPerspective(camera.fov, camera.aspect, camera.near, camera.far)

        glMatrixMode(GL_MODELVIEW)
        glLoadIdentity()
        glRotatef(math.degrees(-camera.rotation.x), 1, 0, 0)
        glRotatef(math.degrees(-camera.rotation.y), 0, 1, 0)
        glTranslatef(-camera.position.x, -camera.position.y, -camera.position.z)

        # Light positions are given after the view transform so they stay in world space
        self._apply_lights(state.lights)

        for visual in state.visuals:
            if not visual.visible:
                continue
            if isinstance(visual, PointCloud):
                self._draw_points(visual)
            else:
                self._draw_visual(visual)

    def _apply_lights(self, lights) -> None:
        glEnable(GL_LIGHTING)
        ambient = [0.0, 0.0, 0.0, 1.0]
        glDisable(GL_LIGHT0)
        for light in lights:
            r, g, b = light["color"]
            k = light["intensity"]
            if light["type"] == "ambient":
                ambient = [ambient[0] + r * k, ambient[1] + g * k, ambient[2] + b * k, 1.0]
            elif light["type"] == "directional":
                x, y, z = light["position"]
                glEnable(GL_LIGHT0)
                # w = 0: directional light coming from `position` toward the origin
                glLightfv(GL_LIGHT0, GL_POSITION, (x, y, z, 0.0))
                glLightfv(GL_LIGHT0, GL_DIFFUSE, (r * k, g * k, b * k, 1.0))
                glLightfv(GL_LIGHT0, GL_AMBIENT, (0.0, 0.0, 0.0, 1.0))
        glLightModelfv(GL_LIGHT_MODEL_AMBIENT, ambient)

    def _draw_visual(self, visual: Visual) -> None:
        shape = visual.shape
        if shape is None:
            return
        glPushMatrix()
        glTranslatef(visual.position.x, visual.position.y, visual.position.z)
        angle, axis = quat_to_axis_angle(visual.orientation)
        if angle != 0.0:
            glRotatef(math.degrees(angle), axis.x, axis.y, axis.z)
        glScalef(visual.scale, visual.scale, visual.scale)
        glColor3f(*visual.color)

        if isinstance(shape, SphereShape):
            gluSphere(self._quadric, shape.radius, 20, 14)
        elif isinstance(shape, BoxShape):
            hx, hy, hz = shape.half_extents
            self._draw_cube(hx, hy, hz)
        elif isinstance(shape, PlaneShape):
            hw, hd = shape.width * 0.5, shape.depth * 0.5
            glBegin(GL_QUADS)
            glNormal3f(0.0, 1.0, 0.0)
            glVertex3f(-hw, 0.0, hd)
            glVertex3f(hw, 0.0, hd)
            glVertex3f(hw, 0.0, -hd)
            glVertex3f(-hw, 0.0, -hd)
            glEnd()
        glPopMatrix()

    @staticmethod
    def _draw_cube(hx: float, hy: float, hz: float) -> None:
        glBegin(GL_QUADS)
        for normal, corners in _CUBE_FACES:
            glNormal3f(*normal)
            for cx, cy, cz in corners:
                glVertex3f(cx * hx, cy * hy, cz * hz)
        glEnd()

    def _draw_points(self, cloud: PointCloud) -> None:
        if cloud.buffer.count == 0:
            return
        glDisable(GL_LIGHTING)
        glColor3f(*cloud.color)
        glPointSize(cloud.point_size)
        glEnableClientState(GL_VERTEX_ARRAY)
        glVertexPointer(3, GL_DOUBLE, 0, np.ascontiguousarray(cloud.buffer.data))
        glDrawArrays(GL_POINTS, 0, cloud.buffer.count)
        glDisableClientState(GL_VERTEX_ARRAY)
        glEnable(GL_LIGHTING)


__all__ = ["Renderer"]

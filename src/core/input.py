"""Input routing: turns pygame events into scene-state changes.

Pointer positions arrive in window pixels and are stored as NDC. Wheel
events move a virtual scroll offset that is clamped to the content range.
A window resize updates the camera aspect, the scroll range and (through
``on_resize``) the renderer viewport.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

import pygame

from config import SCROLL_PIXELS_PER_WHEEL
from core.scene import SceneState

logger = logging.getLogger(__name__)


def pixel_to_ndc(px: float, py: float, width: float, height: float) -> Tuple[float, float]:
    """Window pixel (origin top-left) to NDC (origin centre, +Y up)."""
    if width <= 0 or height <= 0:
        return 0.0, 0.0
    return (px / width) * 2.0 - 1.0, -(py / height) * 2.0 + 1.0


class InputRouter:
    def __init__(
        self,
        state: SceneState,
        *,
        width: int,
        height: int,
        content_height: float,
        on_click: Optional[Callable[[], object]] = None,
        orbit=None,
        on_resize: Optional[Callable[[int, int], None]] = None,
        wheel_pixels: float = SCROLL_PIXELS_PER_WHEEL,
    ) -> None:
        self.state = state
        self.width = int(width)
        self.height = int(height)
        self.content_height = float(content_height)
        self.on_click_cb = on_click
        self.orbit = orbit
        self.on_resize_cb = on_resize
        self.wheel_pixels = float(wheel_pixels)
        state.scroll.set_range(self.content_height, self.height)

    # ------------------------------------------------------------------
    def on_pointer_move(self, px: float, py: float) -> None:
        self.state.pointer.move_to(*pixel_to_ndc(px, py, self.width, self.height))

    def on_click(self):
        if self.on_click_cb is None:
            return None
        return self.on_click_cb()

    def on_scroll(self, wheel_y: float) -> None:
        # Wheel up (positive) scrolls back toward the top of the content
        self.state.scroll.scroll_by(-wheel_y * self.wheel_pixels)

    def on_drag(self, dx: float, dy: float) -> None:
        if self.orbit is not None:
            self.orbit.on_drag(dx, dy)

    def on_resize(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            return
        self.width, self.height = int(width), int(height)
        self.state.camera.set_aspect(width, height)
        self.state.scroll.set_range(self.content_height, height)
        if self.on_resize_cb is not None:
            self.on_resize_cb(self.width, self.height)
        logger.debug("Viewport resized to %dx%d", width, height)

    # ------------------------------------------------------------------
    def handle_event(self, event) -> None:
        if event.type == pygame.MOUSEMOTION:
            self.on_pointer_move(*event.pos)
            if event.buttons[2]:
                self.on_drag(*event.rel)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.on_pointer_move(*event.pos)
            self.on_click()
        elif event.type == pygame.MOUSEWHEEL:
            self.on_scroll(event.y)
        elif event.type == pygame.VIDEORESIZE:
            self.on_resize(event.w, event.h)


__all__ = ["pixel_to_ndc", "InputRouter"]

"""pygame window with an OpenGL context."""

from __future__ import annotations

import logging

import pygame

from config import FPS, FULLSCREEN, VSYNC

logger = logging.getLogger(__name__)


class Display:  # pragma: no cover - visual
    def __init__(self, width: int, height: int, caption: str = "Night Scene") -> None:
        pygame.init()
        pygame.display.gl_set_attribute(pygame.GL_DEPTH_SIZE, 24)
        pygame.display.gl_set_attribute(pygame.GL_MULTISAMPLEBUFFERS, 1)
        pygame.display.gl_set_attribute(pygame.GL_MULTISAMPLESAMPLES, 4)
        pygame.display.set_caption(caption)
        self.flags = pygame.DOUBLEBUF | pygame.OPENGL | pygame.RESIZABLE
        if FULLSCREEN:
            self.flags |= pygame.FULLSCREEN
        self.width, self.height = width, height
        try:
            # vsync: 1 to enable, 0 to disable
            pygame.display.set_mode((width, height), self.flags, vsync=(1 if VSYNC else 0))
        except pygame.error:
            # vsync requested but unavailable on this system/driver
            logger.warning("VSync unavailable; continuing without it")
            pygame.display.set_mode((width, height), self.flags)
        self.clock = pygame.time.Clock()
        logger.info("Display opened at %dx%d", width, height)

    def tick(self) -> float:
        """Wait for the next frame and return the elapsed time in seconds."""
        if not VSYNC:
            return self.clock.tick() / 1000.0
        return self.clock.tick(FPS) / 1000.0

    def resize(self, width: int, height: int) -> None:
        self.width, self.height = width, height

    def flip(self) -> None:
        pygame.display.flip()

    def close(self) -> None:
        pygame.quit()
        logger.info("Display closed")


__all__ = ["Display"]

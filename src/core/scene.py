"""Explicit scene state shared by the frame-loop components.

One ``SceneState`` is built at startup, populated, then sealed before the
loop starts. After sealing the body/visual pair list is fixed: no body is
spawned or despawned while the loop runs. Plain visuals (late-loading
assets) may still be added.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from camera.camera import Camera
from core.visual import Visual
from physics.world import Body, PhysicsWorld

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class BodyVisualPair:
    body: Body
    visual: Visual


class InteractiveSet:
    """Ordered set of pickable visuals (identity based, insertion ordered)."""

    def __init__(self, visuals=()):
        self._items: List[Visual] = []
        for v in visuals:
            self.add(v)

    def add(self, visual: Visual) -> bool:
        """Add ``visual``; return False if it was already present."""
        if visual in self:
            return False
        self._items.append(visual)
        return True

    def discard(self, visual: Visual) -> None:
        self._items = [v for v in self._items if v is not visual]

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, visual) -> bool:
        return any(v is visual for v in self._items)

    def __iter__(self) -> Iterator[Visual]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


@dataclass
class PointerState:
    """Last known pointer position in normalized device coordinates.

    ``armed`` stays False until the first real pointer-move event so that
    the default (0, 0) is never picked by accident.
    """

    x: float = 0.0
    y: float = 0.0
    armed: bool = False

    def move_to(self, x: float, y: float) -> None:
        self.x = max(-1.0, min(1.0, float(x)))
        self.y = max(-1.0, min(1.0, float(y)))
        self.armed = True

    @property
    def ndc(self) -> Tuple[float, float]:
        return self.x, self.y


@dataclass
class ScrollState:
    """Scroll offset in pixels and the largest offset the content allows."""

    offset: float = 0.0
    max_offset: float = 0.0

    def scroll_by(self, delta: float) -> None:
        self.scroll_to(self.offset + delta)

    def scroll_to(self, value: float) -> None:
        self.offset = max(0.0, min(float(value), self.max_offset))

    def set_range(self, content_height: float, viewport_height: float) -> None:
        self.max_offset = max(0.0, float(content_height) - float(viewport_height))
        self.scroll_to(self.offset)


@dataclass
class SceneState:
    camera: Camera
    world: Optional[PhysicsWorld] = None
    visuals: List[Visual] = field(default_factory=list)
    interactive: InteractiveSet = field(default_factory=InteractiveSet)
    pointer: PointerState = field(default_factory=PointerState)
    scroll: ScrollState = field(default_factory=ScrollState)
    selection: Optional[Visual] = None
    background: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)
    lights: List[dict] = field(default_factory=list)
    _pairs: List[BodyVisualPair] = field(default_factory=list)
    _body_by_visual: Dict[int, Body] = field(default_factory=dict)
    sealed: bool = False

    # ------------------------------------------------------------------
    def _require_unsealed(self, what: str) -> None:
        if self.sealed:
            raise RuntimeError(f"cannot {what} after the scene has been sealed")

    def add_visual(self, visual: Visual, *, interactive: bool = False) -> Visual:
        """Add a visual; allowed after sealing (e.g. for late-loading assets)."""
        self.visuals.append(visual)
        if interactive:
            self.interactive.add(visual)
        return visual

    def pair(self, body: Body, visual: Visual) -> BodyVisualPair:
        """Bind a body to its visual. Each body and each visual pairs once."""
        self._require_unsealed("pair bodies")
        if any(p.body is body for p in self._pairs):
            raise ValueError(f"body {body.handle} is already paired")
        if id(visual) in self._body_by_visual:
            raise ValueError(f"{visual!r} is already paired")
        if not any(v is visual for v in self.visuals):
            self.visuals.append(visual)
        pair = BodyVisualPair(body, visual)
        self._pairs.append(pair)
        self._body_by_visual[id(visual)] = body
        return pair

    def seal(self) -> None:
        self.sealed = True
        logger.debug(
            "Scene sealed: %d visuals, %d pairs, %d interactive",
            len(self.visuals),
            len(self._pairs),
            len(self.interactive),
        )

    @property
    def pairs(self) -> Tuple[BodyVisualPair, ...]:
        return tuple(self._pairs)

    def body_for(self, visual: Visual) -> Optional[Body]:
        return self._body_by_visual.get(id(visual))

    def teardown(self) -> None:
        """Release every pair, visual and body; the state is unusable afterwards."""
        self._pairs.clear()
        self._body_by_visual.clear()
        self.visuals.clear()
        self.interactive.clear()
        self.selection = None
        if self.world is not None:
            self.world.remove_all()
        self.sealed = True


__all__ = [
    "BodyVisualPair",
    "InteractiveSet",
    "PointerState",
    "ScrollState",
    "SceneState",
]

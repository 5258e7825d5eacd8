"""Transform synchronizer: copies simulated body transforms onto visuals.

Runs after the physics step and before rendering. Positions are copied (not
aliased) so a visual only ever changes here, once per tick, and always
shows the last completed step.
"""

from __future__ import annotations

from typing import Iterable

from core.scene import BodyVisualPair


def sync(pairs: Iterable[BodyVisualPair]) -> int:
    count = 0
    for pair in pairs:
        body = pair.body
        visual = pair.visual
        visual.position = body.position.copy()
        visual.orientation = body.orientation
        count += 1
    return count


__all__ = ["sync"]

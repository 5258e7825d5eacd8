"""Asynchronous model loading and per-tick model animation.

Models are small JSON descriptors (shape, transform, colour and a list of
animation tracks). Parsing happens on a worker thread; finished results are
handed over to the loop thread through ``AssetLoader.poll()``, which the
engine calls between ticks, so scene state is never touched concurrently.

A model that fails to load is logged and skipped: the scene simply runs
without it, and there is no retry.

Example descriptor::

    {
      "name": "fox",
      "shape": {"type": "box", "size": [0.6, 0.5, 1.2]},
      "position": [4, 0.25, -2],
      "color": [0.9, 0.45, 0.1],
      "animations": [
        {"name": "Survey", "type": "spin", "axis": "y", "rate": 0.6},
        {"name": "Walk", "type": "bob", "amplitude": 0.15, "frequency": 2.0}
      ],
      "default_animation": "Survey"
    }
"""

from __future__ import annotations

import json
import logging
import math
import os
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from core.visual import Visual
from physics.math3d import AXES, quat_from_axis_angle, quat_multiply
from physics.shapes import BoxShape, PlaneShape, SphereShape

logger = logging.getLogger(__name__)

_TRACK_TYPES = ("spin", "bob")


@dataclass(frozen=True)
class AnimationTrack:
    name: str
    type: str = "spin"
    axis: str = "y"
    rate: float = 1.0
    amplitude: float = 0.0
    frequency: float = 1.0

    def __post_init__(self) -> None:
        if self.type not in _TRACK_TYPES:
            raise ValueError(f"unknown animation track type {self.type!r}")
        if self.axis not in AXES:
            raise ValueError(f"unknown animation axis {self.axis!r}")


class AnimationMixer:
    """Plays one track of a model at a time; ``update(dt)`` advances it."""

    def __init__(self, visual: Visual, tracks: List[AnimationTrack]) -> None:
        self.visual = visual
        self.tracks: Dict[str, AnimationTrack] = {t.name: t for t in tracks}
        self.active: Optional[AnimationTrack] = None
        self.time = 0.0
        self._base_position = visual.position.copy()
        self._base_orientation = visual.orientation

    def play(self, name: str) -> None:
        try:
            self.active = self.tracks[name]
        except KeyError:
            raise KeyError(f"model has no animation named {name!r}") from None
        self.time = 0.0

    def update(self, dt: float) -> None:
        track = self.active
        if track is None:
            return
        self.time += dt
        if track.type == "spin":
            angle = (track.rate * self.time) % (2.0 * math.pi)
            spin = quat_from_axis_angle(AXES[track.axis], angle)
            self.visual.orientation = quat_multiply(spin, self._base_orientation)
        else:
            offset = track.amplitude * math.sin(2.0 * math.pi * track.frequency * self.time)
            self.visual.position = self._base_position + AXES[track.axis] * offset


@dataclass
class LoadedModel:
    name: str
    visual: Visual
    mixer: AnimationMixer


def _vec3(value, default: Tuple[float, float, float]) -> Tuple[float, float, float]:
    if value is None:
        return default
    if len(value) != 3:
        raise ValueError(f"expected 3 components, got {value!r}")
    return (float(value[0]), float(value[1]), float(value[2]))


def _shape_from(desc: dict):
    kind = desc.get("type")
    if kind == "sphere":
        return SphereShape(desc["radius"])
    if kind == "box":
        return BoxShape(tuple(desc["size"]))
    if kind == "plane":
        return PlaneShape(desc["width"], desc["depth"])
    raise ValueError(f"unknown model shape type {kind!r}")


def parse_model(data: dict) -> LoadedModel:
    """Build a model from an already-decoded descriptor."""
    name = str(data.get("name", "model"))
    shape = _shape_from(data.get("shape") or {})
    visual = Visual(
        shape=shape,
        position=_vec3(data.get("position"), (0.0, 0.0, 0.0)),
        color=_vec3(data.get("color"), (1.0, 1.0, 1.0)),
        scale=float(data.get("scale", 1.0)),
        name=name,
    )
    tracks = [AnimationTrack(**t) for t in data.get("animations", [])]
    mixer = AnimationMixer(visual, tracks)
    default = data.get("default_animation")
    if default is None and tracks:
        default = tracks[0].name
    if default is not None:
        mixer.play(default)
    return LoadedModel(name=name, visual=visual, mixer=mixer)


def load_model_descriptor(path: str) -> LoadedModel:
    """Read and parse a JSON model descriptor. Raises on any problem."""
    if not os.path.exists(path):
        raise FileNotFoundError(path)
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"model descriptor {path} must be a JSON object")
    return parse_model(data)


ReadyFn = Callable[[LoadedModel], None]


@dataclass
class _Pending:
    path: str
    future: Future
    on_ready: Optional[ReadyFn] = field(default=None)


class AssetLoader:
    def __init__(self, max_workers: int = 2, loader: Callable[[str], LoadedModel] = load_model_descriptor) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="assets")
        self._loader = loader
        self._pending: List[_Pending] = []
        self.failed: List[str] = []

    @property
    def pending(self) -> int:
        return len(self._pending)

    def load_async(self, path: str, on_ready: Optional[ReadyFn] = None) -> Future:
        logger.info("Loading model %s", path)
        future = self._executor.submit(self._loader, path)
        self._pending.append(_Pending(path, future, on_ready))
        return future

    def poll(self) -> List[LoadedModel]:
        """Collect finished loads on the calling (loop) thread."""
        ready: List[LoadedModel] = []
        still_pending: List[_Pending] = []
        try:
            for item in self._pending:
                if not item.future.done():
                    still_pending.append(item)
                    continue
                try:
                    model = item.future.result()
                except Exception as e:
                    logger.warning("Failed to load model %s: %s", item.path, e)
                    self.failed.append(item.path)
                    continue
                if item.on_ready is not None:
                    try:
                        item.on_ready(model)
                    except Exception:
                        logger.exception("Attaching model %s failed; skipping it", item.path)
                        self.failed.append(item.path)
                        continue
                ready.append(model)
        finally:
            # Delivered and failed items are never handed out again
            self._pending = still_pending
        return ready

    def wait(self, timeout: Optional[float] = None) -> List[LoadedModel]:
        """Block until every pending load finished, then poll. Used by tests and headless runs."""
        wait_futures([item.future for item in self._pending], timeout=timeout)
        return self.poll()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._pending.clear()


__all__ = [
    "AnimationTrack",
    "AnimationMixer",
    "LoadedModel",
    "parse_model",
    "load_model_descriptor",
    "AssetLoader",
]

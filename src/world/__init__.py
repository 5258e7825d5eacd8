"""World package: re-export common symbols for simpler imports.

Callers can import public types from `world` directly, e.g.:

    from world import build_night_scene, ParticleField, AssetLoader

The implementation files remain under `world/*.py`.
"""

from .animator import ParticleField, ProceduralAnimator, RotationAccumulator
from .assets import AnimationMixer, AnimationTrack, AssetLoader, LoadedModel, load_model_descriptor
from .nightscene import NightScene, build_night_scene
from .spawner import particle_positions, spawn_positions

__all__ = [
    "ParticleField",
    "ProceduralAnimator",
    "RotationAccumulator",
    "AnimationMixer",
    "AnimationTrack",
    "AssetLoader",
    "LoadedModel",
    "load_model_descriptor",
    "NightScene",
    "build_night_scene",
    "particle_positions",
    "spawn_positions",
]

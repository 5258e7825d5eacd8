"""Entry point kept minimal by delegating to Engine.

Parses the command line into a ``LoopConfig``, configures logging and runs
the engine until the window is closed (or ``--ticks`` frames in headless
mode).
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from config import FIXED_TIMESTEP
from core.engine import Engine
from core.loop_config import LoopConfig, PickingPolicy
from logging_config import parse_level, setup_logging

logger = logging.getLogger("main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Night scene with physics, fireflies and picking.")
    parser.add_argument(
        "--policy",
        choices=[p.value for p in PickingPolicy],
        default=PickingPolicy.PERSISTENT.value,
        help="selection policy: persistent (click), hover (every frame) or off",
    )
    parser.add_argument("--no-physics", action="store_true", help="disable the rigid body simulation")
    parser.add_argument("--no-particles", action="store_true", help="disable the falling fireflies")
    parser.add_argument("--no-scroll", action="store_true", help="disable the scroll-driven camera")
    parser.add_argument("--orbit", action="store_true", help="drag (right mouse) to orbit the camera; implies --no-scroll")
    parser.add_argument("--model", metavar="PATH", help="JSON model descriptor to load in the background")
    parser.add_argument("--seed", type=int, help="random seed for spawning")
    parser.add_argument("--substeps", type=int, default=None, help="physics substeps per frame")
    parser.add_argument(
        "--fixed-timestep",
        nargs="?",
        type=float,
        const=FIXED_TIMESTEP,
        default=None,
        metavar="SECONDS",
        help=f"use a fixed-timestep accumulator (default step {FIXED_TIMESTEP:.4f}s)",
    )
    parser.add_argument("--headless", action="store_true", help="run without a window")
    parser.add_argument("--ticks", type=int, default=None, help="stop after N frames")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ... (default: $LOG_LEVEL or INFO)")
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    return parser


def config_from_args(args: argparse.Namespace) -> LoopConfig:
    config = LoopConfig(
        physics=not args.no_physics,
        particles=not args.no_particles,
        picking=PickingPolicy(args.policy),
        scroll_camera=not (args.no_scroll or args.orbit),
        orbit_controls=args.orbit,
        model_path=args.model,
        fixed_timestep=args.fixed_timestep,
        seed=args.seed,
    )
    if args.substeps is not None:
        config.substeps = args.substeps
    return config.validate()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(parse_level(args.log_level) if args.log_level else None, args.log_file)
    try:
        config = config_from_args(args)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    engine = Engine(config, headless=args.headless)
    engine.initialize()
    try:
        engine.run(max_ticks=args.ticks)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        engine.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

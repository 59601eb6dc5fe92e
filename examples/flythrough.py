#!/usr/bin/env python3
"""Fly the camera through the random spheres scene in a GGUI window.

Usage:
    python examples/flythrough.py [--width 320] [--samples 4] [--seed 1]

The eye starts at (8, 2, 10) and moves 0.2 units along -z per frame. Close
the window to stop.
"""

from __future__ import annotations

import argparse
import logging
import sys

import stochray

logger = logging.getLogger("flythrough")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Random spheres fly-through.")
    parser.add_argument("--width", type=int, default=320, help="Window width (default: 320)")
    parser.add_argument("--samples", type=int, default=4, help="Samples per frame (default: 4)")
    parser.add_argument("--grid", type=int, default=10, help="Small sphere grid size (default: 10)")
    parser.add_argument("--seed", type=int, default=None, help="Scene seed (default: random)")
    parser.add_argument("--frames", type=int, default=None, help="Stop after this many frames")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    stochray.init()

    from stochray.preview.interactive import FlythroughPreview
    from stochray.scene.random_spheres import create_random_spheres_scene

    if not FlythroughPreview.is_display_available():
        logger.error("No display available for the preview window")
        return 1

    world, camera = create_random_spheres_scene(n=args.grid, seed=args.seed)
    height = camera.image_height(args.width)

    preview = FlythroughPreview(world, camera, args.width, height, args.samples)
    try:
        preview.run(frames=args.frames)
    finally:
        preview.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

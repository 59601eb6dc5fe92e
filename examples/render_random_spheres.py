#!/usr/bin/env python3
"""Render the random spheres scene to an image file.

Usage:
    python examples/render_random_spheres.py [options]

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --samples SAMPLES   Samples per pixel (default: 32)
    --grid N            Small sphere grid size (default: 10)
    --seed SEED         Scene seed (default: random)
    --depth DEPTH       Bounce limit (default: 50)
    --output OUTPUT     Output file path (default: random_spheres.png)
    --arch {cpu,gpu}    Taichi backend (default: try GPU, fall back to CPU)
    --show              Also show the result in a Matplotlib window

Example:
    python examples/render_random_spheres.py --width 200 --samples 16 --seed 3
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import taichi as ti

import stochray
from stochray.core.ray import DEFAULT_MAX_DEPTH

logger = logging.getLogger("render_random_spheres")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=400, help="Image width in pixels (default: 400)")
    parser.add_argument("--samples", type=int, default=32, help="Samples per pixel (default: 32)")
    parser.add_argument("--grid", type=int, default=10, help="Small sphere grid size (default: 10)")
    parser.add_argument("--seed", type=int, default=None, help="Scene seed (default: random)")
    parser.add_argument(
        "--depth", type=int, default=DEFAULT_MAX_DEPTH, help="Bounce limit (default: %(default)s)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default="random_spheres.png",
        help="Output file path (default: random_spheres.png)",
    )
    parser.add_argument("--arch", choices=("cpu", "gpu"), default=None, help="Taichi backend")
    parser.add_argument("--show", action="store_true", help="Show the result with Matplotlib")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def render_random_spheres(
    width: int = 400,
    num_samples: int = 32,
    grid: int = 10,
    seed: int | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    output_path: str = "random_spheres.png",
    show: bool = False,
) -> Path:
    """Render the random spheres scene and save it.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from stochray.preview.display import show_pixels
    from stochray.preview.export import save_image
    from stochray.scene.random_spheres import create_random_spheres_scene

    world, camera = create_random_spheres_scene(n=grid, seed=seed)
    height = camera.image_height(width)
    logger.info("Created %r", world)

    pixels = camera.render(world, width, height, num_samples, max_depth=max_depth)

    output_file = Path(output_path)
    save_image(pixels, width, height, output_file)
    logger.info("Saved to %s", output_file.absolute())

    if show:
        show_pixels(pixels, width, height, title=f"Random spheres - {num_samples} SPP")
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    arch = {"cpu": ti.cpu, "gpu": ti.gpu}.get(args.arch) if args.arch else None
    stochray.init(arch=arch)

    try:
        render_random_spheres(
            width=args.width,
            num_samples=args.samples,
            grid=args.grid,
            seed=args.seed,
            max_depth=args.depth,
            output_path=args.output,
            show=args.show,
        )
        return 0
    except (ValueError, RuntimeError) as e:
        logger.error("Render failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())

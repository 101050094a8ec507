#!/usr/bin/env python3
"""Render the random spheres scene.

A huge diffuse sphere serves as the ground, with a 16x16 grid of small
spheres scattered over it (80% diffuse, 15% metal, 5% glass) and three
large feature spheres: glass in the middle, clay on the left and a mirror
on the right.

Usage:
    python -m examples.render_random_spheres [options]

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 225)
    --samples SAMPLES   Number of samples per pixel (default: 50)
    --max-depth DEPTH   Maximum bounces per path (default: 50)
    --seed SEED         Seed for scene layout and sampling (default: 0)
    --arch ARCH         Taichi backend (default: cpu)
    --output OUTPUT     Output file path (default: random_spheres.png)
    --quiet             Only log warnings

Example:
    python -m examples.render_random_spheres --width 200 --height 112 --samples 16
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path

import numpy as np
from PIL import Image

from skylight.config import RenderSettings, configure_logging, init_taichi

logger = logging.getLogger("examples.render_random_spheres")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    defaults = RenderSettings()
    parser = argparse.ArgumentParser(
        description="Render the random spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=defaults.width,
        help=f"Image width in pixels (default: {defaults.width})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=defaults.height,
        help=f"Image height in pixels (default: {defaults.height})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=defaults.samples_per_pixel,
        help=f"Number of samples per pixel (default: {defaults.samples_per_pixel})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=defaults.max_depth,
        help=f"Maximum bounces per path (default: {defaults.max_depth})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for scene layout and sampling (default: 0)",
    )
    parser.add_argument(
        "--arch",
        type=str,
        default="cpu",
        help="Taichi backend: cpu, gpu, cuda or vulkan (default: cpu)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="random_spheres.png",
        help="Output file path (default: random_spheres.png)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings",
    )
    return parser.parse_args()


def build_scene(rng: np.random.Generator):
    """Populate a Scene with the random spheres layout."""
    from skylight.materials import Dielectric, Diffuse, Metal
    from skylight.scene import Scene, SphereShape

    scene = Scene()
    scene.insert(SphereShape((0.0, -1000.0, -1.0), 1000.0, Diffuse((0.8, 0.5, 0.9))))

    glass = Dielectric(refraction_index=1.5)
    for a in range(-8, 8):
        for b in range(-8, 8):
            center = (a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())
            # Keep clear of the mirror sphere
            if math.dist(center, (4.0, 0.2, 0.0)) <= 0.9:
                continue

            choose = rng.random()
            if choose < 0.8:
                material = Diffuse(tuple(rng.random(3)))
            elif choose < 0.95:
                material = Metal(tuple(0.5 * rng.random(3) + 0.5), fuzz=0.3 * rng.random())
            else:
                material = glass
            scene.insert(SphereShape(center, 0.2, material))

    scene.insert(SphereShape((0.0, 1.0, 0.0), 1.0, glass))
    scene.insert(SphereShape((4.0, 1.0, 0.0), 1.0, Metal((0.8, 0.8, 0.8), fuzz=0.0)))
    scene.insert(SphereShape((-4.0, 1.0, 0.0), 1.0, Diffuse((0.8, 0.5, 0.2))))
    return scene


def render_random_spheres(settings: RenderSettings, output_path: str, seed: int = 0) -> Path:
    """Render the random spheres scene and save it as a PNG.

    Args:
        settings: Image size, samples per pixel and bounce budget.
        output_path: Output file path (PNG).
        seed: Seed for the scene layout.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from skylight.camera import Camera
    from skylight.core.renderer import render_with_settings

    scene = build_scene(np.random.default_rng(seed))
    logger.info("Built scene with %d spheres", len(scene))

    eye = (13.0, 2.0, 3.0)
    camera = Camera(
        eye=eye,
        look_at=(0.0, 0.0, 0.0),
        up=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=settings.aspect_ratio,
        aperture=0.01,
        focus_dist=math.hypot(*eye),
    )

    result = render_with_settings(camera, scene, settings)

    output_file = Path(output_path)
    Image.fromarray(result.to_rgb8(), mode="RGB").save(output_file)
    logger.info("Saved to: %s", output_file.absolute())
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    configure_logging(logging.WARNING if args.quiet else logging.INFO)

    try:
        settings = RenderSettings(
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
        )
        init_taichi(arch=args.arch, random_seed=args.seed)
        render_random_spheres(settings, args.output, seed=args.seed)
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Render the cover scene (or the material showcase) to a PPM file.

This script demonstrates end-to-end rendering with the pathtracer package. It
builds the scene, renders it in row batches with a progress readout, and
streams the result to a plain-text PPM (P3) file. A log of the run is written
to pathtracer.log in the working directory.

Usage:
    python examples/render_cover.py [options]

Options:
    --width WIDTH           Image width in pixels (default: 400)
    --samples SAMPLES       Samples per pixel (default: 100)
    --max-depth DEPTH       Maximum ray bounces (default: 50)
    --seed SEED             Seed for scene layout and sampling (default: 0)
    --scene {cover,showcase}
                            Scene to render (default: cover)
    --output OUTPUT         Output file path (default: result/image.ppm)
    --arch {auto,cpu,gpu}   Taichi backend (default: auto)
    --quiet                 Suppress progress output

Example:
    python examples/render_cover.py --width 200 --samples 20 --seed 3
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path

import taichi as ti

LOG_FILE = "pathtracer.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] - %(filename)s:%(lineno)d - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the cover scene to a PPM image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum ray bounces (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for scene layout and sampling (default: 0)",
    )
    parser.add_argument(
        "--scene",
        choices=("cover", "showcase"),
        default="cover",
        help="Scene to render (default: cover)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="result/image.ppm",
        help="Output file path (default: result/image.ppm)",
    )
    parser.add_argument(
        "--arch",
        choices=("auto", "cpu", "gpu"),
        default="auto",
        help="Taichi backend (default: auto, GPU with CPU fallback)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def setup_logging() -> None:
    """Send INFO and above to the log file."""
    logging.basicConfig(
        filename=LOG_FILE,
        level=logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )


def init_taichi(arch: str, quiet: bool) -> None:
    """Initialize Taichi on the requested backend."""
    if arch == "cpu":
        ti.init(arch=ti.cpu)
    elif arch == "gpu":
        ti.init(arch=ti.gpu)
    else:
        # Use GPU if available, fall back to CPU
        try:
            ti.init(arch=ti.gpu)
        except RuntimeError:
            ti.init(arch=ti.cpu)

    backend = ti.lang.impl.current_cfg().arch
    logger.info("Taichi backend: %s", backend)
    if not quiet:
        print(f"Using {backend} backend")


def render_scene(
    scene_name: str = "cover",
    width: int = 400,
    samples: int = 100,
    max_depth: int = 50,
    seed: int = 0,
    output_path: str = "result/image.ppm",
    quiet: bool = False,
) -> Path:
    """Build the requested scene and render it to ``output_path``.

    Args:
        scene_name: "cover" or "showcase".
        width: Image width in pixels.
        samples: Samples per pixel.
        max_depth: Maximum ray bounces.
        seed: Seed for the scene layout and the render.
        output_path: Output file path (PPM). Missing directories are created.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.core.renderer import Renderer
    from pathtracer.scene.cover import (
        CoverSceneParams,
        create_cover_scene,
        create_material_showcase_scene,
    )

    if scene_name == "cover":
        params = replace(
            CoverSceneParams(),
            image_width=width,
            samples_per_pixel=samples,
            max_depth=max_depth,
        )
        scene, camera = create_cover_scene(seed=seed, params=params)
    else:
        scene, camera = create_material_showcase_scene(
            image_width=width,
            samples_per_pixel=samples,
            max_depth=max_depth,
        )

    if not quiet:
        print(
            f"Rendering {scene_name} scene ({camera.image_width}x{camera.image_height}, "
            f"{len(scene)} spheres, {camera.samples_per_pixel} spp)..."
        )

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    renderer = Renderer(camera, seed=seed)
    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (rows_done / total_rows) * 100 if total_rows > 0 else 0
            print(
                f"\r  Progress: {rows_done}/{total_rows} rows "
                f"({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    with output_file.open("wb") as sink:
        renderer.render(scene, sink, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    setup_logging()
    init_taichi(args.arch, args.quiet)

    try:
        render_scene(
            scene_name=args.scene,
            width=args.width,
            samples=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("Render failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

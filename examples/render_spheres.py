#!/usr/bin/env python3
"""Render a sphere scene with diffuse and metal materials.

By default the demo scene is rendered: a diffuse sphere between a polished
and a fuzzy metal sphere, all resting on a large ground sphere under a sky
gradient. A different scene can be loaded from a JSON file written by
SceneManager.save_json().

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH           Image width in pixels (default: 400)
    --height HEIGHT         Image height in pixels (default: 225)
    --samples SAMPLES       Number of samples per pixel (default: 100)
    --max-depth DEPTH       Maximum bounces per ray (default: 50)
    --output OUTPUT         Output file path (default: spheres.png)
    --scene SCENE           Scene JSON file (default: built-in demo scene)
    --seed SEED             Random seed (default: 0)
    --batch-size SIZE       Samples per progress update (default: 10)
    --quiet                 Suppress progress output

Example:
    python -m examples.render_spheres --width 200 --height 100 --samples 20
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene with diffuse and metal materials.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=225,
        help="Image height in pixels (default: 225)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum bounces per ray (default: 50)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path (default: spheres.png)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="Scene JSON file (default: built-in demo scene)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_spheres(
    width: int = 400,
    height: int = 225,
    num_samples: int = 100,
    max_depth: int = 50,
    output_path: str = "spheres.png",
    scene_path: str | None = None,
    batch_size: int = 10,
    quiet: bool = False,
) -> Path:
    """Render the scene and save it to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        num_samples: Number of samples per pixel.
        max_depth: Maximum bounces per ray.
        output_path: Output file path (PNG).
        scene_path: Optional scene JSON file. The demo scene is used if None.
        batch_size: Number of samples to render between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from raykernel.camera.pinhole import setup_camera
    from raykernel.core.integrator import get_total_samples, render_image, setup_render_target
    from raykernel.preview.export import save_render
    from raykernel.scene.demo import create_demo_scene

    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    aspect_ratio = width / height

    # The demo camera is used for loaded scenes too
    scene, camera = create_demo_scene(aspect_ratio=aspect_ratio)
    if scene_path is not None:
        if not quiet:
            print(f"Loading scene from {scene_path}...")
        scene.load_json(scene_path)

    if not quiet:
        print(
            f"Scene: {scene.get_sphere_count()} spheres, "
            f"{scene.get_material_count()} materials ({width}x{height})"
        )

    setup_camera(camera)
    setup_render_target(width, height)

    if not quiet:
        print(f"Rendering {num_samples} samples per pixel...")

    start_time = time.time()
    remaining = num_samples
    while remaining > 0:
        batch = min(batch_size, remaining)
        render_image(num_samples=batch, max_depth=max_depth)
        remaining -= batch

        if not quiet:
            current = get_total_samples()
            elapsed = time.time() - start_time
            progress_pct = (current / num_samples) * 100
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{num_samples} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_render(output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Initialize Taichi
    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu, random_seed=args.seed)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        # Drop any state left by the failed GPU init before retrying
        ti.reset()
        ti.init(arch=ti.cpu, random_seed=args.seed)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            max_depth=args.max_depth,
            output_path=args.output,
            scene_path=args.scene,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Render the mirror spheres scene.

This script renders the demo scene (or a scene loaded from JSON) through a
series of passes of doubling resolution, writing the output PNG after every
pass so the image can be watched while it refines.

Usage:
    python -m examples.render_mirror_spheres [options]

Options:
    --resolution N      Output image side length in pixels (default: 512)
    --msaa N            Supersampling factor of the final pass (default: 2)
    --output OUTPUT     Output file path (default: output.png)
    --scene SCENE       JSON scene file (default: built-in demo scene)
    --quiet             Suppress progress output

A scene file holds "spheres" and "lights" lists and may add an optional
"camera" section (OrthographicCamera fields) and a "shading" section with
"color_on_miss" and "color_on_full_shade".

Example:
    python -m examples.render_mirror_spheres --resolution 256 --output spheres.png
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the mirror spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--resolution",
        type=int,
        default=512,
        help="Output image side length in pixels (default: 512)",
    )
    parser.add_argument(
        "--msaa",
        type=int,
        default=2,
        help="Supersampling factor of the final pass (default: 2)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="output.png",
        help="Output file path (default: output.png)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in demo scene)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_mirror_spheres(
    resolution: int = 512,
    msaa_multiplier: int = 2,
    output_path: str = "output.png",
    scene_path: str | None = None,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to file.

    Args:
        resolution: Output image side length in pixels.
        msaa_multiplier: Supersampling factor of the final pass.
        output_path: Output file path (PNG).
        scene_path: Optional JSON scene file. The demo scene is used if None.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.

    Raises:
        ValueError: If the settings leave no pass to render.
    """
    # Lazy imports to allow Taichi initialization first
    from src.mirrorball.camera.orthographic import OrthographicCamera, setup_camera
    from src.mirrorball.core.integrator import COLOR_ON_FULL_SHADE, COLOR_ON_MISS
    from src.mirrorball.core.progressive import MIN_PASS_RESOLUTION, ProgressiveRenderer
    from src.mirrorball.scene.manager import load_scene
    from src.mirrorball.scene.mirror_spheres import create_mirror_spheres_scene

    color_on_miss = COLOR_ON_MISS
    color_on_full_shade = COLOR_ON_FULL_SHADE

    if scene_path is None:
        if not quiet:
            print("Creating mirror spheres scene...")
        scene, camera = create_mirror_spheres_scene()
    else:
        if not quiet:
            print(f"Loading scene from {scene_path}...")
        scene, data = load_scene(scene_path)
        camera = OrthographicCamera(**data.get("camera", {}))
        shading = data.get("shading", {})
        color_on_miss = tuple(shading.get("color_on_miss", color_on_miss))
        color_on_full_shade = tuple(shading.get("color_on_full_shade", color_on_full_shade))

    if not quiet:
        print(f"  {scene.get_sphere_count()} spheres, {scene.get_bulb_count()} bulbs")

    setup_camera(camera)

    renderer = ProgressiveRenderer(
        preferred_resolution=resolution,
        msaa_multiplier=msaa_multiplier,
        color_on_miss=color_on_miss,
        color_on_full_shade=color_on_full_shade,
    )

    if not renderer.resolutions:
        raise ValueError(
            f"Nothing to render: final pass {resolution * msaa_multiplier} must be "
            f"larger than {MIN_PASS_RESOLUTION}"
        )

    if not quiet:
        print(f"Rendering passes {renderer.resolutions}...")

    start_time = time.time()

    def progress_callback(current: int, total: int, pass_resolution: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            print(
                f"  Pass {current}/{total}: {pass_resolution}x{pass_resolution} "
                f"done at {elapsed:.2f}s"
            )

    output_file = Path(output_path)
    renderer.render(output_path=str(output_file), callback=progress_callback)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Passes run serialized, so the CPU backend is enough
    ti.init(arch=ti.cpu)
    if not args.quiet:
        print("Using CPU backend")

    try:
        render_mirror_spheres(
            resolution=args.resolution,
            msaa_multiplier=args.msaa,
            output_path=args.output,
            scene_path=args.scene,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

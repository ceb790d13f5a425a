#!/usr/bin/env python3
"""Render the random spheres scene.

This script builds the demo scene (or loads one from a JSON scene file),
renders it scanline by scanline with a progress line on stderr, and writes
the result as plain PPM or PNG.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH       Image width in pixels (default: scene camera, 720)
    --samples SAMPLES   Samples per pixel (default: scene camera, 10)
    --depth DEPTH       Maximum ray bounces (default: scene camera, 25)
    --seed SEED         Seed for the scene layout and the sampler
    --scene PATH        JSON scene file to render instead of the demo scene
    --output OUTPUT     Output file, .ppm or .png (default: output/image.ppm)
    --arch {cpu,gpu}    Taichi backend (default: cpu)
    --preview           Show the result in a Matplotlib window
    --quiet             Suppress progress output

Example:
    python -m examples.render_spheres --width 400 --samples 50 --seed 7
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
        description="Render the random spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Image width in pixels (default: from the scene camera)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=None,
        help="Number of samples per pixel (default: from the scene camera)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=None,
        help="Maximum ray bounces (default: from the scene camera)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the scene layout and the sampler",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file to render instead of the demo scene",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="output/image.ppm",
        help="Output file path, .ppm or .png (default: output/image.ppm)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the rendered image in a preview window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_spheres(
    output_path: str = "output/image.ppm",
    *,
    width: int | None = None,
    samples: int | None = None,
    depth: int | None = None,
    seed: int | None = None,
    scene_path: str | None = None,
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to file.

    Args:
        output_path: Output file path (.ppm is streamed while rendering).
        width: Override for the camera image width.
        samples: Override for the camera samples per pixel.
        depth: Override for the camera bounce limit.
        seed: Seed for the demo scene layout.
        scene_path: Optional JSON scene file.
        preview: If True, show the image when done.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from mcray.camera.thin_lens import camera_from_dict
    from mcray.core.progress import ProgressReporter
    from mcray.preview.export import PNG_SUFFIXES, PPM_SUFFIXES, save_png_from_array
    from mcray.scene.manager import SceneManager, load_scene_config
    from mcray.scene.spheres import create_spheres_scene

    output_file = Path(output_path)
    suffix = output_file.suffix.lower()
    if suffix not in PPM_SUFFIXES + PNG_SUFFIXES:
        raise ValueError(f"Unsupported output format: {output_file.suffix!r} (use .ppm or .png)")

    if scene_path is not None:
        config = load_scene_config(scene_path)
        scene = SceneManager()
        scene.from_config(config)
        camera = camera_from_dict(config.camera)
    else:
        scene, camera = create_spheres_scene(seed=seed)

    if width is not None:
        camera.image_width = width
    if samples is not None:
        camera.samples_per_pixel = samples
    if depth is not None:
        camera.max_depth = depth

    if not quiet:
        print(
            f"Rendering {scene.get_sphere_count()} spheres at width {camera.image_width}, "
            f"{camera.samples_per_pixel} spp, depth {camera.max_depth}..."
        )

    reporter = None if quiet else ProgressReporter(sys.stderr)
    start_time = time.time()

    output_file.parent.mkdir(parents=True, exist_ok=True)
    if suffix in PPM_SUFFIXES:
        with open(output_file, "w", encoding="ascii") as f:
            image = camera.render(scene, out=f, callback=reporter)
    else:
        image = camera.render(scene, callback=reporter)
        save_png_from_array(image, output_file)

    total_time = time.time() - start_time
    if reporter is not None:
        reporter.finish()
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Render time: {total_time:.2f}s")

    if preview:
        from mcray.preview.display import show_preview

        show_preview(image, title=output_file.name)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    arch = ti.gpu if args.arch == "gpu" else ti.cpu
    ti.init(arch=arch, random_seed=args.seed if args.seed is not None else 0)

    try:
        render_spheres(
            args.output,
            width=args.width,
            samples=args.samples,
            depth=args.depth,
            seed=args.seed,
            scene_path=args.scene,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Render every example scene in this directory.

This script parses each ``*.scene`` file next to it, renders it with the
Whitted tracer and writes a PNG beside the scene file. Pass ``--show`` to
open each result in a Matplotlib window.

Usage:
    python examples/render_examples.py [options]

Options:
    --output-dir DIR    Directory for PNG files (default: this directory)
    --arch {cpu,gpu}    Taichi backend (default: cpu)
    --gamma GAMMA       Encoding gamma (default: 1.0)
    --show              Display each image after rendering
    --quiet             Suppress progress output

Example:
    python examples/render_examples.py --output-dir /tmp/renders --show
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from scenetrace.config import RenderConfig, init_backend
from scenetrace.errors import SceneError

EXAMPLES_DIR = Path(__file__).resolve().parent


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the example scenes.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=EXAMPLES_DIR,
        help="Directory for PNG files (default: this directory)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=1.0,
        help="Encoding gamma (default: 1.0)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Display each image after rendering",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_examples(
    output_dir: Path,
    gamma: float = 1.0,
    show: bool = False,
    quiet: bool = False,
) -> list[Path]:
    """Render every example scene and save it as PNG.

    Args:
        output_dir: Directory the PNG files are written to.
        gamma: Encoding gamma.
        show: If True, display each image after rendering.
        quiet: If True, suppress progress output.

    Returns:
        Paths of the written images.
    """
    # Lazy imports so the Taichi backend is initialized first
    from scenetrace.core.renderer import Renderer
    from scenetrace.preview.display import show_image
    from scenetrace.preview.export import save_png_from_array
    from scenetrace.scene.parser import parse_scene_file

    output_dir.mkdir(parents=True, exist_ok=True)
    written = []

    for scene_file in sorted(EXAMPLES_DIR.glob("*.scene")):
        scene = parse_scene_file(str(scene_file))
        if not quiet:
            print(
                f"Rendering {scene_file.name} "
                f"({scene.resolution.width}x{scene.resolution.height}, "
                f"{len(scene.primitives)} primitives, {len(scene.lights)} lights)...",
                end="",
                flush=True,
            )

        start_time = time.time()
        image = Renderer(scene).render()

        output_file = output_dir / scene_file.with_suffix(".png").name
        save_png_from_array(image, str(output_file), gamma=gamma)
        written.append(output_file)

        if not quiet:
            print(f" {time.time() - start_time:.2f}s -> {output_file}")
        if show:
            show_image(image, title=scene_file.name, gamma=gamma)

    return written


def main() -> int:
    """Main entry point."""
    args = parse_args()

    init_backend(RenderConfig(arch=args.arch, gamma=args.gamma))
    if not args.quiet:
        print(f"Using {args.arch.upper()} backend")

    try:
        render_examples(
            output_dir=args.output_dir,
            gamma=args.gamma,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except SceneError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

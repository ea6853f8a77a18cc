"""Command line renderer for scene description files.

Usage:
    scenetrace SCENE_FILE [options]

Options:
    --output OUTPUT     Output PNG path (default: SCENE_FILE with .png suffix)
    --base64            Print the base64 PNG to stdout instead of writing a file
    --show              Display the result in a Matplotlib window
    --arch {cpu,gpu}    Taichi backend (default: cpu)
    --threads N         CPU worker threads (default: Taichi's choice)
    --gamma GAMMA       Encoding gamma (default: 1.0)
    --quiet             Suppress progress output
    --verbose           Enable debug logging

Example:
    scenetrace examples/three_spheres.scene --output three_spheres.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from scenetrace.config import RenderConfig
from scenetrace.errors import SceneError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="scenetrace",
        description="Render a scene description file to a PNG image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("scene_file", type=Path, help="Scene description file")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output PNG path (default: scene file with .png suffix)",
    )
    parser.add_argument(
        "--base64",
        action="store_true",
        help="Print the base64 PNG to stdout instead of writing a file",
    )
    parser.add_argument("--show", action="store_true", help="Display the rendered image")
    parser.add_argument("--arch", choices=("cpu", "gpu"), default="cpu", help="Taichi backend (default: cpu)")
    parser.add_argument("--threads", type=int, default=None, help="CPU worker threads")
    parser.add_argument("--gamma", type=float, default=1.0, help="Encoding gamma (default: 1.0)")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def render_file(
    scene_file: Path,
    config: RenderConfig,
    *,
    output: Path | None = None,
    as_base64: bool = False,
    show: bool = False,
    quiet: bool = False,
) -> Path | None:
    """Render a scene file and write or print the result.

    Returns:
        The path written to, or None when printing base64.
    """
    from scenetrace.api import render_scene_to_array
    from scenetrace.preview.export import encode_png, encode_png_base64

    text = scene_file.read_text(encoding="utf-8")

    start_time = time.time()
    if not quiet and not as_base64:
        print(f"Rendering {scene_file}...")
    image = render_scene_to_array(text, config)

    written = None
    if as_base64:
        print(encode_png_base64(image, gamma=config.gamma))
    else:
        written = output or scene_file.with_suffix(".png")
        written.write_bytes(encode_png(image, gamma=config.gamma))
        if not quiet:
            height, width = image.shape[:2]
            print(f"Saved {width}x{height} image to: {written.absolute()}")
            print(f"Total time: {time.time() - start_time:.2f}s")

    if show:
        from scenetrace.preview.display import show_image

        show_image(image, title=scene_file.name, gamma=config.gamma)

    return written


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = RenderConfig(arch=args.arch, cpu_max_num_threads=args.threads, gamma=args.gamma)
        render_file(
            args.scene_file,
            config,
            output=args.output,
            as_base64=args.base64,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except (SceneError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

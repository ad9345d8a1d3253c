#!/usr/bin/env python3
"""Render the spectral Cornell box.

Builds the Cornell box, accumulates samples progressively on all CPU cores
and writes a tone mapped PNG.

Usage:
    python examples/render_cornell_box.py [options]

Example:
    python examples/render_cornell_box.py --width 256 --height 256 --samples 64
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from luculenta.core.progressive import ProgressiveRenderer
from luculenta.preview.export import save_png
from luculenta.scene.cornell_box import CornellBoxParams, create_cornell_box_scene

logger = logging.getLogger("render_cornell_box")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the spectral Cornell box.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=256, help="Image width in pixels")
    parser.add_argument("--height", type=int, default=256, help="Image height in pixels")
    parser.add_argument("--samples", type=int, default=64, help="Samples per pixel")
    parser.add_argument("--batch-size", type=int, default=8, help="Samples per progress update")
    parser.add_argument("--threads", type=int, default=None, help="Worker threads (default: CPUs)")
    parser.add_argument("--seed", type=int, default=0, help="Base random seed")
    parser.add_argument(
        "--light-temperature", type=float, default=6504.0, help="Light colour temperature (K)"
    )
    parser.add_argument("--output", type=str, default="cornell_box.png", help="Output PNG path")
    parser.add_argument("--verbose", action="store_true", help="Log tile completions")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser.parse_args()


def render_cornell_box(
    width: int = 256,
    height: int = 256,
    num_samples: int = 64,
    output_path: str = "cornell_box.png",
    batch_size: int = 8,
    threads: int | None = None,
    seed: int = 0,
    light_temperature: float = 6504.0,
) -> Path:
    """Render the Cornell box and save it as a PNG.

    Returns:
        Path to the saved image file.
    """
    params = CornellBoxParams(light_temperature=light_temperature)
    scene = create_cornell_box_scene(params=params, aspect_ratio=width / height)
    renderer = ProgressiveRenderer(scene, width, height, threads=threads, seed=seed)

    start_time = time.perf_counter()

    def progress_callback(current: int, target: int) -> None:
        elapsed = time.perf_counter() - start_time
        logger.info(
            "%d/%d spp (%.1f%%), %.1f spp/s",
            current,
            target,
            100.0 * current / target if target else 0.0,
            current / elapsed if elapsed > 0 else 0.0,
        )

    renderer.render(num_samples=num_samples, batch_size=batch_size, callback=progress_callback)

    output_file = Path(output_path)
    save_png(renderer, output_file, tone_map="reinhard", gamma=2.2)
    logger.info(
        "Saved %s in %.2fs", output_file.absolute(), time.perf_counter() - start_time
    )
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        render_cornell_box(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            output_path=args.output,
            batch_size=args.batch_size,
            threads=args.threads,
            seed=args.seed,
            light_temperature=args.light_temperature,
        )
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Continuous render of a glass prism splitting white light.

Starts a continuous (unbounded) render, takes a snapshot every few seconds
and stops after a time limit. Optionally opens a Matplotlib preview of the
final film.

Usage:
    python examples/dispersion_prism.py --seconds 30 --glass flint --show
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

from luculenta.core.scheduler import render
from luculenta.materials.dielectric import DielectricMaterial
from luculenta.preview.display import show_preview
from luculenta.preview.export import save_png
from luculenta.scene.presets import create_prism_scene, create_sphere_over_plane_scene

logger = logging.getLogger("dispersion_prism")

GLASSES = {
    "crown": DielectricMaterial.crown_glass,
    "flint": DielectricMaterial.flint_glass,
    "water": DielectricMaterial.water,
}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render a dispersing prism until a time limit.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=320)
    parser.add_argument("--height", type=int, default=180)
    parser.add_argument("--seconds", type=float, default=20.0, help="Render time limit")
    parser.add_argument("--interval", type=float, default=5.0, help="Seconds between snapshots")
    parser.add_argument("--glass", choices=sorted(GLASSES), default="flint")
    parser.add_argument(
        "--scene",
        choices=("prism", "sphere"),
        default="prism",
        help="'sphere' renders the black body sphere over a plane instead",
    )
    parser.add_argument("--threads", type=int, default=None)
    parser.add_argument("--output", type=str, default="prism.png")
    parser.add_argument("--show", action="store_true", help="Show a Matplotlib preview at the end")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    aspect = args.width / args.height
    if args.scene == "prism":
        scene = create_prism_scene(GLASSES[args.glass](), aspect_ratio=aspect)
    else:
        scene = create_sphere_over_plane_scene(aspect_ratio=aspect)

    try:
        handle = render(
            scene, None, args.width, args.height, samples_per_pixel=None, threads=args.threads
        )
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    with handle:
        deadline = time.monotonic() + args.seconds
        while time.monotonic() < deadline:
            handle.wait(min(args.interval, max(deadline - time.monotonic(), 0.0)))
            snapshot = handle.snapshot()
            logger.info(
                "%.1f spp on average, %d discarded samples",
                snapshot.mean_samples,
                handle.stats().discarded,
            )

    save_png(handle, args.output, tone_map="exposure", gamma=2.2)
    logger.info("Saved %s", args.output)

    if args.show:
        show_preview(handle, tone_map="exposure")
    return 0


if __name__ == "__main__":
    sys.exit(main())

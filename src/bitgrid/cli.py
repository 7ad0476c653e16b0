"""
cli.py - Turn the opaque pixels of a sprite into collision polygons.

Example
-------
bitgrid-polygons sprite.png --threshold 0.1 --grow 2 --epsilon 1.5 \
    --preview sprite_polygons.png --output sprite_polygons.json

Main options
------------
--threshold    Alpha strictly above this marks a pixel as opaque (default 0.1)
--grow         Grow (>0) or shrink (<0) the opaque region by N pixels first
--epsilon      Ramer-Douglas-Peucker tolerance for the polygons (0 = corners only)
--rect         Clip rectangle X Y W H (default: whole image)
--preview      Write a debug PNG with the polygon outlines
--output       Write the JSON here instead of stdout
--verbose      Debug logging

The JSON document has the image ``size`` and a list of ``polygons``, each a
list of ``[x, y]`` corner points.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys

from .BitGrid import BitGrid
from .config import DEFAULT_ALPHA_THRESHOLD, DEFAULT_POLYGON_EPSILON
from .logging_config import logger, set_log_level
from .utils.image_utils import PillowImageSource


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="bitgrid-polygons",
        description="Extract collision polygons from an image's alpha channel",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument("image", help="Image file readable by Pillow (PNG, WebP, ...)")
    ap.add_argument("--threshold", type=float, default=DEFAULT_ALPHA_THRESHOLD,
                    help="Alpha threshold, strict inequality")
    ap.add_argument("--grow", type=int, default=0,
                    help="Grow (>0) or shrink (<0) the opaque region, in pixels")
    ap.add_argument("--epsilon", type=float, default=DEFAULT_POLYGON_EPSILON,
                    help="Polygon simplification tolerance in pixels")
    ap.add_argument("--rect", type=int, nargs=4, metavar=("X", "Y", "W", "H"), default=None,
                    help="Clip rectangle (defaults to the whole image)")
    ap.add_argument("--preview", default=None,
                    help="Write a PNG preview with polygon outlines")
    ap.add_argument("--scale", type=int, default=4,
                    help="Preview pixels per cell")
    ap.add_argument("--output", default=None,
                    help="JSON output file (defaults to stdout)")
    ap.add_argument("--verbose", action="store_true",
                    help="Debug logging")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        set_log_level(logging.DEBUG)

    # ---------------- load image ----------------
    logger.info("Loading image → %s", args.image)
    try:
        source = PillowImageSource.open(args.image)
    except OSError as exc:
        logger.error("Could not read %s: %s", args.image, exc)
        return 1

    grid = BitGrid.from_image_alpha(source, args.threshold)
    if grid.is_empty():
        logger.error("No usable alpha channel in %s.", args.image)
        return 1
    logger.debug("Thresholded %dx%d image: %d opaque cells", grid.width, grid.height, grid.true_bit_count())

    # ---------------- reshape ----------------
    rect = tuple(args.rect) if args.rect is not None else (0, 0, grid.width, grid.height)
    if args.grow:
        grid.grow_mask(args.grow, rect)
        logger.debug("After grow_mask(%d): %d opaque cells", args.grow, grid.true_bit_count())

    # ---------------- polygons ----------------
    polygons = grid.clip_opaque_to_polygons(rect, epsilon=args.epsilon)
    logger.info("Extracted %d polygon(s)", len(polygons))

    document = {
        "size": list(grid.size),
        "polygons": [[list(point) for point in polygon] for polygon in polygons],
    }

    if args.output is not None:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2)
    else:
        json.dump(document, sys.stdout)
        sys.stdout.write("\n")

    if args.preview is not None:
        grid.to_image_with_polygons(polygons, scale=args.scale).save(args.preview)
        logger.info("Preview written → %s", args.preview)

    return 0


if __name__ == "__main__":
    sys.exit(main())

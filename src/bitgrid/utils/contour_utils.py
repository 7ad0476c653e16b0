"""
contour_utils.py

Turn a boolean mask into closed polygons, one per 4-connected region.

Polygonization is done by ``rasterio.features.shapes``, which walks the
pixel edges (the corner lattice, so a cell ``(x, y)`` spans
``[x, x+1] x [y, y+1]``) and only emits the corners where the boundary
changes direction: a solid rectangle of any size gives exactly 4 vertices.
The rings are then put in a fixed form: positive signed area (clockwise on
screen with y pointing down) starting at the region's top-left corner.
"""
from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np
import rasterio.features
from affine import Affine
from shapely.geometry import LinearRing, MultiPolygon, Polygon

from ..config import DEFAULT_POLYGON_EPSILON
from ..logging_config import logger

Point = Tuple[int, int]


def exterior_vertices(geometry: dict) -> List[Point]:
    """
    Outer ring of a GeoJSON-like polygon as integer corners.

    Interior rings (holes) are dropped, as is the closing point. Consecutive
    collinear points are merged so every vertex is a direction change.
    """
    ring = [(int(round(x)), int(round(y))) for x, y in geometry["coordinates"][0][:-1]]

    corners = []
    for i, (x, y) in enumerate(ring):
        px, py = ring[i - 1]
        nx, ny = ring[(i + 1) % len(ring)]
        if (x - px) * (ny - y) - (y - py) * (nx - x) != 0:
            corners.append((x, y))
    return corners


def normalize_ring(points: Sequence[Point]) -> List[Point]:
    """
    Orient a ring to positive signed area and start it at its top-left vertex.

    Examples
    --------
    >>> normalize_ring([(0, 0), (0, 2), (2, 2), (2, 0)])
    [(0, 0), (2, 0), (2, 2), (0, 2)]
    """
    points = list(points)
    if len(points) < 3:
        return points
    if not LinearRing(points).is_ccw:
        points.reverse()

    start = min(range(len(points)), key=lambda i: (points[i][1], points[i][0]))
    return points[start:] + points[:start]


def simplify_polygon(points: Sequence[Point], epsilon: float) -> List[Point]:
    """
    Ramer-Douglas-Peucker simplification of a closed polygon.

    Uses :meth:`shapely.geometry.Polygon.simplify`. The kept vertices are a
    subset of the input, so they stay on the integer lattice.

    Returns
    -------
    list of (x, y)
        Empty when the polygon collapses below 3 vertices.
    """
    if epsilon <= 0 or len(points) < 4:
        return list(points)

    simplified = Polygon(points).simplify(epsilon, preserve_topology=False)
    if simplified.is_empty or not isinstance(simplified, Polygon):
        return []

    coords = list(simplified.exterior.coords)[:-1]
    if len(coords) < 3:
        return []
    return [(int(round(px)), int(round(py))) for px, py in coords]


def extract_polygons(
    mask: np.ndarray,
    origin: Point = (0, 0),
    epsilon: float = DEFAULT_POLYGON_EPSILON,
) -> List[List[Point]]:
    """
    Trace every 4-connected region of ``mask`` into a closed polygon.

    Parameters
    ----------
    mask : ndarray of bool, shape (rows, cols)
        Cells outside the mask are treated as false, which is how clipping
        against a rectangle is done: pass the clipped sub-array.
    origin : (x, y), default (0, 0)
        Position of ``mask[0, 0]`` in the caller's coordinates. Passed to
        rasterio as a translation transform.
    epsilon : float, default 0.0
        Extra Ramer-Douglas-Peucker tolerance. 0 keeps every corner.

    Returns
    -------
    list of polygons
        Each polygon is a list of ``(x, y)`` corner points; the last point
        connects back to the first. Interior holes are not traced. Polygons
        are sorted by their first vertex, i.e. raster order of each region's
        first cell.
    """
    mask = np.asarray(mask, dtype=bool)
    if not mask.any():
        return []

    ox, oy = origin
    shapes = rasterio.features.shapes(
        mask.astype(np.uint8),
        mask=mask,
        connectivity=4,
        transform=Affine.translation(ox, oy),
    )

    polygons = []
    for geometry, _ in shapes:
        polygon = simplify_polygon(exterior_vertices(geometry), epsilon)
        if len(polygon) < 3:
            logger.debug("Dropping region: polygon collapsed below 3 vertices.")
            continue
        polygons.append(normalize_ring(polygon))

    polygons.sort(key=lambda polygon: (polygon[0][1], polygon[0][0]))
    return polygons


def polygons_to_shapely(polygons: Sequence[Sequence[Point]]) -> MultiPolygon:
    """
    Bundle extracted polygons into a :class:`shapely.geometry.MultiPolygon`.

    Examples
    --------
    >>> polygons_to_shapely([[(0, 0), (2, 0), (2, 2), (0, 2)]]).area
    4.0
    """
    return MultiPolygon([Polygon(polygon) for polygon in polygons])

"""
rect_utils.py

Point, size and rectangle helpers shared by the grid operations: float
coordinates are truncated towards zero (never rounded) and rectangles are
clipped against the grid bounds before anything touches the bit array.
"""
import math
from typing import NamedTuple, Optional, Sequence, Tuple


class Rect(NamedTuple):
    """
    Integer axis-aligned rectangle ``(x, y, w, h)``.

    The origin may be negative and the extent may overhang the grid; use
    :func:`clip_rect` to get the part that actually lies inside a grid.
    """
    x: int
    y: int
    w: int
    h: int

    @property
    def end_x(self) -> int:
        return self.x + self.w

    @property
    def end_y(self) -> int:
        return self.y + self.h

    @property
    def area(self) -> int:
        return max(self.w, 0) * max(self.h, 0)

    def slices(self) -> Tuple[slice, slice]:
        """(row, column) slices selecting this rect from a ``(h, w)`` array."""
        return slice(self.y, self.end_y), slice(self.x, self.end_x)


def _all_finite(values: Sequence[float]) -> bool:
    return all(math.isfinite(v) for v in values)


def to_cell(point: Sequence[float]) -> Optional[Tuple[int, int]]:
    """
    Truncate a point to integer cell coordinates.

    Parameters
    ----------
    point : sequence of 2 numbers
        ``(x, y)``; floats are truncated towards zero.

    Returns
    -------
    (x, y) : tuple of int, or None
        None when a coordinate is NaN or infinite.
    """
    x, y = point
    if not _all_finite((x, y)):
        return None
    return int(x), int(y)


def to_size(size: Sequence[float]) -> Optional[Tuple[int, int]]:
    """
    Truncate a ``(width, height)`` pair to ints, None if non-finite.

    No sign check happens here: ``create`` rejects non-positive sizes while
    ``resize`` clamps them, so each caller decides.
    """
    width, height = size
    if not _all_finite((width, height)):
        return None
    return int(width), int(height)


def truncate_rect(rect: Sequence[float]) -> Optional[Rect]:
    """Truncate each component of ``(x, y, w, h)``; None if any is non-finite."""
    x, y, w, h = rect
    if not _all_finite((x, y, w, h)):
        return None
    return Rect(int(x), int(y), int(w), int(h))


def clip_rect(rect: Sequence[float], width: int, height: int) -> Optional[Rect]:
    """
    Intersect a rectangle with the grid bounds ``[0, width) x [0, height)``.

    Parameters
    ----------
    rect : sequence of 4 numbers
        ``(x, y, w, h)``. Components are truncated before clipping, so
        ``(-0.5, 0, 2.9, 1)`` becomes ``(0, 0, 2, 1)``.
    width, height : int
        Grid dimensions.

    Returns
    -------
    Rect or None
        The clipped rectangle, or None when the intersection is empty.

    Examples
    --------
    >>> clip_rect((-128, -128, 256, 256), 256, 256)
    Rect(x=0, y=0, w=128, h=128)
    >>> clip_rect((300, 0, 10, 10), 256, 256) is None
    True
    """
    truncated = truncate_rect(rect)
    if truncated is None:
        return None

    x0 = max(truncated.x, 0)
    y0 = max(truncated.y, 0)
    x1 = min(truncated.end_x, width)
    y1 = min(truncated.end_y, height)

    if x1 <= x0 or y1 <= y0:
        return None
    return Rect(x0, y0, x1 - x0, y1 - y0)

"""
morphology_utils.py

Distance based growing and shrinking of boolean masks.

A cell is grown (dilated) when any true cell lies within Euclidean distance
``radius`` of it and survives shrinking (erosion) only when every cell within
that distance is true. Both are plain binary morphology with a discretised
disk as structuring element, so the heavy lifting is done by
``scipy.ndimage``.
"""
import math

import numpy as np
from scipy.ndimage import binary_dilation, binary_erosion #https://docs.scipy.org/doc/scipy/reference/ndimage.html#morphology


def structuring_element(radius: int) -> np.ndarray:
    """
    Discretised disk of the given radius.

    Parameters
    ----------
    radius : int
        Non-negative radius in cells.

    Returns
    -------
    ndarray of bool, shape (2*radius+1, 2*radius+1)
        True for every offset ``(dx, dy)`` with ``dx**2 + dy**2 <= radius**2``.
        Offsets at exactly ``radius`` are included.

    Notes
    -----
    The number of true cells is the Gauss circle count: 5 for radius 1
    (the centre plus its 4 neighbours, no diagonals) and 3209 for radius 32.

    Examples
    --------
    >>> structuring_element(1).astype(int)
    array([[0, 1, 0],
           [1, 1, 1],
           [0, 1, 0]])
    """
    radius = abs(int(radius))
    offsets = np.arange(-radius, radius + 1)
    dy, dx = np.meshgrid(offsets, offsets, indexing="ij")
    return (dx * dx + dy * dy) <= radius * radius


def grow_mask(mask: np.ndarray, amount: int) -> np.ndarray:
    """
    Grow (``amount > 0``) or shrink (``amount < 0``) a boolean mask.

    Parameters
    ----------
    mask : ndarray of bool, shape (rows, cols)
        Source mask. It is only read; the result is a new array.
    amount : int
        Signed radius in cells. 0 returns an unchanged copy.

    Returns
    -------
    ndarray of bool
        Same shape as ``mask``.

    Notes
    -----
    - Every cell is decided from the *source* mask, so a single call never
      cascades: growing by 1 twice is a diamond of radius 2, while growing
      by 2 once is a disk of radius 2.
    - Cells beyond the edge of ``mask`` count as false. When shrinking this
      means cells near the edge are eroded as if bordered by empty space.
    - The radius is capped at the mask diagonal. Longer offsets reach no
      cell inside the mask, so the result is the same at bounded memory.
    """
    mask = np.asarray(mask, dtype=bool)
    amount = int(amount)

    if amount == 0 or mask.size == 0:
        return mask.copy()

    rows, cols = mask.shape
    radius = min(abs(amount), math.ceil(math.hypot(rows, cols)))
    structure = structuring_element(radius)

    if amount > 0:
        return binary_dilation(mask, structure=structure, border_value=0)
    return binary_erosion(mask, structure=structure, border_value=0)

import math

import numpy as np
from PIL import Image, ImageDraw
from typing import Dict, List, Optional, Sequence, Tuple

from .config import (
    DEFAULT_ALPHA_THRESHOLD,
    DEFAULT_OUTLINE_COLOUR,
    DEFAULT_PALETTE,
    DEFAULT_POLYGON_EPSILON,
    MAX_CELL_COUNT,
)
from .logging_config import logger
from .utils import morphology_utils
from .utils.contour_utils import extract_polygons
from .utils.image_utils import ImageSource, threshold_alpha
from .utils.rect_utils import clip_rect, to_cell, to_size


class BitGrid:
    """
    BitGrid class. A 2-D boolean raster, typically the opaque pixels of a sprite.

    Stores the following information:
    1. `grid`: an np.ndarray[bool] of shape (height, width). Row is y, column is x.

    An uninitialised grid is 0x0 and behaves as if it had no true bits. No
    method raises on bad data: invalid sizes, out of range points and rects,
    and unusable sources all leave the grid as it was and are logged instead.

    Interface:

    .create(size) / .resize(size) : (re)allocate the grid

    .get_bit / .set_bit / .set_bit_rect / .get_bit_rect : read and write bits

    .create_from_image_alpha(image, threshold) : threshold an image's alpha

    .blit(offset, source) : OR another grid into this one

    .grow_mask(amount, rect) : grow or shrink the true region

    .clip_opaque_to_polygons(rect) : trace the true regions into polygons

    .convert_to_image() / .to_image() : render for inspection

    .save(filepath) / .load(filepath) : packed .npz persistence
    """

    ## Constructors
    def __init__(self, size: Optional[Sequence[float]] = None):
        """
        Constructor. The grid starts uninitialised (0x0).

        Parameters
        ----------
        size : (width, height), optional
            If given, ``create(size)`` is called right away.
        """
        self.grid = np.zeros((0, 0), dtype=bool)

        if size is not None:
            self.create(size)

    @classmethod
    def from_image_alpha(cls, image: ImageSource, threshold: float = DEFAULT_ALPHA_THRESHOLD):
        """Build a new grid from an image's alpha channel (uninitialised if unusable)."""
        new_bit_grid = cls()
        new_bit_grid.create_from_image_alpha(image, threshold)
        return new_bit_grid

    def create(self, size: Sequence[float]):
        """
        Replace the grid with an all-false grid of the given size.

        Parameters
        ----------
        size : (width, height)
            Floats are truncated, so ``(512.99, 256.5)`` creates 512x256.

        Notes
        -----
        The call is ignored (and logged) when a dimension is not positive or
        not finite, or when ``width * height`` exceeds ``MAX_CELL_COUNT``
        (46341x46341 is too large). The previous size and bits are kept.
        """
        dimensions = to_size(size)
        if dimensions is None:
            logger.warning("BitGrid.create: non-finite size %s ignored.", tuple(size))
            return

        width, height = dimensions
        if width <= 0 or height <= 0:
            logger.warning("BitGrid.create: size %dx%d must be positive, keeping %dx%d.", width, height, self.width, self.height)
            return
        if width * height > MAX_CELL_COUNT:
            logger.warning("BitGrid.create: size %dx%d exceeds %d cells, keeping %dx%d.", width, height, MAX_CELL_COUNT, self.width, self.height)
            return

        self.grid = np.zeros((height, width), dtype=bool)

    def resize(self, size: Sequence[float]):
        """
        Change the size, keeping the bits of the overlapping top-left corner.

        New cells are false. Negative dimensions clamp to 0, and any size
        with zero area (or too many cells) leaves an uninitialised 0x0 grid.
        Never fails.
        """
        dimensions = to_size(size) or (0, 0)
        width, height = (max(d, 0) for d in dimensions)

        if width == 0 or height == 0 or width * height > MAX_CELL_COUNT:
            logger.debug("BitGrid.resize: %s has no usable area, grid is now 0x0.", tuple(size))
            self.grid = np.zeros((0, 0), dtype=bool)
            return

        resized = np.zeros((height, width), dtype=bool)
        keep_h = min(height, self.height)
        keep_w = min(width, self.width)
        resized[:keep_h, :keep_w] = self.grid[:keep_h, :keep_w]
        self.grid = resized

    def copy(self) -> "BitGrid":
        """Independent copy of this grid."""
        new_bit_grid = BitGrid()
        new_bit_grid.grid = self.grid.copy()
        return new_bit_grid

    ## Size
    @property
    def width(self) -> int:
        return self.grid.shape[1]

    @property
    def height(self) -> int:
        return self.grid.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)"""
        return self.width, self.height

    def is_empty(self) -> bool:
        """True while the grid is uninitialised (has no cells)."""
        return self.grid.size == 0

    ## Bit Access
    def get_bit(self, point: Sequence[float]) -> bool:
        """
        Value at ``point = (x, y)``; False when uninitialised or out of range.
        """
        cell = self._cell_in_range(point)
        if cell is None:
            return False
        x, y = cell
        return bool(self.grid[y, x])

    def set_bit(self, point: Sequence[float], value: bool):
        """Set the bit at ``point = (x, y)``. Out of range points are ignored."""
        cell = self._cell_in_range(point)
        if cell is None:
            logger.debug("BitGrid.set_bit: %s is outside the %dx%d grid.", tuple(point), self.width, self.height)
            return
        x, y = cell
        self.grid[y, x] = bool(value)

    def true_bit_count(self) -> int:
        """Number of true bits (full scan)."""
        return int(np.count_nonzero(self.grid))

    def set_bit_rect(self, rect: Sequence[float], value: bool):
        """
        Set every bit of a rectangle.

        Parameters
        ----------
        rect : (x, y, w, h)
            May start at negative coordinates or overhang the grid; only its
            intersection with the grid is written.
        value : bool
        """
        clipped = clip_rect(rect, self.width, self.height)
        if clipped is None:
            logger.debug("BitGrid.set_bit_rect: %s does not intersect the %dx%d grid.", tuple(rect), self.width, self.height)
            return
        self.grid[clipped.slices()] = bool(value)

    def get_bit_rect(self, rect: Sequence[float]) -> np.ndarray:
        """
        Copy of the bits inside ``rect`` after clipping it to the grid.

        Returns
        -------
        ndarray of bool, shape (h, w) of the clipped rect
            ``(0, 0)`` when the rect misses the grid.
        """
        clipped = clip_rect(rect, self.width, self.height)
        if clipped is None:
            return np.zeros((0, 0), dtype=bool)
        return self.grid[clipped.slices()].copy()

    ## Filling From Other Sources
    def create_from_image_alpha(self, image: Optional[ImageSource], threshold: float = DEFAULT_ALPHA_THRESHOLD):
        """
        Rebuild the grid from an image: a bit is true where alpha > threshold.

        Parameters
        ----------
        image : ImageSource or None
            E.g. :class:`bitgrid.utils.image_utils.PillowImageSource`.
        threshold : float, default 0.1
            Strict: a pixel with alpha exactly ``threshold`` stays false.

        Notes
        -----
        If the image is missing, has zero area, uses a block-compressed pixel
        format, or is too large, the grid is left unchanged.
        """
        mask = threshold_alpha(image, threshold)
        if mask is None:
            return

        height, width = mask.shape
        if width * height > MAX_CELL_COUNT:
            logger.warning("BitGrid.create_from_image_alpha: image %dx%d exceeds %d cells.", width, height, MAX_CELL_COUNT)
            return

        self.grid = np.ascontiguousarray(mask, dtype=bool)

    def blit(self, offset: Sequence[float], source: Optional["BitGrid"]):
        """
        OR the true bits of ``source`` into this grid, shifted by ``offset``.

        Source bits that land outside this grid are dropped, and bits that
        are already true here are never cleared. Nothing happens when
        ``source`` is None or either grid is uninitialised.
        """
        if source is None:
            logger.warning("BitGrid.blit: no source grid given.")
            return
        if self.is_empty() or source.is_empty():
            logger.debug("BitGrid.blit: skipped, %s grid is uninitialised.", "target" if self.is_empty() else "source")
            return

        cell = to_cell(offset)
        if cell is None:
            return
        offset_x, offset_y = cell

        target = clip_rect((offset_x, offset_y, source.width, source.height), self.width, self.height)
        if target is None:
            return

        overlap = source.grid[
            target.y - offset_y:target.end_y - offset_y,
            target.x - offset_x:target.end_x - offset_x,
        ]
        self.grid[target.slices()] |= overlap

    ## Morphology
    def grow_mask(self, amount: float, rect: Sequence[float]):
        """
        Grow (``amount > 0``) or shrink (``amount < 0``) the true region.

        Parameters
        ----------
        amount : int
            Radius in cells. A cell is grown if a true bit lies within that
            Euclidean distance; when shrinking it survives only if every bit
            within ``|amount|`` is true. 0 does nothing.
        rect : (x, y, w, h)
            Only cells inside this rect (clipped to the grid) are read or
            written. When shrinking, cells outside it count as false.

        Notes
        -----
        All cells are decided from the state before the call, so growing by
        1 thirty-two times gives a diamond, while growing by 32 once gives a
        disk. See :mod:`bitgrid.utils.morphology_utils`.
        """
        if self.is_empty():
            logger.debug("BitGrid.grow_mask: grid is uninitialised.")
            return
        if not math.isfinite(amount) or int(amount) == 0:
            return

        clipped = clip_rect(rect, self.width, self.height)
        if clipped is None:
            return

        region = clipped.slices()
        self.grid[region] = morphology_utils.grow_mask(self.grid[region], int(amount))

    ## Polygons
    def clip_opaque_to_polygons(
        self,
        rect: Sequence[float],
        epsilon: float = DEFAULT_POLYGON_EPSILON,
    ) -> List[List[Tuple[int, int]]]:
        """
        Trace each 4-connected region of true bits inside ``rect`` into a polygon.

        Parameters
        ----------
        rect : (x, y, w, h)
            Clip rectangle. Bits outside it are treated as false, so a region
            cut by the rect edge gets new vertices along that edge.
        epsilon : float, default 0.0
            Optional Ramer-Douglas-Peucker tolerance on top of the collinear
            point removal.

        Returns
        -------
        list of polygons
            Each polygon is a list of ``(x, y)`` corners on the pixel-edge
            lattice with one vertex per direction change (a filled rectangle
            gives 4). Empty when the grid is uninitialised or the rect holds
            no true bit. Holes are not traced; do not rely on the order.
        """
        if self.is_empty():
            return []

        clipped = clip_rect(rect, self.width, self.height)
        if clipped is None:
            return []

        return extract_polygons(self.grid[clipped.slices()], origin=(clipped.x, clipped.y), epsilon=epsilon)

    ## Saving and Loading

    def save(self, filepath):
        """
        Save a BitGrid to a .npz file, bits packed 8 per byte.
        """
        np.savez_compressed(
            file=filepath,
            bits=np.packbits(self.grid, axis=None, bitorder="little"),
            width=self.width,
            height=self.height,
        )

    @classmethod
    def load(cls, filepath):
        """
        Create a BitGrid object from a .npz compressed file.
        """
        with np.load(filepath) as npz_grid:
            width = int(npz_grid["width"])
            height = int(npz_grid["height"])
            bits = npz_grid["bits"]

        new_bit_grid = cls()
        if width > 0 and height > 0:
            unpacked = np.unpackbits(bits, count=width * height, bitorder="little")
            new_bit_grid.grid = unpacked.astype(bool).reshape(height, width)

        return new_bit_grid

    ## Visualization Functions
    def convert_to_image(self) -> Image.Image:
        """
        Single-channel (mode "L") image of the grid: 255 for true, 0 for false.

        Uninitialised grids give a 0x0 image. Never raises.
        """
        if self.is_empty():
            return Image.new("L", (0, 0))
        return Image.fromarray(self.grid.astype(np.uint8) * 255)

    def to_image(
        self,
        scale: int = 1,
        palette: Dict[bool, Tuple[int, int, int]] | None = None,
    ) -> Image.Image:
        """
        Convert the grid into an RGB PIL Image for debugging.

        Parameters
        ----------
        scale : int, default 1
            How many output pixels per cell (must be ≥1). 2 doubles width/height.
        palette : {bool: (R, G, B)}, optional
            Colors for false and true cells. Unspecified entries fall back to
            ``DEFAULT_PALETTE`` (black / white).

        Returns
        -------
        PIL.Image.Image  (mode "RGB")

        Notes
        -----
        * Nearest-neighbour up-scaling keeps every cell a crisp square.
        """
        if not isinstance(scale, int) or scale < 1:
            raise ValueError("scale must be a positive integer")

        colors = dict(DEFAULT_PALETTE)
        if palette is not None:
            colors.update(palette)

        if self.is_empty():
            return Image.new("RGB", (0, 0))

        rgb = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        rgb[~self.grid] = colors[False]
        rgb[self.grid] = colors[True]

        img = Image.fromarray(rgb)

        if scale > 1:
            img = img.resize((self.width * scale, self.height * scale), resample=Image.Resampling.NEAREST)

        return img

    def to_image_with_polygons(
        self,
        polygons: Sequence[Sequence[Tuple[float, float]]],
        *,
        scale: int = 4,
        palette: Dict[bool, Tuple[int, int, int]] | None = None,
        outline_colour: Tuple[int, int, int] = DEFAULT_OUTLINE_COLOUR,
        outline_width: int | None = None,
    ) -> Image.Image:
        """
        Render the grid with polygon outlines on top.

        Parameters
        ----------
        polygons : list of list of (x, y)
            Typically the output of :meth:`clip_opaque_to_polygons`. Vertices
            are cell-corner coordinates, so ``(x, y)`` maps to pixel
            ``(x * scale, y * scale)``.
        scale : int, default 4
        palette : {bool: (R, G, B)}, optional
        outline_colour : (R, G, B), default red
        outline_width : int, optional
            Defaults to ``max(1, scale // 2)``.

        Returns
        -------
        PIL.Image.Image
        """
        img = self.to_image(scale=scale, palette=palette)
        draw = ImageDraw.Draw(img)

        w = outline_width if outline_width is not None else max(1, scale // 2)

        for polygon in polygons:
            pts = [(x * scale, y * scale) for x, y in polygon]
            if len(pts) < 2:
                continue
            draw.line(pts + [pts[0]], fill=outline_colour, width=w)

        return img

    ## Private Methods
    def _cell_in_range(self, point: Sequence[float]) -> Optional[Tuple[int, int]]:
        cell = to_cell(point)
        if cell is None:
            return None
        x, y = cell
        if 0 <= x < self.width and 0 <= y < self.height:
            return cell
        return None

    def __eq__(self, other):
        if not isinstance(other, BitGrid):
            return NotImplemented
        return self.grid.shape == other.grid.shape and bool(np.array_equal(self.grid, other.grid))

    __hash__ = None

    def __repr__(self):
        return f"BitGrid({self.width}x{self.height}, true_bits={self.true_bit_count()})"

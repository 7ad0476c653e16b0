"""
image_utils.py

Image sources for building grids from an alpha channel.

The grid never talks to an imaging library directly. It only needs the
capabilities described by :class:`ImageSource`; :class:`PillowImageSource`
provides them for :mod:`PIL` images, which covers every uncompressed format
the sprite pipeline loads.
"""
from __future__ import annotations

import enum
from functools import cached_property
from typing import Optional, Protocol, Tuple, runtime_checkable

import numpy as np
from PIL import Image

from ..config import DEFAULT_ALPHA_THRESHOLD
from ..logging_config import logger


class PixelFormat(enum.Enum):
    """Pixel layouts an image source can report."""

    L8 = "L8"
    LA8 = "LA8"
    RGB8 = "RGB8"
    RGBA8 = "RGBA8"
    RF = "RF"
    RGBAF = "RGBAF"
    # block compressed
    DXT1 = "DXT1"
    DXT3 = "DXT3"
    DXT5 = "DXT5"
    BPTC_RGBA = "BPTC_RGBA"
    ETC = "ETC"
    ETC2_RGBA8 = "ETC2_RGBA8"
    UNKNOWN = "UNKNOWN"

    @property
    def is_compressed(self) -> bool:
        return self in _COMPRESSED_FORMATS

    @property
    def supports_alpha_read(self) -> bool:
        """Whether alpha can be read per pixel without decompressing blocks."""
        return self is not PixelFormat.UNKNOWN and not self.is_compressed


_COMPRESSED_FORMATS = frozenset({
    PixelFormat.DXT1,
    PixelFormat.DXT3,
    PixelFormat.DXT5,
    PixelFormat.BPTC_RGBA,
    PixelFormat.ETC,
    PixelFormat.ETC2_RGBA8,
})

# Pillow modes we know how to read. Palette images expand to RGBA.
PILLOW_MODE_FORMATS = {
    "1": PixelFormat.L8,
    "L": PixelFormat.L8,
    "LA": PixelFormat.LA8,
    "La": PixelFormat.LA8,
    "P": PixelFormat.RGBA8,
    "PA": PixelFormat.RGBA8,
    "RGB": PixelFormat.RGB8,
    "RGBX": PixelFormat.RGB8,
    "RGBA": PixelFormat.RGBA8,
    "RGBa": PixelFormat.RGBA8,
    "I": PixelFormat.RF,
    "F": PixelFormat.RF,
}


@runtime_checkable
class ImageSource(Protocol):
    """
    What the grid needs from an image.

    Attributes
    ----------
    size : (int, int)
        ``(width, height)`` in pixels.
    pixel_format : PixelFormat
        Storage format. Sources whose format does not support alpha reads
        are rejected before any pixel is touched.

    A source may also offer a bulk ``alpha()`` returning all alpha values
    as a float array of shape (height, width); :func:`threshold_alpha` uses
    it when present and falls back to ``get_pixel`` otherwise.
    """

    @property
    def size(self) -> Tuple[int, int]: ...

    @property
    def pixel_format(self) -> PixelFormat: ...

    def get_pixel(self, x: int, y: int) -> Tuple[float, float, float, float]:
        """``(r, g, b, a)`` of one pixel, each channel normalized to [0, 1]."""
        ...


class PillowImageSource:
    """
    :class:`ImageSource` backed by a :class:`PIL.Image.Image`.

    Images without an alpha band read as fully opaque; palette images use
    their ``transparency`` entry when present.

    Examples
    --------
    >>> from PIL import Image
    >>> source = PillowImageSource(Image.new("RGBA", (3, 2), (0, 0, 0, 128)))
    >>> source.size, source.pixel_format
    ((3, 2), <PixelFormat.RGBA8: 'RGBA8'>)
    """

    def __init__(self, image: Image.Image):
        self.image = image

    @classmethod
    def open(cls, filepath) -> "PillowImageSource":
        """Load an image file eagerly and wrap it."""
        image = Image.open(filepath)
        image.load()
        return cls(image)

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    @property
    def pixel_format(self) -> PixelFormat:
        return PILLOW_MODE_FORMATS.get(self.image.mode, PixelFormat.UNKNOWN)

    def get_pixel(self, x: int, y: int) -> Tuple[float, float, float, float]:
        r, g, b = self._rgb_image.getpixel((x, y))
        return r / 255.0, g / 255.0, b / 255.0, float(self._alpha[y, x])

    def alpha(self) -> np.ndarray:
        """Bulk alpha read, shape (height, width), so thresholding skips get_pixel."""
        return self._alpha.copy()

    @cached_property
    def _alpha(self) -> np.ndarray:
        image = self.image
        if image.mode == "P" and "transparency" in image.info:
            image = image.convert("RGBA")

        for index, band in enumerate(image.getbands()):
            if band in ("A", "a"):
                return np.asarray(image.getchannel(index), dtype=np.float64) / 255.0

        width, height = image.size
        return np.ones((height, width), dtype=np.float64)

    @cached_property
    def _rgb_image(self) -> Image.Image:
        image = self.image
        if image.mode in ("I", "F"):
            image = image.convert("L")
        return image.convert("RGB")


def threshold_alpha(
    image: Optional[ImageSource],
    threshold: float = DEFAULT_ALPHA_THRESHOLD,
) -> Optional[np.ndarray]:
    """
    Mark every pixel whose alpha is strictly greater than ``threshold``.

    Parameters
    ----------
    image : ImageSource or None
        Source image.
    threshold : float, default 0.1
        Alpha threshold in [0, 1]. A pixel with alpha exactly equal to the
        threshold is *not* marked, so ``threshold=1.0`` never marks anything.

    Returns
    -------
    ndarray of bool, shape (height, width), or None
        None when the image cannot be used (missing, zero area, or a pixel
        format without direct alpha reads). The reason is logged.
    """
    if image is None:
        logger.warning("Cannot threshold alpha: no image given.")
        return None

    width, height = image.size
    if width <= 0 or height <= 0:
        logger.warning("Cannot threshold alpha: image has zero area (%dx%d).", width, height)
        return None

    pixel_format = image.pixel_format
    if not pixel_format.supports_alpha_read:
        logger.warning("Cannot threshold alpha: pixel format %s does not support alpha reads.", pixel_format.name)
        return None

    read_alpha = getattr(image, "alpha", None)
    if callable(read_alpha):
        alpha = np.asarray(read_alpha(), dtype=np.float64)
    else:
        alpha = np.array(
            [[image.get_pixel(x, y)[3] for x in range(width)] for y in range(height)],
            dtype=np.float64,
        )

    if alpha.shape != (height, width):
        logger.warning("Cannot threshold alpha: alpha shape %s does not match image size %dx%d.", alpha.shape, width, height)
        return None

    return alpha > threshold

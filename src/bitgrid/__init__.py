"""
bitgrid: boolean rasters for sprite collision and occlusion polygons.

>>> from bitgrid import BitGrid
>>> grid = BitGrid((64, 64))
>>> grid.set_bit_rect((8, 8, 16, 16), True)
>>> [len(polygon) for polygon in grid.clip_opaque_to_polygons((0, 0, 64, 64))]
[4]
"""

# Pure-Python re-exports
from .BitGrid import BitGrid
from .utils.image_utils import ImageSource, PillowImageSource, PixelFormat
from .utils.rect_utils import Rect

# Set up logging
from .logging_config import logger

__all__ = [
    "BitGrid",
    "ImageSource",
    "PillowImageSource",
    "PixelFormat",
    "Rect",
    "logger",
    "utils",
]

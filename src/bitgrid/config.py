"""
Package-wide defaults for bitgrid.

Every value here is only ever used as a keyword default, so callers can
override any of them per call.
"""

# Alpha strictly above this value marks a cell as opaque
DEFAULT_ALPHA_THRESHOLD = 0.1

# Largest cell count a grid may hold (w * h must fit a signed 32-bit int)
MAX_CELL_COUNT = 2**31 - 1

# Ramer-Douglas-Peucker tolerance for extracted polygons. 0 keeps every corner.
DEFAULT_POLYGON_EPSILON = 0.0

# Colors used by BitGrid.to_image
DEFAULT_PALETTE = {
    False: (0, 0, 0),          # transparent – black
    True: (255, 255, 255),     # opaque – white
}

DEFAULT_OUTLINE_COLOUR = (255, 0, 0)

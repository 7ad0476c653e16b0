import numpy as np
import pytest

from bitgrid.BitGrid import BitGrid


def reset_bit_grid(bit_grid):
    width, height = bit_grid.size
    bit_grid.set_bit_rect((0, 0, width, height), False)


def test_create():
    """
    Test grid creation and rejection of invalid sizes.

    - A valid size creates an all-false grid of that size.
    - Zero sizes and sizes whose cell count overflows a signed 32-bit int
      (46341*46341 = 2147488281) are ignored; the previous size is kept.
    - Float sizes are truncated, not rounded.
    """
    bit_grid = BitGrid()
    bit_grid.create((256, 512))
    assert bit_grid.size == (256, 512)
    assert bit_grid.true_bit_count() == 0

    bit_grid.create((0, 256))
    assert bit_grid.size == (256, 512)

    bit_grid.create((512, 0))
    assert bit_grid.size == (256, 512)

    bit_grid.create((512.99, 256.50))
    assert bit_grid.size == (512, 256)

    bit_grid.create((46341, 46341))
    assert bit_grid.size == (512, 256)


def test_create_invalid_keeps_bits():
    """
    Test that an ignored create leaves the bits untouched, not only the size.
    """
    bit_grid = BitGrid((16, 16))
    bit_grid.set_bit_rect((2, 2, 4, 4), True)

    for size in [(-1, 0), (0, 0), (float("nan"), 4), (4, float("inf")), (65536, 65536)]:
        bit_grid.create(size)
        assert bit_grid.size == (16, 16)
        assert bit_grid.true_bit_count() == 16


def test_size():
    """
    Test the size properties before and after create.
    """
    bit_grid = BitGrid()
    assert bit_grid.size == (0, 0)
    assert bit_grid.is_empty()

    bit_grid.create((256, 256))
    assert bit_grid.size == (256, 256)
    assert (bit_grid.width, bit_grid.height) == (256, 256)
    assert bit_grid.grid.shape == (256, 256)
    assert not bit_grid.is_empty()

    bit_grid.create((-1, 0))
    assert bit_grid.size == (256, 256)

    bit_grid.create((256, 128))
    assert bit_grid.size == (256, 128)
    assert bit_grid.grid.shape == (128, 256)  # rows are y


def test_set_bit():
    """
    Test setting single bits.

    - Setting a bit before the grid exists does nothing and does not raise.
    - A set bit is counted and read back; clearing it restores the count.
    - Out of range points are ignored.
    """
    bit_grid = BitGrid()
    bit_grid.set_bit((128, 128), True)
    assert bit_grid.true_bit_count() == 0

    bit_grid.create((256, 256))
    bit_grid.set_bit((128, 128), True)
    assert bit_grid.true_bit_count() == 1
    assert bit_grid.get_bit((128, 128)) is True

    bit_grid.set_bit((128, 128), False)
    assert bit_grid.true_bit_count() == 0
    assert bit_grid.get_bit((128, 128)) is False

    bit_grid.create((256, 256))
    bit_grid.set_bit((512, 512), True)
    bit_grid.set_bit((-1, 5), True)
    assert bit_grid.true_bit_count() == 0


def test_get_bit():
    """
    Test reading bits, in particular that the valid range is [0, 256).
    """
    bit_grid = BitGrid()
    assert bit_grid.get_bit((128, 128)) is False

    bit_grid.create((256, 256))
    assert bit_grid.get_bit((128, 128)) is False

    bit_grid.set_bit_rect((-1, -1, 257, 257), True)

    assert bit_grid.get_bit((-1, 0)) is False
    assert bit_grid.get_bit((0, 0)) is True
    assert bit_grid.get_bit((128, 128)) is True
    assert bit_grid.get_bit((255, 255)) is True
    assert bit_grid.get_bit((256, 256)) is False
    assert bit_grid.get_bit((257, 257)) is False


def test_get_bit_truncates_and_tolerates_bad_points():
    """
    Test that float points are truncated and non-finite points read as False.
    """
    bit_grid = BitGrid((4, 4))
    bit_grid.set_bit((1.9, 2.7), True)
    assert bit_grid.get_bit((1, 2)) is True
    assert bit_grid.get_bit((1.2, 2.2)) is True
    assert bit_grid.get_bit((float("nan"), 0)) is False
    assert bit_grid.get_bit((0, float("-inf"))) is False


def test_set_bit_rect():
    """
    Test filling rectangles, including out of bounds handling.

    - Filling before the grid exists does not raise.
    - Rects overhanging any edge only fill their intersection with the grid.
    """
    bit_grid = BitGrid()
    bit_grid.set_bit_rect((0, 0, 128, 128), True)

    bit_grid.create((256, 256))
    assert bit_grid.true_bit_count() == 0

    bit_grid.set_bit_rect((0, 0, 256, 256), True)
    assert bit_grid.true_bit_count() == 65536

    reset_bit_grid(bit_grid)
    bit_grid.set_bit_rect((128, 128, 256, 256), True)
    assert bit_grid.true_bit_count() == 16384

    reset_bit_grid(bit_grid)
    bit_grid.set_bit_rect((-128, -128, 256, 256), True)
    assert bit_grid.true_bit_count() == 16384

    reset_bit_grid(bit_grid)
    bit_grid.set_bit_rect((-128, -128, 512, 512), True)
    assert bit_grid.true_bit_count() == 65536

    reset_bit_grid(bit_grid)
    bit_grid.set_bit_rect((300, 300, 10, 10), True)
    bit_grid.set_bit_rect((10, 10, -5, 5), True)
    assert bit_grid.true_bit_count() == 0


def test_get_bit_rect():
    """
    Test copying the bits of a rectangle out of the grid.

    - The result has the shape of the clipped rect and is a copy.
    - A rect that misses the grid gives an empty (0, 0) array.
    """
    bit_grid = BitGrid((8, 8))
    bit_grid.set_bit_rect((2, 2, 3, 3), True)

    block = bit_grid.get_bit_rect((-2, 0, 6, 4))
    assert block.shape == (4, 4)
    assert block.dtype == bool
    assert int(block.sum()) == 4  # cells (2..3, 2..3)

    block[:] = False
    assert bit_grid.true_bit_count() == 9

    assert bit_grid.get_bit_rect((20, 20, 4, 4)).shape == (0, 0)
    assert BitGrid().get_bit_rect((0, 0, 4, 4)).shape == (0, 0)


def test_true_bit_count():
    bit_grid = BitGrid()
    assert bit_grid.true_bit_count() == 0

    bit_grid.create((256, 256))
    assert bit_grid.true_bit_count() == 0
    bit_grid.set_bit_rect((0, 0, 256, 256), True)
    assert bit_grid.true_bit_count() == 65536
    bit_grid.set_bit((0, 0), False)
    assert bit_grid.true_bit_count() == 65535
    bit_grid.set_bit_rect((0, 0, 256, 256), False)
    assert bit_grid.true_bit_count() == 0


def test_resize():
    """
    Test resizing.

    - Resizing an uninitialised grid allocates it.
    - Shrinking drops the bits outside the new bounds and keeps the top-left.
    - A negative dimension leaves a 0x0 grid.
    - Growing keeps every bit and fills new cells with False.
    """
    bit_grid = BitGrid()
    assert bit_grid.size == (0, 0)
    bit_grid.resize((256, 256))
    assert bit_grid.size == (256, 256)

    bit_grid.create((256, 256))
    bit_grid.set_bit_rect((0, 0, 10, 10), True)
    bit_grid.set_bit_rect((246, 246, 10, 10), True)
    assert bit_grid.true_bit_count() == 200
    bit_grid.resize((128, 128))
    assert bit_grid.true_bit_count() == 100
    assert bit_grid.get_bit((9, 9)) is True

    bit_grid.create((256, 256))
    bit_grid.resize((-1, 256))
    assert bit_grid.size == (0, 0)

    bit_grid.create((256, 256))
    bit_grid.set_bit_rect((246, 246, 10, 10), True)
    assert bit_grid.true_bit_count() == 100
    bit_grid.resize((512, 512))
    assert bit_grid.true_bit_count() == 100
    assert bit_grid.size == (512, 512)
    assert bit_grid.get_bit((255, 255)) is True
    assert not bit_grid.get_bit_rect((256, 0, 256, 512)).any()


def test_resize_non_square():
    """
    Test that resize keeps the overlap when only one dimension shrinks.
    """
    bit_grid = BitGrid((6, 4))
    bit_grid.set_bit_rect((0, 0, 6, 4), True)
    bit_grid.resize((3.7, 8))
    assert bit_grid.size == (3, 8)
    assert bit_grid.true_bit_count() == 12
    assert np.array_equal(bit_grid.get_bit_rect((0, 0, 3, 4)), np.ones((4, 3), dtype=bool))
    assert not bit_grid.get_bit_rect((0, 4, 3, 4)).any()


def test_copy_and_equality():
    """
    Test that copy is independent and equality compares size and bits.
    """
    bit_grid = BitGrid((5, 5))
    bit_grid.set_bit((1, 1), True)

    duplicate = bit_grid.copy()
    assert duplicate == bit_grid
    assert duplicate is not bit_grid

    duplicate.set_bit((2, 2), True)
    assert duplicate != bit_grid
    assert bit_grid.true_bit_count() == 1

    assert BitGrid((5, 4)) != BitGrid((4, 5))
    assert BitGrid() == BitGrid()
    assert "5x5" in repr(bit_grid)


def test_from_constructor_size():
    """
    Test that the constructor's size argument behaves like create.
    """
    assert BitGrid((3, 2)).size == (3, 2)
    assert BitGrid((0, 2)).size == (0, 0)


@pytest.mark.parametrize("rect", [(0, 0, 4, 4), (-3, -3, 100, 100), (1.5, 1.5, 2.5, 2.5)])
def test_set_bit_rect_counts_clamped_area(rect):
    """
    Test that set_bit_rect touches exactly the clamped intersection.
    """
    bit_grid = BitGrid((4, 4))
    bit_grid.set_bit_rect(rect, True)

    x, y, w, h = (int(v) for v in rect)
    x0, y0 = max(x, 0), max(y, 0)
    x1, y1 = min(x + w, 4), min(y + h, 4)
    assert bit_grid.true_bit_count() == max(x1 - x0, 0) * max(y1 - y0, 0)

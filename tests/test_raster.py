import numpy as np
import pytest

from src.geometry.errors import InvalidInputError
from src.warping.raster import RasterImage


def test_blank_is_transparent():
    r = RasterImage.blank(3, 2)
    assert (r.width, r.height) == (3, 2)
    assert r.pixels.shape == (2, 3, 4)
    assert not r.pixels.any()


def test_bytes_layout_is_row_major_rgba():
    data = bytes(range(2 * 2 * 4))
    r = RasterImage.from_bytes(2, 2, data)
    # second pixel of the first row
    assert tuple(r.pixels[0, 1]) == (4, 5, 6, 7)
    # first pixel of the second row
    assert tuple(r.pixels[1, 0]) == (8, 9, 10, 11)
    assert r.tobytes() == data


def test_from_bytes_rejects_wrong_length():
    with pytest.raises(InvalidInputError):
        RasterImage.from_bytes(2, 2, bytes(15))


@pytest.mark.parametrize("w, h", [(0, 2), (2, -1), (1.5, 2)])
def test_invalid_dimensions_rejected(w, h):
    with pytest.raises(InvalidInputError):
        RasterImage.blank(w, h)


def test_from_array_promotes_rgb_and_gray():
    rgb = np.full((2, 3, 3), 7, dtype=np.uint8)
    r = RasterImage.from_array(rgb)
    assert r.pixels.shape == (2, 3, 4)
    assert np.all(r.pixels[:, :, 3] == 255)
    assert np.all(r.pixels[:, :, :3] == 7)

    gray = np.arange(6, dtype=np.uint8).reshape(2, 3)
    g = RasterImage.from_array(gray)
    assert tuple(g.pixels[1, 2]) == (5, 5, 5, 255)


def test_rejects_non_rgba_arrays():
    with pytest.raises(InvalidInputError):
        RasterImage(np.zeros((2, 2, 3), dtype=np.uint8))
    with pytest.raises(InvalidInputError):
        RasterImage(np.zeros((2, 2, 4), dtype=np.float32))
    with pytest.raises(InvalidInputError):
        RasterImage.from_array(np.zeros((2, 2, 5), dtype=np.uint8))


def test_from_array_rejects_float_and_out_of_range_values():
    with pytest.raises(InvalidInputError):
        RasterImage.from_array(np.full((2, 2, 3), 0.5))
    with pytest.raises(InvalidInputError):
        RasterImage.from_array(np.full((2, 2), 300, dtype=np.int32))
    r = RasterImage.from_array(np.full((2, 2, 4), 12, dtype=np.int64))
    assert r.pixels.dtype == np.uint8
    assert np.all(r.pixels == 12)

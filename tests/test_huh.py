import sys

import numpy as np
import pytest

from huhconv import huh
from huhconv.encoding import ByteOrder
from huhconv.errors import TruncatedHeader, SizeMismatch
from huhconv.huh import PixelGrid


def random_grid(width, height, seed=0):
    rng = np.random.default_rng(seed)
    return PixelGrid(rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8))


def two_pixels():
    return PixelGrid(np.array([[[255, 0, 0], [0, 255, 0]]], dtype=np.uint8))


def test_two_pixel_layout_little_endian():
    data = huh.encode(two_pixels(), order=ByteOrder.LittleEndian)
    assert data == bytes([2, 0, 0, 0, 1, 0, 0, 0, 0xFF, 0, 0, 0, 0xFF, 0])
    assert huh.decode(data, order=ByteOrder.LittleEndian) == two_pixels()


def test_default_header_uses_host_byte_order():
    data = huh.encode(two_pixels())
    assert data[:4] == (2).to_bytes(4, sys.byteorder)
    assert data[4:8] == (1).to_bytes(4, sys.byteorder)


def test_big_endian_header():
    data = huh.encode(two_pixels(), order=ByteOrder.BigEndian)
    assert data[:8] == bytes([0, 0, 0, 2, 0, 0, 0, 1])
    assert huh.decode(data, order=ByteOrder.BigEndian) == two_pixels()


@pytest.mark.parametrize('width,height', [(1, 1), (7, 3), (3, 7), (64, 48), (0, 5), (5, 0)])
def test_round_trip(width, height):
    grid = random_grid(width, height)
    data = huh.encode(grid)
    assert len(data) == 8 + width * height * 3
    assert huh.decode(data) == grid


def test_rows_are_stored_top_to_bottom():
    grid = PixelGrid.blank(2, 2)
    grid.pixels[1, 0] = (1, 2, 3)
    data = huh.encode(grid)
    # Third pixel: y=1, x=0
    assert data[8 + 6:8 + 9] == bytes([1, 2, 3])


def test_empty_grid():
    data = huh.encode(PixelGrid.blank(0, 0))
    assert data == bytes(8)

    decoded = huh.decode(data)
    assert decoded.width == 0
    assert decoded.height == 0


@pytest.mark.parametrize('size', range(8))
def test_truncated_header(size):
    with pytest.raises(TruncatedHeader):
        huh.decode(bytes(size))


def test_size_mismatch_reports_lengths():
    data = huh.encode(random_grid(10, 10))
    # Header claims 10x10, but only 50 pixel bytes follow
    broken = data[:8 + 50]

    with pytest.raises(SizeMismatch) as e:
        huh.decode(broken)

    assert e.value.expected == 8 + 300
    assert e.value.actual == 58
    assert '308' in str(e.value)


def test_trailing_bytes_are_rejected():
    data = huh.encode(random_grid(2, 2)) + b'\x00'
    with pytest.raises(SizeMismatch):
        huh.decode(data)


def test_failed_decode_never_reports_progress():
    reports = []
    data = huh.encode(random_grid(4, 4))[:-1]
    with pytest.raises(SizeMismatch):
        huh.decode(data, reports.append)
    assert reports == []


def test_progress_ends_at_one():
    reports = []
    grid = random_grid(100, 100)
    huh.decode(huh.encode(grid), reports.append)
    assert 90 <= len(reports) <= 110
    assert reports[-1] == 1.0
    assert reports == sorted(reports)


def test_progress_on_empty_grid():
    reports = []
    huh.encode(PixelGrid.blank(0, 0), reports.append)
    assert reports == [1.0]


def test_grid_rejects_wrong_shape():
    with pytest.raises(ValueError):
        PixelGrid(np.zeros((2, 2, 4), dtype=np.uint8))


def test_is_huh_path():
    assert huh.is_huh_path('image.huh')
    assert huh.is_huh_path('IMAGE.HUH')
    assert not huh.is_huh_path('image.png')
    assert not huh.is_huh_path('huh')

# HUH file format, image/x.huh
# A deliberately dumb container for uncompressed RGB images.
#
# Format:
#   32-bit unsigned width, then height, in the byte order of the writing host
#   width * height RGB triples, row by row, one byte per channel
#
# No magic, no version, no alpha, no metadata, no compression. The total size
# is therefore fully determined by the header, and anything else is rejected.

from typing import Optional

import numpy as np

from huhconv.encoding import ByteOrder, U32, encode_with_order, decode_with_order, size_of
from huhconv.errors import TruncatedHeader, SizeMismatch
from huhconv.progress import ProgressCallback, sampled_ranges

HEADER_TYPES = [U32, U32]
HEADER_SIZE = size_of(HEADER_TYPES)
CHANNELS = 3
EXTENSION = '.huh'


class PixelGrid:
    """
    RGB pixels of a single image, (height, width, 3) uint8 in row-major order.
    """

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise ValueError(f'Expected a (height, width, {CHANNELS}) array, got {pixels.shape}')
        self.pixels = np.ascontiguousarray(pixels, dtype=np.uint8)

    @staticmethod
    def blank(width: int, height: int) -> 'PixelGrid':
        return PixelGrid(np.zeros((height, width, CHANNELS), dtype=np.uint8))

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def __eq__(self, other):
        if not isinstance(other, PixelGrid):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and np.array_equal(self.pixels, other.pixels)

    def __repr__(self):
        return f'PixelGrid({self.width}x{self.height})'


def expected_size(width: int, height: int) -> int:
    return HEADER_SIZE + width * height * CHANNELS


def is_huh_path(path) -> bool:
    return str(path).lower().endswith(EXTENSION)


def encode(grid: PixelGrid, progress: Optional[ProgressCallback] = None,
           order: ByteOrder = ByteOrder.Default) -> bytes:
    header = encode_with_order(order, [U32(grid.width), U32(grid.height)])

    output = bytearray(expected_size(grid.width, grid.height))
    output[:HEADER_SIZE] = header

    flat = grid.pixels.reshape(-1, CHANNELS)
    for start, end in sampled_ranges(grid.pixel_count, progress):
        output[HEADER_SIZE + start * CHANNELS:HEADER_SIZE + end * CHANNELS] = flat[start:end].tobytes()

    return bytes(output)


def read_header(data: bytes, order: ByteOrder = ByteOrder.Default):
    """ Returns (width, height) of a HUH buffer, without looking at the pixel data """
    if len(data) < HEADER_SIZE:
        raise TruncatedHeader(len(data), HEADER_SIZE)

    width, height = decode_with_order(order, data, HEADER_TYPES)
    return width, height


def decode(data: bytes, progress: Optional[ProgressCallback] = None,
           order: ByteOrder = ByteOrder.Default) -> PixelGrid:
    width, height = read_header(data, order)

    expected = expected_size(width, height)
    if len(data) != expected:
        raise SizeMismatch(width, height, expected, len(data))

    grid = PixelGrid.blank(width, height)
    source = np.frombuffer(data, dtype=np.uint8, offset=HEADER_SIZE).reshape(-1, CHANNELS)
    target = grid.pixels.reshape(-1, CHANNELS)

    for start, end in sampled_ranges(grid.pixel_count, progress):
        target[start:end] = source[start:end]

    return grid

import argparse
import io
import os

from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from huhconv import huh
from huhconv.encoding import ByteOrder
from huhconv.errors import SourceNotFound, IdentityConversionUnsupported, UnderlyingCodecError, IOFailure
from huhconv.huh import PixelGrid
from huhconv.log import Log
from huhconv.progress import ProgressCallback, ProgressBar

# Pillow modes every writer we care about accepts as-is
_JPEG_MODES = ('RGB', 'L', 'CMYK')


class Pipeline:
    """
    Routes a conversion between HUH files and everything Pillow can read or write, based on the file extensions.
    """

    @dataclass
    class Config:
        byte_order: ByteOrder = ByteOrder.Native
        jpeg_quality: int = 90
        show_progress: bool = True

        def __post_init__(self):
            if not 1 <= self.jpeg_quality <= 95:
                raise ValueError(f'JPEG quality must be within [1, 95], got {self.jpeg_quality}')

        @staticmethod
        def add_arguments(parser: argparse.ArgumentParser):
            parser.add_argument('--byte-order', default='native', choices=['native', 'little', 'big'],
                                help='Byte order of the HUH header fields (native keeps old files readable)')
            parser.add_argument('--jpeg-quality', default=90, type=int, help='Quality for JPEG outputs (1-95)')
            parser.add_argument('--no-progress', action='store_true', help='Do not draw the progress bar')

        @staticmethod
        def from_args(args) -> 'Pipeline.Config':
            return Pipeline.Config(ByteOrder.from_name(args.byte_order), args.jpeg_quality, not args.no_progress)

    def __init__(self, config: 'Pipeline.Config' = None, progress: Optional[ProgressCallback] = None):
        self.config = config if config is not None else Pipeline.Config()
        if progress is None and self.config.show_progress:
            progress = ProgressBar()
        self.progress = progress

    def convert(self, source, destination):
        source, destination = str(source), str(destination)

        source_is_huh = huh.is_huh_path(source)
        destination_is_huh = huh.is_huh_path(destination)

        if source_is_huh and destination_is_huh:
            raise IdentityConversionUnsupported()

        if not os.path.exists(source):
            raise SourceNotFound(source)

        if source_is_huh:
            Log.debug(f'Route: HUH -> image ({source} -> {destination})')
            grid = self.read_huh(source)
            self.write_image(grid, destination)
        elif destination_is_huh:
            Log.debug(f'Route: image -> HUH ({source} -> {destination})')
            grid = self.read_image(source)
            self.write_huh(grid, destination)
        else:
            Log.debug(f'Route: image -> image ({source} -> {destination})')
            self.reencode(source, destination)

    def read_huh(self, path: str) -> PixelGrid:
        data = _read_file(path)
        grid = huh.decode(data, self.progress, self.config.byte_order)
        Log.debug(f'Decoded {grid.width}x{grid.height} HUH image from {path}')
        return grid

    def write_huh(self, grid: PixelGrid, path: str):
        data = huh.encode(grid, self.progress, self.config.byte_order)
        Log.debug(f'Encoded {grid.width}x{grid.height} image into {len(data)} HUH bytes')
        _write_file(path, data)

    @staticmethod
    def read_image(path: str) -> PixelGrid:
        with _open_image(path) as image:
            # Alpha and palettes are flattened, HUH only knows about RGB
            rgb = image.convert('RGB')
            Log.debug(f'Read {image.format} {image.mode} image {rgb.width}x{rgb.height} from {path}')
            return PixelGrid(np.array(rgb))

    def write_image(self, grid: PixelGrid, path: str):
        try:
            image = Image.fromarray(grid.pixels)
        except (ValueError, TypeError) as e:
            raise UnderlyingCodecError(f'Cannot build an image from {grid}: {e}') from e

        _write_file(path, self._encode_image(image, path))

    def reencode(self, source: str, destination: str):
        with _open_image(source) as image:
            data = self._encode_image(image, destination)
        _write_file(destination, data)

    def _encode_image(self, image: Image.Image, path: str) -> bytes:
        """ Encodes in memory first, so that Pillow failures never leave a truncated destination behind """
        image_format = _format_for(path)

        options = {}
        if image_format == 'JPEG':
            options['quality'] = self.config.jpeg_quality
            if image.mode not in _JPEG_MODES:
                image = image.convert('RGB')

        buffer = io.BytesIO()
        try:
            image.save(buffer, format=image_format, **options)
        except (OSError, ValueError, KeyError, TypeError, SystemError) as e:
            raise UnderlyingCodecError(f'Cannot encode {path} as {image_format}: {e}') from e

        return buffer.getvalue()


def _format_for(path: str) -> str:
    extension = os.path.splitext(path)[1].lower()
    formats = Image.registered_extensions()
    if extension not in formats:
        raise UnderlyingCodecError(f'Unsupported output format: {extension or path}')
    return formats[extension]


def _open_image(path: str) -> Image.Image:
    try:
        image = Image.open(path)
    except UnidentifiedImageError as e:
        raise UnderlyingCodecError(f'Unrecognized image format: {path}') from e
    except Image.DecompressionBombError as e:
        raise UnderlyingCodecError(f'Refusing to decode {path}: {e}') from e
    except OSError as e:
        raise IOFailure(f'Cannot read {path}: {e}') from e

    try:
        image.load()
    except (OSError, ValueError, SyntaxError) as e:
        # Pillow reports corrupt streams with any of these, depending on the plugin
        image.close()
        raise UnderlyingCodecError(f'Cannot decode {path}: {e}') from e
    return image


def _read_file(path: str) -> bytes:
    try:
        with open(path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise IOFailure(f'Cannot read {path}: {e}') from e


def _write_file(path: str, data: bytes):
    try:
        with open(path, 'wb') as f:
            f.write(data)
            f.flush()
    except OSError as e:
        raise IOFailure(f'Cannot write {path}: {e}') from e

import os
import select
import shutil
import sys
import termios
import tty

from dataclasses import dataclass
from typing import Optional, TextIO

from PIL import Image

RESET = '\x1b[0m'
HIDE_CURSOR = '\x1b[?25l'
SHOW_CURSOR = '\x1b[?25h'
CURSOR_HOME = '\x1b[H'

# Lines kept free below the image for the status messages
_RESERVED_LINES = 2


def render_ansi(image: Image.Image, width: int, height: int) -> str:
    """
    Draws the image with truecolor half-blocks: every text row holds two pixel rows, the upper one in the foreground
    color of '▀' and the lower one in its background color.
    """
    image = image.convert('RGB').resize((max(1, width), max(1, height)), Image.LANCZOS)
    pixels = image.load()

    lines = []
    for y in range(0, image.height, 2):
        line = []
        for x in range(image.width):
            r1, g1, b1 = pixels[x, y]
            if y + 1 < image.height:
                r2, g2, b2 = pixels[x, y + 1]
                line.append(f'\x1b[38;2;{r1};{g1};{b1}m\x1b[48;2;{r2};{g2};{b2}m▀')
            else:
                # Odd height: the last row has nothing below it, keep the terminal background
                line.append(f'\x1b[38;2;{r1};{g1};{b1}m\x1b[49m▀')
        line.append(RESET)
        lines.append(''.join(line))

    return '\n'.join(lines) + '\n'


def fit_size(image_width: int, image_height: int, max_width: int, max_height: int):
    """ Largest (width, height) within the bounds that keeps the aspect ratio, in pixels """
    if image_width == 0 or image_height == 0:
        return 0, 0
    scale = min(max_width / image_width, max_height / image_height)
    return max(1, int(image_width * scale)), max(1, int(image_height * scale))


@dataclass
class RenderOptions:
    width: Optional[int] = None  # Columns, None to fit the terminal
    height: Optional[int] = None  # Text rows, None to fit the terminal
    restore_cursor: bool = True
    relative: bool = True  # Draw at the cursor, instead of the top-left corner


class TerminalRenderer:
    def __init__(self, stream: TextIO = None):
        self.stream = stream if stream is not None else sys.stdout

    def render(self, path: str, options: RenderOptions = None):
        options = options if options is not None else RenderOptions()

        columns, lines = shutil.get_terminal_size()
        max_width = options.width if options.width is not None else columns
        max_rows = options.height if options.height is not None else max(1, lines - _RESERVED_LINES)

        with Image.open(path) as image:
            width, height = fit_size(image.width, image.height, max_width, max_rows * 2)
            if width == 0:
                return
            art = render_ansi(image, width, height)

        if options.restore_cursor:
            self.stream.write(HIDE_CURSOR)
        try:
            if not options.relative:
                self.stream.write(CURSOR_HOME)
            self.stream.write(art)
        finally:
            if options.restore_cursor:
                self.stream.write(SHOW_CURSOR)
            self.stream.flush()


class RawTerminal:
    """
    Puts the terminal in raw mode for the duration of a `with` block and restores the previous mode on the way out,
    whatever way that is.
    Does nothing when the stream isn't a terminal.
    """

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdin
        self.fd = None
        self._saved = None

    @property
    def is_tty(self) -> bool:
        return self.fd is not None

    def __enter__(self) -> 'RawTerminal':
        if hasattr(self.stream, 'isatty') and self.stream.isatty():
            fd = self.stream.fileno()
            self._saved = termios.tcgetattr(fd)
            tty.setraw(fd)
            self.fd = fd
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.fd is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
            self.fd = None
            self._saved = None
        return False

    def poll_key(self, timeout: float) -> Optional[str]:
        """ Waits up to `timeout` seconds for a single key press """
        if self.fd is None:
            return None

        readable, _, _ = select.select([self.fd], [], [], timeout)
        if not readable:
            return None

        data = os.read(self.fd, 1)
        if not data:
            raise EOFError('Terminal input closed')
        return data.decode('latin-1')

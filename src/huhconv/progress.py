import sys

from typing import Callable, Iterator, Optional, TextIO, Tuple

ProgressCallback = Callable[[float], None]


def cadence(total: int) -> int:
    """ Number of pixels between two progress reports: ~1% of the image, never zero """
    return max(1, total // 100)


def sampled_ranges(total: int, progress: Optional[ProgressCallback] = None) -> Iterator[Tuple[int, int]]:
    """
    Splits `range(total)` into `[start, end)` slices of `cadence(total)` items.

    Progress is reported after every slice that doesn't finish the range, and 1.0 is reported once the whole range
    was consumed, even when it was empty.
    """
    step = cadence(total)
    for start in range(0, total, step):
        end = min(start + step, total)
        yield start, end
        if progress is not None and end < total:
            progress(end / total)

    if progress is not None:
        progress(1.0)


class ProgressBar:
    """ Redraws a single-line progress bar in place """

    FILLED = '█'

    def __init__(self, stream: TextIO = None, width: int = 50, use_color: bool = None):
        self.stream = stream if stream is not None else sys.stdout
        self.width = width
        if use_color is None:
            use_color = hasattr(self.stream, 'isatty') and self.stream.isatty()
        self.use_color = use_color

    def __call__(self, progress: float):
        progress = min(max(progress, 0.0), 1.0)
        filled = int(progress * self.width)

        bar = self.FILLED * filled
        if self.use_color:
            bar = f'\x1b[32m{bar}\x1b[0m'
        bar += ' ' * (self.width - filled)

        # Write failures are not caught: a broken stream ends the conversion
        self.stream.write(f'\r[{bar}] {progress * 100:.1f}%')
        if progress >= 1.0:
            self.stream.write('\n')
        self.stream.flush()

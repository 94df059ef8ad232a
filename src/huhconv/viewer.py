import argparse
import os
import sys
import tempfile

from dataclasses import dataclass
from typing import Optional

from huhconv import huh
from huhconv.errors import SourceNotFound
from huhconv.log import Log
from huhconv.pipeline import Pipeline
from huhconv.terminal import RawTerminal, RenderOptions, TerminalRenderer

# 'q', 'Q' and Ctrl-C, which arrives as a plain character in raw mode
QUIT_KEYS = ('q', 'Q', '\x03')


class Viewer:
    @dataclass
    class Config:
        width: Optional[int] = None
        height: Optional[int] = None
        restore_cursor: bool = True
        poll_interval: int = 50  # ms
        interactive: bool = True

        @property
        def poll_interval_sec(self):
            return self.poll_interval / 1000.0

        @property
        def render_options(self) -> RenderOptions:
            return RenderOptions(self.width, self.height, self.restore_cursor)

        @staticmethod
        def add_arguments(parser: argparse.ArgumentParser):
            parser.add_argument('--width', type=int, help='Image width in columns (default: fit the terminal)')
            parser.add_argument('--height', type=int, help='Image height in rows (default: fit the terminal)')
            parser.add_argument('--no-restore-cursor', action='store_true',
                                help='Leave the cursor hidden state alone while drawing')
            parser.add_argument('--poll-interval', default=50, type=int, help='Key polling interval (ms)')
            parser.add_argument('--no-wait', action='store_true', help='Exit right after drawing the image')

        @staticmethod
        def from_args(args) -> 'Viewer.Config':
            return Viewer.Config(args.width, args.height, not args.no_restore_cursor, args.poll_interval,
                                 not args.no_wait)

    def __init__(self, config: 'Viewer.Config' = None, pipeline: Pipeline = None, renderer: TerminalRenderer = None,
                 terminal_factory=RawTerminal):
        self.config = config if config is not None else Viewer.Config()
        self.pipeline = pipeline if pipeline is not None else Pipeline()
        self.renderer = renderer if renderer is not None else TerminalRenderer()
        self.terminal_factory = terminal_factory

    def view(self, path):
        path = str(path)
        if not os.path.exists(path):
            raise SourceNotFound(path)

        if huh.is_huh_path(path):
            self._view_huh(path)
        else:
            self.renderer.render(path, self.config.render_options)

        if self.config.interactive:
            self.wait_for_quit()

    def _view_huh(self, path: str):
        Log.info('Decoding HUH file...')

        fd, temp_path = tempfile.mkstemp(suffix='.png', prefix='huh-view-')
        os.close(fd)
        try:
            self.pipeline.convert(path, temp_path)
            self.renderer.render(temp_path, self.config.render_options)
        finally:
            os.remove(temp_path)
            Log.debug(f'Removed temporary file {temp_path}')

    def wait_for_quit(self):
        print("\nPress 'q' to exit viewer...", file=sys.stderr)
        with self.terminal_factory() as terminal:
            if not terminal.is_tty:
                Log.debug('Input is not a terminal, not waiting for a key')
                return

            while True:
                key = terminal.poll_key(self.config.poll_interval_sec)
                if key in QUIT_KEYS:
                    break

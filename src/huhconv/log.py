import argparse
import logging
import sys


class Log:
    """
    Thin facade over the 'huh' logger, so that modules don't have to carry their own logger instances around.
    """

    SUCCESS = logging.INFO + 5

    _logger = logging.getLogger('huh')

    class Formatter(logging.Formatter):
        COLORS = {
            logging.DEBUG: '\x1b[90m',
            logging.INFO: '\x1b[34m',
            logging.INFO + 5: '\x1b[32m',
            logging.WARNING: '\x1b[33m',
            logging.ERROR: '\x1b[31m',
        }
        RESET = '\x1b[0m'

        def __init__(self, use_color: bool):
            super().__init__('%(levelname)s: %(message)s')
            self.use_color = use_color

        def format(self, record: logging.LogRecord) -> str:
            text = super().format(record)
            color = self.COLORS.get(record.levelno)
            if not self.use_color or color is None:
                return text
            return f'{color}{text}{self.RESET}'

    @staticmethod
    def add_args(parser: argparse.ArgumentParser):
        parser.add_argument('--log-level', default='info', choices=['debug', 'info', 'warning', 'error'],
                            help='Minimal level of the messages to print')
        parser.add_argument('--no-color', action='store_true', help='Disable colored output')

    @staticmethod
    def setup(args, stream=None):
        logging.addLevelName(Log.SUCCESS, 'SUCCESS')

        stream = stream if stream is not None else sys.stderr
        use_color = not args.no_color and hasattr(stream, 'isatty') and stream.isatty()

        handler = logging.StreamHandler(stream)
        handler.setFormatter(Log.Formatter(use_color))

        # Repeated setup (e.g. from tests) replaces the handler instead of stacking them
        for old in list(Log._logger.handlers):
            Log._logger.removeHandler(old)

        Log._logger.addHandler(handler)
        Log._logger.setLevel(args.log_level.upper())
        Log._logger.propagate = False

    @staticmethod
    def debug(message: str):
        Log._logger.debug(message)

    @staticmethod
    def info(message: str):
        Log._logger.info(message)

    @staticmethod
    def success(message: str):
        Log._logger.log(Log.SUCCESS, message)

    @staticmethod
    def warning(message: str):
        Log._logger.warning(message)

    @staticmethod
    def error(message: str):
        Log._logger.error(message)

import argparse
import os
import sys

from typing import List, Tuple

from huhconv.errors import HuhError, SourceNotFound, IOFailure
from huhconv.log import Log
from huhconv.pipeline import Pipeline
from huhconv.viewer import Viewer

LOGO = r'''
  _   _ _   _ _   _   _____                           _
 | | | | | | | | | | /  __ \                         | |
 | |_| | | | | |_| | | /  \/ ___  _ ____   _____ _ __| |_ ___ _ __
 |  _  | | | |  _  | | |    / _ \| '_ \ \ / / _ \ '__| __/ _ \ '__|
 | | | | |_| | | | | | \__/\ (_) | | | \ V /  __/ |  | ||  __/ |
 \_| |_/\___/\_| |_|  \____/\___/|_|_|\_/ \___|_|   \__\___|_|
'''

USAGE = '''Usage:
  huh convert <input_file> <output_file>  - Convert between image formats and HUH
  huh view <file>                         - View an image or HUH file in the terminal
  huh batch [list_file]                   - Convert every source/destination line pair of a list file
  huh help                                - Show this help message

Without a command, file.txt in the current directory is processed like `huh batch file.txt`.

Examples:
  huh convert image.png image.huh
  huh convert image.huh image.jpg
  huh view image.huh
  huh batch conversions.txt'''

DEFAULT_BATCH_FILE = 'file.txt'

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def print_usage(file=None):
    file = file if file is not None else sys.stdout
    use_color = hasattr(file, 'isatty') and file.isatty()
    print(f'\x1b[36m{LOGO}\x1b[0m' if use_color else LOGO, file=file)
    print('   Universal Image Converter & Viewer\n', file=file)
    print(USAGE, file=file)


def read_batch_file(path: str) -> List[Tuple[str, str]]:
    """
    Reads source/destination pairs from a text file: one path per line, sources and destinations alternating.
    Blank lines and '#' comments are skipped.
    """
    if not os.path.exists(path):
        raise SourceNotFound(path)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            paths = [line.strip() for line in f]
    except OSError as e:
        raise IOFailure(f'Cannot read {path}: {e}') from e
    paths = [p for p in paths if p and not p.startswith('#')]

    if len(paths) % 2 != 0:
        raise ValueError(f'{path}: destination missing for {paths[-1]}')

    return list(zip(paths[0::2], paths[1::2]))


def make_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    Log.add_args(common)
    Pipeline.Config.add_arguments(common)

    viewer = argparse.ArgumentParser(add_help=False)
    Viewer.Config.add_arguments(viewer)

    parser = argparse.ArgumentParser('huh', description='Convert images to and from the HUH format, or view them')
    commands = parser.add_subparsers(dest='command')

    convert = commands.add_parser('convert', parents=[common], help='Convert between image formats and HUH')
    convert.add_argument('input', help='File to read')
    convert.add_argument('output', help='File to write, will be overwritten')

    view = commands.add_parser('view', parents=[common, viewer], help='View an image or HUH file in the terminal')
    view.add_argument('file', help='File to display')

    batch = commands.add_parser('batch', parents=[common], help='Convert the file pairs listed in a text file')
    batch.add_argument('list_file', nargs='?', default=DEFAULT_BATCH_FILE,
                       help=f'Alternating source and destination lines (default: {DEFAULT_BATCH_FILE})')

    commands.add_parser('help', help='Show the usage')

    return parser


def convert(pipeline: Pipeline, source: str, destination: str):
    Log.info(f'Converting {source} to {destination}')
    pipeline.convert(source, destination)
    Log.success(f'Successfully converted {source} to {destination}')


def run(args) -> int:
    pipeline = Pipeline(Pipeline.Config.from_args(args))

    if args.command == 'convert':
        convert(pipeline, args.input, args.output)

    elif args.command == 'view':
        Log.info(f'Viewing: {args.file}')
        Viewer(Viewer.Config.from_args(args), pipeline).view(args.file)

    elif args.command == 'batch':
        Log.info(f'Reading conversions from {args.list_file}')
        pairs = read_batch_file(args.list_file)
        for source, destination in pairs:
            convert(pipeline, source, destination)
        Log.success(f'{len(pairs)} file(s) converted')

    return EXIT_OK


def main(argv=None) -> int:
    parser = make_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        if not os.path.exists(DEFAULT_BATCH_FILE):
            print_usage()
            return EXIT_OK
        args = parser.parse_args(['batch'])

    if args.command == 'help':
        print_usage()
        return EXIT_OK

    Log.setup(args)

    try:
        return run(args)
    except HuhError as e:
        Log.error(f'An error occurred: {e}')
        return e.exit_code
    except ValueError as e:
        Log.error(str(e))
        return EXIT_USAGE
    except KeyboardInterrupt:
        Log.warning('Interrupted')
        return EXIT_INTERRUPTED


if __name__ == '__main__':
    sys.exit(main())

class HuhError(Exception):
    """ Base class for everything a conversion or view can fail with """

    exit_code = 1


class SourceNotFound(HuhError):
    exit_code = 3

    def __init__(self, path):
        super().__init__(f'Input file does not exist: {path}')
        self.path = path


class TruncatedHeader(HuhError):
    exit_code = 4

    def __init__(self, actual: int, required: int):
        super().__init__(f'Invalid HUH data: header needs {required} bytes, got {actual}')
        self.actual = actual
        self.required = required


class SizeMismatch(HuhError):
    exit_code = 5

    def __init__(self, width: int, height: int, expected: int, actual: int):
        super().__init__(f'Invalid HUH data: {width}x{height} image needs {expected} bytes, got {actual}')
        self.width = width
        self.height = height
        self.expected = expected
        self.actual = actual


class IdentityConversionUnsupported(HuhError):
    exit_code = 6

    def __init__(self):
        super().__init__('Cannot convert from HUH to HUH')


class UnderlyingCodecError(HuhError):
    """ Raised from a Pillow failure, which is kept as __cause__ """

    exit_code = 7


class IOFailure(HuhError):
    """ Creating, writing or flushing a destination file failed, the OSError is kept as __cause__ """

    exit_code = 8

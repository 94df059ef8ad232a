from enum import Enum
from typing import List, Sequence

import struct


class ByteOrder(Enum):
    Native = '='
    LittleEndian = '<'
    BigEndian = '>'
    Default = Native

    @staticmethod
    def from_name(name: str) -> 'ByteOrder':
        names = {
            'native': ByteOrder.Native,
            'little': ByteOrder.LittleEndian,
            'big': ByteOrder.BigEndian,
        }
        if name not in names:
            raise ValueError(f'Unknown byte order: {name}')
        return names[name]


class Format(Enum):
    u8 = 'B'
    u16 = 'H'
    u32 = 'I'
    u64 = 'Q'


def packed_int(fmt: Format):
    """ Turns an empty class into a range-checked unsigned field with a fixed wire format """
    max_value = (1 << int(fmt.name[1:])) - 1

    def decorator(cls):
        def __init__(self, value: int):
            if not isinstance(value, int):
                raise TypeError(f'{cls.__name__} value must be of type {int.__name__}')

            if not 0 <= value <= max_value:
                raise ValueError(f'{cls.__name__} value must be within [0, {max_value}], got {value}')

            self.value = value

        cls.__init__ = __init__
        cls.format = fmt
        cls.size = struct.calcsize(f'={fmt.value}')
        return cls

    return decorator


@packed_int(Format.u32)
class U32:
    pass


def size_of(types: Sequence) -> int:
    return sum(t.size for t in types)


def encode_with_order(order: ByteOrder, ints: List) -> bytes:
    # '=' keeps the native byte order but, unlike '@', never inserts alignment padding
    fmt = f'{order.value}{"".join(x.format.value for x in ints)}'
    return struct.pack(fmt, *(x.value for x in ints))


def decode_with_order(order: ByteOrder, data: bytes, types: Sequence) -> List[int]:
    """
    Unpacks the leading bytes of `data` into plain integers.
    Only `size_of(types)` bytes are read, the rest of the buffer is ignored.
    """
    fmt = f'{order.value}{"".join(t.format.value for t in types)}'
    return list(struct.unpack_from(fmt, data, 0))

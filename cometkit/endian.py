"""Big-endian signed integer encoding into byte buffers."""

from __future__ import annotations

import struct
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


def int8(b: BytesLike) -> int:
    """Read a signed 8-bit integer from the start of ``b``."""
    return struct.unpack_from(">b", b)[0]


def put_int8(b: Union[bytearray, memoryview], v: int) -> None:
    """Write ``v`` as a signed 8-bit integer at the start of ``b``."""
    struct.pack_into(">b", b, 0, v)


def int16(b: BytesLike) -> int:
    """Read a big-endian signed 16-bit integer from the start of ``b``."""
    return struct.unpack_from(">h", b)[0]


def put_int16(b: Union[bytearray, memoryview], v: int) -> None:
    """Write ``v`` as a big-endian signed 16-bit integer at the start of ``b``."""
    struct.pack_into(">h", b, 0, v)


def int32(b: BytesLike) -> int:
    """Read a big-endian signed 32-bit integer from the start of ``b``."""
    return struct.unpack_from(">i", b)[0]


def put_int32(b: Union[bytearray, memoryview], v: int) -> None:
    """Write ``v`` as a big-endian signed 32-bit integer at the start of ``b``."""
    struct.pack_into(">i", b, 0, v)
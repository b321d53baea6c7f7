"""Framing of WebSocket messages over buffered streams."""

from __future__ import annotations

import enum
from typing import Protocol, Union

from .bufferedio import Reader, Writer

_FIN_BIT = 1 << 7
_RSV1_BIT = 1 << 6
_RSV2_BIT = 1 << 5
_RSV3_BIT = 1 << 4
_OP_BITS = 0x0F

_MASK_BIT = 1 << 7
_LEN_BITS = 0x7F

CONTINUATION_FRAME_MAX_READ = 100

BytesLike = Union[bytes, bytearray, memoryview]


class MessageType(enum.IntEnum):
    """Frame opcodes."""

    CONTINUATION = 0
    TEXT = 1
    BINARY = 2
    CLOSE = 8
    PING = 9
    PONG = 10


class MessageCloseError(Exception):
    """The peer sent a close control frame."""

    def __init__(self) -> None:
        super().__init__("close control message")


class MessageMaxReadError(Exception):
    """Too many frames arrived without completing a message."""

    def __init__(self) -> None:
        super().__init__("continuation frame max read")


class ProtocolError(Exception):
    """A frame violates the WebSocket framing rules."""


class _Closable(Protocol):
    def close(self) -> None: ...


def mask_bytes(key: BytesLike, pos: int, b: Union[bytearray, memoryview]) -> int:
    """XOR ``b`` in place with the 4-byte ``key`` starting at key offset ``pos``.

    Returns the key offset to continue with.
    """
    start = pos & 3
    n = len(b)
    if n:
        key = bytes(key[:4])
        rotated = key[start:] + key[:start]
        stream = (rotated * (n // 4 + 1))[:n]
        b[:] = bytes(x ^ y for x, y in zip(b, stream))
    return (pos + n) & 3


class Conn:
    """A WebSocket connection over a buffered reader and writer."""

    def __init__(self, rwc: _Closable, reader: Reader, writer: Writer) -> None:
        self._rwc = rwc
        self._reader = reader
        self._writer = writer
        self._mask_key = bytes(4)

    def write_message(self, msg_type: int, msg: BytesLike) -> None:
        """Buffer one unfragmented message of type ``msg_type``."""
        self.write_header(msg_type, len(msg))
        self.write_body(msg)

    def write_header(self, msg_type: int, length: int) -> None:
        """Buffer a final-frame header for a payload of ``length`` bytes."""
        if not 0 <= int(msg_type) <= _OP_BITS:
            raise ValueError(f"invalid message type {msg_type}")
        if length < 0:
            raise ValueError("length must not be negative")
        header = self._writer.peek(2)
        header[0] = _FIN_BIT | int(msg_type)
        if length <= 125:
            header[1] = length
        elif length < 65536:
            header[1] = 126
            self._writer.peek(2)[:] = length.to_bytes(2, "big")
        else:
            header[1] = 127
            self._writer.peek(8)[:] = length.to_bytes(8, "big")

    def write_body(self, b: BytesLike) -> None:
        """Buffer payload bytes."""
        if len(b) > 0:
            self._writer.write(b)

    def peek(self, n: int) -> memoryview:
        """Reserve ``n`` bytes of the write buffer for filling in."""
        return self._writer.peek(n)

    def flush(self) -> None:
        """Write out buffered data."""
        self._writer.flush()

    def read_message(self) -> tuple[MessageType, bytes]:
        """Read one data message, answering pings and joining fragments.

        Raises :class:`MessageCloseError` on a close frame and EOFError when
        the stream ends.
        """
        payload = bytearray()
        fin_op = MessageType.CONTINUATION
        count = 0
        while True:
            fin, op, part = self._read_frame()
            if op in (MessageType.BINARY, MessageType.TEXT, MessageType.CONTINUATION):
                if fin and not payload:
                    return MessageType(op), part
                payload += part
                if op != MessageType.CONTINUATION:
                    fin_op = MessageType(op)
                if fin:
                    return fin_op, bytes(payload)
            elif op == MessageType.PING:
                self.write_message(MessageType.PONG, part)
            elif op == MessageType.PONG:
                pass
            elif op == MessageType.CLOSE:
                raise MessageCloseError()
            else:
                raise ProtocolError(
                    f"unknown control message, fin={str(fin).lower()}, op={op}"
                )
            if count > CONTINUATION_FRAME_MAX_READ:
                raise MessageMaxReadError()
            count += 1

    def _read_frame(self) -> tuple[bool, int, bytes]:
        b = self._reader.read_byte()
        fin = bool(b & _FIN_BIT)
        if b & (_RSV1_BIT | _RSV2_BIT | _RSV3_BIT):
            raise ProtocolError(
                f"unexpected reserved bits rsv1={b & _RSV1_BIT}, "
                f"rsv2={b & _RSV2_BIT}, rsv3={b & _RSV3_BIT}"
            )
        op = b & _OP_BITS
        b = self._reader.read_byte()
        masked = bool(b & _MASK_BIT)
        length = b & _LEN_BITS
        if length == 126:
            payload_len = int.from_bytes(self._reader.pop(2), "big")
        elif length == 127:
            payload_len = int.from_bytes(self._reader.pop(8), "big", signed=True)
        else:
            payload_len = length
        if masked:
            self._mask_key = self._reader.pop(4)
        payload = b""
        if payload_len > 0:
            payload = self._reader.pop(payload_len)
            if masked:
                buf = bytearray(payload)
                mask_bytes(self._mask_key, 0, buf)
                payload = bytes(buf)
        return fin, op, payload

    def close(self) -> None:
        """Close the underlying connection."""
        self._rwc.close()
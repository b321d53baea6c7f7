"""Buffered readers and writers over byte streams.

A :class:`Reader` wraps any object with a ``read(size)`` method that returns
``bytes`` (``b""`` at end of stream) or ``None`` when no data is available yet.
A :class:`Writer` wraps any object with a ``write(data)`` method that returns
the number of bytes written (``None`` counts as everything).
"""

from __future__ import annotations

from typing import Optional, Protocol, Union

DEFAULT_BUF_SIZE = 4096
MIN_READ_BUFFER_SIZE = 16
MAX_CONSECUTIVE_EMPTY_READS = 100


class BufferFullError(Exception):
    """The request does not fit in the buffer.

    ``data`` holds whatever was consumed or available when the buffer filled.
    """

    def __init__(self, data: bytes = b"") -> None:
        super().__init__("bufio: buffer full")
        self.data = data


class NegativeCountError(ValueError):
    """A negative byte count was requested."""

    def __init__(self) -> None:
        super().__init__("bufio: negative count")


class NoProgressError(OSError):
    """The underlying stream repeatedly returned no data and no end of stream."""

    def __init__(self) -> None:
        super().__init__("multiple read calls return no data or error")


class ShortWriteError(OSError):
    """The underlying stream accepted fewer bytes than were given to it."""

    def __init__(self) -> None:
        super().__init__("short write")


class _InvalidReadError(ValueError):
    pass


class _RawReader(Protocol):
    def read(self, size: int) -> Optional[bytes]: ...


class _RawWriter(Protocol):
    def write(self, data: bytes) -> Optional[int]: ...


BytesLike = Union[bytes, bytearray, memoryview]


class Reader:
    """Buffered reader with peek, pop and line-oriented helpers."""

    def __init__(self, rd: _RawReader, size: int = DEFAULT_BUF_SIZE) -> None:
        self._reset(bytearray(max(size, MIN_READ_BUFFER_SIZE)), rd)

    def _reset(self, buf: bytearray, rd: _RawReader) -> None:
        self._buf = buf
        self._rd = rd
        self._r = 0
        self._w = 0
        self._err: Optional[BaseException] = None

    def reset(self, rd: _RawReader) -> None:
        """Drop buffered data and state, and read from ``rd`` from now on."""
        self._reset(self._buf, rd)

    def reset_buffer(self, rd: _RawReader, buf: BytesLike) -> None:
        """Like :meth:`reset`, but also switch to the buffer ``buf``."""
        self._reset(buf if isinstance(buf, bytearray) else bytearray(buf), rd)

    def _raw_read(self, size: int) -> bytes:
        for _ in range(MAX_CONSECUTIVE_EMPTY_READS):
            data = self._rd.read(size)
            if data is None:
                continue
            if len(data) > size:
                raise _InvalidReadError(
                    "bufio: reader returned invalid count from read"
                )
            return bytes(data)
        raise NoProgressError()

    def _fill(self) -> None:
        if self._r > 0:
            pending = self._w - self._r
            self._buf[:pending] = self._buf[self._r : self._w]
            self._w = pending
            self._r = 0
        if self._w >= len(self._buf):
            raise RuntimeError("bufio: tried to fill full buffer")
        try:
            data = self._raw_read(len(self._buf) - self._w)
        except _InvalidReadError:
            raise
        except Exception as exc:
            self._err = exc
            return
        if not data:
            self._err = EOFError()
            return
        self._buf[self._w : self._w + len(data)] = data
        self._w += len(data)

    def _take_err(self) -> Optional[BaseException]:
        err, self._err = self._err, None
        return err

    def _finish_empty(self) -> bytes:
        """Report the pending condition of an exhausted buffer."""
        err = self._take_err()
        if err is not None and not isinstance(err, EOFError):
            raise err
        return b""

    def peek(self, n: int) -> bytes:
        """Return the next ``n`` bytes without consuming them.

        Fewer bytes are returned only at end of stream.
        """
        if n < 0:
            raise NegativeCountError()
        if n > len(self._buf):
            raise BufferFullError()
        while self._w - self._r < n and self._err is None:
            self._fill()
        avail = self._w - self._r
        if avail < n:
            err = self._take_err()
            if err is None:
                raise BufferFullError(bytes(self._buf[self._r : self._w]))
            if not isinstance(err, EOFError):
                raise err
            n = avail
        return bytes(self._buf[self._r : self._r + n])

    def pop(self, n: int) -> bytes:
        """Return and consume exactly ``n`` bytes; raise EOFError if the stream ends first."""
        data = self.peek(n)
        if len(data) < n:
            raise EOFError("bufio: unexpected end of stream")
        self._r += n
        return data

    def discard(self, n: int) -> int:
        """Skip ``n`` bytes and return how many were skipped (fewer only at end of stream)."""
        if n < 0:
            raise NegativeCountError()
        if n == 0:
            return 0
        remain = n
        while True:
            skip = self.buffered()
            if skip == 0:
                self._fill()
                skip = self.buffered()
            skip = min(skip, remain)
            self._r += skip
            remain -= skip
            if remain == 0:
                return n
            if self._err is not None:
                err = self._take_err()
                if isinstance(err, EOFError):
                    return n - remain
                raise err

    def read(self, n: int) -> bytes:
        """Read up to ``n`` bytes with at most one fill; ``b""`` means end of stream."""
        if n < 0:
            raise NegativeCountError()
        if n == 0:
            return self._finish_empty()
        if self._r == self._w:
            if self._err is not None:
                return self._finish_empty()
            if n >= len(self._buf):
                return self._raw_read(n)
            self._fill()
            if self._r == self._w:
                return self._finish_empty()
        end = min(self._r + n, self._w)
        data = bytes(self._buf[self._r : end])
        self._r = end
        return data

    def read_byte(self) -> int:
        """Read one byte; raise EOFError at end of stream."""
        while self._r == self._w:
            if self._err is not None:
                raise self._take_err()
            self._fill()
        c = self._buf[self._r]
        self._r += 1
        return c

    def read_slice(self, delim: Union[int, bytes]) -> bytes:
        """Read through the first ``delim`` byte.

        At end of stream the remaining bytes are returned without a delimiter
        (``b""`` when nothing is left). When the buffer fills first, the whole
        buffer is consumed and :class:`BufferFullError` carries it in ``data``.
        """
        if isinstance(delim, (bytes, bytearray)):
            if len(delim) != 1:
                raise ValueError("delimiter must be a single byte")
            delim = delim[0]
        while True:
            i = self._buf.find(delim, self._r, self._w)
            if i >= 0:
                line = bytes(self._buf[self._r : i + 1])
                self._r = i + 1
                return line
            if self._err is not None:
                err = self._take_err()
                if not isinstance(err, EOFError):
                    raise err
                line = bytes(self._buf[self._r : self._w])
                self._r = self._w
                return line
            if self.buffered() >= len(self._buf):
                line = bytes(self._buf[self._r : self._w])
                self._r = self._w
                raise BufferFullError(line)
            self._fill()

    def read_line(self) -> tuple[bytes, bool]:
        """Read one line without its line end.

        Returns ``(line, is_prefix)``; ``is_prefix`` is true when the line was
        too long for the buffer and the rest follows in later calls. Raises
        EOFError when the stream is exhausted.
        """
        try:
            line = self.read_slice(b"\n")
        except BufferFullError as exc:
            line = exc.data
            if line and line[-1] == 0x0D:
                if self._r == 0:
                    raise RuntimeError("bufio: tried to rewind past start of buffer")
                self._r -= 1
                line = line[:-1]
            return line, True
        if not line:
            raise EOFError()
        if line.endswith(b"\r\n"):
            line = line[:-2]
        elif line.endswith(b"\n"):
            line = line[:-1]
        return line, False

    def buffered(self) -> int:
        """Number of bytes that can be read from the buffer."""
        return self._w - self._r


class Writer:
    """Buffered writer; after an error, every later write or flush raises it again."""

    def __init__(self, w: _RawWriter, size: int = DEFAULT_BUF_SIZE) -> None:
        if size <= 0:
            size = DEFAULT_BUF_SIZE
        self._buf = bytearray(size)
        self._n = 0
        self._wr = w
        self._err: Optional[BaseException] = None

    def reset(self, w: _RawWriter) -> None:
        """Drop unflushed data, clear any error and write to ``w``."""
        self._err = None
        self._n = 0
        self._wr = w

    def reset_buffer(self, w: _RawWriter, buf: BytesLike) -> None:
        """Like :meth:`reset`, but also switch to the buffer ``buf``."""
        self._buf = buf if isinstance(buf, bytearray) else bytearray(buf)
        self.reset(w)

    def _write_through(self, data: bytes) -> int:
        written = self._wr.write(data)
        return len(data) if written is None else written

    def _flush(self) -> Optional[BaseException]:
        if self._err is not None:
            return self._err
        if self._n == 0:
            return None
        try:
            written = self._write_through(bytes(self._buf[: self._n]))
            err: Optional[BaseException] = (
                ShortWriteError() if written < self._n else None
            )
        except Exception as exc:
            written, err = 0, exc
        if err is not None:
            if 0 < written < self._n:
                self._buf[: self._n - written] = self._buf[written : self._n]
            self._n -= written
            self._err = err
            return err
        self._n = 0
        return None

    def flush(self) -> None:
        """Write buffered data to the underlying stream."""
        err = self._flush()
        if err is not None:
            raise err

    def available(self) -> int:
        """Number of unused bytes in the buffer."""
        return len(self._buf) - self._n

    def buffered(self) -> int:
        """Number of bytes waiting in the buffer."""
        return self._n

    def _copy_in(self, data: memoryview) -> int:
        count = min(len(data), self.available())
        self._buf[self._n : self._n + count] = data[:count]
        self._n += count
        return count

    def write(self, p: BytesLike) -> int:
        """Buffer ``p``, flushing as needed; return the number of bytes accepted."""
        data = memoryview(bytes(p))
        total = 0
        while len(data) > self.available() and self._err is None:
            if self.buffered() == 0:
                try:
                    count = self._write_through(bytes(data))
                    if count == 0:
                        self._err = ShortWriteError()
                except Exception as exc:
                    count = 0
                    self._err = exc
            else:
                count = self._copy_in(data)
                self._flush()
            total += count
            data = data[count:]
        if self._err is not None:
            raise self._err
        total += self._copy_in(data)
        return total

    def write_raw(self, p: BytesLike) -> int:
        """Write ``p`` straight to the stream when nothing is buffered, else buffer it."""
        if self._err is not None:
            raise self._err
        if self.buffered() == 0:
            try:
                return self._write_through(bytes(p))
            except Exception as exc:
                self._err = exc
                raise
        return self.write(p)

    def peek(self, n: int) -> memoryview:
        """Reserve the next ``n`` bytes of the buffer and return them for filling in."""
        if n < 0:
            raise NegativeCountError()
        if n > len(self._buf):
            raise BufferFullError()
        while self.available() < n and self._err is None:
            self._flush()
        if self._err is not None:
            raise self._err
        view = memoryview(self._buf)[self._n : self._n + n]
        self._n += n
        return view

    def write_string(self, s: str) -> int:
        """Buffer the UTF-8 encoding of ``s``; return the number of bytes accepted."""
        data = memoryview(s.encode("utf-8"))
        total = 0
        while len(data) > self.available() and self._err is None:
            count = self._copy_in(data)
            total += count
            data = data[count:]
            self._flush()
        if self._err is not None:
            raise self._err
        total += self._copy_in(data)
        return total


def new_reader_size(rd: _RawReader, size: int) -> Reader:
    """Return a Reader with a buffer of at least ``size`` bytes.

    An existing Reader with a large enough buffer is returned as it is.
    """
    if isinstance(rd, Reader) and len(rd._buf) >= size:
        return rd
    return Reader(rd, size)


def new_reader(rd: _RawReader) -> Reader:
    """Return a Reader with the default buffer size."""
    return new_reader_size(rd, DEFAULT_BUF_SIZE)


def new_writer_size(w: _RawWriter, size: int) -> Writer:
    """Return a Writer with a buffer of at least ``size`` bytes.

    An existing Writer with a large enough buffer is returned as it is.
    """
    if isinstance(w, Writer) and len(w._buf) >= size:
        return w
    return Writer(w, size)


def new_writer(w: _RawWriter) -> Writer:
    """Return a Writer with the default buffer size."""
    return new_writer_size(w, DEFAULT_BUF_SIZE)
"""A thread-safe pool of fixed-size byte buffers carved from shared blocks."""

from __future__ import annotations

import threading


class Buffer:
    """A fixed-size slice of a pool block."""

    __slots__ = ("_buf",)

    def __init__(self, buf: memoryview) -> None:
        self._buf = buf

    def bytes(self) -> memoryview:
        """Return the writable memory of this buffer."""
        return self._buf


class Pool:
    """Hands out buffers of ``size`` bytes, allocating ``num`` of them at a time."""

    def __init__(self, num: int, size: int) -> None:
        self._lock = threading.Lock()
        self._free: list[Buffer] = []
        self._num = 0
        self._size = 0
        self.init(num, size)

    def init(self, num: int, size: int) -> None:
        """Discard the free list and allocate a fresh block of ``num`` buffers."""
        if num < 1:
            raise ValueError("pool needs at least one buffer per block")
        if size < 0:
            raise ValueError("buffer size must not be negative")
        with self._lock:
            self._num = num
            self._size = size
            self._free = []
            self._grow()

    def _grow(self) -> None:
        block = memoryview(bytearray(self._num * self._size))
        size = self._size
        buffers = [
            Buffer(block[start : start + size])
            for start in range(0, self._num * size, size)
        ] if size else [Buffer(block[0:0]) for _ in range(self._num)]
        # The free list pops from its end, so the first buffer comes out first.
        self._free.extend(reversed(buffers))

    def get(self) -> Buffer:
        """Take a free buffer, allocating a new block when none is left."""
        with self._lock:
            if not self._free:
                self._grow()
            return self._free.pop()

    def put(self, b: Buffer) -> None:
        """Return a buffer to the pool; it is the next one handed out."""
        with self._lock:
            self._free.append(b)
"""Join and split lists of fixed-width integers as delimited text."""

from __future__ import annotations

import re

_DECIMAL = re.compile(r"[+-]?[0-9]+")

_INT32 = (-(1 << 31), (1 << 31) - 1)
_INT64 = (-(1 << 63), (1 << 63) - 1)


def _join(values: list[int], sep: str, bounds: tuple[int, int]) -> str:
    low, high = bounds
    for value in values:
        if not low <= value <= high:
            raise OverflowError(f"value {value} out of range")
    return sep.join(str(value) for value in values)


def _split(s: str, sep: str, bounds: tuple[int, int]) -> list[int]:
    if s == "":
        return []
    low, high = bounds
    result = []
    for part in s.split(sep):
        if not _DECIMAL.fullmatch(part):
            raise ValueError(f"invalid integer syntax: {part!r}")
        value = int(part)
        if not low <= value <= high:
            raise ValueError(f"integer out of range: {part!r}")
        result.append(value)
    return result


def join_int32s(values: list[int], sep: str) -> str:
    """Format 32-bit integers as ``n1<sep>n2<sep>n3``."""
    return _join(values, sep, _INT32)


def split_int32s(s: str, sep: str) -> list[int]:
    """Parse ``s`` into 32-bit integers; an empty string gives an empty list."""
    return _split(s, sep, _INT32)


def join_int64s(values: list[int], sep: str) -> str:
    """Format 64-bit integers as ``n1<sep>n2<sep>n3``."""
    return _join(values, sep, _INT64)


def split_int64s(s: str, sep: str) -> list[int]:
    """Parse ``s`` into 64-bit integers; an empty string gives an empty list."""
    return _split(s, sep, _INT64)
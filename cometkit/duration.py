"""Parsing of duration strings such as ``1s``, ``500ms`` or ``1h30m``."""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Union

_NANOSECOND = 1
_MICROSECOND = 1000 * _NANOSECOND
_MILLISECOND = 1000 * _MICROSECOND
_SECOND = 1000 * _MILLISECOND
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE

_UNITS = {
    "ns": _NANOSECOND,
    "us": _MICROSECOND,
    "\u00b5s": _MICROSECOND,
    "\u03bcs": _MICROSECOND,
    "ms": _MILLISECOND,
    "s": _SECOND,
    "m": _MINUTE,
    "h": _HOUR,
}

_PART = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")


def parse_duration(text: Union[str, bytes]) -> timedelta:
    """Parse a signed sequence of decimal numbers with units (ns, us, ms, s, m, h).

    Parts below a microsecond are truncated. Raises ValueError on bad input
    or when the value does not fit in a signed 64-bit nanosecond count.
    """
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8")
    original = text
    s = text
    negative = False
    if s and s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise ValueError(f"time: invalid duration {original!r}")
    total = 0
    while s:
        match = _PART.match(s)
        whole, frac, unit_name = match.groups()
        if not whole and not frac:
            raise ValueError(f"time: invalid duration {original!r}")
        if not unit_name:
            raise ValueError(f"time: missing unit in duration {original!r}")
        unit = _UNITS.get(unit_name)
        if unit is None:
            raise ValueError(
                f"time: unknown unit {unit_name!r} in duration {original!r}"
            )
        total += int(whole or "0") * unit
        if frac:
            total += int(frac) * unit // 10 ** len(frac)
        s = s[match.end() :]
    limit = (1 << 63) if negative else (1 << 63) - 1
    if total > limit:
        raise ValueError(f"time: invalid duration {original!r}")
    result = timedelta(microseconds=total // _MICROSECOND)
    return -result if negative else result
"""Discovery of the host's internal IPv4 address."""

from __future__ import annotations

import ipaddress
import socket

import psutil


def internal_ip() -> str:
    """Return the first non-loopback IPv4 address of an interface that is up.

    Interfaces whose names start with ``lo`` are skipped. Returns an empty
    string when no such address exists or the interfaces cannot be listed.
    """
    try:
        addresses = psutil.net_if_addrs()
        stats = psutil.net_if_stats()
    except (OSError, psutil.Error):
        return ""
    for name, entries in addresses.items():
        status = stats.get(name)
        if status is None or not status.isup or name.startswith("lo"):
            continue
        for entry in entries:
            if entry.family != socket.AF_INET:
                continue
            try:
                address = ipaddress.IPv4Address(entry.address)
            except ValueError:
                continue
            if not address.is_loopback:
                return str(address)
    return ""
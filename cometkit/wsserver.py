"""Server side of the WebSocket opening handshake."""

from __future__ import annotations

import base64
import hashlib

from .bufferedio import Reader, Writer
from .wsconn import Conn, _Closable
from .wsrequest import Request

KEY_GUID = b"258EAFA5-E914-47DA-95CA-C5AB0DC85B11"


class UpgradeError(Exception):
    """The request cannot be upgraded to a WebSocket connection."""


def compute_accept_key(challenge_key: str) -> str:
    """Return the ``Sec-WebSocket-Accept`` value for ``challenge_key``."""
    digest = hashlib.sha1(challenge_key.encode("latin-1") + KEY_GUID).digest()
    return base64.b64encode(digest).decode("ascii")


def upgrade(rwc: _Closable, reader: Reader, writer: Writer, req: Request) -> Conn:
    """Check the handshake request, answer with 101 and return the connection."""
    if req.method != "GET":
        raise UpgradeError("bad method")
    if req.header.get("Sec-Websocket-Version") != "13":
        raise UpgradeError("missing or bad WebSocket Version")
    if (req.header.get("Upgrade") or "").lower() != "websocket":
        raise UpgradeError("not websocket protocol")
    if "upgrade" not in (req.header.get("Connection") or "").lower():
        raise UpgradeError("not websocket protocol")
    challenge_key = req.header.get("Sec-Websocket-Key") or ""
    if not challenge_key:
        raise UpgradeError("mismatch challenge/response")
    writer.write_string(
        "HTTP/1.1 101 Switching Protocols\r\nUpgrade: websocket\r\nConnection: Upgrade\r\n"
    )
    writer.write_string(
        "Sec-WebSocket-Accept: " + compute_accept_key(challenge_key) + "\r\n\r\n"
    )
    writer.flush()
    return Conn(rwc, reader, writer)
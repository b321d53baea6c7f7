"""Parsing of the HTTP request that opens a WebSocket connection."""

from __future__ import annotations

from dataclasses import dataclass, field
from http.client import HTTPMessage

from .bufferedio import Reader


class MalformedRequestError(ValueError):
    """The request line or a header line cannot be parsed."""


@dataclass
class Request:
    """An HTTP request line with its headers."""

    method: str = ""
    request_uri: str = ""
    proto: str = ""
    host: str = ""
    header: HTTPMessage = field(default_factory=HTTPMessage)


def parse_request_line(line: str) -> tuple[str, str, str]:
    """Split ``"GET /foo HTTP/1.1"`` into method, request URI and protocol."""
    parts = line.split(" ", 2)
    if len(parts) != 3:
        raise MalformedRequestError(f"malformed HTTP request {line}")
    method, request_uri, proto = parts
    return method, request_uri, proto


def _read_line(reader: Reader) -> bytes:
    chunks = []
    while True:
        chunk, more = reader.read_line()
        chunks.append(chunk)
        if not more:
            return b"".join(chunks)


def _read_header(reader: Reader) -> HTTPMessage:
    header = HTTPMessage()
    while True:
        line = _read_line(reader).strip(b" \t")
        if not line:
            return header
        colon = line.find(b":")
        if colon <= 0:
            raise MalformedRequestError(
                "malformed MIME header line: " + line.decode("latin-1")
            )
        key = line[:colon].decode("latin-1")
        value = line[colon + 1 :].lstrip(b" \t").decode("latin-1")
        header[key] = value


def read_request(reader: Reader) -> Request:
    """Read a request line and its headers from ``reader``.

    Raises EOFError if the stream ends before the blank line that closes the
    headers, and :class:`MalformedRequestError` on bad syntax.
    """
    line = _read_line(reader).decode("latin-1")
    method, request_uri, proto = parse_request_line(line)
    header = _read_header(reader)
    return Request(
        method=method,
        request_uri=request_uri,
        proto=proto,
        host=header.get("Host", ""),
        header=header,
    )
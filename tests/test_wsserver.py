import io
import socket

import pytest

from cometkit.bufferedio import new_reader, new_writer
from cometkit.wsconn import MessageType
from cometkit.wsrequest import read_request
from cometkit.wsserver import UpgradeError, compute_accept_key, upgrade

SAMPLE_KEY = "dGhlIHNhbXBsZSBub25jZQ=="
SAMPLE_ACCEPT = "s3pPLMBiTxaQ9kYGzzhZRbK+xOo="
MASK_KEY = b"\x01\x02\x03\x04"
DATA = bytes([0, 1, 2])

RESPONSE = (
    b"HTTP/1.1 101 Switching Protocols\r\n"
    b"Upgrade: websocket\r\n"
    b"Connection: Upgrade\r\n"
    b"Sec-WebSocket-Accept: " + SAMPLE_ACCEPT.encode() + b"\r\n\r\n"
)


def handshake(
    method="GET",
    version="13",
    upgrade_value="websocket",
    connection="Upgrade",
    key=SAMPLE_KEY,
):
    lines = [f"{method} /sub HTTP/1.1", "Host: 127.0.0.1:8080"]
    if version is not None:
        lines.append(f"Sec-WebSocket-Version: {version}")
    if upgrade_value is not None:
        lines.append(f"Upgrade: {upgrade_value}")
    if connection is not None:
        lines.append(f"Connection: {connection}")
    if key is not None:
        lines.append(f"Sec-WebSocket-Key: {key}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode()


def client_frame(opcode, payload):
    masked = bytes(b ^ MASK_KEY[i % 4] for i, b in enumerate(payload))
    return bytes([0x80 | opcode, 0x80 | len(payload)]) + MASK_KEY + masked


def test_compute_accept_key_sample():
    assert compute_accept_key(SAMPLE_KEY) == SAMPLE_ACCEPT


def test_server_over_socket():
    client, server = socket.socketpair()
    client.settimeout(5)
    server.settimeout(5)
    rfile = server.makefile("rb", buffering=0)
    wfile = server.makefile("wb", buffering=0)
    try:
        client.sendall(handshake() + client_frame(MessageType.BINARY, DATA))
        reader = new_reader(rfile)
        writer = new_writer(wfile)
        req = read_request(reader)
        assert req.request_uri == "/sub"
        ws = upgrade(server, reader, writer, req)
        ws.write_message(MessageType.BINARY, DATA)
        ws.flush()
        assert ws.read_message() == (MessageType.BINARY, DATA)

        expected = RESPONSE + bytes([0x80 | MessageType.BINARY, len(DATA)]) + DATA
        received = b""
        while len(received) < len(expected):
            chunk = client.recv(4096)
            if not chunk:
                break
            received += chunk
        assert received == expected
    finally:
        rfile.close()
        wfile.close()
        client.close()
        server.close()


def test_upgrade_in_memory():
    out = io.BytesIO()
    reader = new_reader(io.BytesIO(handshake() + client_frame(MessageType.TEXT, b"hello")))
    writer = new_writer(out)
    ws = upgrade(io.BytesIO(), reader, writer, read_request(reader))
    assert out.getvalue() == RESPONSE
    assert ws.read_message() == (MessageType.TEXT, b"hello")


def run_upgrade(raw):
    out = io.BytesIO()
    reader = new_reader(io.BytesIO(raw))
    writer = new_writer(out)
    req = read_request(reader)
    try:
        return upgrade(io.BytesIO(), reader, writer, req)
    finally:
        writer_output = out.getvalue()
        assert writer_output in (b"", RESPONSE)


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"method": "POST"}, "bad method"),
        ({"version": "8"}, "missing or bad WebSocket Version"),
        ({"version": None}, "missing or bad WebSocket Version"),
        ({"upgrade_value": "h2c"}, "not websocket protocol"),
        ({"upgrade_value": None}, "not websocket protocol"),
        ({"connection": "keep-alive"}, "not websocket protocol"),
        ({"key": None}, "mismatch challenge/response"),
    ],
)
def test_upgrade_rejections(kwargs, message):
    with pytest.raises(UpgradeError, match=message):
        run_upgrade(handshake(**kwargs))


def test_upgrade_header_values_case_insensitive():
    out = io.BytesIO()
    reader = new_reader(
        io.BytesIO(handshake(upgrade_value="WebSocket", connection="keep-alive, UPGRADE"))
    )
    writer = new_writer(out)
    upgrade(io.BytesIO(), reader, writer, read_request(reader))
    assert out.getvalue() == RESPONSE


def test_rejected_upgrade_writes_nothing():
    out = io.BytesIO()
    reader = new_reader(io.BytesIO(handshake(method="PUT")))
    writer = new_writer(out)
    with pytest.raises(UpgradeError):
        upgrade(io.BytesIO(), reader, writer, read_request(reader))
    assert out.getvalue() == b""
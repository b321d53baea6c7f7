# cometkit

Small building blocks for servers that hold many long-lived connections:

- `cometkit.bufferedio`: buffered `Reader` and `Writer` over any object with
  `read(size)` / `write(data)`. The reader offers `peek`, `pop`, `discard`,
  `read`, `read_byte`, `read_slice` and `read_line`; the writer offers
  `write`, `write_string`, `write_raw`, `flush` and `peek`, which reserves
  buffer space to be filled in place. `new_reader`, `new_reader_size`,
  `new_writer` and `new_writer_size` reuse an existing reader or writer whose
  buffer is already large enough.
- `cometkit.bufpool`: a thread-safe `Pool` handing out fixed-size `Buffer`
  objects carved from shared blocks; `get` allocates a new block when the
  free list is empty, `put` returns a buffer.
- `cometkit.bytewriter`: a growable in-memory `Writer` with `write`, `peek`,
  `buffer`, `reset`, `size` and `len()`.
- `cometkit.timer`: a min-heap `Timer` that runs callbacks on a background
  thread when they expire. `add`, `set` (reschedule), `delete`, `close`;
  also usable as a context manager.
- `cometkit.duration`: `parse_duration("1m30s")` returns a `timedelta` for
  strings such as `500ms`, `10s` or `1h30m` (units ns, us, ms, s, m, h;
  precision below a microsecond is dropped).
- `cometkit.ints`: `join_int32s`, `split_int32s`, `join_int64s`,
  `split_int64s`, with range checks for the integer width.
- `cometkit.endian`: big-endian `int8`/`int16`/`int32` and
  `put_int8`/`put_int16`/`put_int32`.
- `cometkit.netip`: `internal_ip()` returns the first non-loopback IPv4
  address of an interface that is up (interfaces named `lo*` are skipped),
  or an empty string.
- `cometkit.wsrequest`, `cometkit.wsserver`, `cometkit.wsconn`: read the HTTP
  upgrade request (`read_request`), complete the server side of the
  WebSocket handshake (`upgrade`, `compute_accept_key`) and exchange frames
  over a `Conn`.

## Install

```
pip install .
pip install ".[test]"   # with the test tools
```

## Examples

Joining and splitting integer lists:

```python
from cometkit.ints import join_int64s, split_int64s

s = join_int64s([1, 2, 3], ",")     # "1,2,3"
assert split_int64s(s, ",") == [1, 2, 3]
```

Scheduling callbacks (durations are a `timedelta` or a number of seconds):

```python
from cometkit.timer import Timer

with Timer(128) as timer:
    td = timer.add(5.0, lambda: print("expired"))
    timer.set(td, 10.0)   # push it back
    timer.delete(td)      # or cancel it
```

Serving a WebSocket on an already accepted socket:

```python
from cometkit.bufferedio import new_reader, new_writer
from cometkit.wsrequest import read_request
from cometkit.wsserver import upgrade
from cometkit.wsconn import MessageType

stream = sock.makefile("rwb", buffering=0)
rd, wr = new_reader(stream), new_writer(stream)
req = read_request(rd)
ws = upgrade(stream, rd, wr, req)
ws.write_message(MessageType.BINARY, b"\x00\x01\x02")
ws.flush()
op, payload = ws.read_message()
```

`read_message` joins fragmented messages and answers ping frames with a
buffered pong (call `flush` to send it). A close frame raises
`MessageCloseError`, a malformed frame raises `ProtocolError`, and the end
of the stream raises `EOFError`. A rejected handshake raises `UpgradeError`.

## What it does not do

cometkit is a set of parts, not a running server. It does not listen on
or accept sockets, keep a registry of connections, route or broadcast
messages, or store anything. Its WebSocket layer is server side only: there
is no client handshake, no outgoing fragmentation or masking, no TLS, and a
received close frame is reported rather than answered.

## Tests

```
pytest
```
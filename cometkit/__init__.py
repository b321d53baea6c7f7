"""Buffered I/O, buffer pools, a timer heap, integer codecs and WebSocket server framing."""

__version__ = "0.1.0"
"""Frame decoder for the generation event stream.

The server sends one JSON record per ``data: `` line. Chunks arrive at
arbitrary boundaries, so a partial line is held back until a later chunk
terminates it.
"""

from __future__ import annotations

import codecs
import json
import sys
from typing import Iterable, Iterator

DATA_PREFIX = "data: "


class FrameDecoder:
    """Incremental line splitter + JSON decoder for ``data:`` frames."""

    def __init__(self) -> None:
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def pending(self) -> str:
        """Bytes received but not yet terminated by a newline."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[dict]:
        """Add a chunk and return every event it completed, in stream order."""
        self._buffer += self._utf8.decode(chunk)
        lines = self._buffer.split("\n")
        # Last piece may be a partial record
        self._buffer = lines.pop()
        events = []
        for line in lines:
            event = parse_frame(line)
            if event is not None:
                events.append(event)
        return events

    def close(self) -> None:
        """End of stream. An unterminated trailing frame is dropped."""
        self._buffer = ""
        self._utf8.reset()


def parse_frame(line: str) -> dict | None:
    """Parse one line. Returns None for non-data lines and malformed payloads."""
    line = line.rstrip("\r")
    if not line.startswith(DATA_PREFIX):
        return None
    data_str = line[len(DATA_PREFIX):].strip()
    if not data_str:
        return None
    try:
        event = json.loads(data_str)
    except json.JSONDecodeError as e:
        print(f"Warning: failed to parse stream frame ({e}): {data_str[:200]}", file=sys.stderr)
        return None
    if not isinstance(event, dict):
        print(f"Warning: ignoring non-object stream frame: {data_str[:200]}", file=sys.stderr)
        return None
    return event


def decode_frames(chunks: Iterable[bytes]) -> Iterator[dict]:
    """Lazily turn raw byte chunks into progress events."""
    decoder = FrameDecoder()
    try:
        for chunk in chunks:
            yield from decoder.feed(chunk)
    finally:
        decoder.close()

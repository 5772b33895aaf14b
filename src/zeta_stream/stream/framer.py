"""Line framing for streamed provider responses.

Turns raw HTTP body chunks into parsed JSON deltas.  Providers
occasionally emit partial or junk lines; those are skipped rather than
treated as errors.
"""

from __future__ import annotations

import asyncio
import codecs
import json
import logging
from typing import Any, AsyncGenerator, AsyncIterable

from zeta_stream.errors import ParseError

_logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


class SSEFramer:
    """Incremental ``data: <json>`` line decoder.

    The last (possibly incomplete) line of each chunk is carried over and
    prepended to the next one.  Bytes are decoded incrementally so a
    multi-byte character split across two reads is reassembled.
    """

    def __init__(self, prefix: str = DATA_PREFIX, sentinel: str = DONE_SENTINEL) -> None:
        self._prefix = prefix
        self._sentinel = sentinel
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.skipped = 0

    def feed(self, chunk: bytes | str) -> list[dict[str, Any]]:
        """Consume one chunk and return every delta completed by it."""
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._buffer += chunk
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        deltas: list[dict[str, Any]] = []
        for line in lines:
            parsed = self._parse_line(line)
            if parsed is not None:
                deltas.append(parsed)
        return deltas

    def flush(self) -> list[dict[str, Any]]:
        """Parse whatever is left once the transport signals end-of-stream."""
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        parsed = self._parse_line(tail)
        return [parsed] if parsed is not None else []

    def _parse_line(self, line: str) -> dict[str, Any] | None:
        line = line.strip()
        if not line.startswith(self._prefix):
            return None
        data = line[len(self._prefix):].strip()
        if not data or data == self._sentinel:
            return None
        try:
            return decode_object(data)
        except ParseError as e:
            self.skipped += 1
            _logger.debug("Skipping stream line (%s): %.120s", e, data)
            return None


def decode_object(text: str) -> dict[str, Any]:
    """Parse *text* as a JSON object, raising ``ParseError`` otherwise."""
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"malformed JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise ParseError(f"expected a JSON object, got {type(parsed).__name__}")
    return parsed


async def aiter_deltas(
    chunks: AsyncIterable[bytes | str],
    framer: SSEFramer | None = None,
) -> AsyncGenerator[dict[str, Any], None]:
    """Yield parsed deltas from an async byte stream, one at a time."""
    framer = framer or SSEFramer()
    async for chunk in chunks:
        for delta in framer.feed(chunk):
            yield delta
    for delta in framer.flush():
        yield delta


async def synthetic_stream(
    text: str,
    chunk_size: int = 20,
    delay: float = 0.005,
) -> AsyncGenerator[str, None]:
    """Re-chunk a complete answer so it looks streamed.

    Used for backends that only answer in one non-streaming response.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    for i in range(0, len(text), chunk_size):
        yield text[i:i + chunk_size]
        if delay > 0:
            await asyncio.sleep(delay)

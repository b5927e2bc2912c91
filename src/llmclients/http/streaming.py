"""
Decoders turning a streamed response body into a sequence of events.
"""

import codecs
import json
from collections.abc import AsyncIterable
from collections.abc import AsyncIterator
from typing import Any


async def iter_lines(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Split a byte stream into decoded lines (without line terminators)."""
    buffer = b""
    async for chunk in chunks:
        buffer += chunk
        while b"\n" in buffer:
            line, buffer = buffer.split(b"\n", 1)
            yield line.decode("utf-8").rstrip("\r")
    if buffer:
        yield buffer.decode("utf-8").rstrip("\r")


async def iter_sse_data(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """
    Yield the payloads of server-sent-event ``data`` lines.

    Args:
        chunks: The response body

    Yields:
        SSE data payloads (with the "data:" prefix removed)
    """
    async for line in iter_lines(chunks):
        decoded = line.strip()
        if not decoded:
            continue
        if decoded.startswith("data: "):
            yield decoded[6:]
        # Some servers use just "data:" without space
        elif decoded.startswith("data:"):
            yield decoded[5:]


async def iter_ndjson(chunks: AsyncIterable[bytes]) -> AsyncIterator[Any]:
    """
    Yield the JSON values of a newline-delimited JSON body.

    Values are parsed as soon as they are complete, whether or not the
    server has sent the trailing newline yet.

    Raises:
        ValueError: If the stream ends in the middle of a value
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    buffer = ""
    async for chunk in chunks:
        buffer += decoder.decode(chunk)
        while buffer:
            buffer = buffer.lstrip()
            if not buffer:
                break
            try:
                obj, idx = json.JSONDecoder().raw_decode(buffer)
            except json.JSONDecodeError:
                # Incomplete JSON, wait for more data
                break
            yield obj
            buffer = buffer[idx:]

    buffer += decoder.decode(b"", final=True)
    if buffer.strip():
        raise ValueError(f"Stream ended inside a JSON value: {buffer[:100]!r}")

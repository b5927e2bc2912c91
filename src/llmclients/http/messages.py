"""
Request and response objects passed between the client core, the
interception hooks and the transport.
"""

import json
from collections.abc import AsyncIterator
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from typing import Any

import aiohttp
from multidict import CIMultiDict
from yarl import URL

from ..types import HttpMethod


@dataclass
class MultipartFile:
    """A binary file part of a multipart/form-data request."""

    field_name: str
    data: bytes
    filename: str | None = None
    content_type: str | None = None


@dataclass
class BaseRequest:
    """Common fields of an outgoing request."""

    method: HttpMethod
    url: URL
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)


@dataclass
class Request(BaseRequest):
    """A request with a single (already encoded) body."""

    body: bytes | None = None

    @property
    def text(self) -> str:
        return self.body.decode("utf-8") if self.body else ""


@dataclass
class MultipartRequest(BaseRequest):
    """A multipart/form-data request carrying one or more file parts."""

    files: list[MultipartFile] = field(default_factory=list)
    fields: dict[str, str] = field(default_factory=dict)

    def to_form_data(self) -> aiohttp.FormData:
        """
        Build the aiohttp form payload.

        A new FormData is built on every call because aiohttp can only
        serialize a given instance once (retries need a fresh one).
        """
        data = aiohttp.FormData()
        for name, value in self.fields.items():
            data.add_field(name, value)
        for part in self.files:
            data.add_field(part.field_name, part.data, filename=part.filename, content_type=part.content_type)
        return data


@dataclass
class Response:
    """A response whose body has been fully read into memory."""

    status: int
    body: bytes = b""
    headers: CIMultiDict[str] = field(default_factory=CIMultiDict)
    reason: str | None = None
    url: URL | None = None

    @property
    def text(self) -> str:
        """The body decoded as UTF-8."""
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """The body decoded as JSON."""
        return json.loads(self.body.decode("utf-8"))

    @classmethod
    async def from_stream(cls, response: "StreamedResponse") -> "Response":
        """Materialize a streamed response by draining its body."""
        body = await response.read()
        return cls(
            status=response.status,
            body=body,
            headers=response.headers,
            reason=response.reason,
            url=response.url,
        )


class StreamedResponse:
    """
    A response whose body is a lazily consumed sequence of byte chunks.

    The body can be consumed exactly once. Iterating again after the
    stream has been drained (or released) yields nothing.
    """

    def __init__(
        self,
        status: int,
        stream: AsyncIterator[bytes],
        headers: CIMultiDict[str] | None = None,
        reason: str | None = None,
        url: URL | None = None,
        release: Callable[[], None] | None = None,
    ):
        self.status = status
        self.headers: CIMultiDict[str] = headers if headers is not None else CIMultiDict()
        self.reason = reason
        self.url = url
        self._stream = stream
        self._release = release
        self._consumed = False

    @property
    def consumed(self) -> bool:
        """Whether the body has already been read or released."""
        return self._consumed

    async def __aiter__(self) -> AsyncIterator[bytes]:
        if self._consumed:
            return
        self._consumed = True
        try:
            async for chunk in self._stream:
                yield chunk
        finally:
            self._close()

    async def read(self) -> bytes:
        """Drain the remaining body into a single bytes object."""
        chunks = [chunk async for chunk in self]
        return b"".join(chunks)

    async def text(self) -> str:
        """Drain the remaining body and decode it as UTF-8."""
        return (await self.read()).decode("utf-8", errors="replace")

    def release(self) -> None:
        """Discard the body without reading it and free the connection."""
        self._consumed = True
        self._close()

    def _close(self) -> None:
        if self._release is not None:
            self._release()
            self._release = None

"""Shared fixtures: an in-memory transport standing in for the network."""

import json
from collections.abc import AsyncIterator
from collections.abc import Callable
from typing import Any

import pytest
from multidict import CIMultiDict

from llmclients import BaseRequest
from llmclients import Request
from llmclients import StreamedResponse


async def _iter_chunks(chunks: list[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


def make_response(
    status: int = 200,
    body: Any = b"",
    chunks: list[bytes] | None = None,
) -> StreamedResponse:
    """Build a streamed response from a JSON-able body, raw bytes or explicit chunks."""
    if chunks is None:
        if isinstance(body, bytes):
            raw = body
        elif isinstance(body, str):
            raw = body.encode("utf-8")
        else:
            raw = json.dumps(body).encode("utf-8")
        chunks = [raw] if raw else []
    return StreamedResponse(status=status, stream=_iter_chunks(chunks), headers=CIMultiDict())


class FakeTransport:
    """
    Transport that records requests and replays canned responses.

    Each queued item is either a StreamedResponse, an exception to raise,
    or a callable building the response from the request.
    """

    def __init__(self, *responses: StreamedResponse | BaseException | Callable[[BaseRequest], StreamedResponse]):
        self.responses = list(responses)
        self.requests: list[BaseRequest] = []
        self.closed = False

    def queue(self, *responses: StreamedResponse | BaseException | Callable[[BaseRequest], StreamedResponse]) -> None:
        self.responses.extend(responses)

    async def send(self, request: BaseRequest) -> StreamedResponse:
        self.requests.append(request)
        item = self.responses.pop(0) if self.responses else make_response(200, {})
        if isinstance(item, BaseException):
            raise item
        if callable(item) and not isinstance(item, StreamedResponse):
            return item(request)
        return item

    async def close(self) -> None:
        self.closed = True

    @property
    def last_request(self) -> BaseRequest:
        return self.requests[-1]

    def last_json(self) -> Any:
        request = self.last_request
        assert isinstance(request, Request)
        return json.loads(request.text)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clean environment variables before each test."""
    for name in ("OPENAI_API_KEY", "OPENAI_BASE_URL", "OLLAMA_BASE_URL"):
        monkeypatch.delenv(name, raising=False)

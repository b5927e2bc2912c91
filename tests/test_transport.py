"""Tests for the retrying transport and response objects."""

import asyncio
import logging

import aiohttp
import pytest
from conftest import FakeTransport
from conftest import make_response
from tenacity import RetryCallState
from yarl import URL

from llmclients import HttpMethod
from llmclients import MultipartFile
from llmclients import MultipartRequest
from llmclients import Request
from llmclients import Response
from llmclients import RetryTransport
from llmclients.http.transport import _last_outcome

REQUEST = Request(method=HttpMethod.GET, url=URL("https://example.com/v1/models"))


class TestRetryTransport:
    """Test retries of transient failures."""

    @pytest.mark.asyncio
    async def test_retries_503_then_succeeds(self) -> None:
        inner = FakeTransport(make_response(503), make_response(503), make_response(200, {"ok": True}))
        retry = RetryTransport(inner, delay=0)
        response = await retry.send(REQUEST)
        assert response.status == 200
        assert len(inner.requests) == 3

    @pytest.mark.asyncio
    async def test_returns_last_503_when_exhausted(self) -> None:
        inner = FakeTransport(*[make_response(503, b"busy") for _ in range(4)])
        retry = RetryTransport(inner, retries=3, delay=0)
        response = await retry.send(REQUEST)
        assert response.status == 503
        assert await response.read() == b"busy"
        assert len(inner.requests) == 4

    @pytest.mark.asyncio
    async def test_discarded_responses_are_released(self) -> None:
        first = make_response(503, b"busy")
        inner = FakeTransport(first, make_response(200))
        await RetryTransport(inner, delay=0).send(REQUEST)
        assert first.consumed

    @pytest.mark.asyncio
    async def test_retries_connection_errors(self) -> None:
        inner = FakeTransport(aiohttp.ClientConnectionError("reset"), asyncio.TimeoutError(), make_response(200))
        response = await RetryTransport(inner, delay=0).send(REQUEST)
        assert response.status == 200
        assert len(inner.requests) == 3

    @pytest.mark.asyncio
    async def test_reraises_last_error_when_exhausted(self) -> None:
        inner = FakeTransport(*[aiohttp.ClientConnectionError("down") for _ in range(2)])
        with pytest.raises(aiohttp.ClientConnectionError):
            await RetryTransport(inner, retries=1, delay=0).send(REQUEST)
        assert len(inner.requests) == 2

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self) -> None:
        inner = FakeTransport(ValueError("bad"), make_response(200))
        with pytest.raises(ValueError):
            await RetryTransport(inner, delay=0).send(REQUEST)
        assert len(inner.requests) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [200, 404, 500, 502])
    async def test_other_statuses_not_retried(self, status: int) -> None:
        inner = FakeTransport(make_response(status))
        response = await RetryTransport(inner, delay=0).send(REQUEST)
        assert response.status == status
        assert len(inner.requests) == 1

    @pytest.mark.asyncio
    async def test_custom_predicate(self) -> None:
        inner = FakeTransport(make_response(429), make_response(200))
        retry = RetryTransport(inner, delay=0, when=lambda r: r.status == 429)
        assert (await retry.send(REQUEST)).status == 200

    @pytest.mark.asyncio
    async def test_logs_retries(self, caplog: pytest.LogCaptureFixture) -> None:
        inner = FakeTransport(make_response(503), make_response(200))
        with caplog.at_level(logging.WARNING, logger="llmclients.http.transport"):
            await RetryTransport(inner, delay=0).send(REQUEST)
        assert "status 503" in caplog.text

    def test_missing_outcome_raises(self) -> None:
        with pytest.raises(RuntimeError):
            _last_outcome(RetryCallState(None, None, (), {}))

    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(ValueError):
            RetryTransport(FakeTransport(), retries=-1)

    @pytest.mark.asyncio
    async def test_close_delegates(self) -> None:
        inner = FakeTransport()
        await RetryTransport(inner).close()
        assert inner.closed


class TestMessages:
    """Test request and response objects."""

    @pytest.mark.asyncio
    async def test_response_from_stream(self) -> None:
        streamed = make_response(201, chunks=[b'{"id": ', b'"x"}'])
        response = await Response.from_stream(streamed)
        assert response.status == 201
        assert response.json() == {"id": "x"}
        assert streamed.consumed

    @pytest.mark.asyncio
    async def test_release_discards_body(self) -> None:
        streamed = make_response(200, b"unread")
        streamed.release()
        assert streamed.consumed
        assert await streamed.read() == b""

    def test_request_text(self) -> None:
        request = Request(method=HttpMethod.POST, url=URL("https://example.com"), body=b'{"a": 1}')
        assert request.text == '{"a": 1}'
        assert Request(method=HttpMethod.GET, url=URL("https://example.com")).text == ""

    def test_multipart_form_data_is_rebuilt(self) -> None:
        request = MultipartRequest(
            method=HttpMethod.POST,
            url=URL("https://example.com/files"),
            files=[MultipartFile(field_name="file", data=b"abc", filename="a.txt")],
            fields={"purpose": "batch"},
        )
        first = request.to_form_data()
        second = request.to_form_data()
        assert isinstance(first, aiohttp.FormData)
        assert first is not second

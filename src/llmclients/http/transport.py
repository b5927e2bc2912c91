"""
Transports that put requests on the wire.

The client core talks to a transport through the small ``Transport``
protocol so that any implementation (the aiohttp one below, a proxying
one, or an in-memory fake in tests) can be plugged in. Every transport a
client uses is wrapped in a ``RetryTransport``.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from collections.abc import Callable
from typing import Protocol

import aiohttp
from multidict import CIMultiDict
from tenacity import AsyncRetrying
from tenacity import RetryCallState
from tenacity import retry_if_exception
from tenacity import retry_if_result
from tenacity import stop_after_attempt
from tenacity import wait_exponential

from .messages import BaseRequest
from .messages import MultipartRequest
from .messages import Request
from .messages import StreamedResponse

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Protocol for objects able to send a request and return its response."""

    async def send(self, request: BaseRequest) -> StreamedResponse:
        """Send the request and return the response with an unread body."""
        ...

    async def close(self) -> None:
        """Release the underlying connections."""
        ...


class AiohttpTransport:
    """Transport backed by an aiohttp ClientSession."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        timeout: float | None = None,
    ):
        """
        Initialize the transport.

        Args:
            session: Optional pre-built session. When omitted one is created
                     lazily and owned (closed) by this transport.
            timeout: Total request timeout in seconds for an owned session.
        """
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def send(self, request: BaseRequest) -> StreamedResponse:
        session = await self._get_session()
        headers = CIMultiDict(request.headers)

        data: aiohttp.FormData | bytes | None
        if isinstance(request, MultipartRequest):
            # aiohttp sets the content type itself, including the boundary
            headers.popall("content-type", None)
            data = request.to_form_data()
        elif isinstance(request, Request):
            data = request.body
        else:
            raise TypeError(f"Unsupported request type: {type(request).__name__}")

        resp = await session.request(request.method.value, request.url, headers=headers, data=data)
        return StreamedResponse(
            status=resp.status,
            stream=_iter_body(resp),
            headers=CIMultiDict(resp.headers),
            reason=resp.reason,
            url=request.url,
            release=resp.release,
        )

    async def close(self) -> None:
        """Close the HTTP session if this transport owns it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            self._session = None


async def _iter_body(resp: aiohttp.ClientResponse) -> AsyncIterator[bytes]:
    async for chunk in resp.content.iter_any():
        yield chunk


def is_retryable_response(response: StreamedResponse) -> bool:
    return response.status == 503


def is_retryable_exception(exception: BaseException) -> bool:
    return isinstance(exception, (aiohttp.ClientConnectionError, asyncio.TimeoutError))


class RetryTransport:
    """
    Transport decorator that retries transient failures.

    A request is retried when the inner transport raises a transient
    transport error, or answers with a retryable status (503 by default).
    Once attempts run out the last response is returned as-is, or the last
    exception re-raised, so the caller classifies it like any other.
    """

    def __init__(
        self,
        inner: Transport,
        retries: int = 3,
        delay: float = 0.5,
        when: Callable[[StreamedResponse], bool] = is_retryable_response,
        when_error: Callable[[BaseException], bool] = is_retryable_exception,
    ):
        """
        Initialize the retry transport.

        Args:
            inner: The transport to wrap
            retries: Number of additional attempts after the first one
            delay: Wait before the first retry in seconds, growing 1.5x per retry
            when: Predicate selecting responses to retry
            when_error: Predicate selecting exceptions to retry
        """
        if retries < 0:
            raise ValueError("retries must be >= 0")
        self.inner = inner
        self._retries = retries
        self._delay = delay
        self._when = when
        self._when_error = when_error

    async def send(self, request: BaseRequest) -> StreamedResponse:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._retries + 1),
            wait=wait_exponential(multiplier=self._delay, exp_base=1.5, min=0, max=60),
            retry=retry_if_exception(self._when_error) | retry_if_result(self._when),
            before_sleep=self._before_sleep,
            retry_error_callback=_last_outcome,
            reraise=True,
        )
        return await retrying(self.inner.send, request)

    @staticmethod
    def _before_sleep(retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        if outcome is None:
            return
        if outcome.failed:
            reason = repr(outcome.exception())
        else:
            response: StreamedResponse = outcome.result()
            reason = f"status {response.status}"
            response.release()
        logger.warning(f"Retrying request after {reason} (attempt {retry_state.attempt_number})")

    async def close(self) -> None:
        await self.inner.close()


def _last_outcome(retry_state: RetryCallState) -> StreamedResponse:
    """Return the final response, or raise the final exception."""
    if retry_state.outcome is None:
        raise RuntimeError("Retry finished without an outcome")
    return retry_state.outcome.result()

"""
Generic async HTTP client core shared by every API client.

Every endpoint method of a derived client ends up in one of two
primitives:

- ``make_request``: sends the request and returns a fully read ``Response``
- ``make_request_stream``: sends the request and returns a
  ``StreamedResponse`` whose body is consumed lazily

Both merge the client's global configuration into the call, run the
interception hooks, classify the status code and normalize every failure
into a ``ClientError``.
"""

import dataclasses
import inspect
import json
import logging
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from typing import TYPE_CHECKING
from typing import Any
from typing import TypeVar

from multidict import CIMultiDict
from yarl import URL

from ..config import ClientConfig
from ..exceptions import ClientError
from ..types import HttpMethod
from ..types import QueryParams
from .messages import BaseRequest
from .messages import MultipartFile
from .messages import MultipartRequest
from .messages import Request
from .messages import Response
from .messages import StreamedResponse
from .transport import AiohttpTransport
from .transport import RetryTransport
from .transport import Transport

if TYPE_CHECKING:
    from .logger import HTTPLogger

logger = logging.getLogger(__name__)

T = TypeVar("T")

# A hook may be a plain function or a coroutine function
Hook = Callable[[T], T | Awaitable[T]]


async def _call_hook(hook: "Hook[T] | None", value: T) -> T:
    if hook is None:
        return value
    result = hook(value)
    if inspect.isawaitable(result):
        return await result
    return result


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def stringify_query_params(params: QueryParams) -> dict[str, str | list[str]]:
    """Render query parameter values as strings (or lists of strings)."""
    rendered: dict[str, str | list[str]] = {}
    for key, value in params.items():
        if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
            rendered[key] = [_stringify(v) for v in value]
        else:
            rendered[key] = _stringify(value)
    return rendered


def _to_jsonable(obj: Any) -> Any:
    """json.dumps fallback for non-dict mappings, dataclasses and objects with to_dict()."""
    if isinstance(obj, Mapping):
        return dict(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class BaseAPIClient:
    """
    Async HTTP client core for generated REST API clients.

    Example:
        client = BaseAPIClient(
            bearer_token="sk-...",
            headers={"x-proxy": "1"},
            on_request=add_trace_header,
        )
        response = await client.make_request(
            base_url="https://api.example.com/v1",
            path="/models",
            method=HttpMethod.GET,
            response_type="application/json",
        )
        await client.end_session()
    """

    def __init__(
        self,
        *,
        bearer_token: str = "",
        base_url: str | None = None,
        headers: Mapping[str, str] | None = None,
        query_params: QueryParams | None = None,
        transport: Transport | None = None,
        on_request: Hook[BaseRequest] | None = None,
        on_response: Hook[Response] | None = None,
        on_streamed_response: Hook[StreamedResponse] | None = None,
        http_logger: "HTTPLogger | None" = None,
    ):
        """
        Initialize the client.

        Args:
            bearer_token: Credential sent as a bearer token when non-empty
            base_url: Override of the endpoints' default base URL. Must start
                      with http and must not end with /.
            headers: Global headers sent with every request
            query_params: Global query parameters sent with every request
            transport: Optional pre-built transport. Always wrapped in a
                       RetryTransport.
            on_request: Hook run on every outgoing request
            on_response: Hook run on every buffered response
            on_streamed_response: Hook run on every streamed response
            http_logger: Optional traffic logger for auditing
        """
        self.config = ClientConfig(
            base_url=base_url,
            headers=headers or {},
            query_params=query_params or {},
            bearer_token=bearer_token,
        )
        self.transport = RetryTransport(transport if transport is not None else AiohttpTransport())
        self._on_request = on_request
        self._on_response = on_response
        self._on_streamed_response = on_streamed_response
        self._http_logger = http_logger
        self._session_id: str | None = None

    @property
    def base_url(self) -> str | None:
        return self.config.base_url

    @property
    def bearer_token(self) -> str:
        return self.config.bearer_token

    @bearer_token.setter
    def bearer_token(self, value: str) -> None:
        self.config.bearer_token = value

    def set_http_logger(self, http_logger: "HTTPLogger | None") -> None:
        """Set the HTTP traffic logger."""
        self._http_logger = http_logger

    def set_session_id(self, session_id: str | None) -> None:
        """Set the current session ID for traffic logging."""
        self._session_id = session_id

    # -------------------------------------------------------------------------
    # Interception hooks
    # -------------------------------------------------------------------------

    async def on_request(self, request: BaseRequest) -> BaseRequest:
        """Middleware for outgoing requests (Request or MultipartRequest)."""
        return await _call_hook(self._on_request, request)

    async def on_response(self, response: Response) -> Response:
        """Middleware for buffered responses."""
        return await _call_hook(self._on_response, response)

    async def on_streamed_response(self, response: StreamedResponse) -> StreamedResponse:
        """Middleware for streamed responses."""
        return await _call_hook(self._on_streamed_response, response)

    # -------------------------------------------------------------------------
    # Request construction
    # -------------------------------------------------------------------------

    def _resolve_base_url(self, base_url: str) -> str:
        resolved = self.config.base_url or base_url
        if not resolved:
            raise ValueError("base_url is required, but none defined by the endpoint or provided by user")
        return resolved

    def build_url(self, base_url: str, path: str, query_params: QueryParams | None = None) -> URL:
        """Build the target URI. Per-call query parameters win over global ones."""
        merged = {**self.config.query_params, **(query_params or {})}
        uri = URL(self._resolve_base_url(base_url) + path)
        if merged:
            uri = uri.with_query(stringify_query_params(merged))
        return uri

    def build_headers(
        self,
        header_params: Mapping[str, str] | None = None,
        request_type: str = "",
        response_type: str = "",
    ) -> CIMultiDict[str]:
        """Build the request headers. Global headers win over per-call ones."""
        headers: CIMultiDict[str] = CIMultiDict(header_params or {})
        if self.config.bearer_token:
            headers["authorization"] = f"Bearer {self.config.bearer_token}"
        if request_type:
            headers["content-type"] = request_type
        if response_type:
            headers["accept"] = response_type
        headers.update(self.config.headers)
        return headers

    def build_request(
        self,
        *,
        base_url: str,
        path: str,
        method: HttpMethod,
        query_params: QueryParams | None = None,
        header_params: Mapping[str, str] | None = None,
        is_multipart: bool = False,
        request_type: str = "",
        response_type: str = "",
        body: Any = None,
    ) -> BaseRequest:
        """
        Construct the outgoing request object.

        Raises:
            ValueError: If no base URL is available
            ClientError: If the body cannot be encoded
        """
        uri = self.build_url(base_url, path, query_params)
        headers = self.build_headers(header_params, request_type, response_type)

        request: BaseRequest
        if is_multipart:
            files = body if isinstance(body, list) else [body]
            if not all(isinstance(f, MultipartFile) for f in files):
                raise ClientError(
                    message=f"Could not encode: {type(body).__name__}",
                    uri=uri,
                    method=method,
                    body=TypeError("multipart body must be a MultipartFile or a list of them"),
                )
            request = MultipartRequest(method=method, url=uri, files=list(files))
        else:
            encoded: bytes | None = None
            if body is not None:
                try:
                    encoded = json.dumps(body, default=_to_jsonable).encode("utf-8")
                except (TypeError, ValueError) as e:
                    raise ClientError(
                        message=f"Could not encode: {type(body).__name__}",
                        uri=uri,
                        method=method,
                        body=e,
                    ) from e
            request = Request(method=method, url=uri, body=encoded)

        request.headers.update(headers)
        return request

    async def _send(self, request: BaseRequest) -> StreamedResponse:
        request = await self.on_request(request)
        logger.debug(f"Request: {request.method.value} {request.url}")
        if self._http_logger:
            body = request.text if isinstance(request, Request) else {"files": [f.filename for f in request.files]}
            self._http_logger.log_request(
                request.method.value, str(request.url), request.headers, body, self._session_id
            )
        return await self.transport.send(request)

    # -------------------------------------------------------------------------
    # Request primitives
    # -------------------------------------------------------------------------

    async def make_request(
        self,
        *,
        base_url: str,
        path: str,
        method: HttpMethod,
        query_params: QueryParams | None = None,
        header_params: Mapping[str, str] | None = None,
        is_multipart: bool = False,
        request_type: str = "",
        response_type: str = "",
        body: Any = None,
    ) -> Response:
        """
        Send a request and return the fully read response.

        Args:
            base_url: The endpoint's default base URL (the client override wins)
            path: Path appended to the base URL
            method: HTTP method
            query_params: Per-call query parameters
            header_params: Per-call headers
            is_multipart: Send the body as multipart/form-data file parts
            request_type: Content type of the request body, if any
            response_type: Content type expected in the response, if any
            body: JSON-encodable body, or MultipartFile part(s)

        Returns:
            The 2xx response, unchanged

        Raises:
            ValueError: If no base URL is available
            ClientError: On encoding failure, transport or hook failure, or
                         a non-2xx response
        """
        request = self.build_request(
            base_url=base_url,
            path=path,
            method=method,
            query_params=query_params,
            header_params=header_params,
            is_multipart=is_multipart,
            request_type=request_type,
            response_type=response_type,
            body=body,
        )
        uri = request.url

        try:
            streamed = await self._send(request)
            response = await Response.from_stream(streamed)
            response = await self.on_response(response)
        except Exception as e:
            raise ClientError(message="Response error", uri=uri, method=method, body=e) from e

        logger.debug(f"Response: {response.status} {method.value} {uri}")
        if self._http_logger:
            self._http_logger.log_response(str(uri), response.status, response.text, self._session_id)

        if response.status // 100 == 2:
            return response

        raise ClientError(
            message="Unsuccessful response",
            uri=uri,
            method=method,
            code=response.status,
            body=response.text,
        )

    async def make_request_stream(
        self,
        *,
        base_url: str,
        path: str,
        method: HttpMethod,
        query_params: QueryParams | None = None,
        header_params: Mapping[str, str] | None = None,
        is_multipart: bool = False,
        request_type: str = "",
        response_type: str = "",
        body: Any = None,
    ) -> StreamedResponse:
        """
        Send a request and return the response with its body unread.

        Takes the same arguments as ``make_request``. On a non-2xx status the
        body is drained and attached to the raised ClientError, so the stream
        is consumed exactly once either way.

        Raises:
            ValueError: If no base URL is available
            ClientError: On encoding failure, transport or hook failure, or
                         a non-2xx response
        """
        request = self.build_request(
            base_url=base_url,
            path=path,
            method=method,
            query_params=query_params,
            header_params=header_params,
            is_multipart=is_multipart,
            request_type=request_type,
            response_type=response_type,
            body=body,
        )
        uri = request.url

        response: StreamedResponse | None = None
        try:
            response = await self._send(request)
            response = await self.on_streamed_response(response)
        except Exception as e:
            if response is not None:
                response.release()
            raise ClientError(message="Response error", uri=uri, method=method, body=e) from e

        logger.debug(f"Streamed response: {response.status} {method.value} {uri}")

        if response.status // 100 == 2:
            return response

        try:
            body_text = await response.text()
        except Exception as e:
            raise ClientError(
                message="Unsuccessful response",
                uri=uri,
                method=method,
                code=response.status,
                body=e,
            ) from e
        if self._http_logger:
            self._http_logger.log_response(str(uri), response.status, body_text, self._session_id)
        raise ClientError(
            message="Unsuccessful response",
            uri=uri,
            method=method,
            code=response.status,
            body=body_text,
        )

    def log_stream_chunk(self, url: URL | str, data: str) -> None:
        """Forward one decoded stream chunk to the traffic logger, if any."""
        if self._http_logger:
            self._http_logger.log_stream_chunk(str(url), data, self._session_id)

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    async def end_session(self) -> None:
        """Close the transport. No call may be made afterwards."""
        await self.transport.close()

    async def __aenter__(self) -> "BaseAPIClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.end_session()

"""
Custom exceptions for llmclients.
"""

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from yarl import URL

    from .types import HttpMethod


class LLMClientsError(Exception):
    """Base exception for all llmclients errors."""

    pass


class ClientError(LLMClientsError):
    """
    Raised when an API call fails.

    Three causes are distinguished by which fields are populated:

    - Encoding failure: the request body could not be serialized.
      ``code`` is None and ``body`` holds the encoding exception.
    - Transport or hook failure: sending the request, or one of the
      interception hooks, raised before the response was classified.
      ``code`` is None and ``body`` holds the original exception.
    - Unsuccessful response: the server answered with a non-2xx status.
      ``code`` is the status and ``body`` the response text.

    Attributes:
        message: Short description of the failure.
        uri: The target URI of the request.
        method: The HTTP method of the request.
        code: HTTP status code, if a response was received.
        body: Response body or the underlying exception.
    """

    def __init__(
        self,
        message: str,
        uri: "URL | str",
        method: "HttpMethod",
        code: int | None = None,
        body: object | None = None,
    ):
        self.message = message
        self.uri = uri
        self.method = method
        self.code = code
        self.body = body
        super().__init__(message)

    def _decoded_body(self) -> object:
        """Best-effort decoding of the body for display."""
        if self.body is None:
            return None
        if isinstance(self.body, str):
            try:
                return json.loads(self.body)
            except json.JSONDecodeError:
                return self.body
        return str(self.body)

    def __str__(self) -> str:
        payload = {
            "uri": str(self.uri),
            "method": self.method.value,
            "code": self.code,
            "message": self.message,
            "body": self._decoded_body(),
        }
        return f"ClientError({json.dumps(payload, indent=2, ensure_ascii=False)})"

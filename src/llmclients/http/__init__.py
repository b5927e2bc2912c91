"""HTTP client core: request primitives, hooks, transports and traffic logging."""

from .client import BaseAPIClient
from .logger import FileHTTPLogger
from .logger import HTTPLogger
from .messages import BaseRequest
from .messages import MultipartFile
from .messages import MultipartRequest
from .messages import Request
from .messages import Response
from .messages import StreamedResponse
from .transport import AiohttpTransport
from .transport import RetryTransport
from .transport import Transport

__all__ = [
    "AiohttpTransport",
    "BaseAPIClient",
    "BaseRequest",
    "FileHTTPLogger",
    "HTTPLogger",
    "MultipartFile",
    "MultipartRequest",
    "Request",
    "Response",
    "RetryTransport",
    "StreamedResponse",
    "Transport",
]

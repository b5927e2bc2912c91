"""
Core types shared by the HTTP core and the API clients.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any

# =============================================================================
# JSON Type Definitions
# =============================================================================

# Type alias for JSON-compatible values (used for API payloads)
JsonValue = str | int | float | bool | None | list[Any] | dict[str, Any]

# Decoded JSON object returned by the API clients
JsonObject = dict[str, Any]

# Query parameter values: scalars or iterables of scalars
QueryParams = Mapping[str, Any]


class HttpMethod(Enum):
    """HTTP methods supported by the request primitives."""

    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"
    PATCH = "PATCH"
    TRACE = "TRACE"


class ContentType:
    """Content-type labels used by the endpoint declarations."""

    NONE = ""
    JSON = "application/json"
    MULTIPART = "multipart/form-data"

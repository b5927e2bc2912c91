"""
Connection defaults for an API client.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from types import MappingProxyType
from typing import Any


def _empty_mapping() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass
class ClientConfig:
    """
    Per-client connection defaults.

    Attributes:
        base_url: Optional override of the endpoint's default base URL.
                  Must start with ``http`` and must not end with ``/``.
        headers: Global headers sent with every request. These override
                 same-named per-call headers.
        query_params: Global query parameters sent with every request.
                      Per-call parameters override these.
        bearer_token: Credential sent as ``authorization: Bearer <token>``
                      when non-empty. May be reassigned at any time.
    """

    base_url: str | None = None
    headers: Mapping[str, str] = field(default_factory=_empty_mapping)
    query_params: Mapping[str, Any] = field(default_factory=_empty_mapping)
    bearer_token: str = ""

    def __post_init__(self) -> None:
        if self.base_url is not None:
            if not self.base_url.startswith("http"):
                raise ValueError(f"base_url must start with http, got {self.base_url!r}")
            if self.base_url.endswith("/"):
                raise ValueError(f"base_url must not end with /, got {self.base_url!r}")

        # Freeze copies so later mutation of the caller's dicts has no effect
        self.headers = MappingProxyType(dict(self.headers))
        self.query_params = MappingProxyType(dict(self.query_params))

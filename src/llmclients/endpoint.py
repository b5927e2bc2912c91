"""
Declarative description of a REST endpoint.
"""

from dataclasses import dataclass

from .types import ContentType
from .types import HttpMethod


@dataclass(frozen=True)
class Endpoint:
    """A single REST endpoint of an API."""

    method: HttpMethod
    base_url: str  # Server URL of the API; the client's base_url override wins
    path: str  # Template with {name} placeholders
    request_type: str = ContentType.NONE
    response_type: str = ContentType.JSON

    def format_path(self, **path_params: str) -> str:
        """Substitute path parameters literally into the path template."""
        return self.path.format(**path_params)

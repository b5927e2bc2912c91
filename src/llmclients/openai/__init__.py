"""OpenAI REST API client."""

from .client import OpenAIClient
from .endpoints import BASE_URL
from .endpoints import pagination_params

__all__ = [
    "BASE_URL",
    "OpenAIClient",
    "pagination_params",
]

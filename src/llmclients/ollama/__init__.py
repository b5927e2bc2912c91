"""Ollama local inference server client."""

from .client import DEFAULT_BASE_URL
from .client import OllamaClient

__all__ = [
    "DEFAULT_BASE_URL",
    "OllamaClient",
]

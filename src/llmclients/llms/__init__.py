"""LLM wrappers that turn raw completion responses into LLMResult objects."""

from .ollama import Ollama
from .ollama import OllamaOptions
from .types import FinishReason
from .types import LLMResult
from .types import Usage

__all__ = [
    "FinishReason",
    "LLMResult",
    "Ollama",
    "OllamaOptions",
    "Usage",
]

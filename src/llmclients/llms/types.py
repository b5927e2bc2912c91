"""
Result types produced by the LLM wrappers.
"""

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Any


class FinishReason(Enum):
    """Reason why the model stopped generating."""

    STOP = "stop"  # Natural stop or stop sequence
    LENGTH = "length"  # Max tokens reached
    CONTENT_FILTER = "content_filter"  # Content policy violation
    NULL = "null"  # Still generating (streaming)
    UNKNOWN = "unknown"  # Fallback/unknown reason


@dataclass
class Usage:
    """Token counts for a generation."""

    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def has_usage(self) -> bool:
        """Check if this usage has any actual token counts."""
        return self.prompt_tokens > 0 or self.completion_tokens > 0


@dataclass
class LLMResult:
    """
    Result of a completion call.

    When streaming, every chunk of one call is an LLMResult with the same
    ``id`` and ``streaming=True``; ``output`` holds just that fragment.
    """

    id: str
    output: str
    finish_reason: FinishReason = FinishReason.UNKNOWN
    metadata: dict[str, Any] = field(default_factory=dict)
    usage: Usage = field(default_factory=Usage)
    streaming: bool = False

"""
llmclients - Typed async HTTP clients for LLM provider APIs.

This package provides a small HTTP client core on top of aiohttp and
the API clients derived from it:

- OpenAI REST API (chat, completions, embeddings, fine-tuning,
  images, models, moderations, assistants, threads, runs, vector stores,
  batches, ...)
- Ollama local inference server

Key features:
- Buffered and streamed requests over one request pipeline
- Request/response hooks (plain or async callables, or method overrides)
- Every failure normalised to a single ClientError
- Automatic retries of 503 replies and connection errors
- Optional file-based audit log of HTTP traffic

Example:
    from llmclients import OpenAIClient

    async with OpenAIClient(bearer_token="sk-...") as client:
        models = await client.list_models()
        print([m["id"] for m in models["data"]])

        async for chunk in client.create_chat_completion_stream(
            {"model": "gpt-4o-mini", "messages": [{"role": "user", "content": "Hi"}]}
        ):
            print(chunk["choices"][0]["delta"].get("content", ""), end="", flush=True)

Local models with Ollama:
    from llmclients import Ollama, OllamaOptions, StringOutputParser

    llm = Ollama(default_options=OllamaOptions(model="llama3.2"))
    result = await llm.invoke("Why is the sky blue?")
    print(StringOutputParser().invoke(result))
    await llm.close()
"""

from .config import ClientConfig
from .endpoint import Endpoint
from .exceptions import ClientError
from .exceptions import LLMClientsError
from .http import AiohttpTransport
from .http import BaseAPIClient
from .http import BaseRequest
from .http import FileHTTPLogger
from .http import HTTPLogger
from .http import MultipartFile
from .http import MultipartRequest
from .http import Request
from .http import Response
from .http import RetryTransport
from .http import StreamedResponse
from .http import Transport
from .llms import FinishReason
from .llms import LLMResult
from .llms import Ollama
from .llms import OllamaOptions
from .llms import Usage
from .ollama import OllamaClient
from .openai import OpenAIClient
from .output_parsers import StringOutputParser
from .types import ContentType
from .types import HttpMethod

__all__ = [
    "AiohttpTransport",
    "BaseAPIClient",
    "BaseRequest",
    "ClientConfig",
    "ClientError",
    "ContentType",
    "Endpoint",
    "FileHTTPLogger",
    "FinishReason",
    "HTTPLogger",
    "HttpMethod",
    "LLMClientsError",
    "LLMResult",
    "MultipartFile",
    "MultipartRequest",
    "Ollama",
    "OllamaClient",
    "OllamaOptions",
    "OpenAIClient",
    "Request",
    "Response",
    "RetryTransport",
    "StreamedResponse",
    "StringOutputParser",
    "Transport",
    "Usage",
]

"""
Client for the Ollama local inference server API.
"""

import json
import os
from collections.abc import AsyncIterator
from collections.abc import Mapping
from typing import Any

from ..endpoint import Endpoint
from ..http import BaseAPIClient
from ..http.streaming import iter_ndjson
from ..types import ContentType
from ..types import HttpMethod
from ..types import JsonObject

DEFAULT_BASE_URL = "http://localhost:11434/api"

GENERATE_COMPLETION = Endpoint(
    HttpMethod.POST,
    DEFAULT_BASE_URL,
    "/generate",
    request_type=ContentType.JSON,
)


class OllamaClient(BaseAPIClient):
    """
    Client for the Ollama API.

    Talks to ``http://localhost:11434/api`` unless ``base_url`` is given.

    Example:
        async with OllamaClient() as client:
            completion = await client.generate_completion({"model": "llama3.2", "prompt": "Why is the sky blue?"})
            print(completion["response"])
    """

    @classmethod
    def from_env(cls, **kwargs: Any) -> "OllamaClient":
        """Create a client whose base URL comes from ``OLLAMA_BASE_URL``, if set."""
        if os.getenv("OLLAMA_BASE_URL"):
            kwargs.setdefault("base_url", os.getenv("OLLAMA_BASE_URL"))
        return cls(**kwargs)

    async def generate_completion(self, request: Mapping[str, Any]) -> JsonObject:
        """
        Generate a response for the given prompt with the provided model.

        `POST` `http://localhost:11434/api/generate` with `"stream": false`

        Args:
            request: Generate-completion request body (model, prompt, options, ...)

        Returns:
            The final response object, including statistics
        """
        response = await self.make_request(
            base_url=GENERATE_COMPLETION.base_url,
            path=GENERATE_COMPLETION.path,
            method=GENERATE_COMPLETION.method,
            request_type=GENERATE_COMPLETION.request_type,
            response_type=GENERATE_COMPLETION.response_type,
            body={**request, "stream": False},
        )
        result: JsonObject = response.json()
        return result

    async def generate_completion_stream(self, request: Mapping[str, Any]) -> AsyncIterator[JsonObject]:
        """
        Stream the response for the given prompt.

        Yields one object per generated fragment; the last one has
        ``done: true`` and carries the statistics.
        """
        response = await self.make_request_stream(
            base_url=GENERATE_COMPLETION.base_url,
            path=GENERATE_COMPLETION.path,
            method=GENERATE_COMPLETION.method,
            request_type=GENERATE_COMPLETION.request_type,
            response_type=GENERATE_COMPLETION.response_type,
            body={**request, "stream": True},
        )
        try:
            async for obj in iter_ndjson(response):
                self.log_stream_chunk(response.url or GENERATE_COMPLETION.path, json.dumps(obj))
                yield obj
        finally:
            response.release()

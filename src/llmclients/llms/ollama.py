"""
LLM wrapper around the Ollama completions API.
"""

import dataclasses
import logging
import uuid
from collections.abc import AsyncIterator
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..http import Transport
from ..ollama import DEFAULT_BASE_URL
from ..ollama import OllamaClient
from ..types import JsonObject
from .types import FinishReason
from .types import LLMResult
from .types import Usage

logger = logging.getLogger(__name__)

# Top-level request fields; every other option goes into "options"
_REQUEST_FIELDS = ("system", "suffix", "template", "context", "format", "raw", "keep_alive")

# Response fields kept as result metadata
_METADATA_FIELDS = (
    "model",
    "created_at",
    "done",
    "context",
    "total_duration",
    "load_duration",
    "prompt_eval_duration",
    "eval_duration",
)


@dataclass
class OllamaOptions:
    """
    Options for an Ollama completion call.

    Unset (None) fields fall back to the wrapper's default options.
    """

    model: str | None = None
    system: str | None = None
    suffix: str | None = None
    template: str | None = None
    context: list[int] | None = None
    format: str | None = None  # e.g. "json"
    raw: bool | None = None
    keep_alive: int | None = None  # Minutes to keep the model loaded
    # Model parameters
    num_keep: int | None = None
    seed: int | None = None
    num_predict: int | None = None
    top_k: int | None = None
    top_p: float | None = None
    min_p: float | None = None
    tfs_z: float | None = None
    typical_p: float | None = None
    repeat_last_n: int | None = None
    temperature: float | None = None
    repeat_penalty: float | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    mirostat: int | None = None
    mirostat_tau: float | None = None
    mirostat_eta: float | None = None
    penalize_newline: bool | None = None
    stop: list[str] | None = None
    numa: bool | None = None
    num_ctx: int | None = None
    num_batch: int | None = None
    num_gpu: int | None = None
    main_gpu: int | None = None
    low_vram: bool | None = None
    f16_kv: bool | None = None
    logits_all: bool | None = None
    vocab_only: bool | None = None
    use_mmap: bool | None = None
    use_mlock: bool | None = None
    num_thread: int | None = None

    def merge(self, other: "OllamaOptions | None") -> "OllamaOptions":
        """Return these options overridden field by field by the set fields of ``other``."""
        if other is None:
            return self
        overrides = {f.name: getattr(other, f.name) for f in dataclasses.fields(other)}
        return dataclasses.replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _finish_reason(completion: Mapping[str, Any]) -> FinishReason:
    done_reason = completion.get("done_reason")
    if done_reason == "stop":
        return FinishReason.STOP
    if done_reason == "length":
        return FinishReason.LENGTH
    if done_reason is None and not completion.get("done", False):
        return FinishReason.NULL
    return FinishReason.UNKNOWN


def to_llm_result(completion: Mapping[str, Any], id: str, streaming: bool = False) -> LLMResult:
    """Map a generate-completion response object to an LLMResult."""
    return LLMResult(
        id=id,
        output=completion.get("response", ""),
        finish_reason=_finish_reason(completion),
        metadata={key: completion[key] for key in _METADATA_FIELDS if key in completion},
        usage=Usage(
            prompt_tokens=completion.get("prompt_eval_count") or 0,
            completion_tokens=completion.get("eval_count") or 0,
        ),
        streaming=streaming,
    )


class Ollama:
    """
    Wrapper around the Ollama completions API.

    Ollama runs open-source large language models locally.

    Example:
        llm = Ollama(default_options=OllamaOptions(model="llama3.2", temperature=1))
        result = await llm.invoke("Hello world!")
        print(result.output)

        async for chunk in llm.stream("Tell me a joke", options=OllamaOptions(seed=9999)):
            print(chunk.output, end="", flush=True)

        await llm.close()
    """

    DEFAULT_MODEL = "llama3.2"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        headers: Mapping[str, str] | None = None,
        query_params: Mapping[str, Any] | None = None,
        transport: Transport | None = None,
        default_options: OllamaOptions | None = None,
    ):
        """
        Initialize the wrapper.

        Args:
            base_url: Base URL of the Ollama API
            headers: Global headers sent with every request (e.g. for a proxy)
            query_params: Global query parameters sent with every request
            transport: Optional custom transport
            default_options: Options used unless overridden per call
        """
        self.client = OllamaClient(
            base_url=base_url,
            headers=headers,
            query_params=query_params,
            transport=transport,
        )
        self.default_options = default_options or OllamaOptions(model=self.DEFAULT_MODEL)

    @property
    def model_type(self) -> str:
        return "ollama"

    def build_request(self, prompt: str, options: OllamaOptions | None = None) -> JsonObject:
        """Build a generate-completion request body from the prompt and options."""
        merged = self.default_options.merge(options)
        request: JsonObject = {"model": merged.model or self.DEFAULT_MODEL, "prompt": prompt}

        model_options: JsonObject = {}
        for f in dataclasses.fields(merged):
            value = getattr(merged, f.name)
            if f.name == "model" or value is None:
                continue
            if f.name in _REQUEST_FIELDS:
                request[f.name] = value
            else:
                model_options[f.name] = value
        if model_options:
            request["options"] = model_options
        return request

    async def invoke(self, prompt: str, options: OllamaOptions | None = None) -> LLMResult:
        """Generate a completion for the prompt."""
        id = str(uuid.uuid4())
        completion = await self.client.generate_completion(self.build_request(prompt, options))
        result = to_llm_result(completion, id)
        logger.debug(f"Completion {id} finished: {result.finish_reason.value}, {result.usage.total_tokens} tokens")
        return result

    async def stream(self, prompt: str, options: OllamaOptions | None = None) -> AsyncIterator[LLMResult]:
        """Stream the completion for the prompt, one LLMResult per fragment."""
        id = str(uuid.uuid4())
        async for completion in self.client.generate_completion_stream(self.build_request(prompt, options)):
            yield to_llm_result(completion, id, streaming=True)

    async def close(self) -> None:
        """Close the underlying client."""
        await self.client.end_session()

    async def __aenter__(self) -> "Ollama":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

"""Tests for the Ollama client, LLM wrapper and output parser."""

import json

import pytest
from conftest import FakeTransport
from conftest import make_response

from llmclients import FinishReason
from llmclients import LLMResult
from llmclients import Ollama
from llmclients import OllamaClient
from llmclients import OllamaOptions
from llmclients import StringOutputParser
from llmclients import Usage

FINAL = {
    "model": "llama3.2",
    "created_at": "2024-01-01T00:00:00Z",
    "response": "The sky is blue.",
    "done": True,
    "done_reason": "stop",
    "context": [1, 2, 3],
    "total_duration": 5000,
    "prompt_eval_count": 12,
    "eval_count": 7,
}


def ndjson(*objects: dict[str, object]) -> list[bytes]:
    return [(json.dumps(obj) + "\n").encode() for obj in objects]


class TestOllamaClient:
    """Test the raw Ollama API client."""

    @pytest.mark.asyncio
    async def test_generate_completion(self, transport: FakeTransport) -> None:
        transport.queue(make_response(200, FINAL))
        client = OllamaClient(transport=transport)
        completion = await client.generate_completion({"model": "llama3.2", "prompt": "Why?"})
        assert completion["response"] == "The sky is blue."
        assert str(transport.last_request.url) == "http://localhost:11434/api/generate"
        assert transport.last_json() == {"model": "llama3.2", "prompt": "Why?", "stream": False}
        assert "authorization" not in transport.last_request.headers

    @pytest.mark.asyncio
    async def test_generate_completion_stream(self, transport: FakeTransport) -> None:
        transport.queue(make_response(200, chunks=ndjson({"response": "The", "done": False}, FINAL)))
        client = OllamaClient(transport=transport)
        objects = [obj async for obj in client.generate_completion_stream({"model": "llama3.2", "prompt": "Why?"})]
        assert [obj["done"] for obj in objects] == [False, True]
        assert transport.last_json()["stream"] is True

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OLLAMA_BASE_URL", "http://gpu-box:11434/api")
        assert OllamaClient.from_env().base_url == "http://gpu-box:11434/api"
        monkeypatch.delenv("OLLAMA_BASE_URL")
        assert OllamaClient.from_env().base_url is None


class TestOllamaLLM:
    """Test the Ollama LLM wrapper."""

    def test_options_merge(self) -> None:
        defaults = OllamaOptions(model="llama3.2", temperature=0.5, seed=1)
        merged = defaults.merge(OllamaOptions(temperature=1.0))
        assert merged.model == "llama3.2"
        assert merged.temperature == 1.0
        assert merged.seed == 1

    def test_build_request(self) -> None:
        llm = Ollama(default_options=OllamaOptions(model="mistral", temperature=0.2, format="json"))
        request = llm.build_request("Hi", OllamaOptions(stop=["\n"], keep_alive=5))
        assert request == {
            "model": "mistral",
            "prompt": "Hi",
            "format": "json",
            "keep_alive": 5,
            "options": {"temperature": 0.2, "stop": ["\n"]},
        }

    def test_default_model(self) -> None:
        assert Ollama().build_request("Hi") == {"model": "llama3.2", "prompt": "Hi"}

    @pytest.mark.asyncio
    async def test_invoke(self, transport: FakeTransport) -> None:
        transport.queue(make_response(200, FINAL))
        llm = Ollama(transport=transport)
        result = await llm.invoke("Why is the sky blue?")
        assert result.output == "The sky is blue."
        assert result.finish_reason is FinishReason.STOP
        assert result.usage == Usage(prompt_tokens=12, completion_tokens=7)
        assert result.usage.total_tokens == 19
        assert result.metadata["model"] == "llama3.2"
        assert result.metadata["context"] == [1, 2, 3]
        assert "response" not in result.metadata
        assert not result.streaming

    @pytest.mark.asyncio
    async def test_stream(self, transport: FakeTransport) -> None:
        transport.queue(
            make_response(
                200,
                chunks=ndjson(
                    {"response": "The", "done": False},
                    {"response": " sky", "done": False},
                    {**FINAL, "response": ""},
                ),
            )
        )
        llm = Ollama(transport=transport)
        results = [result async for result in llm.stream("Why?")]
        assert "".join(r.output for r in results) == "The sky"
        assert len({r.id for r in results}) == 1
        assert all(r.streaming for r in results)
        assert [r.finish_reason for r in results] == [FinishReason.NULL, FinishReason.NULL, FinishReason.STOP]
        assert not results[0].usage.has_usage()
        assert results[-1].usage.has_usage()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("fields", "expected"),
        [
            ({"done": True, "done_reason": "length"}, FinishReason.LENGTH),
            ({"done": True, "done_reason": "load"}, FinishReason.UNKNOWN),
            ({"done": True}, FinishReason.UNKNOWN),
        ],
    )
    async def test_finish_reasons(self, transport: FakeTransport, fields: dict[str, object], expected: FinishReason) -> None:
        transport.queue(make_response(200, {"response": "x", **fields}))
        result = await Ollama(transport=transport).invoke("x")
        assert result.finish_reason is expected

    @pytest.mark.asyncio
    async def test_close(self, transport: FakeTransport) -> None:
        async with Ollama(transport=transport):
            pass
        assert transport.closed


class TestStringOutputParser:
    """Test StringOutputParser."""

    def test_parse_result(self) -> None:
        result = LLMResult(id="1", output="Hello")
        assert StringOutputParser().parse_result(result) == "Hello"

    def test_invoke_accepts_both(self) -> None:
        parser = StringOutputParser()
        assert parser.invoke(LLMResult(id="1", output="a")) == "a"
        assert parser.invoke("b") == "b"

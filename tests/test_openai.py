"""Tests for the OpenAI API client."""

from types import MappingProxyType

import pytest
from conftest import FakeTransport
from conftest import make_response

from llmclients import ClientError
from llmclients import HttpMethod
from llmclients import OpenAIClient
from llmclients import Request
from llmclients.openai import pagination_params

CHAT_REQUEST = {"model": "gpt-4o-mini", "messages": [{"role": "user", "content": "Hi"}]}


@pytest.fixture
def client(transport: FakeTransport) -> OpenAIClient:
    return OpenAIClient(bearer_token="sk-test", transport=transport)


def sse(*events: str) -> list[bytes]:
    return [f"data: {event}\n\n".encode() for event in events]


class TestOpenAIClient:
    """Test endpoint methods against a fake transport."""

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("OPENAI_BASE_URL", "http://localhost:8000/v1")
        client = OpenAIClient.from_env()
        assert client.bearer_token == "sk-env"
        assert client.base_url == "http://localhost:8000/v1"

    def test_from_env_kwargs_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        assert OpenAIClient.from_env(bearer_token="sk-arg").bearer_token == "sk-arg"

    @pytest.mark.asyncio
    async def test_create_chat_completion(self, client: OpenAIClient, transport: FakeTransport) -> None:
        transport.queue(make_response(200, {"id": "chatcmpl-1", "choices": []}))
        completion = await client.create_chat_completion(CHAT_REQUEST)
        assert completion["id"] == "chatcmpl-1"

        request = transport.last_request
        assert request.method is HttpMethod.POST
        assert str(request.url) == "https://api.openai.com/v1/chat/completions"
        assert request.headers["authorization"] == "Bearer sk-test"
        assert request.headers["content-type"] == "application/json"
        assert request.headers["accept"] == "application/json"
        assert transport.last_json() == CHAT_REQUEST

    @pytest.mark.asyncio
    async def test_read_only_mapping_body(self, client: OpenAIClient, transport: FakeTransport) -> None:
        await client.create_chat_completion(MappingProxyType({"model": "gpt-4o-mini", "messages": []}))
        assert transport.last_json() == {"model": "gpt-4o-mini", "messages": []}

    @pytest.mark.asyncio
    async def test_retrieve_model_path(self, client: OpenAIClient, transport: FakeTransport) -> None:
        transport.queue(make_response(200, {"id": "gpt-4"}))
        await client.retrieve_model("gpt-4")
        assert str(transport.last_request.url) == "https://api.openai.com/v1/models/gpt-4"
        assert transport.last_request.method is HttpMethod.GET

    @pytest.mark.asyncio
    async def test_delete_thread_message_path(self, client: OpenAIClient, transport: FakeTransport) -> None:
        await client.delete_thread_message("thread_1", "msg_2")
        assert transport.last_request.method is HttpMethod.DELETE
        assert transport.last_request.url.path == "/v1/threads/thread_1/messages/msg_2"

    @pytest.mark.asyncio
    async def test_list_assistants_defaults(self, client: OpenAIClient, transport: FakeTransport) -> None:
        await client.list_assistants()
        url = transport.last_request.url
        assert url.path == "/v1/assistants"
        assert dict(url.query) == {"limit": "20", "order": "desc"}

    @pytest.mark.asyncio
    async def test_list_thread_messages_cursor(self, client: OpenAIClient, transport: FakeTransport) -> None:
        await client.list_thread_messages("thread_1", limit=5, order="asc", after="msg_9", run_id="run_1")
        assert dict(transport.last_request.url.query) == {
            "limit": "5",
            "order": "asc",
            "after": "msg_9",
            "run_id": "run_1",
        }

    @pytest.mark.asyncio
    async def test_fine_tuning_pagination(self, client: OpenAIClient, transport: FakeTransport) -> None:
        await client.list_paginated_fine_tuning_jobs()
        assert dict(transport.last_request.url.query) == {"limit": "20"}
        await client.list_fine_tuning_job_checkpoints("ftjob-1")
        assert dict(transport.last_request.url.query) == {"limit": "10"}

    @pytest.mark.asyncio
    async def test_cancel_sends_no_body(self, client: OpenAIClient, transport: FakeTransport) -> None:
        await client.cancel_batch("batch_1")
        request = transport.last_request
        assert isinstance(request, Request)
        assert request.method is HttpMethod.POST
        assert request.url.path == "/v1/batches/batch_1/cancel"
        assert request.body is None
        assert "content-type" not in request.headers

    @pytest.mark.asyncio
    async def test_create_thread_run_include(self, client: OpenAIClient, transport: FakeTransport) -> None:
        await client.create_thread_run("thread_1", {"assistant_id": "asst_1"})
        assert "include" not in transport.last_request.url.query
        await client.create_thread_run("thread_1", {"assistant_id": "asst_1"}, include="step_details")
        assert transport.last_request.url.query["include"] == "step_details"

    @pytest.mark.asyncio
    async def test_error_response(self, client: OpenAIClient, transport: FakeTransport) -> None:
        transport.queue(make_response(401, {"error": {"message": "Incorrect API key"}}))
        with pytest.raises(ClientError) as exc_info:
            await client.list_models()
        assert exc_info.value.code == 401
        assert "Incorrect API key" in str(exc_info.value)

    def test_pagination_params(self) -> None:
        assert pagination_params(20, "desc") == {"limit": 20, "order": "desc"}
        assert pagination_params(20, after="x", filter=None) == {"limit": 20, "after": "x"}


class TestOpenAIStreaming:
    """Test streamed chat completions."""

    @pytest.mark.asyncio
    async def test_chat_completion_stream(self, client: OpenAIClient, transport: FakeTransport) -> None:
        transport.queue(
            make_response(
                200,
                chunks=sse(
                    '{"choices": [{"delta": {"content": "Hel"}}]}',
                    "not json",
                    '{"choices": [{"delta": {"content": "lo"}}]}',
                    "[DONE]",
                    '{"after": "done"}',
                ),
            )
        )
        chunks = [chunk async for chunk in client.create_chat_completion_stream(CHAT_REQUEST)]
        text = "".join(chunk["choices"][0]["delta"]["content"] for chunk in chunks)
        assert text == "Hello"
        assert transport.last_json() == {**CHAT_REQUEST, "stream": True}

    @pytest.mark.asyncio
    async def test_stream_error_status(self, client: OpenAIClient, transport: FakeTransport) -> None:
        transport.queue(make_response(400, {"error": {"message": "bad model"}}))
        with pytest.raises(ClientError) as exc_info:
            async for _ in client.create_completion_stream({"model": "x", "prompt": "y"}):
                pass
        assert exc_info.value.code == 400
        assert exc_info.value.body == '{"error": {"message": "bad model"}}'

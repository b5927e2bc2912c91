"""
Client for the OpenAI REST API.

Every method is a thin call into the client core: the endpoint table in
``endpoints`` supplies the method, path and content types, the method
supplies path parameters, query parameters and the body, and the decoded
JSON object is returned.
"""

import json
import logging
import os
from collections.abc import AsyncIterator
from collections.abc import Mapping
from typing import Any

from ..endpoint import Endpoint
from ..http import BaseAPIClient
from ..http.streaming import iter_sse_data
from ..types import JsonObject
from ..types import QueryParams
from . import endpoints as ep
from .endpoints import pagination_params

logger = logging.getLogger(__name__)

STREAM_DONE = "[DONE]"


class OpenAIClient(BaseAPIClient):
    """
    Client for the OpenAI API.

    Example:
        async with OpenAIClient(bearer_token="sk-...") as client:
            completion = await client.create_chat_completion(
                {"model": "gpt-4o-mini", "messages": [{"role": "user", "content": "Hi"}]}
            )
            print(completion["choices"][0]["message"]["content"])
    """

    @classmethod
    def from_env(cls, **kwargs: Any) -> "OpenAIClient":
        """
        Create a client configured from the environment.

        Reads ``OPENAI_API_KEY`` and the optional ``OPENAI_BASE_URL``.
        Keyword arguments are passed through to the constructor and take
        precedence.
        """
        kwargs.setdefault("bearer_token", os.getenv("OPENAI_API_KEY", ""))
        if os.getenv("OPENAI_BASE_URL"):
            kwargs.setdefault("base_url", os.getenv("OPENAI_BASE_URL"))
        return cls(**kwargs)

    async def _call(
        self,
        endpoint: Endpoint,
        *,
        path_params: Mapping[str, str] | None = None,
        query_params: QueryParams | None = None,
        body: Any = None,
    ) -> JsonObject:
        response = await self.make_request(
            base_url=endpoint.base_url,
            path=endpoint.format_path(**(path_params or {})),
            method=endpoint.method,
            query_params=query_params,
            request_type=endpoint.request_type,
            response_type=endpoint.response_type,
            body=body,
        )
        result: JsonObject = response.json()
        return result

    async def _call_stream(self, endpoint: Endpoint, body: Mapping[str, Any]) -> AsyncIterator[JsonObject]:
        response = await self.make_request_stream(
            base_url=endpoint.base_url,
            path=endpoint.format_path(),
            method=endpoint.method,
            request_type=endpoint.request_type,
            response_type=endpoint.response_type,
            body={**body, "stream": True},
        )
        try:
            async for data in iter_sse_data(response):
                self.log_stream_chunk(response.url or endpoint.path, data)
                if data == STREAM_DONE:
                    break
                try:
                    yield json.loads(data)
                except json.JSONDecodeError:
                    logger.debug(f"Skipping malformed stream event: {data[:100]}")
                    continue
        finally:
            # Free the connection when [DONE] arrives or the caller stops early
            response.release()

    # =========================================================================
    # Chat, completions, embeddings
    # =========================================================================

    async def create_chat_completion(self, request: Mapping[str, Any]) -> JsonObject:
        """Create a model response for the given chat conversation.

        `POST` `https://api.openai.com/v1/chat/completions`
        """
        return await self._call(ep.CREATE_CHAT_COMPLETION, body=request)

    async def create_chat_completion_stream(self, request: Mapping[str, Any]) -> AsyncIterator[JsonObject]:
        """Stream chat completion chunks as they are generated.

        `POST` `https://api.openai.com/v1/chat/completions` with `"stream": true`
        """
        async for chunk in self._call_stream(ep.CREATE_CHAT_COMPLETION, request):
            yield chunk

    async def create_completion(self, request: Mapping[str, Any]) -> JsonObject:
        """Create a completion for the provided prompt and parameters.

        `POST` `https://api.openai.com/v1/completions`
        """
        return await self._call(ep.CREATE_COMPLETION, body=request)

    async def create_completion_stream(self, request: Mapping[str, Any]) -> AsyncIterator[JsonObject]:
        """Stream completion chunks as they are generated."""
        async for chunk in self._call_stream(ep.CREATE_COMPLETION, request):
            yield chunk

    async def create_embedding(self, request: Mapping[str, Any]) -> JsonObject:
        """Create an embedding vector representing the input text."""
        return await self._call(ep.CREATE_EMBEDDING, body=request)

    # =========================================================================
    # Fine-tuning
    # =========================================================================

    async def list_paginated_fine_tuning_jobs(self, *, after: str | None = None, limit: int = 20) -> JsonObject:
        """List your organization's fine-tuning jobs."""
        return await self._call(ep.LIST_PAGINATED_FINE_TUNING_JOBS, query_params=pagination_params(limit, after=after))

    async def create_fine_tuning_job(self, request: Mapping[str, Any]) -> JsonObject:
        """Create a fine-tuning job from a given dataset."""
        return await self._call(ep.CREATE_FINE_TUNING_JOB, body=request)

    async def retrieve_fine_tuning_job(self, fine_tuning_job_id: str) -> JsonObject:
        return await self._call(ep.RETRIEVE_FINE_TUNING_JOB, path_params={"fine_tuning_job_id": fine_tuning_job_id})

    async def list_fine_tuning_events(
        self,
        fine_tuning_job_id: str,
        *,
        after: str | None = None,
        limit: int = 20,
    ) -> JsonObject:
        """Get status updates for a fine-tuning job."""
        return await self._call(
            ep.LIST_FINE_TUNING_EVENTS,
            path_params={"fine_tuning_job_id": fine_tuning_job_id},
            query_params=pagination_params(limit, after=after),
        )

    async def cancel_fine_tuning_job(self, fine_tuning_job_id: str) -> JsonObject:
        return await self._call(ep.CANCEL_FINE_TUNING_JOB, path_params={"fine_tuning_job_id": fine_tuning_job_id})

    async def list_fine_tuning_job_checkpoints(
        self,
        fine_tuning_job_id: str,
        *,
        after: str | None = None,
        limit: int = 10,
    ) -> JsonObject:
        """List checkpoints for a fine-tuning job."""
        return await self._call(
            ep.LIST_FINE_TUNING_JOB_CHECKPOINTS,
            path_params={"fine_tuning_job_id": fine_tuning_job_id},
            query_params=pagination_params(limit, after=after),
        )

    # =========================================================================
    # Images, models, moderations
    # =========================================================================

    async def create_image(self, request: Mapping[str, Any]) -> JsonObject:
        """Create an image given a prompt."""
        return await self._call(ep.CREATE_IMAGE, body=request)

    async def list_models(self) -> JsonObject:
        """List the currently available models."""
        return await self._call(ep.LIST_MODELS)

    async def retrieve_model(self, model: str) -> JsonObject:
        return await self._call(ep.RETRIEVE_MODEL, path_params={"model": model})

    async def delete_model(self, model: str) -> JsonObject:
        """Delete a fine-tuned model (requires the Owner role in the organization)."""
        return await self._call(ep.DELETE_MODEL, path_params={"model": model})

    async def create_moderation(self, request: Mapping[str, Any]) -> JsonObject:
        """Classify whether the input is potentially harmful."""
        return await self._call(ep.CREATE_MODERATION, body=request)

    # =========================================================================
    # Assistants
    # =========================================================================

    async def list_assistants(
        self,
        *,
        limit: int = 20,
        order: str = "desc",
        after: str | None = None,
        before: str | None = None,
    ) -> JsonObject:
        """Return a list of assistants."""
        return await self._call(ep.LIST_ASSISTANTS, query_params=pagination_params(limit, order, after, before))

    async def create_assistant(self, request: Mapping[str, Any]) -> JsonObject:
        return await self._call(ep.CREATE_ASSISTANT, body=request)

    async def get_assistant(self, assistant_id: str) -> JsonObject:
        return await self._call(ep.GET_ASSISTANT, path_params={"assistant_id": assistant_id})

    async def modify_assistant(self, assistant_id: str, request: Mapping[str, Any]) -> JsonObject:
        return await self._call(ep.MODIFY_ASSISTANT, path_params={"assistant_id": assistant_id}, body=request)

    async def delete_assistant(self, assistant_id: str) -> JsonObject:
        return await self._call(ep.DELETE_ASSISTANT, path_params={"assistant_id": assistant_id})

    # =========================================================================
    # Threads
    # =========================================================================

    async def create_thread(self, request: Mapping[str, Any] | None = None) -> JsonObject:
        return await self._call(ep.CREATE_THREAD, body=request)

    async def get_thread(self, thread_id: str) -> JsonObject:
        return await self._call(ep.GET_THREAD, path_params={"thread_id": thread_id})

    async def modify_thread(self, thread_id: str, request: Mapping[str, Any]) -> JsonObject:
        return await self._call(ep.MODIFY_THREAD, path_params={"thread_id": thread_id}, body=request)

    async def delete_thread(self, thread_id: str) -> JsonObject:
        return await self._call(ep.DELETE_THREAD, path_params={"thread_id": thread_id})

    # =========================================================================
    # Messages
    # =========================================================================

    async def list_thread_messages(
        self,
        thread_id: str,
        *,
        limit: int = 20,
        order: str = "desc",
        after: str | None = None,
        before: str | None = None,
        run_id: str | None = None,
    ) -> JsonObject:
        """Return a list of messages for a given thread."""
        return await self._call(
            ep.LIST_THREAD_MESSAGES,
            path_params={"thread_id": thread_id},
            query_params=pagination_params(limit, order, after, before, run_id=run_id),
        )

    async def create_thread_message(self, thread_id: str, request: Mapping[str, Any]) -> JsonObject:
        return await self._call(ep.CREATE_THREAD_MESSAGE, path_params={"thread_id": thread_id}, body=request)

    async def get_thread_message(self, thread_id: str, message_id: str) -> JsonObject:
        return await self._call(
            ep.GET_THREAD_MESSAGE, path_params={"thread_id": thread_id, "message_id": message_id}
        )

    async def modify_thread_message(self, thread_id: str, message_id: str, request: Mapping[str, Any]) -> JsonObject:
        return await self._call(
            ep.MODIFY_THREAD_MESSAGE,
            path_params={"thread_id": thread_id, "message_id": message_id},
            body=request,
        )

    async def delete_thread_message(self, thread_id: str, message_id: str) -> JsonObject:
        return await self._call(
            ep.DELETE_THREAD_MESSAGE, path_params={"thread_id": thread_id, "message_id": message_id}
        )

    # =========================================================================
    # Runs
    # =========================================================================

    async def create_thread_and_run(self, request: Mapping[str, Any]) -> JsonObject:
        """Create a thread and run it in one request."""
        return await self._call(ep.CREATE_THREAD_AND_RUN, body=request)

    async def list_thread_runs(
        self,
        thread_id: str,
        *,
        limit: int = 20,
        order: str = "desc",
        after: str | None = None,
        before: str | None = None,
    ) -> JsonObject:
        return await self._call(
            ep.LIST_THREAD_RUNS,
            path_params={"thread_id": thread_id},
            query_params=pagination_params(limit, order, after, before),
        )

    async def create_thread_run(
        self,
        thread_id: str,
        request: Mapping[str, Any],
        *,
        include: str | None = None,
    ) -> JsonObject:
        return await self._call(
            ep.CREATE_THREAD_RUN,
            path_params={"thread_id": thread_id},
            query_params={"include": include} if include is not None else None,
            body=request,
        )

    async def get_thread_run(self, thread_id: str, run_id: str) -> JsonObject:
        return await self._call(ep.GET_THREAD_RUN, path_params={"thread_id": thread_id, "run_id": run_id})

    async def modify_thread_run(self, thread_id: str, run_id: str, request: Mapping[str, Any]) -> JsonObject:
        return await self._call(
            ep.MODIFY_THREAD_RUN, path_params={"thread_id": thread_id, "run_id": run_id}, body=request
        )

    async def submit_thread_tool_outputs_to_run(
        self,
        thread_id: str,
        run_id: str,
        request: Mapping[str, Any],
    ) -> JsonObject:
        """
        Submit tool call outputs to a run.

        Used when a run has ``status: "requires_action"`` and
        ``required_action.type`` is ``submit_tool_outputs``.
        """
        return await self._call(
            ep.SUBMIT_THREAD_TOOL_OUTPUTS_TO_RUN,
            path_params={"thread_id": thread_id, "run_id": run_id},
            body=request,
        )

    async def cancel_thread_run(self, thread_id: str, run_id: str) -> JsonObject:
        """Cancel a run that is ``in_progress``."""
        return await self._call(ep.CANCEL_THREAD_RUN, path_params={"thread_id": thread_id, "run_id": run_id})

    async def list_thread_run_steps(
        self,
        thread_id: str,
        run_id: str,
        *,
        limit: int = 20,
        order: str = "desc",
        after: str | None = None,
        before: str | None = None,
        include: str | None = None,
    ) -> JsonObject:
        return await self._call(
            ep.LIST_THREAD_RUN_STEPS,
            path_params={"thread_id": thread_id, "run_id": run_id},
            query_params=pagination_params(limit, order, after, before, include=include),
        )

    async def get_thread_run_step(
        self,
        thread_id: str,
        run_id: str,
        step_id: str,
        *,
        include: str | None = None,
    ) -> JsonObject:
        return await self._call(
            ep.GET_THREAD_RUN_STEP,
            path_params={"thread_id": thread_id, "run_id": run_id, "step_id": step_id},
            query_params={"include": include} if include is not None else None,
        )

    # =========================================================================
    # Vector stores
    # =========================================================================

    async def list_vector_stores(
        self,
        *,
        limit: int = 20,
        order: str = "desc",
        after: str | None = None,
        before: str | None = None,
    ) -> JsonObject:
        return await self._call(ep.LIST_VECTOR_STORES, query_params=pagination_params(limit, order, after, before))

    async def create_vector_store(self, request: Mapping[str, Any]) -> JsonObject:
        return await self._call(ep.CREATE_VECTOR_STORE, body=request)

    async def get_vector_store(self, vector_store_id: str) -> JsonObject:
        return await self._call(ep.GET_VECTOR_STORE, path_params={"vector_store_id": vector_store_id})

    async def modify_vector_store(self, vector_store_id: str, request: Mapping[str, Any]) -> JsonObject:
        return await self._call(
            ep.MODIFY_VECTOR_STORE, path_params={"vector_store_id": vector_store_id}, body=request
        )

    async def delete_vector_store(self, vector_store_id: str) -> JsonObject:
        return await self._call(ep.DELETE_VECTOR_STORE, path_params={"vector_store_id": vector_store_id})

    async def list_vector_store_files(
        self,
        vector_store_id: str,
        *,
        limit: int = 20,
        order: str = "desc",
        after: str | None = None,
        before: str | None = None,
        filter: str | None = None,
    ) -> JsonObject:
        """List the files of a vector store, optionally filtered by status."""
        return await self._call(
            ep.LIST_VECTOR_STORE_FILES,
            path_params={"vector_store_id": vector_store_id},
            query_params=pagination_params(limit, order, after, before, filter=filter),
        )

    async def create_vector_store_file(self, vector_store_id: str, request: Mapping[str, Any]) -> JsonObject:
        """Attach a file to a vector store."""
        return await self._call(
            ep.CREATE_VECTOR_STORE_FILE, path_params={"vector_store_id": vector_store_id}, body=request
        )

    async def get_vector_store_file(self, vector_store_id: str, file_id: str) -> JsonObject:
        return await self._call(
            ep.GET_VECTOR_STORE_FILE, path_params={"vector_store_id": vector_store_id, "file_id": file_id}
        )

    async def delete_vector_store_file(self, vector_store_id: str, file_id: str) -> JsonObject:
        """Remove a file from a vector store (the file itself is not deleted)."""
        return await self._call(
            ep.DELETE_VECTOR_STORE_FILE, path_params={"vector_store_id": vector_store_id, "file_id": file_id}
        )

    async def create_vector_store_file_batch(self, vector_store_id: str, request: Mapping[str, Any]) -> JsonObject:
        return await self._call(
            ep.CREATE_VECTOR_STORE_FILE_BATCH, path_params={"vector_store_id": vector_store_id}, body=request
        )

    async def get_vector_store_file_batch(self, vector_store_id: str, batch_id: str) -> JsonObject:
        return await self._call(
            ep.GET_VECTOR_STORE_FILE_BATCH, path_params={"vector_store_id": vector_store_id, "batch_id": batch_id}
        )

    async def cancel_vector_store_file_batch(self, vector_store_id: str, batch_id: str) -> JsonObject:
        """Cancel a vector store file batch as soon as possible."""
        return await self._call(
            ep.CANCEL_VECTOR_STORE_FILE_BATCH,
            path_params={"vector_store_id": vector_store_id, "batch_id": batch_id},
        )

    async def list_files_in_vector_store_batch(
        self,
        vector_store_id: str,
        batch_id: str,
        *,
        limit: int = 20,
        order: str = "desc",
        after: str | None = None,
        before: str | None = None,
        filter: str | None = None,
    ) -> JsonObject:
        return await self._call(
            ep.LIST_FILES_IN_VECTOR_STORE_BATCH,
            path_params={"vector_store_id": vector_store_id, "batch_id": batch_id},
            query_params=pagination_params(limit, order, after, before, filter=filter),
        )

    # =========================================================================
    # Batches
    # =========================================================================

    async def list_batches(self, *, after: str | None = None, limit: int = 20) -> JsonObject:
        """List your organization's batches."""
        return await self._call(ep.LIST_BATCHES, query_params=pagination_params(limit, after=after))

    async def create_batch(self, request: Mapping[str, Any]) -> JsonObject:
        """Create and execute a batch from an uploaded file of requests."""
        return await self._call(ep.CREATE_BATCH, body=request)

    async def retrieve_batch(self, batch_id: str) -> JsonObject:
        return await self._call(ep.RETRIEVE_BATCH, path_params={"batch_id": batch_id})

    async def cancel_batch(self, batch_id: str) -> JsonObject:
        """Cancel an in-progress batch."""
        return await self._call(ep.CANCEL_BATCH, path_params={"batch_id": batch_id})

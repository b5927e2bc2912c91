"""
Declarative table of the OpenAI REST endpoints.

Each endpoint is described once as data (method, path template and
content types); the client methods only fill in path parameters, query
parameters and the body.
"""

from typing import Any

from ..endpoint import Endpoint
from ..types import ContentType
from ..types import HttpMethod

BASE_URL = "https://api.openai.com/v1"


def _get(path: str) -> Endpoint:
    return Endpoint(HttpMethod.GET, BASE_URL, path)


def _post(path: str, with_body: bool = True) -> Endpoint:
    return Endpoint(HttpMethod.POST, BASE_URL, path, request_type=ContentType.JSON if with_body else ContentType.NONE)


def _delete(path: str) -> Endpoint:
    return Endpoint(HttpMethod.DELETE, BASE_URL, path)


def pagination_params(
    limit: int,
    order: str | None = None,
    after: str | None = None,
    before: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """
    Build cursor-pagination query parameters.

    ``limit`` (and ``order`` when the endpoint supports it) is always sent;
    cursors and extra filters only when not None.
    """
    params: dict[str, Any] = {"limit": limit}
    if order is not None:
        params["order"] = order
    if after is not None:
        params["after"] = after
    if before is not None:
        params["before"] = before
    params.update({key: value for key, value in extra.items() if value is not None})
    return params


# Chat, completions, embeddings
CREATE_CHAT_COMPLETION = _post("/chat/completions")
CREATE_COMPLETION = _post("/completions")
CREATE_EMBEDDING = _post("/embeddings")

# Fine-tuning
LIST_PAGINATED_FINE_TUNING_JOBS = _get("/fine_tuning/jobs")
CREATE_FINE_TUNING_JOB = _post("/fine_tuning/jobs")
RETRIEVE_FINE_TUNING_JOB = _get("/fine_tuning/jobs/{fine_tuning_job_id}")
LIST_FINE_TUNING_EVENTS = _get("/fine_tuning/jobs/{fine_tuning_job_id}/events")
CANCEL_FINE_TUNING_JOB = _post("/fine_tuning/jobs/{fine_tuning_job_id}/cancel", with_body=False)
LIST_FINE_TUNING_JOB_CHECKPOINTS = _get("/fine_tuning/jobs/{fine_tuning_job_id}/checkpoints")

# Images, models, moderations
CREATE_IMAGE = _post("/images/generations")
LIST_MODELS = _get("/models")
RETRIEVE_MODEL = _get("/models/{model}")
DELETE_MODEL = _delete("/models/{model}")
CREATE_MODERATION = _post("/moderations")

# Assistants
LIST_ASSISTANTS = _get("/assistants")
CREATE_ASSISTANT = _post("/assistants")
GET_ASSISTANT = _get("/assistants/{assistant_id}")
MODIFY_ASSISTANT = _post("/assistants/{assistant_id}")
DELETE_ASSISTANT = _delete("/assistants/{assistant_id}")

# Threads
CREATE_THREAD = _post("/threads")
GET_THREAD = _get("/threads/{thread_id}")
MODIFY_THREAD = _post("/threads/{thread_id}")
DELETE_THREAD = _delete("/threads/{thread_id}")

# Messages
LIST_THREAD_MESSAGES = _get("/threads/{thread_id}/messages")
CREATE_THREAD_MESSAGE = _post("/threads/{thread_id}/messages")
GET_THREAD_MESSAGE = _get("/threads/{thread_id}/messages/{message_id}")
MODIFY_THREAD_MESSAGE = _post("/threads/{thread_id}/messages/{message_id}")
DELETE_THREAD_MESSAGE = _delete("/threads/{thread_id}/messages/{message_id}")

# Runs
CREATE_THREAD_AND_RUN = _post("/threads/runs")
LIST_THREAD_RUNS = _get("/threads/{thread_id}/runs")
CREATE_THREAD_RUN = _post("/threads/{thread_id}/runs")
GET_THREAD_RUN = _get("/threads/{thread_id}/runs/{run_id}")
MODIFY_THREAD_RUN = _post("/threads/{thread_id}/runs/{run_id}")
SUBMIT_THREAD_TOOL_OUTPUTS_TO_RUN = _post("/threads/{thread_id}/runs/{run_id}/submit_tool_outputs")
CANCEL_THREAD_RUN = _post("/threads/{thread_id}/runs/{run_id}/cancel", with_body=False)
LIST_THREAD_RUN_STEPS = _get("/threads/{thread_id}/runs/{run_id}/steps")
GET_THREAD_RUN_STEP = _get("/threads/{thread_id}/runs/{run_id}/steps/{step_id}")

# Vector stores
LIST_VECTOR_STORES = _get("/vector_stores")
CREATE_VECTOR_STORE = _post("/vector_stores")
GET_VECTOR_STORE = _get("/vector_stores/{vector_store_id}")
MODIFY_VECTOR_STORE = _post("/vector_stores/{vector_store_id}")
DELETE_VECTOR_STORE = _delete("/vector_stores/{vector_store_id}")

# Vector store files
LIST_VECTOR_STORE_FILES = _get("/vector_stores/{vector_store_id}/files")
CREATE_VECTOR_STORE_FILE = _post("/vector_stores/{vector_store_id}/files")
GET_VECTOR_STORE_FILE = _get("/vector_stores/{vector_store_id}/files/{file_id}")
DELETE_VECTOR_STORE_FILE = _delete("/vector_stores/{vector_store_id}/files/{file_id}")

# Vector store file batches
CREATE_VECTOR_STORE_FILE_BATCH = _post("/vector_stores/{vector_store_id}/file_batches")
GET_VECTOR_STORE_FILE_BATCH = _get("/vector_stores/{vector_store_id}/file_batches/{batch_id}")
CANCEL_VECTOR_STORE_FILE_BATCH = _post(
    "/vector_stores/{vector_store_id}/file_batches/{batch_id}/cancel", with_body=False
)
LIST_FILES_IN_VECTOR_STORE_BATCH = _get("/vector_stores/{vector_store_id}/file_batches/{batch_id}/files")

# Batches
LIST_BATCHES = _get("/batches")
CREATE_BATCH = _post("/batches")
RETRIEVE_BATCH = _get("/batches/{batch_id}")
CANCEL_BATCH = _post("/batches/{batch_id}/cancel", with_body=False)

"""
Example demonstrating HTTP traffic logging and hooks.

The log file captures all HTTP requests, responses, and stream chunks
for debugging and auditing purposes. A request hook adds a trace header
to every call.
"""

import asyncio
import uuid
from datetime import UTC
from datetime import datetime
from logging import basicConfig
from logging import getLogger
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from llmclients import BaseRequest
from llmclients import FileHTTPLogger
from llmclients import OpenAIClient
from llmclients import Response

load_dotenv()

logger = getLogger(__name__)
console = Console()


def add_trace_id(request: BaseRequest) -> BaseRequest:
    request.headers["x-trace-id"] = uuid.uuid4().hex
    return request


async def log_status(response: Response) -> Response:
    logger.info(f"{response.status} {response.url}")
    return response


async def main() -> None:
    console.print(Panel.fit("[bold blue]llmclients Example with HTTP Logging[/bold blue]"))

    session_id = f"session-{datetime.now(UTC).strftime('%Y%m%d-%H%M%S')}"
    # Log file path: logs/<session_id>.txt
    log_file = Path("logs") / f"{session_id}.txt"

    client = OpenAIClient.from_env(
        on_request=add_trace_id,
        on_response=log_status,
        http_logger=FileHTTPLogger(log_file),
    )
    client.set_session_id(session_id)

    try:
        completion = await client.create_chat_completion(
            {"model": "gpt-4o-mini", "messages": [{"role": "user", "content": "Say hello."}]}
        )
        console.print(completion["choices"][0]["message"]["content"])

        async for chunk in client.create_chat_completion_stream(
            {"model": "gpt-4o-mini", "messages": [{"role": "user", "content": "Count to five."}]}
        ):
            for choice in chunk["choices"]:
                console.print(choice["delta"].get("content") or "", end="")
        console.print()
    finally:
        await client.end_session()

    console.print(f"\n[dim]HTTP traffic logged to: {log_file.absolute()}[/dim]")


if __name__ == "__main__":
    basicConfig(
        level="INFO",
        format="[%(name)s] %(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    asyncio.run(main())

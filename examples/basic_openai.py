"""
Example demonstrating the OpenAI client.

Lists the available models, then streams a chat completion.
Reads OPENAI_API_KEY (and optionally OPENAI_BASE_URL) from the
environment or a .env file.
"""

import asyncio
from logging import basicConfig
from logging import getLogger

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.text import Text

from llmclients import ClientError
from llmclients import OpenAIClient

load_dotenv()

logger = getLogger(__name__)
console = Console()


async def main() -> None:
    console.print(Panel.fit("[bold blue]llmclients OpenAI Example[/bold blue]"))

    async with OpenAIClient.from_env() as client:
        try:
            models = await client.list_models()
        except ClientError as e:
            console.print(Text(f"Could not list models: {e.message} (code: {e.code})", style="bold red"))
            return
        model_ids = sorted(model["id"] for model in models["data"])
        console.print(f"[dim]{len(model_ids)} models available[/dim]")

        query = "Write a haiku about HTTP retries."
        console.print(Panel(f"[bold]User:[/bold] {query}", border_style="green"))

        usage = None
        async for chunk in client.create_chat_completion_stream(
            {
                "model": "gpt-4o-mini",
                "messages": [{"role": "user", "content": query}],
                "stream_options": {"include_usage": True},
            }
        ):
            for choice in chunk.get("choices", []):
                console.print(choice["delta"].get("content") or "", end="")
            usage = chunk.get("usage") or usage
        console.print()

        if usage:
            usage_text = Text()
            usage_text.append("Usage: ", style="bold blue")
            usage_text.append(
                f"prompt={usage['prompt_tokens']}, "
                f"completion={usage['completion_tokens']}, "
                f"total={usage['total_tokens']}",
                style="dim",
            )
            console.print(usage_text)

    console.print("\n[dim]Example complete.[/dim]")


if __name__ == "__main__":
    basicConfig(
        level="INFO",
        format="[%(name)s] %(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    asyncio.run(main())

"""
Example demonstrating the Ollama LLM wrapper.

Needs a local Ollama server (http://localhost:11434) with the
llama3.2 model pulled. Set OLLAMA_BASE_URL to use another server.
"""

import asyncio
import os
from logging import basicConfig

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from llmclients import Ollama
from llmclients import OllamaOptions
from llmclients import StringOutputParser
from llmclients.ollama import DEFAULT_BASE_URL

load_dotenv()

console = Console()


async def main() -> None:
    console.print(Panel.fit("[bold blue]llmclients Ollama Example[/bold blue]"))

    parser = StringOutputParser()
    async with Ollama(
        base_url=os.getenv("OLLAMA_BASE_URL", DEFAULT_BASE_URL),
        default_options=OllamaOptions(model="llama3.2", temperature=0.7),
    ) as llm:
        result = await llm.invoke("Why is the sky blue? Answer in one sentence.")
        console.print(Panel(parser.invoke(result), title="invoke", border_style="green"))
        console.print(
            f"[dim]finish={result.finish_reason.value}, tokens={result.usage.total_tokens}[/dim]"
        )

        console.print(Panel("Tell me a joke", title="stream", border_style="green"))
        async for chunk in llm.stream("Tell me a joke", options=OllamaOptions(seed=9999)):
            console.print(parser.invoke(chunk), end="")
        console.print()

    console.print("\n[dim]Example complete.[/dim]")


if __name__ == "__main__":
    basicConfig(
        level="INFO",
        format="[%(name)s] %(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    asyncio.run(main())

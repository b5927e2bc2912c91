"""
Output parsers that turn LLM results into plain values.
"""

from .llms.types import LLMResult


class StringOutputParser:
    """
    Parse the output of an LLM call to a string.

    Example:
        result = await llm.invoke("Hello")
        text = StringOutputParser().invoke(result)
    """

    def parse_result(self, result: LLMResult) -> str:
        return result.output

    def parse(self, text: str) -> str:
        return text

    def invoke(self, value: LLMResult | str) -> str:
        """Parse either an LLMResult or an already extracted string."""
        if isinstance(value, LLMResult):
            return self.parse_result(value)
        return self.parse(value)

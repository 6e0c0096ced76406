"""Answer generator clients with OpenAI integration.

Security: Reads API key from settings only, never hardcoded.
Provides a deterministic stub when no key is present, for testing.
"""

import logging
from typing import Protocol

from openai import AsyncOpenAI, OpenAIError

from backend.pdfqa.config import Settings, get_settings
from backend.pdfqa.errors import AnswerGeneratorError
from backend.pdfqa.rag.prompt import CONTEXT_BLOCK_SEPARATOR, extract_context

logger = logging.getLogger(__name__)

NO_CONTEXT_ANSWER = (
    "I couldn't find any relevant information in the uploaded documents to answer this question."
)


class AnswerGenerator(Protocol):
    """Protocol for answer generator implementations."""

    async def generate(self, prompt: str) -> str:
        """Generate an answer for a fully assembled prompt.

        Raises:
            AnswerGeneratorError: If the underlying model call fails
        """
        ...


class DeterministicStubGenerator:
    """Deterministic stub generator for testing (no API key required)."""

    async def generate(self, prompt: str) -> str:
        """Generate deterministic stub answer."""
        context = extract_context(prompt)
        if not context:
            return NO_CONTEXT_ANSWER

        num_blocks = len(context.split(CONTEXT_BLOCK_SEPARATOR + "From "))
        return (
            f"Based on {num_blocks} retrieved passage(s): {context[:200]}\n\n"
            "*This is a stub response generated without LLM synthesis.*"
        )


class OpenAIAnswerGenerator:
    """OpenAI-backed answer generator."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: float = 0.1,
        max_tokens: int = 1024,
    ):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from settings)
            model: Chat model name
            temperature: Sampling temperature
            max_tokens: Completion token limit
        """
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def generate(self, prompt: str) -> str:
        """Generate answer using OpenAI API."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI API call failed: {e}")
            raise AnswerGeneratorError(f"Failed to generate answer: {e}") from e

        if not response.choices:
            raise AnswerGeneratorError("Answer generator returned no choices")

        answer = response.choices[0].message.content or ""
        if not answer.strip():
            logger.warning("OpenAI returned empty answer")
        return answer


def get_answer_generator(settings: Settings | None = None) -> AnswerGenerator:
    """Factory function to get appropriate answer generator based on config.

    Returns:
        OpenAIAnswerGenerator if API key is configured, DeterministicStubGenerator otherwise
    """
    settings = settings or get_settings()
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info(f"Using OpenAI answer generator ({settings.openai_chat_model})")
        return OpenAIAnswerGenerator(
            api_key=api_key.get_secret_value(),
            model=settings.openai_chat_model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )
    else:
        logger.warning("No OpenAI API key configured, using deterministic stub generator")
        return DeterministicStubGenerator()

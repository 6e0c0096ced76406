"""Embedding gateway - text to fixed-length vectors.

Security: Reads API key from settings only, never hardcoded.
Provides a deterministic hashing client when no key is present, for testing
and offline development.
"""

import hashlib
import logging
import re
from collections.abc import Sequence
from typing import Protocol

from openai import AsyncOpenAI, OpenAIError

from backend.pdfqa.config import Settings, get_settings
from backend.pdfqa.errors import EmbeddingProviderError

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+")


class EmbeddingClient(Protocol):
    """Protocol for embedding provider implementations.

    Results are order-preserving: vector i corresponds to text i. No caching,
    no retries, and no batching beyond what the caller passes in.
    """

    @property
    def dimensions(self) -> int:
        """Length of every vector this client returns."""
        ...

    async def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed a batch of texts.

        Raises:
            EmbeddingProviderError: If the provider call fails
        """
        ...

    async def embed_one(self, text: str) -> list[float]:
        """Embed a single text (typically a query).

        Raises:
            EmbeddingProviderError: If the provider call fails
        """
        ...


class DeterministicHashEmbeddingClient:
    """Deterministic bag-of-words hashing embedder (no API key required).

    Each lowercase word token is hashed with SHA-256 into one of `dimensions`
    buckets with a +/-1 sign, so texts sharing words get similar vectors.
    Text with no word tokens maps to the zero vector.
    """

    def __init__(self, dimensions: int = 256):
        if dimensions <= 0:
            raise ValueError("dimensions must be positive")
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _embed(self, text: str) -> list[float]:
        vector = [0.0] * self._dimensions
        for token in _TOKEN_RE.findall(text.lower()):
            digest = hashlib.sha256(token.encode("utf-8")).digest()
            bucket = int.from_bytes(digest[:8], "big") % self._dimensions
            sign = 1.0 if digest[8] & 1 else -1.0
            vector[bucket] += sign
        return vector

    async def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        return [self._embed(text) for text in texts]

    async def embed_one(self, text: str) -> list[float]:
        return self._embed(text)


class OpenAIEmbeddingClient:
    """OpenAI-backed embedding client."""

    def __init__(self, api_key: str, model: str = "text-embedding-3-small", dimensions: int = 1536):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from settings)
            model: Embedding model name
            dimensions: Requested vector length; every response is checked against it
        """
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []

        try:
            response = await self.client.embeddings.create(
                model=self.model,
                input=list(texts),
                dimensions=self._dimensions,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI embeddings call failed: {e}")
            raise EmbeddingProviderError(f"Failed to generate embeddings: {e}") from e

        # The API reports each vector's input position; don't rely on list order
        items = sorted(response.data, key=lambda item: item.index)
        if len(items) != len(texts):
            raise EmbeddingProviderError(
                f"Embedding provider returned {len(items)} vectors for {len(texts)} inputs"
            )

        vectors = [list(item.embedding) for item in items]
        for vector in vectors:
            if len(vector) != self._dimensions:
                raise EmbeddingProviderError(
                    f"Embedding provider returned a {len(vector)}-dimensional vector, "
                    f"expected {self._dimensions}"
                )
        return vectors

    async def embed_one(self, text: str) -> list[float]:
        vectors = await self.embed_many([text])
        return vectors[0]


def get_embedding_client(settings: Settings | None = None) -> EmbeddingClient:
    """Factory function to get appropriate embedding client based on config.

    Returns:
        OpenAIEmbeddingClient if API key is configured, DeterministicHashEmbeddingClient otherwise
    """
    settings = settings or get_settings()
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info(f"Using OpenAI embeddings ({settings.openai_embedding_model})")
        return OpenAIEmbeddingClient(
            api_key=api_key.get_secret_value(),
            model=settings.openai_embedding_model,
            dimensions=settings.embedding_dimensions,
        )
    else:
        logger.warning("No OpenAI API key configured, using deterministic hashing embedder")
        return DeterministicHashEmbeddingClient(dimensions=settings.embedding_dimensions)

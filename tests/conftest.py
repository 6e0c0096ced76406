"""Shared pytest fixtures for all test suites."""

import pytest

from backend.pdfqa.embeddings.client import DeterministicHashEmbeddingClient
from backend.pdfqa.rag.pipeline import RAGPipeline
from tests.fakes import RecordingGenerator


@pytest.fixture
def embedder() -> DeterministicHashEmbeddingClient:
    """Deterministic offline embedder."""
    return DeterministicHashEmbeddingClient(dimensions=64)


@pytest.fixture
def generator() -> RecordingGenerator:
    """Generator that records prompts."""
    return RecordingGenerator()


@pytest.fixture
def pipeline(embedder: DeterministicHashEmbeddingClient, generator: RecordingGenerator) -> RAGPipeline:
    """Pipeline with small chunks so short test documents split."""
    return RAGPipeline(
        embedder=embedder,
        generator=generator,
        chunk_size=60,
        chunk_overlap=10,
        top_k=5,
    )

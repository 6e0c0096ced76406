"""Models package - re-exports for convenience."""

from backend.pdfqa.models.answer import RAGResponse, Source
from backend.pdfqa.models.docs import (
    Chunk,
    Document,
    DocumentSummary,
    EmbeddingRecord,
    SearchResult,
)

__all__ = [
    # Documents
    "Document",
    "DocumentSummary",
    "Chunk",
    "EmbeddingRecord",
    "SearchResult",
    # Answers
    "Source",
    "RAGResponse",
]

"""Unit tests for record models and their construction-time invariants."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from backend.pdfqa.models import (
    Chunk,
    Document,
    EmbeddingRecord,
    RAGResponse,
    SearchResult,
    Source,
)


def test_chunk_accepts_matching_span() -> None:
    """Test that a chunk whose span equals its content length is valid."""
    chunk = Chunk(
        chunk_id="d_chunk_0",
        document_id="d",
        filename="f.pdf",
        content="hello",
        chunk_index=0,
        start_offset=10,
        end_offset=15,
    )

    assert chunk.end_offset - chunk.start_offset == len(chunk.content)


def test_chunk_rejects_mismatched_span() -> None:
    """Test that end_offset - start_offset must equal len(content)."""
    with pytest.raises(ValidationError, match="does not match content length"):
        Chunk(
            chunk_id="d_chunk_0",
            document_id="d",
            filename="f.pdf",
            content="hello",
            chunk_index=0,
            start_offset=0,
            end_offset=4,
        )


def test_chunk_rejects_negative_index() -> None:
    """Test that chunk_index is 0-based."""
    with pytest.raises(ValidationError):
        Chunk(
            chunk_id="c",
            document_id="d",
            filename="f.pdf",
            content="",
            chunk_index=-1,
            start_offset=0,
            end_offset=0,
        )


def test_records_are_immutable() -> None:
    """Test that records cannot be mutated after construction."""
    doc = Document(
        document_id="d",
        filename="f.pdf",
        page_count=2,
        uploaded_at=datetime(2025, 1, 1, tzinfo=UTC),
    )

    with pytest.raises(ValidationError):
        doc.filename = "other.pdf"


def test_embedding_record_from_chunk_copies_metadata() -> None:
    """Test that an embedding record denormalizes the chunk's display fields."""
    chunk = Chunk(
        chunk_id="d_chunk_3",
        document_id="d",
        filename="f.pdf",
        content="text",
        chunk_index=3,
        start_offset=4,
        end_offset=8,
    )

    record = EmbeddingRecord.from_chunk(chunk, [0.1, 0.2, 0.3])

    assert record.chunk_id == "d_chunk_3"
    assert record.document_id == "d"
    assert record.filename == "f.pdf"
    assert record.chunk_index == 3
    assert record.content == "text"
    assert record.vector == (0.1, 0.2, 0.3)
    assert record.dimension == 3


def test_embedding_record_rejects_empty_vector() -> None:
    """Test that vectors need at least one dimension."""
    with pytest.raises(ValidationError):
        EmbeddingRecord(
            chunk_id="c", document_id="d", filename="f", chunk_index=0, content="", vector=()
        )


def test_search_result_similarity_bounds() -> None:
    """Test that similarity must lie in [-1, 1]."""
    with pytest.raises(ValidationError):
        SearchResult(
            chunk_id="c", document_id="d", filename="f", chunk_index=0, content="", similarity=1.5
        )


def test_source_similarity_bounds() -> None:
    """Test that a Source built directly also keeps similarity in [-1, 1]."""
    with pytest.raises(ValidationError):
        Source(document_id="d", filename="f.pdf", content="x", similarity=1.5)
    with pytest.raises(ValidationError):
        Source(document_id="d", filename="f.pdf", content="x", similarity=-1.01)

    assert Source(document_id="d", filename="f.pdf", content="x", similarity=-1.0).similarity == -1.0


def test_source_from_result_and_response_serialization() -> None:
    """Test that provenance is projected from a search result and serializes cleanly."""
    result = SearchResult(
        chunk_id="c", document_id="d", filename="f.pdf", chunk_index=0, content="x", similarity=0.5
    )

    response = RAGResponse(answer="42", sources=[Source.from_result(result)])

    assert response.model_dump() == {
        "answer": "42",
        "sources": [
            {"document_id": "d", "filename": "f.pdf", "content": "x", "similarity": 0.5}
        ],
    }

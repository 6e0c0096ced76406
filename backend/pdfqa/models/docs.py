"""Document, chunk and embedding record models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Document(BaseModel):
    """Metadata for one successfully ingested document."""

    model_config = ConfigDict(frozen=True)

    document_id: str = Field(..., min_length=1)
    filename: str
    page_count: int = Field(..., ge=0)
    uploaded_at: datetime
    chunk_count: int = Field(0, ge=0)


class DocumentSummary(BaseModel):
    """A (document_id, filename) pair as derived from stored embeddings."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    filename: str


class Chunk(BaseModel):
    """A contiguous, positioned span of a document's text."""

    model_config = ConfigDict(frozen=True)

    chunk_id: str = Field(..., min_length=1)
    document_id: str
    filename: str
    content: str
    chunk_index: int = Field(..., ge=0)  # 0-based
    start_offset: int = Field(..., ge=0)
    end_offset: int = Field(..., ge=0)

    @model_validator(mode="after")
    def validate_span_matches_content(self) -> "Chunk":
        """Ensure end_offset - start_offset == len(content)."""
        if self.end_offset - self.start_offset != len(self.content):
            raise ValueError(
                f"span [{self.start_offset}, {self.end_offset}) does not match "
                f"content length {len(self.content)}"
            )
        return self


class EmbeddingRecord(BaseModel):
    """A chunk's vector plus denormalized chunk metadata for display."""

    model_config = ConfigDict(frozen=True)

    chunk_id: str
    document_id: str
    filename: str
    chunk_index: int = Field(..., ge=0)
    content: str
    vector: tuple[float, ...]

    @field_validator("vector")
    @classmethod
    def validate_vector_not_empty(cls, v: tuple[float, ...]) -> tuple[float, ...]:
        """Ensure the vector has at least one dimension."""
        if not v:
            raise ValueError("vector must have at least one dimension")
        return v

    @property
    def dimension(self) -> int:
        return len(self.vector)

    @classmethod
    def from_chunk(cls, chunk: Chunk, vector: list[float]) -> "EmbeddingRecord":
        """Pair a chunk with its embedding vector."""
        return cls(
            chunk_id=chunk.chunk_id,
            document_id=chunk.document_id,
            filename=chunk.filename,
            chunk_index=chunk.chunk_index,
            content=chunk.content,
            vector=tuple(vector),
        )


class SearchResult(BaseModel):
    """Transient projection of a stored embedding with its similarity score."""

    model_config = ConfigDict(frozen=True)

    chunk_id: str
    document_id: str
    filename: str
    chunk_index: int
    content: str
    similarity: float = Field(..., ge=-1.0, le=1.0)

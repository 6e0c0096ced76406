"""Response models for question answering."""

from pydantic import BaseModel, ConfigDict, Field

from backend.pdfqa.models.docs import SearchResult


class Source(BaseModel):
    """Provenance for one chunk used as answer context."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    filename: str
    content: str
    similarity: float = Field(..., ge=-1.0, le=1.0)

    @classmethod
    def from_result(cls, result: SearchResult) -> "Source":
        return cls(
            document_id=result.document_id,
            filename=result.filename,
            content=result.content,
            similarity=result.similarity,
        )


class RAGResponse(BaseModel):
    """Generated answer plus the chunks that were handed to the generator.

    `sources` is in the same order the chunks were assembled into the
    prompt context (descending similarity).
    """

    model_config = ConfigDict(frozen=True)

    answer: str = Field(..., description="Answer text as returned by the generator")
    sources: list[Source] = Field(default_factory=list)

"""Retrieval orchestrator - ingestion and question answering.

Ingestion: load -> chunk -> embed -> store. Embeddings are inserted only after
the whole batch has been computed, so a failure at any step leaves the store
untouched for that document.

Query: embed query -> search -> filter -> assemble context -> generate.

External calls (embedding, generation) are awaited outside the store's lock;
only the store access itself is serialized.
"""

import asyncio
import logging
import time
from collections.abc import Callable, Collection, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from uuid import uuid4

from backend.pdfqa.config import Settings, get_settings
from backend.pdfqa.docs.chunker import chunk_document, validate_chunk_params
from backend.pdfqa.docs.loader import LoadedText, load_document
from backend.pdfqa.embeddings.client import EmbeddingClient, get_embedding_client
from backend.pdfqa.errors import EmbeddingProviderError, NotFoundError
from backend.pdfqa.llm.client import AnswerGenerator, get_answer_generator
from backend.pdfqa.models.answer import RAGResponse, Source
from backend.pdfqa.models.docs import Document, DocumentSummary, EmbeddingRecord, SearchResult
from backend.pdfqa.rag.prompt import assemble_context, build_prompt
from backend.pdfqa.utils.logging import StructuredPipelineLogger
from backend.pdfqa.utils.metrics import PrometheusPipelineMetrics
from backend.pdfqa.vectorstore.memory import InMemoryVectorStore, filter_by_documents

logger = logging.getLogger(__name__)

Loader = Callable[[bytes, str], LoadedText]


class RAGPipeline:
    """Coordinates the loader, chunker, embedder, vector store and generator.

    This is the whole surface a host (e.g. an HTTP layer) needs: ingest,
    query, list_documents, delete_document, plus get_document_chunks.
    """

    def __init__(
        self,
        *,
        embedder: EmbeddingClient,
        generator: AnswerGenerator,
        store: InMemoryVectorStore | None = None,
        loader: Loader | None = None,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        top_k: int = 5,
        metrics: PrometheusPipelineMetrics | None = None,
        stage_logger: StructuredPipelineLogger | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            embedder: Embedding provider client
            generator: Answer generator client
            store: Vector store (default: empty store fixed to the embedder's dimensions)
            loader: Callable turning (bytes, filename) into LoadedText (default: load_document)
            chunk_size: Maximum characters per chunk
            chunk_overlap: Target overlap between consecutive chunks
            top_k: Number of chunks retrieved per query (before filtering)

        Raises:
            ConfigurationError: If chunk_overlap >= chunk_size or either is out of range
            ValueError: If top_k is not positive
        """
        validate_chunk_params(chunk_size, chunk_overlap)
        if top_k <= 0:
            raise ValueError(f"top_k must be positive, got {top_k}")

        self.embedder = embedder
        self.generator = generator
        self.store = store if store is not None else InMemoryVectorStore(dimension=embedder.dimensions)
        self.loader: Loader = loader if loader is not None else load_document
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.top_k = top_k
        self.metrics = metrics or PrometheusPipelineMetrics()
        self.stage_logger = stage_logger or StructuredPipelineLogger()

    @contextmanager
    def _stage(self, operation: str, stage: str, document_id: str | None = None) -> Iterator[None]:
        """Time a stage, then log it and record metrics whether it succeeds or fails."""
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            self.metrics.inc_error(operation, type(e).__name__)
            self.stage_logger.log_stage(
                operation,
                stage,
                "error",
                latency_ms,
                document_id=document_id,
                error_reason=str(e),
            )
            raise
        latency_ms = (time.perf_counter() - start) * 1000
        self.metrics.record_latency(operation, stage, latency_ms)
        self.stage_logger.log_stage(operation, stage, "success", latency_ms, document_id=document_id)

    async def ingest(self, data: bytes, filename: str) -> Document:
        """Load, chunk, embed and store one uploaded document.

        Args:
            data: Raw file bytes
            filename: Original filename (display name; need not be unique)

        Returns:
            Document metadata with a freshly generated document_id

        Raises:
            DocumentLoadError: If the source cannot be read
            EmbeddingProviderError: If embedding fails or returns the wrong number of vectors
            DimensionMismatchError: If the vectors don't match the store's dimensionality
        """
        document_id = str(uuid4())

        with self._stage("ingest", "load", document_id):
            loaded = await asyncio.to_thread(self.loader, data, filename)

        with self._stage("ingest", "chunk", document_id):
            chunks = chunk_document(
                loaded.text,
                document_id=document_id,
                filename=filename,
                chunk_size=self.chunk_size,
                chunk_overlap=self.chunk_overlap,
            )

        with self._stage("ingest", "embed", document_id):
            vectors = await self.embedder.embed_many([chunk.content for chunk in chunks])
            if len(vectors) != len(chunks):
                raise EmbeddingProviderError(
                    f"Embedding provider returned {len(vectors)} vectors for {len(chunks)} chunks"
                )

        records = [EmbeddingRecord.from_chunk(chunk, vector) for chunk, vector in zip(chunks, vectors)]

        with self._stage("ingest", "store", document_id):
            self.store.insert(records)

        self.metrics.inc_chunks_ingested(len(records))
        if not records:
            logger.warning(f"Document {filename!r} produced no text; it will not appear in listings")

        return Document(
            document_id=document_id,
            filename=filename,
            page_count=loaded.page_count,
            uploaded_at=datetime.now(UTC),
            chunk_count=len(records),
        )

    async def query(self, text: str, document_ids: Collection[str] | None = None) -> RAGResponse:
        """Answer a question from the stored chunks.

        Args:
            text: The user's question
            document_ids: Restrict context to these documents (None/empty = all).
                Applied after top-K search, so fewer than top_k chunks may remain.

        Returns:
            RAGResponse whose sources are the chunks used as context, in
            similarity order. An empty match yields empty sources and the
            generator's answer for an empty context.

        Raises:
            EmbeddingProviderError: If the query cannot be embedded
            AnswerGeneratorError: If answer generation fails
            DimensionMismatchError: If the query vector doesn't match the store
        """
        with self._stage("query", "embed"):
            query_vector = await self.embedder.embed_one(text)

        with self._stage("query", "retrieve"):
            results = self.store.search(query_vector, self.top_k)
            results = filter_by_documents(results, document_ids)

        context = assemble_context(results)
        prompt = build_prompt(text, context)

        with self._stage("query", "generate"):
            answer = await self.generator.generate(prompt)

        return RAGResponse(
            answer=answer,
            sources=[Source.from_result(result) for result in results],
        )

    def list_documents(self) -> list[DocumentSummary]:
        """Documents that currently have at least one stored chunk."""
        return self.store.list_documents()

    def delete_document(self, document_id: str) -> None:
        """Delete a document and all its chunks. Unknown ids are a no-op."""
        self.store.delete_document(document_id)

    def get_document_chunks(self, document_id: str) -> list[SearchResult]:
        """Stored chunks of one document in chunk order.

        Raises:
            NotFoundError: If no chunks are stored for document_id
        """
        chunks = self.store.get_document_chunks(document_id)
        if not chunks:
            raise NotFoundError(f"Document {document_id} not found")
        return chunks


def create_pipeline(settings: Settings | None = None) -> RAGPipeline:
    """Build a pipeline from settings, picking real or stub providers.

    Each call returns an independent pipeline with its own empty store.
    """
    settings = settings or get_settings()
    return RAGPipeline(
        embedder=get_embedding_client(settings),
        generator=get_answer_generator(settings),
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
        top_k=settings.top_k,
        loader=lambda data, filename: load_document(
            data, filename, max_bytes=settings.max_upload_bytes
        ),
    )

"""Concurrency tests for the shared vector store."""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from backend.pdfqa.models.docs import EmbeddingRecord
from backend.pdfqa.rag.pipeline import RAGPipeline
from backend.pdfqa.vectorstore.memory import InMemoryVectorStore

BATCH_SIZE = 20
NUM_DOCS = 30


def _batch(document_id: str) -> list[EmbeddingRecord]:
    return [
        EmbeddingRecord(
            chunk_id=f"{document_id}_chunk_{i}",
            document_id=document_id,
            filename=f"{document_id}.pdf",
            chunk_index=i,
            content=f"chunk {i} of {document_id}",
            vector=(1.0, float(i), 0.5),
        )
        for i in range(BATCH_SIZE)
    ]


def test_readers_never_observe_partial_batches() -> None:
    """Test that concurrent readers see each document's batch entirely or not at all."""
    store = InMemoryVectorStore(dimension=3)
    stop = threading.Event()
    observed_sizes: set[int] = set()

    def writer(doc_index: int) -> None:
        store.insert(_batch(f"doc-{doc_index}"))

    def reader() -> None:
        while not stop.is_set():
            for summary in store.list_documents():
                observed_sizes.add(len(store.get_document_chunks(summary.document_id)))
            results = store.search([1.0, 0.0, 0.0], top_k=1000)
            assert len(results) % BATCH_SIZE == 0

    with ThreadPoolExecutor(max_workers=8) as pool:
        readers = [pool.submit(reader) for _ in range(3)]
        writers = [pool.submit(writer, i) for i in range(NUM_DOCS)]
        for future in writers:
            future.result()
        stop.set()
        for future in readers:
            future.result()

    assert store.count() == NUM_DOCS * BATCH_SIZE
    assert len(store.list_documents()) == NUM_DOCS
    assert observed_sizes <= {BATCH_SIZE}


def test_concurrent_inserts_and_deletes_stay_consistent() -> None:
    """Test that interleaved inserts and deletes leave exactly the survivors."""
    store = InMemoryVectorStore(dimension=3)
    for i in range(NUM_DOCS):
        store.insert(_batch(f"old-{i}"))

    def churn(i: int) -> None:
        store.insert(_batch(f"new-{i}"))
        store.delete_document(f"old-{i}")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(churn, range(NUM_DOCS)))

    ids = {d.document_id for d in store.list_documents()}
    assert ids == {f"new-{i}" for i in range(NUM_DOCS)}
    assert store.count() == NUM_DOCS * BATCH_SIZE


@pytest.mark.asyncio
async def test_concurrent_pipeline_requests(pipeline: RAGPipeline) -> None:
    """Test that concurrent ingests and queries on one pipeline all complete."""
    texts = [f"Document {i} talks about topic number {i} in some detail." for i in range(10)]

    docs = await asyncio.gather(
        *(pipeline.ingest(text.encode(), f"doc{i}.txt") for i, text in enumerate(texts))
    )
    responses = await asyncio.gather(*(pipeline.query(f"topic number {i}") for i in range(10)))

    assert len({d.document_id for d in docs}) == 10
    assert len(pipeline.list_documents()) == 10
    assert all(len(r.sources) == pipeline.top_k for r in responses)

"""In-memory vector store with exact cosine search.

The store is volatile: it is rebuilt from scratch each process run. Search is
an exact linear scan over every stored vector, which is adequate for stores in
the low thousands of vectors.

Concurrency: a single coarse lock guards the record list. Every public method
holds it for its whole body, so readers never observe a half-appended batch.
Nothing here is async and nothing calls out to an external service, so the
lock is never held across a slow operation.
"""

import logging
import threading
from collections.abc import Collection, Sequence

import numpy as np

from backend.pdfqa.errors import DimensionMismatchError
from backend.pdfqa.models.docs import DocumentSummary, EmbeddingRecord, SearchResult

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors, in [-1, 1].

    Returns 0.0 when either vector has zero norm instead of dividing by zero.

    Raises:
        DimensionMismatchError: If the vectors differ in length
    """
    if len(a) != len(b):
        raise DimensionMismatchError(f"Vectors must have the same length ({len(a)} != {len(b)})")

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    denom = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / denom, -1.0, 1.0))


def _cosine_scores(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of `query` against every row of `matrix` (zero-norm rows score 0)."""
    denom = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    scores = np.zeros(len(matrix), dtype=np.float64)
    np.divide(dots, denom, out=scores, where=denom != 0)
    return np.clip(scores, -1.0, 1.0)


def filter_by_documents(
    results: Sequence[SearchResult], document_ids: Collection[str] | None
) -> list[SearchResult]:
    """Keep only results whose document_id is in `document_ids`.

    None or an empty collection means "no filter". This runs after search,
    so the search itself always scans the whole store.
    """
    if not document_ids:
        return list(results)
    wanted = set(document_ids)
    return [r for r in results if r.document_id in wanted]


class InMemoryVectorStore:
    """Mutex-guarded list of EmbeddingRecords with exact top-K cosine search."""

    def __init__(self, dimension: int | None = None) -> None:
        """Create an empty store.

        Args:
            dimension: Fixed vector length. When None, the first inserted batch
                decides it and it is released again once the store is empty.
        """
        if dimension is not None and dimension <= 0:
            raise ValueError("dimension must be positive")
        self._fixed_dimension = dimension
        self._dimension = dimension
        self._records: list[EmbeddingRecord] = []
        self._matrix: np.ndarray | None = None
        self._lock = threading.Lock()

    @property
    def dimension(self) -> int | None:
        with self._lock:
            return self._dimension

    def __len__(self) -> int:
        return self.count()

    def count(self) -> int:
        """Number of stored embeddings."""
        with self._lock:
            return len(self._records)

    def insert(self, records: Sequence[EmbeddingRecord]) -> None:
        """Append records. The whole batch is checked before any is stored.

        No deduplication by chunk_id is done; inserting the same record twice
        produces duplicate search hits.

        Raises:
            DimensionMismatchError: If any vector's length differs from the store's
        """
        if not records:
            return

        with self._lock:
            expected = self._dimension if self._dimension is not None else records[0].dimension
            for record in records:
                if record.dimension != expected:
                    raise DimensionMismatchError(
                        f"Chunk {record.chunk_id} has a {record.dimension}-dimensional vector, "
                        f"store expects {expected}"
                    )

            self._records.extend(records)
            self._dimension = expected
            self._matrix = None

    def _ensure_matrix(self) -> np.ndarray:
        # Caller holds the lock
        if self._matrix is None:
            self._matrix = np.asarray([r.vector for r in self._records], dtype=np.float64)
        return self._matrix

    def search(self, query: Sequence[float], top_k: int) -> list[SearchResult]:
        """Exact top-K search by descending cosine similarity.

        Ties keep insertion order. Returns min(top_k, count()) results.

        Raises:
            ValueError: If top_k is not positive
            DimensionMismatchError: If the query length differs from the store's
        """
        if top_k <= 0:
            raise ValueError(f"top_k must be positive, got {top_k}")

        with self._lock:
            if self._dimension is not None and len(query) != self._dimension:
                raise DimensionMismatchError(
                    f"Query has {len(query)} dimensions, store expects {self._dimension}"
                )
            if not self._records:
                return []

            matrix = self._ensure_matrix()
            scores = _cosine_scores(np.asarray(query, dtype=np.float64), matrix)
            order = np.argsort(-scores, kind="stable")[:top_k]

            return [
                SearchResult(
                    chunk_id=self._records[i].chunk_id,
                    document_id=self._records[i].document_id,
                    filename=self._records[i].filename,
                    chunk_index=self._records[i].chunk_index,
                    content=self._records[i].content,
                    similarity=float(scores[i]),
                )
                for i in order
            ]

    def get_document_chunks(self, document_id: str) -> list[SearchResult]:
        """All stored chunks of one document, in chunk_index order, with similarity 1.0."""
        with self._lock:
            matches = [r for r in self._records if r.document_id == document_id]

        matches.sort(key=lambda r: r.chunk_index)
        return [
            SearchResult(
                chunk_id=r.chunk_id,
                document_id=r.document_id,
                filename=r.filename,
                chunk_index=r.chunk_index,
                content=r.content,
                similarity=1.0,
            )
            for r in matches
        ]

    def delete_document(self, document_id: str) -> int:
        """Remove every embedding of a document. Unknown ids are a no-op.

        Returns:
            Number of embeddings removed
        """
        with self._lock:
            kept = [r for r in self._records if r.document_id != document_id]
            removed = len(self._records) - len(kept)
            if removed:
                self._records = kept
                self._matrix = None
                if not kept:
                    self._dimension = self._fixed_dimension

        if removed:
            logger.info(f"Deleted {removed} embeddings for document {document_id}")
        return removed

    def list_documents(self) -> list[DocumentSummary]:
        """Distinct documents with at least one stored embedding.

        Deduplicated by document_id, keeping the filename seen first, in
        first-insertion order.
        """
        with self._lock:
            seen: dict[str, DocumentSummary] = {}
            for r in self._records:
                if r.document_id not in seen:
                    seen[r.document_id] = DocumentSummary(
                        document_id=r.document_id, filename=r.filename
                    )
            return list(seen.values())

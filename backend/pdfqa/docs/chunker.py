"""Document chunker - deterministic, overlapping, separator-aware splitting."""

from backend.pdfqa.errors import ConfigurationError
from backend.pdfqa.models.docs import Chunk

# Highest priority first. An empty string means "hard character cut".
DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", " ")


def validate_chunk_params(chunk_size: int, chunk_overlap: int) -> None:
    """Raise ConfigurationError unless 0 <= chunk_overlap < chunk_size."""
    if chunk_size <= 0:
        raise ConfigurationError(f"chunk_size must be positive, got {chunk_size}")
    if chunk_overlap < 0:
        raise ConfigurationError(f"chunk_overlap must be >= 0, got {chunk_overlap}")
    if chunk_overlap >= chunk_size:
        raise ConfigurationError(
            f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})"
        )


def _find_break(
    text: str, start: int, hard_end: int, min_end: int, separators: tuple[str, ...]
) -> int:
    """Pick the end of a chunk beginning at `start`.

    Tries each separator in priority order and uses its last occurrence that
    keeps the chunk within `hard_end`. A separator ending inside the window is
    kept with the chunk; one starting exactly at `hard_end` is left for the
    next chunk. Ends at or before `min_end` are rejected so the cursor always
    moves past the overlap region. Falls back to a hard cut at `hard_end`.
    """
    for sep in separators:
        pos = text.rfind(sep, start, hard_end + len(sep))
        if pos == -1:
            continue
        end = pos + len(sep) if pos + len(sep) <= hard_end else pos
        if end > min_end:
            return end
    return hard_end


def _find_next_start(text: str, end: int, chunk_overlap: int, separators: tuple[str, ...]) -> int:
    """Pick where the next chunk begins so that it overlaps the previous one.

    Starts `chunk_overlap` characters before `end` and moves forward to just
    after the first separator in that region, as long as at least half of
    `chunk_overlap` (and at least one character) is still left before `end`.
    A separator sitting at the very end of the previous chunk never
    becomes the whole overlap.
    """
    target = end - chunk_overlap
    if chunk_overlap == 0:
        return target

    limit = end - max(1, chunk_overlap // 2)
    for sep in separators:
        pos = text.find(sep, target, limit)
        if pos != -1 and pos + len(sep) <= limit:
            return pos + len(sep)
    return target


def chunk_spans(
    text: str,
    *,
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
    separators: tuple[str, ...] = DEFAULT_SEPARATORS,
) -> list[tuple[int, int]]:
    """Compute ordered (start, end) character spans covering `text`.

    Pure function with no I/O or randomness.

    Guarantees:
        - every span is at most chunk_size characters
        - the first span starts at 0 and the last ends at len(text)
        - spans are non-decreasing and each one starts before the previous
          one ends (no gaps); while chunk_overlap > 0, adjacent spans overlap
          by between max(1, chunk_overlap // 2) and chunk_overlap characters

    Raises:
        ConfigurationError: If chunk_size/chunk_overlap are invalid
    """
    validate_chunk_params(chunk_size, chunk_overlap)

    if not text or not text.strip():
        return []

    n = len(text)
    spans: list[tuple[int, int]] = []
    start = 0

    while True:
        hard_end = min(start + chunk_size, n)
        if hard_end == n:
            spans.append((start, n))
            break

        end = _find_break(text, start, hard_end, start + chunk_overlap, separators)
        spans.append((start, end))
        start = _find_next_start(text, end, chunk_overlap, separators)

    return spans


def chunk_document(
    text: str,
    *,
    document_id: str,
    filename: str,
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
) -> list[Chunk]:
    """Split document text into overlapping, positioned chunks.

    Offsets come from a single cursor that only moves forward through the
    text, so repeated passages get their own positions rather than the
    position of their first occurrence.

    Args:
        text: Raw document text
        document_id: Owning document id
        filename: Display name copied onto each chunk
        chunk_size: Maximum characters per chunk (default 1000)
        chunk_overlap: Target overlap between neighbours (default 200)

    Returns:
        Chunks in chunk_index order; empty list for empty text

    Raises:
        ConfigurationError: If chunk_overlap >= chunk_size or either is out of range
    """
    spans = chunk_spans(text, chunk_size=chunk_size, chunk_overlap=chunk_overlap)

    return [
        Chunk(
            chunk_id=f"{document_id}_chunk_{index}",
            document_id=document_id,
            filename=filename,
            content=text[start:end],
            chunk_index=index,
            start_offset=start,
            end_offset=end,
        )
        for index, (start, end) in enumerate(spans)
    ]

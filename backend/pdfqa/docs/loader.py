"""Document loaders - turn uploaded bytes into plain text.

The loader is the boundary between raw uploads and the chunker. It never
touches the vector store; a failure here aborts ingestion before any other
work happens.
"""

import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Protocol

import pymupdf

from backend.pdfqa.errors import DocumentLoadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedText:
    """Text extracted from a source document."""

    text: str
    page_count: int


class DocumentLoader(Protocol):
    """Protocol for document loader implementations."""

    def load(self, data: bytes, filename: str) -> LoadedText:
        """Extract text from raw document bytes.

        Raises:
            DocumentLoadError: If the document is unreadable or corrupt
        """
        ...


class PdfLoader:
    """PyMuPDF-backed PDF text extraction."""

    def load(self, data: bytes, filename: str) -> LoadedText:
        if not data:
            raise DocumentLoadError(f"Failed to load PDF {filename!r}: file is empty")

        try:
            doc = pymupdf.open(stream=data, filetype="pdf")
        except (pymupdf.FileDataError, RuntimeError, ValueError) as e:
            raise DocumentLoadError(f"Failed to load PDF {filename!r}: {e}") from e

        try:
            if doc.needs_pass:
                raise DocumentLoadError(f"Failed to load PDF {filename!r}: document is encrypted")

            pages = [page.get_text("text") for page in doc]
            page_count = doc.page_count
        except RuntimeError as e:
            raise DocumentLoadError(f"Failed to read PDF {filename!r}: {e}") from e
        finally:
            doc.close()

        logger.info(f"Loaded PDF {filename!r} | pages={page_count}")
        return LoadedText(text="\n".join(pages), page_count=page_count)


class PlainTextLoader:
    """UTF-8 text / markdown files, treated as a single page."""

    def load(self, data: bytes, filename: str) -> LoadedText:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DocumentLoadError(f"Failed to decode {filename!r} as UTF-8: {e}") from e

        return LoadedText(text=text, page_count=1)


LOADERS_BY_SUFFIX: dict[str, DocumentLoader] = {
    ".pdf": PdfLoader(),
    ".txt": PlainTextLoader(),
    ".md": PlainTextLoader(),
}


def get_loader(filename: str) -> DocumentLoader:
    """Select a loader from the filename suffix.

    Raises:
        DocumentLoadError: If no loader handles the suffix
    """
    suffix = PurePath(filename).suffix.lower()
    loader = LOADERS_BY_SUFFIX.get(suffix)
    if loader is None:
        supported = ", ".join(sorted(LOADERS_BY_SUFFIX))
        raise DocumentLoadError(
            f"Unsupported file type {suffix or '(none)'!r} for {filename!r}; expected one of {supported}"
        )
    return loader


def load_document(data: bytes, filename: str, *, max_bytes: int | None = None) -> LoadedText:
    """Load raw document bytes into text using the loader for its suffix.

    Args:
        data: Raw file contents
        filename: Original filename (used for dispatch and error messages)
        max_bytes: Optional upload size limit

    Returns:
        LoadedText with extracted text and page count

    Raises:
        DocumentLoadError: If the file is too large, unsupported, or unreadable
    """
    if max_bytes is not None and len(data) > max_bytes:
        raise DocumentLoadError(
            f"{filename!r} is {len(data)} bytes, exceeding the {max_bytes}-byte upload limit"
        )
    return get_loader(filename).load(data, filename)

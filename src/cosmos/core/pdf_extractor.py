"""PDF inspection for uploaded books.

Responsibilities:
- Read the page count of an uploaded PDF (the reader paginates by it)
- Read embedded metadata (title, author) to prefill missing fields
- Detect the language of the first pages
- Reject password-protected PDFs with an informative error

Dependencies:
- pymupdf (fitz)
- langdetect
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import fitz
import structlog
from langdetect import DetectorFactory, LangDetectException, detect

# Make langdetect deterministic
DetectorFactory.seed = 0

logger = structlog.get_logger(__name__)

# Pages sampled for language detection
LANGUAGE_SAMPLE_PAGES = 5
LANGUAGE_SAMPLE_CHARS = 10000


@dataclass
class PdfInfo:
    """What the library needs to know about an uploaded PDF."""

    total_pages: int
    title: str | None = None
    author: str | None = None
    language: str | None = None
    metadata: dict = field(default_factory=dict)


class PdfExtractionError(Exception):
    """Base exception for PDF inspection errors."""

    pass


class ProtectedPdfError(PdfExtractionError):
    """Raised when PDF is password-protected."""

    def __init__(self, file_path: Path):
        self.file_path = file_path
        super().__init__(f"PDF is password-protected: {file_path.name}")


def detect_language(text: str) -> str | None:
    """Detect the ISO 639-1 language of a text sample, or None."""
    sample = text[:LANGUAGE_SAMPLE_CHARS]
    if not sample.strip():
        return None
    try:
        return detect(sample)
    except LangDetectException as e:
        logger.debug("pdf_extractor.language_detection_failed", error=str(e))
        return None


def inspect_pdf(file_path: Path) -> PdfInfo:
    """Open a PDF and read page count, metadata and language.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ProtectedPdfError: If the PDF is encrypted
        PdfExtractionError: If PyMuPDF cannot open the file
    """
    if not file_path.exists():
        raise FileNotFoundError(f"PDF not found: {file_path}")

    try:
        doc = fitz.open(file_path)
    except Exception as e:
        raise PdfExtractionError(f"Cannot open PDF {file_path.name}: {e}") from e

    try:
        if doc.is_encrypted:
            raise ProtectedPdfError(file_path)

        metadata = doc.metadata or {}
        sample = "\n".join(
            doc[i].get_text() for i in range(min(LANGUAGE_SAMPLE_PAGES, len(doc)))
        )
        info = PdfInfo(
            total_pages=len(doc),
            title=metadata.get("title") or None,
            author=metadata.get("author") or None,
            language=detect_language(sample),
            metadata={k: v for k, v in metadata.items() if v},
        )
    finally:
        doc.close()

    logger.info(
        "pdf_extractor.inspected",
        pdf=file_path.name,
        total_pages=info.total_pages,
        language=info.language,
    )
    return info

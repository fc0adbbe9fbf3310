"""
Plain-text extraction from uploaded PDFs.

Unreadable files never raise: callers get a bracketed placeholder text
instead, which the categorization step recognises and skips.
"""
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

import pypdf

from questionbank.config import settings

logger = logging.getLogger(__name__)

ERROR_PLACEHOLDER_PREFIX = "[PDF Processing Error - "
EMPTY_PLACEHOLDER_PREFIX = "[No text extracted from "
LIMITED_PLACEHOLDER_PREFIX = "[Limited text extraction from "


@dataclass
class ExtractedContent:
    text: str
    images: list[dict] = field(default_factory=list)
    page_count: int = 0
    title: str | None = None


def is_extraction_placeholder(text: str | None) -> bool:
    """True for placeholder text that carries no usable document content."""
    if not text:
        return False
    return text.startswith(ERROR_PLACEHOLDER_PREFIX) or text.startswith(EMPTY_PLACEHOLDER_PREFIX)


def _error_placeholder(name: str, error: Exception | str) -> str:
    return (
        f"{ERROR_PLACEHOLDER_PREFIX}{name}]\n\n"
        "This PDF file appears to have structural issues that prevent text extraction:\n"
        f"- Error: {error}\n"
        "- This may be due to: corrupted file, non-standard PDF format, or image-only content\n"
        "- Consider re-uploading the file or using a different PDF version"
    )


def extract_content(file_path: Path | str) -> ExtractedContent:
    path = Path(file_path)
    name = path.name

    try:
        reader = pypdf.PdfReader(str(path))
        pages = [page.extract_text() or "" for page in reader.pages]
        title = reader.metadata.title if reader.metadata else None
    except Exception as exc:  # malformed PDFs raise well beyond PyPdfError
        logger.error("PDF parsing error for %s: %s", name, exc)
        return ExtractedContent(text=_error_placeholder(name, exc), page_count=0)

    text = re.sub(r"\s+", " ", " ".join(pages)).strip()
    logger.info("Extracted %d characters from %s (%d pages)", len(text), name, len(pages))

    if len(text) < settings.min_extracted_chars:
        logger.warning("Minimal or no text extracted from %s", name)
        if text:
            text = f"{LIMITED_PLACEHOLDER_PREFIX}{name}]\n\nExtracted content: {text}"
        else:
            text = (
                f"{EMPTY_PLACEHOLDER_PREFIX}{name}]\n\n"
                "This PDF may contain primarily images or scanned content that requires OCR processing."
            )

    return ExtractedContent(
        text=text,
        page_count=len(pages),
        title=title or path.stem,
    )

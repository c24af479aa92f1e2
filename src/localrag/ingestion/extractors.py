"""Plain-text extraction for the supported document types.

PDFs go through PyMuPDF (fitz), Word documents through python-docx. Text and
Markdown files are read as UTF-8.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import docx  # python-docx
import fitz  # PyMuPDF

from localrag.errors import ExtractionError, ExtractionErrorKind, UnsupportedTypeError

LOGGER = logging.getLogger(__name__)


def read_plain_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def iter_pdf_pages(path: Path) -> Iterator[str]:
    """Yield the text of each page of a PDF."""
    try:
        doc = fitz.open(path)
    except Exception as exc:
        raise ExtractionError(
            path, ExtractionErrorKind.DECODE_FAILURE, f"PDF parsing failed: {exc}"
        ) from exc

    try:
        for index in range(len(doc)):
            try:
                yield doc[index].get_text() or ""
            except Exception as exc:
                raise ExtractionError(
                    path,
                    ExtractionErrorKind.DECODE_FAILURE,
                    f"PDF parsing failed on page {index}: {exc}",
                ) from exc
    finally:
        doc.close()


def read_pdf(path: Path) -> str:
    LOGGER.debug("Reading PDF %s (%d bytes)", path, path.stat().st_size)
    text = "\n".join(iter_pdf_pages(path))
    LOGGER.debug("Extracted %d characters from PDF %s", len(text), path)
    if not text.strip():
        raise ExtractionError(
            path, ExtractionErrorKind.EMPTY_CONTENT, "No text content found in PDF"
        )
    return text


def read_word(path: Path) -> str:
    LOGGER.debug("Reading Word document %s (%d bytes)", path, path.stat().st_size)
    try:
        document = docx.Document(str(path))
    except Exception as exc:
        raise ExtractionError(
            path, ExtractionErrorKind.DECODE_FAILURE, f"Word document parsing failed: {exc}"
        ) from exc

    text = "\n".join(paragraph.text for paragraph in document.paragraphs)
    LOGGER.debug("Extracted %d characters from Word document %s", len(text), path)
    if not text.strip():
        raise ExtractionError(
            path, ExtractionErrorKind.EMPTY_CONTENT, "No text content found in Word document"
        )
    return text


def extract_text(path: Path, file_type: str) -> str:
    """Return the raw text of `path` according to its declared type."""
    if file_type in ("txt", "md"):
        return read_plain_text(path)
    if file_type == "pdf":
        return read_pdf(path)
    if file_type in ("doc", "docx"):
        return read_word(path)
    raise UnsupportedTypeError(path, file_type)

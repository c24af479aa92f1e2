"""Document processing: extraction, normalization, chunking and metadata."""

from __future__ import annotations

import itertools
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import numpy as np

from localrag.embedding.encoder import EmbeddingProvider, HashEmbedder
from localrag.errors import LocalRAGError, NotFoundError, UnsupportedTypeError
from localrag.ingestion.extractors import extract_text
from localrag.models import DocumentChunk, DocumentMetadata, ProcessedDocument
from localrag.utils.files import (
    SUPPORTED_EXTENSIONS,
    file_type,
    is_supported,
    iter_folder_entries,
)
from localrag.utils.text import chunk_spans, normalize_text, word_count

LOGGER = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 5000
DEFAULT_CHUNK_OVERLAP = 500

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")
_chunk_counter = itertools.count()

ErrorCallback = Callable[[Path, Exception], None]


def _sanitize(filename: str) -> str:
    return _UNSAFE_CHARS.sub("_", filename)


def generate_document_id(filename: str) -> str:
    return f"doc_{_sanitize(filename)}_{time.time_ns() // 1_000_000}"


def generate_chunk_id(filename: str, chunk_index: int) -> str:
    return f"chunk_{_sanitize(filename)}_{chunk_index}_{next(_chunk_counter)}"


def chunk_document_text(
    content: str, filename: str, *, chunk_size: int, overlap: int
) -> List[DocumentChunk]:
    """Chunk already-normalized content into positioned `DocumentChunk`s."""
    chunks: List[DocumentChunk] = []
    for index, (start, end) in enumerate(chunk_spans(content, chunk_size=chunk_size, overlap=overlap)):
        chunks.append(
            DocumentChunk(
                id=generate_chunk_id(filename, index),
                text=content[start:end].strip(),
                chunk_index=index,
                filename=filename,
                start_position=start,
                end_position=end,
            )
        )
    return chunks


@dataclass(frozen=True, slots=True)
class ProcessorStats:
    supported_extensions: Tuple[str, ...]
    chunk_size: int
    chunk_overlap: int


class DocumentProcessor:
    """Turns files on disk into `ProcessedDocument`s."""

    def __init__(
        self,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        embedder: Optional[EmbeddingProvider] = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if chunk_overlap < 0:
            raise ValueError("chunk_overlap must not be negative")
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._embedder = embedder

    @property
    def embedder(self) -> EmbeddingProvider:
        if self._embedder is None:
            self._embedder = HashEmbedder()
        return self._embedder

    def is_supported(self, filename: str | Path) -> bool:
        return is_supported(filename)

    def supported_extensions(self) -> List[str]:
        return list(SUPPORTED_EXTENSIONS)

    def process_document(self, path: Path | str) -> ProcessedDocument:
        """Extract, normalize and chunk a single file."""
        path = Path(path)
        if not path.is_file():
            raise NotFoundError(path)

        filename = path.name
        kind = file_type(filename)
        if not self.is_supported(filename):
            raise UnsupportedTypeError(path, kind)

        stat = path.stat()
        LOGGER.info("Processing %s", filename)

        raw = extract_text(path, kind)
        content = normalize_text(raw)
        chunks = chunk_document_text(
            content, filename, chunk_size=self.chunk_size, overlap=self.chunk_overlap
        )
        words = word_count(raw)

        document = ProcessedDocument(
            id=generate_document_id(filename),
            filename=filename,
            file_type=kind,
            content=content,
            chunks=tuple(chunks),
            metadata=DocumentMetadata(
                size=stat.st_size,
                last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                word_count=words,
                chunk_count=len(chunks),
            ),
        )
        LOGGER.info("Processed %s: %d chunks, %d words", filename, len(chunks), words)
        return document

    def process_folder(
        self,
        folder: Path | str,
        *,
        should_stop: Optional[Callable[[], bool]] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> List[ProcessedDocument]:
        """Process every supported file directly inside `folder`.

        A file that fails is logged, reported to `on_error` and skipped; only
        a missing folder is fatal. `should_stop` is checked between files.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotFoundError(folder, what="Folder")

        entries = list(iter_folder_entries(folder))
        LOGGER.info("Processing folder %s (%d entries)", folder, len(entries))

        results: List[ProcessedDocument] = []
        for entry in entries:
            if should_stop is not None and should_stop():
                LOGGER.info("Folder processing stopped early after %d documents", len(results))
                break

            if entry.is_dir() or not self.is_supported(entry.name):
                LOGGER.debug(
                    "Skipping %s (%s)", entry.name, "directory" if entry.is_dir() else "unsupported"
                )
                continue

            try:
                results.append(self.process_document(entry))
            except (LocalRAGError, OSError) as exc:
                LOGGER.warning("Failed to process %s: %s", entry.name, exc)
                if on_error is not None:
                    on_error(entry, exc)

        LOGGER.info("Processed %d documents from %s", len(results), folder)
        return results

    def create_embedding(self, text: str) -> np.ndarray:
        return self.embedder.embed_query(text)

    def get_stats(self) -> ProcessorStats:
        return ProcessorStats(
            supported_extensions=tuple(SUPPORTED_EXTENSIONS),
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
        )

    def update_config(
        self, *, chunk_size: Optional[int] = None, chunk_overlap: Optional[int] = None
    ) -> None:
        """Apply new chunking parameters, ignoring invalid values."""
        if chunk_size is not None:
            if chunk_size > 0:
                self.chunk_size = chunk_size
            else:
                LOGGER.warning("Ignoring invalid chunk_size=%s", chunk_size)
        if chunk_overlap is not None:
            if chunk_overlap >= 0:
                self.chunk_overlap = chunk_overlap
            else:
                LOGGER.warning("Ignoring invalid chunk_overlap=%s", chunk_overlap)
        LOGGER.info(
            "Config updated: chunk_size=%d, chunk_overlap=%d", self.chunk_size, self.chunk_overlap
        )

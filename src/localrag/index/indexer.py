"""Folder ingestion pipeline: documents -> embedded chunk records -> table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from localrag.embedding.encoder import EmbeddingProvider
from localrag.errors import LocalRAGError
from localrag.index.filters import All
from localrag.index.storage import Table
from localrag.ingestion.processor import DocumentProcessor
from localrag.models import ProcessedDocument

LOGGER = logging.getLogger(__name__)


def session_table_name(session_id: str) -> str:
    """Table name used for a session's private documents."""
    return f"session_{session_id.replace('-', '_')}"


@dataclass(slots=True)
class IndexStats:
    documents_processed: int = 0
    chunks_added: int = 0
    failed: int = 0
    success: bool = False
    folder_path: Optional[Path] = None
    errors: List[str] = field(default_factory=list)
    processed_files: List[str] = field(default_factory=list)

    def record_failure(self, path: Path, error: Exception) -> None:
        self.failed += 1
        self.errors.append(f"{path.name}: {error}")


class Indexer:
    """Coordinates document processing, embedding and persistence."""

    def __init__(
        self,
        processor: DocumentProcessor,
        embedder: EmbeddingProvider,
        table: Table,
    ) -> None:
        self.processor = processor
        self.embedder = embedder
        self.table = table

    def build_records(
        self,
        document: ProcessedDocument,
        *,
        source: str = "local",
        session_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Embed every chunk of `document` and return table records."""
        if not document.chunks:
            return []

        vectors = self.embedder.embed([chunk.text for chunk in document.chunks])
        upload_date = datetime.now(timezone.utc).isoformat()
        extra: Dict[str, Any] = {
            "fileType": document.file_type,
            "uploadDate": upload_date,
            "source": source,
        }
        if session_id is not None:
            extra["sessionId"] = session_id
        return [chunk.to_record(vector, **extra) for chunk, vector in zip(document.chunks, vectors)]

    def index_folder(
        self,
        folder: Path | str,
        *,
        source: str = "local",
        session_id: Optional[str] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> IndexStats:
        """Process every supported file in `folder` and add its chunks to the table."""
        folder = Path(folder)
        stats = IndexStats(folder_path=folder)
        LOGGER.info("Indexing %s into %s", folder, self.table.name)

        try:
            documents = self.processor.process_folder(
                folder, should_stop=should_stop, on_error=stats.record_failure
            )
            records: List[Dict[str, Any]] = []
            for document in documents:
                records.extend(self.build_records(document, source=source, session_id=session_id))
                stats.processed_files.append(document.filename)

            if records:
                self.table.add(records)
        except (LocalRAGError, OSError) as exc:
            LOGGER.error("Failed to index %s: %s", folder, exc)
            stats.errors.append(f"Failed to ingest documents: {exc}")
            return stats

        stats.documents_processed = len(documents)
        stats.chunks_added = len(records)
        stats.success = True
        LOGGER.info(
            "Indexed %d documents (%d chunks) from %s",
            stats.documents_processed,
            stats.chunks_added,
            folder,
        )
        return stats

    def clear(self) -> int:
        """Delete every record from the table."""
        return self.table.delete(All())

    def refresh(self, folder: Path | str, **kwargs: Any) -> IndexStats:
        """Clear the table, then re-index `folder`."""
        LOGGER.info("Refreshing %s from %s", self.table.name, folder)
        self.clear()
        return self.index_folder(folder, **kwargs)

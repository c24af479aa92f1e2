"""Core LocalRAG data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Sequence, Tuple

import numpy as np


@dataclass(frozen=True, slots=True)
class DocumentChunk:
    """Positioned slice of a document's normalized text."""

    id: str
    text: str
    chunk_index: int
    filename: str
    start_position: int
    end_position: int

    def to_record(self, vector: Sequence[float] | np.ndarray, **metadata: Any) -> Dict[str, Any]:
        """Build the persisted row for this chunk."""
        return {
            "id": self.id,
            "text": self.text,
            "vector": np.asarray(vector, dtype="float32").tolist(),
            "metadata": {"filename": self.filename, "chunk_index": self.chunk_index, **metadata},
        }


@dataclass(frozen=True, slots=True)
class DocumentMetadata:
    """File statistics gathered while processing a document."""

    size: int
    last_modified: datetime
    word_count: int
    chunk_count: int


@dataclass(frozen=True, slots=True)
class ProcessedDocument:
    """One ingested file with its normalized content and chunks."""

    id: str
    filename: str
    file_type: str
    content: str
    chunks: Tuple[DocumentChunk, ...]
    metadata: DocumentMetadata

"""Application configuration defaults."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from localrag.embedding.encoder import DEFAULT_DIMENSION
from localrag.ingestion.processor import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE

DEFAULT_TABLE = "documents"
USER_DATA_DIR = Path("~/Documents/LocalRAG/vector-db")
SOURCE_DATA_DIR = Path("data") / "vector-db"


def default_data_dir() -> Path:
    """Directory holding the tables when none is configured.

    A frozen build always uses the per-user directory. Run from a source
    checkout, an existing ``data/vector-db`` in the working directory wins.
    """
    from_source = not getattr(sys, "frozen", False)
    if from_source and SOURCE_DATA_DIR.is_dir():
        return SOURCE_DATA_DIR
    return USER_DATA_DIR.expanduser()


@dataclass(slots=True)
class AppConfig:
    data_dir: Path | None = None
    table_name: str = DEFAULT_TABLE
    chunk_chars: int = DEFAULT_CHUNK_SIZE
    overlap: int = DEFAULT_CHUNK_OVERLAP
    dimension: int = DEFAULT_DIMENSION
    top_k: int = 5
    threshold: float = 0.3

    def __post_init__(self) -> None:
        if self.data_dir is None:
            self.data_dir = default_data_dir()
        else:
            self.data_dir = Path(self.data_dir).expanduser()

    def resolve_data_dir(self, base_dir: Path | None = None) -> Path:
        """Return `data_dir`, anchored at `base_dir` when it is relative."""
        data_dir = default_data_dir() if self.data_dir is None else Path(self.data_dir)
        if base_dir is None or data_dir.is_absolute():
            return data_dir
        return Path(base_dir) / data_dir

"""Similarity search over record tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

import numpy as np

from localrag.embedding.encoder import EmbeddingProvider
from localrag.index.filters import Filter, matches, parse_filter

if TYPE_CHECKING:
    from localrag.index.storage import Table

LOGGER = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
CONTEXT_SNIPPET_CHARS = 500


def cosine_similarity(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    """Cosine of the angle between `a` and `b`.

    Vectors of different length, and zero vectors, score 0.
    """
    left = np.asarray(a, dtype="float64").ravel()
    right = np.asarray(b, dtype="float64").ravel()
    if left.shape != right.shape:
        return 0.0
    norm_left = np.linalg.norm(left)
    norm_right = np.linalg.norm(right)
    if norm_left == 0 or norm_right == 0:
        return 0.0
    score = float(np.dot(left, right) / (norm_left * norm_right))
    return min(1.0, max(-1.0, score))


class VectorSearch:
    """Builder for a ranked similarity query against one table.

    Nothing is read until `to_list` is called.
    """

    def __init__(self, table: "Table", vector: Sequence[float] | np.ndarray) -> None:
        self._table = table
        self._vector = np.asarray(vector, dtype="float64").ravel()
        self._limit = DEFAULT_LIMIT
        self._filter: Optional[Filter] = None

    def limit(self, n: int) -> "VectorSearch":
        if n < 0:
            raise ValueError("limit must not be negative")
        self._limit = n
        return self

    def where(self, condition: Filter | str) -> "VectorSearch":
        """Restrict ranking to records matching `condition`."""
        self._filter = parse_filter(condition)
        return self

    def _score(self, record: Dict[str, Any]) -> float:
        stored = record.get("vector")
        if stored is None:
            LOGGER.debug("Record %s has no vector; scoring 0", record.get("id"))
            return 0.0
        try:
            stored = np.asarray(stored, dtype="float64").ravel()
        except (TypeError, ValueError):
            LOGGER.debug("Record %s has a non-numeric vector; scoring 0", record.get("id"))
            return 0.0
        if stored.shape != self._vector.shape:
            LOGGER.debug(
                "Dimension mismatch for record %s (%d != %d); scoring 0",
                record.get("id"),
                stored.shape[0],
                self._vector.shape[0],
            )
            return 0.0
        return cosine_similarity(self._vector, stored)

    def to_list(self) -> List[Dict[str, Any]]:
        """Return matching records with a `score` field, best first."""
        records = self._table.read_records()
        if self._filter is not None:
            records = [record for record in records if matches(record, self._filter)]

        scored = [{**record, "score": self._score(record)} for record in records]
        scored.sort(key=lambda item: item["score"], reverse=True)
        return scored[: self._limit]


@dataclass(slots=True)
class SearchResult:
    id: str
    text: str
    score: float
    metadata: dict = field(default_factory=dict)


class Searcher:
    """High-level API to query a table with free text."""

    def __init__(self, embedder: EmbeddingProvider, table: "Table") -> None:
        self.embedder = embedder
        self.table = table

    def search(
        self,
        query: str,
        *,
        top_k: int = 5,
        threshold: float = 0.3,
        where: Filter | str | None = None,
    ) -> List[SearchResult]:
        embedding = self.embedder.embed_query(query)
        builder = self.table.search(embedding).limit(top_k)
        if where is not None:
            builder = builder.where(where)

        results: List[SearchResult] = []
        for row in builder.to_list():
            score = float(row["score"])
            if score < threshold:
                continue
            results.append(
                SearchResult(
                    id=str(row.get("id", "")),
                    text=row.get("text", ""),
                    score=score,
                    metadata=row.get("metadata") or {},
                )
            )
        LOGGER.info("Found %d results in %s for %r", len(results), self.table.name, query[:50])
        return results

    def context_strings(self, query: str, *, limit: int = 3) -> List[str]:
        """Format the best matches as prompt-ready context snippets."""
        snippets: List[str] = []
        for result in self.search(query, top_k=limit):
            filename = result.metadata.get("filename", "unknown")
            text = result.text[:CONTEXT_SNIPPET_CHARS]
            if len(result.text) > CONTEXT_SNIPPET_CHARS:
                text += "..."
            snippets.append(f"[Local: {filename}] {text}")
        return snippets

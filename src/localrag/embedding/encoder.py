"""Embedding providers.

The default provider is a cheap lexical surrogate for a learned embedding:
tokens are hashed into a fixed number of buckets weighted by log term
frequency. Anything implementing `EmbeddingProvider` can replace it.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Literal, Protocol, Sequence, runtime_checkable

import numpy as np

DEFAULT_DIMENSION = 384
DEFAULT_MODEL = "hash-tf-384"
MIN_TOKEN_LENGTH = 3

logger = logging.getLogger(__name__)


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Anything that maps text to fixed-length vectors."""

    @property
    def dimension(self) -> int:
        ...

    @property
    def model_name(self) -> str:
        ...

    def embed(self, texts: Sequence[str] | Iterable[str]) -> np.ndarray:
        """Return an array of shape (len(texts), dimension)."""
        ...

    def embed_query(self, text: str) -> np.ndarray:
        ...


def token_hash(token: str) -> int:
    """Deterministic 31-multiplier string hash over UTF-16 code units.

    Wraps to a signed 32-bit integer and returns its absolute value, so the
    same token always lands in the same bucket across processes.
    """
    value = 0
    encoded = token.encode("utf-16-le")
    for offset in range(0, len(encoded), 2):
        unit = encoded[offset] | (encoded[offset + 1] << 8)
        value = (value * 31 + unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return abs(value)


@dataclass(slots=True)
class EmbeddingConfig:
    dimension: int = DEFAULT_DIMENSION
    model_name: str = DEFAULT_MODEL
    # "overwrite": a later token hashing to a taken bucket replaces it.
    # "sum": colliding tokens accumulate.
    collisions: Literal["overwrite", "sum"] = "overwrite"


class HashEmbedder:
    """Hash-bucket term-frequency embedder."""

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self.config = config or EmbeddingConfig()
        if self.config.dimension <= 0:
            raise ValueError("dimension must be positive")
        if self.config.collisions not in ("overwrite", "sum"):
            raise ValueError(f"Unknown collision policy: {self.config.collisions}")
        logger.debug(
            "Hash embedder ready | dimension=%d | collisions=%s",
            self.config.dimension,
            self.config.collisions,
        )

    @property
    def dimension(self) -> int:
        return self.config.dimension

    @property
    def model_name(self) -> str:
        return self.config.model_name

    def embed_query(self, text: str) -> np.ndarray:
        """Return the normalized float32 vector for a single text."""
        dimension = self.config.dimension
        vector = np.zeros(dimension, dtype="float64")

        tokens = [word for word in text.lower().split() if len(word) >= MIN_TOKEN_LENGTH]
        frequencies = Counter(tokens)

        for token, count in list(frequencies.items())[:dimension]:
            bucket = token_hash(token) % dimension
            weight = math.log1p(count)
            if self.config.collisions == "sum":
                vector[bucket] += weight
            else:
                vector[bucket] = weight

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector.astype("float32")

    def embed(self, texts: Sequence[str] | Iterable[str]) -> np.ndarray:
        """Return float32 embeddings for input texts."""
        sentences = list(texts)
        if not sentences:
            return np.zeros((0, self.config.dimension), dtype="float32")
        return np.vstack([self.embed_query(sentence) for sentence in sentences])

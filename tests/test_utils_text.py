"""Tests for text utility functions."""

from __future__ import annotations

import math

import pytest

from localrag.utils.text import chunk_spans, find_sentence_end, normalize_text, word_count


def _reconstruct(text: str, spans: list[tuple[int, int]]) -> str:
    """Stitch spans back together, dropping the overlapping prefix of each."""
    rebuilt = ""
    covered = 0
    for start, end in spans:
        assert start <= covered, "gap between consecutive spans"
        rebuilt += text[covered:end]
        covered = end
    return rebuilt


class TestNormalizeText:
    """Test normalize_text function."""

    def test_collapses_whitespace_runs(self) -> None:
        """Should turn any whitespace run into a single space."""
        assert normalize_text("Hello   \t world\n\nagain") == "Hello world again"

    def test_collapses_newline_runs(self) -> None:
        """Should not keep runs of newlines."""
        assert normalize_text("a\n\n\n\n\nb") == "a b"

    def test_trims(self) -> None:
        """Should strip leading and trailing whitespace."""
        assert normalize_text("   padded text \n") == "padded text"

    def test_empty(self) -> None:
        """Should return empty string for whitespace-only input."""
        assert normalize_text(" \n\t ") == ""


class TestWordCount:
    """Test word_count function."""

    def test_counts_tokens(self) -> None:
        assert word_count("one two  three\nfour") == 4

    def test_empty(self) -> None:
        assert word_count("   ") == 0


class TestFindSentenceEnd:
    """Test find_sentence_end function."""

    def test_snaps_after_period(self) -> None:
        """Should return the offset just past the nearest terminator."""
        text = "First sentence. Second part continues"
        assert find_sentence_end(text, 25) == text.index(".") + 1

    def test_prefers_nearest_terminator(self) -> None:
        """Should pick the terminator closest to the position."""
        text = "One! Two? Three and more words"
        assert find_sentence_end(text, 20) == text.index("?") + 1

    def test_no_terminator_returns_position(self) -> None:
        """Should leave the position unchanged when nothing is found."""
        text = "no terminators in this text at all"
        assert find_sentence_end(text, 20) == 20

    def test_lookback_is_limited(self) -> None:
        """Should not look further back than 200 characters."""
        text = "Start." + "x" * 300
        assert find_sentence_end(text, 250) == 250

    def test_double_newline_counts(self) -> None:
        """Should treat a double newline as a boundary."""
        text = "para one\n\npara two continues"
        assert find_sentence_end(text, 15) == text.index("\n\n") + 2


class TestChunkSpans:
    """Test chunk_spans function."""

    def test_empty_text(self) -> None:
        """Should produce no spans for empty text."""
        assert chunk_spans("", chunk_size=100, overlap=10) == []

    def test_short_text_single_span(self) -> None:
        """Should return one span covering short text."""
        assert chunk_spans("Short text", chunk_size=100, overlap=10) == [(0, 10)]

    def test_exact_size_single_span(self) -> None:
        """Text exactly chunk_size long is one span."""
        assert chunk_spans("x" * 100, chunk_size=100, overlap=10) == [(0, 100)]

    def test_sliding_window_positions(self) -> None:
        """Should advance by chunk_size - overlap when no boundary is found."""
        text = "x" * 250
        assert chunk_spans(text, chunk_size=100, overlap=20) == [(0, 100), (80, 180), (160, 250)]

    def test_snaps_to_sentence_boundary(self) -> None:
        """Should end a chunk right after a nearby sentence terminator."""
        text = "a" * 90 + ". " + "b" * 200
        spans = chunk_spans(text, chunk_size=100, overlap=10)
        assert spans[0] == (0, 91)
        assert spans[1][0] == 81

    def test_snaps_to_early_boundary(self) -> None:
        """Any terminator within the lookback wins, however short the chunk gets."""
        text = "." + "c" * 150
        spans = chunk_spans(text, chunk_size=100, overlap=10)
        assert spans[0] == (0, 1)
        assert spans[1] == (1, 101)

    def test_covers_text_without_gaps(self) -> None:
        """Spans stitched together should rebuild the text exactly."""
        text = normalize_text(
            " ".join(f"Sentence number {i} says something! Maybe? Yes." for i in range(200))
        )
        spans = chunk_spans(text, chunk_size=300, overlap=40)

        assert spans[0][0] == 0
        assert spans[-1][1] == len(text)
        assert _reconstruct(text, spans) == text
        for start, end in spans:
            assert 0 <= start < end <= len(text)

    @pytest.mark.parametrize("chunk_size,overlap", [(100, 0), (100, 20), (100, 99), (37, 5)])
    def test_chunk_count_bound(self, chunk_size: int, overlap: int) -> None:
        """Number of spans is bounded by ceil(len / (chunk_size - overlap))."""
        text = "lorem ipsum dolor " * 60
        text = normalize_text(text)
        spans = chunk_spans(text, chunk_size=chunk_size, overlap=overlap)

        assert len(spans) <= math.ceil(len(text) / (chunk_size - overlap))
        assert _reconstruct(text, spans) == text

    def test_overlap_not_smaller_than_chunk_terminates(self) -> None:
        """Should still terminate when overlap >= chunk_size."""
        text = "y" * 50
        spans = chunk_spans(text, chunk_size=10, overlap=15)

        assert spans[-1][1] == 50
        starts = [start for start, _ in spans]
        assert starts == sorted(set(starts))

    def test_twelve_thousand_characters(self) -> None:
        """12,000 characters with 5000/500 windows yield three chunks."""
        text = "z" * 12000
        assert chunk_spans(text, chunk_size=5000, overlap=500) == [
            (0, 5000),
            (4500, 9500),
            (9000, 12000),
        ]

    def test_invalid_parameters(self) -> None:
        """Should reject non-positive chunk sizes and negative overlap."""
        with pytest.raises(ValueError):
            chunk_spans("text", chunk_size=0, overlap=0)
        with pytest.raises(ValueError):
            chunk_spans("text", chunk_size=10, overlap=-1)

"""Tests for token-budgeted chunking."""

import pytest

from menu_ingest.services.chunker import TextChunker


def test_short_text_is_single_chunk() -> None:
    chunker = TextChunker(max_tokens=10, chars_per_token=4)

    assert chunker.split("Soup 4.00") == ["Soup 4.00"]
    assert chunker.split("") == []


def test_chunks_fit_budget_and_cover_the_text() -> None:
    lines = [f"Dish number {n} with sauce ..... {n}.50" for n in range(40)]
    text = "STARTERS\n" + "\n".join(lines[:20]) + "\n\nMAINS\n" + "\n".join(lines[20:])
    chunker = TextChunker(max_tokens=50, chars_per_token=4)

    chunks = chunker.split(text)

    assert len(chunks) > 1
    assert "".join(chunks) == text
    assert all(len(chunk) <= chunker.max_chars for chunk in chunks)
    assert all(chunk.endswith("\n") for chunk in chunks[:-1])


def test_prefers_blank_line_over_line_break() -> None:
    text = "a" * 60 + "\n\n" + "b" * 20 + "\n" + "c" * 60
    chunker = TextChunker(max_tokens=25, chars_per_token=4)

    chunks = chunker.split(text)

    assert chunks[0] == "a" * 60 + "\n\n"


def test_hard_cut_without_whitespace() -> None:
    chunker = TextChunker(max_tokens=5, chars_per_token=2)

    assert chunker.split("x" * 25) == ["x" * 10, "x" * 10, "x" * 5]


def test_estimate_tokens_and_invalid_budget() -> None:
    assert TextChunker(chars_per_token=4).estimate_tokens("x" * 9) == 3
    with pytest.raises(ValueError):
        TextChunker(max_tokens=0)
    with pytest.raises(ValueError):
        TextChunker(min_fill_ratio=1.0)

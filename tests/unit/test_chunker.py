"""Test boundary-aware chunking"""

import pytest

from app.rag.chunker import chunk_text


def test_short_text_is_single_chunk():
    assert chunk_text("Hello world.") == ["Hello world."]


def test_empty_and_whitespace_text_give_no_chunks():
    assert chunk_text("") == []
    assert chunk_text("   \n\n  ") == []


def test_boundary_free_text_splits_with_overlap():
    text = "".join(chr(ord("a") + i % 26) for i in range(2800))

    chunks = chunk_text(text, size=1500, overlap=100)

    assert len(chunks) == 2
    assert chunks[0] == text[:1500]
    assert chunks[1] == text[1400:]
    # Overlap is shared between neighbours
    assert chunks[0][-100:] == chunks[1][:100]


def test_three_thousand_characters_make_three_chunks():
    text = "x" * 3000

    chunks = chunk_text(text, size=1500, overlap=100)

    assert [len(c) for c in chunks] == [1500, 1500, 200]


def test_cut_snaps_to_sentence_end_in_second_half():
    first = "A" * 999 + "."
    text = first + " " + "B" * 1000

    chunks = chunk_text(text, size=1500, overlap=100)

    assert chunks[0] == first
    # Next window starts one overlap before the cut
    assert chunks[1].startswith("A" * 99 + ".")


def test_boundary_in_first_half_is_ignored():
    text = "A" * 100 + "." + "B" * 2000

    chunks = chunk_text(text, size=1500, overlap=100)

    assert len(chunks[0]) == 1500


def test_newline_counts_as_boundary():
    text = "A" * 1200 + "\n" + "B" * 1000

    chunks = chunk_text(text, size=1500, overlap=100)

    assert chunks[0] == "A" * 1200


def test_chunks_cover_the_whole_text():
    text = " ".join(f"Sentence number {i} is here." for i in range(400))

    chunks = chunk_text(text, size=1500, overlap=100)

    assert all(0 < len(c) <= 1500 for c in chunks)
    assert text.startswith(chunks[0])
    assert text.endswith(chunks[-1])
    position = 0
    for chunk in chunks:
        found = text.find(chunk, max(0, position - 1500))
        assert found != -1
        assert found <= position
        position = found + len(chunk)
    assert position == len(text)


def test_chunking_is_deterministic():
    text = "Line one.\nLine two. " * 300
    assert chunk_text(text) == chunk_text(text)


@pytest.mark.parametrize("size,overlap", [(0, 0), (100, -1), (100, 50), (100, 80)])
def test_invalid_parameters_rejected(size, overlap):
    with pytest.raises(ValueError):
        chunk_text("some text", size=size, overlap=overlap)

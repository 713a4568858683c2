from doc_assistant.config import ChunkingConfig
from doc_assistant.ingest.chunker import BoundaryChunker, chunk_text, chunking_info


def _chunker(size: int) -> BoundaryChunker:
    return BoundaryChunker(ChunkingConfig(chunk_size=size))


def _make_long_text() -> str:
    paragraphs = []
    for i in range(12):
        sentences = " ".join(
            f"Sentence {i}-{j} describes access control and encryption." for j in range(3)
        )
        paragraphs.append(sentences)
    return "\n\n".join(paragraphs)


def test_empty_text_yields_no_chunks() -> None:
    assert _chunker(100).chunk("") == []
    assert _chunker(100).chunk("   \n\n  ") == []


def test_short_text_is_a_single_trimmed_chunk() -> None:
    chunks = _chunker(100).chunk("  Hello world.  \n")

    assert len(chunks) == 1
    assert chunks[0].text == "Hello world."
    assert chunks[0].index == 0


def test_text_of_exactly_chunk_size_is_single_chunk() -> None:
    assert len(_chunker(50).chunk("x" * 50)) == 1
    assert len(_chunker(50).chunk("x" * 51)) == 2


def test_prefers_paragraph_break_past_midpoint() -> None:
    text = "a" * 60 + "\n\n" + "b" * 60

    chunks = _chunker(100).chunk(text)

    assert [chunk.text for chunk in chunks] == ["a" * 60, "b" * 60]


def test_cuts_after_period_when_no_paragraph_break() -> None:
    text = "a" * 70 + "." + "b" * 70

    chunks = _chunker(100).chunk(text)

    assert [chunk.text for chunk in chunks] == ["a" * 70 + ".", "b" * 70]


def test_full_width_period_wins_over_later_ascii_period() -> None:
    text = "a" * 55 + "。" + "a" * 10 + "." + "b" * 60

    chunks = _chunker(100).chunk(text)

    assert chunks[0].text == "a" * 55 + "。"


def test_boundaries_before_midpoint_fall_back_to_hard_cut() -> None:
    text = "a" * 10 + ". " + "b" * 200

    chunks = _chunker(100).chunk(text)

    assert len(chunks[0].text) == 100
    assert len(chunks) == 3


def test_large_text_scenario_splits_into_bounded_non_empty_chunks() -> None:
    text = "A. B. " + "x" * 100_000

    chunks = chunk_text(text, 50_000)

    assert len(chunks) >= 2
    assert all(0 < len(chunk.text) <= 50_000 for chunk in chunks)


def test_chunks_reconstruct_text_without_overlap_or_gap() -> None:
    text = _make_long_text()

    chunks = _chunker(120).chunk(text)

    assert len(chunks) > 1
    assert [chunk.index for chunk in chunks] == list(range(len(chunks)))
    assert all(len(chunk.text) <= 120 for chunk in chunks)
    rebuilt = "".join(chunk.text for chunk in chunks)
    assert "".join(rebuilt.split()) == "".join(text.split())


def test_chunking_is_deterministic() -> None:
    text = _make_long_text()

    assert _chunker(150).chunk(text) == _chunker(150).chunk(text)


def test_chunking_info_estimates_chunk_count() -> None:
    short = chunking_info(1_000, 50_000)
    long = chunking_info(120_000, 50_000)

    assert short.needs_chunking is False
    assert short.chunks == 1
    assert long.needs_chunking is True
    assert long.chunks == 3
    assert "120.0k" in long.message

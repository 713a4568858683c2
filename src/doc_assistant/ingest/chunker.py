"""Boundary-aware fixed-size chunking implementation."""

from __future__ import annotations

import math
from dataclasses import dataclass

from doc_assistant.config import ChunkingConfig
from doc_assistant.types import DocumentChunk

_PARAGRAPH_BREAK = "\n\n"
_SENTENCE_ENDINGS = ("。", ".")


class BoundaryChunker:
    """Splits document text into bounded chunks at natural boundaries.

    Design notes:
    1. Fixed window first.
       Each chunk starts where the previous one ended and proposes a cut at
       `start + chunk_size`.

    2. Boundary search second.
       When the window does not reach the end of the text, the cut is pulled
       back to the last paragraph break inside the window, else to just after
       the last full-width period, else just after the last ASCII period.
       A candidate only counts when it lies past the window midpoint, so a
       stray early period never produces a tiny chunk.

    3. Hard cut last.
       Without a usable boundary the window is cut at the fixed offset, which
       guarantees progress and keeps every chunk <= `chunk_size` characters.

    Emitted chunk text is whitespace-trimmed, but the next window starts at the
    untrimmed cut, so no text is skipped or repeated.
    """

    def __init__(self, config: ChunkingConfig | None = None) -> None:
        self.config = config or ChunkingConfig()

    @property
    def chunk_size(self) -> int:
        return self.config.chunk_size

    def chunk(self, text: str) -> list[DocumentChunk]:
        """Chunk `text` into ordered, non-overlapping `DocumentChunk` objects.

        Args:
            text: Full extracted document text.

        Returns:
            Chunks in source order with 0-based `index`. Empty input (or input
            that is only whitespace) yields an empty list.
        """

        size = self.config.chunk_size
        chunks: list[DocumentChunk] = []
        start = 0

        while start < len(text):
            end = start + size
            if end < len(text):
                end = self._find_cut(text, start, end)

            piece = text[start:end].strip()
            if piece:
                chunks.append(DocumentChunk(index=len(chunks), text=piece))
            start = end

        return chunks

    def _find_cut(self, text: str, start: int, end: int) -> int:
        floor = start + self.config.chunk_size / 2

        paragraph = text.rfind(_PARAGRAPH_BREAK, start, end)
        if paragraph > floor:
            return paragraph

        for mark in _SENTENCE_ENDINGS:
            position = text.rfind(mark, start, end)
            if position > floor:
                return position + 1

        return end


@dataclass(frozen=True, slots=True)
class ChunkingInfo:
    needs_chunking: bool
    chunks: int
    message: str


def chunk_text(text: str, chunk_size: int = 50_000) -> list[DocumentChunk]:
    return BoundaryChunker(ChunkingConfig(chunk_size=chunk_size)).chunk(text)


def chunking_info(text_length: int, chunk_size: int = 50_000) -> ChunkingInfo:
    """Estimate how many chunks a text of `text_length` characters needs.

    This is the fixed-window estimate shown before a long operation starts; the
    real chunk count can be higher when boundaries pull cuts back.
    """

    chunks = max(1, math.ceil(text_length / chunk_size))
    if chunks == 1:
        return ChunkingInfo(needs_chunking=False, chunks=1, message="")
    return ChunkingInfo(
        needs_chunking=True,
        chunks=chunks,
        message=(
            f"Long text ({text_length / 1000:.1f}k characters), "
            f"will be processed in {chunks} chunks"
        ),
    )

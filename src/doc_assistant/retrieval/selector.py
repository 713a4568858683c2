"""Lexical relevance scoring for question-focused chunk selection."""

from __future__ import annotations

import re

from doc_assistant.types import DocumentChunk, ScoredChunk

_QUESTION_PUNCTUATION = re.compile(r"[？?。，,！!]")


class KeywordRelevanceSelector:
    """Ranks chunks by how often the question's keywords occur in them.

    Scoring is a plain occurrence count: every keyword is matched as a literal,
    non-overlapping substring of the lower-cased chunk text, so "ai" also hits
    inside "main". Pass `whole_words=True` to count only word-bounded matches.
    Ties are broken by original chunk index, which keeps selection fully
    deterministic for identical inputs.
    """

    def __init__(self, *, whole_words: bool = False) -> None:
        self.whole_words = whole_words

    def select(
        self, chunks: list[DocumentChunk], question: str, k: int
    ) -> list[DocumentChunk]:
        """Return at most `k` chunks in descending relevance order.

        Zero-score chunks stay eligible when fewer than `k` chunks match.
        """

        if k <= 0:
            return []
        ranked = self.score(chunks, question)
        return [item.chunk for item in ranked[:k]]

    def score(self, chunks: list[DocumentChunk], question: str) -> list[ScoredChunk]:
        keywords = extract_keywords(question)
        scored = [
            ScoredChunk(chunk=chunk, score=self._count(chunk.text.lower(), keywords))
            for chunk in chunks
        ]
        return sorted(scored, key=lambda item: (-item.score, item.index))

    def _count(self, text: str, keywords: list[str]) -> int:
        if self.whole_words:
            return sum(
                len(re.findall(rf"\b{re.escape(keyword)}\b", text)) for keyword in keywords
            )
        return sum(text.count(keyword) for keyword in keywords)


def extract_keywords(question: str) -> list[str]:
    cleaned = _QUESTION_PUNCTUATION.sub("", question.lower())
    return [token for token in cleaned.split() if len(token) > 1]

"""Shared domain models."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

Role = Literal["system", "user"]
SummaryLength = Literal["short", "medium", "long"]


@dataclass(slots=True)
class ExtractedDocument:
    """Plain text pulled out of a source document."""

    text: str
    page_count: int

    @property
    def char_count(self) -> int:
        return len(self.text)


@dataclass(frozen=True, slots=True)
class DocumentChunk:
    """A contiguous, trimmed slice of document text."""

    index: int
    text: str


@dataclass(slots=True)
class ScoredChunk:
    """A chunk with its lexical relevance score for one question."""

    chunk: DocumentChunk
    score: int

    @property
    def index(self) -> int:
        return self.chunk.index


@dataclass(frozen=True, slots=True)
class ChatMessage:
    role: Role
    content: str

    def as_payload(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True, slots=True)
class TokenUsage:
    prompt_tokens: int
    completion_tokens: int

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass(frozen=True, slots=True)
class CompletionResult:
    """Text returned by one completion call, with optional usage counters."""

    content: str
    usage: TokenUsage | None = None
    model: str = ""
    latency_ms: float = 0.0


@dataclass(frozen=True, slots=True)
class ChunkProgress:
    """Progress of a multi-chunk summarization, 1-based."""

    current: int
    total: int


@dataclass(frozen=True, slots=True)
class QARecord:
    """One answered question, appended to a session's history."""

    question: str
    answer: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    record_id: str = field(default_factory=lambda: uuid.uuid4().hex)

"""Persisted document records."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field


class LastQuestion(BaseModel):
    question: str
    answer: str


class DocumentRecord(BaseModel):
    """A processed document as kept in the recent-documents history."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    filename: str
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    extracted_text: str
    page_count: int = Field(default=1, ge=0)
    last_summary: str | None = None
    last_qa: LastQuestion | None = None

    @property
    def text_char_count(self) -> int:
        return len(self.extracted_text)

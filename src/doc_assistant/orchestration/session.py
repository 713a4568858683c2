"""Per-document session state: latest summary and question history."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from doc_assistant.config import EndpointConfig
from doc_assistant.orchestration.qa import QuestionAnsweringOrchestrator
from doc_assistant.orchestration.summarizer import SummarizationOrchestrator
from doc_assistant.storage.records import DocumentRecord, LastQuestion
from doc_assistant.types import CompletionResult, QARecord, SummaryLength


class DocumentSession:
    """Holds one document while the user summarizes it and asks questions.

    The session keeps results in memory only; callers persist `record` through
    the store when they want the history to survive.
    """

    def __init__(
        self,
        record: DocumentRecord,
        summarizer: SummarizationOrchestrator,
        qa: QuestionAnsweringOrchestrator,
    ) -> None:
        self.record = record
        self.summarizer = summarizer
        self.qa = qa
        self.summary: str | None = record.last_summary
        self._qa_history: list[QARecord] = []

    @property
    def qa_history(self) -> list[QARecord]:
        return list(self._qa_history)

    def summarize(
        self,
        config: EndpointConfig,
        length: SummaryLength = "medium",
        on_progress: Callable[[int, int], None] | None = None,
    ) -> CompletionResult:
        result = self.summarizer.summarize(
            self.record.extracted_text, config, length, on_progress=on_progress
        )
        self.summary = result.content
        self.record = self.record.model_copy(update={"last_summary": result.content})
        return result

    def ask(self, question: str, config: EndpointConfig) -> QARecord:
        result = self.qa.ask(self.record.extracted_text, question, config)
        entry = QARecord(question=question.strip(), answer=result.content)
        self._qa_history.append(entry)
        self.record = self.record.model_copy(
            update={"last_qa": LastQuestion(question=entry.question, answer=entry.answer)}
        )
        return entry

    def report(self, exported_at: datetime | None = None) -> str:
        return render_report(
            self.record.filename, self.summary, self._qa_history, exported_at
        )


def render_report(
    document_name: str | None,
    summary: str | None,
    qa_history: list[QARecord],
    exported_at: datetime | None = None,
) -> str:
    """Render the summary and Q&A history as a Markdown analysis report."""

    stamp = (exported_at or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M")
    lines = [f"# {document_name or 'Document'} - Document analysis report", ""]
    lines += [f"Exported: {stamp}", ""]

    if summary:
        lines += ["## Summary", "", summary, ""]

    if qa_history:
        lines += ["## Questions and answers", ""]
        for number, entry in enumerate(qa_history, start=1):
            lines += [
                f"### Question {number}",
                "",
                f"**Q:** {entry.question}",
                "",
                f"**A:** {entry.answer}",
                "",
                "---",
                "",
            ]

    return "\n".join(lines)

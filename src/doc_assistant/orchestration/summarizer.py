"""Map-reduce summarization over chunked document text."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from doc_assistant.config import EndpointConfig
from doc_assistant.errors import CompletionError
from doc_assistant.ingest.chunker import BoundaryChunker
from doc_assistant.llm import prompts
from doc_assistant.llm.gateway import CompletionClient
from doc_assistant.types import ChunkProgress, CompletionResult, DocumentChunk, SummaryLength

logger = logging.getLogger(__name__)


class SummaryRun:
    """One summarization in flight, consumed as an iterator of progress events.

    Iterating drives the pipeline: for a multi-chunk document each
    `ChunkProgress(i, n)` is yielded right before the completion call for
    chunk `i`, and the merge call runs when the caller asks for the next event
    after the last one. A single-chunk document yields no events. The run is
    finite and cannot be restarted; once exhausted, `result` holds the final
    summary. Any `CompletionError` propagates out of the iteration and leaves
    `result` unset.
    """

    def __init__(
        self,
        gateway: CompletionClient,
        chunks: list[DocumentChunk],
        text: str,
        config: EndpointConfig,
        length: SummaryLength,
    ) -> None:
        self._gateway = gateway
        self._chunks = chunks
        self._text = text
        self._config = config
        self._length = length
        self._result: CompletionResult | None = None
        self._events = self._run()

    @property
    def total_chunks(self) -> int:
        return len(self._chunks)

    @property
    def done(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> CompletionResult:
        if self._result is None:
            raise RuntimeError("Summary is not available until the run is fully consumed")
        return self._result

    def __iter__(self) -> Iterator[ChunkProgress]:
        return self

    def __next__(self) -> ChunkProgress:
        return next(self._events)

    def _run(self) -> Iterator[ChunkProgress]:
        language = self._config.output_language
        if len(self._chunks) == 1:
            self._result = self._gateway.complete(
                self._config,
                prompts.summary_messages(language, self._length, self._text),
            )
            return

        total = len(self._chunks)
        partial_summaries: list[str] = []
        for position, chunk in enumerate(self._chunks, start=1):
            yield ChunkProgress(current=position, total=total)
            logger.info("Summarizing chunk %d/%d (%d chars)", position, total, len(chunk.text))
            partial = self._gateway.complete(
                self._config,
                prompts.chunk_summary_messages(language, position, total, chunk.text),
            )
            partial_summaries.append(partial.content)

        logger.info("Merging %d partial summaries", total)
        self._result = self._gateway.complete(
            self._config,
            prompts.merge_messages(language, self._length, partial_summaries),
        )


class SummarizationOrchestrator:
    """Summarizes a document in one call, or per chunk followed by a merge call.

    Chunk calls are strictly sequential: the merge needs every partial summary,
    progress must be reported in chunk order, and providers rate-limit bursts.
    """

    def __init__(
        self,
        gateway: CompletionClient,
        chunker: BoundaryChunker | None = None,
    ) -> None:
        self.gateway = gateway
        self.chunker = chunker or BoundaryChunker()

    def stream(
        self,
        text: str,
        config: EndpointConfig,
        length: SummaryLength = "medium",
    ) -> SummaryRun:
        """Prepare a lazy summarization run.

        Input is validated and the configuration snapshotted immediately; no
        completion call happens until the returned run is iterated.
        """

        if not text.strip():
            raise CompletionError.invalid_input("The document has no extracted text to summarize")
        if length not in prompts.LENGTH_INSTRUCTIONS[config.output_language]:
            raise CompletionError.invalid_input(f"Unknown summary length: {length}")

        snapshot = config.model_copy(deep=True)
        chunks = self.chunker.chunk(text)
        logger.info(
            "Summarization of %d chars uses %d chunk(s), length=%s",
            len(text),
            len(chunks),
            length,
        )
        return SummaryRun(self.gateway, chunks, text, snapshot, length)

    def summarize(
        self,
        text: str,
        config: EndpointConfig,
        length: SummaryLength = "medium",
        on_progress: Callable[[int, int], None] | None = None,
    ) -> CompletionResult:
        """Run the whole pipeline, forwarding progress to `on_progress`.

        Returns:
            The final (single-shot or merged) `CompletionResult`.

        Raises:
            CompletionError: on invalid input or any failed call. Progress that
            was already reported is not rolled back.
        """

        run = self.stream(text, config, length)
        for event in run:
            if on_progress is not None:
                on_progress(event.current, event.total)
        return run.result

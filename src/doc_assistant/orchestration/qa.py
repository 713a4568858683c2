"""Question answering grounded in the document text."""

from __future__ import annotations

import logging

from doc_assistant.config import ChunkingConfig, EndpointConfig
from doc_assistant.errors import CompletionError
from doc_assistant.ingest.chunker import BoundaryChunker
from doc_assistant.llm import prompts
from doc_assistant.llm.gateway import CompletionClient
from doc_assistant.retrieval.selector import KeywordRelevanceSelector
from doc_assistant.types import CompletionResult

logger = logging.getLogger(__name__)


class QuestionAnsweringOrchestrator:
    """Answers a question with one completion call.

    A document that fits in one chunk is sent whole. Longer documents are
    chunked with the same size as summarization and only the most relevant
    chunks, in relevance order, form the context.
    """

    def __init__(
        self,
        gateway: CompletionClient,
        chunker: BoundaryChunker | None = None,
        selector: KeywordRelevanceSelector | None = None,
        config: ChunkingConfig | None = None,
    ) -> None:
        self.gateway = gateway
        self.chunker = chunker or BoundaryChunker(config)
        self.selector = selector or KeywordRelevanceSelector()
        self.max_context_chunks = (config or self.chunker.config).qa_max_chunks

    def ask(self, text: str, question: str, config: EndpointConfig) -> CompletionResult:
        if not text.strip():
            raise CompletionError.invalid_input("The document has no extracted text to search")
        if not question.strip():
            raise CompletionError.invalid_input("The question is empty")

        snapshot = config.model_copy(deep=True)
        context = self.build_context(text, question)
        return self.gateway.complete(
            snapshot,
            prompts.qa_messages(snapshot.output_language, question.strip(), context),
        )

    def build_context(self, text: str, question: str) -> str:
        chunks = self.chunker.chunk(text)
        if len(chunks) <= 1:
            return text

        selected = self.selector.select(chunks, question, self.max_context_chunks)
        logger.info(
            "Question context uses chunks %s of %d",
            [chunk.index for chunk in selected],
            len(chunks),
        )
        return prompts.CHUNK_DELIMITER.join(chunk.text for chunk in selected)

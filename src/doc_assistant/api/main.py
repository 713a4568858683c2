"""FastAPI entrypoint for document ingest, summary, question and config endpoints."""

from __future__ import annotations

import logging
import os
import threading
from collections import OrderedDict
from typing import Any, NoReturn

from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from doc_assistant.config import ChunkingConfig, EndpointConfig, OutputLanguage, Provider
from doc_assistant.errors import CompletionError, ErrorKind
from doc_assistant.ingest.chunker import BoundaryChunker, chunking_info
from doc_assistant.ingest.extractor import ExtractorRegistry
from doc_assistant.llm.gateway import CompletionGateway
from doc_assistant.obs.logging_utils import setup_logging
from doc_assistant.obs.tracing import UsageTracker
from doc_assistant.orchestration.qa import QuestionAnsweringOrchestrator
from doc_assistant.orchestration.session import DocumentSession
from doc_assistant.orchestration.summarizer import SummarizationOrchestrator
from doc_assistant.storage.records import DocumentRecord
from doc_assistant.storage.sqlite_store import MAX_DOCUMENTS, SqliteStore
from doc_assistant.types import CompletionResult, QARecord, SummaryLength

logger = logging.getLogger(__name__)

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.MISSING_CREDENTIAL: 400,
    ErrorKind.AUTH_FAILURE: 401,
    ErrorKind.MODEL_NOT_FOUND: 404,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.TIMEOUT: 504,
}


class IngestRequest(BaseModel):
    path: str = Field(min_length=1)
    filename: str | None = None


class ConfigUpdateRequest(BaseModel):
    provider: Provider | None = None
    model: str | None = None
    models: list[str] | None = None
    base_url: str | None = None
    api_key: str | None = None
    headers: dict[str, str] | None = None
    timeout: float | None = Field(default=None, gt=0.0)
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, ge=1)
    output_language: OutputLanguage | None = None


class SummaryRequest(BaseModel):
    length: SummaryLength = "medium"


class QuestionRequest(BaseModel):
    question: str = Field(min_length=1)


def create_app(
    *,
    store: SqliteStore | None = None,
    gateway: CompletionGateway | None = None,
    extractors: ExtractorRegistry | None = None,
    chunking: ChunkingConfig | None = None,
) -> FastAPI:
    setup_logging()

    store = store or SqliteStore(os.getenv("DOC_ASSISTANT_DB", "doc_assistant.db"))
    tracker = UsageTracker()
    gateway = gateway or CompletionGateway()
    gateway.set_observer(tracker.record)
    extractors = extractors or ExtractorRegistry()
    chunking = chunking or ChunkingConfig()
    chunker = BoundaryChunker(chunking)
    summarizer = SummarizationOrchestrator(gateway, chunker)
    qa = QuestionAnsweringOrchestrator(gateway, chunker, config=chunking)
    # Mirrors the stored history: at most MAX_DOCUMENTS sessions, least recent first.
    sessions: OrderedDict[str, DocumentSession] = OrderedDict()
    sessions_lock = threading.Lock()

    app = FastAPI(title="Document Assistant", version="0.1.0")

    def _remember(session: DocumentSession) -> DocumentSession:
        with sessions_lock:
            session = sessions.setdefault(session.record.id, session)
            sessions.move_to_end(session.record.id)
            while len(sessions) > MAX_DOCUMENTS:
                sessions.popitem(last=False)
        return session

    def _forget(document_id: str) -> None:
        with sessions_lock:
            sessions.pop(document_id, None)

    def _session(document_id: str) -> DocumentSession:
        record = store.get_document(document_id)
        if record is None:
            _forget(document_id)
            raise HTTPException(status_code=404, detail=f"Document not found: {document_id}")
        return _remember(DocumentSession(record, summarizer, qa))

    def _persist(session: DocumentSession) -> None:
        if not store.update_document(session.record):
            _forget(session.record.id)
            logger.info("Document %s left the history; result not persisted", session.record.id)

    @app.get("/health")
    def health() -> dict[str, Any]:
        config = store.load_config()
        return {
            "status": "ok",
            "api_key_configured": config.has_api_key,
            "model": config.model,
            "open_sessions": len(sessions),
        }

    @app.get("/config")
    def get_config() -> dict[str, Any]:
        return store.load_config().masked()

    @app.put("/config")
    def update_config(request: ConfigUpdateRequest) -> dict[str, Any]:
        current = store.load_config()
        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        provider = changes.get("provider")
        if provider and provider != current.provider:
            current = current.with_provider(provider)
        updated = EndpointConfig.model_validate({**current.model_dump(), **changes})
        store.save_config(updated)
        logger.info("Endpoint config updated: provider=%s model=%s", updated.provider, updated.model)
        return updated.masked()

    @app.post("/config/test")
    def test_config() -> dict[str, Any]:
        check = gateway.check_connection(store.load_config())
        return {"success": check.success, "message": check.message}

    @app.post("/documents")
    def ingest(request: IngestRequest) -> dict[str, Any]:
        try:
            extracted = extractors.extract_path(request.path)
        except (OSError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if not extracted.text.strip():
            _raise_http(CompletionError.invalid_input("No text could be extracted from the document"))

        record = DocumentRecord(
            filename=request.filename or os.path.basename(request.path),
            extracted_text=extracted.text,
            page_count=extracted.page_count,
        )
        store.save_document(record)
        _remember(DocumentSession(record, summarizer, qa))
        info = chunking_info(record.text_char_count, chunking.chunk_size)
        return {
            "id": record.id,
            "filename": record.filename,
            "page_count": record.page_count,
            "char_count": record.text_char_count,
            "needs_chunking": info.needs_chunking,
            "chunks": info.chunks,
        }

    @app.get("/documents")
    def list_documents() -> dict[str, Any]:
        return {"items": [_document_summary(record) for record in store.load_documents()]}

    @app.get("/documents/{document_id}")
    def document_detail(document_id: str) -> dict[str, Any]:
        record = _session(document_id).record
        return {**_document_summary(record), "text": record.extracted_text}

    @app.get("/documents/{document_id}/chunking")
    def document_chunking(document_id: str) -> dict[str, Any]:
        record = _session(document_id).record
        info = chunking_info(record.text_char_count, chunking.chunk_size)
        return {
            "needs_chunking": info.needs_chunking,
            "chunks": info.chunks,
            "message": info.message,
        }

    @app.post("/documents/{document_id}/summary")
    def summarize(document_id: str, request: SummaryRequest) -> dict[str, Any]:
        session = _session(document_id)
        progress: list[dict[str, int]] = []

        def _on_progress(current: int, total: int) -> None:
            logger.info("Document %s: summarizing chunk %d/%d", document_id, current, total)
            progress.append({"current": current, "total": total})

        try:
            result = session.summarize(store.load_config(), request.length, _on_progress)
        except CompletionError as exc:
            _raise_http(exc)
        _persist(session)
        return {**_result_payload(result), "length": request.length, "progress": progress}

    @app.post("/documents/{document_id}/qa")
    def ask(document_id: str, request: QuestionRequest) -> dict[str, Any]:
        session = _session(document_id)
        try:
            entry = session.ask(request.question, store.load_config())
        except CompletionError as exc:
            _raise_http(exc)
        _persist(session)
        return _qa_payload(entry)

    @app.get("/documents/{document_id}/qa")
    def qa_history(document_id: str) -> dict[str, Any]:
        return {"items": [_qa_payload(entry) for entry in _session(document_id).qa_history]}

    @app.get("/documents/{document_id}/report", response_class=PlainTextResponse)
    def report(document_id: str) -> str:
        return _session(document_id).report()

    @app.get("/metrics")
    def metrics() -> dict[str, Any]:
        return tracker.summary()

    return app


def _raise_http(exc: CompletionError) -> NoReturn:
    status = _STATUS_BY_KIND.get(exc.kind, 502)
    raise HTTPException(
        status_code=status,
        detail={"kind": exc.kind.value, "message": exc.message},
    ) from exc


def _document_summary(record: DocumentRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "filename": record.filename,
        "uploaded_at": record.uploaded_at.isoformat(),
        "char_count": record.text_char_count,
        "page_count": record.page_count,
        "has_summary": record.last_summary is not None,
    }


def _result_payload(result: CompletionResult) -> dict[str, Any]:
    usage = result.usage
    return {
        "content": result.content,
        "model": result.model,
        "latency_ms": result.latency_ms,
        "usage": (
            {
                "prompt_tokens": usage.prompt_tokens,
                "completion_tokens": usage.completion_tokens,
            }
            if usage
            else None
        ),
    }


def _qa_payload(entry: QARecord) -> dict[str, Any]:
    return {
        "id": entry.record_id,
        "question": entry.question,
        "answer": entry.answer,
        "created_at": entry.created_at.isoformat(),
    }


app = create_app()

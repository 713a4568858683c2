"""SQLite key-value persistence for settings and recent documents."""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from doc_assistant.config import EndpointConfig
from doc_assistant.storage.records import DocumentRecord

logger = logging.getLogger(__name__)

CONFIG_KEY = "llm-config"
DOCUMENTS_KEY = "documents"
MAX_DOCUMENTS = 10

_DOCUMENT_LIST = TypeAdapter(list[DocumentRecord])


class SqliteStore:
    """Loads and saves plain records in a single `kv` table.

    Storage is best effort: read failures fall back to defaults or an empty
    history, write failures are logged and dropped. Updates to the document
    history hold a lock across their read and write, so concurrent saves from
    API worker threads do not overwrite each other.
    """

    def __init__(self, path: str | Path = "doc_assistant.db") -> None:
        self.path = Path(path)
        self._documents_lock = threading.Lock()
        try:
            _ensure_kv_table(self.path)
        except sqlite3.Error:
            logger.exception("Failed to initialise store at %s", self.path)

    def load_config(self) -> EndpointConfig:
        raw = self._read(CONFIG_KEY)
        if raw is None:
            return EndpointConfig()
        try:
            return EndpointConfig.model_validate_json(raw)
        except ValidationError:
            logger.warning("Stored endpoint config is invalid, using defaults")
            return EndpointConfig()

    def save_config(self, config: EndpointConfig) -> None:
        self._write(CONFIG_KEY, config.model_dump_json())

    def clear_config(self) -> None:
        self._delete(CONFIG_KEY)

    def load_documents(self) -> list[DocumentRecord]:
        """Return stored documents, most recent first."""
        raw = self._read(DOCUMENTS_KEY)
        if raw is None:
            return []
        try:
            return _DOCUMENT_LIST.validate_json(raw)
        except ValidationError:
            logger.warning("Stored document history is invalid, starting empty")
            return []

    def get_document(self, document_id: str) -> DocumentRecord | None:
        for record in self.load_documents():
            if record.id == document_id:
                return record
        return None

    def save_document(self, record: DocumentRecord) -> None:
        """Upsert by id; new records go first and the history keeps 10 entries."""
        with self._documents_lock:
            documents = self.load_documents()
            if not _replace(documents, record):
                documents.insert(0, record)
            self._write_documents(documents[:MAX_DOCUMENTS])

    def update_document(self, record: DocumentRecord) -> bool:
        """Replace a stored record in place; returns False if it was evicted."""
        with self._documents_lock:
            documents = self.load_documents()
            if not _replace(documents, record):
                return False
            self._write_documents(documents)
            return True

    def clear_documents(self) -> None:
        with self._documents_lock:
            self._delete(DOCUMENTS_KEY)

    def _write_documents(self, documents: list[DocumentRecord]) -> None:
        self._write(DOCUMENTS_KEY, _DOCUMENT_LIST.dump_json(documents).decode("utf-8"))

    def _read(self, key: str) -> str | None:
        try:
            with sqlite3.connect(self.path) as conn:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error:
            logger.exception("Failed to read %s from %s", key, self.path)
            return None
        return row[0] if row else None

    def _write(self, key: str, value: str) -> None:
        try:
            with sqlite3.connect(self.path) as conn:
                conn.execute(
                    "INSERT INTO kv(key, value) VALUES(?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                    (key, value),
                )
                conn.commit()
        except sqlite3.Error:
            logger.exception("Failed to write %s to %s", key, self.path)

    def _delete(self, key: str) -> None:
        try:
            with sqlite3.connect(self.path) as conn:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
        except sqlite3.Error:
            logger.exception("Failed to delete %s from %s", key, self.path)


def _ensure_kv_table(db_path: Path) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
        )
        conn.commit()


def _replace(documents: list[DocumentRecord], record: DocumentRecord) -> bool:
    for position, existing in enumerate(documents):
        if existing.id == record.id:
            documents[position] = record
            return True
    return False

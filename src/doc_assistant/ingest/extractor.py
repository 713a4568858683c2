"""Extraction interfaces and concrete text extractors."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from doc_assistant.types import ExtractedDocument

logger = logging.getLogger(__name__)

# (current_page, total_pages, phase) where phase is "loading", "extracting" or "complete".
ExtractionProgress = Callable[[int, int, str], None]

_PAGE_SEPARATOR = "\n\n"


class Extractor(ABC):
    """Base extractor interface: a file in, page texts and a page count out."""

    extensions: tuple[str, ...] = ()

    @abstractmethod
    def read_pages(self, path: Path) -> list[str]:
        """Return the text of each page in order."""

    def extract(
        self, path: Path, *, on_progress: ExtractionProgress | None = None
    ) -> ExtractedDocument:
        _notify(on_progress, 0, 0, "loading")
        pages = self.read_pages(path)
        total = len(pages)
        _notify(on_progress, 0, total, "extracting")

        parts: list[str] = []
        for number, page in enumerate(pages, start=1):
            parts.append(page)
            _notify(on_progress, number, total, "extracting")

        _notify(on_progress, total, total, "complete")
        text = _PAGE_SEPARATOR.join(parts)
        logger.info("Extracted %d pages (%d chars) from %s", total, len(text), path.name)
        return ExtractedDocument(text=text, page_count=total)


class PlainTextExtractor(Extractor):
    """Extractor for plain text; form feeds mark page breaks."""

    extensions = (".txt", ".log")

    def read_pages(self, path: Path) -> list[str]:
        text = path.read_text(encoding="utf-8")
        return [page.strip() for page in text.split("\f")]


class MarkdownExtractor(Extractor):
    """Extractor for markdown documents, treated as a single page."""

    extensions = (".md", ".markdown")

    def read_pages(self, path: Path) -> list[str]:
        return [path.read_text(encoding="utf-8")]


class ExtractorRegistry:
    """Maps file extension to extractor implementation."""

    def __init__(self, extractors: list[Extractor] | None = None) -> None:
        self._extractors: dict[str, Extractor] = {}
        for extractor in extractors or [PlainTextExtractor(), MarkdownExtractor()]:
            self.register(extractor)

    def register(self, extractor: Extractor) -> None:
        for extension in extractor.extensions:
            self._extractors[extension.lower()] = extractor

    def extract_path(
        self,
        path: str | Path,
        *,
        on_progress: ExtractionProgress | None = None,
    ) -> ExtractedDocument:
        file_path = Path(path)
        extractor = self._extractors.get(file_path.suffix.lower())
        if extractor is None:
            raise ValueError(f"No extractor registered for extension: {file_path.suffix}")
        return extractor.extract(file_path, on_progress=on_progress)


def _notify(
    on_progress: ExtractionProgress | None, current: int, total: int, phase: str
) -> None:
    if on_progress is not None:
        on_progress(current, total, phase)

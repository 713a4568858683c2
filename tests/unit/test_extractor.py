import pytest

from doc_assistant.ingest.extractor import ExtractorRegistry


def test_plain_text_pages_split_on_form_feed(tmp_path) -> None:
    path = tmp_path / "report.txt"
    path.write_text("Page one text.\fPage two text.\n", encoding="utf-8")
    events: list[tuple[int, int, str]] = []

    document = ExtractorRegistry().extract_path(
        path, on_progress=lambda c, t, phase: events.append((c, t, phase))
    )

    assert document.page_count == 2
    assert document.text == "Page one text.\n\nPage two text."
    assert document.char_count == len(document.text)
    assert events == [
        (0, 0, "loading"),
        (0, 2, "extracting"),
        (1, 2, "extracting"),
        (2, 2, "extracting"),
        (2, 2, "complete"),
    ]


def test_markdown_is_a_single_page(tmp_path) -> None:
    path = tmp_path / "notes.MD"
    path.write_text("# Title\n\nBody.", encoding="utf-8")

    document = ExtractorRegistry().extract_path(path)

    assert document.page_count == 1
    assert document.text == "# Title\n\nBody."


def test_unknown_extension_is_rejected(tmp_path) -> None:
    with pytest.raises(ValueError):
        ExtractorRegistry().extract_path(tmp_path / "scan.pdf")

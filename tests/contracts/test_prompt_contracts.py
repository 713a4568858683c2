import pytest

from doc_assistant.llm import prompts


@pytest.mark.parametrize("language", ["zh", "en"])
def test_qa_prompt_mandates_refusal_and_search_hint(language: str) -> None:
    system, _ = prompts.qa_messages(language, "Q?", "context")

    assert prompts.NOT_ENOUGH_INFORMATION[language] in system.content
    hint = "关键词" if language == "zh" else "keywords"
    assert hint in system.content


@pytest.mark.parametrize("language", ["zh", "en"])
def test_summary_prompts_forbid_outside_knowledge(language: str) -> None:
    marker = "外部知识" if language == "zh" else "outside knowledge"

    for messages in (
        prompts.summary_messages(language, "medium", "text"),
        prompts.chunk_summary_messages(language, 1, 2, "text"),
        prompts.merge_messages(language, "medium", ["one", "two"]),
    ):
        assert [message.role for message in messages] == ["system", "user"]
        assert marker in messages[0].content


def test_length_tiers_are_a_static_table() -> None:
    for table in prompts.LENGTH_INSTRUCTIONS.values():
        assert set(table) == {"short", "medium", "long"}
        assert len(set(table.values())) == 3


def test_document_text_with_braces_is_not_treated_as_template() -> None:
    _, user = prompts.summary_messages("en", "short", "config = {key: value}")

    assert user.content.endswith("config = {key: value}")

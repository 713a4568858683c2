from doc_assistant.retrieval.selector import KeywordRelevanceSelector, extract_keywords
from doc_assistant.types import DocumentChunk


def _chunks(*texts: str) -> list[DocumentChunk]:
    return [DocumentChunk(index=i, text=text) for i, text in enumerate(texts)]


def test_select_orders_by_keyword_count() -> None:
    chunks = _chunks("apple banana", "apple apple", "banana")

    selected = KeywordRelevanceSelector().select(chunks, "apple", 2)

    assert [chunk.index for chunk in selected] == [1, 0]


def test_ties_keep_original_order_and_zero_scores_stay_eligible() -> None:
    chunks = _chunks("alpha", "beta", "gamma", "delta")

    selected = KeywordRelevanceSelector().select(chunks, "what about omega?", 3)

    assert [chunk.index for chunk in selected] == [0, 1, 2]


def test_equal_scores_break_ties_by_index() -> None:
    chunks = _chunks("nothing here", "tax rules", "tax rates", "more tax tax")

    scored = KeywordRelevanceSelector().score(chunks, "tax")

    assert [(item.index, item.score) for item in scored] == [(3, 2), (1, 1), (2, 1), (0, 0)]


def test_keywords_drop_punctuation_case_and_single_characters() -> None:
    assert extract_keywords("What is an AI？") == ["what", "is", "an", "ai"]
    assert extract_keywords("a b, Cd!") == ["cd"]
    assert extract_keywords("  ？ ") == []


def test_substring_matches_count_by_default() -> None:
    chunks = _chunks("the main entry point")

    assert KeywordRelevanceSelector().score(chunks, "AI")[0].score == 1
    assert KeywordRelevanceSelector(whole_words=True).score(chunks, "AI")[0].score == 0


def test_keywords_are_matched_literally() -> None:
    chunks = _chunks("costs rose (c++) twice: c++ and c++", "cxx")

    scored = KeywordRelevanceSelector().score(chunks, "c++")

    assert scored[0].index == 0
    assert scored[0].score == 3


def test_selection_is_deterministic() -> None:
    chunks = _chunks("policy data", "data data policy", "policy", "retention data")
    selector = KeywordRelevanceSelector()

    first = selector.select(chunks, "data policy", 3)
    second = selector.select(chunks, "data policy", 3)

    assert first == second


def test_non_positive_k_selects_nothing() -> None:
    assert KeywordRelevanceSelector().select(_chunks("apple"), "apple", 0) == []

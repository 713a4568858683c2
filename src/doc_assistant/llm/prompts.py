"""Prompt templates for summarization and document question answering."""

from __future__ import annotations

from dataclasses import dataclass

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate

from doc_assistant.config import OutputLanguage
from doc_assistant.types import ChatMessage, SummaryLength

CHUNK_DELIMITER = "\n\n---\n\n"

NOT_ENOUGH_INFORMATION: dict[OutputLanguage, str] = {
    "zh": "文档中没有足够信息回答这个问题",
    "en": "There is not enough information in the document to answer this question",
}

LENGTH_INSTRUCTIONS: dict[OutputLanguage, dict[SummaryLength, str]] = {
    "zh": {
        "short": "请用100-200字进行简洁总结。",
        "medium": "请用300-500字进行适中长度的总结。",
        "long": "请用800-1200字进行详细总结。",
    },
    "en": {
        "short": "Write a concise summary of 100-200 words.",
        "medium": "Write a summary of moderate length, 300-500 words.",
        "long": "Write a detailed summary of 800-1200 words.",
    },
}

_SUMMARY_SYSTEM_PROMPT: dict[OutputLanguage, str] = {
    "zh": """
你是一个专业的文档总结助手。你只能基于用户提供的 extractedText 进行总结，绝对不能引入任何外部知识或信息。

你的输出必须包含：
1. **核心要点**：以清晰的要点列表形式总结文档的主要内容
2. **关键结论**：提炼文档中最重要的结论或发现
3. **文档结构**（可选）：如果文档有明显的章节结构，简要列出

如果文档内容不清晰或无法理解，请如实说明。
""".strip(),
    "en": """
You are a professional document summarization assistant. Summarize only the
extractedText supplied by the user and never introduce outside knowledge.

Your output must contain:
1. **Key points**: the main content of the document as a clear bullet list
2. **Key conclusions**: the most important conclusions or findings
3. **Structure** (optional): a short outline if the document has clear sections

If the content is unclear or cannot be understood, say so plainly.

Answer in English.
""".strip(),
}

_CHUNK_SYSTEM_PROMPT: dict[OutputLanguage, str] = {
    "zh": "你是一个文档总结助手。请简洁总结以下文档片段的要点。只基于提供的内容，不引入外部知识。",
    "en": (
        "You are a document summarization assistant. Concisely summarize the key "
        "points of the following document excerpt. Use only the provided content "
        "and never introduce outside knowledge."
    ),
}

_QA_SYSTEM_PROMPT: dict[OutputLanguage, str] = {
    "zh": f"""
你是一个专业的文档问答助手。你只能基于用户提供的 extractedText 回答问题，绝对不能引入任何外部知识或信息。

重要规则：
1. 如果问题的答案在文档中有明确内容，请详细回答
2. 如果文档中没有足够信息回答这个问题，请明确回答："{NOT_ENOUGH_INFORMATION['zh']}"
3. 当无法回答时，请建议用户应该在文档中查找什么关键词或章节

请用中文回答。
""".strip(),
    "en": f"""
You are a professional document question-answering assistant. Answer only from
the extractedText supplied by the user and never introduce outside knowledge.

Rules:
1. If the document clearly contains the answer, answer in detail.
2. If the document does not contain enough information, reply exactly:
   "{NOT_ENOUGH_INFORMATION['en']}"
3. When you cannot answer, suggest which keywords or sections the user should
   look for in the document.

Answer in English.
""".strip(),
}

_USER_TEMPLATES: dict[OutputLanguage, dict[str, str]] = {
    "zh": {
        "summary": "{length_instruction}\n\nextractedText:\n{text}",
        "chunk": "这是文档的第 {current}/{total} 部分，请总结：\n\n{text}",
        "merge": "{length_instruction}\n\n以下是文档各部分的摘要，请合并成一个完整的总结：\n\n{text}",
        "qa": "问题：{question}\n\nextractedText:\n{text}",
    },
    "en": {
        "summary": "{length_instruction}\n\nextractedText:\n{text}",
        "chunk": "This is part {current}/{total} of the document. Summarize it:\n\n{text}",
        "merge": (
            "{length_instruction}\n\nBelow are summaries of each part of the document. "
            "Merge them into one complete summary:\n\n{text}"
        ),
        "qa": "Question: {question}\n\nextractedText:\n{text}",
    },
}

_ROLE_BY_TYPE = {"system": "system", "human": "user"}


@dataclass(frozen=True, slots=True)
class PromptSet:
    """Chat prompt templates for one output language."""

    summary: ChatPromptTemplate
    chunk: ChatPromptTemplate
    merge: ChatPromptTemplate
    qa: ChatPromptTemplate


def _build(language: OutputLanguage) -> PromptSet:
    user = _USER_TEMPLATES[language]
    summary_system = _SUMMARY_SYSTEM_PROMPT[language]
    return PromptSet(
        summary=ChatPromptTemplate.from_messages(
            [("system", summary_system), ("human", user["summary"])]
        ),
        chunk=ChatPromptTemplate.from_messages(
            [("system", _CHUNK_SYSTEM_PROMPT[language]), ("human", user["chunk"])]
        ),
        merge=ChatPromptTemplate.from_messages(
            [("system", summary_system), ("human", user["merge"])]
        ),
        qa=ChatPromptTemplate.from_messages(
            [("system", _QA_SYSTEM_PROMPT[language]), ("human", user["qa"])]
        ),
    )


PROMPTS: dict[OutputLanguage, PromptSet] = {"zh": _build("zh"), "en": _build("en")}


def summary_messages(
    language: OutputLanguage, length: SummaryLength, text: str
) -> list[ChatMessage]:
    return _render(
        PROMPTS[language].summary,
        length_instruction=LENGTH_INSTRUCTIONS[language][length],
        text=text,
    )


def chunk_summary_messages(
    language: OutputLanguage, current: int, total: int, text: str
) -> list[ChatMessage]:
    return _render(PROMPTS[language].chunk, current=current, total=total, text=text)


def merge_messages(
    language: OutputLanguage, length: SummaryLength, partial_summaries: list[str]
) -> list[ChatMessage]:
    return _render(
        PROMPTS[language].merge,
        length_instruction=LENGTH_INSTRUCTIONS[language][length],
        text=CHUNK_DELIMITER.join(partial_summaries),
    )


def qa_messages(language: OutputLanguage, question: str, context: str) -> list[ChatMessage]:
    return _render(PROMPTS[language].qa, question=question, text=context)


def probe_messages() -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content="You are a helpful assistant."),
        ChatMessage(role="user", content='Say "OK" if you can read this.'),
    ]


def _render(template: ChatPromptTemplate, **values: object) -> list[ChatMessage]:
    return _to_chat_messages(template.format_messages(**values))


def _to_chat_messages(messages: list[BaseMessage]) -> list[ChatMessage]:
    converted: list[ChatMessage] = []
    for message in messages:
        role = _ROLE_BY_TYPE.get(message.type)
        if role is None:
            raise ValueError(f"Unsupported prompt message type: {message.type}")
        converted.append(ChatMessage(role=role, content=str(message.content)))
    return converted

import json

import httpx

from doc_assistant.config import ChunkingConfig, EndpointConfig
from doc_assistant.ingest.chunker import BoundaryChunker
from doc_assistant.llm.gateway import CompletionGateway
from doc_assistant.orchestration.qa import QuestionAnsweringOrchestrator
from doc_assistant.orchestration.summarizer import SummarizationOrchestrator


def _provider(bodies: list[dict]) -> httpx.MockTransport:
    def _handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(
            200, json={"choices": [{"message": {"content": f"part {len(bodies)}"}}]}
        )

    return httpx.MockTransport(_handler)


def test_summary_pipeline_over_http_keeps_chunk_order() -> None:
    bodies: list[dict] = []
    gateway = CompletionGateway(transport=_provider(bodies))
    chunker = BoundaryChunker(ChunkingConfig(chunk_size=120))
    orchestrator = SummarizationOrchestrator(gateway, chunker)
    sections = [f"Section {i}. " + "detail " * 12 for i in range(3)]
    config = EndpointConfig(api_key="sk-test", base_url="https://llm.test", output_language="en")
    progress: list[tuple[int, int]] = []

    result = orchestrator.summarize(
        "\n\n".join(sections), config, "short", on_progress=lambda c, t: progress.append((c, t))
    )

    assert progress == [(1, 3), (2, 3), (3, 3)]
    assert len(bodies) == 4
    for i in range(3):
        assert f"Section {i}." in bodies[i]["messages"][1]["content"]
    assert "part 1\n\n---\n\npart 2\n\n---\n\npart 3" in bodies[3]["messages"][1]["content"]
    assert result.content == "part 4"


def test_qa_pipeline_sends_only_relevant_chunks() -> None:
    bodies: list[dict] = []
    gateway = CompletionGateway(transport=_provider(bodies))
    orchestrator = QuestionAnsweringOrchestrator(gateway, config=ChunkingConfig(chunk_size=120))
    sections = [
        "Holidays are listed in the handbook.".ljust(100, "~"),
        "Encryption keys rotate every ninety days.".ljust(100, "~"),
        "Parking is free on weekends.".ljust(100, "~"),
        "Encryption at rest uses AES; encryption in transit uses TLS.".ljust(100, "~"),
        "The cafeteria opens at eight.".ljust(100, "~"),
    ]
    config = EndpointConfig(api_key="sk-test", base_url="https://llm.test")

    orchestrator.ask("\n\n".join(sections), "Which encryption is used?", config)

    assert len(bodies) == 1
    user = bodies[0]["messages"][1]["content"]
    # "is" also matches inside "listed", so the holiday chunk ties the key-rotation one.
    assert user.count("\n\n---\n\n") == 2
    assert user.index("AES") < user.index("Holidays") < user.index("ninety days")
    assert "Parking" not in user
    assert "cafeteria" not in user

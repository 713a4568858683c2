"""HTTP gateway to OpenAI-compatible chat completion endpoints."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from doc_assistant.config import EndpointConfig
from doc_assistant.errors import CompletionError, ErrorKind
from doc_assistant.llm.prompts import probe_messages
from doc_assistant.obs.tracing import CallTrace, Timer
from doc_assistant.types import ChatMessage, CompletionResult, TokenUsage

logger = logging.getLogger(__name__)

_UNAVAILABLE_STATUSES = frozenset({500, 502, 503})
_PROBE_TIMEOUT_SECONDS = 15.0
_PROBE_MAX_TOKENS = 10


class CompletionClient(Protocol):
    """Minimal completion contract used by the orchestrators."""

    def complete(
        self, config: EndpointConfig, messages: list[ChatMessage]
    ) -> CompletionResult:
        """Run one chat completion call."""


@dataclass(frozen=True, slots=True)
class ConnectionCheck:
    success: bool
    message: str


class CompletionGateway:
    """Sends one chat completion request per call and maps every failure.

    The gateway is stateless apart from its optional observer, so one instance
    can serve a summarization and a question concurrently. Each call runs its
    own `httpx.AsyncClient` on a private event loop under a single deadline of
    `config.timeout` seconds; the request is cancelled when the deadline passes
    and the client is closed on every path. No retries are attempted.

    `complete` is synchronous and must not be called from a running event loop.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        observer: Callable[[CallTrace], None] | None = None,
    ) -> None:
        self._transport = transport
        self._observer = observer

    def set_observer(self, observer: Callable[[CallTrace], None] | None) -> None:
        """Set an optional callback invoked after each successful call."""
        self._observer = observer

    def complete(
        self, config: EndpointConfig, messages: list[ChatMessage]
    ) -> CompletionResult:
        if not config.has_api_key:
            raise CompletionError(
                ErrorKind.MISSING_CREDENTIAL,
                "No API key configured: add one in settings before running the model",
            )

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {config.api_key}",
            **config.headers,
        }
        payload = {
            "model": config.model,
            "messages": [message.as_payload() for message in messages],
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
        }

        logger.info(
            "Completion request model=%s messages=%d chars=%d",
            config.model,
            len(messages),
            sum(len(message.content) for message in messages),
        )
        try:
            with Timer() as timer:
                response = asyncio.run(self._post(config, headers, payload))
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            logger.warning("Completion request timed out after %ss", config.timeout)
            raise CompletionError(
                ErrorKind.TIMEOUT,
                f"Request timed out: no response within {config.timeout:g} seconds",
            ) from exc
        except httpx.TransportError as exc:
            logger.warning("Completion request failed to connect: %s", exc)
            raise CompletionError(
                ErrorKind.CONNECTION_FAILURE,
                f"Could not reach {config.endpoint_url}: {exc}",
            ) from exc

        if not response.is_success:
            error = _http_error(response, config)
            logger.warning(
                "Completion request failed status=%d kind=%s",
                response.status_code,
                error.kind.value,
            )
            raise error

        result = _parse_success(response, config, timer.elapsed_ms)
        if self._observer is not None:
            usage = result.usage
            self._observer(
                CallTrace(
                    model=config.model,
                    prompt_tokens=usage.prompt_tokens if usage else 0,
                    completion_tokens=usage.completion_tokens if usage else 0,
                    latency_ms=timer.elapsed_ms,
                )
            )
        return result

    async def _post(
        self, config: EndpointConfig, headers: dict[str, str], payload: dict[str, Any]
    ) -> httpx.Response:
        # httpx timeouts apply per connect/read step; wait_for bounds the whole call.
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout), transport=self._transport
        ) as client:
            return await asyncio.wait_for(
                client.post(config.endpoint_url, headers=headers, json=payload),
                timeout=config.timeout,
            )

    def check_connection(self, config: EndpointConfig) -> ConnectionCheck:
        """Send a tiny probe request to validate the endpoint settings."""

        probe = config.model_copy(
            update={"timeout": _PROBE_TIMEOUT_SECONDS, "max_tokens": _PROBE_MAX_TOKENS}
        )
        try:
            self.complete(probe, probe_messages())
        except CompletionError as exc:
            return ConnectionCheck(success=False, message=exc.message)
        return ConnectionCheck(
            success=True, message="Connection succeeded: the API configuration is valid."
        )


def _http_error(response: httpx.Response, config: EndpointConfig) -> CompletionError:
    status = response.status_code
    if status == 401:
        return CompletionError(
            ErrorKind.AUTH_FAILURE,
            "Authentication failed: check that the API key is correct",
            status_code=status,
        )
    if status == 429:
        return CompletionError(
            ErrorKind.RATE_LIMITED,
            "Too many requests: the rate limit was hit, retry later",
            status_code=status,
        )
    if status == 404:
        return CompletionError(
            ErrorKind.MODEL_NOT_FOUND,
            f"Model not found: {config.model}, choose a valid model in settings",
            status_code=status,
        )
    if status in _UNAVAILABLE_STATUSES:
        return CompletionError(
            ErrorKind.SERVICE_UNAVAILABLE,
            "Service temporarily unavailable, retry later",
            status_code=status,
        )
    return CompletionError(
        ErrorKind.HTTP_FAILURE,
        _provider_message(response) or f"Request failed ({status})",
        status_code=status,
    )


def _provider_message(response: httpx.Response) -> str | None:
    try:
        data: Any = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    return None


def _parse_success(
    response: httpx.Response, config: EndpointConfig, latency_ms: float
) -> CompletionResult:
    try:
        data: Any = response.json()
    except ValueError as exc:
        raise CompletionError(
            ErrorKind.EMPTY_RESPONSE, "API returned a response that is not JSON"
        ) from exc

    content = _first_choice_content(data)
    if not content:
        raise CompletionError(ErrorKind.EMPTY_RESPONSE, "API returned an empty response")

    return CompletionResult(
        content=content,
        usage=_parse_usage(data.get("usage")),
        model=str(data.get("model") or config.model),
        latency_ms=latency_ms,
    )


def _first_choice_content(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content if isinstance(content, str) else ""


def _parse_usage(usage: Any) -> TokenUsage | None:
    if not isinstance(usage, dict):
        return None
    try:
        return TokenUsage(
            prompt_tokens=int(usage.get("prompt_tokens") or 0),
            completion_tokens=int(usage.get("completion_tokens") or 0),
        )
    except (TypeError, ValueError):
        logger.warning("Ignoring unparsable usage block: %r", usage)
        return None

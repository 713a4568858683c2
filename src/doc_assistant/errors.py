"""Typed failures surfaced by the completion pipeline."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    TIMEOUT = "timeout"
    AUTH_FAILURE = "auth_failure"
    RATE_LIMITED = "rate_limited"
    MODEL_NOT_FOUND = "model_not_found"
    SERVICE_UNAVAILABLE = "service_unavailable"
    HTTP_FAILURE = "http_failure"
    EMPTY_RESPONSE = "empty_response"
    INVALID_INPUT = "invalid_input"
    CONNECTION_FAILURE = "connection_failure"


_RETRY_LATER = frozenset(
    {
        ErrorKind.TIMEOUT,
        ErrorKind.RATE_LIMITED,
        ErrorKind.SERVICE_UNAVAILABLE,
        ErrorKind.CONNECTION_FAILURE,
    }
)


class CompletionError(Exception):
    """A summarize/ask failure with a distinguishable kind.

    Nothing in the package retries. `retryable` only tells the caller whether a
    manual retry later is likely to help.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.kind in _RETRY_LATER

    def __repr__(self) -> str:
        return f"CompletionError(kind={self.kind.value!r}, message={self.message!r})"

    @classmethod
    def invalid_input(cls, message: str) -> "CompletionError":
        return cls(ErrorKind.INVALID_INPUT, message)

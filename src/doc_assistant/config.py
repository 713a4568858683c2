"""Configuration models for the document assistant."""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Provider = Literal["openai-compatible", "gemini", "anthropic", "custom"]
OutputLanguage = Literal["zh", "en"]

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_BASE_URL = "https://api.openai.com"

PROVIDER_PRESETS: dict[str, dict[str, str]] = {
    "openai-compatible": {"base_url": DEFAULT_BASE_URL, "model": DEFAULT_MODEL},
    "gemini": {
        "base_url": "https://generativelanguage.googleapis.com",
        "model": "gemini-1.5-flash",
    },
    "anthropic": {
        "base_url": "https://api.anthropic.com",
        "model": "claude-3-haiku-20240307",
    },
    "custom": {"base_url": "", "model": ""},
}


class ChunkingConfig(BaseModel):
    """Configures boundary-aware chunking and QA context size."""

    chunk_size: int = Field(default=50_000, ge=1)
    qa_max_chunks: int = Field(default=3, ge=1)


class EndpointConfig(BaseModel):
    """Connection settings for an OpenAI-compatible chat completion endpoint.

    Instances are immutable. Orchestrators take a deep copy at the start of each
    invocation so a configuration saved mid-run never leaks into an in-flight
    multi-call summarization.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    provider: Provider = "openai-compatible"
    model: str = DEFAULT_MODEL
    models: list[str] = Field(default_factory=list)
    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: float = Field(default=60.0, gt=0.0)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=4096, ge=1)
    output_language: OutputLanguage = "zh"

    @model_validator(mode="before")
    @classmethod
    def _fill_models(cls, data: Any) -> Any:
        # Older saved configs only carry a single `model`.
        if isinstance(data, dict) and not data.get("models"):
            model = data.get("model") or DEFAULT_MODEL
            data = {**data, "models": [model]}
        return data

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key.strip())

    @property
    def endpoint_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/v1/chat/completions"

    def with_provider(self, provider: Provider) -> "EndpointConfig":
        """Return a copy switched to `provider` with its preset URL and model."""

        preset = PROVIDER_PRESETS[provider]
        model = preset["model"]
        return self.model_copy(
            update={
                "provider": provider,
                "base_url": preset["base_url"],
                "model": model,
                "models": [model] if model else list(self.models),
            }
        )

    def masked(self) -> dict[str, Any]:
        """Dump the config with the API key and header values redacted."""

        payload = self.model_dump()
        payload["api_key"] = _mask_secret(self.api_key)
        payload["headers"] = {name: _mask_secret(value) for name, value in self.headers.items()}
        return payload

    @classmethod
    def from_env(cls) -> "EndpointConfig":
        overrides: dict[str, Any] = {}
        api_key = os.getenv("DOC_ASSISTANT_API_KEY") or os.getenv("OPENAI_API_KEY")
        if api_key:
            overrides["api_key"] = api_key
        base_url = os.getenv("DOC_ASSISTANT_BASE_URL")
        if base_url:
            overrides["base_url"] = base_url
        model = os.getenv("DOC_ASSISTANT_MODEL")
        if model:
            overrides["model"] = model
        return cls.model_validate(overrides)


def _mask_secret(value: str) -> str:
    if len(value) > 8:
        return f"{value[:3]}...{value[-4:]}"
    return "***" if value else ""

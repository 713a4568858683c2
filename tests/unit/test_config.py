import pytest
from pydantic import ValidationError

from doc_assistant.config import PROVIDER_PRESETS, EndpointConfig


def test_defaults() -> None:
    config = EndpointConfig()

    assert config.provider == "openai-compatible"
    assert config.model == "gpt-4o-mini"
    assert config.models == ["gpt-4o-mini"]
    assert config.base_url == "https://api.openai.com"
    assert config.timeout == 60
    assert config.temperature == 0.7
    assert config.max_tokens == 4096
    assert config.output_language == "zh"
    assert config.has_api_key is False


def test_models_default_to_the_selected_model() -> None:
    assert EndpointConfig(model="custom-1").models == ["custom-1"]
    assert EndpointConfig(model="a", models=["a", "b"]).models == ["a", "b"]


def test_endpoint_url_strips_trailing_slash() -> None:
    assert EndpointConfig(base_url="https://x.test/").endpoint_url == "https://x.test/v1/chat/completions"


def test_config_is_immutable_and_validated() -> None:
    config = EndpointConfig()

    with pytest.raises(ValidationError):
        config.model = "other"
    with pytest.raises(ValidationError):
        EndpointConfig(timeout=0)
    with pytest.raises(ValidationError):
        EndpointConfig(output_language="fr")


def test_with_provider_applies_preset() -> None:
    config = EndpointConfig(api_key="sk-1").with_provider("gemini")

    assert config.provider == "gemini"
    assert config.base_url == PROVIDER_PRESETS["gemini"]["base_url"]
    assert config.model == "gemini-1.5-flash"
    assert config.api_key == "sk-1"


def test_masked_hides_api_key() -> None:
    masked = EndpointConfig(api_key="sk-abcdefghijkl").masked()

    assert masked["api_key"] == "sk-...ijkl"
    assert EndpointConfig().masked()["api_key"] == ""


def test_masked_hides_extra_header_values() -> None:
    config = EndpointConfig(headers={"X-Provider-Token": "tok-0123456789", "X-Org": "acme"})

    masked = config.masked()

    assert masked["headers"] == {"X-Provider-Token": "tok...6789", "X-Org": "***"}
    assert config.headers["X-Provider-Token"] == "tok-0123456789"


def test_from_env(monkeypatch) -> None:
    monkeypatch.delenv("DOC_ASSISTANT_API_KEY", raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("DOC_ASSISTANT_MODEL", "env-model")
    monkeypatch.delenv("DOC_ASSISTANT_BASE_URL", raising=False)

    config = EndpointConfig.from_env()

    assert config.api_key == "sk-env"
    assert config.model == "env-model"
    assert config.models == ["env-model"]

from __future__ import annotations

import pytest

from codezip_analyst.services.llm_providers import (
    GeminiProvider,
    LLMError,
    LLMProvider,
    ServiceUnavailableError,
)


class MockLLMProvider(LLMProvider):
    """Mock provider for testing abstract base class."""

    def __init__(self) -> None:
        self.last_prompt: str | None = None

    def send_prompt(self, prompt: str, config: dict) -> str:
        self.last_prompt = prompt
        return f"Mock response to: {prompt}"


class _FakeResponse:
    def __init__(self, text: str | None) -> None:
        self.text = text


def _install_fake_client(monkeypatch: pytest.MonkeyPatch, models: object | None = None) -> list:
    """Replace genai.Client and record constructor kwargs."""
    created: list = []

    class _FakeClient:
        def __init__(self, **kwargs: object) -> None:
            created.append(kwargs)
            self.models = models

    import google.genai as _genai

    monkeypatch.setattr(_genai, "Client", _FakeClient, raising=True)
    return created


@pytest.fixture
def gemini_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.delenv("LLM_MODEL", raising=False)
    monkeypatch.delenv("LLM_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("LLM_THINKING_BUDGET", raising=False)


def test_generate_llm_config_with_all_parameters() -> None:
    """Test config generation with all parameters set."""
    provider = MockLLMProvider()
    config = provider.generate_llm_config(temperature=0.5, max_tokens=100, seed=42)

    assert config == {"temperature": 0.5, "max_tokens": 100, "seed": 42}


def test_generate_llm_config_with_no_parameters() -> None:
    """Test config generation with all parameters as None."""
    provider = MockLLMProvider()
    config = provider.generate_llm_config(temperature=None, max_tokens=None, seed=None)

    assert config == {}


def test_default_structured_prompt_embeds_schema() -> None:
    """Providers without schema support get the schema as an instruction."""
    provider = MockLLMProvider()

    provider.send_structured_prompt("Analyze", {"type": "OBJECT"}, {})

    assert provider.last_prompt is not None
    assert provider.last_prompt.startswith("Analyze")
    assert '"type": "OBJECT"' in provider.last_prompt


def test_error_hierarchy() -> None:
    assert issubclass(ServiceUnavailableError, LLMError)
    assert issubclass(LLMError, RuntimeError)


def test_gemini_initialization_success(
    monkeypatch: pytest.MonkeyPatch, gemini_env: None
) -> None:
    """Test successful initialization with API key and timeout."""
    monkeypatch.setenv("LLM_MODEL", "gemini-test-model")
    monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "30")
    created = _install_fake_client(monkeypatch)

    provider = GeminiProvider()

    assert provider.api_key == "test-key"
    assert provider.model == "gemini-test-model"
    assert created[0]["api_key"] == "test-key"
    assert created[0]["http_options"].timeout == 30000


def test_gemini_initialization_default_model(
    monkeypatch: pytest.MonkeyPatch, gemini_env: None
) -> None:
    """Test that default model is used when LLM_MODEL is not set."""
    _install_fake_client(monkeypatch)

    provider = GeminiProvider()

    assert provider.model == "gemini-3-pro-preview"
    assert provider.thinking_budget == 20000


def test_gemini_initialization_missing_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test initialization fails without API key."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    with pytest.raises(ServiceUnavailableError, match="Missing GEMINI_API_KEY"):
        GeminiProvider()


def test_gemini_invalid_timeout(monkeypatch: pytest.MonkeyPatch, gemini_env: None) -> None:
    monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "soon")
    _install_fake_client(monkeypatch)

    with pytest.raises(LLMError, match="LLM_TIMEOUT_SECONDS"):
        GeminiProvider()


def test_gemini_generate_llm_config_maps_max_tokens(
    monkeypatch: pytest.MonkeyPatch, gemini_env: None
) -> None:
    """Test that max_tokens is mapped to max_output_tokens for Gemini."""
    _install_fake_client(monkeypatch)

    provider = GeminiProvider()
    config = provider.generate_llm_config(temperature=0.8, max_tokens=200, seed=123)

    assert config == {"temperature": 0.8, "max_output_tokens": 200, "seed": 123}


def test_gemini_send_prompt_success(monkeypatch: pytest.MonkeyPatch, gemini_env: None) -> None:
    """Test successful prompt sending and response."""

    class _FakeModels:
        def generate_content(self, *, model: str, contents: str, config: dict) -> _FakeResponse:
            return _FakeResponse("  Test response from Gemini  ")

    _install_fake_client(monkeypatch, _FakeModels())

    provider = GeminiProvider()
    response = provider.send_prompt("Test prompt", {"temperature": 0.7})

    assert response == "Test response from Gemini"


def test_gemini_send_structured_prompt_sets_schema(
    monkeypatch: pytest.MonkeyPatch, gemini_env: None
) -> None:
    """Structured prompts request JSON output with the given schema."""
    calls: list[dict] = []

    class _FakeModels:
        def generate_content(self, *, model: str, contents: str, config: dict) -> _FakeResponse:
            calls.append({"model": model, "contents": contents, "config": config})
            return _FakeResponse('{"ok": true}')

    _install_fake_client(monkeypatch, _FakeModels())
    schema = {"type": "OBJECT", "properties": {}}

    provider = GeminiProvider()
    response = provider.send_structured_prompt("Analyze", schema, {"temperature": 0.2})

    assert response == '{"ok": true}'
    (call,) = calls
    assert call["model"] == "gemini-3-pro-preview"
    assert call["contents"] == "Analyze"
    assert call["config"] == {
        "temperature": 0.2,
        "response_mime_type": "application/json",
        "response_schema": schema,
        "thinking_config": {"thinking_budget": 20000},
    }


def test_gemini_thinking_budget_can_be_disabled(
    monkeypatch: pytest.MonkeyPatch, gemini_env: None
) -> None:
    monkeypatch.setenv("LLM_THINKING_BUDGET", "0")
    configs: list[dict] = []

    class _FakeModels:
        def generate_content(self, *, model: str, contents: str, config: dict) -> _FakeResponse:
            configs.append(config)
            return _FakeResponse("{}")

    _install_fake_client(monkeypatch, _FakeModels())

    GeminiProvider().send_structured_prompt("Analyze", {}, {})

    assert "thinking_config" not in configs[0]


def test_gemini_send_prompt_api_failure(monkeypatch: pytest.MonkeyPatch, gemini_env: None) -> None:
    """Test that API failures are wrapped in ServiceUnavailableError."""
    upstream = RuntimeError("API rate limit exceeded")

    class _FakeModels:
        def generate_content(self, *, model: str, contents: str, config: dict) -> None:
            raise upstream

    _install_fake_client(monkeypatch, _FakeModels())

    provider = GeminiProvider()
    with pytest.raises(ServiceUnavailableError, match="Gemini API call failed.*rate limit") as info:
        provider.send_structured_prompt("Test prompt", {}, {})

    assert info.value.__cause__ is upstream


def test_gemini_send_prompt_empty_response(
    monkeypatch: pytest.MonkeyPatch, gemini_env: None
) -> None:
    """Test handling of empty response from API."""

    class _FakeModels:
        def generate_content(self, *, model: str, contents: str, config: dict) -> _FakeResponse:
            return _FakeResponse(None)

    _install_fake_client(monkeypatch, _FakeModels())

    assert GeminiProvider().send_prompt("Test prompt", {}) == ""

from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from typing import Any

from dotenv import load_dotenv

"""LLM provider implementations."""

# Load environment variables for LLM API keys (GEMINI_API_KEY, LLM_MODEL, etc.)
load_dotenv()

DEFAULT_GEMINI_MODEL = "gemini-3-pro-preview"
DEFAULT_TIMEOUT_SECONDS = 120
DEFAULT_THINKING_BUDGET = 20000


class LLMError(RuntimeError):
    """Raised when LLM service cannot be used or fails."""


class ServiceUnavailableError(LLMError):
    """Raised when a transport or service-side failure prevents a response.

    Covers network errors, non-success statuses, timeouts, rate limits and
    missing or rejected credentials. The upstream exception is chained as
    ``__cause__``.
    """


class ResponseContractViolationError(LLMError):
    """Raised when the service responds with data that does not match the schema."""


def _read_int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise LLMError(f"{name} must be an integer, got {raw!r}") from exc


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    def generate_llm_config(
        self,
        temperature: float | None,
        max_tokens: int | None,
        seed: int | None,
    ) -> dict:
        """Generate llm configs

        Args:
            temperature: Controls randomness
            max_tokens: Maximum response length
            seed: Random seed for reproducibility

        Returns:
            Configuration dictionary with common parameters
        """
        config = {}

        if temperature is not None:
            config["temperature"] = temperature
        if max_tokens is not None:
            config["max_tokens"] = max_tokens
        if seed is not None:
            config["seed"] = seed

        return config

    @abstractmethod
    def send_prompt(self, prompt: str, config: dict) -> str:
        """Send a prompt to the LLM and return the text response.

        Args:
            prompt: The full prompt string to send to the LLM.
            config: Configuration dictionary for the LLM request.

        Returns:
            The text response from the LLM.
        """

    def send_structured_prompt(
        self, prompt: str, response_schema: dict[str, Any], config: dict
    ) -> str:
        """Send a prompt that must be answered with JSON matching ``response_schema``.

        Providers without native schema support fall back to a plain prompt
        carrying the schema as an instruction. The returned text is not
        validated here.

        Args:
            prompt: The full prompt string.
            response_schema: Object schema the response must follow.
            config: Configuration dictionary for the LLM request.

        Returns:
            The raw response text, expected to be a JSON document.
        """
        instructions = (
            f"{prompt}\n\nRespond only with a JSON object matching this schema:\n"
            f"{json.dumps(response_schema, indent=2)}"
        )
        return self.send_prompt(instructions, config)


class GeminiProvider(LLMProvider):
    """Gemini implementation."""

    def __init__(self) -> None:
        """Initialize Gemini provider with API key from environment.

        Note: Environment variables are loaded via load_dotenv() at package initialization.
        """
        from google import genai
        from google.genai import types

        self.api_key = os.environ.get("GEMINI_API_KEY")
        if not self.api_key:
            raise ServiceUnavailableError("Missing GEMINI_API_KEY environment variable")

        self.model = os.environ.get("LLM_MODEL", DEFAULT_GEMINI_MODEL)
        self.timeout_seconds = _read_int_env("LLM_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        self.thinking_budget = _read_int_env("LLM_THINKING_BUDGET", DEFAULT_THINKING_BUDGET)
        self.client = genai.Client(
            api_key=self.api_key,
            http_options=types.HttpOptions(timeout=self.timeout_seconds * 1000),
        )

    def generate_llm_config(
        self,
        temperature: float | None,
        max_tokens: int | None,
        seed: int | None,
    ) -> dict:
        """Generate Gemini-specific configuration dictionary."""
        config = super().generate_llm_config(temperature, max_tokens, seed)

        # Map common 'max_tokens' to Gemini's 'max_output_tokens'
        if "max_tokens" in config:
            config["max_output_tokens"] = config.pop("max_tokens")

        return config

    def _generate(self, prompt: str, config: dict) -> str:
        try:
            response = self.client.models.generate_content(
                model=self.model, contents=prompt, config=config
            )
        except Exception as e:
            raise ServiceUnavailableError(f"Gemini API call failed: {e}") from e
        return (response.text or "").strip()

    def send_prompt(self, prompt: str, config: dict) -> str:
        """Send prompt to Gemini and return response text.

        Args:
            prompt: The full prompt string.
            config: Configuration dictionary for the Gemini API.

        Returns:
            The response text from Gemini.
        """
        return self._generate(prompt, config)

    def send_structured_prompt(
        self, prompt: str, response_schema: dict[str, Any], config: dict
    ) -> str:
        """Send prompt to Gemini with a JSON response schema."""
        structured_config = {
            **config,
            "response_mime_type": "application/json",
            "response_schema": response_schema,
        }
        if self.thinking_budget > 0:
            structured_config["thinking_config"] = {"thinking_budget": self.thinking_budget}
        return self._generate(prompt, structured_config)

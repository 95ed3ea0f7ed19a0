from __future__ import annotations

import os
from typing import Any

from codezip_analyst.services.llm_providers import (
    GeminiProvider,
    LLMError,
    LLMProvider,
)

"""LLM service with multi-provider support. (Gemini, OpenAI, Anthropic, etc.)"""


class LLMService:
    def __init__(self, provider: LLMProvider | None = None) -> None:
        """Initialize LLM service with a specific provider.
        Args:
            provider: LLM provider instance
        """
        self.provider = provider or LLMService._get_default_llm_provider_from_env()

    @staticmethod
    def _get_default_llm_provider_from_env() -> LLMProvider:
        """Get the configured LLM provider.

        Returns:
            An instance of the configured LLM provider.
        """
        provider_name = os.environ.get("LLM_PROVIDER", "gemini").lower()

        if provider_name == "gemini":
            return GeminiProvider()
        raise LLMError(f"Unknown LLM provider: {provider_name}.")

    def generate_structured_response(
        self,
        prompt: str,
        response_schema: dict[str, Any],
        temperature: float | None = None,
        max_tokens: int | None = None,
        seed: int | None = None,
    ) -> str:
        """Send a single prompt that must be answered with schema-conforming JSON.

        Args:
            prompt: The full prompt.
            response_schema: Object schema for the response.
            temperature: Controls randomness. None = provider default.
            max_tokens: Maximum response length. None = provider default.
            seed: Random seed for reproducibility (if supported by provider).

        Returns:
            The raw JSON text returned by the provider.
        """
        config = self.provider.generate_llm_config(temperature, max_tokens, seed)
        return self.provider.send_structured_prompt(prompt, response_schema, config)

"""Shared dependencies for API routes."""

from __future__ import annotations

from codezip_analyst.api.session_store import ArchiveSessionStore
from codezip_analyst.config import load_context_limits
from codezip_analyst.models.analysis import ContextLimits
from codezip_analyst.services.llm_service import LLMService

_store = ArchiveSessionStore()


def get_session_store() -> ArchiveSessionStore:
    """Return the process-wide archive session store."""
    return _store


def get_llm_service() -> LLMService | None:
    """Return the LLM service used for analyses.

    ``None`` lets the analysis client build the provider configured in the
    environment at request time, so a missing credential surfaces as a 503
    instead of failing at startup.
    """
    return None


def get_context_limits() -> ContextLimits:
    return load_context_limits()

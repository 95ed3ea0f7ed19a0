"""Codebase analysis through a single structured LLM request."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from codezip_analyst.models.analysis import AnalysisResult, ContextLimits
from codezip_analyst.models.archive import Entry
from codezip_analyst.services.context_selector import select_context
from codezip_analyst.services.llm_providers import (
    LLMError,
    ResponseContractViolationError,
    ServiceUnavailableError,
)
from codezip_analyst.services.llm_service import LLMService

logger = logging.getLogger(__name__)

ANALYSIS_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "summary": {
            "type": "STRING",
            "description": "A high-level summary of the project.",
        },
        "entryPoint": {
            "type": "STRING",
            "description": "The likely main entry point of the application.",
        },
        "dependencies": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "List of major libraries or dependencies found.",
        },
        "executionSimulation": {
            "type": "STRING",
            "description": "A detailed 'run' log or description of what happens when executed.",
        },
        "suggestions": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Improvements or bugs found during analysis.",
        },
    },
    "required": [
        "summary",
        "entryPoint",
        "dependencies",
        "executionSimulation",
        "suggestions",
    ],
}

ANALYSIS_PROMPT_TEMPLATE = """\
You are a world-class code analyst and software engineer. I have uploaded a ZIP file \
containing source code.
Here is the content of the primary files in the project:

{files_context}

Please analyze this project. Determine what it is, how it works, and "run" it in your \
simulation.
Explain what would happen if this code were executed in its appropriate environment.
Identify the main entry point and key dependencies.
Return a JSON object with the fields summary, entryPoint, dependencies, \
executionSimulation and suggestions.
"""


def build_analysis_prompt(files_context: str) -> str:
    """Embed the serialized file context into the analysis instructions."""
    return ANALYSIS_PROMPT_TEMPLATE.format(files_context=files_context)


def parse_analysis_response(text: str) -> AnalysisResult:
    """Validate the raw response text against the analysis schema.

    Args:
        text: Raw JSON text returned by the provider.

    Returns:
        AnalysisResult with fields copied verbatim from the response.

    Raises:
        ResponseContractViolationError: If the text is not JSON, is not an object,
            misses a required field, or carries a field of the wrong type.
    """
    try:
        return AnalysisResult.model_validate_json(text)
    except ValidationError as exc:
        fields = sorted(
            {".".join(str(part) for part in err["loc"]) or "<root>" for err in exc.errors()}
        )
        raise ResponseContractViolationError(
            f"Analysis response does not match the required schema ({', '.join(fields)})"
        ) from exc


def analyze_codebase(
    entries: Sequence[Entry],
    *,
    service: LLMService | None = None,
    limits: ContextLimits | None = None,
) -> AnalysisResult:
    """Analyze an extracted archive with one request to the analysis provider.

    The entry list is filtered and truncated by the context selector before
    anything is sent. Exactly one outbound request is made; failures are not
    retried.

    Args:
        entries: Full, unfiltered entry list from the archive decoder.
        service: LLM service to use. Defaults to the provider configured in
            the environment.
        limits: Context limits. Defaults to 30 files of 5000 characters.

    Returns:
        The validated AnalysisResult.

    Raises:
        ValueError: If ``entries`` is empty.
        ServiceUnavailableError: If the service could not be reached or refused the request.
        ResponseContractViolationError: If the response does not match the schema.
    """
    if not entries:
        raise ValueError("Cannot analyze an empty archive")

    context = select_context(entries, limits)
    prompt = build_analysis_prompt(context.serialize())

    if service is None:
        try:
            service = LLMService()
        except ServiceUnavailableError:
            raise
        except LLMError as exc:
            raise ServiceUnavailableError(f"Failed to initialize LLM service: {exc}") from exc

    logger.info(
        "Requesting analysis for %d files (%d dropped by file cap)",
        len(context.files),
        context.dropped_count,
    )
    try:
        text = service.generate_structured_response(prompt, ANALYSIS_RESPONSE_SCHEMA)
    except ServiceUnavailableError as exc:
        logger.warning("Analysis request failed: %s", exc.__cause__ or exc)
        raise
    except ResponseContractViolationError:
        raise
    except Exception as exc:
        logger.warning("Analysis request failed: %s", exc)
        raise ServiceUnavailableError(f"LLM API call failed: {exc}") from exc

    try:
        result = parse_analysis_response(text)
    except ResponseContractViolationError as exc:
        logger.warning("%s", exc)
        raise

    logger.info(
        "Analysis completed: %d dependencies, %d suggestions",
        len(result.dependencies),
        len(result.suggestions),
    )
    return result

"""Environment-driven configuration for the analyzer."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from codezip_analyst.models.analysis import (
    DEFAULT_MAX_CHARS_PER_FILE,
    DEFAULT_MAX_FILES,
    ContextLimits,
)

# Load environment variables (GEMINI_API_KEY, CODEZIP_MAX_FILES, etc.)
load_dotenv()

DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024
DEFAULT_MAX_EXTRACTED_BYTES = 200 * 1024 * 1024

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _read_positive_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value}")
    return value


def load_context_limits() -> ContextLimits:
    """Build context limits from ``CODEZIP_MAX_FILES`` and ``CODEZIP_MAX_CHARS_PER_FILE``.

    Returns:
        ContextLimits populated from the environment, or the defaults.

    Raises:
        ValueError: If either variable is set to a non-positive or non-integer value.
    """
    return ContextLimits(
        max_files=_read_positive_int("CODEZIP_MAX_FILES", DEFAULT_MAX_FILES),
        max_chars_per_file=_read_positive_int(
            "CODEZIP_MAX_CHARS_PER_FILE", DEFAULT_MAX_CHARS_PER_FILE
        ),
    )


def get_max_upload_bytes() -> int:
    return _read_positive_int("CODEZIP_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)


def get_max_extracted_bytes() -> int:
    """Cap on the total uncompressed size of an archive's files."""
    return _read_positive_int("CODEZIP_MAX_EXTRACTED_BYTES", DEFAULT_MAX_EXTRACTED_BYTES)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from ``LOG_LEVEL`` (default ``INFO``)."""
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)

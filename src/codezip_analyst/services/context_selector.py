"""Selection and truncation policy for the analysis context.

Decides which extracted files are sent to the analysis provider, in what
order, and how much of each. Selection is positional: the first eligible
entries in input order win, with no prioritisation by importance.

Eligibility is extension based only. Files without an extension (for example
``Makefile`` or ``Dockerfile``) are never sent, and a binary file renamed to
an allow-listed extension is sent as-is.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from codezip_analyst.models.analysis import AnalysisContext, ContextLimits
from codezip_analyst.models.archive import Entry

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS: tuple[str, ...] = (
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".json",
    ".html",
    ".css",
    ".md",
    ".txt",
    ".py",
    ".rb",
    ".go",
    ".java",
    ".c",
    ".cpp",
    ".rs",
    ".php",
)


def is_likely_text(filename: str) -> bool:
    """Return True if the filename ends with an allow-listed extension (case-insensitive)."""
    lowered = filename.lower()
    return any(lowered.endswith(ext) for ext in TEXT_EXTENSIONS)


def is_eligible(entry: Entry) -> bool:
    return not entry.is_directory and is_likely_text(entry.name)


def eligible_entries(entries: Iterable[Entry]) -> list[Entry]:
    """Filter out directories and files outside the extension allow-list."""
    return [entry for entry in entries if is_eligible(entry)]


def select_context(
    entries: Sequence[Entry], limits: ContextLimits | None = None
) -> AnalysisContext:
    """Select and truncate the entries sent for analysis.

    Args:
        entries: Full entry list, ordered by path.
        limits: File count and per-file character caps. Defaults to 30 files
            of 5000 characters each.

    Returns:
        AnalysisContext with the selected ``(path, content)`` pairs and the
        number of eligible entries dropped by the file cap.
    """
    limits = limits or ContextLimits()
    eligible = eligible_entries(entries)
    selected = eligible[: limits.max_files]
    files = tuple((entry.path, entry.content[: limits.max_chars_per_file]) for entry in selected)
    dropped = max(0, len(eligible) - limits.max_files)

    if dropped:
        logger.info(
            "Analysis context capped at %d files; %d eligible files dropped",
            limits.max_files,
            dropped,
        )
    logger.debug(
        "Selected %d of %d entries (%d eligible)", len(files), len(entries), len(eligible)
    )
    return AnalysisContext(files=files, eligible_count=len(eligible), dropped_count=dropped)


def build_context(entries: Sequence[Entry], limits: ContextLimits | None = None) -> str:
    """Select entries and serialize them into a single bounded text block."""
    return select_context(entries, limits).serialize()

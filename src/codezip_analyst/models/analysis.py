"""Data models for analysis context construction and analysis results."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MAX_FILES = 30
DEFAULT_MAX_CHARS_PER_FILE = 5000

CONTEXT_ENTRY_SEPARATOR = "\n\n---\n\n"


@dataclass(frozen=True, slots=True)
class ContextLimits:
    """Policy limits applied when building the analysis context.

    Attributes:
        max_files: Caps the number of analyzed files.
        max_chars_per_file: Caps the per-file context size in characters.
    """

    max_files: int = DEFAULT_MAX_FILES
    max_chars_per_file: int = DEFAULT_MAX_CHARS_PER_FILE

    def __post_init__(self) -> None:
        for name in ("max_files", "max_chars_per_file"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")


@dataclass(frozen=True, slots=True)
class AnalysisContext:
    """Files selected for analysis, already truncated.

    Attributes:
        files: Ordered ``(path, truncated_content)`` pairs.
        eligible_count: Number of entries that passed the eligibility filter.
        dropped_count: Eligible entries left out because of the file cap.
    """

    files: tuple[tuple[str, str], ...] = ()
    eligible_count: int = 0
    dropped_count: int = 0

    @property
    def paths(self) -> list[str]:
        return [path for path, _ in self.files]

    @property
    def truncated(self) -> bool:
        return self.dropped_count > 0

    def serialize(self) -> str:
        """Render the selected files as a single text block."""
        return CONTEXT_ENTRY_SEPARATOR.join(
            f"FILE: {path}\nCONTENT:\n{content}" for path, content in self.files
        )


class AnalysisResult(BaseModel):
    """Structured analysis returned by the analysis provider.

    Field names follow Python conventions; the wire format uses camelCase
    aliases (``entryPoint``, ``executionSimulation``), and only the aliases are
    accepted when validating.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    summary: str
    entry_point: str = Field(alias="entryPoint")
    dependencies: list[str]
    execution_simulation: str = Field(alias="executionSimulation")
    suggestions: list[str]

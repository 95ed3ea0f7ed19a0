from __future__ import annotations

from pathlib import PurePosixPath

from codezip_analyst.models.analysis import AnalysisContext, AnalysisResult
from codezip_analyst.models.archive import (
    ArchiveTooLargeError,
    DirectoryNode,
    Entry,
    FileNode,
    MalformedArchiveError,
)
from codezip_analyst.services.archive import build_tree, count_files
from codezip_analyst.services.llm_providers import (
    ResponseContractViolationError,
    ServiceUnavailableError,
)

PRIVACY_NOTICE = (
    "Running an analysis sends the paths and contents of this archive's source files "
    "(up to a fixed limit) to a third-party AI service (Google Gemini). "
    "Do not analyze archives containing secrets or data you are not allowed to share."
)

EMPTY_FILE_PLACEHOLDER = "// Empty file"

_FENCE_LANGUAGES = {
    ".ts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "jsx",
    ".json": "json",
    ".html": "html",
    ".css": "css",
    ".md": "markdown",
    ".py": "python",
    ".rb": "ruby",
    ".go": "go",
    ".java": "java",
    ".c": "c",
    ".cpp": "cpp",
    ".rs": "rust",
    ".php": "php",
}


def user_message_for(exc: BaseException) -> str:
    """Map an error to the message shown to the user.

    Upstream error details are deliberately not included.
    """
    if isinstance(exc, ArchiveTooLargeError):
        return "The ZIP file is too large to extract."
    if isinstance(exc, MalformedArchiveError):
        return "Failed to extract ZIP file. It might be corrupted."
    if isinstance(exc, ResponseContractViolationError):
        return "The analysis service returned an incomplete or malformed report. Please try again."
    if isinstance(exc, ServiceUnavailableError):
        return "The analysis service is unavailable right now. Please try again later."
    return "Something went wrong. Please try again."


def _tree_lines(node: DirectoryNode | FileNode, depth: int, out: list[str]) -> None:
    indent = "  " * depth
    if isinstance(node, FileNode):
        out.append(f"{indent}- {node.name}")
        return
    if node.name:
        out.append(f"{indent}- **{node.name}/**")
    for child in node.children:
        _tree_lines(child, depth + 1 if node.name else depth, out)


def render_file_listing(entries: list[Entry]) -> str:
    parts: list[str] = [f"# Files ({count_files(entries)} files)\n"]
    if not entries:
        parts.append("(Archive is empty)")
        return "\n".join(parts)
    lines: list[str] = []
    _tree_lines(build_tree(entries), 0, lines)
    parts.extend(lines)
    return "\n".join(parts)


def render_file_preview(entry: Entry) -> str:
    """Render a file's content as a fenced Markdown code block."""
    if entry.is_directory:
        return f"## {entry.path}/\n\n(Directory)"
    language = _FENCE_LANGUAGES.get(PurePosixPath(entry.name).suffix.lower(), "")
    content = entry.content or EMPTY_FILE_PLACEHOLDER
    fence = "````" if "```" in content else "```"
    return f"## {entry.path}\n\n{fence}{language}\n{content}\n{fence}"


def render_context_summary(context: AnalysisContext) -> str:
    parts = [f"Files selected for analysis: {len(context.files)} of {context.eligible_count}"]
    if context.truncated:
        parts.append(f"({context.dropped_count} eligible files not sent)")
    return " ".join(parts)


def render_analysis_markdown(result: AnalysisResult) -> str:
    parts: list[str] = ["# Analysis Report\n"]

    parts.append("## Summary")
    parts.append(result.summary)

    parts.append("\n## Entry Point")
    parts.append(f"`{result.entry_point}`")

    parts.append("\n## Dependencies")
    if result.dependencies:
        parts.extend(f"- {dep}" for dep in result.dependencies)
    else:
        parts.append("- None detected")

    parts.append("\n## Execution Simulation")
    parts.append("```")
    parts.append(result.execution_simulation)
    parts.append("```")

    parts.append("\n## Suggestions")
    if result.suggestions:
        parts.extend(f"- {suggestion}" for suggestion in result.suggestions)
    else:
        parts.append("- None")

    return "\n".join(parts)

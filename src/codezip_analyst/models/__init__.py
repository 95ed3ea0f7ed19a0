"""Data models and type definitions"""

from codezip_analyst.models.analysis import (
    AnalysisContext,
    AnalysisResult,
    ContextLimits,
)
from codezip_analyst.models.archive import (
    ArchiveTooLargeError,
    DirectoryNode,
    Entry,
    FileNode,
    MalformedArchiveError,
)

__all__ = [
    "AnalysisContext",
    "AnalysisResult",
    "ArchiveTooLargeError",
    "ContextLimits",
    "DirectoryNode",
    "Entry",
    "FileNode",
    "MalformedArchiveError",
]

"""Data models for archive entries and the browsable file tree."""

from __future__ import annotations

from dataclasses import dataclass, field


class MalformedArchiveError(Exception):
    """Raised when the provided bytes cannot be decoded as a ZIP archive."""


class ArchiveTooLargeError(MalformedArchiveError):
    """Raised when an archive would decompress to more than the configured limit."""


@dataclass(frozen=True, slots=True)
class Entry:
    """A single file or directory record extracted from an uploaded archive.

    Attributes:
        name: Base name of the file or directory.
        path: Archive-relative path, forward-slash separated.
        content: Decoded text content. Always empty for directories.
        is_directory: Whether the entry is a directory marker.
    """

    name: str
    path: str
    content: str = ""
    is_directory: bool = False

    def __post_init__(self) -> None:
        if self.is_directory and self.content:
            raise ValueError(f"Directory entry {self.path!r} cannot carry content")


@dataclass(slots=True)
class FileNode:
    """Represents a file in the directory tree.

    Attributes:
        name: Name of the file.
        path: Full path from root of the archive.
    """

    name: str
    path: str


@dataclass(slots=True)
class DirectoryNode:
    """Represents a directory in the tree structure.

    Attributes:
        name: Name of the directory.
        path: Full path from root of the archive.
        children: List of child nodes (files and subdirectories).
    """

    name: str
    path: str
    children: list[FileNode | DirectoryNode] = field(default_factory=list)

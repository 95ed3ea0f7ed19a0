"""Archive decoding and browsing helpers."""

from __future__ import annotations

import io
import logging
import zlib
from collections.abc import Iterable, Sequence
from pathlib import Path
from zipfile import BadZipFile, ZipFile

from codezip_analyst.config import get_max_extracted_bytes
from codezip_analyst.models.archive import (
    ArchiveTooLargeError,
    DirectoryNode,
    Entry,
    FileNode,
    MalformedArchiveError,
)

logger = logging.getLogger(__name__)


def _ensure_zip_file(path: Path) -> None:
    """Validate that the given path points at an existing ``.zip`` file.

    Args:
        path: Path to validate.

    Raises:
        MalformedArchiveError: If the file has the wrong suffix or doesn't exist.
    """
    if path.suffix.lower() != ".zip" or not path.is_file():
        raise MalformedArchiveError(f"Expected a .zip file. Received: {path.name}")


def _entry_from_member(archive: ZipFile, member_name: str) -> Entry:
    path = member_name.rstrip("/")
    name = path.rpartition("/")[2]
    if member_name.endswith("/"):
        return Entry(name=name, path=path, content="", is_directory=True)
    raw = archive.read(member_name)
    return Entry(name=name, path=path, content=raw.decode("utf-8", errors="replace"))


def _check_extracted_size(archive: ZipFile, limit: int) -> None:
    total = 0
    for info in archive.infolist():
        if info.is_dir():
            continue
        total += info.file_size
        if total > limit:
            raise ArchiveTooLargeError(
                f"Archive expands to more than {limit} bytes (at {info.filename!r})"
            )


def decode_archive(data: bytes, *, max_extracted_bytes: int | None = None) -> list[Entry]:
    """Decode raw ZIP bytes into a flat list of entries sorted by path.

    File contents are decoded as UTF-8, replacing undecodable bytes. Declared
    uncompressed sizes are checked before any member is read.

    Args:
        data: Raw archive bytes.
        max_extracted_bytes: Cap on the total uncompressed size of all files.
            Defaults to ``CODEZIP_MAX_EXTRACTED_BYTES``.

    Returns:
        Entries for every archive member, ordered by ``path`` ascending.

    Raises:
        ArchiveTooLargeError: If the files would expand past ``max_extracted_bytes``.
        MalformedArchiveError: If the bytes are not a readable ZIP archive.
    """
    limit = max_extracted_bytes or get_max_extracted_bytes()
    try:
        with ZipFile(io.BytesIO(data)) as archive:
            _check_extracted_size(archive, limit)
            entries = [
                _entry_from_member(archive, name)
                for name in archive.namelist()
                if name.rstrip("/")
            ]
    except (BadZipFile, OSError, EOFError, RuntimeError, zlib.error) as exc:
        raise MalformedArchiveError("Archive could not be decoded as a ZIP file") from exc

    entries.sort(key=lambda entry: entry.path)
    logger.debug(
        "Decoded archive with %d entries (%d files)", len(entries), count_files(entries)
    )
    return entries


def decode_archive_file(
    zip_path: Path | str, *, max_extracted_bytes: int | None = None
) -> list[Entry]:
    """Read and decode a ZIP archive from disk.

    Raises:
        MalformedArchiveError: If the path is not a ``.zip`` file or cannot be decoded.
    """
    path = Path(zip_path)
    _ensure_zip_file(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise MalformedArchiveError(f"{path.name} could not be read") from exc
    try:
        return decode_archive(data, max_extracted_bytes=max_extracted_bytes)
    except ArchiveTooLargeError:
        raise
    except MalformedArchiveError as exc:
        raise MalformedArchiveError(f"{path.name} is not a valid ZIP archive") from exc


def count_files(entries: Iterable[Entry]) -> int:
    """Count the non-directory entries."""
    return sum(1 for entry in entries if not entry.is_directory)


def find_entry(entries: Sequence[Entry], path: str) -> Entry | None:
    normalized = path.strip("/")
    for entry in entries:
        if entry.path == normalized:
            return entry
    return None


def build_tree(entries: Iterable[Entry]) -> DirectoryNode:
    """Group entries into a directory tree for browsing.

    Parent directories missing from the archive are created implicitly.
    Children are sorted with directories first, then by name.

    Args:
        entries: Entries produced by :func:`decode_archive`.

    Returns:
        Root DirectoryNode representing the tree structure.
    """
    root = DirectoryNode(name="", path="", children=[])
    nodes: dict[str, DirectoryNode] = {"": root}

    def _get_directory(path: str) -> DirectoryNode:
        if path not in nodes:
            parent_path, _, name = path.rpartition("/")
            parent = _get_directory(parent_path)
            node = DirectoryNode(name=name, path=path, children=[])
            parent.children.append(node)
            nodes[path] = node
        return nodes[path]

    for entry in entries:
        normalized = entry.path.strip("/")
        if not normalized:
            continue
        if entry.is_directory:
            _get_directory(normalized)
            continue

        parent_path, _, file_name = normalized.rpartition("/")
        directory = _get_directory(parent_path)
        directory.children.append(FileNode(name=file_name, path=normalized))

    def _sort_children(directory: DirectoryNode) -> None:
        directory.children.sort(
            key=lambda node: (0 if isinstance(node, DirectoryNode) else 1, node.name)
        )
        for child in directory.children:
            if isinstance(child, DirectoryNode):
                _sort_children(child)

    _sort_children(root)
    return root

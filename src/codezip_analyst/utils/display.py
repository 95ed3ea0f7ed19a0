"""Display and formatting utilities"""

from __future__ import annotations

from codezip_analyst.models.archive import DirectoryNode, Entry, FileNode
from codezip_analyst.services.archive import build_tree, count_files


def print_tree(node: DirectoryNode | FileNode, indent: int = 0) -> None:
    """Recursively print the directory tree structure.

    Args:
        node: Tree node to print (directory or file).
        indent: Current indentation level.
    """
    prefix = "  " * indent
    if isinstance(node, FileNode):
        print(f"{prefix}📄 {node.name}")
        return

    if node.name:
        print(f"{prefix}📁 {node.name}/")

    for child in node.children:
        print_tree(child, indent + 1 if node.name else indent)


def display_archive(filename: str, size_bytes: int, entries: list[Entry]) -> None:
    """Display the decoded archive with formatted output.

    Args:
        filename: Name of the uploaded archive.
        size_bytes: Size of the archive in bytes.
        entries: Entries decoded from the archive.
    """
    print("\n✅ Successfully processed zip archive:")
    print(f"   • Filename: {filename}")
    print(f"   • Size: {format_bytes(size_bytes)}")
    print(f"   • Files found: {count_files(entries)}")

    print("\n📁 File Structure:")
    print("-" * 60)
    print_tree(build_tree(entries))


def format_bytes(size: float) -> str:
    """Format bytes into human-readable string.

    Args:
        size: Size in bytes.

    Returns:
        Formatted string (e.g., "1.5 KB", "2.3 MB").
    """
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"

"""Utility functions and helpers"""

from codezip_analyst.utils.display import display_archive, format_bytes, print_tree

__all__ = [
    "display_archive",
    "format_bytes",
    "print_tree",
]

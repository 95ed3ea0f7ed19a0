"""Services"""

from codezip_analyst.services.analysis import analyze_codebase
from codezip_analyst.services.archive import (
    build_tree,
    count_files,
    decode_archive,
    decode_archive_file,
    find_entry,
)
from codezip_analyst.services.context_selector import build_context, select_context

__all__ = [
    "analyze_codebase",
    "build_context",
    "build_tree",
    "count_files",
    "decode_archive",
    "decode_archive_file",
    "find_entry",
    "select_context",
]

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from codezip_analyst.config import configure_logging, load_context_limits
from codezip_analyst.models import MalformedArchiveError
from codezip_analyst.models.archive import Entry
from codezip_analyst.rendering import (
    PRIVACY_NOTICE,
    render_analysis_markdown,
    render_context_summary,
    render_file_preview,
    user_message_for,
)
from codezip_analyst.services import analyze_codebase, decode_archive_file, find_entry
from codezip_analyst.services.context_selector import select_context
from codezip_analyst.services.llm_providers import LLMError
from codezip_analyst.utils import display_archive

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codezip-analyst",
        description="Browse a ZIP archive of source code and request an AI analysis.",
    )
    parser.add_argument("archive", type=Path, help="Path to the .zip archive")
    parser.add_argument("--show", metavar="PATH", help="Preview a file from the archive")
    parser.add_argument(
        "--analyze", action="store_true", help="Send the archive to the analysis service"
    )
    parser.add_argument(
        "--yes", action="store_true", help="Skip the data-sharing confirmation prompt"
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the analysis result as JSON"
    )
    return parser


def _confirm_sharing() -> bool:
    """Show the privacy notice and ask the user to confirm."""
    print(f"\n⚠️  {PRIVACY_NOTICE}")
    try:
        answer = input("Continue? [y/N] ").strip().lower()
    except EOFError:
        return False
    return answer in {"y", "yes"}


def _show_file(entries: list[Entry], path: str) -> bool:
    entry = find_entry(entries, path)
    if entry is None:
        print(f"\n❌ No such file in archive: {path}")
        return False
    print()
    print(render_file_preview(entry))
    return True


def _run_analysis(entries: list[Entry], *, assume_yes: bool, as_json: bool) -> bool:
    limits = load_context_limits()
    context = select_context(entries, limits)
    if not context.files:
        print("\n❌ No analyzable source files found in the archive.")
        return False

    if not assume_yes and not _confirm_sharing():
        print("\n❌ Analysis cancelled.")
        return False

    print(f"\n🔎 {render_context_summary(context)}")
    print("Running analysis...")
    try:
        result = analyze_codebase(entries, limits=limits)
    except LLMError as exc:
        logger.debug("Analysis failed", exc_info=exc)
        print(f"\n❌ {user_message_for(exc)}")
        return False

    print()
    if as_json:
        print(json.dumps(result.model_dump(by_alias=True), indent=2))
    else:
        print(render_analysis_markdown(result))
    return True


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Run the CLI workflow: decode → display tree → preview → analysis.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    args = build_parser().parse_args(argv)
    zip_path: Path = args.archive

    print(f"📦 Processing: {zip_path.name}")
    print("-" * 60)

    try:
        entries = decode_archive_file(zip_path)
    except MalformedArchiveError as exc:
        logger.debug("Archive decode failed", exc_info=exc)
        print(f"\n❌ Error: {user_message_for(exc)} ({exc})")
        return 1

    display_archive(zip_path.name, zip_path.stat().st_size, entries)

    if args.show and not _show_file(entries, args.show):
        return 1

    if args.analyze and not _run_analysis(entries, assume_yes=args.yes, as_json=args.json):
        return 1

    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the CLI application."""
    configure_logging()
    try:
        return run_cli(argv)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user. Exiting.")
        return 130
    except ValueError as exc:
        print(f"\n❌ Configuration error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

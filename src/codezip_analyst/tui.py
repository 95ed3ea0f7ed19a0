from __future__ import annotations

import sys
from pathlib import Path

from textual import on
from textual.app import App, ComposeResult
from textual.containers import Container, VerticalScroll
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    Markdown,
    Static,
)
from textual.worker import Worker, WorkerState

from codezip_analyst.config import load_context_limits
from codezip_analyst.models.archive import Entry
from codezip_analyst.rendering import (
    PRIVACY_NOTICE,
    render_analysis_markdown,
    render_file_listing,
    render_file_preview,
    user_message_for,
)
from codezip_analyst.services import analyze_codebase, count_files, decode_archive_file


class CodeZipTUI(App[None]):
    """Browse a source archive and run an AI analysis on it."""

    TITLE = "CodeZip Analyst"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "run_analysis", "Run analysis"),
    ]

    CSS = """
Screen {
    layout: vertical;
}

#toolbar {
    height: auto;
    layout: horizontal;
}

#archive-path {
    width: 1fr;
}

#middle {
    height: 1fr;
    layout: horizontal;
}

#file-list {
    width: 40;
    border: round $primary;
}

#output-container {
    width: 1fr;
    border: round $secondary;
}

#notice {
    color: $warning;
    padding: 0 1;
}

#status {
    height: 1;
    padding: 0 1;
}
"""

    def __init__(self, archive_path: Path | None = None) -> None:
        super().__init__()
        self._initial_path = archive_path
        self._entries: list[Entry] = []
        self._worker: Worker | None = None
        self._current_markdown: str = ""
        self._status_message: str = "Ready."

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Input(placeholder="Path to .zip archive", id="archive-path"),
            Button("Open", id="btn-open", variant="default"),
            Button("Run Analysis", id="btn-analyze", variant="primary", disabled=True),
            id="toolbar",
        )
        yield Static(PRIVACY_NOTICE, id="notice")
        yield Container(
            ListView(id="file-list"),
            VerticalScroll(Markdown("", id="output"), id="output-container"),
            id="middle",
        )
        yield Label("Ready.", id="status")
        yield Footer()

    def on_mount(self) -> None:
        if self._initial_path is not None:
            self.query_one("#archive-path", Input).value = str(self._initial_path)
            self._open_archive(self._initial_path)

    @on(Button.Pressed, "#btn-open")
    @on(Input.Submitted, "#archive-path")
    def handle_open(self) -> None:
        raw = self.query_one("#archive-path", Input).value.strip()
        if not raw:
            self._set_status("Enter the path to a .zip archive.")
            return
        self._open_archive(Path(raw).expanduser())

    @on(Button.Pressed, "#btn-analyze")
    def handle_analyze(self) -> None:
        self.action_run_analysis()

    @on(ListView.Selected, "#file-list")
    def handle_file_selected(self, event: ListView.Selected) -> None:
        index = self.query_one("#file-list", ListView).index
        if index is None or index >= len(self._entries):
            return
        entry = self._entries[index]
        if entry.is_directory:
            return
        self._show_markdown(render_file_preview(entry))

    def _set_status(self, message: str) -> None:
        self._status_message = message
        self.query_one("#status", Label).update(message)

    def _show_markdown(self, text: str) -> None:
        self._current_markdown = text
        self.query_one("#output", Markdown).update(text)

    def _busy(self) -> bool:
        return self._worker is not None and self._worker.state in {
            WorkerState.PENDING,
            WorkerState.RUNNING,
        }

    def _open_archive(self, zip_path: Path) -> None:
        if self._busy():
            return
        self._set_status(f"Extracting {zip_path.name}...")
        self.query_one("#btn-analyze", Button).disabled = True

        def work() -> list[Entry]:
            return decode_archive_file(zip_path)

        self._worker = self.run_worker(
            work, name="extract", exclusive=True, thread=True, exit_on_error=False
        )

    def action_run_analysis(self) -> None:
        if self._busy() or not self._entries:
            return
        self.query_one("#btn-analyze", Button).disabled = True
        self._set_status("Analyzing...")
        entries = list(self._entries)

        def work():
            return analyze_codebase(entries, limits=load_context_limits())

        self._worker = self.run_worker(
            work, name="analysis", exclusive=True, thread=True, exit_on_error=False
        )

    def _populate_files(self) -> None:
        file_list = self.query_one("#file-list", ListView)
        file_list.clear()
        for entry in self._entries:
            label = f"{entry.path}/" if entry.is_directory else entry.path
            file_list.append(ListItem(Label(label), disabled=entry.is_directory))

    @on(Worker.StateChanged)
    def worker_state(self, event: Worker.StateChanged) -> None:
        if event.worker is not self._worker:
            return

        analyze_btn = self.query_one("#btn-analyze", Button)

        if event.state == WorkerState.SUCCESS:
            if event.worker.name == "extract":
                self._entries = event.worker.result
                self._populate_files()
                self._show_markdown(render_file_listing(self._entries))
                self._set_status(f"{count_files(self._entries)} files loaded.")
            else:
                self._show_markdown(render_analysis_markdown(event.worker.result))
                self._set_status("Analysis complete.")
            analyze_btn.disabled = not self._entries
            return

        if event.state == WorkerState.ERROR:
            error = event.worker.error
            if event.worker.name == "extract":
                self._entries = []
                self.query_one("#file-list", ListView).clear()
            self._set_status(user_message_for(error) if error else "Something went wrong.")
            analyze_btn.disabled = not self._entries


def main() -> None:
    archive = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    CodeZipTUI(archive).run()

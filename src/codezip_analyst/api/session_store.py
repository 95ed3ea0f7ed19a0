"""In-memory storage for decoded archives during a session."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from codezip_analyst.models.analysis import AnalysisResult
from codezip_analyst.models.archive import Entry


class AnalysisInProgressError(RuntimeError):
    """Raised when an analysis is requested while another one is still running."""


@dataclass(slots=True)
class ArchiveSession:
    """A decoded archive and its latest analysis."""

    id: str
    filename: str
    size_bytes: int
    entries: list[Entry]
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    result: AnalysisResult | None = None
    analyzed_file_count: int = 0
    dropped_count: int = 0
    analyzing: bool = False


class ArchiveSessionStore:
    """Thread-safe registry of archive sessions. Nothing is written to disk."""

    def __init__(self) -> None:
        self._sessions: dict[str, ArchiveSession] = {}
        self._lock = threading.Lock()

    def create(self, filename: str, size_bytes: int, entries: list[Entry]) -> ArchiveSession:
        session = ArchiveSession(
            id=uuid.uuid4().hex,
            filename=filename,
            size_bytes=size_bytes,
            entries=entries,
        )
        with self._lock:
            self._sessions[session.id] = session
        return session

    def get(self, archive_id: str) -> ArchiveSession | None:
        with self._lock:
            return self._sessions.get(archive_id)

    def delete(self, archive_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(archive_id, None) is not None

    def begin_analysis(self, archive_id: str) -> ArchiveSession | None:
        """Mark a session as analyzing.

        Raises:
            AnalysisInProgressError: If an analysis is already running for it.
        """
        with self._lock:
            session = self._sessions.get(archive_id)
            if session is None:
                return None
            if session.analyzing:
                raise AnalysisInProgressError(f"Analysis already running for {archive_id}")
            session.analyzing = True
            return session

    def finish_analysis(
        self,
        archive_id: str,
        result: AnalysisResult | None,
        analyzed_file_count: int = 0,
        dropped_count: int = 0,
    ) -> None:
        """Clear the in-flight flag and store ``result`` when one was produced.

        The file counts are stored with the result so later reads report what
        the analysis actually saw.
        """
        with self._lock:
            session = self._sessions.get(archive_id)
            if session is None:
                return
            session.analyzing = False
            if result is not None:
                session.result = result
                session.analyzed_file_count = analyzed_file_count
                session.dropped_count = dropped_count

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

"""Pydantic schemas for archive API responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from codezip_analyst.models.analysis import AnalysisResult


class EntrySummary(BaseModel):
    """An archive entry without its content."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    path: str
    is_directory: bool


class ArchiveUploadResponse(BaseModel):
    """Response schema for archive upload and lookup endpoints."""

    archive_id: str
    filename: str
    size_bytes: int
    file_count: int
    created_at: datetime
    entries: list[EntrySummary]
    privacy_notice: str = Field(description="Disclosure shown before running an analysis")


class FileContentResponse(BaseModel):
    """Content of a single file for code preview."""

    name: str
    path: str
    content: str


class ContextPreviewResponse(BaseModel):
    """Files that would be sent to the analysis service."""

    selected_paths: list[str]
    eligible_count: int
    dropped_count: int
    max_files: int
    max_chars_per_file: int


class AnalysisResponse(BaseModel):
    """Analysis report for an archive."""

    archive_id: str
    analyzed_file_count: int
    dropped_count: int
    result: AnalysisResult

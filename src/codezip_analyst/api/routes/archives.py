"""Archive upload, browsing and analysis routes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status

from codezip_analyst.api.dependencies import (
    get_context_limits,
    get_llm_service,
    get_session_store,
)
from codezip_analyst.api.schemas.archives import (
    AnalysisResponse,
    ArchiveUploadResponse,
    ContextPreviewResponse,
    EntrySummary,
    FileContentResponse,
)
from codezip_analyst.api.session_store import (
    AnalysisInProgressError,
    ArchiveSession,
    ArchiveSessionStore,
)
from codezip_analyst.config import get_max_upload_bytes
from codezip_analyst.models.analysis import ContextLimits
from codezip_analyst.models.archive import ArchiveTooLargeError, MalformedArchiveError
from codezip_analyst.rendering import PRIVACY_NOTICE, user_message_for
from codezip_analyst.services.analysis import analyze_codebase
from codezip_analyst.services.archive import count_files, decode_archive, find_entry
from codezip_analyst.services.context_selector import select_context
from codezip_analyst.services.llm_providers import (
    ResponseContractViolationError,
    ServiceUnavailableError,
)
from codezip_analyst.services.llm_service import LLMService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/archives", tags=["archives"])

StoreDep = Annotated[ArchiveSessionStore, Depends(get_session_store)]


def _get_session_or_404(store: ArchiveSessionStore, archive_id: str) -> ArchiveSession:
    session = store.get(archive_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Archive not found")
    return session


def _session_to_response(session: ArchiveSession) -> ArchiveUploadResponse:
    return ArchiveUploadResponse(
        archive_id=session.id,
        filename=session.filename,
        size_bytes=session.size_bytes,
        file_count=count_files(session.entries),
        created_at=session.created_at,
        entries=[EntrySummary.model_validate(entry) for entry in session.entries],
        privacy_notice=PRIVACY_NOTICE,
    )


@router.post(
    "",
    response_model=ArchiveUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a source archive",
    description="Upload a ZIP file and decode its entries for browsing and analysis.",
    responses={
        400: {"description": "Invalid ZIP file"},
        413: {"description": "Archive exceeds the upload or extracted size limit"},
    },
)
async def upload_archive(
    file: Annotated[UploadFile, File(description="ZIP archive containing source files")],
    store: StoreDep,
) -> ArchiveUploadResponse:
    filename = Path(file.filename or "upload.zip").name
    if not filename.lower().endswith(".zip"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please upload a valid ZIP file.",
        )

    max_bytes = get_max_upload_bytes()
    chunk_size = 8192  # 8KB chunks
    buffer = bytearray()
    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"Archive exceeds the {max_bytes} byte upload limit.",
            )

    try:
        entries = decode_archive(bytes(buffer))
    except ArchiveTooLargeError as exc:
        logger.info("Rejected upload %s: %s", filename, exc)
        raise HTTPException(status_code=413, detail=user_message_for(exc)) from exc
    except MalformedArchiveError as exc:
        logger.info("Rejected upload %s: %s", filename, exc.__cause__ or exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=user_message_for(exc),
        ) from exc

    session = store.create(filename, len(buffer), entries)
    logger.info("Stored archive %s (%s, %d entries)", session.id, filename, len(entries))
    return _session_to_response(session)


@router.get("/{archive_id}", response_model=ArchiveUploadResponse)
def get_archive(archive_id: str, store: StoreDep) -> ArchiveUploadResponse:
    return _session_to_response(_get_session_or_404(store, archive_id))


@router.delete("/{archive_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_archive(archive_id: str, store: StoreDep) -> Response:
    if not store.delete(archive_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Archive not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{archive_id}/files", response_model=FileContentResponse)
def get_file(
    archive_id: str,
    store: StoreDep,
    path: Annotated[str, Query(description="Archive-relative file path")],
) -> FileContentResponse:
    session = _get_session_or_404(store, archive_id)
    entry = find_entry(session.entries, path)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    if entry.is_directory:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Path refers to a directory",
        )
    return FileContentResponse(name=entry.name, path=entry.path, content=entry.content)


@router.get("/{archive_id}/context", response_model=ContextPreviewResponse)
def preview_context(
    archive_id: str,
    store: StoreDep,
    limits: Annotated[ContextLimits, Depends(get_context_limits)],
) -> ContextPreviewResponse:
    """Show which files an analysis would send, without contacting the service."""
    session = _get_session_or_404(store, archive_id)
    context = select_context(session.entries, limits)
    return ContextPreviewResponse(
        selected_paths=context.paths,
        eligible_count=context.eligible_count,
        dropped_count=context.dropped_count,
        max_files=limits.max_files,
        max_chars_per_file=limits.max_chars_per_file,
    )


@router.post(
    "/{archive_id}/analysis",
    response_model=AnalysisResponse,
    summary="Analyze an archive",
    description=(
        "Send the selected files to the analysis service and return its report. "
        "File paths and contents leave this server."
    ),
    responses={
        400: {"description": "Archive contains no entries"},
        404: {"description": "Archive not found"},
        409: {"description": "An analysis is already running for this archive"},
        502: {"description": "Analysis service returned a malformed report"},
        503: {"description": "Analysis service unavailable"},
    },
)
def run_analysis(
    archive_id: str,
    store: StoreDep,
    service: Annotated[LLMService | None, Depends(get_llm_service)],
    limits: Annotated[ContextLimits, Depends(get_context_limits)],
) -> AnalysisResponse:
    _get_session_or_404(store, archive_id)
    try:
        session = store.begin_analysis(archive_id)
    except AnalysisInProgressError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An analysis is already running for this archive.",
        ) from exc
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Archive not found")

    result = None
    context = None
    try:
        if not session.entries:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Archive contains no entries to analyze.",
            )
        context = select_context(session.entries, limits)
        try:
            result = analyze_codebase(session.entries, service=service, limits=limits)
        except ResponseContractViolationError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=user_message_for(exc),
            ) from exc
        except ServiceUnavailableError as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=user_message_for(exc),
            ) from exc
    finally:
        counts = (len(context.files), context.dropped_count) if context else (0, 0)
        store.finish_analysis(archive_id, result, *counts)

    return AnalysisResponse(
        archive_id=archive_id,
        analyzed_file_count=len(context.files),
        dropped_count=context.dropped_count,
        result=result,
    )


@router.get("/{archive_id}/analysis", response_model=AnalysisResponse)
def get_analysis(archive_id: str, store: StoreDep) -> AnalysisResponse:
    """Return the stored report with the file counts it was produced from."""
    session = _get_session_or_404(store, archive_id)
    if session.result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No analysis has been run for this archive",
        )
    return AnalysisResponse(
        archive_id=archive_id,
        analyzed_file_count=session.analyzed_file_count,
        dropped_count=session.dropped_count,
        result=session.result,
    )

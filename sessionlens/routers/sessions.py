"""API router for the session list, session detail, and snapshot files."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from sessionlens.models import (
    SessionDetailResponse,
    SessionListResponse,
    SnapshotFileResponse,
)
from sessionlens.services import session_query
from sessionlens.services.session_directory import collect_sessions

sessions_router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@sessions_router.get("", response_model=SessionListResponse)
def list_sessions():
    """List sessions from every source, newest first."""
    try:
        return SessionListResponse(sessions=collect_sessions())
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@sessions_router.get(
    "/{session_id}/snapshots/{backup_file_name}",
    response_model=SnapshotFileResponse,
    response_model_exclude_none=True,
)
def get_snapshot_file(session_id: str, backup_file_name: str):
    try:
        return session_query.read_snapshot_file(session_id, backup_file_name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@sessions_router.get("/{source}/{session_id}", response_model=SessionDetailResponse)
def get_session_detail(
    source: str,
    session_id: str,
    locator: str = Query(..., description="Source-specific session locator"),
):
    try:
        messages = session_query.load_session_detail(session_id, locator, source)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return SessionDetailResponse(messages=messages)

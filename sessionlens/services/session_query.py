"""Query façade: the operations the display layer calls.

The ``load_*``/``read_*`` functions raise ``ValueError`` for unsafe input
and ``FileNotFoundError`` for missing files. The public façade functions
(``list_sessions``, ``get_session_detail``, ``get_snapshot_file``) never
raise; they return an ``ErrorResponse`` instead.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, TypeVar

from pydantic import BaseModel

from sessionlens import config
from sessionlens.models import (
    ErrorResponse,
    Message,
    SessionDetailResponse,
    SessionListResponse,
    SnapshotFileResponse,
)
from sessionlens.observability import record_ingestion, start_span
from sessionlens.parsers.platforms import registry
from sessionlens.parsers.platforms.claude_code import parser as claude_code_parser
from sessionlens.path_utils import resolve_under, validate_path_segment
from sessionlens.services.session_directory import collect_sessions

logger = logging.getLogger("sessionlens.query")

T = TypeVar("T", bound=BaseModel)


def load_session_detail(session_id: str, locator: str, source: str) -> list[Message]:
    registry.get_platform(source)
    path = registry.resolve_session_path(source, session_id, locator)
    if not path.is_file():
        raise FileNotFoundError("Session file not found")

    started = time.monotonic()
    with start_span("sessions.detail", {"source": source, "session_id": session_id}):
        messages = registry.parse_session_file(source, path)
    record_ingestion("session_detail", "success", (time.monotonic() - started) * 1000, source=source)
    return messages


def resolve_snapshot_path(session_id: str, backup_file_name: str, claude_dir: Path | None = None) -> Path:
    validate_path_segment(session_id, "file-history request")
    validate_path_segment(backup_file_name, "file-history request")
    return resolve_under(claude_code_parser.snapshot_root(claude_dir), session_id, backup_file_name)


def read_snapshot_file(session_id: str, backup_file_name: str) -> SnapshotFileResponse:
    path = resolve_snapshot_path(session_id, backup_file_name)
    if not path.exists():
        raise FileNotFoundError("Snapshot file not found")
    if not path.is_file():
        raise FileNotFoundError("Snapshot path is not a file")

    max_bytes = config.SNAPSHOT_MAX_BYTES
    size = path.stat().st_size
    with start_span("snapshots.read", {"session_id": session_id, "bytes": size}):
        with path.open("rb") as handle:
            if size > max_bytes:
                data = handle.read(max_bytes)
                return SnapshotFileResponse(
                    content=data.decode("utf-8", errors="replace"),
                    truncated=True,
                    originalBytes=size,
                )
            data = handle.read()
    return SnapshotFileResponse(content=data.decode("utf-8", errors="replace"))


def _guarded(operation: str, call: Callable[[], T]) -> T | ErrorResponse:
    try:
        return call()
    except (ValueError, FileNotFoundError) as exc:
        logger.info("%s rejected: %s", operation, exc)
        return ErrorResponse(error=str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.exception("%s failed", operation)
        return ErrorResponse(error=str(exc) or exc.__class__.__name__)


def list_sessions() -> SessionListResponse | ErrorResponse:
    def _run() -> SessionListResponse:
        with start_span("sessions.list"):
            return SessionListResponse(sessions=collect_sessions())

    return _guarded("list_sessions", _run)


def get_session_detail(session_id: str, locator: str, source: str) -> SessionDetailResponse | ErrorResponse:
    return _guarded(
        "get_session_detail",
        lambda: SessionDetailResponse(messages=load_session_detail(session_id, locator, source)),
    )


def get_snapshot_file(session_id: str, backup_file_name: str) -> SnapshotFileResponse | ErrorResponse:
    return _guarded("get_snapshot_file", lambda: read_snapshot_file(session_id, backup_file_name))

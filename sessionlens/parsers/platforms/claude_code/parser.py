"""Claude Code sessions: ``<claude dir>/projects/<project>/<sessionId>.jsonl``.

Each project directory name encodes the project path with ``-`` standing
in for the path separator. Snapshot records (``file-history-snapshot``)
are interleaved with conversation records and joined back onto their
message by ``messageId``.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator

from sessionlens import config
from sessionlens.date_utils import to_epoch_millis
from sessionlens.models import Message, SessionSummary, SnapshotRef, ToolUse, TrackedFileBackup
from sessionlens.parsers.content import extract_text_content
from sessionlens.parsers.jsonl import load_records
from sessionlens.parsers.platforms.common import (
    coerce_timestamp,
    drop_empty_messages,
    optional_str,
    scan_files,
)
from sessionlens.parsers.tool_calls import normalize_tool_use
from sessionlens.path_utils import resolve_under, validate_path_segment

logger = logging.getLogger("sessionlens.parsers")

SOURCE = "claude"
SESSION_SUFFIX = ".jsonl"
# Agent/sidechain transcripts written alongside real sessions.
_RESERVED_PREFIX = "agent-"
_CONVERSATION_TYPES = {"user", "assistant"}
_SNAPSHOT_TYPE = "file-history-snapshot"


def source_root(claude_dir: Path | None = None) -> Path:
    return (claude_dir or config.CLAUDE_DIR) / "projects"


def snapshot_root(claude_dir: Path | None = None) -> Path:
    return (claude_dir or config.CLAUDE_DIR) / "file-history"


def decode_project_name(dir_name: str) -> str:
    """``-home-me-app`` -> ``home/me/app``."""
    return dir_name.replace("-", "/")[1:]


def discover_session_files(root: Path) -> Iterator[tuple[Path, str]]:
    """Yield ``(session_path, project_dir_name)`` for every session under *root*."""
    if not root.is_dir():
        return
    try:
        project_dirs = sorted(root.iterdir())
    except OSError:
        logger.warning("Unable to list Claude projects directory: %s", root, exc_info=True)
        return

    for project_dir in project_dirs:
        if not project_dir.is_dir():
            continue
        try:
            entries = sorted(project_dir.iterdir())
        except OSError:
            logger.warning("Unable to list Claude project directory: %s", project_dir, exc_info=True)
            continue
        for entry in entries:
            if entry.suffix != SESSION_SUFFIX or entry.name.startswith(_RESERVED_PREFIX):
                continue
            if entry.is_file():
                yield entry, project_dir.name


def summarize_session_file(path: Path, project_dir: str) -> SessionSummary | None:
    """Derive list metadata for one session; ``None`` when it has no user prompt."""
    records = load_records(path, max_bytes=config.SESSION_MAX_BYTES)
    first_user = next(
        (r for r in records if r.get("type") == "user" and r.get("message")),
        None,
    )
    if first_user is None:
        return None

    display = extract_text_content(first_user.get("message"))
    return SessionSummary(
        source=SOURCE,
        id=path.stem,
        timestamp=to_epoch_millis(first_user.get("timestamp")),
        display=display[: config.PREVIEW_CHARS],
        project=decode_project_name(project_dir),
        locator=project_dir,
        messageCount=sum(1 for r in records if r.get("type") in _CONVERSATION_TYPES),
    )


def scan_sessions(claude_dir: Path | None = None) -> list[SessionSummary]:
    root = source_root(claude_dir)
    return scan_files(SOURCE, discover_session_files(root), summarize_session_file)


def _parse_tracked_files(raw: Any) -> dict[str, TrackedFileBackup]:
    tracked: dict[str, TrackedFileBackup] = {}
    if not isinstance(raw, dict):
        return tracked
    for file_path, meta in raw.items():
        if not isinstance(meta, dict):
            continue
        try:
            version = int(meta.get("version") or 0)
        except (TypeError, ValueError):
            version = 0
        tracked[str(file_path)] = TrackedFileBackup(
            **{
                **meta,
                "version": version,
                "backupFileName": optional_str(meta.get("backupFileName")),
                "backupTime": coerce_timestamp(meta.get("backupTime")),
            }
        )
    return tracked


def index_snapshots(records: list[dict[str, Any]]) -> dict[str, list[SnapshotRef]]:
    """Group snapshot records by the message they belong to, keeping every version."""
    index: dict[str, list[SnapshotRef]] = {}
    for record in records:
        if record.get("type") != _SNAPSHOT_TYPE:
            continue
        message_id = record.get("messageId")
        snapshot = record.get("snapshot")
        if not isinstance(message_id, str) or not message_id or not isinstance(snapshot, dict):
            continue
        index.setdefault(message_id, []).append(
            SnapshotRef(
                messageId=message_id,
                timestamp=coerce_timestamp(snapshot.get("timestamp")),
                isUpdate=bool(record.get("isSnapshotUpdate")),
                trackedFiles=_parse_tracked_files(snapshot.get("trackedFileBackups")),
            )
        )
    return index


def _extract_tool_uses(message: dict[str, Any]) -> list[ToolUse]:
    content = message.get("content")
    if not isinstance(content, list):
        return []
    tool_uses: list[ToolUse] = []
    for block in content:
        if not isinstance(block, dict) or block.get("type") != "tool_use":
            continue
        payload = block.get("input")
        if payload is None:
            payload = block.get("arguments")
        if payload is None:
            payload = block.get("parameters")
        fallback = block.get("input") if isinstance(block.get("input"), str) else ""
        tool_uses.append(normalize_tool_use(block.get("name"), payload, fallback, block.get("id")))
    return tool_uses


def build_messages(records: list[dict[str, Any]]) -> list[Message]:
    snapshots = index_snapshots(records)
    messages: list[Message] = []
    for record in records:
        role = record.get("type")
        message = record.get("message")
        if role not in _CONVERSATION_TYPES or not message:
            continue
        uuid = optional_str(record.get("uuid"))
        messages.append(
            Message(
                role=role,
                content=extract_text_content(message),
                timestamp=coerce_timestamp(record.get("timestamp")),
                uuid=uuid,
                toolUses=_extract_tool_uses(message) if role == "assistant" and isinstance(message, dict) else [],
                fileSnapshots=list(snapshots.get(uuid, [])) if uuid else [],
            )
        )
    return drop_empty_messages(messages)


def resolve_session_path(session_id: str, locator: str, claude_dir: Path | None = None) -> Path:
    """Validate *locator*/*session_id* and return the session file path under the projects root."""
    validate_path_segment(locator, "Claude session locator")
    validate_path_segment(session_id, "Claude session id")
    return resolve_under(source_root(claude_dir), locator, f"{session_id}{SESSION_SUFFIX}")


def parse_session_file(path: Path) -> list[Message]:
    return build_messages(load_records(path, max_bytes=config.SESSION_MAX_BYTES))
